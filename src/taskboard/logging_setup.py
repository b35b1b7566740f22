# src/taskboard/logging_setup.py

from __future__ import annotations

import logging
import sys
from collections.abc import Mapping
from pathlib import Path

LOG_FILE_NAME = "taskboard.log"

# Console thresholds for chatty loggers; the file log always gets everything.
CONSOLE_THRESHOLDS: Mapping[str, int] = {
    # One DEBUG line per HTTP call, and the dashboard prints its own errors.
    "taskboard.tasks.task_store": logging.WARNING,
    "taskboard.sync.optimistic": logging.ERROR,
    "py.warnings": logging.ERROR,
}


def resolve_level(name: str | int | None, default: int = logging.INFO) -> int:
    """Map "debug" / "INFO" / 10 to a logging level; unknown names give default."""
    if isinstance(name, int):
        return name
    level = logging.getLevelName(str(name or "").strip().upper())
    return level if isinstance(level, int) else default


class _ConsoleNoiseFilter(logging.Filter):
    """
    Keep the console readable while the user types commands.

    taskboard.* records pass unless a more specific threshold applies;
    anything else (httpx, httpcore, asyncio) only shows at ERROR+.
    """

    def __init__(self, thresholds: Mapping[str, int] = CONSOLE_THRESHOLDS) -> None:
        super().__init__()
        # Longest prefix first so "a.b.c" beats "a.b".
        self._thresholds = sorted(thresholds.items(), key=lambda kv: -len(kv[0]))

    def filter(self, record: logging.LogRecord) -> bool:
        name = record.name
        for prefix, level in self._thresholds:
            if name == prefix or name.startswith(prefix + "."):
                return record.levelno >= level
        if name == "taskboard" or name.startswith("taskboard."):
            return True
        return record.levelno >= logging.ERROR


def setup_logging(
    *,
    log_dir: str | Path = ".local/taskboard",
    console_level: str | int = logging.INFO,
    file_level: str | int = logging.DEBUG,
) -> Path:
    """
    Console handler (filtered, short format: the dashboard prints timestamps
    itself) plus a full DEBUG log file under log_dir. Returns the log file path.

    Call once, before the first log line. Handlers installed by an earlier call
    are replaced, so calling it again does not duplicate output.
    """
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / LOG_FILE_NAME

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    for h in list(root.handlers):
        root.removeHandler(h)
        h.close()

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(resolve_level(console_level))
    console.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))
    console.addFilter(_ConsoleNoiseFilter())
    root.addHandler(console)

    file_handler = logging.FileHandler(str(log_file), encoding="utf-8")
    file_handler.setLevel(resolve_level(file_level, logging.DEBUG))
    file_handler.setFormatter(
        logging.Formatter(
            fmt="%(asctime)s.%(msecs)03d %(levelname)s [%(threadName)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )
    root.addHandler(file_handler)

    logging.captureWarnings(True)

    # httpx logs every request at INFO.
    for noisy in ("httpx", "httpcore"):
        logging.getLogger(noisy).setLevel(logging.WARNING)

    return log_file
