# src/taskboard/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds AppState, starts the engine's event loop in a
background thread, then runs the console dashboard in the main thread.
"""

from __future__ import annotations

import logging

from ..cli.bootstrap import create_initial_state
from ..config import get_settings
from ..connectors.background_loop import start_background_loop
from ..connectors.console_connector import run_console_loop
from ..logging_setup import setup_logging

logger = logging.getLogger(__name__)


def main() -> None:
    settings = get_settings()

    log_file = setup_logging(
        log_dir=getattr(settings, "data_dir", ".local/taskboard"),
        console_level=getattr(settings, "log_level", "INFO"),
    )

    logger.info("Starting %s (full log: %s)...", getattr(settings, "app_name", "taskboard"), log_file)

    state = create_initial_state(settings=settings)

    runner = start_background_loop()
    if runner is None:
        raise SystemExit(1)

    try:
        run_console_loop(state, runner)
    finally:
        try:
            runner.run(state.aclose(), timeout=15.0)
        except Exception:
            logger.debug("Shutdown did not complete cleanly.", exc_info=True)
        runner.stop()
        runner.join(timeout=5.0)
        logger.info("Bye.")


if __name__ == "__main__":
    main()
