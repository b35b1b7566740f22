# src/taskboard/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app (normal "settings layer").
- No secrets required at import time.
- An empty store URL is valid: the app then runs against the offline store.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

ENV_PREFIX = "TASKBOARD"


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _load_dotenv_if_available() -> None:
    """Load .env locally if python-dotenv is installed. Safe no-op otherwise."""
    try:
        from dotenv import load_dotenv  # type: ignore
    except Exception:
        return
    load_dotenv(override=False)


_load_dotenv_if_available()


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _first_env(*names: str, default: str | None = None) -> str | None:
    for n in names:
        v = os.getenv(n)
        if v is not None and v.strip() != "":
            return v
    return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str

    # ---- Hosted task table (PostgREST) ----
    store_url: str
    store_key: str
    tasks_table: str
    connect_timeout_seconds: float
    read_timeout_seconds: float

    # ---- Dashboard ----
    error_display_seconds: float

    # ---- Initial session (optional) ----
    user_id: str | None
    access_token: str | None
    display_name: str | None

    # ---- Local data paths (ignored by git) ----
    data_dir: Path
    session_path: Path

    @property
    def store_configured(self) -> bool:
        return bool(self.store_url.strip())

    @staticmethod
    def from_env() -> "Settings":
        app_name = _env(_k("APP_NAME"), "taskboard").strip() or "taskboard"
        log_level = _env(_k("LOG_LEVEL"), "INFO")

        store_url = (_first_env(_k("STORE_URL"), "SUPABASE_URL", default="") or "").strip()
        store_key = (_first_env(_k("STORE_KEY"), "SUPABASE_KEY", default="") or "").strip()
        tasks_table = _env(_k("TASKS_TABLE"), "tasks").strip() or "tasks"

        connect_timeout = _env_float(_k("CONNECT_TIMEOUT_SECONDS"), 5.0)
        read_timeout = _env_float(_k("READ_TIMEOUT_SECONDS"), 15.0)
        error_display = _env_float(_k("ERROR_DISPLAY_SECONDS"), 5.0)

        user_id = _first_env(_k("USER_ID"), default=None)
        access_token = _first_env(_k("ACCESS_TOKEN"), default=None)
        display_name = _first_env(_k("DISPLAY_NAME"), default=None)

        data_dir = _env_path(_k("DATA_DIR"), Path(".local/taskboard"))
        session_path = _env_path(_k("SESSION_PATH"), data_dir / "session.json")

        return Settings(
            app_name=app_name,
            log_level=log_level,
            store_url=store_url.rstrip("/"),
            store_key=store_key,
            tasks_table=tasks_table,
            connect_timeout_seconds=max(0.5, connect_timeout),
            read_timeout_seconds=max(connect_timeout, read_timeout),
            error_display_seconds=max(0.0, error_display),
            user_id=user_id.strip() if user_id else None,
            access_token=access_token.strip() if access_token else None,
            display_name=display_name.strip() if display_name else None,
            data_dir=data_dir,
            session_path=session_path,
        )


SETTINGS = Settings.from_env()


def get_settings() -> Settings:
    return SETTINGS
