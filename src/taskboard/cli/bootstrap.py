# src/taskboard/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- wires the session provider, task store and sync engine into AppState,
- hooks identity changes up to the engine (reset + fresh load).
"""

from __future__ import annotations

import logging

from ..config import get_settings
from ..core.ports import TaskRepo
from ..core.state import AppState
from ..session.provider import FileSessionProvider
from ..sync.engine import TaskSyncEngine
from ..tasks.offline_store import OfflineTaskStore
from ..tasks.task_store import RemoteTaskStore

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.session_path.parent.mkdir(parents=True, exist_ok=True)


def create_initial_state(*, settings=None) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings injectable makes the app easier to test and avoids hidden global config reads.
    If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)

    session = FileSessionProvider(
        settings.session_path,
        user_id=settings.user_id,
        access_token=settings.access_token,
        display_name=settings.display_name,
    )

    store: TaskRepo
    offline = False
    try:
        # One client for the whole run: the session token is fetched per request.
        store = RemoteTaskStore(
            settings.store_url,
            settings.store_key,
            session.current_access_token,
            table=settings.tasks_table,
            connect_timeout=settings.connect_timeout_seconds,
            read_timeout=settings.read_timeout_seconds,
        )
    except Exception:
        # Fallback for demos / local runs without a hosted database.
        logger.warning("Task store is not configured; using the in-memory demo store.")
        store = OfflineTaskStore(session.current_user_id)
        offline = True

    engine = TaskSyncEngine(store, error_display_seconds=settings.error_display_seconds)

    state = AppState(
        settings=settings,
        session=session,
        store=store,
        engine=engine,
        offline=offline,
    )
    session.add_identity_listener(state.handle_identity_change)
    return state
