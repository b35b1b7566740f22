# tests/conftest.py

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest

from taskboard.core.state import AppState
from taskboard.session.provider import StaticSessionProvider
from taskboard.sync.engine import TaskSyncEngine
from taskboard.tasks.offline_store import OfflineTaskStore

from .fakes import ScriptedTaskStore


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with AppState and the CLI modules.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated and deterministic.
    """
    return SimpleNamespace(
        app_name="taskboard-test",
        log_level="DEBUG",
        store_url="",
        store_key="",
        tasks_table="tasks",
        connect_timeout_seconds=1.0,
        read_timeout_seconds=1.0,
        error_display_seconds=5.0,
        user_id=None,
        access_token=None,
        display_name=None,
        data_dir=tmp_path,
        session_path=tmp_path / "session.json",
    )


@pytest.fixture()
def session() -> StaticSessionProvider:
    return StaticSessionProvider()


@pytest.fixture()
def state(settings: SimpleNamespace, session: StaticSessionProvider) -> AppState:
    """
    AppState wired like bootstrap does it, on the in-memory store.

    NOTE: We keep the real OfflineTaskStore here: it resolves immediately,
    which is what command-level tests want.
    """
    store = OfflineTaskStore(session.current_user_id)
    app_state = AppState(
        settings=settings,
        session=session,
        store=store,
        engine=TaskSyncEngine(store, error_display_seconds=settings.error_display_seconds),
        offline=True,
    )
    session.add_identity_listener(app_state.handle_identity_change)
    return app_state


@pytest.fixture()
def store() -> ScriptedTaskStore:
    return ScriptedTaskStore()


@pytest.fixture()
def engine(store: ScriptedTaskStore) -> TaskSyncEngine:
    return TaskSyncEngine(store)
