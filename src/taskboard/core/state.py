# src/taskboard/core/state.py

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Coroutine
from dataclasses import dataclass, field
from typing import Any

from ..sync.engine import TaskSyncEngine
from .ports import TaskRepo

logger = logging.getLogger(__name__)


@dataclass
class AppState:
    # Store Settings on the state for easy access in other modules later.
    settings: Any

    # FileSessionProvider in the app, StaticSessionProvider in tests.
    session: Any
    store: TaskRepo
    engine: TaskSyncEngine

    # True when no hosted store is configured and the in-memory store is used.
    offline: bool = False

    background: set[asyncio.Task[Any]] = field(default_factory=set)

    def spawn(self, coro: Coroutine[Any, Any, Any]) -> asyncio.Task[Any]:
        """
        Run an engine operation in the background on the running loop.

        A reference is kept until the task finishes so it is not garbage-collected
        mid-flight; unexpected crashes are logged.
        """
        task = asyncio.get_running_loop().create_task(coro)
        self.background.add(task)
        task.add_done_callback(self._on_background_done)
        return task

    def _on_background_done(self, task: asyncio.Task[Any]) -> None:
        self.background.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Background operation crashed.", exc_info=exc)

    def handle_identity_change(self, user_id: str | None) -> None:
        """Identity changed: drop the old dashboard state and load the new user's tasks."""
        self.engine.reset()
        if user_id:
            self.spawn(self.engine.load(user_id))

    async def drain(self, timeout: float = 10.0) -> None:
        """Wait for in-flight operations (they are not cancellable once issued)."""
        pending = [t for t in self.background if not t.done()]
        if not pending:
            return
        logger.info("Waiting for %d pending operation(s)...", len(pending))
        _done, still_pending = await asyncio.wait(pending, timeout=timeout)
        for t in still_pending:
            t.cancel()
        if still_pending:
            logger.warning("Cancelled %d operation(s) still pending at shutdown.", len(still_pending))

    async def aclose(self) -> None:
        await self.drain()
        with contextlib.suppress(Exception):
            await self.store.aclose()
