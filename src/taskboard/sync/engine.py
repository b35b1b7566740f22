# src/taskboard/sync/engine.py

from __future__ import annotations

"""
Optimistic task sync engine.

Holds the one ordered task list of a dashboard session (newest first) and keeps it
consistent with the remote store:
- load() replaces the list, guarded by a request generation so a superseded
  response never overwrites fresher state,
- create/toggle/remove change the list immediately, call the store, then
  reconcile or roll back depending on the outcome.

Remote failures are never raised to the caller: they end up in error_message.
"""

import logging
from collections.abc import Callable
from dataclasses import replace

from ..core.ports import StateListener, TaskRepo
from ..tasks.task_models import Task
from .notices import ErrorNotice
from .optimistic import run_optimistic

logger = logging.getLogger(__name__)

LOAD_FAILED = "Failed to load tasks. Please try again."
CREATE_FAILED = "Failed to create task. Please try again."
UPDATE_FAILED = "Failed to update task. Please try again."
DELETE_FAILED = "Failed to delete task. Please try again."


class TaskSyncEngine:
    def __init__(self, store: TaskRepo, *, error_display_seconds: float = 5.0) -> None:
        self._store = store
        self._tasks: list[Task] = []
        self._generation = 0
        # Bumped only by reset(); mutations started in an older session leave state alone.
        self._session = 0
        self._listeners: list[StateListener] = []
        self._notice = ErrorNotice(error_display_seconds, on_change=self._notify)

        self.loading = False
        # Text of the "new task" input; cleared on submit, restored when a create fails.
        self.draft = ""

    # ---- observable state ----

    @property
    def tasks(self) -> tuple[Task, ...]:
        return tuple(self._tasks)

    @property
    def error_message(self) -> str | None:
        return self._notice.message

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Register a listener called after every state change. Returns an unsubscribe callable."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def find(self, task_id: str) -> Task | None:
        idx = self._index_of(task_id)
        return None if idx is None else self._tasks[idx]

    def set_draft(self, text: str) -> None:
        self.draft = text
        self._notify()

    def dismiss_error(self) -> None:
        self._notice.dismiss()

    def reset(self) -> None:
        """
        Destroy session state (unmount / identity change).

        Bumping the generation discards any load still in flight; bumping the
        session stops pending create/toggle/remove results from touching the new one.
        """
        self._generation += 1
        self._session += 1
        self._tasks = []
        self.loading = False
        self.draft = ""
        self._notice.dismiss()
        self._notify()

    # ---- operations ----

    async def load(self, user_id: str | None) -> bool:
        if not user_id:
            return False

        self._generation += 1
        generation = self._generation
        self.loading = True
        self._notify()

        try:
            tasks = await self._store.list_tasks()
        except Exception as e:
            logger.warning("Loading tasks failed for user=%s: %s", user_id, e, exc_info=True)
            if generation == self._generation:
                self.loading = False
                self._notice.show(LOAD_FAILED)
            return False

        if generation != self._generation:
            logger.debug(
                "Discarding stale task list (generation %s, latest %s)", generation, self._generation
            )
            return False

        # Creates still in flight stay on top; their own result settles them.
        in_flight = [t for t in self._tasks if t.pending]
        self._tasks = in_flight + [t for t in tasks if not t.pending]
        self.loading = False
        logger.info("Loaded %d tasks for user=%s", len(self._tasks), user_id)
        self._notify()
        return True

    async def create(self, name: str | None = None) -> bool:
        """Create a task from name (or from the current draft when name is None)."""
        text = (self.draft if name is None else name).strip()
        if not text:
            logger.debug("Ignoring empty task name")
            return False

        session = self._session

        def apply() -> Task:
            placeholder = Task.placeholder(text)
            self._tasks.insert(0, placeholder)
            self.draft = ""
            self._notify()
            return placeholder

        def reconcile(placeholder: Task, confirmed: Task) -> None:
            idx = self._index_of(placeholder.id)
            if session != self._session or idx is None:
                logger.debug("Created task %s no longer on screen; not reconciling", confirmed.id)
                return
            if self._index_of(confirmed.id) is not None:
                # Already present (e.g. a reload raced ahead); keep ids unique.
                del self._tasks[idx]
            else:
                self._tasks[idx] = confirmed
            self._notify()

        def rollback(placeholder: Task, _exc: Exception) -> None:
            if session != self._session:
                return
            idx = self._index_of(placeholder.id)
            if idx is not None:
                del self._tasks[idx]
            self.draft = text
            self._notice.show(CREATE_FAILED)

        return await run_optimistic(
            label=f"create task {text!r}",
            apply=apply,
            remote=lambda: self._store.insert_task(text),
            rollback=rollback,
            reconcile=reconcile,
        )

    async def toggle(self, task_id: str) -> bool:
        task = self.find(task_id)
        if task is None:
            return False
        if task.pending:
            logger.debug("Task %s is not confirmed yet; toggle ignored", task_id)
            return False

        session = self._session
        new_value = not task.completed

        def apply() -> bool:
            previous = task.completed
            self._set_completed(task_id, new_value)
            return previous

        def rollback(previous: bool, _exc: Exception) -> None:
            if session != self._session:
                return
            self._set_completed(task_id, previous)
            self._notice.show(UPDATE_FAILED)

        def reconcile(_previous: bool, _result: object) -> None:
            # A reload that raced this update may have brought back the old value.
            if session == self._session:
                self._set_completed(task_id, new_value)

        return await run_optimistic(
            label=f"toggle task {task_id}",
            apply=apply,
            remote=lambda: self._store.update_completed(task_id, new_value),
            rollback=rollback,
            reconcile=reconcile,
        )

    async def remove(self, task_id: str) -> bool:
        idx = self._index_of(task_id)
        if idx is None:
            return False
        if self._tasks[idx].pending:
            logger.debug("Task %s is not confirmed yet; remove ignored", task_id)
            return False

        session = self._session

        def apply() -> tuple[int, Task]:
            removed = self._tasks.pop(idx)
            self._notify()
            return idx, removed

        def rollback(captured: tuple[int, Task], _exc: Exception) -> None:
            if session != self._session:
                return
            index, task = captured
            if self._index_of(task.id) is None:
                # Best effort: the list may have changed shape since.
                self._tasks.insert(min(index, len(self._tasks)), task)
            self._notice.show(DELETE_FAILED)

        def reconcile(_captured: tuple[int, Task], _result: object) -> None:
            # Gone for good, even if a reload fetched before the delete re-added it.
            if session != self._session:
                return
            idx = self._index_of(task_id)
            if idx is not None:
                del self._tasks[idx]
                self._notify()

        return await run_optimistic(
            label=f"delete task {task_id}",
            apply=apply,
            remote=lambda: self._store.delete_task(task_id),
            rollback=rollback,
            reconcile=reconcile,
        )

    # ---- internals ----

    def _index_of(self, task_id: str) -> int | None:
        for i, t in enumerate(self._tasks):
            if t.id == task_id:
                return i
        return None

    def _set_completed(self, task_id: str, completed: bool) -> None:
        idx = self._index_of(task_id)
        if idx is None:
            return
        self._tasks[idx] = replace(self._tasks[idx], completed=completed)
        self._notify()

    def _notify(self) -> None:
        for listener in list(self._listeners):
            try:
                listener()
            except Exception:
                logger.exception("State listener failed.")
