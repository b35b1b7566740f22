# src/taskboard/tasks/offline_store.py

from __future__ import annotations

import uuid
from collections.abc import Callable
from dataclasses import replace
from datetime import UTC, datetime

from .task_models import Task
from .task_store import RemoteStoreError


class OfflineTaskStore:
    """
    In-memory task table used for demos when no hosted store is configured.

    Rows are partitioned by the current user id the same way the hosted
    policy does it: a caller only ever sees its own rows.
    """

    def __init__(self, current_user_id: Callable[[], str | None]) -> None:
        self._current_user_id = current_user_id
        self._rows: dict[str, dict[str, Task]] = {}

    def _bucket(self) -> dict[str, Task]:
        user_id = self._current_user_id()
        if not user_id:
            raise RemoteStoreError("Not signed in.", status_code=401)
        return self._rows.setdefault(user_id, {})

    async def list_tasks(self) -> list[Task]:
        rows = list(self._bucket().values())
        rows.sort(key=lambda t: t.created_at, reverse=True)
        return rows

    async def insert_task(self, name: str) -> Task:
        if not name.strip():
            raise RemoteStoreError("name must not be empty", status_code=400)
        task = Task(
            id=str(uuid.uuid4()),
            name=name,
            completed=False,
            created_at=datetime.now(UTC),
        )
        self._bucket()[task.id] = task
        return task

    async def update_completed(self, task_id: str, completed: bool) -> None:
        bucket = self._bucket()
        task = bucket.get(task_id)
        if task is not None:
            bucket[task_id] = replace(task, completed=bool(completed))

    async def delete_task(self, task_id: str) -> None:
        self._bucket().pop(task_id, None)

    async def aclose(self) -> None:
        return
