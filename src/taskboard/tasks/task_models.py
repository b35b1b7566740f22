# src/taskboard/tasks/task_models.py

from __future__ import annotations

import uuid
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

PLACEHOLDER_PREFIX = "temp-"


def new_placeholder_id() -> str:
    """Locally unique id for a task the server has not confirmed yet."""
    return f"{PLACEHOLDER_PREFIX}{uuid.uuid4().hex}"


def is_placeholder_id(task_id: str) -> bool:
    return task_id.startswith(PLACEHOLDER_PREFIX)


def parse_timestamp(raw: Any) -> datetime:
    """
    Parse a server timestamp (ISO-8601, as PostgREST returns timestamptz).

    Naive values are treated as UTC. A trailing 'Z' is accepted.
    """
    if isinstance(raw, datetime):
        dt = raw
    elif isinstance(raw, (int, float)):
        dt = datetime.fromtimestamp(float(raw), tz=UTC)
    elif isinstance(raw, str) and raw.strip():
        s = raw.strip()
        if s.endswith("Z"):
            s = s[:-1] + "+00:00"
        dt = datetime.fromisoformat(s)
    else:
        raise ValueError(f"Invalid timestamp: {raw!r}")

    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return dt


@dataclass(slots=True, frozen=True)
class Task:
    """One row of the tasks table, as shown on the dashboard."""

    id: str
    name: str
    completed: bool
    created_at: datetime

    @property
    def pending(self) -> bool:
        """True while the task still carries a placeholder id."""
        return is_placeholder_id(self.id)

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> Task:
        if not isinstance(record, Mapping):
            raise ValueError(f"Expected a task record, got {type(record).__name__}")

        raw_id = record.get("id")
        if raw_id is None or str(raw_id).strip() == "":
            raise ValueError("Task record has no id")

        return cls(
            id=str(raw_id),
            name=str(record.get("name") or ""),
            completed=bool(record.get("completed", False)),
            created_at=parse_timestamp(record.get("created_at")),
        )

    @classmethod
    def placeholder(cls, name: str, *, now: datetime | None = None) -> Task:
        return cls(
            id=new_placeholder_id(),
            name=name,
            completed=False,
            created_at=now or datetime.now(UTC),
        )
