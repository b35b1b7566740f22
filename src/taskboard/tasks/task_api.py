# src/taskboard/tasks/task_api.py

from __future__ import annotations

from collections.abc import Sequence

from .task_models import Task

EMPTY_TEXT = "No tasks yet. Create your first task above!"
LOADING_TEXT = "Loading tasks..."


def resolve_task_ref(tasks: Sequence[Task], ref: str) -> str | None:
    """
    Resolve a user-typed reference to a task id.

    Accepts either a 1-based position in the displayed list or a task id.
    """
    ref = (ref or "").strip()
    if not ref:
        return None

    if ref.isdigit():
        pos = int(ref)
        if 1 <= pos <= len(tasks):
            return tasks[pos - 1].id

    for t in tasks:
        if t.id == ref:
            return t.id
    return None


def format_task_line(position: int, task: Task) -> str:
    mark = "x" if task.completed else " "
    suffix = "  (saving...)" if task.pending else ""
    return f"{position:>3}. [{mark}] {task.name}{suffix}"


def format_task_list(tasks: Sequence[Task], *, loading: bool = False) -> str:
    if loading:
        return LOADING_TEXT
    if not tasks:
        return EMPTY_TEXT
    return "\n".join(format_task_line(i, t) for i, t in enumerate(tasks, start=1))
