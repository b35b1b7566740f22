# src/taskboard/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

The sync engine depends on Protocols instead of concrete implementations.
This keeps the hosted store / identity provider swappable and makes testing easier.
"""

from collections.abc import Callable
from typing import Any, Awaitable, Protocol

# Called with the new user id (or None on sign-out).
IdentityListener = Callable[[str | None], None]

# Called with no arguments after every engine state transition.
StateListener = Callable[[], None]


class SessionProvider(Protocol):
    """
    Identity-provider side port.

    current_access_token() is awaited for every outbound request: tokens are
    short-lived and may be refreshed between two calls.
    """

    def current_user_id(self) -> str | None: ...
    def current_access_token(self) -> Awaitable[str | None]: ...
    def display_name(self) -> str | None: ...
    def add_identity_listener(self, listener: IdentityListener) -> None: ...


class TaskRepo(Protocol):
    """
    Remote task table scoped to the caller's credential (row-level security
    is enforced server-side). Every failure raises RemoteStoreError.
    """

    def list_tasks(self) -> Awaitable[list[Any]]: ...
    def insert_task(self, name: str) -> Awaitable[Any]: ...
    def update_completed(self, task_id: str, completed: bool) -> Awaitable[None]: ...
    def delete_task(self, task_id: str) -> Awaitable[None]: ...
    def aclose(self) -> Awaitable[None]: ...
