# src/taskboard/cli/commands.py

from __future__ import annotations

import contextlib
import inspect
import logging
from collections.abc import Callable
from typing import cast

from ..core.state import AppState
from ..tasks.task_api import format_task_list, resolve_task_ref

CommandEmitter = Callable[[str], None]
CommandHandler2 = Callable[[AppState, list[str]], str]
CommandHandler3 = Callable[[AppState, list[str], CommandEmitter | None], str]
CommandHandler = CommandHandler2 | CommandHandler3

logger = logging.getLogger(__name__)

NOT_SIGNED_IN = "You are not signed in. Use /login <user_id> [token] [display name]."


class CommandRegistry:
    """Simple slash-command registry used by the console dashboard (/help, /add, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    def handle(
        self,
        state: AppState,
        line: str,
        emit: CommandEmitter | None = None,
    ) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.

        Handlers that start engine operations schedule them with state.spawn(),
        so this must be called from inside the running event loop.
        """
        if not line.startswith("/"):
            return None

        parts = line[1:].split()
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        try:
            nparams = len(inspect.signature(handler).parameters)
        except Exception:
            nparams = 3

        if nparams >= 3:
            h3 = cast(CommandHandler3, handler)
            return h3(state, args, emit)

        h2 = cast(CommandHandler2, handler)
        return h2(state, args)

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


def _signed_in_user(state: AppState) -> str | None:
    return state.session.current_user_id()


def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


def cmd_status(state: AppState, args: list[str]) -> str:
    user_id = _signed_in_user(state)
    backend = "OFFLINE (in-memory demo store)" if state.offline else state.settings.store_url
    engine = state.engine
    return (
        "Status:\n"
        f"  User: {user_id or '(signed out)'}\n"
        f"  Backend: {backend}\n"
        f"  Tasks: {len(engine.tasks)} ({'loading' if engine.loading else 'idle'})\n"
        f"  Pending operations: {len([t for t in state.background if not t.done()])}"
    )


def cmd_list(state: AppState, args: list[str]) -> str:
    if not _signed_in_user(state):
        return NOT_SIGNED_IN
    return format_task_list(state.engine.tasks, loading=state.engine.loading)


def cmd_add(state: AppState, args: list[str]) -> str:
    if not _signed_in_user(state):
        return NOT_SIGNED_IN
    name = " ".join(args).strip()
    if not name:
        return "Usage: /add <task name>"
    state.spawn(state.engine.create(name))
    return ""


def cmd_done(state: AppState, args: list[str]) -> str:
    """
    /done <n|id>  -> toggle completion of the n-th listed task (or by id)
    """
    if not _signed_in_user(state):
        return NOT_SIGNED_IN
    if not args:
        return "Usage: /done <number|id>"

    task_id = resolve_task_ref(state.engine.tasks, args[0])
    if task_id is None:
        return f"No such task: {args[0]}"
    task = state.engine.find(task_id)
    if task is not None and task.pending:
        return "That task is still being saved. Try again in a moment."

    state.spawn(state.engine.toggle(task_id))
    return ""


def cmd_rm(state: AppState, args: list[str]) -> str:
    if not _signed_in_user(state):
        return NOT_SIGNED_IN
    if not args:
        return "Usage: /rm <number|id>"

    task_id = resolve_task_ref(state.engine.tasks, args[0])
    if task_id is None:
        return f"No such task: {args[0]}"
    task = state.engine.find(task_id)
    if task is not None and task.pending:
        return "That task is still being saved. Try again in a moment."

    state.spawn(state.engine.remove(task_id))
    return ""


def cmd_reload(state: AppState, args: list[str]) -> str:
    user_id = _signed_in_user(state)
    if not user_id:
        return NOT_SIGNED_IN
    state.spawn(state.engine.load(user_id))
    return ""


def cmd_retry(state: AppState, args: list[str]) -> str:
    if not _signed_in_user(state):
        return NOT_SIGNED_IN
    if not state.engine.draft.strip():
        return "Nothing to retry."
    state.spawn(state.engine.create())
    return ""


def cmd_dismiss(state: AppState, args: list[str]) -> str:
    state.engine.dismiss_error()
    return ""


def cmd_login(
    state: AppState,
    args: list[str],
    emit: CommandEmitter | None = None,
) -> str:
    """
    /login <user_id> [token] [display name...]
    """
    if not args:
        return "Usage: /login <user_id> [token] [display name]"

    user_id = args[0]
    token = args[1] if len(args) > 1 else None
    display_name = " ".join(args[2:]).strip() or None

    if emit:
        with contextlib.suppress(Exception):
            emit(f"Signing in as {user_id}...")

    logger.debug("Sign-in requested user_id=%s token=%s", user_id, "yes" if token else "no")
    state.session.sign_in(user_id, access_token=token, display_name=display_name)
    return f"Welcome back, {state.session.display_name() or 'there'}!"


def cmd_logout(state: AppState, args: list[str]) -> str:
    if not _signed_in_user(state):
        return "Already signed out."
    state.session.sign_out()
    return "Signed out."


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("status", cmd_status, help_text="Show user, backend and pending operations.")
registry.register("list", cmd_list, help_text="Show your tasks.", aliases=["ls"])
registry.register("add", cmd_add, help_text="Create a task: /add <name> (plain text works too).")
registry.register("done", cmd_done, help_text="Toggle a task: /done <number|id>.", aliases=["toggle"])
registry.register("rm", cmd_rm, help_text="Delete a task: /rm <number|id>.", aliases=["delete"])
registry.register("reload", cmd_reload, help_text="Reload tasks from the server.")
registry.register("retry", cmd_retry, help_text="Resubmit the task whose creation failed.")
registry.register("dismiss", cmd_dismiss, help_text="Hide the current error message.")
registry.register("login", cmd_login, help_text="Sign in: /login <user_id> [token] [display name].")
registry.register("logout", cmd_logout, help_text="Sign out and clear the dashboard.")
