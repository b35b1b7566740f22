# src/taskboard/connectors/console_connector.py

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from datetime import datetime

from ..cli.commands import registry as command_registry
from ..core.state import AppState
from ..sync.engine import TaskSyncEngine
from ..tasks.task_api import format_task_list
from .background_loop import BackgroundLoop

logger = logging.getLogger(__name__)

LANDING_TITLE = "Task List Demo"


def _ts_local() -> str:
    return datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S")


def _print_ts(text: str) -> None:
    print(f"[{_ts_local()}] {text}", flush=True)


def render_header(state: AppState) -> str:
    if not state.session.current_user_id():
        return f"{LANDING_TITLE}\nSign in with /login <user_id> [token] [display name]."
    name = state.session.display_name() or "there"
    return f"My Tasks\nWelcome back, {name}! Manage your tasks below."


def render_dashboard(state: AppState) -> str:
    """Full screen text: sign-in gate, or title + task list + current error."""
    header = render_header(state)
    if not state.session.current_user_id():
        return header

    engine = state.engine
    parts = [header, "", format_task_list(engine.tasks, loading=engine.loading)]
    if engine.error_message:
        parts += ["", f"[ERROR] {engine.error_message}"]
    if engine.draft:
        parts += [f"(draft: {engine.draft!r} - /retry to resubmit)"]
    return "\n".join(parts)


class DashboardPrinter:
    """
    Engine listener for things that happen between two prompts:
    - a new error message appears,
    - a load finishes.
    """

    def __init__(self, engine: TaskSyncEngine, out: Callable[[str], None] = _print_ts) -> None:
        self._engine = engine
        self._out = out
        self._last_error: str | None = None
        self._was_loading = engine.loading

    def __call__(self) -> None:
        engine = self._engine

        err = engine.error_message
        if err and err != self._last_error:
            self._out(f"[ERROR] {err}")
        self._last_error = err

        if self._was_loading and not engine.loading:
            self._out("\n" + format_task_list(engine.tasks))
        self._was_loading = engine.loading


async def _open_dashboard(state: AppState) -> str:
    state.engine.subscribe(DashboardPrinter(state.engine))
    user_id = state.session.current_user_id()
    if user_id:
        state.spawn(state.engine.load(user_id))
        await asyncio.sleep(0)
    return render_dashboard(state)


async def _dispatch(state: AppState, line: str, emit: Callable[[str], None]) -> str | None:
    response = command_registry.handle(state, line, emit=emit)
    # Let freshly spawned operations apply their optimistic change before rendering.
    await asyncio.sleep(0)
    return response


async def _render(state: AppState) -> str:
    return render_dashboard(state)


def run_console_loop(state: AppState, runner: BackgroundLoop) -> None:
    logger.info("Console dashboard started (offline=%s).", state.offline)
    if state.offline:
        _print_ts("[CONSOLE] No task store configured: running on the in-memory demo store.")
    _print_ts("[CONSOLE] Type a task name to add it. Use /help for commands. Use /exit to quit.\n")

    print(runner.run(_open_dashboard(state)), flush=True)

    def emit(text: str) -> None:
        print(f"[{_ts_local()}] {text}", flush=True)

    while True:
        try:
            user_input = input(">>> ").strip()
        except EOFError:
            logger.info("Console EOF received, exiting.")
            break
        except KeyboardInterrupt:
            logger.info("Console KeyboardInterrupt, exiting.")
            print()
            break

        if not user_input:
            print(runner.run(_render(state)), flush=True)
            continue

        if user_input.lower() in ("/exit", "/quit"):
            logger.info("Console exit command received.")
            break

        # Plain text is the "new task" form.
        line = user_input if user_input.startswith("/") else f"/add {user_input}"

        try:
            response = runner.run(_dispatch(state, line, emit))
        except Exception:
            logger.exception("Command handler crashed.")
            response = "Internal error while handling a command."

        if response:
            print(f"[{_ts_local()}] {response}", flush=True)
            continue

        print(runner.run(_render(state)), flush=True)

    logger.info("Console dashboard finished.")
