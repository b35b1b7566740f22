# src/taskboard/sync/notices.py

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable

logger = logging.getLogger(__name__)


class ErrorNotice:
    """
    A single transient, user-visible error message.

    - show() replaces whatever is currently displayed and restarts the timer.
    - The message clears itself after display_seconds (<= 0 disables auto-clear).
    - dismiss() clears it immediately.
    """

    def __init__(
        self,
        display_seconds: float = 5.0,
        on_change: Callable[[], None] | None = None,
    ) -> None:
        self.display_seconds = float(display_seconds)
        self.message: str | None = None
        self._on_change = on_change
        self._timer: asyncio.TimerHandle | None = None

    def show(self, message: str) -> None:
        self._cancel_timer()
        self.message = message

        if self.display_seconds > 0:
            try:
                loop = asyncio.get_running_loop()
            except RuntimeError:
                logger.debug("No running loop; notice will stay until dismissed.")
            else:
                self._timer = loop.call_later(self.display_seconds, self._expire)

        self._changed()

    def dismiss(self) -> None:
        self._cancel_timer()
        if self.message is None:
            return
        self.message = None
        self._changed()

    def _expire(self) -> None:
        self._timer = None
        if self.message is not None:
            logger.debug("Notice expired: %s", self.message)
            self.message = None
            self._changed()

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _changed(self) -> None:
        if self._on_change is not None:
            self._on_change()
