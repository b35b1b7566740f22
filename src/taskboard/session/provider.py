# src/taskboard/session/provider.py

from __future__ import annotations

"""
Session providers.

The identity provider itself is external; these classes only expose what the
dashboard consumes: the signed-in user id and a bearer token fetched per request.
"""

import contextlib
import json
import logging
import os
from pathlib import Path
from typing import Any

from ..core.ports import IdentityListener

logger = logging.getLogger(__name__)


class StaticSessionProvider:
    """In-memory session. sign_in/sign_out notify identity listeners on change."""

    def __init__(
        self,
        user_id: str | None = None,
        access_token: str | None = None,
        display_name: str | None = None,
    ) -> None:
        self._user_id = user_id or None
        self._access_token = access_token or None
        self._display_name = display_name or None
        self._listeners: list[IdentityListener] = []

    def current_user_id(self) -> str | None:
        return self._user_id

    async def current_access_token(self) -> str | None:
        return self._access_token

    def display_name(self) -> str | None:
        return self._display_name

    def add_identity_listener(self, listener: IdentityListener) -> None:
        self._listeners.append(listener)

    def sign_in(
        self,
        user_id: str,
        access_token: str | None = None,
        display_name: str | None = None,
    ) -> None:
        user_id = (user_id or "").strip()
        if not user_id:
            raise ValueError("user_id must not be empty")

        changed = user_id != self._user_id
        self._user_id = user_id
        self._access_token = access_token or None
        self._display_name = display_name or None
        self._persist()

        if changed:
            logger.info("Signed in as %s", user_id)
            self._fire(user_id)

    def sign_out(self) -> None:
        if self._user_id is None:
            return
        logger.info("Signed out %s", self._user_id)
        self._user_id = None
        self._access_token = None
        self._display_name = None
        self._persist()
        self._fire(None)

    def refresh_token(self, access_token: str | None) -> None:
        """Swap the credential without changing identity (no listeners fire)."""
        self._access_token = access_token or None
        self._persist()

    def _persist(self) -> None:
        return

    def _fire(self, user_id: str | None) -> None:
        for listener in list(self._listeners):
            try:
                listener(user_id)
            except Exception:
                logger.exception("Identity listener failed.")


def _load_json(path: Path) -> dict[str, Any]:
    raw = path.read_text("utf-8")
    val = json.loads(raw)
    if isinstance(val, dict):
        return val
    raise ValueError("Expected JSON object")


def _atomic_write_json(path: Path, data: dict[str, Any]) -> None:
    tmp = path.with_suffix(".tmp")
    tmp.write_text(json.dumps(data, ensure_ascii=False), "utf-8")
    os.replace(tmp, path)
    with contextlib.suppress(Exception):
        # Best-effort: the file holds a bearer token.
        os.chmod(path, 0o600)


class FileSessionProvider(StaticSessionProvider):
    """
    Session persisted in a local session.json (gitignored data dir).

    current_access_token() re-reads the file only when its stat (inode, mtime,
    size) changed since the last read or write, so a token refreshed by another
    process is used by the next request without hitting the disk on every call.
    """

    def __init__(
        self,
        path: str | Path,
        *,
        user_id: str | None = None,
        access_token: str | None = None,
        display_name: str | None = None,
    ) -> None:
        super().__init__()
        self._path = Path(path)
        self._file_key: tuple[int, int, int] | None = None

        data = self._read()
        if data:
            self._user_id = data.get("user_id") or None
            self._access_token = data.get("access_token") or None
            self._display_name = data.get("display_name") or None
            logger.info("Loaded session for %s from %s", self._user_id, self._path)

        # Explicitly configured identity wins over the stored one.
        if user_id and (user_id != self._user_id or access_token):
            self._user_id = user_id
            self._access_token = access_token or None
            self._display_name = display_name or self._display_name
            self._persist()

    async def current_access_token(self) -> str | None:
        key = self._stat_key()
        if key is not None and key != self._file_key:
            data = self._read()
            if data and data.get("user_id") == self._user_id:
                self._access_token = data.get("access_token") or None
        return self._access_token

    def _stat_key(self) -> tuple[int, int, int] | None:
        try:
            st = self._path.stat()
        except OSError:
            return None
        return st.st_ino, st.st_mtime_ns, st.st_size

    def _read(self) -> dict[str, Any]:
        self._file_key = self._stat_key()
        if self._file_key is None:
            return {}
        try:
            return _load_json(self._path)
        except Exception:
            logger.warning("Failed to read session file %s", self._path, exc_info=True)
            return {}

    def _persist(self) -> None:
        if self._user_id is None:
            with contextlib.suppress(FileNotFoundError):
                self._path.unlink()
            self._file_key = None
            return

        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            _atomic_write_json(
                self._path,
                {
                    "user_id": self._user_id,
                    "access_token": self._access_token,
                    "display_name": self._display_name,
                },
            )
            self._file_key = self._stat_key()
        except Exception:
            logger.exception("Failed to save session to %s", self._path)
