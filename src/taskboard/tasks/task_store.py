# src/taskboard/tasks/task_store.py

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Mapping
from typing import Any

import httpx

from .task_models import Task

logger = logging.getLogger(__name__)

TokenSupplier = Callable[[], Awaitable[str | None]]


class RemoteStoreError(RuntimeError):
    """A list/insert/update/delete call failed (network error or rejected by the backend)."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class SessionBearerAuth(httpx.Auth):
    """
    Attach the project key and the *current* session token to each request.

    The token supplier is awaited per request, so a refreshed session token is
    picked up without rebuilding the client. Without a session token the
    project key doubles as the bearer (anonymous role).
    """

    def __init__(self, api_key: str, token_supplier: TokenSupplier) -> None:
        self._api_key = api_key
        self._token_supplier = token_supplier

    async def async_auth_flow(self, request: httpx.Request):
        token = await self._token_supplier()
        if self._api_key:
            request.headers["apikey"] = self._api_key
        bearer = token or self._api_key
        if bearer:
            request.headers["Authorization"] = f"Bearer {bearer}"
        yield request


def _error_detail(response: httpx.Response) -> str:
    try:
        data = response.json()
    except ValueError:
        return response.text.strip()[:200]
    if isinstance(data, Mapping):
        for key in ("message", "msg", "error_description", "error"):
            val = data.get(key)
            if isinstance(val, str) and val.strip():
                return val.strip()
    return str(data)[:200]


class RemoteTaskStore:
    """
    Hosted task table accessed over PostgREST (Supabase-style REST API).

    One long-lived httpx.AsyncClient per store. Rows are scoped to the signed-in
    user by the server's row-level security policy; the client never filters
    by user itself.
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        token_supplier: TokenSupplier,
        *,
        table: str = "tasks",
        connect_timeout: float = 5.0,
        read_timeout: float = 15.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        if not base_url or not base_url.strip():
            raise RuntimeError("Task store URL is not set. Set TASKBOARD_STORE_URL in your .env.")

        self._table = table
        self._client = httpx.AsyncClient(
            base_url=f"{base_url.rstrip('/')}/rest/v1",
            auth=SessionBearerAuth(api_key, token_supplier),
            headers={"Accept": "application/json"},
            timeout=httpx.Timeout(
                connect=connect_timeout,
                read=read_timeout,
                write=10.0,
                pool=connect_timeout,
            ),
            transport=transport,
        )
        logger.info("RemoteTaskStore ready url=%s table=%s", base_url, table)

    async def aclose(self) -> None:
        await self._client.aclose()

    # ---- low-level helpers ----

    async def _request(
        self,
        method: str,
        *,
        params: dict[str, str] | None = None,
        json: dict[str, Any] | None = None,
        prefer: str | None = None,
    ) -> httpx.Response:
        headers = {"Prefer": prefer} if prefer else None
        try:
            response = await self._client.request(
                method,
                f"/{self._table}",
                params=params,
                json=json,
                headers=headers,
            )
        except httpx.HTTPError as e:
            raise RemoteStoreError(f"{method} {self._table} failed: {e.__class__.__name__}") from e

        logger.debug("%s %s -> %s", method, response.request.url, response.status_code)

        if response.is_error:
            raise RemoteStoreError(
                f"{method} {self._table} rejected ({response.status_code}): {_error_detail(response)}",
                status_code=response.status_code,
            )
        return response

    @staticmethod
    def _parse_tasks(payload: Any) -> list[Task]:
        if not isinstance(payload, list):
            raise RemoteStoreError(f"Expected a list of tasks, got {type(payload).__name__}")
        try:
            return [Task.from_record(row) for row in payload]
        except ValueError as e:
            raise RemoteStoreError(f"Malformed task record: {e}") from e

    # ---- TaskRepo API ----

    async def list_tasks(self) -> list[Task]:
        response = await self._request(
            "GET",
            params={"select": "*", "order": "created_at.desc"},
        )
        return self._parse_tasks(response.json())

    async def insert_task(self, name: str) -> Task:
        response = await self._request(
            "POST",
            params={"select": "*"},
            json={"name": name, "completed": False},
            prefer="return=representation",
        )
        payload = response.json()
        # return=representation yields a one-element array.
        if isinstance(payload, list):
            if len(payload) != 1:
                raise RemoteStoreError(f"Expected exactly one inserted row, got {len(payload)}")
            payload = payload[0]
        try:
            return Task.from_record(payload)
        except ValueError as e:
            raise RemoteStoreError(f"Malformed task record: {e}") from e

    async def update_completed(self, task_id: str, completed: bool) -> None:
        await self._request(
            "PATCH",
            params={"id": f"eq.{task_id}"},
            json={"completed": bool(completed)},
            prefer="return=minimal",
        )

    async def delete_task(self, task_id: str) -> None:
        await self._request(
            "DELETE",
            params={"id": f"eq.{task_id}"},
            prefer="return=minimal",
        )
