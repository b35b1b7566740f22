# tests/test_task_store.py

from __future__ import annotations

import json

import httpx
import pytest

from taskboard.tasks.offline_store import OfflineTaskStore
from taskboard.tasks.task_models import Task, is_placeholder_id, parse_timestamp
from taskboard.tasks.task_store import RemoteStoreError, RemoteTaskStore

ROW = {
    "id": "42",
    "name": "Buy milk",
    "completed": False,
    "created_at": "2024-05-01T12:00:00.123456+00:00",
    "user_id": "user_abc",
}


class Recorder:
    """MockTransport handler that records requests and replays canned responses."""

    def __init__(self, *responses: httpx.Response) -> None:
        self.requests: list[httpx.Request] = []
        self._responses = list(responses)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self._responses.pop(0)


def _store(handler, tokens: list[str | None] | None = None) -> RemoteTaskStore:
    supplied = list(tokens or ["session-token"])

    async def token_supplier() -> str | None:
        return supplied.pop(0) if len(supplied) > 1 else supplied[0]

    return RemoteTaskStore(
        "https://project.example.co/",
        "publishable-key",
        token_supplier,
        transport=httpx.MockTransport(handler),
    )


@pytest.mark.asyncio
async def test_list_orders_newest_first_and_sends_credentials() -> None:
    rec = Recorder(httpx.Response(200, json=[ROW]))
    store = _store(rec)

    tasks = await store.list_tasks()

    req = rec.requests[0]
    assert req.method == "GET"
    assert req.url.path == "/rest/v1/tasks"
    assert req.url.params["order"] == "created_at.desc"
    assert req.headers["apikey"] == "publishable-key"
    assert req.headers["Authorization"] == "Bearer session-token"
    assert tasks == [Task.from_record(ROW)]
    await store.aclose()


@pytest.mark.asyncio
async def test_token_is_fetched_for_every_request() -> None:
    rec = Recorder(httpx.Response(200, json=[]), httpx.Response(204))
    store = _store(rec, tokens=["t1", "t2"])

    await store.list_tasks()
    await store.delete_task("42")

    assert [r.headers["Authorization"] for r in rec.requests] == ["Bearer t1", "Bearer t2"]
    await store.aclose()


@pytest.mark.asyncio
async def test_signed_out_requests_fall_back_to_project_key() -> None:
    rec = Recorder(httpx.Response(200, json=[]))
    store = _store(rec, tokens=[None])

    await store.list_tasks()

    assert rec.requests[0].headers["Authorization"] == "Bearer publishable-key"
    await store.aclose()


@pytest.mark.asyncio
async def test_insert_returns_server_record() -> None:
    rec = Recorder(httpx.Response(201, json=[ROW]))
    store = _store(rec)

    task = await store.insert_task("Buy milk")

    req = rec.requests[0]
    assert req.method == "POST"
    assert json.loads(req.content) == {"name": "Buy milk", "completed": False}
    assert req.headers["Prefer"] == "return=representation"
    assert task.id == "42"
    assert task.created_at == parse_timestamp(ROW["created_at"])
    await store.aclose()


@pytest.mark.asyncio
async def test_update_and_delete_are_keyed_by_id() -> None:
    rec = Recorder(httpx.Response(204), httpx.Response(204))
    store = _store(rec)

    await store.update_completed("42", True)
    await store.delete_task("42")

    patch, delete = rec.requests
    assert patch.method == "PATCH"
    assert patch.url.params["id"] == "eq.42"
    assert json.loads(patch.content) == {"completed": True}
    assert delete.method == "DELETE"
    assert delete.url.params["id"] == "eq.42"
    await store.aclose()


@pytest.mark.asyncio
async def test_backend_rejection_raises_store_error() -> None:
    rec = Recorder(
        httpx.Response(403, json={"code": "42501", "message": "new row violates row-level security policy"})
    )
    store = _store(rec)

    with pytest.raises(RemoteStoreError) as info:
        await store.insert_task("x")

    assert info.value.status_code == 403
    assert "row-level security" in str(info.value)
    await store.aclose()


@pytest.mark.asyncio
async def test_network_error_raises_store_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    store = _store(handler)
    with pytest.raises(RemoteStoreError) as info:
        await store.list_tasks()
    assert info.value.status_code is None
    await store.aclose()


@pytest.mark.asyncio
async def test_malformed_rows_raise_store_error() -> None:
    store = _store(Recorder(httpx.Response(200, json=[{"name": "no id"}])))
    with pytest.raises(RemoteStoreError):
        await store.list_tasks()
    await store.aclose()


def test_store_requires_url() -> None:
    async def no_token() -> None:
        return None

    with pytest.raises(RuntimeError):
        RemoteTaskStore("", "key", no_token)


def test_placeholder_tasks_are_marked_pending() -> None:
    task = Task.placeholder("draft")
    assert task.pending
    assert is_placeholder_id(task.id)
    assert Task.placeholder("draft").id != task.id
    assert not Task.from_record(ROW).pending


@pytest.mark.asyncio
async def test_offline_store_scopes_rows_per_user() -> None:
    current = {"user": "alice"}
    store = OfflineTaskStore(lambda: current["user"])

    first = await store.insert_task("alice 1")
    second = await store.insert_task("alice 2")
    await store.update_completed(first.id, True)

    rows = await store.list_tasks()
    assert len(rows) == 2
    assert {t.id: t.completed for t in rows} == {first.id: True, second.id: False}

    current["user"] = "bob"
    assert await store.list_tasks() == []

    current["user"] = "alice"
    await store.delete_task(first.id)
    assert [t.id for t in await store.list_tasks()] == [second.id]

    current["user"] = None
    with pytest.raises(RemoteStoreError):
        await store.list_tasks()
