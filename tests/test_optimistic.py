# tests/test_optimistic.py

from __future__ import annotations

import asyncio

import pytest

from taskboard.sync.notices import ErrorNotice
from taskboard.sync.optimistic import run_optimistic
from taskboard.tasks.task_store import RemoteStoreError


@pytest.mark.asyncio
async def test_apply_runs_before_remote_and_reconcile_gets_result() -> None:
    events: list[str] = []

    async def remote() -> str:
        events.append("remote")
        return "server"

    ok = await run_optimistic(
        label="test",
        apply=lambda: events.append("apply") or "token",
        remote=remote,
        rollback=lambda token, exc: events.append("rollback"),
        reconcile=lambda token, result: events.append(f"reconcile:{token}:{result}"),
    )

    assert ok is True
    assert events == ["apply", "remote", "reconcile:token:server"]


@pytest.mark.asyncio
async def test_failure_rolls_back_with_token_and_error() -> None:
    seen: list[tuple[object, Exception]] = []
    err = RemoteStoreError("nope", status_code=500)

    async def remote() -> None:
        raise err

    ok = await run_optimistic(
        label="test",
        apply=lambda: 7,
        remote=remote,
        rollback=lambda token, exc: seen.append((token, exc)),
        reconcile=lambda token, result: pytest.fail("reconcile must not run"),
    )

    assert ok is False
    assert seen == [(7, err)]


@pytest.mark.asyncio
async def test_cancellation_propagates_without_rollback() -> None:
    rolled_back = []
    started = asyncio.Event()

    async def remote() -> None:
        started.set()
        await asyncio.sleep(10)

    op = asyncio.create_task(
        run_optimistic(
            label="test",
            apply=lambda: None,
            remote=remote,
            rollback=lambda token, exc: rolled_back.append(exc),
        )
    )
    await started.wait()
    op.cancel()
    with pytest.raises(asyncio.CancelledError):
        await op
    assert rolled_back == []


@pytest.mark.asyncio
async def test_notice_replaces_and_expires() -> None:
    changes = []
    notice = ErrorNotice(0.2, on_change=lambda: changes.append(notice.message))

    notice.show("first")
    await asyncio.sleep(0.12)
    notice.show("second")
    await asyncio.sleep(0.12)
    # Timer restarted by the second show().
    assert notice.message == "second"

    await asyncio.sleep(0.2)
    assert notice.message is None
    assert changes == ["first", "second", None]


@pytest.mark.asyncio
async def test_notice_dismiss_cancels_timer() -> None:
    notice = ErrorNotice(0.01)
    notice.show("oops")
    notice.dismiss()
    assert notice.message is None

    notice.show("again")
    notice.dismiss()
    await asyncio.sleep(0.03)
    assert notice.message is None


def test_notice_without_loop_stays_until_dismissed() -> None:
    notice = ErrorNotice(0.01)
    notice.show("no loop")
    assert notice.message == "no loop"
    notice.dismiss()
    assert notice.message is None
