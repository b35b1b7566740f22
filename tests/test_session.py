# tests/test_session.py

from __future__ import annotations

import json
from pathlib import Path

import pytest

from taskboard.session import provider as provider_module
from taskboard.session.provider import FileSessionProvider, StaticSessionProvider


def test_sign_in_and_out_notify_listeners() -> None:
    session = StaticSessionProvider()
    seen: list[str | None] = []
    session.add_identity_listener(seen.append)

    session.sign_in("alice", access_token="t1", display_name="Alice")
    session.sign_in("alice", access_token="t2")  # same identity: no event
    session.sign_in("bob")
    session.sign_out()
    session.sign_out()

    assert seen == ["alice", "bob", None]
    assert session.current_user_id() is None


def test_sign_in_rejects_blank_user() -> None:
    with pytest.raises(ValueError):
        StaticSessionProvider().sign_in("   ")


@pytest.mark.asyncio
async def test_file_session_round_trips_through_disk(tmp_path: Path) -> None:
    path = tmp_path / "session.json"
    session = FileSessionProvider(path)
    assert session.current_user_id() is None

    session.sign_in("alice", access_token="t1", display_name="Alice")
    assert json.loads(path.read_text("utf-8"))["user_id"] == "alice"

    reopened = FileSessionProvider(path)
    assert reopened.current_user_id() == "alice"
    assert reopened.display_name() == "Alice"
    assert await reopened.current_access_token() == "t1"

    reopened.sign_out()
    assert not path.exists()


@pytest.mark.asyncio
async def test_file_session_picks_up_refreshed_token(tmp_path: Path) -> None:
    path = tmp_path / "session.json"
    session = FileSessionProvider(path)
    session.sign_in("alice", access_token="old")

    # Another process refreshes the short-lived token.
    path.write_text(json.dumps({"user_id": "alice", "access_token": "new"}), "utf-8")
    assert await session.current_access_token() == "new"

    session.refresh_token("newer")
    assert await session.current_access_token() == "newer"


@pytest.mark.asyncio
async def test_file_session_reads_disk_only_when_file_changes(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    path = tmp_path / "session.json"
    session = FileSessionProvider(path)
    session.sign_in("alice", access_token="t1")

    reads: list[Path] = []
    real_load = provider_module._load_json

    def counting_load(p: Path) -> dict:
        reads.append(p)
        return real_load(p)

    monkeypatch.setattr(provider_module, "_load_json", counting_load)

    for _ in range(3):
        assert await session.current_access_token() == "t1"
    assert reads == []

    path.write_text(json.dumps({"user_id": "alice", "access_token": "rotated-token"}), "utf-8")
    assert await session.current_access_token() == "rotated-token"
    assert await session.current_access_token() == "rotated-token"
    assert len(reads) == 1


@pytest.mark.asyncio
async def test_configured_identity_overrides_stored_one(tmp_path: Path) -> None:
    path = tmp_path / "session.json"
    FileSessionProvider(path).sign_in("alice", access_token="t1")

    session = FileSessionProvider(path, user_id="bob", access_token="t2", display_name="Bob")

    assert session.current_user_id() == "bob"
    assert await session.current_access_token() == "t2"
    assert json.loads(path.read_text("utf-8"))["user_id"] == "bob"


def test_corrupt_session_file_is_ignored(tmp_path: Path) -> None:
    path = tmp_path / "session.json"
    path.write_text("{not json", "utf-8")

    session = FileSessionProvider(path)
    assert session.current_user_id() is None
