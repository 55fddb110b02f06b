from __future__ import annotations

import asyncio

import pytest

from runrelay.config import GatewayConfig
from runrelay.errors import SessionStoreError
from runrelay.sessions import (
    InMemorySessionStore,
    Session,
    SQLiteSessionStore,
    create_session_store,
)


def run_async(coro):
    return asyncio.run(coro)


def _stores(tmp_path):
    return [InMemorySessionStore(), SQLiteSessionStore(path=str(tmp_path / "sessions.sqlite3"))]


@pytest.mark.parametrize("index", [0, 1])
def test_add_lookup_and_update(tmp_path, index):
    async def scenario():
        async with _stores(tmp_path)[index] as store:
            session = Session(session_id="thread_1", platform="web", username="ana", timestamp=123)
            await store.add(session)

            assert await store.get("thread_1") == session
            assert await store.get_by_identity("web", "ana") == session
            assert await store.get_by_identity("whatsapp", "ana") is None

            assert await store.update_status("thread_1", "completed") is True
            assert (await store.get("thread_1")).status == "completed"
            assert await store.update_status("unknown", "completed") is False

            with pytest.raises(SessionStoreError):
                await store.add(Session(session_id="thread_2", platform="web", username="ana"))
            with pytest.raises(SessionStoreError):
                await store.add(Session(session_id="thread_1", platform="sms", username="bob"))

    run_async(scenario())


def test_new_session_defaults():
    session = Session(session_id="t")
    assert session.platform == "Not Specified"
    assert session.username == "Not Specified"
    assert session.status == "Arrived"
    assert session.timestamp > 0


def test_store_must_be_set_up():
    store = InMemorySessionStore()
    with pytest.raises(RuntimeError):
        run_async(store.get("t"))


def test_sqlite_store_persists_across_connections(tmp_path):
    path = str(tmp_path / "persist.sqlite3")

    async def scenario():
        async with SQLiteSessionStore(path=path) as store:
            await store.add(Session(session_id="thread_1", platform="web", username="ana"))
        async with SQLiteSessionStore(path=path) as store:
            found = await store.get_by_identity("web", "ana")
            assert found is not None and found.session_id == "thread_1"

    run_async(scenario())


def test_factory_selects_backend(tmp_path):
    assert isinstance(create_session_store(GatewayConfig(session_backend="memory")), InMemorySessionStore)
    sqlite_store = create_session_store(
        GatewayConfig(session_backend="sqlite", sqlite_path=str(tmp_path / "x.sqlite3"))
    )
    assert isinstance(sqlite_store, SQLiteSessionStore)
    with pytest.raises(ValueError):
        create_session_store(GatewayConfig(session_backend="mongo"))
