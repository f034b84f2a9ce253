from __future__ import annotations

import asyncio
from types import SimpleNamespace

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import RedisError
from redis.exceptions import TimeoutError as RedisTimeoutError

from ghlogin.core.errors import SessionStoreUnavailable
from ghlogin.services import session_store as session_store_module
from ghlogin.services.session_store import (
    InMemorySessionStore,
    RedisSessionStore,
    SessionStore,
    new_session_id,
)


def test_default_store_is_in_memory_without_redis() -> None:
    assert isinstance(session_store_module.session_store, InMemorySessionStore)


def test_in_memory_store_satisfies_protocol() -> None:
    assert isinstance(InMemorySessionStore(), SessionStore)


def test_put_get_delete_round_trip() -> None:
    store = InMemorySessionStore()

    async def run():
        await store.put("sid", {"state": "abc"}, ttl_seconds=60)
        first = await store.get("sid")
        await store.delete("sid")
        second = await store.get("sid")
        return first, second

    first, second = asyncio.run(run())
    assert first == {"state": "abc"}
    assert second is None


def test_expired_session_is_gone(monkeypatch) -> None:
    store = InMemorySessionStore()
    now = [1000.0]
    monkeypatch.setattr(
        session_store_module, "time", SimpleNamespace(monotonic=lambda: now[0])
    )

    asyncio.run(store.put("sid", {"state": "abc"}, ttl_seconds=10))
    now[0] += 11

    assert asyncio.run(store.get("sid")) is None
    assert "sid" not in store._store


def test_get_returns_a_copy() -> None:
    store = InMemorySessionStore()
    asyncio.run(store.put("sid", {"result": {"githubOrgs": []}}, ttl_seconds=60))

    data = asyncio.run(store.get("sid"))
    data["result"]["githubOrgs"].append("leak")

    assert asyncio.run(store.get("sid")) == {"result": {"githubOrgs": []}}


def test_delete_missing_is_noop() -> None:
    asyncio.run(InMemorySessionStore().delete("never-existed"))


def test_session_ids_are_unique() -> None:
    ids = {new_session_id() for _ in range(100)}
    assert len(ids) == 100


class _FakeRedis:
    """Records the commands RedisSessionStore issues."""

    def __init__(self) -> None:
        self.data: dict[str, str] = {}
        self.ttls: dict[str, int] = {}

    async def get(self, key):
        return self.data.get(key)

    async def setex(self, key, ttl, value):
        self.data[key] = value
        self.ttls[key] = ttl

    async def delete(self, key):
        self.data.pop(key, None)

    async def ping(self):
        return True


def test_redis_store_prefixes_keys_and_sets_ttl() -> None:
    fake = _FakeRedis()
    store = RedisSessionStore(fake)

    async def run():
        await store.put("sid", {"state": "abc"}, ttl_seconds=600)
        value = await store.get("sid")
        await store.delete("sid")
        return value, await store.get("sid"), await store.ping()

    value, after_delete, alive = asyncio.run(run())
    assert fake.ttls == {"session:sid": 600}
    assert value == {"state": "abc"}
    assert after_delete is None
    assert alive is True


class _DownRedis:
    async def get(self, key):
        raise RedisConnectionError("Connection refused")

    async def setex(self, key, ttl, value):
        raise RedisTimeoutError("Timeout reading from socket")

    async def delete(self, key):
        raise RedisConnectionError("Connection refused")


@pytest.mark.parametrize(
    "operation",
    [
        lambda store: store.get("sid"),
        lambda store: store.put("sid", {"state": "abc"}, ttl_seconds=60),
        lambda store: store.delete("sid"),
    ],
    ids=["get", "put", "delete"],
)
def test_redis_errors_become_session_store_unavailable(operation) -> None:
    store = RedisSessionStore(_DownRedis())
    with pytest.raises(SessionStoreUnavailable) as excinfo:
        asyncio.run(operation(store))
    assert excinfo.value.status_code == 503
    assert isinstance(excinfo.value.__cause__, RedisError)
