from __future__ import annotations

from fastapi.testclient import TestClient

from ghlogin.api.dependencies import get_session_store
from ghlogin.main import app
from ghlogin.services.session_store import RedisSessionStore


class _DownRedis:
    async def ping(self):
        raise ConnectionError("redis is down")


class _UpRedis:
    async def ping(self):
        return True


def test_health_returns_ok(client: TestClient) -> None:
    resp = client.get("/health")
    assert resp.status_code == 200
    data = resp.json()
    assert data["status"] == "ok"
    # In tests, Redis is not configured — should report as such
    assert data["checks"]["session_store"] == "in_memory"


def test_ready_returns_200(client: TestClient) -> None:
    resp = client.get("/ready")
    assert resp.status_code == 200


def test_health_with_reachable_redis(client: TestClient) -> None:
    app.dependency_overrides[get_session_store] = lambda: RedisSessionStore(_UpRedis())
    data = client.get("/health").json()
    assert data == {"status": "ok", "checks": {"session_store": "ok"}}


def test_unreachable_redis_degrades_health_and_fails_ready(client: TestClient) -> None:
    app.dependency_overrides[get_session_store] = lambda: RedisSessionStore(_DownRedis())

    health = client.get("/health")
    assert health.status_code == 200
    assert health.json() == {"status": "degraded", "checks": {"session_store": "degraded"}}

    assert client.get("/ready").status_code == 503


def test_health_does_not_call_github(client: TestClient, fake_github) -> None:
    client.get("/health")
    client.get("/ready")
    assert fake_github.requests == []
