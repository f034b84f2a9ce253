"""Short-lived server-side flow sessions.

A login flow spans three browser requests (/login/github/, the callback,
/loggedin).  The state that has to survive between them (the anti-CSRF
``state`` value, then the ExchangeResult) is kept here, keyed by an opaque
random id that travels in an HttpOnly cookie.  Nothing about the flow is
put in a URL, and the access token is never stored at all.

Entries expire after SESSION_TTL_SECONDS.  A flow that takes longer than
that has to start over from /login/github/.
"""

from __future__ import annotations

import json
import logging
import secrets
import time
from typing import Any, Protocol, runtime_checkable

from redis.exceptions import RedisError

from ghlogin.core.errors import SessionStoreUnavailable
from ghlogin.db.redis import redis_pool

logger = logging.getLogger(__name__)


def new_session_id() -> str:
    return secrets.token_urlsafe(32)


@runtime_checkable
class SessionStore(Protocol):
    async def get(self, session_id: str) -> dict[str, Any] | None:
        """Return the session data, or None if absent or expired."""
        ...

    async def put(self, session_id: str, data: dict[str, Any], ttl_seconds: int) -> None:
        """Replace the session data and restart its TTL."""
        ...

    async def delete(self, session_id: str) -> None:
        ...

    async def ping(self) -> bool:
        """True when the backing store is reachable."""
        ...


class InMemorySessionStore:
    """Per-process store for local dev and tests.

    Values are round-tripped through JSON so the in-memory and Redis
    backends accept exactly the same data.
    """

    def __init__(self) -> None:
        # session_id -> (expires_at, json)
        self._store: dict[str, tuple[float, str]] = {}

    async def get(self, session_id: str) -> dict[str, Any] | None:
        entry = self._store.get(session_id)
        if entry is None:
            return None
        expires_at, raw = entry
        if expires_at <= time.monotonic():
            del self._store[session_id]
            return None
        return json.loads(raw)

    async def put(self, session_id: str, data: dict[str, Any], ttl_seconds: int) -> None:
        self._store[session_id] = (time.monotonic() + ttl_seconds, json.dumps(data))

    async def delete(self, session_id: str) -> None:
        self._store.pop(session_id, None)

    async def ping(self) -> bool:
        return True


class RedisSessionStore:
    """Redis-backed store, shared across API instances.

    A Redis outage surfaces as SessionStoreUnavailable (503), never as a
    bare 500.
    """

    _PREFIX = "session:"

    def __init__(self, redis_client) -> None:
        self._redis = redis_client

    async def get(self, session_id: str) -> dict[str, Any] | None:
        try:
            raw = await self._redis.get(f"{self._PREFIX}{session_id}")
        except RedisError as exc:
            raise _unavailable("read", exc) from exc
        if raw is None:
            return None
        return json.loads(raw)

    async def put(self, session_id: str, data: dict[str, Any], ttl_seconds: int) -> None:
        # SETEX writes value and TTL atomically; no immortal keys
        try:
            await self._redis.setex(
                f"{self._PREFIX}{session_id}", ttl_seconds, json.dumps(data)
            )
        except RedisError as exc:
            raise _unavailable("write", exc) from exc

    async def delete(self, session_id: str) -> None:
        try:
            await self._redis.delete(f"{self._PREFIX}{session_id}")
        except RedisError as exc:
            raise _unavailable("delete", exc) from exc

    async def ping(self) -> bool:
        return bool(await self._redis.ping())


def _unavailable(operation: str, exc: RedisError) -> SessionStoreUnavailable:
    logger.warning(
        "Session store %s failed  error=%s", operation, type(exc).__name__
    )
    return SessionStoreUnavailable(
        "session store is unavailable; try again shortly"
    )


# ---------------------------------------------------------------------------
# Module-level singleton — conditional on Redis availability
# ---------------------------------------------------------------------------

if redis_pool is not None:
    session_store: SessionStore = RedisSessionStore(redis_pool)
else:
    session_store = InMemorySessionStore()
