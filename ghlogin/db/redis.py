"""Redis connection management.

When REDIS_URL is configured, flow sessions live in Redis so every API
instance sees the same session (the browser may hit instance A on
/login/github/ and instance B on the callback).  When it is unset (local
dev, tests), the session store falls back to an in-process dict and no
Redis server is needed.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from ghlogin.core.config import SETTINGS

logger = logging.getLogger(__name__)

if SETTINGS.redis_url:
    redis_pool: aioredis.Redis | None = aioredis.from_url(  # type: ignore[type-arg]
        SETTINGS.redis_url,
        decode_responses=True,
        max_connections=20,
    )
else:
    redis_pool = None


@asynccontextmanager
async def lifespan_redis():
    """Verify Redis on startup, release the pool on shutdown."""
    if redis_pool is None:
        logger.info("No REDIS_URL configured — sessions use the in-memory store")
        yield
        return

    try:
        await redis_pool.ping()  # type: ignore[misc]  # redis stubs mistype async ping as bool
        logger.info("Redis connected")
    except RedisError:
        # Start anyway; /health reports the session backend as degraded
        logger.exception("Redis connection failed on startup")

    try:
        yield
    finally:
        await redis_pool.aclose()
        logger.info("Redis connection pool closed")
