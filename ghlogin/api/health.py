"""Health and readiness endpoints.

  /health (liveness) — the process answers.  Always 200; the body says
    whether the session backend is reachable ("ok" or "degraded").
  /ready (readiness) — can this instance run a login flow?  503 when the
    session store is down, because a callback landing here could not find
    its flow state.

GitHub itself is not probed: its outages show up in
provider_requests_total, and restarting or de-routing this service would
not fix them.
"""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Response

from ghlogin.api.dependencies import get_session_store
from ghlogin.services.session_store import InMemorySessionStore, SessionStore

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


async def _session_store_status(store: SessionStore) -> str:
    if isinstance(store, InMemorySessionStore):
        return "in_memory"
    try:
        return "ok" if await store.ping() else "degraded"
    except Exception:
        logger.warning("Session store ping failed", exc_info=True)
        return "degraded"


@router.get("/health")
async def health(
    store: Annotated[SessionStore, Depends(get_session_store)],
) -> dict:
    session_status = await _session_store_status(store)
    return {
        "status": "degraded" if session_status == "degraded" else "ok",
        "checks": {"session_store": session_status},
    }


@router.get("/ready")
async def ready(
    store: Annotated[SessionStore, Depends(get_session_store)],
) -> Response:
    if await _session_store_status(store) == "degraded":
        return Response(status_code=503)
    return Response(status_code=200)
