"""FastAPI dependencies for the login routes.

The routes never reach for module globals directly; they ask for settings,
the provider HTTP client and the session store through these functions.
Tests swap any of them via ``app.dependency_overrides`` (fake credentials,
an httpx.MockTransport standing in for GitHub, a fresh session store).
"""

from __future__ import annotations

import logging

import httpx
from fastapi import Request, Response

from ghlogin.core.config import SETTINGS, Settings
from ghlogin.services.session_store import SessionStore, session_store

logger = logging.getLogger(__name__)

SESSION_COOKIE = "session"


def get_settings() -> Settings:
    return SETTINGS


def get_provider_client(request: Request) -> httpx.AsyncClient:
    """The client opened by the app lifespan (see ``lifespan_http``)."""
    return request.app.state.provider_client


def get_session_store() -> SessionStore:
    return session_store


def get_session_id(request: Request) -> str | None:
    """Return the flow session id from the cookie, or None."""
    return request.cookies.get(SESSION_COOKIE) or None


def set_session_cookie(response: Response, session_id: str, settings: Settings) -> None:
    response.set_cookie(
        key=SESSION_COOKIE,
        value=session_id,
        httponly=True,
        # Lax still sends the cookie on the top-level GET redirect back
        # from github.com, which is all the callback needs.
        samesite="lax",
        secure=settings.is_prod,
        path="/",
        max_age=settings.session_ttl_seconds,
    )


def clear_session_cookie(response: Response) -> None:
    response.delete_cookie(SESSION_COOKIE, path="/")
