from __future__ import annotations

import logging
from typing import Annotated

import httpx
from fastapi import APIRouter, Depends, Query, Request, status
from fastapi.responses import RedirectResponse

from ghlogin.api.dependencies import (
    get_provider_client,
    get_session_id,
    get_session_store,
    get_settings,
    set_session_cookie,
)
from ghlogin.core.config import Settings
from ghlogin.core.errors import OAuthFlowError, SessionStoreUnavailable, Unauthorized
from ghlogin.core.metrics import LOGIN_OUTCOMES
from ghlogin.services.authorize_service import (
    build_authorization_url,
    generate_state,
    verify_state,
)
from ghlogin.services.profile_service import fetch_exchange_result
from ghlogin.services.session_store import SessionStore, new_session_id
from ghlogin.services.token_exchange import exchange_code_for_token

# ---------------------------------------------------------------------------
# OAuth client — GitHub Authorization Code flow
#
# Endpoints:
#   GET /login/github/           — start a flow, 301 to GitHub's consent page
#   GET /login/github/callback   — code → token → profile (+ orgs) → session
#
# Per-browser states (never persisted beyond the flow session):
#   Anonymous → RedirectedToProvider → ExchangingToken
#             → Authenticated | Unauthorized
# Both outcomes are terminal; a new attempt starts at /login/github/.
# ---------------------------------------------------------------------------

logger = logging.getLogger(__name__)

router = APIRouter(tags=["github-login"])


# ========================== GET /login/github/ ============================


@router.get("/login/github/")
async def github_login(
    request: Request,
    settings: Annotated[Settings, Depends(get_settings)],
    store: Annotated[SessionStore, Depends(get_session_store)],
) -> RedirectResponse:
    # A fresh flow replaces whatever the browser had before
    previous = get_session_id(request)
    if previous is not None:
        await store.delete(previous)

    state = generate_state()
    session_id = new_session_id()
    await store.put(session_id, {"state": state}, settings.session_ttl_seconds)

    url = build_authorization_url(
        settings.endpoints.authorize_url,
        settings.credentials.client_id,
        settings.callback_url,
        settings.scopes,
        state=state,
    )
    logger.info(
        "GITHUB FLOW [authorize] redirecting to consent page  client_id=%s scopes=%s",
        settings.credentials.client_id,
        ",".join(settings.scopes),
        extra={"flow_step": "authorize"},
    )

    response = RedirectResponse(url=url, status_code=status.HTTP_301_MOVED_PERMANENTLY)
    # A 301 is cacheable; a cached one would replay a stale state
    response.headers["Cache-Control"] = "no-store"
    set_session_cookie(response, session_id, settings)
    return response


# ========================== GET /login/github/callback ====================


@router.get("/login/github/callback")
async def github_callback(
    request: Request,
    settings: Annotated[Settings, Depends(get_settings)],
    store: Annotated[SessionStore, Depends(get_session_store)],
    http: Annotated[httpx.AsyncClient, Depends(get_provider_client)],
    code: str | None = Query(None),
    state: str | None = Query(None),
    error: str | None = Query(None),
    error_description: str | None = Query(None),
) -> RedirectResponse:
    session_id = get_session_id(request)
    try:
        session = await store.get(session_id) if session_id else None

        # FAIL POINT: the user declined on GitHub's consent screen
        if error is not None:
            logger.warning("GITHUB FLOW [callback] FAIL: GitHub returned error=%s", error)
            raise Unauthorized(
                error_description or "authorization was denied on GitHub",
                error="access_denied",
            )

        # FAIL POINT: no live flow for this browser, or state was tampered with
        if session is None or not verify_state(state, session.get("state")):
            logger.warning("GITHUB FLOW [callback] FAIL: unknown flow or state mismatch")
            raise Unauthorized(
                "login flow expired or state mismatch; start again",
                error="invalid_state",
            )

        if not code:
            logger.warning("GITHUB FLOW [callback] FAIL: callback without code")
            raise Unauthorized("authorization code is missing", error="missing_code")

        logger.info("GITHUB FLOW [callback] state verified", extra={"flow_step": "callback"})

        # The token stays a local: it is used for the two fetches below and
        # dropped when this request ends.
        token = await exchange_code_for_token(
            http, code, settings.credentials, settings.endpoints
        )
        result = await fetch_exchange_result(
            http,
            token,
            settings.endpoints,
            include_organizations=settings.fetch_organizations,
        )
        await store.put(
            session_id, {"result": result.to_dict()}, settings.session_ttl_seconds
        )
    except OAuthFlowError as exc:
        LOGIN_OUTCOMES.labels(outcome=type(exc).__name__).inc()
        # With the store down there is nothing to clean up
        if session_id is not None and not isinstance(exc, SessionStoreUnavailable):
            await store.delete(session_id)
        raise

    LOGIN_OUTCOMES.labels(outcome="authenticated").inc()
    logger.info(
        "GITHUB FLOW [callback] authenticated  login=%s orgs=%s",
        result.profile.login,
        "-" if result.organizations is None else len(result.organizations),
        extra={"flow_step": "callback", "github_login": result.profile.login},
    )
    return RedirectResponse(url="/loggedin", status_code=status.HTTP_303_SEE_OTHER)
