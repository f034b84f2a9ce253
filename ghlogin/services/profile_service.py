"""Authenticated resource retrieval.

GET https://api.github.com/user       → UserProfile (passed through)
GET https://api.github.com/user/orgs  → organization logins, in order

Both calls need a real token.  An empty token is rejected here rather than
sent to GitHub to be refused: the authorization decision is ours to make.
"""

from __future__ import annotations

import asyncio
import logging

import httpx

from ghlogin.core.errors import DecodeError, ProviderError, Unauthorized
from ghlogin.models.profile import ExchangeResult, UserProfile
from ghlogin.models.provider import ProviderEndpoints
from ghlogin.models.token import AccessToken
from ghlogin.services.provider_http import decode_json, record_outcome, send

logger = logging.getLogger(__name__)

GITHUB_MEDIA_TYPE = "application/vnd.github+json"


def _require_token(token: AccessToken | None, call: str) -> AccessToken:
    if token is None or not token.value or not token.value.strip():
        logger.warning("GITHUB FLOW [%s] FAIL: no access token, request not sent", call)
        raise Unauthorized("no access token", error="missing_access_token")
    return token


async def _get(
    http: httpx.AsyncClient, call: str, url: str, token: AccessToken
) -> httpx.Response:
    headers = {**token.authorization_header(), "Accept": GITHUB_MEDIA_TYPE}
    response = await send(http, call, "GET", url, headers=headers)

    if response.status_code in (401, 403):
        record_outcome(call, "unauthorized")
        logger.warning(
            "GITHUB FLOW [%s] FAIL: GitHub denied the request  status=%d",
            call,
            response.status_code,
        )
        raise Unauthorized(
            f"GitHub denied access to {call} ({response.status_code})",
            error="provider_denied",
        )
    if not response.is_success:
        record_outcome(call, "provider_error")
        logger.warning(
            "GITHUB FLOW [%s] FAIL: unexpected status=%d", call, response.status_code
        )
        raise ProviderError(
            f"GitHub {call} returned {response.status_code}",
            upstream_status=response.status_code,
        )
    return response


async def fetch_profile(
    http: httpx.AsyncClient, token: AccessToken | None, endpoints: ProviderEndpoints
) -> UserProfile:
    """Fetch ``/user`` and return it verbatim alongside its decoded form."""
    call = "user"
    token = _require_token(token, call)
    response = await _get(http, call, endpoints.user_url, token)
    document = decode_json(response, call)

    record_outcome(call, "ok")
    profile = UserProfile(raw=response.text, document=document)
    logger.info(
        "GITHUB FLOW [user] profile fetched  login=%s",
        profile.login,
        extra={"flow_step": "user", "provider_call": call, "github_login": profile.login},
    )
    return profile


async def fetch_organizations(
    http: httpx.AsyncClient, token: AccessToken | None, endpoints: ProviderEndpoints
) -> list[str]:
    """Fetch ``/user/orgs`` and project each entry to its ``login``.

    An empty array is a user with no organizations.  Anything that is not
    an array of objects with a string ``login`` is a DecodeError.
    """
    call = "user_orgs"
    token = _require_token(token, call)
    response = await _get(http, call, endpoints.user_orgs_url, token)
    payload = decode_json(response, call)

    if not isinstance(payload, list):
        record_outcome(call, "decode_error")
        raise DecodeError("GitHub organization list is not a JSON array")

    logins: list[str] = []
    for entry in payload:
        login = entry.get("login") if isinstance(entry, dict) else None
        if not isinstance(login, str):
            record_outcome(call, "decode_error")
            raise DecodeError("GitHub organization entry has no login")
        logins.append(login)

    record_outcome(call, "ok")
    logger.info(
        "GITHUB FLOW [user_orgs] organizations fetched  count=%d",
        len(logins),
        extra={"flow_step": "user_orgs", "provider_call": call},
    )
    return logins


async def fetch_exchange_result(
    http: httpx.AsyncClient,
    token: AccessToken | None,
    endpoints: ProviderEndpoints,
    *,
    include_organizations: bool = True,
) -> ExchangeResult:
    """Fetch the profile (and organizations) and combine them.

    The two calls are independent and run concurrently.  The result is only
    built once both have succeeded; the first failure propagates.
    """
    token = _require_token(token, "user")

    if not include_organizations:
        profile = await fetch_profile(http, token, endpoints)
        return ExchangeResult(profile=profile, organizations=None)

    profile_task = asyncio.ensure_future(fetch_profile(http, token, endpoints))
    orgs_task = asyncio.ensure_future(fetch_organizations(http, token, endpoints))
    try:
        profile, organizations = await asyncio.gather(profile_task, orgs_task)
    except BaseException:
        # gather leaves the sibling running when one fails; don't leak it
        for task in (profile_task, orgs_task):
            task.cancel()
        raise
    return ExchangeResult(profile=profile, organizations=tuple(organizations))
