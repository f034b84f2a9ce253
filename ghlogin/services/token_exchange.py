"""Code-for-token exchange (server to server).

POST https://github.com/login/oauth/access_token
  body:    {"client_id", "client_secret", "code"}   (JSON)
  headers: Content-Type / Accept: application/json

GitHub answers an invalid or expired code with HTTP 200 and an error
payload such as ``{"error": "bad_verification_code"}``.  Treating that as
"a token that happens to be empty" would hand an unusable credential to the
profile fetch, so a body without ``access_token`` is Unauthorized here, and
a body that is not JSON at all is a DecodeError.  No retries: codes are
single-use, a second attempt with the same code cannot succeed.
"""

from __future__ import annotations

import logging

import httpx
from pydantic import BaseModel, ConfigDict, ValidationError

from ghlogin.core.errors import DecodeError, ProviderError, Unauthorized
from ghlogin.core.logging import fingerprint
from ghlogin.models.credentials import ClientCredentials
from ghlogin.models.provider import ProviderEndpoints
from ghlogin.models.token import AccessToken
from ghlogin.services.provider_http import decode_json, record_outcome, send

logger = logging.getLogger(__name__)

CALL = "token_exchange"


class TokenResponse(BaseModel):
    """Either a token grant or an OAuth error payload."""

    model_config = ConfigDict(extra="ignore")

    access_token: str | None = None
    token_type: str = "bearer"
    scope: str = ""
    error: str | None = None
    error_description: str | None = None


async def exchange_code_for_token(
    http: httpx.AsyncClient,
    code: str,
    credentials: ClientCredentials,
    endpoints: ProviderEndpoints,
) -> AccessToken:
    """Trade a one-time authorization code for an AccessToken.

    Raises:
        Unauthorized: blank code, or GitHub refused the code
        TransportError: GitHub unreachable / timed out
        ProviderError: GitHub answered with a non-2xx status
        DecodeError: the answer was not a JSON token response
    """
    if not code:
        logger.warning("GITHUB FLOW [token] FAIL: no authorization code to exchange")
        raise Unauthorized("authorization code is missing", error="missing_code")

    logger.info(
        "GITHUB FLOW [token] exchanging code  code_hash=%s client_id=%s",
        fingerprint(code),
        credentials.client_id,
        extra={"flow_step": "token", "provider_call": CALL},
    )

    response = await send(
        http,
        CALL,
        "POST",
        endpoints.token_url,
        json={
            "client_id": credentials.client_id,
            "client_secret": credentials.client_secret,
            "code": code,
        },
        headers={
            "Content-Type": "application/json",
            "Accept": "application/json",
        },
    )

    if not response.is_success:
        record_outcome(CALL, "provider_error")
        logger.warning(
            "GITHUB FLOW [token] FAIL: token endpoint returned status=%d",
            response.status_code,
        )
        raise ProviderError(
            f"GitHub token endpoint returned {response.status_code}",
            upstream_status=response.status_code,
        )

    payload = decode_json(response, CALL)
    if not isinstance(payload, dict):
        record_outcome(CALL, "decode_error")
        logger.warning("GITHUB FLOW [token] FAIL: token response is not a JSON object")
        raise DecodeError("GitHub token response is not a JSON object")

    try:
        body = TokenResponse.model_validate(payload)
    except ValidationError as exc:
        record_outcome(CALL, "decode_error")
        logger.warning("GITHUB FLOW [token] FAIL: token response has unexpected types")
        raise DecodeError("GitHub token response has unexpected field types") from exc

    if not body.access_token:
        record_outcome(CALL, "unauthorized")
        provider_error = body.error or "no_access_token"
        logger.warning(
            "GITHUB FLOW [token] FAIL: GitHub refused the code  error=%s",
            provider_error,
        )
        raise Unauthorized(
            body.error_description or "GitHub did not issue an access token",
            error=provider_error,
        )

    record_outcome(CALL, "ok")
    logger.info(
        "GITHUB FLOW [token] access token issued  token_type=%s scope=%s",
        body.token_type,
        body.scope or "<none>",
        extra={"flow_step": "token", "provider_call": CALL},
    )
    return AccessToken(value=body.access_token, token_type=body.token_type, scope=body.scope)
