"""Code-for-token exchange against a fake token endpoint.

The services are async; like the rest of the suite we drive them with
asyncio.run rather than an async test plugin.
"""

from __future__ import annotations

import asyncio
import json

import httpx
import pytest

from ghlogin.core.errors import DecodeError, ProviderError, TransportError, Unauthorized
from ghlogin.models.credentials import ClientCredentials
from ghlogin.models.provider import ProviderEndpoints
from ghlogin.models.token import AccessToken
from ghlogin.services.token_exchange import exchange_code_for_token

CREDS = ClientCredentials(client_id="cid", client_secret="csecret")
ENDPOINTS = ProviderEndpoints()


def _exchange(handler, code: str = "XYZ") -> AccessToken:
    async def run() -> AccessToken:
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
            return await exchange_code_for_token(http, code, CREDS, ENDPOINTS)

    return asyncio.run(run())


def _respond(*args, **kwargs):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(*args, **kwargs)

    return handler


def test_returns_access_token_from_grant() -> None:
    token = _exchange(
        _respond(200, json={"access_token": "abc123", "token_type": "bearer", "scope": "user"})
    )
    assert token.value == "abc123"
    assert token.token_type == "bearer"
    assert token.scope == "user"


def test_request_shape() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"access_token": "abc123"})

    _exchange(handler, code="the-code")

    (request,) = seen
    assert request.method == "POST"
    assert str(request.url) == "https://github.com/login/oauth/access_token"
    assert request.headers["content-type"] == "application/json"
    assert request.headers["accept"] == "application/json"
    assert json.loads(request.content) == {
        "client_id": "cid",
        "client_secret": "csecret",
        "code": "the-code",
    }


def test_empty_scope_is_still_a_valid_token() -> None:
    token = _exchange(
        _respond(200, json={"access_token": "abc123", "token_type": "bearer", "scope": ""})
    )
    assert token.value == "abc123"
    assert token.scopes == ()


def test_error_payload_is_unauthorized_not_empty_token() -> None:
    handler = _respond(
        200,
        json={
            "error": "bad_verification_code",
            "error_description": "The code passed is incorrect or expired.",
        },
    )
    with pytest.raises(Unauthorized) as excinfo:
        _exchange(handler)
    assert excinfo.value.error == "bad_verification_code"
    assert excinfo.value.status_code == 401
    assert "incorrect or expired" in excinfo.value.detail


@pytest.mark.parametrize("payload", [{}, {"access_token": ""}, {"access_token": None}])
def test_missing_or_empty_access_token_is_unauthorized(payload: dict) -> None:
    with pytest.raises(Unauthorized):
        _exchange(_respond(200, json=payload))


def test_malformed_body_is_decode_error() -> None:
    with pytest.raises(DecodeError):
        _exchange(_respond(200, content=b"access_token=abc&scope=user"))


def test_non_object_body_is_decode_error() -> None:
    with pytest.raises(DecodeError):
        _exchange(_respond(200, json=["abc123"]))


def test_wrong_field_type_is_decode_error() -> None:
    with pytest.raises(DecodeError):
        _exchange(_respond(200, json={"access_token": 12345}))


def test_http_error_status_is_provider_error() -> None:
    with pytest.raises(ProviderError) as excinfo:
        _exchange(_respond(503, text="unavailable"))
    assert excinfo.value.upstream_status == 503
    assert excinfo.value.status_code == 502


def test_blank_code_is_rejected_without_a_request() -> None:
    calls: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(200, json={"access_token": "abc123"})

    with pytest.raises(Unauthorized) as excinfo:
        _exchange(handler, code="")
    assert excinfo.value.error == "missing_code"
    assert calls == []


def test_connection_failure_is_transport_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("name resolution failed", request=request)

    with pytest.raises(TransportError) as excinfo:
        _exchange(handler)
    assert excinfo.value.status_code == 502
    assert excinfo.value.error == "provider_unreachable"


def test_timeout_is_transport_error_with_504() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    with pytest.raises(TransportError) as excinfo:
        _exchange(handler)
    assert excinfo.value.status_code == 504
    assert excinfo.value.error == "provider_timeout"


def test_token_value_hidden_from_repr() -> None:
    token = AccessToken(value="gho_supersecret", scope="user")
    assert "gho_supersecret" not in repr(token)
