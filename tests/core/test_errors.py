from __future__ import annotations

import pytest

from ghlogin.core.errors import (
    ConfigurationError,
    DecodeError,
    OAuthFlowError,
    ProviderError,
    SessionStoreUnavailable,
    TransportError,
    Unauthorized,
)


@pytest.mark.parametrize(
    ("exc", "status", "error"),
    [
        (Unauthorized("no token"), 401, "unauthorized"),
        (TransportError("refused"), 502, "provider_unreachable"),
        (TransportError("slow", timeout=True), 504, "provider_timeout"),
        (DecodeError("garbage"), 502, "provider_malformed_response"),
        (ProviderError("boom", upstream_status=500), 502, "provider_error"),
        (SessionStoreUnavailable("redis down"), 503, "session_store_unavailable"),
    ],
)
def test_flow_errors_carry_status_and_code(exc: OAuthFlowError, status: int, error: str) -> None:
    assert isinstance(exc, OAuthFlowError)
    assert exc.status_code == status
    assert exc.to_body() == {"error": error, "detail": exc.detail}


def test_error_code_can_be_specialized() -> None:
    exc = Unauthorized("The code passed is incorrect or expired.", error="bad_verification_code")
    assert exc.to_body() == {
        "error": "bad_verification_code",
        "detail": "The code passed is incorrect or expired.",
    }
    # The class default is untouched
    assert Unauthorized("x").error == "unauthorized"


def test_timeout_flag_does_not_leak_to_class() -> None:
    TransportError("slow", timeout=True)
    assert TransportError.status_code == 502


def test_configuration_error_is_a_value_error() -> None:
    assert issubclass(ConfigurationError, ValueError)
    assert not issubclass(ConfigurationError, OAuthFlowError)
