"""Error taxonomy for the GitHub login flow.

Two families:

  ConfigurationError — raised once, at startup, when required settings are
    missing or malformed.  The process must not start serving.

  OAuthFlowError — request-scoped failures.  Each subclass carries the HTTP
    status and a machine-readable ``error`` code; the exception handler in
    ``ghlogin.main`` turns them into ``{"error": ..., "detail": ...}``.
"""

from __future__ import annotations


class ConfigurationError(ValueError):
    """Required configuration is missing or invalid."""


class OAuthFlowError(Exception):
    status_code = 500
    error = "internal_error"

    def __init__(self, detail: str, *, error: str | None = None) -> None:
        super().__init__(detail)
        self.detail = detail
        if error is not None:
            self.error = error

    def to_body(self) -> dict[str, str]:
        return {"error": self.error, "detail": self.detail}


class Unauthorized(OAuthFlowError):
    """No usable access token, or the provider denied the request."""

    status_code = 401
    error = "unauthorized"


class TransportError(OAuthFlowError):
    """DNS, connection or timeout failure talking to the provider."""

    status_code = 502
    error = "provider_unreachable"

    def __init__(self, detail: str, *, timeout: bool = False) -> None:
        super().__init__(detail)
        if timeout:
            self.status_code = 504
            self.error = "provider_timeout"


class DecodeError(OAuthFlowError):
    """The provider answered with a body we could not decode."""

    status_code = 502
    error = "provider_malformed_response"


class ProviderError(OAuthFlowError):
    """The provider answered with an unexpected HTTP status."""

    status_code = 502
    error = "provider_error"

    def __init__(self, detail: str, *, upstream_status: int) -> None:
        super().__init__(detail)
        self.upstream_status = upstream_status


class SessionStoreUnavailable(OAuthFlowError):
    """The flow session backend (Redis) could not be reached."""

    status_code = 503
    error = "session_store_unavailable"
