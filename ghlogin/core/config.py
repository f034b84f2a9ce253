from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Literal

from ghlogin.core.errors import ConfigurationError
from ghlogin.models.credentials import ClientCredentials
from ghlogin.models.provider import ProviderEndpoints

AppEnv = Literal["dev", "test", "prod"]
LogLevel = Literal["debug", "info", "warning", "error"]

DEFAULT_CALLBACK_URL = "http://localhost:3000/login/github/callback"

_TRUE = ("1", "true", "yes", "on")
_FALSE = ("0", "false", "no", "off")


def _getenv(name: str, default: str) -> str:
    # Centralize env access so it's easy to extend later (type casting, required vars)
    return os.environ.get(name, default).strip()


def _getenv_bool(name: str, default: bool) -> bool:
    raw = _getenv(name, "true" if default else "false").lower()
    if raw in _TRUE:
        return True
    if raw in _FALSE:
        return False
    raise ConfigurationError(f"{name} must be a boolean (got {raw!r})")


def _getenv_positive(
    name: str, default: str, cast: type[int] | type[float]
) -> int | float:
    raw = _getenv(name, default)
    try:
        value = cast(raw)
    except ValueError:
        raise ConfigurationError(
            f"{name} must be a {cast.__name__} (got {raw!r})"
        ) from None
    if value <= 0:
        raise ConfigurationError(f"{name} must be greater than zero (got {raw!r})")
    return value


@dataclass(frozen=True)
class Settings:
    app_env: AppEnv
    log_level: LogLevel
    log_json: bool
    host: str
    port: int
    redis_url: str | None
    credentials: ClientCredentials
    callback_url: str = DEFAULT_CALLBACK_URL
    endpoints: ProviderEndpoints = field(default_factory=ProviderEndpoints)
    fetch_organizations: bool = True
    provider_timeout_seconds: float = 10.0
    session_ttl_seconds: int = 600

    @property
    def is_dev(self) -> bool:
        return self.app_env == "dev"

    @property
    def is_test(self) -> bool:
        return self.app_env == "test"

    @property
    def is_prod(self) -> bool:
        return self.app_env == "prod"

    @property
    def scopes(self) -> tuple[str, ...]:
        # read:org is only worth asking for when we actually list orgs
        if self.fetch_organizations:
            return ("user", "read:org")
        return ("user",)


def load_credentials() -> ClientCredentials:
    """Read CLIENT_ID / CLIENT_SECRET.  Both are required and non-blank."""
    client_id = _getenv("CLIENT_ID", "")
    client_secret = _getenv("CLIENT_SECRET", "")
    missing = [
        name
        for name, value in (("CLIENT_ID", client_id), ("CLIENT_SECRET", client_secret))
        if not value
    ]
    if missing:
        raise ConfigurationError(
            f"GitHub OAuth app credentials not configured: {', '.join(missing)} "
            "must be set in the environment"
        )
    return ClientCredentials(client_id=client_id, client_secret=client_secret)


def load_settings() -> Settings:
    app_env_raw = _getenv("APP_ENV", "dev").lower()
    log_level_raw = _getenv("LOG_LEVEL", "info").lower()
    port_raw = _getenv("PORT", "3000")

    if app_env_raw not in ("dev", "test", "prod"):
        raise ConfigurationError(
            f"APP_ENV must be dev|test|prod (got {app_env_raw!r})"
        )

    if log_level_raw not in ("debug", "info", "warning", "error"):
        raise ConfigurationError(
            f"LOG_LEVEL must be debug|info|warning|error (got {log_level_raw!r})"
        )

    try:
        port = int(port_raw)
    except ValueError:
        raise ConfigurationError(f"PORT must be an integer (got {port_raw!r})") from None

    callback_url = _getenv("CALLBACK_URL", DEFAULT_CALLBACK_URL)
    if not callback_url.startswith(("http://", "https://")):
        raise ConfigurationError(
            f"CALLBACK_URL must be an absolute http(s) URL (got {callback_url!r})"
        )

    endpoints = ProviderEndpoints(
        oauth_base_url=_getenv("GITHUB_OAUTH_URL", "https://github.com"),
        api_base_url=_getenv("GITHUB_API_URL", "https://api.github.com"),
    )

    return Settings(  # type: ignore[arg-type]
        app_env=app_env_raw,
        log_level=log_level_raw,
        log_json=_getenv_bool("LOG_JSON", False),
        host=_getenv("HOST", "0.0.0.0"),
        port=port,
        redis_url=_getenv("REDIS_URL", "") or None,
        credentials=load_credentials(),
        callback_url=callback_url,
        endpoints=endpoints,
        fetch_organizations=_getenv_bool("FETCH_ORGANIZATIONS", True),
        provider_timeout_seconds=_getenv_positive(
            "PROVIDER_TIMEOUT_SECONDS", "10", float
        ),
        session_ttl_seconds=_getenv_positive("SESSION_TTL_SECONDS", "600", int),
    )


# Module-level singleton so imports are cheap.  Raises ConfigurationError
# when the OAuth app credentials are absent; __main__ reports it and exits.
SETTINGS = load_settings()
