from __future__ import annotations

import hmac
import secrets
from collections.abc import Iterable
from urllib.parse import urlencode

# Authorization-request side of the flow, used by GET /login/github/ in
# api/github_login.py.  Pure URL construction, no network.

# GitHub accepts scopes separated by commas or spaces; we send commas so the
# parameter reads the same as the scope string GitHub echoes back.
SCOPE_SEPARATOR = ","


def build_authorization_url(
    authorize_url: str,
    client_id: str,
    callback_url: str,
    scopes: Iterable[str] = (),
    state: str | None = None,
) -> str:
    """Build the consent-screen URL the browser is redirected to.

    Parameter values are form-encoded, so the callback URL arrives at
    GitHub escaped and decodes back to exactly ``callback_url``.  ``scope``
    is left off entirely when no scopes are requested.
    """
    if not client_id or not client_id.strip():
        raise ValueError("client_id is required to build an authorization URL")

    params = {"client_id": client_id, "redirect_uri": callback_url}
    scope = SCOPE_SEPARATOR.join(s for s in scopes if s)
    if scope:
        params["scope"] = scope
    if state is not None:
        params["state"] = state
    return f"{authorize_url}?{urlencode(params)}"


def generate_state() -> str:
    # 32 random bytes, same entropy as a PKCE verifier
    return secrets.token_urlsafe(32)


def verify_state(received: str | None, expected: str | None) -> bool:
    """Constant-time comparison of the echoed ``state`` with the stored one."""
    if not received or not expected:
        return False
    return hmac.compare_digest(received, expected)
