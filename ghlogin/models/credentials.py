from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True, slots=True)
class ClientCredentials:
    """OAuth app credentials issued by GitHub.

    Loaded once at startup (see core/config.py) and passed explicitly to the
    token exchange.  The secret is excluded from repr so it cannot leak into
    logs or tracebacks by accident.
    """

    client_id: str
    client_secret: str = field(repr=False)
