from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True, slots=True)
class UserProfile:
    """The ``GET /user`` document, passed through untouched.

    ``raw`` is the response body verbatim; ``document`` is the same body
    decoded.  No schema is imposed; the shape belongs to GitHub.
    """

    raw: str
    document: Any

    @property
    def login(self) -> str | None:
        if isinstance(self.document, dict):
            login = self.document.get("login")
            return login if isinstance(login, str) else None
        return None


@dataclass(frozen=True, slots=True)
class ExchangeResult:
    """Combined outcome of a successful callback.

    ``organizations`` is None when the deployment does not fetch
    organizations, which is not the same thing as an empty membership list.
    """

    profile: UserProfile
    organizations: tuple[str, ...] | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "githubData": self.profile.document,
            "githubOrgs": (
                list(self.organizations) if self.organizations is not None else None
            ),
        }
