from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True, slots=True)
class AccessToken:
    """Bearer credential returned by the code-for-token exchange.

    Lives only for the callback request that obtained it.  Never stored in
    the session, never logged: ``value`` is hidden from repr.
    """

    value: str = field(repr=False)
    token_type: str = "bearer"
    scope: str = ""

    @property
    def scopes(self) -> tuple[str, ...]:
        # GitHub reports granted scopes comma-separated
        return tuple(s for s in self.scope.split(",") if s)

    def authorization_header(self) -> dict[str, str]:
        return {"Authorization": f"token {self.value}"}
