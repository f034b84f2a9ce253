from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class ProviderEndpoints:
    """Where the provider lives.

    GitHub splits OAuth (github.com) from the REST API (api.github.com);
    both bases are configurable so GitHub Enterprise hosts work too.
    """

    oauth_base_url: str = "https://github.com"
    api_base_url: str = "https://api.github.com"

    @property
    def authorize_url(self) -> str:
        return f"{self.oauth_base_url.rstrip('/')}/login/oauth/authorize"

    @property
    def token_url(self) -> str:
        return f"{self.oauth_base_url.rstrip('/')}/login/oauth/access_token"

    @property
    def user_url(self) -> str:
        return f"{self.api_base_url.rstrip('/')}/user"

    @property
    def user_orgs_url(self) -> str:
        return f"{self.api_base_url.rstrip('/')}/user/orgs"
