from __future__ import annotations

import os
import sys
from collections.abc import Iterator
from pathlib import Path

# Ensure repo root is on sys.path so `import ghlogin` works under pytest.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

# Settings load at import time and refuse to start without credentials;
# give the test process fake ones before anything imports ghlogin.
os.environ["APP_ENV"] = "test"
os.environ["CLIENT_ID"] = "test-client-id"
os.environ["CLIENT_SECRET"] = "test-client-secret"
os.environ["REDIS_URL"] = ""
for _name in ("CALLBACK_URL", "GITHUB_OAUTH_URL", "GITHUB_API_URL", "FETCH_ORGANIZATIONS"):
    os.environ.pop(_name, None)

import httpx  # noqa: E402
import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from ghlogin.api.dependencies import (  # noqa: E402
    get_provider_client,
    get_session_store,
)
from ghlogin.main import app  # noqa: E402
from ghlogin.services.session_store import InMemorySessionStore  # noqa: E402
from tests.fake_github import FakeGitHub  # noqa: E402

TEST_CODE = "XYZ"
TEST_TOKEN = "T"


@pytest.fixture
def fake_github() -> FakeGitHub:
    github = FakeGitHub()
    github.add_user(TEST_CODE, TEST_TOKEN)
    return github


@pytest.fixture
def provider_http(fake_github: FakeGitHub) -> httpx.AsyncClient:
    return fake_github.client()


@pytest.fixture
def session_store() -> InMemorySessionStore:
    return InMemorySessionStore()


@pytest.fixture
def client(
    provider_http: httpx.AsyncClient, session_store: InMemorySessionStore
) -> Iterator[TestClient]:
    """TestClient wired to the fake GitHub and a fresh session store.

    Redirects are not followed so each hop of the flow can be asserted.
    """
    app.dependency_overrides[get_provider_client] = lambda: provider_http
    app.dependency_overrides[get_session_store] = lambda: session_store
    yield TestClient(app, follow_redirects=False)
    app.dependency_overrides.clear()


def start_login(client: TestClient) -> str:
    """GET /login/github/ and return the state GitHub would echo back."""
    from urllib.parse import parse_qs, urlparse

    resp = client.get("/login/github/")
    assert resp.status_code == 301
    query = parse_qs(urlparse(resp.headers["location"]).query)
    return query["state"][0]


def complete_login(client: TestClient, code: str = TEST_CODE) -> httpx.Response:
    """Run the flow up to and including the callback."""
    state = start_login(client)
    return client.get("/login/github/callback", params={"code": code, "state": state})
