"""Demo: walk the GitHub login flow using FastAPI TestClient.

GitHub is simulated with an httpx.MockTransport, so no OAuth app or network
access is needed.

Run with:
    python scripts/demo_login_flow.py
"""

from __future__ import annotations

import os

# Settings are read at import time
os.environ.setdefault("CLIENT_ID", "demo-client-id")
os.environ.setdefault("CLIENT_SECRET", "demo-client-secret")
os.environ.setdefault("LOG_LEVEL", "warning")

import json  # noqa: E402
from urllib.parse import parse_qs, urlparse  # noqa: E402

import httpx  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from ghlogin.api.dependencies import get_provider_client  # noqa: E402
from ghlogin.main import app  # noqa: E402

DEMO_CODE = "demo-code"
DEMO_TOKEN = "gho_demo"


def _github(request: httpx.Request) -> httpx.Response:
    if request.url.path == "/login/oauth/access_token":
        if json.loads(request.content).get("code") != DEMO_CODE:
            return httpx.Response(
                200,
                json={
                    "error": "bad_verification_code",
                    "error_description": "The code passed is incorrect or expired.",
                },
            )
        return httpx.Response(
            200,
            json={"access_token": DEMO_TOKEN, "token_type": "bearer", "scope": "read:org,user"},
        )
    if request.headers.get("authorization") != f"token {DEMO_TOKEN}":
        return httpx.Response(401, json={"message": "Bad credentials"})
    if request.url.path == "/user":
        return httpx.Response(200, json={"login": "octocat", "id": 583231})
    if request.url.path == "/user/orgs":
        return httpx.Response(200, json=[{"login": "github"}, {"login": "octo-org"}])
    return httpx.Response(404, json={"message": "Not Found"})


def main() -> None:
    github = httpx.AsyncClient(transport=httpx.MockTransport(_github))
    app.dependency_overrides[get_provider_client] = lambda: github
    client = TestClient(app, follow_redirects=False)

    # ── Step 1: GET / ───────────────────────────────────────────────
    r = client.get("/")
    print(f"1. GET  /                        → {r.status_code}  {r.text}")

    # ── Step 2: GET /loggedin before logging in ─────────────────────
    r = client.get("/loggedin")
    print(f"2. GET  /loggedin (anonymous)    → {r.status_code}  {r.json()}")

    # ── Step 3: GET /login/github/ ──────────────────────────────────
    r = client.get("/login/github/")
    location = urlparse(r.headers["location"])
    query = parse_qs(location.query)
    state = query["state"][0]
    print(
        f"3. GET  /login/github/           → {r.status_code}  "
        f"{location.netloc}{location.path}  scope={query['scope'][0]}"
    )

    # ── Step 4: callback with a bad code ────────────────────────────
    r = client.get("/login/github/callback", params={"code": "stale", "state": state})
    print(f"4. GET  callback (bad code)      → {r.status_code}  {r.json()['error']}")

    # ── Step 5: new flow, good code ─────────────────────────────────
    r = client.get("/login/github/")
    state = parse_qs(urlparse(r.headers["location"]).query)["state"][0]
    r = client.get("/login/github/callback", params={"code": DEMO_CODE, "state": state})
    print(f"5. GET  callback (good code)     → {r.status_code}  Location: {r.headers['location']}")

    # ── Step 6: GET /loggedin ───────────────────────────────────────
    r = client.get("/loggedin")
    print(f"6. GET  /loggedin                → {r.status_code}")
    print(r.text)

    # ── Step 7: POST /logout ────────────────────────────────────────
    r = client.post("/logout")
    print(f"7. POST /logout                  → {r.status_code}")
    r = client.get("/loggedin")
    print(f"8. GET  /loggedin (after logout) → {r.status_code}")

    app.dependency_overrides.clear()
    print("\n✓ Full GitHub login flow completed successfully.")


if __name__ == "__main__":
    main()
