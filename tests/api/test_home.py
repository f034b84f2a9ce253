from __future__ import annotations

from fastapi.testclient import TestClient


def test_home_links_to_github_login(client: TestClient) -> None:
    resp = client.get("/")
    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("text/html")
    assert resp.text == '<a href="/login/github/">LOGIN</a>'


def test_home_does_not_start_a_flow(client: TestClient, session_store) -> None:
    resp = client.get("/")
    assert "set-cookie" not in resp.headers
    assert session_store._store == {}
