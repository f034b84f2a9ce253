from __future__ import annotations

from fastapi import APIRouter
from fastapi.responses import HTMLResponse

router = APIRouter(tags=["home"])

_HOME_HTML = '<a href="/login/github/">LOGIN</a>'


@router.get("/", response_class=HTMLResponse)
def home() -> HTMLResponse:
    """Entry point of the flow: a single link that starts the GitHub login."""
    return HTMLResponse(_HOME_HTML)
