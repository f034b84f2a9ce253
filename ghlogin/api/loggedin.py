"""Result page — shows what the callback stored in the flow session.

No result (never logged in, flow failed, session expired) → 401 with a JSON
error body.  Otherwise the ExchangeResult is returned pretty-printed with
tab indentation.
"""

from __future__ import annotations

import json
from typing import Annotated, Any

from fastapi import APIRouter, Depends, Request, Response, status
from fastapi.responses import JSONResponse

from ghlogin.api.dependencies import get_session_id, get_session_store
from ghlogin.services.session_store import SessionStore

router = APIRouter(tags=["github-login"])


def pretty_json(document: Any) -> str:
    # Key order is kept as GitHub sent it, so re-indenting is stable
    return json.dumps(document, indent="\t", ensure_ascii=False)


@router.get("/loggedin", response_model=None)
async def loggedin(
    request: Request,
    store: Annotated[SessionStore, Depends(get_session_store)],
) -> Response:
    session_id = get_session_id(request)
    session = await store.get(session_id) if session_id else None
    result = session.get("result") if session else None

    if result is None:
        return JSONResponse(
            {"error": "Unauthorized"}, status_code=status.HTTP_401_UNAUTHORIZED
        )

    return Response(
        content=pretty_json(result),
        media_type="application/json",
        headers={"Cache-Control": "no-store"},
    )
