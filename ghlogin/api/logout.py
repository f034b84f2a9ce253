"""Logout — forget the flow session.

There is no token to revoke: the access token never outlived the callback
request.  Dropping the session removes the stored profile result, and the
browser is back to Anonymous.
"""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Request, Response

from ghlogin.api.dependencies import (
    clear_session_cookie,
    get_session_id,
    get_session_store,
)
from ghlogin.services.session_store import SessionStore

logger = logging.getLogger(__name__)

router = APIRouter(tags=["github-login"])


@router.post("/logout", status_code=204)
async def logout(
    request: Request,
    store: Annotated[SessionStore, Depends(get_session_store)],
) -> Response:
    # Idempotent: no cookie, or an already-expired session, is still a 204
    session_id = get_session_id(request)
    if session_id is not None:
        await store.delete(session_id)
        logger.info("Flow session cleared")

    response = Response(status_code=204)
    clear_session_cookie(response)
    return response
