"""Request context middleware — one ID per request, one summary log line.

Several browsers can be mid-flow at once, and their log lines interleave.
The request ID ties every line of one callback (exchange, profile fetch,
org fetch) back together.

The ID lives in a ContextVar rather than a thread-local: concurrent
requests share the event-loop thread, but each task has its own context.

Only the URL path is logged.  The callback query string holds the one-time
authorization code and must stay out of the logs.
"""

from __future__ import annotations

import logging
import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from ghlogin.core.logging import request_id_var

logger = logging.getLogger(__name__)


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Assign a request ID, time the request, and log its completion.

    1. Reuse the client's X-Request-ID header or generate a UUID
    2. Store it in request_id_var
    3. Log method, path, status and duration on completion
    4. Echo X-Request-ID on the response
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        req_id = request.headers.get("x-request-id") or str(uuid.uuid4())
        request_id_var.set(req_id)

        start = time.monotonic()
        response = await call_next(request)
        duration_ms = round((time.monotonic() - start) * 1000, 1)

        logger.info(
            "%s %s → %d (%.1fms)",
            request.method,
            request.url.path,
            response.status_code,
            duration_ms,
            extra={
                "request_id": req_id,
                "method": request.method,
                "path": request.url.path,
                "status_code": response.status_code,
                "duration_ms": duration_ms,
            },
        )

        response.headers["X-Request-ID"] = req_id

        return response
