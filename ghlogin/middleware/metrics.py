"""Prometheus metrics middleware — instruments every HTTP request.

For each request: bump ACTIVE_REQUESTS while it runs, then record
REQUEST_COUNT (method/endpoint/status) and REQUEST_DURATION.

The endpoint label is the matched route template (``/login/github/callback``),
never the raw URL.  Requests that match no route share the ``unmatched``
label, so scanners probing random paths cannot grow the series count, and
the callback's query string (which holds the one-time code) never becomes a
label.
"""

from __future__ import annotations

import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from ghlogin.core.metrics import ACTIVE_REQUESTS, REQUEST_COUNT, REQUEST_DURATION

UNMATCHED = "unmatched"

# Prometheus scrapes should not inflate the request count
_SKIP_PATHS = frozenset({"/metrics"})


def endpoint_label(request: Request) -> str:
    """Route template the router matched, or UNMATCHED.

    Only meaningful after the request went through the router, which
    records the matched route in the shared ASGI scope.
    """
    route = request.scope.get("route")
    return getattr(route, "path", None) or UNMATCHED


class MetricsMiddleware(BaseHTTPMiddleware):
    """Collect Prometheus metrics for every HTTP request."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path in _SKIP_PATHS:
            return await call_next(request)

        ACTIVE_REQUESTS.inc()
        start = time.monotonic()
        status_code = "500"  # unless the app produced a response
        try:
            response = await call_next(request)
            status_code = str(response.status_code)
            return response
        finally:
            ACTIVE_REQUESTS.dec()
            endpoint = endpoint_label(request)
            REQUEST_COUNT.labels(
                method=request.method, endpoint=endpoint, status_code=status_code
            ).inc()
            REQUEST_DURATION.labels(method=request.method, endpoint=endpoint).observe(
                time.monotonic() - start
            )
