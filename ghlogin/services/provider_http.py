"""Outbound HTTP to GitHub.

One ``httpx.AsyncClient`` per app lifespan, kept on ``app.state``:
connections to github.com / api.github.com are pooled and reused across
requests.  The client holds no per-request state, so sharing it is safe.

Every call goes through ``send()``, which:
  - applies the configured timeout (GitHub is an external dependency and
    an unbounded hang would pin the request forever)
  - maps httpx transport failures onto TransportError
  - records provider_requests_total / provider_request_duration_seconds

``decode_json()`` is the single JSON boundary: an undecodable body is a
DecodeError, never "no data".
"""

from __future__ import annotations

import logging
import time
from contextlib import asynccontextmanager
from typing import Any

import httpx
from fastapi import FastAPI

from ghlogin.core.config import SETTINGS
from ghlogin.core.errors import DecodeError, TransportError
from ghlogin.core.metrics import PROVIDER_DURATION, PROVIDER_REQUESTS

logger = logging.getLogger(__name__)

USER_AGENT = "github-login"


def new_provider_client() -> httpx.AsyncClient:
    return httpx.AsyncClient(
        timeout=httpx.Timeout(SETTINGS.provider_timeout_seconds),
        headers={"User-Agent": USER_AGENT},
    )


@asynccontextmanager
async def lifespan_http(app: FastAPI):
    """Open a client for this app lifespan, close its pool on shutdown.

    A fresh client per lifespan, so a restarted app never sends through
    a client an earlier shutdown already closed.
    """
    app.state.provider_client = new_provider_client()
    try:
        yield
    finally:
        await app.state.provider_client.aclose()
        logger.info("Provider HTTP client closed")


def record_outcome(call: str, outcome: str) -> None:
    PROVIDER_REQUESTS.labels(call=call, outcome=outcome).inc()


async def send(
    http: httpx.AsyncClient,
    call: str,
    method: str,
    url: str,
    **kwargs: Any,
) -> httpx.Response:
    """Issue one request to the provider; raise TransportError on failure."""
    start = time.monotonic()
    try:
        return await http.request(method, url, **kwargs)
    except httpx.TimeoutException as exc:
        record_outcome(call, "transport_error")
        logger.warning(
            "GitHub %s call timed out  error=%s",
            call,
            type(exc).__name__,
            extra={"provider_call": call},
        )
        raise TransportError(f"GitHub {call} call timed out", timeout=True) from exc
    except httpx.RequestError as exc:
        record_outcome(call, "transport_error")
        logger.warning(
            "GitHub %s call failed  error=%s",
            call,
            type(exc).__name__,
            extra={"provider_call": call},
        )
        raise TransportError(f"Could not reach GitHub for {call}") from exc
    finally:
        PROVIDER_DURATION.labels(call=call).observe(time.monotonic() - start)


def decode_json(response: httpx.Response, call: str) -> Any:
    """Decode a provider body, or raise DecodeError."""
    try:
        return response.json()
    except ValueError as exc:
        record_outcome(call, "decode_error")
        logger.warning(
            "GitHub %s returned a body that is not JSON  status=%d bytes=%d",
            call,
            response.status_code,
            len(response.content),
            extra={"provider_call": call},
        )
        raise DecodeError(f"GitHub {call} response is not valid JSON") from exc
