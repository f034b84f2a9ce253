from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from ghlogin.api.github_login import router as github_login_router
from ghlogin.api.health import router as health_router
from ghlogin.api.home import router as home_router
from ghlogin.api.loggedin import router as loggedin_router
from ghlogin.api.logout import router as logout_router
from ghlogin.api.metrics_endpoint import router as metrics_router
from ghlogin.core.config import SETTINGS
from ghlogin.core.errors import OAuthFlowError
from ghlogin.core.logging import setup_logging
from ghlogin.db.redis import lifespan_redis
from ghlogin.middleware.metrics import MetricsMiddleware
from ghlogin.middleware.request_context import RequestContextMiddleware
from ghlogin.services.provider_http import lifespan_http

# Configure logging before anything else runs.
setup_logging(SETTINGS.log_level, json_format=SETTINGS.log_json)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(fastapi_app: FastAPI) -> AsyncGenerator[None, None]:
    # Nested so teardown runs in reverse order even if one fails
    async with lifespan_redis():
        async with lifespan_http(fastapi_app):
            yield


app = FastAPI(
    title="github-login",
    lifespan=lifespan,
    docs_url="/docs" if SETTINGS.is_dev else None,
    redoc_url="/redoc" if SETTINGS.is_dev else None,
)

# Last-added runs first: RequestContext (outermost) → Metrics → route
app.add_middleware(MetricsMiddleware)
app.add_middleware(RequestContextMiddleware)


@app.exception_handler(OAuthFlowError)
async def oauth_flow_error_handler(_request: Request, exc: OAuthFlowError) -> JSONResponse:
    """Every request-scoped flow failure becomes status + JSON error body."""
    return JSONResponse(exc.to_body(), status_code=exc.status_code)


app.include_router(metrics_router)
app.include_router(health_router)
app.include_router(home_router)
app.include_router(github_login_router)
app.include_router(loggedin_router)
app.include_router(logout_router)

logger.info(
    "github-login started  env=%s log_level=%s port=%d orgs=%s docs=%s",
    SETTINGS.app_env,
    SETTINGS.log_level,
    SETTINGS.port,
    "on" if SETTINGS.fetch_organizations else "off",
    "on" if SETTINGS.is_dev else "off",
)
