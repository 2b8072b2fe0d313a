"""
Edge Proxy — FastAPI Application Factory
==========================================

What:  Creates and configures the FastAPI application instance.
How:   Factory pattern: create_app() returns a configured FastAPI instance.
Who:   Called by uvicorn to start the server (uvicorn edgeproxy.main:app).
When:  Once at server startup; the returned app handles all subsequent requests.

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware Chain:                                  │
    │  ┌──────────────┐ ┌──────────┐ ┌─────────────────┐  │
    │  │  Req ID      │→│ Logging  │→│  Rate Limit     │  │
    │  └──────────────┘ └──────────┘ └─────────────────┘  │
    │                                                     │
    │  Routes:                                            │
    │  ┌──────────────┐ ┌──────────────┐ ┌─────────────┐  │
    │  │ /api/airtable│ │ /api/contact │ │ GET /health │  │
    │  └──────────────┘ └──────────────┘ └─────────────┘  │
    │                                                     │
    │  Exception Handlers:                                │
    │  ┌──────────────────────────────────────────────┐   │
    │  │ Path→400 │ Origin→403 │ Config/Upstream→500  │   │
    │  └──────────────────────────────────────────────┘   │
    └─────────────────────────────────────────────────────┘

CORS is handled by edgeproxy.services.cors rather than Starlette's
CORSMiddleware: disallowed origins get the first allow-listed origin in
Access-Control-Allow-Origin and a 403, which CORSMiddleware cannot express.
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from edgeproxy import __version__
from edgeproxy.config import ALLOW_LIST, AllowListConfig, settings
from edgeproxy.exceptions import (
    ConfigurationError,
    ContactRelayError,
    EdgeProxyError,
    OriginRejectedError,
    PathValidationError,
    RateLimitExceededError,
    UpstreamTransportError,
)
from edgeproxy.middleware.logging import RequestLoggingMiddleware
from edgeproxy.middleware.rate_limit import RateLimitMiddleware
from edgeproxy.middleware.request_id import RequestIDMiddleware, request_id_var
from edgeproxy.routes import airtable, contact, health
from edgeproxy.services.cors import contact_cors_headers, cors_headers
from edgeproxy.services.rate_limiter import FixedWindowRateLimiter

logger = logging.getLogger(__name__)

CONTACT_PATH_PREFIX = "/api/contact"


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure logging for the entire application.

    Format: 2024-01-15T12:00:00 [INFO] edgeproxy.access: GET /api/airtable 200 ...

    Third-party request loggers are raised to WARNING; httpx would otherwise
    log every upstream URL at INFO.
    """
    log_format = (
        "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
    )

    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format=log_format,
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[
            logging.StreamHandler(sys.stdout),
        ],
        force=True,
    )

    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Startup: configure logging, report missing settings.
    Shutdown: log only; no connections are held between requests.
    """
    setup_logging()
    logger.info("=" * 60)
    logger.info("Edge Proxy %s starting up...", __version__)

    try:
        settings.validate_required_for_production()
    except ValueError as e:
        # Keep serving: /api/contact and /health do not need the token.
        logger.error("Configuration error: %s", str(e))

    logger.info(
        "Rate limit: %d requests per %dms per client",
        settings.rate_limit_requests,
        settings.rate_limit_window_ms,
    )
    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)
    logger.info("=" * 60)

    yield

    logger.info("Edge Proxy shutting down...")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _response_cors_headers(request: Request) -> Dict[str, str]:
    """CORS headers matching the endpoint that failed."""
    if request.url.path.startswith(CONTACT_PATH_PREFIX):
        return contact_cors_headers()
    allow_list = getattr(request.app.state, "allow_list", ALLOW_LIST)
    return cors_headers(request.headers.get("Origin", ""), allow_list)


def _error_response(request: Request, exc: EdgeProxyError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.message},
        headers=_response_cors_headers(request),
    )


def register_exception_handlers(app: FastAPI) -> None:
    """
    Register global exception handlers for consistent error responses.

    Handler hierarchy:
        PathValidationError     → 400 (validator reason)
        OriginRejectedError     → 403
        RateLimitExceededError  → 429
        ConfigurationError      → 500 (generic; setting name logged)
        UpstreamTransportError  → 500 (generic; cause logged by the forwarder)
        ContactRelayError       → 500 (caught message)
        EdgeProxyError (base)   → its status_code
        Exception (fallback)    → 500 (generic; traceback logged)

    Every body is {"error": <message>} and every response carries the
    endpoint's CORS headers, so the browser can read the error.
    """

    @app.exception_handler(PathValidationError)
    async def handle_path_validation_error(request: Request, exc: PathValidationError):
        rid = request_id_var.get("")
        logger.warning("[%s] Rejected path: %s | Context: %s", rid, exc.message, exc.context)
        return _error_response(request, exc)

    @app.exception_handler(OriginRejectedError)
    async def handle_origin_rejected(request: Request, exc: OriginRejectedError):
        rid = request_id_var.get("")
        logger.warning("[%s] Origin not allowed: %s", rid, exc.origin)
        return _error_response(request, exc)

    @app.exception_handler(RateLimitExceededError)
    async def handle_rate_limit(request: Request, exc: RateLimitExceededError):
        return _error_response(request, exc)

    @app.exception_handler(ConfigurationError)
    async def handle_configuration_error(request: Request, exc: ConfigurationError):
        rid = request_id_var.get("")
        logger.error("[%s] %s environment variable not set", rid, exc.setting)
        return _error_response(request, exc)

    @app.exception_handler(UpstreamTransportError)
    async def handle_upstream_transport_error(request: Request, exc: UpstreamTransportError):
        rid = request_id_var.get("")
        logger.error("[%s] Upstream transport error | Context: %s", rid, exc.context)
        return _error_response(request, exc)

    @app.exception_handler(ContactRelayError)
    async def handle_contact_relay_error(request: Request, exc: ContactRelayError):
        rid = request_id_var.get("")
        logger.error("[%s] Contact relay failed: %s | Context: %s", rid, exc.message, exc.context)
        return _error_response(request, exc)

    @app.exception_handler(EdgeProxyError)
    async def handle_edge_proxy_error(request: Request, exc: EdgeProxyError):
        rid = request_id_var.get("")
        logger.error("[%s] %s: %s | Context: %s", rid, type(exc).__name__, exc.message, exc.context)
        return _error_response(request, exc)

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        """Catch-all. The traceback is logged server-side only."""
        rid = request_id_var.get("")
        logger.error(
            "[%s] Unexpected error: %s",
            rid,
            str(exc),
            exc_info=True,
        )
        return JSONResponse(
            status_code=500,
            content={"error": "Internal server error"},
            headers=_response_cors_headers(request),
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(
    rate_limiter: Optional[FixedWindowRateLimiter] = None,
    allow_list: AllowListConfig = ALLOW_LIST,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        rate_limiter: Limiter shared by every request to this app. Built from
                      settings when omitted. Tests pass one with a small
                      limit and a fake clock.
        allow_list:   Allow-lists for origins, base and tables. Stored on
                      app.state and read by handlers through get_allow_list.
    """
    app = FastAPI(
        title="Edge Proxy API",
        description=(
            "Browser-facing proxy for the Airtable REST API and the contact form "
            "webhook, with origin/table allow-listing and per-IP rate limiting."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    app.state.allow_list = allow_list

    # ── Register Middleware ───────────────────────────────────────────────
    # Last added runs first: RequestID → Logging → RateLimit → route.
    app.add_middleware(
        RateLimitMiddleware,
        limiter=rate_limiter,
        allow_list=allow_list,
    )
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(airtable.router)
    app.include_router(contact.router)
    app.include_router(health.router)

    return app


app = create_app()
