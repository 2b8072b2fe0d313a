"""
Edge Proxy — Rate Limiting Middleware
=======================================

What:  Per-IP fixed window rate limit in front of the Airtable proxy.
How:   Derives the client key from proxy headers, asks the
       FixedWindowRateLimiter, and answers 429 itself when the key is over
       its limit.
When:  Before the route, and therefore before the origin check, the path
       validation and the token check.

Scope:
    Only paths in `protected_paths` (default: /api/airtable) are limited.
    OPTIONS preflights are never counted or rejected.

Response on rate limit:
    HTTP 429, {"error": "Rate limit exceeded. Please try again later."},
    with the same CORS headers the route would have sent. The response is
    built here because exceptions raised inside BaseHTTPMiddleware do not
    reach FastAPI's exception handlers.
"""

import logging
from typing import Iterable, Optional

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from edgeproxy.config import ALLOW_LIST, AllowListConfig, settings
from edgeproxy.exceptions import RateLimitExceededError
from edgeproxy.services.client_ip import client_key
from edgeproxy.services.cors import cors_headers, is_preflight
from edgeproxy.services.rate_limiter import FixedWindowRateLimiter

logger = logging.getLogger(__name__)


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    Applies a FixedWindowRateLimiter to the protected paths.

    Args:
        limiter:         Shared limiter instance. Built from settings if omitted.
        allow_list:      Allow-lists used to compute CORS headers on a 429.
        protected_paths: Exact request paths subject to the limit.
    """

    def __init__(
        self,
        app,
        limiter: Optional[FixedWindowRateLimiter] = None,
        allow_list: AllowListConfig = ALLOW_LIST,
        protected_paths: Iterable[str] = ("/api/airtable",),
        **kwargs,
    ):
        super().__init__(app, **kwargs)
        self.limiter = limiter or FixedWindowRateLimiter(
            limit=settings.rate_limit_requests,
            window_ms=settings.rate_limit_window_ms,
        )
        self.allow_list = allow_list
        self.protected_paths = frozenset(protected_paths)

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path not in self.protected_paths or is_preflight(request.method):
            return await call_next(request)

        client = client_key(request.headers)

        if self.limiter.check_and_record(client):
            return await call_next(request)

        exc = RateLimitExceededError(client_key=client)
        record = self.limiter.get_record(client)
        logger.warning(
            "Rate limit exceeded for %s: %d requests in current %dms window (limit %d, %d clients tracked)",
            client,
            record.count if record else 0,
            self.limiter.window_ms,
            self.limiter.limit,
            len(self.limiter),
        )

        origin = request.headers.get("Origin", "")
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.message},
            headers=cors_headers(origin, self.allow_list),
        )
