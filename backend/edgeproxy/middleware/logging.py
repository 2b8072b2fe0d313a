"""
Edge Proxy — Request Logging Middleware
=========================================

What:  One access log line per proxied request.
How:   Times the downstream call and logs method, path, status, duration,
       request id and client key on the `edgeproxy.access` logger.
When:  Runs inside RequestIDMiddleware, so the request id is already set.

What we log vs what we DON'T log:
    Log:       method, path, status, duration, client key, request id
    Don't log: query strings, request/response bodies, any header values
               (the Airtable token travels in a header upstream)
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from edgeproxy.middleware.request_id import request_id_var
from edgeproxy.services.client_ip import client_key

logger = logging.getLogger("edgeproxy.access")


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Logs each HTTP request and response.

    Level follows the status class: 5xx → ERROR, 4xx → WARNING, else INFO.
    Health checks are not logged.
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        start_time = time.perf_counter()

        method = request.method
        path = request.url.path
        client = client_key(request.headers)
        rid = request_id_var.get("")

        if path == "/health":
            return await call_next(request)

        response = await call_next(request)

        duration_ms = (time.perf_counter() - start_time) * 1000

        status = response.status_code
        if status >= 500:
            log_level = logging.ERROR
        elif status >= 400:
            log_level = logging.WARNING
        else:
            log_level = logging.INFO

        logger.log(
            log_level,
            "%s %s %d %.1fms [%s] from %s",
            method,
            path,
            status,
            duration_ms,
            rid,
            client,
            extra={
                "request_id": rid,
                "method": method,
                "path": path,
                "status": status,
                "duration_ms": round(duration_ms, 2),
                "client_ip": client,
            },
        )

        return response
