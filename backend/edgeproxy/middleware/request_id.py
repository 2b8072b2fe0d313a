"""
Edge Proxy — Request Correlation Middleware
=============================================

What:  Gives every request a correlation id and returns it in X-Request-ID.
How:   Picks the first id available, in order:
           1. X-Request-ID   set by the caller or an upstream gateway
           2. CF-Ray         set by Cloudflare on every request it forwards
           3. generated      8 hex characters
       The id is stored in a ContextVar read by the access log and the
       exception handlers.

Using CF-Ray means a line in our logs can be matched against the Cloudflare
dashboard for the same request without any client cooperation.
"""

import uuid
from contextvars import ContextVar
from typing import Optional

from starlette.datastructures import Headers
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

REQUEST_ID_HEADER = "X-Request-ID"
CF_RAY_HEADER = "CF-Ray"

request_id_var: ContextVar[str] = ContextVar("request_id", default="")


def resolve_request_id(headers: Headers) -> str:
    """Correlation id for a request with the given headers."""
    supplied: Optional[str] = headers.get(REQUEST_ID_HEADER) or headers.get(CF_RAY_HEADER)
    if supplied:
        return supplied.strip()
    return uuid.uuid4().hex[:8]


class RequestIDMiddleware(BaseHTTPMiddleware):

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        rid = resolve_request_id(request.headers)
        request_id_var.set(rid)
        request.state.request_id = rid

        response = await call_next(request)

        response.headers[REQUEST_ID_HEADER] = rid
        return response
