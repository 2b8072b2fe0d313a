"""
Edge Proxy — Airtable Proxy Route
===================================

What:  Handles /api/airtable, the browser-facing proxy for the Airtable API.
How:   Runs the request through the pipeline below; any stage may end it.

Request Pipeline:
    1. OPTIONS             → 204 with CORS headers (nothing else runs)
    2. Rate limit          → 429   (RateLimitMiddleware, before this module)
    3. Origin check        → 403   (declared Origin not allow-listed)
    4. Path validation     → 400   (missing/malformed path, wrong base/table)
    5. Token present       → 500   (AIRTABLE_TOKEN unset; nothing sent)
    6. Forward to Airtable → 500   (transport failure)
    7. Relay               → Airtable's status + body, CORS headers,
                             Content-Type: application/json
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import Response
from starlette.requests import ClientDisconnect

from edgeproxy.config import AllowListConfig, Settings, get_settings
from edgeproxy.deps import get_airtable_forwarder, get_allow_list
from edgeproxy.exceptions import PathValidationError
from edgeproxy.schemas.proxy import ErrorResponse
from edgeproxy.services.airtable_forwarder import BODY_METHODS, PATH_PARAM, AirtableForwarder
from edgeproxy.services.cors import cors_headers, ensure_origin_allowed
from edgeproxy.services.path_validator import validate_path

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Airtable"])

# Methods relayed to Airtable. OPTIONS is answered by airtable_preflight.
PROXY_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE"]


async def _read_body(request: Request) -> Optional[bytes]:
    """Raw request body, or None when it is empty or cannot be read."""
    try:
        body = await request.body()
    except ClientDisconnect:
        return None
    return body or None


def _path_param(request: Request) -> Optional[str]:
    values = request.query_params.getlist(PATH_PARAM)
    return values[0] if values else None


@router.options(
    "/airtable",
    status_code=204,
    summary="CORS preflight for the Airtable proxy",
)
async def airtable_preflight(
    request: Request,
    allow_list: AllowListConfig = Depends(get_allow_list),
) -> Response:
    origin = request.headers.get("Origin", "")
    return Response(status_code=204, headers=cors_headers(origin, allow_list))


@router.api_route(
    "/airtable",
    methods=PROXY_METHODS,
    responses={
        400: {"description": "Invalid or missing path", "model": ErrorResponse},
        403: {"description": "Origin not allowed", "model": ErrorResponse},
        429: {"description": "Rate limit exceeded", "model": ErrorResponse},
        500: {"description": "Configuration or upstream transport error", "model": ErrorResponse},
    },
    summary="Proxy a request to the Airtable REST API",
    description=(
        "Forwards the request to https://api.airtable.com/v0/{path} with the server-side "
        "token. Every query parameter except `path` is forwarded. Airtable's status code "
        "and body are returned unchanged."
    ),
)
async def proxy_airtable(
    request: Request,
    allow_list: AllowListConfig = Depends(get_allow_list),
    settings: Settings = Depends(get_settings),
    forwarder: AirtableForwarder = Depends(get_airtable_forwarder),
) -> Response:
    origin = request.headers.get("Origin", "")
    headers = cors_headers(origin, allow_list)

    ensure_origin_allowed(origin, allow_list)

    path = _path_param(request)
    validation = validate_path(path, allow_list)
    if not validation.valid:
        raise PathValidationError(reason=validation.error, path=path)

    body = await _read_body(request) if request.method in BODY_METHODS else None

    spec = forwarder.build_forward_spec(
        method=request.method,
        path=path,
        query_items=request.query_params.multi_items(),
        body=body,
        token=settings.airtable_token,
    )
    upstream = await forwarder.forward(spec)

    return Response(
        content=upstream.body,
        status_code=upstream.status_code,
        headers=headers,
        media_type="application/json",
    )
