"""
Edge Proxy — Health Check Route
=================================

What:  Health check endpoint for monitoring and load balancer probes.
How:   Reports whether the Airtable token is configured. No upstream call is made.

    Status levels:
    - healthy:   token configured (HTTP 200)
    - degraded:  token missing; /api/airtable answers 500, /api/contact works (HTTP 200)
"""

import time

from fastapi import APIRouter, Depends

from edgeproxy import __version__
from edgeproxy.config import Settings, get_settings
from edgeproxy.schemas.proxy import HealthResponse

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
)
async def health_check(settings: Settings = Depends(get_settings)) -> HealthResponse:
    token_configured = bool(settings.airtable_token)

    return HealthResponse(
        status="healthy" if token_configured else "degraded",
        version=__version__,
        airtable_token="configured" if token_configured else "missing",
        uptime_seconds=round(time.time() - _start_time, 2),
    )
