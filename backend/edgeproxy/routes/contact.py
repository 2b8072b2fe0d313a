"""
Edge Proxy — Contact Form Route
=================================

What:  Handles /api/contact: relays the site's contact form to the n8n webhook.
How:   POST parses the JSON body and hands it to ContactRelay. OPTIONS answers
       the preflight with fixed headers. Other methods get FastAPI's 405.

Responses:
    200 {"success": true}        webhook accepted the submission
    500 {"error": <message>}     body was not JSON or never arrived, webhook
                                 unreachable, or webhook answered non-2xx

There is no origin allow-list or rate limit on this endpoint; the CORS
headers always name https://prioai.ca.
"""

import json
import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse, Response
from starlette.requests import ClientDisconnect

from edgeproxy.deps import get_contact_relay
from edgeproxy.exceptions import ContactRelayError
from edgeproxy.schemas.proxy import ContactSuccessResponse, ErrorResponse
from edgeproxy.services.contact_relay import ContactRelay
from edgeproxy.services.cors import contact_cors_headers

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Contact"])

CLIENT_DISCONNECTED = "Client disconnected"


@router.options(
    "/contact",
    status_code=204,
    summary="CORS preflight for the contact form",
)
async def contact_preflight() -> Response:
    return Response(status_code=204, headers=contact_cors_headers(preflight=True))


@router.post(
    "/contact",
    response_model=ContactSuccessResponse,
    responses={
        500: {"description": "Submission could not be delivered", "model": ErrorResponse},
    },
    summary="Submit the contact form",
)
async def submit_contact(
    request: Request,
    relay: ContactRelay = Depends(get_contact_relay),
) -> JSONResponse:
    try:
        payload = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        logger.warning("Contact form body is not valid JSON: %s", str(e))
        raise ContactRelayError(message=str(e), context={"stage": "parse"}) from e
    except ClientDisconnect as e:
        logger.warning("Client disconnected before the contact form body was read")
        raise ContactRelayError(
            message=str(e) or CLIENT_DISCONNECTED, context={"stage": "read"}
        ) from e

    await relay.relay(payload)

    return JSONResponse(
        status_code=200,
        content=ContactSuccessResponse().model_dump(),
        headers=contact_cors_headers(),
    )
