"""
Edge Proxy — Contact Form Relay
=================================

What:  Delivers contact form submissions to the n8n feedback webhook.
How:   Re-serializes the parsed JSON payload and POSTs it with httpx.
Who:   Called by POST /api/contact.

Unlike the Airtable forwarder, the webhook's status code is never passed
through: any non-2xx answer becomes one generic ContactRelayError.
"""

import json
import logging
from typing import Any, Optional

import httpx

from edgeproxy.exceptions import ContactRelayError

logger = logging.getLogger(__name__)


class ContactRelay:
    def __init__(
        self,
        webhook_url: str,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.webhook_url = webhook_url
        self.timeout = timeout
        self._transport = transport

    async def relay(self, payload: Any) -> None:
        """
        POST `payload` to the webhook.

        Raises:
            ContactRelayError: the webhook answered non-2xx, or the call failed
                in transport (message of the transport error is kept).
        """
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout,
                transport=self._transport,
            ) as client:
                response = await client.post(
                    self.webhook_url,
                    content=json.dumps(payload),
                    headers={"Content-Type": "application/json"},
                )
        except httpx.HTTPError as e:
            logger.error("Contact webhook unreachable: %s: %s", type(e).__name__, str(e))
            raise ContactRelayError(
                message=str(e),
                context={"error_type": type(e).__name__},
            ) from e

        if not response.is_success:
            logger.warning("Contact webhook answered %d", response.status_code)
            raise ContactRelayError(context={"webhook_status": response.status_code})

        logger.info("Contact form submission delivered")

