"""
Edge Proxy — Airtable Request Forwarder
=========================================

What:  Rebuilds an inbound /api/airtable request as an Airtable REST call and
       returns Airtable's answer untouched.
How:   build_forward_spec() assembles URL, headers and body from plain values;
       forward() sends it with a short-lived httpx.AsyncClient.
Who:   Called by the /api/airtable route after origin and path checks pass.

URL construction:
    <airtable_api_base>/<validated path>[?<inbound query minus `path`>]

    The path is percent-encoded, so a record segment holding spaces or
    control characters still reaches Airtable, which answers for it.

    Query pairs keep their order and repeats (Airtable uses repeated keys
    such as fields[]=a&fields[]=b).

Headers sent upstream:
    Authorization: Bearer <AIRTABLE_TOKEN>   (server-side secret only)
    Content-Type:  application/json

    No caller header is copied. In particular a caller-supplied Authorization
    header never reaches Airtable.

Failure handling:
    Airtable 4xx/5xx → relayed as-is (status + body).
    Transport failure → UpstreamTransportError (500, generic message). The
    underlying exception is logged here and never returned to the caller.
"""

import logging
import time
from typing import Iterable, Optional, Tuple
from urllib.parse import quote, urlencode, urlsplit

import httpx

from edgeproxy.exceptions import ConfigurationError, UpstreamTransportError
from edgeproxy.schemas.proxy import ForwardSpec, UpstreamResponse

logger = logging.getLogger(__name__)

BODY_METHODS = frozenset({"POST", "PATCH", "PUT"})

PATH_PARAM = "path"

DEFAULT_API_BASE = "https://api.airtable.com/v0"

# Reserved characters that stay literal in the upstream path. Everything else
# outside the unreserved set (spaces, control characters, non-ASCII) is
# percent-encoded; an existing "%" escape is left alone.
PATH_SAFE_CHARS = "/%:@!$&'()*+,;="


class AirtableForwarder:
    """
    Builds and sends upstream Airtable requests.

    Args:
        api_base:  Upstream base URL, without trailing slash.
        timeout:   httpx timeout in seconds.
        transport: Optional httpx transport. Tests pass httpx.MockTransport.
    """

    def __init__(
        self,
        api_base: str = DEFAULT_API_BASE,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_base = api_base.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    def build_forward_spec(
        self,
        method: str,
        path: str,
        query_items: Iterable[Tuple[str, str]],
        body: Optional[bytes],
        token: str,
    ) -> ForwardSpec:
        """
        Assemble the upstream request.

        Args:
            method:      Inbound HTTP method, reused as-is.
            path:        Already validated `base/table[/record]` path.
            query_items: Inbound query pairs; the `path` selector is dropped.
            body:        Raw inbound body, or None if there was none.
            token:       Airtable bearer token.

        Raises:
            ConfigurationError: `token` is empty. Nothing is sent upstream.
        """
        if not token:
            raise ConfigurationError(setting="AIRTABLE_TOKEN")

        method = method.upper()
        url = f"{self.api_base}/{quote(path, safe=PATH_SAFE_CHARS)}"

        forward_params = [(key, value) for key, value in query_items if key != PATH_PARAM]
        query_string = urlencode(forward_params)
        if query_string:
            url = f"{url}?{query_string}"

        headers = {
            "Authorization": f"Bearer {token}",
            "Content-Type": "application/json",
        }

        forward_body = body if method in BODY_METHODS and body else None

        return ForwardSpec(method=method, url=url, headers=headers, body=forward_body)

    async def forward(self, spec: ForwardSpec) -> UpstreamResponse:
        """
        Send `spec` to Airtable and return its status and raw body.

        Raises:
            UpstreamTransportError: Airtable could not be reached or the
                exchange broke off (connect error, timeout, protocol error)
                or httpx refused the URL.
        """
        start_time = time.perf_counter()
        upstream_path = urlsplit(spec.url).path

        try:
            async with httpx.AsyncClient(
                timeout=self.timeout,
                transport=self._transport,
            ) as client:
                response = await client.request(
                    spec.method,
                    spec.url,
                    headers=spec.headers,
                    content=spec.body,
                )
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            duration_ms = (time.perf_counter() - start_time) * 1000
            logger.error(
                "Airtable API error: %s %s failed after %.0fms: %s: %s",
                spec.method,
                upstream_path,
                duration_ms,
                type(e).__name__,
                str(e),
            )
            raise UpstreamTransportError(
                context={"method": spec.method, "path": upstream_path, "error_type": type(e).__name__},
            ) from e

        duration_ms = (time.perf_counter() - start_time) * 1000
        logger.info(
            "Airtable %s %s -> %d in %.0fms",
            spec.method,
            upstream_path,
            response.status_code,
            duration_ms,
        )

        return UpstreamResponse(status_code=response.status_code, body=response.content)

