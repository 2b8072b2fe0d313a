"""
Edge Proxy — Origin/CORS Policy
=================================

What:  Computes CORS response headers and enforces the origin allow-list.
How:   Plain functions over AllowListConfig; no framework types.

Two policies live here:

    Airtable proxy (/api/airtable)
        Allow-Origin reflects the caller's Origin only when it is allow-listed;
        otherwise the first allow-listed origin is emitted. A disallowed
        Origin is additionally rejected with 403 by ensure_origin_allowed(),
        which runs after the rate-limit check. Requests without an Origin
        header (server-to-server, curl) are let through.

    Contact proxy (/api/contact)
        Fixed headers for a single hard-coded origin, no allow-list lookup.
"""

from typing import Dict

from edgeproxy.config import AllowListConfig
from edgeproxy.exceptions import OriginRejectedError

PREFLIGHT_MAX_AGE = "86400"

CONTACT_ALLOWED_ORIGIN = "https://prioai.ca"


def is_preflight(method: str) -> bool:
    """A CORS preflight is any OPTIONS request."""
    return method.upper() == "OPTIONS"


def is_origin_allowed(origin: str, allow_list: AllowListConfig) -> bool:
    return origin in allow_list.origins


def cors_headers(origin: str, allow_list: AllowListConfig) -> Dict[str, str]:
    """
    CORS headers for an /api/airtable response.

    Sent on every response, success or error, including Max-Age.
    """
    allowed_origin = origin if is_origin_allowed(origin, allow_list) else allow_list.fallback_origin
    return {
        "Access-Control-Allow-Origin": allowed_origin,
        "Access-Control-Allow-Methods": "GET, POST, PATCH, DELETE, OPTIONS",
        "Access-Control-Allow-Headers": "Content-Type",
        "Access-Control-Max-Age": PREFLIGHT_MAX_AGE,
    }


def ensure_origin_allowed(origin: str, allow_list: AllowListConfig) -> None:
    """
    Reject a declared Origin that is not allow-listed.

    Raises:
        OriginRejectedError: `origin` is non-empty and not in the allow-list.
    """
    if origin and not is_origin_allowed(origin, allow_list):
        raise OriginRejectedError(origin=origin)


def contact_cors_headers(preflight: bool = False) -> Dict[str, str]:
    """Fixed CORS headers for /api/contact. Max-Age only on the preflight."""
    headers = {
        "Access-Control-Allow-Origin": CONTACT_ALLOWED_ORIGIN,
        "Access-Control-Allow-Methods": "POST, OPTIONS",
        "Access-Control-Allow-Headers": "Content-Type",
    }
    if preflight:
        headers["Access-Control-Max-Age"] = PREFLIGHT_MAX_AGE
    return headers
