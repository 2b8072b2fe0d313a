"""
Edge Proxy — Client Key Derivation
====================================

What:  Derives the rate-limit key for a request from proxy headers.

Precedence (first non-empty wins):
    1. CF-Connecting-IP   set by Cloudflare to the real client address
    2. X-Forwarded-For    first comma-separated entry
    3. "unknown"          every unidentifiable client shares this bucket

The socket peer address is not consulted: behind the CDN it is always the
CDN edge.

The X-Forwarded-For entry is whitespace-trimmed, so "203.0.113.5, 10.0.0.1"
and "203.0.113.5 ,10.0.0.1" share one bucket. Deployments that fed untrimmed
keys to the limiter counted those as two clients; this one does not.
"""

from starlette.datastructures import Headers

UNKNOWN_CLIENT = "unknown"


def client_key(headers: Headers) -> str:
    cf_ip = headers.get("CF-Connecting-IP")
    if cf_ip:
        return cf_ip

    forwarded_for = headers.get("X-Forwarded-For")
    if forwarded_for:
        first = forwarded_for.split(",")[0].strip()
        if first:
            return first

    return UNKNOWN_CLIENT
