"""
Edge Proxy — Custom Exception Hierarchy
=========================================

What:  Application-specific exceptions, one per way a proxied request can fail.
How:   Each exception carries a public message and an optional context dict.
       Global exception handlers (registered in main.py) turn them into JSON
       responses of the form {"error": <message>} with the endpoint's CORS
       headers attached.
Who:   Raised by routes and services; caught by the global handlers.

Exception Hierarchy:
    EdgeProxyError (base)
    ├── ConfigurationError       → 500 (secret missing; generic message)
    ├── PathValidationError      → 400 (reason string from the validator)
    ├── OriginRejectedError      → 403
    ├── RateLimitExceededError   → 429
    ├── UpstreamTransportError   → 500 (Airtable unreachable; generic message)
    └── ContactRelayError        → 500 (message of the caught error)

The `context` dict is logged server-side only and never returned to callers.
"""

from typing import Any, Dict, Optional


class EdgeProxyError(Exception):
    """
    Base exception for all Edge Proxy application errors.

    Attributes:
        message:     Text returned to the caller in the `error` field.
        context:     Additional debug info (logged but NOT returned to client).
        status_code: HTTP status the global handler responds with.
    """

    status_code = 500

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ConfigurationError(EdgeProxyError):
    """
    Raised when a required server-side setting is absent.

    HTTP: 500. The caller only sees a generic message; the name of the
    missing setting goes to the log.
    """

    def __init__(
        self,
        setting: str,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["setting"] = setting
        super().__init__(message="Server configuration error", context=ctx)
        self.setting = setting


class PathValidationError(EdgeProxyError):
    """
    Raised when the `path` query parameter fails the allow-list checks.

    HTTP: 400. The message is the validator's machine-readable reason, e.g.
    "Invalid table ID".
    """

    status_code = 400

    def __init__(
        self,
        reason: str,
        path: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if path is not None:
            ctx["path"] = path
        super().__init__(message=reason, context=ctx)


class OriginRejectedError(EdgeProxyError):
    """Raised when a request declares an Origin outside the allow-list. HTTP: 403."""

    status_code = 403

    def __init__(
        self,
        origin: str,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["origin"] = origin
        super().__init__(message="Origin not allowed", context=ctx)
        self.origin = origin


class RateLimitExceededError(EdgeProxyError):
    """
    Raised when a client exceeds the per-IP fixed-window limit.

    HTTP: 429. The rate-limit middleware answers directly with the same body,
    since Starlette middleware sits outside FastAPI's exception handlers.
    """

    status_code = 429

    def __init__(
        self,
        client_key: str = "unknown",
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["client_key"] = client_key
        super().__init__(
            message="Rate limit exceeded. Please try again later.",
            context=ctx,
        )


class UpstreamTransportError(EdgeProxyError):
    """
    Raised when the Airtable API could not be reached at all.

    HTTP: 500. Non-2xx answers from Airtable are NOT errors here; they are
    relayed to the caller verbatim. Only transport failures (DNS, connect,
    timeout, protocol) end up in this exception.
    """

    def __init__(
        self,
        message: str = "Failed to fetch from Airtable",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class ContactRelayError(EdgeProxyError):
    """
    Raised when the contact form submission could not be delivered.

    HTTP: 500. Unlike the Airtable path, the caller sees the message of the
    error that was caught (parse error text, transport error text, or
    "Failed to send to webhook" for a non-2xx webhook answer).
    """

    def __init__(
        self,
        message: str = "Failed to send to webhook",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
