"""
Edge Proxy — Response Schemas and Transient Values
=====================================================

What:  Pydantic models for the JSON bodies the proxy itself produces, plus the
       small dataclasses passed between the validator, the forwarder and the
       routes while a single request is handled.
Who:   Response models are referenced by routes for OpenAPI docs; dataclasses
       are built and consumed by services.

Relayed Airtable bodies are NOT described here: they are passed through
byte-for-byte and never parsed by the proxy.
"""

from dataclasses import dataclass, field
from typing import Dict, Optional

from pydantic import BaseModel, Field


# ══════════════════════════════════════════════════════════════════════════
# Response Models: bodies generated by the proxy
# ══════════════════════════════════════════════════════════════════════════


class ErrorResponse(BaseModel):
    """
    Error body shared by every failure the proxy generates itself.

    Example:
        {"error": "Invalid table ID"}
    """
    error: str = Field(description="Reason the request was not forwarded")


class ContactSuccessResponse(BaseModel):
    """Body returned once the webhook accepted a contact form submission."""
    success: bool = Field(default=True)


class HealthResponse(BaseModel):
    status: str = Field(description="Overall service status: healthy, degraded")
    version: str = Field(description="Application version")
    airtable_token: str = Field(description="Secret presence: configured, missing")
    uptime_seconds: float = Field(description="Seconds since service started")


# ══════════════════════════════════════════════════════════════════════════
# Transient values: live for one request only
# ══════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of checking a `path` query parameter against the allow-lists."""
    valid: bool
    error: Optional[str] = None


@dataclass(frozen=True)
class ForwardSpec:
    """
    A fully built upstream request.

    Carries the bearer token inside `headers`, so its repr hides them.
    """
    method: str
    url: str
    headers: Dict[str, str] = field(repr=False)
    body: Optional[bytes] = None


@dataclass(frozen=True)
class UpstreamResponse:
    """Status and raw body received from Airtable, relayed unchanged."""
    status_code: int
    body: bytes
