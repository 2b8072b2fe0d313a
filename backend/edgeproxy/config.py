"""
Edge Proxy — Application Configuration
========================================

What:  Centralized configuration: runtime settings plus compiled-in allow-lists.
How:   Pydantic Settings reads environment variables (or a .env file) and
       validates types/ranges. The allow-lists are a frozen value built once at
       import time and never read from the environment.
Who:   Imported by the app factory, middleware, routes, and services.
When:  Loaded once at module import time.

Two kinds of configuration:
    Settings         deploy-time values (secret token, upstream URLs, limits).
    AllowListConfig  the base/table/origin allow-lists. These are part of the
                     security boundary and ship with the code.
"""

from dataclasses import dataclass
from typing import FrozenSet, Tuple

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


# ══════════════════════════════════════════════════════════════════════════
# Allow-lists (compiled in, immutable)
# ══════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class AllowListConfig:
    """
    Static allow-lists consulted by the CORS policy and the path validator.

    Attributes:
        base_id:   The single Airtable base a caller may address.
        table_ids: Tables inside that base a caller may address.
        origins:   Browser origins allowed to call the proxy. Ordered: the
                   first entry is the Access-Control-Allow-Origin fallback.
    """

    base_id: str
    table_ids: FrozenSet[str]
    origins: Tuple[str, ...]

    @property
    def fallback_origin(self) -> str:
        return self.origins[0]


ALLOW_LIST = AllowListConfig(
    base_id="applOjDjhH0RqLtBH",
    table_ids=frozenset({
        "tblMptC862PyL7Znw",
        "tblLpN4wceakfNFpq",
        "tblvB5OpG0b5mVix3",
    }),
    origins=(
        "https://prioai.ca",
        "https://www.prioai.ca",
        "https://dashboard.prioai.ca",
        "http://localhost:8788",
        "http://localhost:3000",
        "http://127.0.0.1:8788",
        "http://127.0.0.1:3000",
    ),
)


# ══════════════════════════════════════════════════════════════════════════
# Runtime settings
# ══════════════════════════════════════════════════════════════════════════

class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    The Airtable token is the only value a deployment must provide. It is
    read on every proxied request, so a missing token surfaces as a 500 on
    that request rather than a crash at startup.
    """

    # ── Airtable ──────────────────────────────────────────────────────────
    # Bearer token for the Airtable REST API. Never accepted from callers,
    # never logged, never echoed in a response.
    airtable_token: str = Field(default="", repr=False)

    # The validated `base/table[/record]` path is appended to this.
    airtable_api_base: str = Field(default="https://api.airtable.com/v0")

    # ── Contact form ──────────────────────────────────────────────────────
    contact_webhook_url: str = Field(default="https://n8n.prioai.ca/webhook/feedback")

    # ── Outbound HTTP ─────────────────────────────────────────────────────
    # Seconds. Applies to connect, read, write and pool acquisition.
    upstream_timeout: float = Field(default=30.0, gt=0, le=300)

    # ── Rate Limiting ─────────────────────────────────────────────────────
    # Fixed window, per client IP, per process.
    rate_limit_requests: int = Field(default=1000, ge=1)
    rate_limit_window_ms: int = Field(default=60_000, ge=1)

    # ── Server ────────────────────────────────────────────────────────────
    backend_host: str = Field(default="0.0.0.0")
    backend_port: int = Field(default=8000, ge=1024, le=65535)

    log_level: str = Field(default="INFO")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensures log level is a valid Python logging level name."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid_levels:
            raise ValueError(f"Invalid log_level '{v}'. Must be one of: {valid_levels}")
        return upper

    @field_validator("airtable_api_base")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
    }

    def validate_required_for_production(self) -> None:
        """
        Checks that the settings a live deployment needs are present.

        Raises:
            ValueError listing every missing value.
        """
        errors = []
        if not self.airtable_token:
            errors.append(
                "AIRTABLE_TOKEN is not set. /api/airtable will answer 500 until it is."
            )
        if errors:
            raise ValueError(
                "Configuration validation failed:\n" + "\n".join(f"  - {e}" for e in errors)
            )


settings = Settings()


def get_settings() -> Settings:
    """FastAPI dependency returning the settings singleton."""
    return settings
