"""FastAPI dependency helpers."""

from fastapi import Depends, Request

from edgeproxy.config import ALLOW_LIST, AllowListConfig, Settings, get_settings
from edgeproxy.services.airtable_forwarder import AirtableForwarder
from edgeproxy.services.contact_relay import ContactRelay


def get_allow_list(request: Request) -> AllowListConfig:
    """Return the allow-lists the running app was built with."""
    return getattr(request.app.state, "allow_list", ALLOW_LIST)


def get_airtable_forwarder(
    settings: Settings = Depends(get_settings),
) -> AirtableForwarder:
    return AirtableForwarder(
        api_base=settings.airtable_api_base,
        timeout=settings.upstream_timeout,
    )


def get_contact_relay(
    settings: Settings = Depends(get_settings),
) -> ContactRelay:
    return ContactRelay(
        webhook_url=settings.contact_webhook_url,
        timeout=settings.upstream_timeout,
    )
