"""
Edge Proxy — Test Configuration (conftest.py)
===============================================

What:  Shared pytest fixtures for the entire test suite.
How:   Apps are built with create_app() and a fresh FixedWindowRateLimiter on a
       fake clock. Upstream services (Airtable, the webhook) are replaced by one
       httpx.MockTransport injected through FastAPI dependency_overrides, so no
       test touches the network.

Fixture Hierarchy (all function-scoped):
    ├── fake_clock:    Manually advanced millisecond clock
    ├── rate_limiter:  Limiter with limit=3 on fake_clock
    ├── upstream:      Scripted stand-in for Airtable and the webhook
    ├── proxy_app:     App wired to all of the above, token configured
    ├── bare_app:      Routes and exception handlers only, no middleware
    └── client:        HTTPX AsyncClient talking to proxy_app over ASGI
"""

import os
from typing import Dict, List, Optional, Tuple

import httpx
import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

# Override settings for testing BEFORE any app imports
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["AIRTABLE_TOKEN"] = ""

from edgeproxy.config import Settings, get_settings  # noqa: E402
from edgeproxy.deps import get_airtable_forwarder, get_contact_relay  # noqa: E402
from edgeproxy.main import create_app, register_exception_handlers  # noqa: E402
from edgeproxy.routes import airtable, contact  # noqa: E402
from edgeproxy.services.airtable_forwarder import AirtableForwarder  # noqa: E402
from edgeproxy.services.contact_relay import ContactRelay  # noqa: E402
from edgeproxy.services.rate_limiter import FixedWindowRateLimiter  # noqa: E402

TEST_TOKEN = "test-token-not-real"
BASE_ID = "applOjDjhH0RqLtBH"
TABLE_ID = "tblMptC862PyL7Znw"
VALID_PATH = f"{BASE_ID}/{TABLE_ID}"
WEBHOOK_URL = "https://hooks.test/webhook/feedback"
ALLOWED_ORIGIN = "https://dashboard.prioai.ca"
FALLBACK_ORIGIN = "https://prioai.ca"
RATE_LIMIT = 3
WINDOW_MS = 60_000


class FakeClock:
    """Millisecond clock that only moves when told to."""

    def __init__(self, start: float = 1_700_000_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, ms: float) -> None:
        self.now += ms


class ScriptedUpstream:
    """
    Records every outbound request and answers with a scripted response.

    Set `status`/`body` to change the answer, or `error` to an httpx
    exception class to simulate a transport failure.
    """

    def __init__(self):
        self.requests: List[httpx.Request] = []
        self.status = 200
        self.body = b'{"records": []}'
        self.error: Optional[type] = None

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error("upstream exploded: secret details", request=request)
        return httpx.Response(self.status, content=self.body)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def rate_limiter(fake_clock):
    return FixedWindowRateLimiter(limit=RATE_LIMIT, window_ms=WINDOW_MS, clock=fake_clock)


@pytest.fixture
def upstream():
    return ScriptedUpstream()


@pytest.fixture
def app_settings():
    """Settings with the Airtable token configured. Tests may blank it."""
    return Settings(airtable_token=TEST_TOKEN)


def _wire_upstreams(app: FastAPI, upstream: ScriptedUpstream, app_settings: Settings) -> FastAPI:
    transport = httpx.MockTransport(upstream.handler)

    app.dependency_overrides[get_settings] = lambda: app_settings
    app.dependency_overrides[get_airtable_forwarder] = lambda: AirtableForwarder(
        transport=transport,
    )
    app.dependency_overrides[get_contact_relay] = lambda: ContactRelay(
        webhook_url=WEBHOOK_URL,
        transport=transport,
    )
    return app


@pytest.fixture
def proxy_app(rate_limiter, upstream, app_settings):
    """
    A fresh app per test: own limiter, mocked upstreams, test settings.
    """
    return _wire_upstreams(create_app(rate_limiter=rate_limiter), upstream, app_settings)


@pytest.fixture
def bare_app(upstream, app_settings):
    """
    The proxy routes without the middleware chain, for driving the ASGI
    interface by hand (e.g. a client that disconnects mid-request).
    """
    app = FastAPI()
    register_exception_handlers(app)
    app.include_router(airtable.router)
    app.include_router(contact.router)
    return _wire_upstreams(app, upstream, app_settings)


@pytest_asyncio.fixture
async def client(proxy_app):
    """
    HTTPX AsyncClient routed straight into the ASGI app.

    Usage:
        async def test_health(client):
            response = await client.get("/health")
            assert response.status_code == 200
    """
    transport = ASGITransport(app=proxy_app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


async def call_with_disconnect(
    app: FastAPI, method: str, path: str, query_string: bytes = b""
) -> Tuple[int, Dict[str, str], bytes]:
    """
    Call `app` as a client that hangs up before sending any body.

    Returns (status, headers, body) of whatever the app sent back.
    """
    scope = {
        "type": "http",
        "asgi": {"version": "3.0"},
        "http_version": "1.1",
        "method": method,
        "scheme": "http",
        "path": path,
        "raw_path": path.encode(),
        "query_string": query_string,
        "root_path": "",
        "headers": [(b"host", b"test"), (b"content-type", b"application/json")],
        "client": ("127.0.0.1", 50000),
        "server": ("test", 80),
    }
    sent = []

    async def receive():
        return {"type": "http.disconnect"}

    async def send(message):
        sent.append(message)

    await app(scope, receive, send)

    start = next(m for m in sent if m["type"] == "http.response.start")
    headers = {k.decode().lower(): v.decode() for k, v in start["headers"]}
    body = b"".join(m.get("body", b"") for m in sent if m["type"] == "http.response.body")
    return start["status"], headers, body
