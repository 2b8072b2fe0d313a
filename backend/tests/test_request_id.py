"""Tests for correlation id selection."""

from starlette.datastructures import Headers

from edgeproxy.middleware.request_id import resolve_request_id


class TestResolveRequestId:

    def test_caller_request_id_wins(self):
        """X-Request-ID is preferred over CF-Ray."""
        headers = Headers({"X-Request-ID": "abc12345", "CF-Ray": "8a1b2c3d4e5f6a7b-YYZ"})
        assert resolve_request_id(headers) == "abc12345"

    def test_cf_ray_used_without_request_id(self):
        """Cloudflare's ray id is used when no X-Request-ID is sent."""
        assert resolve_request_id(Headers({"CF-Ray": "8a1b2c3d4e5f6a7b-YYZ"})) == "8a1b2c3d4e5f6a7b-YYZ"

    def test_empty_request_id_falls_through(self):
        """An empty X-Request-ID does not hide CF-Ray."""
        headers = Headers({"X-Request-ID": "", "CF-Ray": "8a1b2c3d4e5f6a7b-YYZ"})
        assert resolve_request_id(headers) == "8a1b2c3d4e5f6a7b-YYZ"

    def test_generated_when_no_header(self):
        """Without either header an 8-character hex id is generated per call."""
        first = resolve_request_id(Headers({}))
        second = resolve_request_id(Headers({}))
        assert len(first) == 8
        int(first, 16)
        assert first != second
