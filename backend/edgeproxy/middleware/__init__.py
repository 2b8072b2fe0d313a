# Middleware package init
"""
Edge Proxy — Middleware Package
=================================

What:  Cross-cutting concerns applied to every request.

Middleware Chain (outermost first):
    Request → [Request ID] → [Logging] → [Rate Limit] → Route Handler

    - Request ID runs first so every later log line carries the id.
    - Logging wraps the rate limiter, so 429s appear in the access log.
    - Rate Limit guards /api/airtable only and lets OPTIONS preflights pass.
"""
