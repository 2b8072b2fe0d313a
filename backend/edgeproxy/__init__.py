"""
Edge Proxy — Application Package Initializer
============================================

What: Browser-facing proxy for the Airtable REST API and the contact-form webhook.
Who:  Imported by uvicorn (edgeproxy.main:app), pytest, and the route modules.

Architecture Note:
    ┌─────────────────────────────────────┐
    │        Middleware (cross-cutting)   │  ← request id, access log, rate limit
    ├─────────────────────────────────────┤
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │     Services (policy + forwarding)  │  ← CORS, path checks, upstream calls
    ├─────────────────────────────────────┤
    │       Config & Schemas (Data)       │  ← Settings, allow-lists, models
    └─────────────────────────────────────┘

    There is no persistence layer. The only mutable state is the rate
    limiter's in-memory counter table.
"""

__version__ = "1.0.0"
