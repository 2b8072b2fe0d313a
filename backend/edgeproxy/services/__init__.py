# Services package init
"""
Edge Proxy — Services Layer
=============================

What:  Policy and forwarding logic, independent of Starlette request objects
       wherever possible.
How:   Plain functions for stateless policy; small classes for the pieces that
       hold configuration or state. Routes and middleware wire them together.

Service Inventory:
    - rate_limiter:        FixedWindowRateLimiter (per-IP counters)
    - client_ip:           client_key() from CF-Connecting-IP / X-Forwarded-For
    - cors:                CORS header sets and the origin allow-list check
    - path_validator:      validate_path() for the Airtable `path` parameter
    - airtable_forwarder:  AirtableForwarder (build + send upstream request)
    - contact_relay:       ContactRelay (POST contact form JSON to the webhook)
"""
