# Routes package init
"""
Edge Proxy — API Routes Package
=================================

Route Inventory:
    - airtable.py: GET/POST/PUT/PATCH/DELETE /api/airtable?path=...  (proxy)
                   OPTIONS /api/airtable                            (preflight)
    - contact.py:  POST    /api/contact                             (relay)
                   OPTIONS /api/contact                             (preflight)
    - health.py:   GET     /health                                  (status)

Routes stay thin: read the request, call services in pipeline order, build
the response. Failures are raised as EdgeProxyError subclasses and turned
into JSON by the global handlers in main.py.
"""
