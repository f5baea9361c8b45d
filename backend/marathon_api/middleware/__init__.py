# Middleware package init
"""
Marathon Event API — Middleware Package
=========================================

Middleware Chain:
    Request → [CORS] → [Request ID] → [Logging] → [GZip] → Route
    (CORS is added last so it runs first and answers preflight requests.)

The auth gate (auth.py) is a route dependency, not a chain member: it is
attached only to the routes that require a session.
"""
