# Middleware package init
"""
Microposts Backend - Middleware Package
=========================================

What:  Cross-cutting concerns applied to every request.

Middleware Chain (order matters!):
    Request → [Request ID] → [Authentication] → [Logging] → [GZip] → [CORS] → Route

    1. Request ID: correlation ID for logs and error bodies
    2. Authentication: cookie → request.state.identity (never rejects)
    3. Logging: access line including the resolved user

    Responses travel back through the same chain in reverse.
"""
