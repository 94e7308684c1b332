"""
Microposts Backend - Request Logging Middleware
=================================================

What:  One access-log line per HTTP request.
How:   Measures the handler duration and logs method, path, status,
       duration, request ID, the resolved user (or "anonymous") and the
       client IP. Severity follows the status code:
           5xx → ERROR, 4xx → WARNING, everything else → INFO
When:  Innermost application middleware: runs after RequestIDMiddleware
       and AuthenticationMiddleware, so both values are already known.

Not logged: request bodies (passwords) and cookies (session tokens).
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from microposts.identity import ANONYMOUS
from microposts.middleware.request_id import request_id_var

logger = logging.getLogger("microposts.access")

# Probed every few seconds by orchestrators; not worth a log line
UNLOGGED_PATHS = {"/health"}


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Logs structured information about each HTTP request and response."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        path = request.url.path
        if path in UNLOGGED_PATHS:
            return await call_next(request)

        start_time = time.perf_counter()
        client_ip = request.client.host if request.client else "unknown"
        identity = getattr(request.state, "identity", ANONYMOUS)
        user = identity.user_id or "anonymous"
        rid = request_id_var.get("")

        response = await call_next(request)

        duration_ms = (time.perf_counter() - start_time) * 1000
        status = response.status_code
        if status >= 500:
            log_level = logging.ERROR
        elif status >= 400:
            log_level = logging.WARNING
        else:
            log_level = logging.INFO

        logger.log(
            log_level,
            "%s %s %d %.1fms [%s] user=%s from %s",
            request.method,
            path,
            status,
            duration_ms,
            rid,
            user,
            client_ip,
            extra={
                "request_id": rid,
                "method": request.method,
                "path": path,
                "status": status,
                "duration_ms": round(duration_ms, 2),
                "user_id": identity.user_id,
                "client_ip": client_ip,
            },
        )

        return response
