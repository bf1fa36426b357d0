"""
SnapShare Backend — Request Logging Middleware
=================================================

What:  One access log line per HTTP request: method, path, status, duration.
How:   Measures from middleware entry to response return and picks the level
       from the status code.

What is never logged:
    Request bodies (they carry plaintext passwords) and the Authorization
    header (it carries the bearer token). Only method, path, status,
    duration, client IP and the request ID appear.

Typical durations:
    - GET /health: 1-5ms
    - POST /api/auth/login: 50-150ms at 10 bcrypt rounds
    - GET /api/users/{id}: a few ms (HMAC check + one lookup)
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from app.middleware.request_id import request_id_var

logger = logging.getLogger("snapshare.access")

# Polled every few seconds; logging them would drown real traffic
QUIET_PATHS = {"/health"}


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Level by status:
        5xx → ERROR, 4xx → WARNING (includes every 401/403 rejection), else INFO
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path in QUIET_PATHS:
            return await call_next(request)

        start_time = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start_time) * 1000

        status = response.status_code
        if status >= 500:
            log_level = logging.ERROR
        elif status >= 400:
            log_level = logging.WARNING
        else:
            log_level = logging.INFO

        rid = request_id_var.get("")
        client_ip = request.client.host if request.client else "unknown"
        logger.log(
            log_level,
            "%s %s %d %.1fms [%s] from %s",
            request.method,
            request.url.path,
            status,
            duration_ms,
            rid,
            client_ip,
            extra={
                "request_id": rid,
                "status": status,
                "duration_ms": round(duration_ms, 2),
            },
        )
        return response
