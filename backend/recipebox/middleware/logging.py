"""
RecipeBox Backend — Request Logging Middleware
================================================

What:  One access-log line per HTTP request.
Why:   Method, path, status, duration and request ID of every call in a
       consistent format, so a slow or failing request can be found in logs.
How:   Times the downstream call and logs on the `recipebox.access` logger,
       with the level chosen by status class.
When:  Runs inside RequestIDMiddleware, so the request ID is already set.

What we log vs what we DON'T log:
    Log: method, path, status, duration, client IP, request ID
    Don't log: request bodies (recipe contents), query strings
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from recipebox.middleware.request_id import request_id_var

logger = logging.getLogger("recipebox.access")

# Load balancer probes would drown out real traffic
QUIET_PATHS = frozenset({"/health"})


def level_for_status(status: int) -> int:
    """5xx → ERROR, 4xx → WARNING, everything else → INFO."""
    if status >= 500:
        return logging.ERROR
    if status >= 400:
        return logging.WARNING
    return logging.INFO


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Access log for every route except QUIET_PATHS."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        path = request.url.path
        if path in QUIET_PATHS:
            return await call_next(request)

        started = time.perf_counter()
        client_ip = request.client.host if request.client else "unknown"

        try:
            response = await call_next(request)
        except Exception:
            # Unhandled errors never produce a response here; log them as 500
            self._log(request.method, path, 500, started, client_ip)
            raise

        self._log(request.method, path, response.status_code, started, client_ip)
        return response

    @staticmethod
    def _log(method: str, path: str, status: int, started: float, client_ip: str) -> None:
        duration_ms = (time.perf_counter() - started) * 1000
        rid = request_id_var.get("")
        logger.log(
            level_for_status(status),
            "%s %s %d %.1fms [%s] from %s",
            method,
            path,
            status,
            duration_ms,
            rid,
            client_ip,
            extra={
                "request_id": rid,
                "method": method,
                "path": path,
                "status": status,
                "duration_ms": round(duration_ms, 2),
                "client_ip": client_ip,
            },
        )
