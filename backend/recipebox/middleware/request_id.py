"""
RecipeBox Backend — Request ID Middleware
===========================================

What:  Assigns a correlation ID to each request and echoes it in the response.
Why:   Every log line and every error body of one request share the same ID,
       so a user-reported error can be matched to server logs.
How:   Reuses the client's X-Request-ID header when it looks like an ID,
       otherwise makes one; stores it in a ContextVar and request.state.
"""

import re
import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

HEADER = "X-Request-ID"

# Client IDs end up in log lines; anything else is replaced
_CLIENT_ID = re.compile(r"^[A-Za-z0-9._-]{1,64}$")

# Coroutine-local: concurrent requests on one event loop each see their own ID
request_id_var: ContextVar[str] = ContextVar("request_id", default="")


def resolve_request_id(header_value: str | None) -> str:
    if header_value and _CLIENT_ID.match(header_value):
        return header_value
    return uuid.uuid4().hex[:8]


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Tags each request with an ID for tracing."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        rid = resolve_request_id(request.headers.get(HEADER))
        request_id_var.set(rid)
        request.state.request_id = rid

        response = await call_next(request)
        response.headers[HEADER] = rid
        return response
