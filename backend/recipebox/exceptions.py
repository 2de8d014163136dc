"""
RecipeBox Backend — Custom Exception Hierarchy
================================================

What:  Defines the error variants a Storage Adapter call can end in.
Why:   Routers must tell "record absent" apart from "bad input" and from
       "the store is unreachable". A tagged exception per case keeps that
       distinction explicit instead of inspecting loosely-shaped error objects.
How:   Each exception carries a message, an optional internal code, and a
       context dict. Global exception handlers (registered in main.py) catch
       these and return JSON or an HTML error page with the right status code.
Who:   Raised by storage variants; caught by global handlers.
When:  During request processing; nothing is retried or recovered locally.

Exception Hierarchy:
    RecipeBoxError (base)
    ├── ValidationError   → 400 Bad Request   (internalCode 400)
    ├── NotFoundError     → 404 Not Found     (internalCode 404)
    └── StorageError      → 500 Internal Server Error
"""

from typing import Any, Dict, Optional


class RecipeBoxError(Exception):
    """
    Base exception for all RecipeBox application errors.

    Attributes:
        message:        User-facing error description (safe to return in API response)
        internal_code:  Optional numeric code echoed as `internalCode` in error bodies
        context:        Additional debug info (logged but NOT returned to client)
    """

    status_code = 500
    error = "server_error"

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        internal_code: Optional[int] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.internal_code = internal_code
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(RecipeBoxError):
    """
    Raised when client input cannot be used.

    When:  Empty search term, page token that is not a non-negative integer,
           limit below 1.
    HTTP:  400 Bad Request
    """

    status_code = 400
    error = "validation_error"

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, internal_code=400, context=ctx)
        self.field = field


class NotFoundError(RecipeBoxError):
    """
    Raised when a requested record does not exist.

    What:  read/update on an identifier the store does not know. A malformed
           identifier (e.g. not a valid ObjectId) lands here too.
    HTTP:  404 Not Found
    """

    status_code = 404
    error = "not_found"

    def __init__(
        self,
        resource: str = "record",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = "Not found"
        if resource_id:
            message = f"{resource} with ID '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, internal_code=404, context=ctx)
        self.resource = resource
        self.resource_id = resource_id


class StorageError(RecipeBoxError):
    """
    Raised when the underlying store fails (connection refused, timeout,
    driver or SQL error).

    Security Note:
        The message returned to the client is always generic. The driver's
        own error is kept in `context` and logged server-side only.
    """

    status_code = 500
    error = "storage_error"

    def __init__(
        self,
        message: str = "A storage error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
