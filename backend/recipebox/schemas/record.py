"""
RecipeBox Backend — Pydantic Request/Response Schemas
=======================================================

What:  Pydantic models defining the JSON API contract.
Why:   Automatic serialization and OpenAPI doc generation. Records are
       schemaless, so the record model only pins down `id` and lets every
       other field through.
How:   Wire names are camelCase (`nextPageToken`, `searchTerm`, `hasMore`,
       `internalCode`) via aliases; FastAPI serializes response models by alias.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


# ══════════════════════════════════════════════════════════════════════════
# Response Models — What the API returns to clients
# ══════════════════════════════════════════════════════════════════════════


class RecordResponse(BaseModel):
    """
    What:  One recipe or category.
    Why extra="allow": any field a client stored comes back unchanged.
    """
    id: str = Field(description="Public record identifier")

    model_config = {
        "extra": "allow",
        "json_schema_extra": {"example": {"id": "abc123", "name": "Pasta"}},
    }


class RecordListResponse(BaseModel):
    """
    What:  One page of records.
    Who:   Returned by GET /api/<resource>.

    How paging works:
        - nextPageToken: opaque token for the next page, null when the page was short
        - searchTerm: the `term` filter echoed back (null when none was given)
    """
    items: List[RecordResponse] = Field(description="Records on this page")
    next_page_token: Optional[str] = Field(
        default=None,
        alias="nextPageToken",
        description="Token for the next page. Null if no more pages.",
    )
    search_term: Optional[str] = Field(
        default=None,
        alias="searchTerm",
        description="The search term this page was filtered by",
    )

    model_config = {"populate_by_name": True}


class SearchResponse(BaseModel):
    """
    What:  Search hits for GET /api/<resource>/search.

    hasMore is a heuristic: true whenever the result filled the limit,
    even if nothing else matches.
    """
    items: List[RecordResponse] = Field(description="Matching records, ordered by name")
    has_more: bool = Field(alias="hasMore", description="Whether more matches may exist")

    model_config = {"populate_by_name": True}


# ══════════════════════════════════════════════════════════════════════════
# Error & Health Models
# ══════════════════════════════════════════════════════════════════════════


class ErrorResponse(BaseModel):
    """
    What:  Standardized error response format for all API errors.

    Example:
        {
            "error": "not_found",
            "message": "recipes with ID 'abc123' was not found",
            "internalCode": 404,
            "request_id": "1f2e3d4c"
        }
    """
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    internal_code: Optional[int] = Field(
        default=None,
        alias="internalCode",
        description="Code attached by the storage layer, if any",
    )
    details: Optional[Dict[str, Any]] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")

    model_config = {"populate_by_name": True}


class HealthResponse(BaseModel):
    """Health check response showing service and storage status."""
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    backend: str = Field(description="Storage backend in use: memory, mongodb, sql")
    storage: str = Field(description="Storage connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")
