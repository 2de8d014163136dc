"""
RecipeBox Backend — JSON API Route Handlers
=============================================

What:  CRUD + search over one resource under /api/<resource>.
Why:   Machine-facing surface; the HTML views in views.py offer the same
       operations to browsers.
How:   build_api_router(resource) returns an APIRouter whose handlers each
       make exactly one Storage Adapter call and return its result as JSON.

Route Inventory (per resource):
    GET    /api/<resource>            list a page   {items, nextPageToken, searchTerm}
    GET    /api/<resource>/search     search by name {items, hasMore}
    POST   /api/<resource>            create
    GET    /api/<resource>/{id}       read (404 when absent)
    PUT    /api/<resource>/{id}       update (404 when absent)
    DELETE /api/<resource>/{id}       delete → "OK"

Errors raised by the storage layer are not caught here; the handlers in
main.py turn them into {"error", "message", "internalCode", "request_id"}.
"""

import logging
from typing import Any, Dict

from fastapi import APIRouter, Body, Depends, Query, Request
from fastapi.responses import PlainTextResponse

from recipebox.resources import Resource
from recipebox.schemas.record import (
    ErrorResponse,
    RecordListResponse,
    RecordResponse,
    SearchResponse,
)
from recipebox.storage import Storage

logger = logging.getLogger(__name__)


def storage_dependency(resource: Resource):
    """FastAPI dependency resolving the Storage for `resource` from app.state."""

    def get_storage(request: Request) -> Storage:
        return request.app.state.backend.storage_for(resource.name)

    get_storage.__name__ = f"get_{resource.name}_storage"
    return get_storage


def build_api_router(resource: Resource) -> APIRouter:
    """Create the JSON router for one resource."""
    router = APIRouter(prefix=resource.api_prefix, tags=[resource.title])
    get_storage = storage_dependency(resource)

    @router.get(
        "",
        response_model=RecordListResponse,
        responses={400: {"description": "Invalid page token", "model": ErrorResponse}},
        summary=f"List {resource.name}",
        description=(
            f"Returns a page of {resource.name}. Pass the previous response's "
            "nextPageToken to get the next page, and `term` to filter by name."
        ),
    )
    async def list_records(
        request: Request,
        page_token: str | None = Query(default=None, alias="pageToken"),
        term: str | None = Query(default=None, description="Case-insensitive name filter"),
        storage: Storage = Depends(get_storage),
    ) -> RecordListResponse:
        page = await storage.list(
            request.app.state.settings.page_size,
            page_token=page_token,
            search_term=term,
        )
        return RecordListResponse(
            items=page.items,
            next_page_token=page.next_page_token,
            search_term=page.search_term,
        )

    @router.get(
        "/search",
        response_model=SearchResponse,
        responses={400: {"description": "Empty search term", "model": ErrorResponse}},
        summary=f"Search {resource.name} by name",
    )
    async def search_records(
        term: str = Query(default="", description="Substring to look for in `name`"),
        limit: int = Query(default=10, ge=1, le=100),
        storage: Storage = Depends(get_storage),
    ) -> SearchResponse:
        result = await storage.search(limit, term)
        return SearchResponse(items=result.items, has_more=result.has_more)

    @router.post(
        "",
        response_model=RecordResponse,
        summary=f"Create a {resource.singular}",
    )
    async def create_record(
        data: Dict[str, Any] = Body(..., examples=[{"name": "Pasta"}]),
        storage: Storage = Depends(get_storage),
    ) -> Dict[str, Any]:
        record = await storage.create(data)
        logger.info("Created %s %s", resource.singular, record["id"])
        return record

    @router.get(
        "/{record_id}",
        response_model=RecordResponse,
        responses={404: {"description": "Not found", "model": ErrorResponse}},
        summary=f"Get a {resource.singular}",
    )
    async def read_record(
        record_id: str,
        storage: Storage = Depends(get_storage),
    ) -> Dict[str, Any]:
        return await storage.read(record_id)

    @router.put(
        "/{record_id}",
        response_model=RecordResponse,
        responses={404: {"description": "Not found", "model": ErrorResponse}},
        summary=f"Update a {resource.singular}",
    )
    async def update_record(
        record_id: str,
        data: Dict[str, Any] = Body(...),
        storage: Storage = Depends(get_storage),
    ) -> Dict[str, Any]:
        return await storage.update(record_id, data)

    @router.delete(
        "/{record_id}",
        response_class=PlainTextResponse,
        summary=f"Delete a {resource.singular}",
        description="Deleting an id that does not exist also answers 200 OK.",
    )
    async def delete_record(
        record_id: str,
        storage: Storage = Depends(get_storage),
    ) -> PlainTextResponse:
        await storage.delete(record_id)
        return PlainTextResponse("OK", status_code=200)

    return router
