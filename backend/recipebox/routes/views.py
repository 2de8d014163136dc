"""
RecipeBox Backend — HTML View Route Handlers
==============================================

What:  Server-rendered pages for one resource under /<resource>.
Why:   Browser-facing twin of the JSON API: same five operations, same
       storage calls, HTML instead of JSON.
How:   build_html_router(resource) returns an APIRouter. Reads render a
       Jinja2 template; writes redirect (303 See Other) so a browser refresh
       never re-submits a form.

Route Inventory (per resource, mounted at /<resource>):
    GET  /               list page (?pageToken=&term=)
    GET  /add            empty form
    POST /add            create → redirect to the new record
    GET  /{id}/edit      form filled with the record
    POST /{id}/edit      update → redirect to the record
    GET  /{id}           view
    GET  /{id}/delete    delete → redirect to the list

Errors:
    Every route depends on mark_html_errors(), which flags the request so the
    global handlers in main.py answer with error.html instead of JSON.
"""

import logging
from pathlib import Path
from typing import Any, Dict

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.templating import Jinja2Templates

from recipebox.resources import Resource
from recipebox.routes.api import storage_dependency
from recipebox.storage import Storage

logger = logging.getLogger(__name__)

TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"
templates = Jinja2Templates(directory=str(TEMPLATES_DIR))


def mark_html_errors(request: Request) -> None:
    """Ask the global error handlers for an HTML error page."""
    request.state.html_errors = True


async def form_data(request: Request) -> Dict[str, Any]:
    """URL-encoded form body as a plain dict of its text fields."""
    form = await request.form()
    return {key: value for key, value in form.items() if isinstance(value, str)}


def build_html_router(resource: Resource) -> APIRouter:
    """Create the HTML router for one resource."""
    router = APIRouter(
        prefix=resource.html_prefix,
        tags=[f"{resource.title} (HTML)"],
        dependencies=[Depends(mark_html_errors)],
        include_in_schema=False,
    )
    get_storage = storage_dependency(resource)

    def record_url(record_id: str) -> str:
        return f"{resource.html_prefix}/{record_id}"

    @router.get("", response_class=HTMLResponse)
    async def list_page(
        request: Request,
        page_token: str | None = Query(default=None, alias="pageToken"),
        term: str | None = Query(default=None),
        storage: Storage = Depends(get_storage),
    ) -> HTMLResponse:
        page = await storage.list(
            request.app.state.settings.page_size,
            page_token=page_token,
            search_term=term,
        )
        return templates.TemplateResponse(
            request,
            "list.html",
            {
                "resource": resource,
                "records": page.items,
                "next_page_token": page.next_page_token,
                "search_term": page.search_term,
            },
        )

    @router.get("/add", response_class=HTMLResponse)
    async def add_form(request: Request) -> HTMLResponse:
        return templates.TemplateResponse(
            request,
            "form.html",
            {"resource": resource, "record": {}, "action": "Add"},
        )

    @router.post("/add")
    async def add_submit(
        data: Dict[str, Any] = Depends(form_data),
        storage: Storage = Depends(get_storage),
    ) -> RedirectResponse:
        record = await storage.create(data)
        logger.info("Created %s %s", resource.singular, record["id"])
        return RedirectResponse(url=record_url(record["id"]), status_code=303)

    @router.get("/{record_id}/edit", response_class=HTMLResponse)
    async def edit_form(
        request: Request,
        record_id: str,
        storage: Storage = Depends(get_storage),
    ) -> HTMLResponse:
        record = await storage.read(record_id)
        return templates.TemplateResponse(
            request,
            "form.html",
            {"resource": resource, "record": record, "action": "Edit"},
        )

    @router.post("/{record_id}/edit")
    async def edit_submit(
        record_id: str,
        data: Dict[str, Any] = Depends(form_data),
        storage: Storage = Depends(get_storage),
    ) -> RedirectResponse:
        record = await storage.update(record_id, data)
        return RedirectResponse(url=record_url(record["id"]), status_code=303)

    @router.get("/{record_id}/delete")
    async def delete_record(
        record_id: str,
        storage: Storage = Depends(get_storage),
    ) -> RedirectResponse:
        await storage.delete(record_id)
        return RedirectResponse(url=resource.html_prefix, status_code=303)

    @router.get("/{record_id}", response_class=HTMLResponse)
    async def view_page(
        request: Request,
        record_id: str,
        storage: Storage = Depends(get_storage),
    ) -> HTMLResponse:
        record = await storage.read(record_id)
        return templates.TemplateResponse(
            request,
            "view.html",
            {"resource": resource, "record": record},
        )

    return router
