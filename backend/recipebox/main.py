"""
RecipeBox Backend — FastAPI Application Factory
=================================================

What:  Creates and configures the FastAPI application instance.
Why:   Centralizes configuration, storage wiring, middleware, route mounting,
       error translation, and lifecycle management in one place.
How:   Factory pattern: create_app(settings, backend) returns a configured app.
Who:   Called by uvicorn (uvicorn recipebox.main:app) and by the tests.

Application Architecture:
    ┌──────────────────────────────────────────────────────┐
    │                    FastAPI App                       │
    │                                                      │
    │  Middleware:  Request ID → Logging → GZip → CORS     │
    │                                                      │
    │  Routes (per resource: recipes, categories):         │
    │    /api/<resource>/...   JSON      (routes/api.py)   │
    │    /<resource>/...       HTML      (routes/views.py) │
    │    /health, / → /recipes                             │
    │                                                      │
    │  Exception Handlers:                                 │
    │    ValidationError→400 │ NotFound→404 │ Storage→500  │
    │                                                      │
    │  app.state.backend: Storage per resource, one shared │
    │  connection (MongoDB client / SQLAlchemy engine)     │
    └──────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  logging, config validation, backend.startup() (SQL: create tables)
    Shutdown: backend.close() (close the client / dispose the engine)
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse, RedirectResponse, Response

from recipebox import __version__
from recipebox.config import Settings, settings as default_settings
from recipebox.exceptions import (
    NotFoundError,
    RecipeBoxError,
    StorageError,
    ValidationError,
)
from recipebox.middleware.logging import RequestLoggingMiddleware
from recipebox.middleware.request_id import RequestIDMiddleware, request_id_var
from recipebox.resources import RESOURCES
from recipebox.routes import health
from recipebox.routes.api import build_api_router
from recipebox.routes.views import build_html_router, templates
from recipebox.storage import Backend, create_backend

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(level: str = "INFO") -> None:
    """
    Configure logging for the entire application.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s, on stdout
    (Docker captures stdout). Called once during startup.
    """
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # These log every operation at DEBUG/INFO
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("pymongo").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Startup: logging, config check, storage startup.
    Shutdown: release the storage connection.
    """
    config: Settings = app.state.settings
    backend: Backend = app.state.backend

    setup_logging(config.log_level)
    logger.info("=" * 60)
    logger.info("RecipeBox Backend %s starting up...", __version__)

    # Logged, not fatal: /health keeps reporting while the config gets fixed
    try:
        config.validate_required_for_production()
    except ValueError as e:
        logger.error("Configuration error: %s", str(e))

    await backend.startup()
    logger.info("Storage backend: %s", backend.name)
    logger.info("Server ready at http://%s:%d", config.backend_host, config.backend_port)
    logger.info("=" * 60)

    yield

    logger.info("RecipeBox Backend shutting down...")
    await backend.close()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def error_response(
    request: Request,
    status_code: int,
    error: str,
    message: str,
    internal_code: Optional[int] = None,
) -> Response:
    """
    Build the error response in the format the failing router speaks.

    HTML routes (request.state.html_errors) get error.html; everything else
    gets {"error", "message", "internalCode", "request_id"}.
    """
    rid = request_id_var.get("")
    if getattr(request.state, "html_errors", False):
        return templates.TemplateResponse(
            request,
            "error.html",
            {"status_code": status_code, "message": message, "request_id": rid},
            status_code=status_code,
        )
    return JSONResponse(
        status_code=status_code,
        content={
            "error": error,
            "message": message,
            "internalCode": internal_code,
            "request_id": rid,
        },
    )


def register_exception_handlers(app: FastAPI) -> None:
    """
    Register global exception handlers: the generic error-to-status translator.

    Handler hierarchy:
        ValidationError   → 400 (logged as WARNING)
        NotFoundError     → 404
        StorageError      → 500 (context logged, generic message returned)
        RecipeBoxError    → its status_code
        Exception         → 500 (traceback logged)

    Exception handlers NEVER expose driver errors or tracebacks in the response.
    """

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        logger.warning("[%s] Validation error: %s", request_id_var.get(""), exc.message)
        return error_response(request, 400, exc.error, exc.message, exc.internal_code)

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return error_response(request, 404, exc.error, exc.message, exc.internal_code)

    @app.exception_handler(StorageError)
    async def handle_storage_error(request: Request, exc: StorageError):
        rid = request_id_var.get("")
        logger.error("[%s] Storage error: %s | Context: %s", rid, exc.message, exc.context)
        return error_response(request, 500, exc.error, exc.message, exc.internal_code)

    @app.exception_handler(RecipeBoxError)
    async def handle_app_error(request: Request, exc: RecipeBoxError):
        rid = request_id_var.get("")
        logger.error("[%s] Application error: %s | Context: %s", rid, exc.message, exc.context)
        return error_response(request, exc.status_code, exc.error, exc.message, exc.internal_code)

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.error(
            "[%s] Unexpected error: %s",
            request_id_var.get(""),
            str(exc),
            exc_info=True,
        )
        return error_response(
            request,
            500,
            "internal_server_error",
            "An unexpected error occurred. Please try again later.",
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(
    settings: Optional[Settings] = None,
    backend: Optional[Backend] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings: Configuration; defaults to the process-wide `settings`.
        backend:  Storage backend; defaults to create_backend(settings).
                  Tests pass an in-memory or SQLite backend here.
    """
    config = settings or default_settings
    storage_backend = backend or create_backend(config)

    app = FastAPI(
        title="RecipeBox API",
        description="Recipes and categories over a document store, as JSON and HTML.",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    app.state.settings = config
    app.state.backend = storage_backend

    # ── Register Middleware ───────────────────────────────────────────────
    # Last added = first to execute: RequestID → Logging → GZip → CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    for resource in RESOURCES:
        app.include_router(build_api_router(resource))
        app.include_router(build_html_router(resource))
    app.include_router(health.router)

    @app.get("/", include_in_schema=False)
    async def index() -> RedirectResponse:
        return RedirectResponse(url="/recipes", status_code=302)

    return app


# uvicorn expects `recipebox.main:app` to be importable
app = create_app()
