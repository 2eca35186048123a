"""
Book Catalog Backend — FastAPI Application Factory
==================================================

What:  Creates and configures the FastAPI application instance.
How:   Factory pattern: create_app() returns a configured FastAPI instance.
Who:   Served by uvicorn (`uvicorn bookcatalog.main:app` or `python -m bookcatalog`).

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware Chain:                                  │
    │  ┌──────────┐ ┌─────────────────┐ ┌──────────────┐  │
    │  │ Req ID   │→│  Logging        │→│ GZip / CORS  │  │
    │  └──────────┘ └─────────────────┘ └──────────────┘  │
    │                                                     │
    │  Routes:                                            │
    │  ┌──────────┐ ┌──────────────┐ ┌─────────────────┐  │
    │  │ /books   │ │ /categories  │ │ /health, /      │  │
    │  └──────────┘ └──────────────┘ └─────────────────┘  │
    │                                                     │
    │  Exception Handlers (one error envelope):           │
    │  ┌──────────────────────────────────────────────┐   │
    │  │ Validation→400 │ NotFound→404 │ Database→500 │   │
    │  └──────────────────────────────────────────────┘   │
    └─────────────────────────────────────────────────────┘

Lifecycle:
    Startup:
    1. Initialize logging
    2. Validate configuration (logged, not fatal)
    3. Build the engine and session factory, store them on app.state

    Shutdown:
    1. Dispose the engine (close all pooled connections)
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from bookcatalog import __version__
from bookcatalog.config import settings
from bookcatalog.database import (
    create_engine_from_settings,
    create_session_factory,
    dispose_engine,
)
from bookcatalog.exceptions import (
    BookCatalogError,
    DatabaseError,
    NotFoundError,
    ValidationError,
)
from bookcatalog.middleware.logging import RequestLoggingMiddleware
from bookcatalog.middleware.request_id import RequestIDMiddleware, request_id_var
from bookcatalog.routes import books, categories, health

logger = logging.getLogger(__name__)
access_logger = logging.getLogger("bookcatalog.access")


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure logging for the entire application.

    Called once during app startup, before any other initialization.
    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[
            logging.StreamHandler(sys.stdout),
        ],
        force=True,
    )

    # Per-statement / per-request chatter from libraries
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Build the process-wide database engine on startup and dispose it on shutdown.

    Handlers never look the engine up globally: the session dependency reads
    the factory stored here from `request.app.state`.
    """
    setup_logging()
    logger.info("Book Catalog backend starting up...")

    try:
        settings.validate_required_for_production()
    except ValueError as e:
        logger.error("Configuration error: %s", str(e))

    engine = create_engine_from_settings(settings)
    app.state.engine = engine
    app.state.session_factory = create_session_factory(engine)

    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)

    yield

    logger.info("Book Catalog backend shutting down...")
    await dispose_engine(engine)
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def error_body(
    code: str,
    message: str,
    fields: Optional[Dict[str, str]] = None,
) -> Dict[str, Any]:
    """Standard envelope: {"error": {"code", "message", "fields"?, "request_id"}}."""
    error: Dict[str, Any] = {"code": code, "message": message}
    if fields:
        error["fields"] = fields
    error["request_id"] = request_id_var.get("")
    return {"error": error}


def validation_fields(exc: RequestValidationError) -> Dict[str, str]:
    """
    Flatten Pydantic errors into {field: message}.

    The leading location segment (body/path/query) is dropped, so a bad
    `categoryId` in the body is reported under "categoryId" and a malformed
    path id under "book_id".
    """
    fields: Dict[str, str] = {}
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ())]
        if loc and loc[0] in ("body", "path", "query", "header"):
            loc = loc[1:]
        key = ".".join(loc) or "body"
        fields.setdefault(key, err.get("msg", "Invalid value"))
    return fields


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exception types to status codes and the standard error envelope.

    Handler hierarchy:
        RequestValidationError  → 400 (body, path id, query string)
        ValidationError         → 400
        NotFoundError           → 404
        HTTPException           → its own status (unknown route, bad method)
        DatabaseError           → 500, generic message
        BookCatalogError (base) → 500
        Exception (fallback)    → 500, stack trace logged

    Internal details (SQL, driver errors, stack traces) are only logged.
    """

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        fields = validation_fields(exc)
        logger.warning("[%s] Request validation failed: %s", request_id_var.get(""), fields)
        return JSONResponse(
            status_code=400,
            content=error_body("validation_error", "Request validation failed", fields),
        )

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        logger.warning("[%s] Validation error: %s", request_id_var.get(""), exc.message)
        return JSONResponse(
            status_code=400,
            content=error_body(exc.code, exc.message, exc.fields),
        )

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return JSONResponse(
            status_code=404,
            content=error_body(exc.code, exc.message),
        )

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content=error_body("http_error", str(exc.detail)),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(DatabaseError)
    async def handle_database_error(request: Request, exc: DatabaseError):
        logger.error(
            "[%s] Database error: %s | Context: %s",
            request_id_var.get(""), exc.message, exc.context,
        )
        return JSONResponse(
            status_code=500,
            content=error_body(exc.code, "An internal error occurred. Please try again later."),
        )

    @app.exception_handler(BookCatalogError)
    async def handle_app_error(request: Request, exc: BookCatalogError):
        logger.error("[%s] Application error: %s | Context: %s", request_id_var.get(""), exc.message, exc.context)
        return JSONResponse(
            status_code=500,
            content=error_body(exc.code, "An internal error occurred. Please try again later."),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        # Runs in ServerErrorMiddleware, outside the request ID and access
        # logging middleware, so both are done here
        rid = request_id_var.get("")
        logger.error(
            "[%s] Unexpected error: %s",
            rid,
            str(exc),
            exc_info=True,
        )
        access_logger.error(
            "%s %s %d [%s]",
            request.method,
            request.url.path,
            500,
            rid,
            extra={
                "request_id": rid,
                "method": request.method,
                "path": request.url.path,
                "status": 500,
            },
        )
        return JSONResponse(
            status_code=500,
            content=error_body(
                "internal_server_error",
                "An unexpected error occurred. Please try again or contact support.",
            ),
            headers={"X-Request-ID": rid} if rid else None,
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns a fresh instance on every call, so tests can build isolated apps.
    """
    app = FastAPI(
        title="Book Catalog API",
        description="REST API for a catalog of books organized into categories, with full-text search.",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # Middleware executes in reverse order of addition:
    # RequestID → Logging → GZip → CORS → route
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    app.include_router(books.router)
    app.include_router(categories.router)
    app.include_router(health.router)

    return app


app = create_app()
