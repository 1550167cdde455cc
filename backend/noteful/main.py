"""
Noteful Backend — FastAPI Application Factory
===============================================

What:  Creates and configures the FastAPI application instance.
How:   Factory pattern: create_app() returns a configured FastAPI instance.
Who:   Called by uvicorn to start the server (uvicorn noteful.main:app).

Application Architecture:
    ┌──────────────────────────────────────────────────────────┐
    │                      FastAPI App                         │
    │                                                          │
    │  Middleware Chain:                                       │
    │  ┌──────────┐ ┌──────────┐ ┌──────┐ ┌──────┐             │
    │  │ Req ID   │→│ Logging  │→│ GZip │→│ CORS │             │
    │  └──────────┘ └──────────┘ └──────┘ └──────┘             │
    │                                                          │
    │  Routes:                                                 │
    │  /api/users  /api/login  /api/refresh                    │
    │  /api/folders  /api/tags  /api/notes  /health            │
    │                                                          │
    │  Exception Handlers:                                     │
    │  ┌────────────────────────────────────────────────────┐  │
    │  │ NotefulError → STATUS_BY_KIND │ anything else → 500 │  │
    │  └────────────────────────────────────────────────────┘  │
    └──────────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  configure logging, validate configuration, log readiness
    Shutdown: dispose the database engine (close pooled connections)
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Dict

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from noteful import __version__
from noteful.config import settings
from noteful.database import dispose_engine
from noteful.exceptions import (
    ErrorKind,
    NotefulError,
    RegistrationValidationError,
)
from noteful.middleware.logging import RequestLoggingMiddleware
from noteful.middleware.request_id import RequestIDFilter, RequestIDMiddleware, request_id_var
from noteful.routes import auth, folders, health, notes, tags, users

logger = logging.getLogger(__name__)

# ── Error kind → HTTP status ──────────────────────────────────────────────
STATUS_BY_KIND: Dict[ErrorKind, int] = {
    ErrorKind.INVALID_SHAPE: 400,
    ErrorKind.MISSING_REQUIRED_FIELD: 400,
    ErrorKind.INVALID_REFERENCE: 400,
    ErrorKind.REFERENCE_NOT_FOUND: 400,
    ErrorKind.DUPLICATE_NAME: 400,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.UNAUTHORIZED: 401,
    ErrorKind.DATABASE: 500,
}


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure the root logger once, before anything else logs.

    Format: 2024-01-15T12:00:00 [INFO] noteful.access [3f2a9c1e]: GET /api/notes 200 ...

    The request id comes from `RequestIDFilter`, attached to the handler so
    records from every module (and third-party libraries) carry it.
    """
    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(RequestIDFilter())

    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s [%(request_id)s]: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[handler],
        force=True,
    )

    # Noisy at INFO
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("passlib").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging()
    logger.info("=" * 60)
    logger.info("Noteful Backend %s starting up...", __version__)

    try:
        settings.validate_required_for_production()
    except ValueError as e:
        # Development keeps running on the placeholder secret
        logger.error("Configuration error: %s", e)

    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)
    logger.info("API docs: http://%s:%d/docs", settings.backend_host, settings.backend_port)
    logger.info("=" * 60)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("Noteful Backend shutting down...")
    await dispose_engine()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _request_id(request: Request) -> str:
    # The catch-all handler runs outside the request-id middleware, where
    # the ContextVar is already reset; request.state survives.
    return request_id_var.get("") or getattr(request.state, "request_id", "")


def error_body(exc: NotefulError, status: int, rid: str) -> Dict[str, Any]:
    """Build the JSON error body for an application error."""
    content: Dict[str, Any] = {"error": exc.kind.value, "message": exc.message}
    # DATABASE context is internal (action names, exception types)
    if exc.context and exc.kind is not ErrorKind.DATABASE:
        content["details"] = exc.context
    if isinstance(exc, RegistrationValidationError):
        content.update(code=status, reason="ValidationError", location=exc.location)
    content["request_id"] = rid
    return content


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map every failure to a status code and the shared error body.

    Handler hierarchy:
        NotefulError             → STATUS_BY_KIND[exc.kind] (or status_override)
        RequestValidationError   → 400 invalid_shape
        Starlette HTTPException  → its own status (404 for unmatched routes)
        Exception (fallback)     → 500, stack trace logged, generic message

    Security: handlers never put stack traces, SQL or internal context in
    the response. Details are logged server-side.
    """

    @app.exception_handler(NotefulError)
    async def handle_noteful_error(request: Request, exc: NotefulError):
        rid = _request_id(request)
        status = exc.status_override or STATUS_BY_KIND.get(exc.kind, 500)
        if status >= 500:
            logger.error("[%s] %s: %s | Context: %s", rid, exc.kind.value, exc.message, exc.context)
        else:
            logger.info("[%s] %s: %s", rid, exc.kind.value, exc.message)

        headers = {"WWW-Authenticate": "Bearer"} if status == 401 else None
        return JSONResponse(
            status_code=status,
            content=error_body(exc, status, rid),
            headers=headers,
        )

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        rid = _request_id(request)
        errors = exc.errors()
        first = errors[0] if errors else {}
        return JSONResponse(
            status_code=400,
            content={
                "error": ErrorKind.INVALID_SHAPE.value,
                "message": first.get("msg", "The request is malformed"),
                "details": {"location": [str(part) for part in first.get("loc", ())]},
                "request_id": rid,
            },
        )

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        rid = _request_id(request)
        if exc.status_code == 404:
            error, message = ErrorKind.NOT_FOUND.value, "Not Found"
        else:
            error, message = "http_error", str(exc.detail)
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": error, "message": message, "request_id": rid},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        rid = _request_id(request)
        logger.error("[%s] Unexpected error: %s", rid, exc, exc_info=True)
        return JSONResponse(
            status_code=500,
            content={
                "error": "internal_server_error",
                "message": "An unexpected error occurred. Please try again or contact support.",
                "request_id": rid,
            },
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Tests build their own instance and override `get_session_factory`.
    """
    app = FastAPI(
        title="Noteful API",
        description=(
            "Multi-user note-taking API: notes organized into folders and "
            "labelled with tags, every resource scoped to its owner."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # ── Register Middleware ───────────────────────────────────────────────
    # Executes in reverse order of addition: RequestID → Logging → GZip → CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "Location"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(users.router)
    app.include_router(auth.router)
    app.include_router(folders.router)
    app.include_router(tags.router)
    app.include_router(notes.router)
    app.include_router(health.router)

    return app


# ── Application Instance ─────────────────────────────────────────────────
app = create_app()
