"""
Doula JSON Backend — FastAPI Application Factory
===================================================

What:  Creates and configures the FastAPI application instance.
How:   create_app() wires middleware, exception handlers and one generated
       router per configured collection; run() serves it with uvicorn.
Who:   uvicorn (`uvicorn doula_api.main:app`), the `doula-api` console
       script, `python -m doula_api`, and the test suite.

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware Chain:                                  │
    │  ┌──────────┐ ┌──────────┐ ┌──────┐ ┌────────────┐ │
    │  │  Req ID  │→│ Logging  │→│ GZip │→│ CORS (*)   │ │
    │  └──────────┘ └──────────┘ └──────┘ └────────────┘ │
    │                                                     │
    │  Routes:                                            │
    │  ┌──────────────────────┐ ┌──────────┐ ┌─────────┐ │
    │  │ /api/{name}[/{id}] ×N│ │ /api/all │ │ /health │ │
    │  └──────────────────────┘ └──────────┘ └─────────┘ │
    │                                                     │
    │  Exception Handlers:                                │
    │  ┌──────────────────────────────────────────────┐  │
    │  │ NotFound→404 │ OperationFailed→500 │ *→500   │  │
    │  └──────────────────────────────────────────────┘  │
    └─────────────────────────────────────────────────────┘
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from doula_api import __version__
from doula_api.config import Settings, settings as default_settings
from doula_api.exceptions import OperationFailedError, RecordNotFoundError
from doula_api.middleware.logging import RequestLoggingMiddleware
from doula_api.middleware.request_id import RequestIDMiddleware, request_id_var
from doula_api.routes import health
from doula_api.routes.aggregate import make_aggregate_router
from doula_api.routes.collections import make_collection_router
from doula_api.services.collection_store import CollectionStore
from doula_api.services.record_service import RecordService

logger = logging.getLogger(__name__)

NOT_FOUND_MESSAGE = "not found"
INTERNAL_ERROR_MESSAGE = "internal error"


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(level: str) -> None:
    """
    Configure logging for the whole process.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s, to stdout.
    Called once at startup, before anything else logs.
    """
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )
    # RequestLoggingMiddleware already writes one line per request
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup: logging, data directory, banner. Shutdown: log only."""
    app_settings: Settings = app.state.settings
    store: CollectionStore = app.state.store

    setup_logging(app_settings.log_level)
    store.data_dir.mkdir(parents=True, exist_ok=True)
    logger.info("Data directory: %s", store.data_dir)
    logger.info("Collections: %s", ", ".join(app.state.collections))
    logger.info("JSON backend listening on port %d", app_settings.port)

    yield

    logger.info("JSON backend shutting down.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def register_exception_handlers(app: FastAPI) -> None:
    """
    Map application exceptions to `{"error": "<static text>"}` responses.

        RecordNotFoundError   → 404 {"error": "not found"}
        OperationFailedError  → 500 {"error": <operation message>}
        Exception (fallback)  → 500 {"error": "internal error"}

    Causes are logged with their stack trace; clients never see them.
    """

    @app.exception_handler(RecordNotFoundError)
    async def handle_not_found(request: Request, exc: RecordNotFoundError):
        rid = request_id_var.get("")
        logger.info("[%s] %s", rid, exc.message)
        return JSONResponse(status_code=404, content={"error": NOT_FOUND_MESSAGE})

    @app.exception_handler(OperationFailedError)
    async def handle_operation_failed(request: Request, exc: OperationFailedError):
        rid = request_id_var.get("")
        cause = exc.__cause__ or exc
        logger.error(
            "[%s] %s %s failed: %s | Context: %s",
            rid,
            request.method,
            request.url.path,
            exc.message,
            exc.context,
            exc_info=(type(cause), cause, cause.__traceback__),
        )
        return JSONResponse(status_code=500, content={"error": exc.message})

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        rid = request_id_var.get("")
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        return JSONResponse(status_code=500, content={"error": INTERNAL_ERROR_MESSAGE})


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(
    app_settings: Optional[Settings] = None,
    store: Optional[CollectionStore] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        app_settings: Settings to use (defaults to the environment singleton).
        store:        Storage to use (defaults to one rooted at settings.data_dir).

    Returns: Fully configured FastAPI instance.
    """
    app_settings = app_settings or default_settings
    store = store or CollectionStore(app_settings.data_dir, indent=app_settings.json_indent)

    app = FastAPI(
        title="Doula JSON Backend",
        description=(
            "CRUD API for bookings, doulas, services and paychecks, "
            "each stored as a JSON array file on disk."
        ),
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = app_settings
    app.state.store = store
    app.state.collections = list(app_settings.collections)

    # ── Register Middleware ───────────────────────────────────────────────
    # Last added runs first: RequestID → Logging → GZip → CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if app_settings.cors_allow_all else app_settings.cors_origins_list,
        # Browsers reject credentials together with a wildcard origin
        allow_credentials=not app_settings.cors_allow_all,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    for name in app_settings.collections:
        app.include_router(make_collection_router(RecordService(name, store)))
    app.include_router(make_aggregate_router(store, app_settings.collections))
    app.include_router(health.router)

    return app


def run() -> None:
    """Serve the default app with uvicorn on settings.host:settings.port."""
    uvicorn.run(
        "doula_api.main:app",
        host=default_settings.host,
        port=default_settings.port,
        log_level=default_settings.log_level.lower(),
    )


# uvicorn expects `doula_api.main:app` to be importable
app = create_app()
