"""
Marathon Event API — FastAPI Application Factory
==================================================

What:  Creates and configures the FastAPI application instance.
How:   Factory pattern: create_app() returns a configured FastAPI instance.
Who:   Called by uvicorn (uvicorn marathon_api.main:app) and by the tests.
When:  Once at server startup; the returned app handles all subsequent requests.

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware Chain:                                  │
    │  ┌──────────┐ ┌──────────┐ ┌──────────┐ ┌────────┐  │
    │  │  CORS    │→│ Req ID   │→│ Logging  │→│ GZip   │  │
    │  └──────────┘ └──────────┘ └──────────┘ └────────┘  │
    │                                                     │
    │  Route table (routes/__init__.py):                  │
    │  /marathons  /registrations  /marathonTips          │
    │  /upcoming-marathons  /jwt  /logout  /  /health     │
    │                                                     │
    │  Exception Handlers:                                │
    │  Validation→400 │ Auth→401 │ NotFound→404 │ DB→500  │
    └─────────────────────────────────────────────────────┘

Lifecycle:
    Startup:
    1. Initialize logging
    2. Validate configuration (raise on missing production settings)
    3. Connect the store client and ping the deployment (raise on failure)
    4. Ensure indexes

    Shutdown:
    1. Close the Motor client
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from marathon_api import __version__
from marathon_api.config import Settings, settings as default_settings
from marathon_api.database import StoreClient
from marathon_api.exceptions import (
    AuthenticationError,
    DatabaseError,
    MarathonAPIError,
    NotFoundError,
    ValidationError,
)
from marathon_api.middleware.logging import RequestLoggingMiddleware
from marathon_api.middleware.request_id import RequestIDMiddleware, request_id_var
from marathon_api.routes import build_router, route_names
from marathon_api.services.auth_service import TokenService

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(log_level: str = "INFO") -> None:
    """
    Configure logging for the entire application.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s
    Called once during startup, before any other initialization.
    """
    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # The access middleware already logs every request
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("pymongo").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Startup: validate settings and connect the store; any failure aborts
    startup so the server never takes traffic without a store.
    Shutdown: close the store client.

    A store injected through create_app(store=...) is used as-is.
    """
    app_settings: Settings = app.state.settings

    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging(app_settings.log_level)
    logger.info("=" * 60)
    logger.info("Marathon Event API starting up (environment=%s)...", app_settings.environment)

    try:
        app_settings.validate_required_for_production()
    except ValueError as e:
        logger.error("Configuration error: %s", str(e))
        raise

    store: Optional[StoreClient] = app.state.store
    owns_store = store is None
    if owns_store:
        store = StoreClient.from_settings(app_settings)
        app.state.store = store
    await store.connect()
    await store.ensure_indexes()

    logger.info("Server ready at http://%s:%d", app_settings.backend_host, app_settings.port)
    logger.info("=" * 60)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("Marathon Event API shutting down...")
    if owns_store:
        store.close()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _error_response(status_code: int, error: str, message: str, details=None) -> JSONResponse:
    content = {"error": error, "message": message, "request_id": request_id_var.get("")}
    if details:
        content["details"] = details
    return JSONResponse(status_code=status_code, content=content)


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exception types to HTTP status codes and response bodies.

    Handler hierarchy:
        ValidationError       → 400 Bad Request
        AuthenticationError   → 401 Unauthorized
        NotFoundError         → 404 Not Found
        DatabaseError         → 500 (generic message, details logged)
        MarathonAPIError      → 500 (catch-all for custom)
        Exception             → 500 (unexpected, stack trace logged)
    """

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        logger.warning("[%s] Validation error: %s", request_id_var.get(""), exc.message)
        return _error_response(400, "validation_error", exc.message, exc.context)

    @app.exception_handler(AuthenticationError)
    async def handle_authentication_error(request: Request, exc: AuthenticationError):
        return _error_response(401, "unauthorized", exc.message)

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return _error_response(404, "not_found", exc.message)

    @app.exception_handler(DatabaseError)
    async def handle_database_error(request: Request, exc: DatabaseError):
        logger.error(
            "[%s] Database error: %s | Context: %s", request_id_var.get(""), exc.message, exc.context
        )
        return _error_response(
            500, "server_error", "An internal error occurred. Please try again later."
        )

    @app.exception_handler(MarathonAPIError)
    async def handle_app_error(request: Request, exc: MarathonAPIError):
        logger.error("[%s] Application error: %s", request_id_var.get(""), exc.message)
        return _error_response(500, "server_error", exc.message)

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.error(
            "[%s] Unexpected error: %s", request_id_var.get(""), str(exc), exc_info=True
        )
        return _error_response(
            500,
            "internal_server_error",
            "An unexpected error occurred. Please try again or contact support.",
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(
    app_settings: Optional[Settings] = None,
    store: Optional[StoreClient] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        app_settings:  Settings override (defaults to the env-loaded singleton)
        store:         Pre-built StoreClient; when omitted the lifespan
                       builds one from the settings

    Raises:
        ValueError: PROTECTED_ROUTES names a route that does not exist
    """
    app_settings = app_settings or default_settings

    unknown = app_settings.protected_routes_set - route_names()
    if unknown:
        raise ValueError(f"PROTECTED_ROUTES names unknown routes: {sorted(unknown)}")

    app = FastAPI(
        title="Marathon Event API",
        description="Marathon events, participant registrations and running tips.",
        version=__version__,
        lifespan=lifespan,
    )

    app.state.settings = app_settings
    app.state.store = store
    app.state.token_service = TokenService(
        app_settings.access_token_secret,
        expire_days=app_settings.token_expire_days,
        secure_cookies=app_settings.is_production,
    )

    # ── Register Middleware ───────────────────────────────────────────────
    # Last added runs first: CORS → RequestID → Logging → GZip
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )

    register_exception_handlers(app)
    app.include_router(build_router(protected_names=app_settings.protected_routes_set))

    return app


app = create_app()
