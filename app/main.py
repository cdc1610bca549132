# =============================================================================
# app/main.py - FastAPI Application Entry Point
# =============================================================================
# This is the main entry point for the MindPath API.
# It configures the FastAPI application with middleware, routers, and handlers.
#
# Usage:
#   python scripts/start_server.py           # HOST/PORT from settings
#   uvicorn app.main:app --port $PORT --reload
# =============================================================================

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from app.config import Settings, settings as default_settings
from app.exceptions import application_error_handler, unhandled_exception_handler
from app.middleware import (
    ErrorHandlingMiddleware,
    RateLimitMiddleware,
    RequestLoggingMiddleware,
    StaticFilesMiddleware,
)
from app.routers import health, root
from lib.bootstrap import ensure_directory
from lib.mongo_client import MongoDatabase
from lib.rate_limit import FixedWindowLimiter
from lib.utils import ApplicationError

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if default_settings.DEBUG else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


CORS_METHODS = ["GET", "HEAD", "PUT", "PATCH", "POST", "DELETE"]
CORS_HEADERS = ["Content-Type", "Authorization"]


def create_app(
    settings: Settings | None = None,
    database: MongoDatabase | None = None,
) -> FastAPI:
    """
    Build the MindPath API application.

    The settings and database connection are owned by the returned app
    (app.state.settings, app.state.database). Pass them in to run against
    a test configuration or a fake connection.
    """
    settings = settings or default_settings
    if database is None:
        database = MongoDatabase(settings.MONGODB_URI, timeout_ms=settings.MONGODB_TIMEOUT_MS)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        Application lifespan handler.

        - Startup: ensure the uploads directory, start the database connection
          in the background
        - Shutdown: cancel a pending connect, close the client
        """
        logger.info(f"Starting MindPath API in {settings.ENVIRONMENT} mode")
        logger.info(f"CORS origins: {settings.cors_origins_list}")

        ensure_directory(settings.uploads_path)

        # Not awaited: requests are served whether or not this succeeds
        database.start()

        yield

        logger.info("Shutting down MindPath API")
        await database.close()

    app = FastAPI(
        title="MindPath API",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.database = database
    app.state.limiter = FixedWindowLimiter(
        max_requests=settings.RATE_LIMIT_MAX,
        window_seconds=settings.rate_limit_window_seconds,
    )

    # =========================================================================
    # Middleware (added innermost first)
    # =========================================================================

    app.add_middleware(ErrorHandlingMiddleware)
    app.add_middleware(
        RateLimitMiddleware,
        limiter=app.state.limiter,
        ipv6_subnet=settings.RATE_LIMIT_IPV6_SUBNET,
        trusted_hops=settings.TRUST_PROXY_HOPS,
    )
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(StaticFilesMiddleware, directory=settings.public_path)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=CORS_METHODS,
        allow_headers=CORS_HEADERS,
    )

    # =========================================================================
    # Exception Handlers
    # =========================================================================

    @app.exception_handler(ApplicationError)
    async def handle_application_error(request: Request, exc: ApplicationError):
        """Handle application errors with their own status and code."""
        return await application_error_handler(request, exc)

    # Route errors are answered by ErrorHandlingMiddleware; this covers
    # failures in the middleware itself
    @app.exception_handler(Exception)
    async def handle_general_exception(request: Request, exc: Exception):
        """Handle unexpected exceptions."""
        return await unhandled_exception_handler(request, exc)

    # =========================================================================
    # Routers
    # =========================================================================

    app.include_router(root.router, tags=["Root"])
    app.include_router(health.router, tags=["Health"])

    return app


app = create_app()
