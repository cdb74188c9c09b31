"""
FastAPI application for Prophet.

This module:
- Builds the app with lifespan management
- Configures CORS for the frontend
- Maps Prophet errors to JSON error bodies
- Provides health check endpoints
"""

import logging
from contextlib import asynccontextmanager
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from prophet import __version__
from prophet.api.routes import appeals_router, bets_router, markets_router, users_router
from prophet.config import Settings, get_settings
from prophet.database import check_db_connection, close_db, get_db_info, init_db
from prophet.errors import ProphetError, ValidationFailed
from prophet.observability import initialize_logfire, instrument_app
from prophet.scheduler import create_app_scheduler

logger = logging.getLogger(__name__)

INTERNAL_ERROR = {"error": "Internal server error", "code": "INTERNAL_ERROR"}


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.
    Handles startup and shutdown events.
    """
    settings: Settings = app.state.settings

    logger.info(f"Starting Prophet API ({settings.environment})")

    if not settings.is_production:
        await init_db()

    db_info = get_db_info()
    if await check_db_connection():
        logger.info(f"Database connection successful: {db_info['url']}")
    else:
        logger.error(f"Database connection failed: {db_info['url']}")

    scheduler = None
    if settings.scheduler.enabled:
        scheduler = create_app_scheduler(settings)
        scheduler.start()

    logger.info("Prophet API startup complete")

    yield

    logger.info("Shutting down Prophet API")
    if scheduler is not None:
        scheduler.shutdown(wait=False)
    await close_db()


def _field_name(loc: tuple) -> str:
    parts = [str(part) for part in loc if part not in ("body", "query", "path", "header")]
    return ".".join(parts) or "request"


def register_exception_handlers(app: FastAPI) -> None:
    """Render every failure as ``{"error": ..., "code": ...}``."""

    @app.exception_handler(ProphetError)
    async def prophet_error_handler(request: Request, exc: ProphetError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.warning(f"{request.method} {request.url.path} -> {exc.code}: {exc.message}")
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        failed = ValidationFailed(
            errors=[
                {"field": _field_name(tuple(error["loc"])), "message": error["msg"]}
                for error in exc.errors()
            ]
        )
        return JSONResponse(status_code=failed.status_code, content=failed.to_dict())

    @app.exception_handler(SQLAlchemyError)
    async def database_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
        logger.error(f"Database error on {request.method} {request.url.path}", exc_info=exc)
        return JSONResponse(status_code=500, content=INTERNAL_ERROR)

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.error(f"Unhandled error on {request.method} {request.url.path}", exc_info=exc)
        return JSONResponse(status_code=500, content=INTERNAL_ERROR)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the FastAPI application."""
    settings = settings or get_settings()
    initialize_logfire(settings)

    app = FastAPI(
        title="Prophet API",
        description="Backend API for Prophet - peer-to-peer prediction betting",
        version=__version__,
        lifespan=lifespan,
        debug=settings.debug,
    )
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    # ========================================================================
    # Health Check Endpoints
    # ========================================================================

    @app.get("/health", tags=["Health"])
    async def health_check() -> Dict[str, Any]:
        """
        Health check endpoint for load balancers and monitoring.

        Returns:
            dict: Health status of the application and database
        """
        db_connected = await check_db_connection()

        return {
            "status": "healthy" if db_connected else "degraded",
            "service": "prophet-api",
            "version": __version__,
            "database": "connected" if db_connected else "disconnected",
            "environment": settings.environment,
        }

    @app.get("/", tags=["Root"])
    async def root() -> Dict[str, str]:
        """
        Root endpoint - API information.
        """
        return {
            "name": "Prophet API",
            "version": __version__,
            "description": "Peer-to-peer prediction betting with credit ledger settlement",
            "docs": "/docs",
            "health": "/health",
        }

    # ========================================================================
    # API Routers
    # ========================================================================

    app.include_router(markets_router)
    app.include_router(bets_router)
    app.include_router(appeals_router)
    app.include_router(users_router)

    instrument_app(app)
    return app
