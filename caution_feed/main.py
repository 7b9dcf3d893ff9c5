"""FastAPI application entry point.

This module creates and configures the FastAPI application instance.
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from caution_feed.api.cautions import router as cautions_router
from caution_feed.core.config import get_config
from caution_feed.core.container import container
from caution_feed.core.database import check_db_connection, close_db, init_db
from caution_feed.core.exceptions import (
    CautionFeedError,
    RecordNotFoundError,
    StoreUnavailableError,
)
from caution_feed.core.logging import get_logger, setup_logging

# Setup logging
setup_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan events.

    Creates tables in development, starts the in-process feed scheduler
    when enabled, and releases the engine and HTTP client on shutdown.

    Args:
        app: FastAPI application instance

    Yields:
        None
    """
    config = get_config()
    engine = container.infrastructure.db_engine()
    logger.info("Starting CautionFeed application", env=config.app_env)

    # Initialize database (only in development with available DB)
    if config.is_development:
        if await check_db_connection(engine):
            await init_db(engine)
        else:
            logger.warning("Database connection not available, skipping initialization")

    scheduler = None
    if config.scheduler_enabled:
        scheduler = container.feed_scheduler()
        scheduler.start()

    yield

    logger.info("Shutting down CautionFeed application")
    if scheduler is not None:
        await scheduler.stop()
    await container.http_client().close()
    await close_db(engine)
    logger.info("Cleanup complete")


def _error_response(status_code: int, exc: CautionFeedError) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=exc.to_dict())


async def store_unavailable_handler(request: Request, exc: StoreUnavailableError) -> JSONResponse:
    """Map store outages to 503."""
    logger.error("Store unavailable", path=request.url.path, error=str(exc))
    return _error_response(status.HTTP_503_SERVICE_UNAVAILABLE, exc)


async def record_not_found_handler(request: Request, exc: RecordNotFoundError) -> JSONResponse:
    """Map missing records to 404."""
    return _error_response(status.HTTP_404_NOT_FOUND, exc)


def create_app() -> FastAPI:
    """Create the FastAPI application.

    Returns:
        Configured FastAPI instance
    """
    config = get_config()
    app = FastAPI(
        title=config.app_name,
        description="Persona-targeted security caution feed",
        version="0.1.0",
        docs_url="/docs" if config.is_development else None,
        redoc_url="/redoc" if config.is_development else None,
        lifespan=lifespan,
    )

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_credentials=config.cors_allow_credentials,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(StoreUnavailableError, store_unavailable_handler)
    app.add_exception_handler(RecordNotFoundError, record_not_found_handler)

    @app.get("/health")
    async def health_check() -> dict[str, str]:
        """Health check endpoint.

        Returns:
            Health status
        """
        cfg = get_config()
        return {
            "status": "healthy",
            "app": cfg.app_name,
            "env": cfg.app_env,
        }

    @app.get("/")
    async def root() -> dict[str, str]:
        """Root endpoint.

        Returns:
            Welcome message
        """
        return {
            "message": "CautionFeed API",
            "version": "0.1.0",
            "docs": "/docs" if get_config().is_development else "disabled",
        }

    app.include_router(cautions_router)
    return app


app = create_app()
