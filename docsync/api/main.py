"""
FastAPI application with assembled routers.

Initializes the FastAPI app, ensures the registry schema at startup,
starts the processing scheduler when configured to, and shuts the
scheduler and HTTP clients down on exit.

Dependencies: fastapi, docsync.api.routers, uvicorn
System role: API entry point with router assembly and server launch
"""

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from docsync import __version__
from docsync.api import api_router
from docsync.api.deps.dependencies import get_service_cache
from docsync.boundary.db.connection import create_tables
from docsync.configs import get_settings
from docsync.observability import configure_logging


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan context manager.

    Handles startup and shutdown events.
    """
    settings = get_settings()
    configure_logging("DEBUG" if settings.debug else settings.log_level)
    logger = logging.getLogger(__name__)
    logger.info(
        f"{__name__}:lifespan - Starting {settings.app_name}",
        extra={"environment": settings.environment, "debug": settings.debug},
    )

    # Startup
    await create_tables()
    cache = get_service_cache()
    if settings.scheduler.autostart:
        cache.scheduler.start()
        logger.info(f"{__name__}:lifespan - Processing scheduler started ({cache.scheduler.pattern})")

    yield

    # Shutdown
    await cache.aclose()
    logger.info(f"{__name__}:lifespan - Services shut down")


def create_app() -> FastAPI:
    """
    Create and configure FastAPI application with routers.

    Returns:
        FastAPI: Configured application instance with all routers registered
    """
    settings = get_settings()
    app = FastAPI(
        title=settings.app_name,
        description="Google Drive document discovery, staging and processing pipeline",
        version=__version__,
        debug=settings.debug,
        lifespan=lifespan,
    )

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Register all routers with /api/v1 prefix for versioning
    app.include_router(api_router, prefix="/api/v1")

    return app


app = create_app()


def run() -> None:
    """Serve the API with uvicorn."""
    uvicorn.run(
        "docsync.api.main:app",
        host="0.0.0.0",
        port=8000,
    )


if __name__ == "__main__":
    run()
