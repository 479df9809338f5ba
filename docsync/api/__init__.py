"""
API routes module.

FastAPI routers for all HTTP endpoints.
"""

from fastapi import APIRouter

from .routers import (
    documents_router,
    health_router,
    scheduler_router,
    staging_router,
)

api_router = APIRouter()

# Include all routers
api_router.include_router(health_router)
api_router.include_router(documents_router)
api_router.include_router(scheduler_router)
api_router.include_router(staging_router)

__all__ = ["api_router"]
