"""API routers."""

from .documents import router as documents_router
from .health import router as health_router
from .scheduler import router as scheduler_router
from .staging import router as staging_router

__all__ = [
    "documents_router",
    "health_router",
    "scheduler_router",
    "staging_router",
]
