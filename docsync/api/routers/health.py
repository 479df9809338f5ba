"""
Health check API endpoints.

Routes: GET /health, GET /health/processor

Dependencies: docsync.boundary.processors
System role: Health check HTTP API
"""

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from docsync.api.deps import get_processing_backend_dependency
from docsync.boundary.processors import ProcessingBackend


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str
    message: str


router = APIRouter(prefix="/health", tags=["health"])


@router.get("", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Basic health check."""
    return HealthResponse(status="healthy", message="Server Healthy")


@router.get("/processor", response_model=HealthResponse)
async def health_check_processor(
    backend: ProcessingBackend = Depends(get_processing_backend_dependency),
) -> HealthResponse:
    """Processing backend reachability."""
    if await backend.check_health():
        return HealthResponse(status="healthy", message=f"{backend.name} reachable")
    return HealthResponse(status="unhealthy", message=f"{backend.name} unreachable")
