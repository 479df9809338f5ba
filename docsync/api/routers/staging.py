"""
Staging maintenance API endpoints.

Routes: GET /staging/usage, POST /staging/cleanup

Dependencies: docsync.application.services
System role: Local staging maintenance HTTP API
"""

from fastapi import APIRouter, Depends, Query

from docsync.api.deps import get_sync_service
from docsync.application.services import DocumentSyncService
from docsync.models.staging import CleanupResult, DiskUsage

from .error_handling import handle_docsync_errors

router = APIRouter(prefix="/staging", tags=["staging"])


@router.get("/usage", response_model=DiskUsage)
async def staging_usage(
    sync_service: DocumentSyncService = Depends(get_sync_service),
) -> DiskUsage:
    return await sync_service.staging_usage()


@router.post("/cleanup", response_model=CleanupResult)
@handle_docsync_errors
async def cleanup_staging(
    max_age_days: float | None = Query(default=None, ge=0),
    sync_service: DocumentSyncService = Depends(get_sync_service),
) -> CleanupResult:
    """Remove staged files older than ``max_age_days`` (default from settings)."""
    return await sync_service.cleanup_staging(max_age_days)
