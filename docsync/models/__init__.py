"""
Domain models and API schemas.

Pydantic models shared between the boundary adapters, the application
services and the HTTP layer.
"""

from docsync.models.document import (
    DocumentListResponse,
    DocumentResponse,
    DocumentStats,
    DocumentUpsert,
    StatusUpdateRequest,
    UnprocessedDocumentsResponse,
)
from docsync.models.pipeline import (
    BatchResult,
    ProcessingOutcome,
    SchedulerStatus,
    SyncResult,
)
from docsync.models.remote import DownloadOutcome, DriveCredentials, RemoteFile
from docsync.models.staging import CleanupResult, DiskUsage, StagedFile

__all__ = [
    "BatchResult",
    "CleanupResult",
    "DiskUsage",
    "DocumentListResponse",
    "DocumentResponse",
    "DocumentStats",
    "DocumentUpsert",
    "DownloadOutcome",
    "DriveCredentials",
    "ProcessingOutcome",
    "RemoteFile",
    "SchedulerStatus",
    "StagedFile",
    "StatusUpdateRequest",
    "SyncResult",
    "UnprocessedDocumentsResponse",
]
