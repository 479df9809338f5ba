"""Service orchestrators."""

from .document_sync_service import DocumentSyncService
from .processing_worker import ProcessingWorker

__all__ = [
    "DocumentSyncService",
    "ProcessingWorker",
]
