"""
Document API endpoints.

Routes:
- POST /documents/sync - Discover, stage and register the caller's Drive documents
- GET /documents - List the caller's documents (newest first)
- GET /documents/unprocessed - Pending documents (oldest first)
- GET /documents/stats - Per-status and per-type counters
- POST /documents/{id}/status - Operator status change
- DELETE /documents/{id} - Delete staged copy and registry row

Dependencies: docsync.application.services, docsync.models
System role: Document management HTTP API
"""

import logging

from fastapi import APIRouter, Depends, Query, status

from docsync.api.deps import get_drive_credentials, get_sync_service, get_user_id
from docsync.application.services import DocumentSyncService
from docsync.models.document import (
    DocumentListResponse,
    DocumentResponse,
    DocumentStats,
    StatusUpdateRequest,
    UnprocessedDocumentsResponse,
)
from docsync.models.pipeline import SyncResult
from docsync.models.remote import DriveCredentials

from .error_handling import handle_docsync_errors

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/documents", tags=["documents"])


@router.post("/sync", response_model=SyncResult)
@handle_docsync_errors
async def sync_documents(
    credentials: DriveCredentials = Depends(get_drive_credentials),
    sync_service: DocumentSyncService = Depends(get_sync_service),
) -> SyncResult:
    """
    Sync the caller's Google Drive documents into the registry.

    Raises:
        HTTPException(401): Missing headers or Drive rejected the token
        HTTPException(502): Drive listing failed
        HTTPException(500): Registry transaction failed
    """
    logger.info(
        f"{__name__}:sync_documents - Starting document sync",
        extra={"user_id": credentials.user_id},
    )
    return await sync_service.sync_user_documents(credentials)


@router.get("", response_model=DocumentListResponse)
@handle_docsync_errors
async def list_documents(
    limit: int = Query(default=100, ge=1, le=1000),
    offset: int = Query(default=0, ge=0),
    user_id: str = Depends(get_user_id),
    sync_service: DocumentSyncService = Depends(get_sync_service),
) -> DocumentListResponse:
    """List the caller's documents, newest first."""
    documents, total = await sync_service.list_documents(user_id, limit=limit, offset=offset)
    return DocumentListResponse(
        documents=[DocumentResponse.model_validate(doc) for doc in documents],
        total=total,
        limit=limit,
        offset=offset,
    )


@router.get("/unprocessed", response_model=UnprocessedDocumentsResponse)
@handle_docsync_errors
async def list_unprocessed_documents(
    limit: int = Query(default=100, ge=1, le=1000),
    user_id: str = Depends(get_user_id),
    sync_service: DocumentSyncService = Depends(get_sync_service),
) -> UnprocessedDocumentsResponse:
    """List the caller's pending documents, oldest first."""
    documents = await sync_service.list_unprocessed(user_id, limit=limit)
    return UnprocessedDocumentsResponse(
        documents=[DocumentResponse.model_validate(doc) for doc in documents],
        count=len(documents),
        limit=limit,
    )


@router.get("/stats", response_model=DocumentStats)
@handle_docsync_errors
async def get_document_stats(
    user_id: str = Depends(get_user_id),
    sync_service: DocumentSyncService = Depends(get_sync_service),
) -> DocumentStats:
    return await sync_service.get_stats(user_id)


@router.post("/{document_id}/status", response_model=DocumentResponse)
@handle_docsync_errors
async def update_document_status(
    document_id: int,
    request: StatusUpdateRequest,
    user_id: str = Depends(get_user_id),
    sync_service: DocumentSyncService = Depends(get_sync_service),
) -> DocumentResponse:
    """
    Force a document's status.

    ``completed`` keeps any stored result and removes the staged copy;
    ``failed`` requires ``error``; ``pending`` resets a document for
    another processing attempt.

    Raises:
        HTTPException(404): Document not found for this user
        HTTPException(400): Missing error for failed, or no staged copy for processing
    """
    document = await sync_service.update_status(
        document_id,
        request.status,
        error=request.error,
        user_id=user_id,
    )
    return DocumentResponse.model_validate(document)


@router.delete("/{document_id}", status_code=status.HTTP_204_NO_CONTENT)
@handle_docsync_errors
async def delete_document(
    document_id: int,
    user_id: str = Depends(get_user_id),
    sync_service: DocumentSyncService = Depends(get_sync_service),
) -> None:
    """
    Delete a document and its staged copy.

    Raises:
        HTTPException(404): Document not found for this user
    """
    await sync_service.delete_document(document_id, user_id=user_id)
