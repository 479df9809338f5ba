"""
Document registry.

Transactional facade over DocumentCRUD and the single source of truth for
pipeline state. Every public method runs in its own session and commits
or rolls back as a unit:

- upsert_many: one transaction per batch (all rows or none)
- transition / mark_completed / mark_failed: one row per transaction,
  enforcing the status state machine

State machine (automatic edges):
    pending    → processing | failed
    processing → completed  | failed
    failed     → pending          (explicit reset)
    completed  → pending          (explicit reset)

Operator force-sets skip the edge check but keep the field invariants:
processed mirrors completed, failed needs a reason, processing needs a
staged path, completed clears the staged path.

Dependencies: sqlalchemy, docsync.boundary.db.CRUD
System role: Persistent document lifecycle store
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from docsync.boundary.db.base import utcnow
from docsync.boundary.db.CRUD.document_crud import DocumentCRUD, document_crud
from docsync.boundary.db.models.document_model import DocumentModel, DocumentStatus
from docsync.core.exceptions import (
    DocumentNotFoundError,
    InvalidTransitionError,
    RegistryError,
)
from docsync.models.document import DocumentStats, DocumentUpsert

logger = logging.getLogger(__name__)

MAX_ERROR_LENGTH = 2000

ALLOWED_TRANSITIONS: dict[DocumentStatus, frozenset[DocumentStatus]] = {
    DocumentStatus.PENDING: frozenset({DocumentStatus.PROCESSING, DocumentStatus.FAILED}),
    DocumentStatus.PROCESSING: frozenset({DocumentStatus.COMPLETED, DocumentStatus.FAILED}),
    DocumentStatus.FAILED: frozenset({DocumentStatus.PENDING}),
    DocumentStatus.COMPLETED: frozenset({DocumentStatus.PENDING}),
}


@dataclass
class UpsertResult:
    """Rows written by one upsert batch."""

    documents: list[DocumentModel] = field(default_factory=list)
    inserted: int = 0
    updated: int = 0
    # Staged files no row references after the commit: refused copies for
    # rows already claimed by the worker, and copies replaced by a new path
    stale_paths: list[str] = field(default_factory=list)


def apply_transition(
    document: DocumentModel,
    new_status: DocumentStatus,
    error: str | None = None,
    force: bool = False,
) -> DocumentModel:
    """
    Apply a status change to a loaded row, enforcing the state machine.

    Args:
        document: Row to mutate (already attached to a session)
        new_status: Target status
        error: Failure reason (required for FAILED)
        force: Skip the edge check for operator overrides

    Returns:
        The mutated row

    Raises:
        InvalidTransitionError: Edge not allowed, missing reason, or no staged path
    """
    current = document.processing_status

    if new_status == DocumentStatus.FAILED and not (error and error.strip()):
        raise InvalidTransitionError(
            "An error message is required when marking a document as failed",
            document_id=document.id,
            current_status=current.value,
            target_status=new_status.value,
        )

    if not force and new_status not in ALLOWED_TRANSITIONS[current]:
        raise InvalidTransitionError(
            f"Cannot move document {document.id} from {current.value} to {new_status.value}",
            document_id=document.id,
            current_status=current.value,
            target_status=new_status.value,
        )

    if new_status == DocumentStatus.PROCESSING and not document.local_file_path:
        raise InvalidTransitionError(
            f"Document {document.id} has no staged file and cannot enter processing",
            document_id=document.id,
            current_status=current.value,
            target_status=new_status.value,
        )

    document.processing_status = new_status
    document.processed = new_status == DocumentStatus.COMPLETED

    if new_status == DocumentStatus.FAILED:
        document.processing_error = error.strip()[:MAX_ERROR_LENGTH]
    else:
        document.processing_error = None

    if new_status == DocumentStatus.COMPLETED:
        document.local_file_path = None
        document.downloaded_at = None

    document.updated_at = utcnow()
    return document


class DocumentRegistry:
    """Persistent store of document metadata and processing status."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        crud: DocumentCRUD = document_crud,
    ) -> None:
        """
        Initialize the registry.

        Args:
            session_factory: Factory producing AsyncSessions for each operation
            crud: Session-level query helper
        """
        self._session_factory = session_factory
        self._crud = crud

    async def upsert_many(
        self,
        user_id: str,
        documents: Sequence[DocumentUpsert],
    ) -> UpsertResult:
        """
        Insert or refresh a batch of discovered files in one transaction.

        Args:
            user_id: Owning user
            documents: Discovered files with optional staging info

        Returns:
            UpsertResult: Written rows, inserted/updated counts and the staged
            paths left unreferenced (the caller deletes those files)

        Raises:
            RegistryError: Any row failed; nothing from the batch was committed
        """
        outcome = UpsertResult()
        if not documents:
            return outcome

        async with self._session_factory() as session:
            try:
                existing = await self._crud.get_by_remote_ids(
                    session,
                    user_id,
                    (doc.remote_file_id for doc in documents),
                    for_update=True,
                )
                written: dict[str, DocumentModel] = {}
                stale_paths: list[str] = []
                for item in documents:
                    current = existing.get(item.remote_file_id)
                    previous_path = current.local_file_path if current is not None else None
                    row = self._crud.apply_upsert(session, user_id, item, current)
                    if item.local_file_path is not None:
                        if row.local_file_path != item.local_file_path:
                            stale_paths.append(item.local_file_path)
                        elif previous_path and previous_path != item.local_file_path:
                            stale_paths.append(previous_path)
                    if current is None:
                        outcome.inserted += 1
                        existing[item.remote_file_id] = row
                    elif item.remote_file_id not in written:
                        outcome.updated += 1
                    written[item.remote_file_id] = row

                await session.flush()
                await session.commit()
            except SQLAlchemyError as e:
                await session.rollback()
                logger.error(
                    f"{__name__}:upsert_many - {type(e).__name__}: {e}",
                    extra={"user_id": user_id, "batch_size": len(documents)},
                )
                raise RegistryError(
                    f"Failed to save documents: {e}",
                    {"user_id": user_id, "batch_size": len(documents)},
                ) from e

        outcome.documents = list(written.values())
        outcome.stale_paths = stale_paths
        logger.info(
            f"{__name__}:upsert_many - Batch committed",
            extra={
                "user_id": user_id,
                "inserted": outcome.inserted,
                "updated": outcome.updated,
                "stale_paths": len(stale_paths),
            },
        )
        return outcome

    async def get(self, document_id: int) -> DocumentModel:
        """
        Fetch one document.

        Raises:
            DocumentNotFoundError: Unknown id
        """
        async with self._session_factory() as session:
            document = await self._crud.get_by_id(session, document_id)
        if document is None:
            raise DocumentNotFoundError(document_id)
        return document

    async def get_by_remote_ids(
        self,
        user_id: str,
        remote_file_ids: Sequence[str],
    ) -> dict[str, DocumentModel]:
        """Map remote ids to existing rows for one user."""
        async with self._session_factory() as session:
            return await self._crud.get_by_remote_ids(session, user_id, remote_file_ids)

    async def list_documents(
        self,
        user_id: str,
        limit: int = 100,
        offset: int = 0,
    ) -> tuple[list[DocumentModel], int]:
        """
        List a user's documents newest first with the total row count.

        Returns:
            tuple: (page of documents, total documents for the user)
        """
        async with self._session_factory() as session:
            total = await self._crud.count(session, DocumentModel.user_id == user_id)
            documents = await self._crud.get_by_user(session, user_id, limit, offset)
        return list(documents), total

    async def list_pending(self, user_id: str, limit: int = 100) -> list[DocumentModel]:
        """Pending documents for one user, oldest created first."""
        async with self._session_factory() as session:
            return list(await self._crud.get_pending(session, user_id, limit))

    async def list_pending_all_users(self, limit: int = 100) -> list[DocumentModel]:
        """Pending documents across all users, oldest created first."""
        async with self._session_factory() as session:
            return list(await self._crud.get_pending(session, None, limit))

    async def transition(
        self,
        document_id: int,
        new_status: DocumentStatus,
        error: str | None = None,
        force: bool = False,
        result: dict[str, Any] | None = None,
    ) -> DocumentModel:
        """
        Move a document to a new status in its own transaction.

        Args:
            document_id: Document id
            new_status: Target status
            error: Failure reason (required for FAILED)
            force: Operator override of the edge check
            result: Backend payload stored alongside a COMPLETED transition

        Returns:
            DocumentModel: Updated row

        Raises:
            DocumentNotFoundError: Unknown id
            InvalidTransitionError: State machine violation
            RegistryError: Database failure
        """
        new_status = DocumentStatus(new_status)
        async with self._session_factory() as session:
            try:
                document = await self._crud.get_for_update(session, document_id)
                if document is None:
                    raise DocumentNotFoundError(document_id)

                previous = document.processing_status
                apply_transition(document, new_status, error=error, force=force)
                if result is not None and new_status == DocumentStatus.COMPLETED:
                    document.result = result

                await session.commit()
            except RegistryError:
                await session.rollback()
                raise
            except SQLAlchemyError as e:
                await session.rollback()
                logger.error(f"{__name__}:transition - {type(e).__name__}: {e}")
                raise RegistryError(
                    f"Failed to update processing status: {e}",
                    {"document_id": document_id, "target_status": new_status.value},
                ) from e

        logger.info(
            f"{__name__}:transition - Document {previous.value} -> {new_status.value}",
            extra={"document_id": document_id, "forced": force},
        )
        return document

    async def mark_completed(
        self,
        document_id: int,
        result: dict[str, Any] | None = None,
        force: bool = False,
    ) -> DocumentModel:
        """Transition to COMPLETED storing the backend payload."""
        return await self.transition(
            document_id, DocumentStatus.COMPLETED, force=force, result=result
        )

    async def mark_failed(self, document_id: int, error: str) -> DocumentModel:
        """Transition to FAILED with a reason."""
        return await self.transition(document_id, DocumentStatus.FAILED, error=error)

    async def stats(self, user_id: str) -> DocumentStats:
        """
        Aggregate counters for one user.

        Returns:
            DocumentStats: Totals per status and per MIME type
        """
        async with self._session_factory() as session:
            rows = await self._crud.count_by_type_and_status(session, user_id)

        stats = DocumentStats()
        for mime_type, status, count in rows:
            stats.total += count
            stats.by_mime_type[mime_type] = stats.by_mime_type.get(mime_type, 0) + count
            status = DocumentStatus(status)
            setattr(stats, status.value, getattr(stats, status.value) + count)
        stats.unprocessed = stats.total - stats.completed
        return stats

    async def delete(self, document_id: int) -> bool:
        """
        Hard-delete a document row. Staged files are not touched.

        Raises:
            DocumentNotFoundError: Unknown id
            RegistryError: Database failure
        """
        async with self._session_factory() as session:
            try:
                deleted = await self._crud.delete_by_id(session, document_id)
                if not deleted:
                    raise DocumentNotFoundError(document_id)
                await session.commit()
            except RegistryError:
                await session.rollback()
                raise
            except SQLAlchemyError as e:
                await session.rollback()
                logger.error(f"{__name__}:delete - {type(e).__name__}: {e}")
                raise RegistryError(
                    f"Failed to delete document: {e}", {"document_id": document_id}
                ) from e

        logger.info(
            f"{__name__}:delete - Document deleted",
            extra={"document_id": document_id},
        )
        return True
