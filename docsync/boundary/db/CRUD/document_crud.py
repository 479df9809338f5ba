"""
Document CRUD operations.

Session-level queries for DocumentModel: per-user listing, FIFO pending
lookups, remote-id matching for upserts, and aggregate counters.
Methods never commit; DocumentRegistry owns the transactions.

Dependencies: sqlalchemy, docsync.boundary.db.models
System role: Document persistence operations
"""

from typing import Iterable, Sequence

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from docsync.boundary.db.base import utcnow
from docsync.boundary.db.models.document_model import DocumentModel, DocumentStatus
from docsync.boundary.db.CRUD.base_crud import BaseCRUD
from docsync.models.document import DocumentUpsert

# Fields copied from the remote listing on every sync
DESCRIPTIVE_FIELDS = (
    "file_name",
    "file_path",
    "mime_type",
    "size",
    "remote_view_link",
    "remote_modified_at",
)
STAGING_FIELDS = ("local_file_path", "downloaded_at")
# Only rows in these states accept a new staged copy
STAGEABLE_STATUSES = frozenset({DocumentStatus.PENDING, DocumentStatus.FAILED})


class DocumentCRUD(BaseCRUD[DocumentModel]):
    """
    CRUD operations for DocumentModel.

    Extends BaseCRUD with document-specific queries for filtering
    by user and processing status.
    """

    def __init__(self) -> None:
        """Initialize DocumentCRUD with DocumentModel."""
        super().__init__(DocumentModel)

    async def get_for_update(self, session: AsyncSession, id: int) -> DocumentModel | None:
        """
        Retrieve a document with a row lock (no-op on SQLite).

        Args:
            session: Async database session
            id: Document id

        Returns:
            DocumentModel if found, None otherwise
        """
        stmt = select(DocumentModel).where(DocumentModel.id == id).with_for_update()
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_user(
        self,
        session: AsyncSession,
        user_id: str,
        limit: int | None = None,
        offset: int = 0,
    ) -> Sequence[DocumentModel]:
        """
        Retrieve a user's documents, newest first.

        Args:
            session: Async database session
            user_id: Owning user
            limit: Maximum number of documents to return
            offset: Number of documents to skip

        Returns:
            Sequence of DocumentModels belonging to the user
        """
        stmt = (
            select(DocumentModel)
            .where(DocumentModel.user_id == user_id)
            .order_by(DocumentModel.created_at.desc(), DocumentModel.id.desc())
            .offset(offset)
        )
        if limit is not None:
            stmt = stmt.limit(limit)
        result = await session.execute(stmt)
        return result.scalars().all()

    async def get_by_remote_ids(
        self,
        session: AsyncSession,
        user_id: str,
        remote_file_ids: Iterable[str],
        for_update: bool = False,
    ) -> dict[str, DocumentModel]:
        """
        Map remote file ids to their existing rows for one user.

        Args:
            session: Async database session
            user_id: Owning user
            remote_file_ids: Remote ids to look up
            for_update: Lock the matched rows until the transaction ends

        Returns:
            dict keyed by remote_file_id (missing ids are absent)
        """
        ids = list(dict.fromkeys(remote_file_ids))
        if not ids:
            return {}
        stmt = select(DocumentModel).where(
            DocumentModel.user_id == user_id,
            DocumentModel.remote_file_id.in_(ids),
        )
        if for_update:
            stmt = stmt.with_for_update()
        result = await session.execute(stmt)
        return {doc.remote_file_id: doc for doc in result.scalars().all()}

    async def get_pending(
        self,
        session: AsyncSession,
        user_id: str | None = None,
        limit: int | None = None,
    ) -> Sequence[DocumentModel]:
        """
        Retrieve pending documents, oldest created first.

        Args:
            session: Async database session
            user_id: Restrict to one user; None spans all users
            limit: Maximum number of documents to return

        Returns:
            Sequence of pending DocumentModels in FIFO order
        """
        stmt = select(DocumentModel).where(
            DocumentModel.processing_status == DocumentStatus.PENDING,
            DocumentModel.processed.is_(False),
        )
        if user_id is not None:
            stmt = stmt.where(DocumentModel.user_id == user_id)
        stmt = stmt.order_by(DocumentModel.created_at.asc(), DocumentModel.id.asc())
        if limit is not None:
            stmt = stmt.limit(limit)
        result = await session.execute(stmt)
        return result.scalars().all()

    async def count_by_type_and_status(
        self,
        session: AsyncSession,
        user_id: str,
    ) -> list[tuple[str, DocumentStatus, int]]:
        """
        Count a user's documents grouped by MIME type and status.

        Args:
            session: Async database session
            user_id: Owning user

        Returns:
            list of (mime_type, status, count) tuples
        """
        stmt = (
            select(
                DocumentModel.mime_type,
                DocumentModel.processing_status,
                func.count(DocumentModel.id),
            )
            .where(DocumentModel.user_id == user_id)
            .group_by(DocumentModel.mime_type, DocumentModel.processing_status)
        )
        result = await session.execute(stmt)
        return [(mime, status, int(count)) for mime, status, count in result.all()]

    def apply_upsert(
        self,
        session: AsyncSession,
        user_id: str,
        item: DocumentUpsert,
        existing: DocumentModel | None,
    ) -> DocumentModel:
        """
        Insert a new row or refresh an existing one from a discovered file.

        Descriptive fields are always overwritten. Staging fields are only
        overwritten when the item carries a staged copy and the row is still
        PENDING or FAILED: a metadata-only refresh never drops the path of a
        file still on disk, and a row the worker has claimed or completed
        never gets a staged copy back.

        Args:
            session: Async database session
            user_id: Owning user
            item: Incoming discovered file
            existing: Row already matched on (user_id, remote_file_id), if any

        Returns:
            The pending-flush DocumentModel
        """
        values = item.model_dump(include=set(DESCRIPTIVE_FIELDS))
        restageable = existing is None or existing.processing_status in STAGEABLE_STATUSES
        if item.local_file_path is not None and restageable:
            values.update(item.model_dump(include=set(STAGING_FIELDS)))

        if existing is None:
            document = DocumentModel(
                user_id=user_id,
                remote_file_id=item.remote_file_id,
                processing_status=DocumentStatus.PENDING,
                processed=False,
                **values,
            )
            session.add(document)
            return document

        for field, value in values.items():
            setattr(existing, field, value)
        existing.updated_at = utcnow()
        return existing


document_crud = DocumentCRUD()
