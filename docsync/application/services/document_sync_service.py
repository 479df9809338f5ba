"""
Document sync service.

Discovery side of the pipeline: lists a user's supported Drive documents,
stages the ones that need (re-)processing and upserts everything into the
registry in one transaction. Also hosts the operator operations exposed
over HTTP (listing, stats, forced status changes, deletion, staging
maintenance).

Dependencies: docsync.boundary.drive, docsync.boundary.staging, docsync.boundary.db
System role: Document discovery and management orchestration
"""

import asyncio
import logging

from docsync.boundary.db.document_registry import DocumentRegistry
from docsync.boundary.db.models.document_model import DocumentModel, DocumentStatus
from docsync.boundary.drive.google_drive_client import GoogleDriveClient
from docsync.boundary.staging.local_staging import LocalStagingManager
from docsync.core.exceptions import DocumentNotFoundError, StagingError
from docsync.models.document import DocumentStats, DocumentUpsert
from docsync.models.pipeline import SyncResult
from docsync.models.remote import DriveCredentials
from docsync.models.staging import CleanupResult, DiskUsage, StagedFile

logger = logging.getLogger(__name__)

# Rows in these states get a fresh staged copy on every sync
RESTAGE_STATUSES = frozenset({DocumentStatus.PENDING, DocumentStatus.FAILED})


class DocumentSyncService:
    """
    Document sync service orchestrator.

    Stateless between calls; every method works against the registry and
    the staging area it was constructed with.
    """

    def __init__(
        self,
        registry: DocumentRegistry,
        drive: GoogleDriveClient,
        staging: LocalStagingManager,
    ) -> None:
        """
        Initialize the sync service.

        Args:
            registry: Document registry
            drive: Google Drive client
            staging: Local staging manager
        """
        self.registry = registry
        self.drive = drive
        self.staging = staging

    async def sync_user_documents(self, credentials: DriveCredentials) -> SyncResult:
        """
        Discover, stage and register one user's documents.

        Steps:
        1. List supported remote documents
        2. Download files that are new or whose row is PENDING/FAILED
        3. Stage successful downloads; collect per-file errors
        4. Upsert metadata for every existing row and every newly staged file

        A new file whose download failed is not inserted, so the next sync
        tries it again. Existing PROCESSING/COMPLETED rows only get their
        metadata refreshed; if the worker claims a row while its file is
        being downloaded, the registry refuses the new copy and it is
        deleted again. A copy replaced under a new name (remote rename) is
        deleted as well.

        Args:
            credentials: User bearer credential

        Returns:
            SyncResult: Counters and ``"{name}: {error}"`` strings

        Raises:
            RemoteAuthError: Token rejected while listing
            RemoteSourceError: Listing failed
            RegistryError: Upsert transaction failed
        """
        user_id = credentials.user_id
        remote_files = [file async for file in self.drive.list_documents(credentials)]
        result = SyncResult(total=len(remote_files))

        logger.info(
            f"{__name__}:sync_user_documents - Found {len(remote_files)} remote documents",
            extra={"user_id": user_id},
        )
        if not remote_files:
            return result

        existing = await self.registry.get_by_remote_ids(user_id, [f.id for f in remote_files])
        to_download = [
            f for f in remote_files
            if f.id not in existing or existing[f.id].processing_status in RESTAGE_STATUSES
        ]
        result.skipped = len(remote_files) - len(to_download)

        staged: dict[str, StagedFile] = {}
        for outcome in await self.drive.download_many(credentials, to_download):
            if not outcome.ok:
                result.errors.append(f"{outcome.file.name}: {outcome.error}")
                continue
            try:
                staged[outcome.file.id] = await asyncio.to_thread(
                    self.staging.save, user_id, outcome.file.id, outcome.file.name, outcome.content
                )
            except StagingError as e:
                result.errors.append(f"{outcome.file.name}: {e.message}")

        upserts = [
            DocumentUpsert.from_remote(file, staged.get(file.id))
            for file in remote_files
            if file.id in existing or file.id in staged
        ]
        written = await self.registry.upsert_many(user_id, upserts)
        result.new = written.inserted
        result.updated = written.updated

        # Refused or superseded copies; at most one staged file per document
        for stale_path in written.stale_paths:
            await asyncio.to_thread(self.staging.delete, stale_path)
        refused = {
            doc.remote_file_id
            for doc in written.documents
            if doc.remote_file_id in staged and doc.local_file_path != staged[doc.remote_file_id].local_path
        }
        result.downloaded = len(staged) - len(refused)

        logger.info(
            f"{__name__}:sync_user_documents - Sync finished",
            extra={
                "user_id": user_id,
                "new": result.new,
                "updated": result.updated,
                "downloaded": result.downloaded,
                "skipped": result.skipped,
                "errors": len(result.errors),
            },
        )
        return result

    async def list_documents(
        self,
        user_id: str,
        limit: int = 100,
        offset: int = 0,
    ) -> tuple[list[DocumentModel], int]:
        """List a user's documents newest first with the total count."""
        return await self.registry.list_documents(user_id, limit=limit, offset=offset)

    async def list_unprocessed(self, user_id: str, limit: int = 100) -> list[DocumentModel]:
        """Pending documents for a user, oldest first."""
        return await self.registry.list_pending(user_id, limit=limit)

    async def get_stats(self, user_id: str) -> DocumentStats:
        return await self.registry.stats(user_id)

    async def _get_owned(self, document_id: int, user_id: str | None) -> DocumentModel:
        document = await self.registry.get(document_id)
        # Another user's document is reported exactly like a missing one
        if user_id is not None and document.user_id != user_id:
            raise DocumentNotFoundError(document_id)
        return document

    async def update_status(
        self,
        document_id: int,
        status: DocumentStatus | str,
        error: str | None = None,
        user_id: str | None = None,
    ) -> DocumentModel:
        """
        Operator status change; bypasses the automatic edge rules.

        Field invariants still hold: ``failed`` needs an error and
        ``processing`` needs a staged copy.

        Raises:
            DocumentNotFoundError: Unknown id
            InvalidTransitionError: Missing error or staged copy
        """
        status = DocumentStatus(status)
        document = await self._get_owned(document_id, user_id)
        logger.info(
            f"{__name__}:update_status - Operator set status {status.value}",
            extra={"document_id": document_id},
        )
        if status == DocumentStatus.COMPLETED:
            staged_path = document.local_file_path
            document = await self.registry.mark_completed(document_id, document.result, force=True)
            if staged_path:
                await asyncio.to_thread(self.staging.delete, staged_path)
            return document
        return await self.registry.transition(document_id, status, error=error, force=True)

    async def delete_document(self, document_id: int, user_id: str | None = None) -> bool:
        """
        Delete a document's staged copy, then its registry row.

        Raises:
            DocumentNotFoundError: Unknown id
        """
        document = await self._get_owned(document_id, user_id)
        if document.local_file_path:
            await asyncio.to_thread(self.staging.delete, document.local_file_path)
        return await self.registry.delete(document_id)

    async def cleanup_staging(self, max_age_days: float | None = None) -> CleanupResult:
        return await asyncio.to_thread(self.staging.cleanup_older_than, max_age_days)

    async def staging_usage(self) -> DiskUsage:
        return await asyncio.to_thread(self.staging.disk_usage)

