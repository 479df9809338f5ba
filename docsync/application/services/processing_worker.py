"""
Processing worker.

Drives documents through PENDING → PROCESSING → {COMPLETED, FAILED}:
reads the staged copy, submits it to the processing backend, records the
outcome in the registry and removes the staged copy on success.

The batch driver walks the global pending queue oldest first, strictly
one document at a time with a fixed delay between documents.

Dependencies: docsync.boundary.db, docsync.boundary.staging, docsync.boundary.processors
System role: Processing orchestration
"""

import asyncio
import logging
from typing import Awaitable, Callable

from docsync.boundary.db.document_registry import DocumentRegistry
from docsync.boundary.db.models.document_model import DocumentModel, DocumentStatus
from docsync.boundary.processors.base import ProcessingBackend
from docsync.boundary.staging.local_staging import LocalStagingManager
from docsync.configs.processing import ProcessingSettings
from docsync.core.exceptions import StagingNotFoundError
from docsync.models.pipeline import BatchResult, ProcessingOutcome
from docsync.observability.log_utils import log_exception_with_context

logger = logging.getLogger(__name__)

NO_LOCAL_PATH_ERROR = "No local file path found for document"


class ProcessingWorker:
    """
    Processing worker.

    Owns no state of its own; the registry is the only record of progress,
    so a crash mid-document leaves that document in PROCESSING for an
    operator to reset.
    """

    def __init__(
        self,
        registry: DocumentRegistry,
        staging: LocalStagingManager,
        backend: ProcessingBackend,
        settings: ProcessingSettings | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        """
        Initialize the worker.

        Args:
            registry: Document registry
            staging: Local staging manager holding the downloaded copies
            backend: External processing backend
            settings: Processing settings (batch limit, delay)
            sleep: Coroutine used for the inter-document delay
        """
        self.registry = registry
        self.staging = staging
        self.backend = backend
        self._settings = settings or ProcessingSettings()
        self._sleep = sleep

    async def process_document(self, document_id: int) -> ProcessingOutcome:
        """
        Process one pending document end to end.

        Steps:
        1. Move the document to PROCESSING (straight to FAILED if nothing is staged)
        2. Verify and read the staged copy
        3. Submit the bytes to the processing backend
        4. Store the result as COMPLETED and delete the staged copy

        Any failure after step 1 marks the document FAILED and leaves the
        staged copy in place.

        Args:
            document_id: Registry id of a PENDING document

        Returns:
            ProcessingOutcome: Success flag with result or error

        Raises:
            DocumentNotFoundError: Unknown id
            InvalidTransitionError: Document is not PENDING
        """
        document = await self.registry.get(document_id)

        if not document.local_file_path:
            await self.registry.mark_failed(document_id, NO_LOCAL_PATH_ERROR)
            logger.warning(
                f"{__name__}:process_document - {NO_LOCAL_PATH_ERROR}",
                extra={"document_id": document_id},
            )
            return ProcessingOutcome(document_id=document_id, success=False, error=NO_LOCAL_PATH_ERROR)

        document = await self.registry.transition(document_id, DocumentStatus.PROCESSING)
        local_path = document.local_file_path

        try:
            if not await asyncio.to_thread(self.staging.exists, local_path):
                raise StagingNotFoundError(f"Local file not found: {local_path}", local_path=local_path)
            content = await asyncio.to_thread(self.staging.read, local_path)

            logger.info(
                f"{__name__}:process_document - Submitting {document.file_name}",
                extra={"document_id": document_id, "bytes": len(content), "backend": self.backend.name},
            )
            result = await self.backend.submit(content, document.file_name, document.user_id)
            await self.registry.mark_completed(document_id, result)

        except Exception as e:
            error = str(e) or type(e).__name__
            log_exception_with_context(
                logger,
                f"{__name__}:process_document - Processing failed",
                e,
                document_id=document_id,
                file_name=document.file_name,
            )
            await self.registry.mark_failed(document_id, error)
            return ProcessingOutcome(document_id=document_id, success=False, error=error)

        # Completion is already committed; a leftover file is only disk waste
        await asyncio.to_thread(self.staging.delete, local_path)

        logger.info(
            f"{__name__}:process_document - Document completed",
            extra={"document_id": document_id},
        )
        return ProcessingOutcome(document_id=document_id, success=True, result=result)

    async def _process_safely(self, document: DocumentModel) -> bool:
        try:
            outcome = await self.process_document(document.id)
        except Exception as e:
            log_exception_with_context(
                logger,
                f"{__name__}:process_all_unprocessed - Unexpected error",
                e,
                document_id=document.id,
            )
            return False
        return outcome.success

    async def process_all_unprocessed(self, limit: int | None = None) -> BatchResult:
        """
        Process the oldest pending documents across all users.

        Documents run strictly sequentially; the configured delay separates
        consecutive documents but is not applied after the last one. A
        failing document never stops the batch.

        Args:
            limit: Maximum documents in this run (defaults to settings)

        Returns:
            BatchResult: Documents attempted, completed and failed
        """
        documents = await self.registry.list_pending_all_users(limit or self._settings.batch_limit)
        result = BatchResult(total=len(documents))

        if not documents:
            logger.info(f"{__name__}:process_all_unprocessed - No pending documents")
            return result

        logger.info(f"{__name__}:process_all_unprocessed - Found {len(documents)} pending documents")

        for index, document in enumerate(documents):
            if index:
                await self._sleep(self._settings.inter_document_delay)
            if await self._process_safely(document):
                result.processed += 1
            else:
                result.failed += 1

        logger.info(
            f"{__name__}:process_all_unprocessed - Batch finished",
            extra={"total": result.total, "processed": result.processed, "failed": result.failed},
        )
        return result
