"""
Exception hierarchy for the document sync pipeline.

Provides layered exception structure for domain-specific errors.
All exceptions include context for observability and debugging.

Dependencies: None (pure domain layer)
System role: Centralized exception handling across the application
"""

from typing import Any


class DocSyncException(Exception):
    """Base exception for all docsync errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """
        Initialize base exception with message and optional context.

        Args:
            message: Human-readable error message
            details: Optional dictionary of additional context for debugging
        """
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        """Return the human-readable message (details stay in ``details``)."""
        return self.message


# ---------------------------------------------------------------------------
# Remote source
# ---------------------------------------------------------------------------


class RemoteSourceError(DocSyncException):
    """Raised when the remote storage API call fails."""

    def __init__(
        self,
        message: str,
        file_id: str | None = None,
        status_code: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize remote source error.

        Args:
            message: Error message
            file_id: Remote file involved, if any
            status_code: HTTP status returned by the remote API, if any
            details: Additional context
        """
        details = details or {}
        if file_id:
            details["file_id"] = file_id
        if status_code is not None:
            details["status_code"] = status_code
        self.file_id = file_id
        self.status_code = status_code
        super().__init__(message, details)


class RemoteAuthError(RemoteSourceError):
    """Credential rejected by the remote API. Never retried here."""


class RemoteNotFoundError(RemoteSourceError):
    """Remote file vanished between listing and download."""


class RemoteTransientError(RemoteSourceError):
    """5xx, timeout or network failure talking to the remote API."""


# ---------------------------------------------------------------------------
# Local staging
# ---------------------------------------------------------------------------


class StagingError(DocSyncException):
    """Raised when a local staging operation fails."""

    def __init__(
        self,
        message: str,
        local_path: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        if local_path:
            details["local_path"] = local_path
        self.local_path = local_path
        super().__init__(message, details)


class StagingNotFoundError(StagingError):
    """Staged file is missing on disk."""


# ---------------------------------------------------------------------------
# Processing backend
# ---------------------------------------------------------------------------


class ProcessingBackendError(DocSyncException):
    """Raised when the external processing backend fails or times out."""

    def __init__(
        self,
        message: str,
        backend: str | None = None,
        status_code: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize processing backend error.

        Args:
            message: Error message
            backend: Backend name (langextract, langflow)
            status_code: HTTP status returned by the backend, if any
            details: Additional context
        """
        details = details or {}
        if backend:
            details["backend"] = backend
        if status_code is not None:
            details["status_code"] = status_code
        self.backend = backend
        self.status_code = status_code
        super().__init__(message, details)


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------


class RegistryError(DocSyncException):
    """Raised when a registry transaction or constraint fails."""


class DocumentNotFoundError(RegistryError):
    """Raised when a document id does not exist."""

    def __init__(self, document_id: int, details: dict[str, Any] | None = None) -> None:
        details = details or {}
        details["document_id"] = document_id
        self.document_id = document_id
        super().__init__(f"Document with ID {document_id} not found", details)


class InvalidTransitionError(RegistryError):
    """Raised when a status change violates the document state machine."""

    def __init__(
        self,
        message: str,
        document_id: int | None = None,
        current_status: str | None = None,
        target_status: str | None = None,
    ) -> None:
        details: dict[str, Any] = {}
        if document_id is not None:
            details["document_id"] = document_id
        if current_status:
            details["current_status"] = current_status
        if target_status:
            details["target_status"] = target_status
        super().__init__(message, details)


# ---------------------------------------------------------------------------
# Scheduler
# ---------------------------------------------------------------------------


class SchedulerError(DocSyncException):
    """Base exception for scheduler control errors."""


class PipelineBusyError(SchedulerError):
    """Raised when a run is requested while another run is still in flight."""

    def __init__(self) -> None:
        super().__init__("A processing run is already in progress")
