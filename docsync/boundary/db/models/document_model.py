"""
Document ORM model.

Represents one remote file tracked for a user, with its local staging
location and processing lifecycle. Single source of truth for pipeline state.

Dependencies: sqlalchemy, docsync.boundary.db.base
System role: Document persistence for ingestion and processing tracking
"""

import enum
from datetime import datetime
from typing import Any

from sqlalchemy import JSON, BigInteger, Boolean, DateTime, Enum, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from docsync.boundary.db.base import Base, IntegerIDMixin, TimestampMixin


class DocumentStatus(str, enum.Enum):
    """
    Document processing lifecycle states.

    PENDING: Staged locally, awaiting the batch driver
    PROCESSING: Submitted to the processing backend
    COMPLETED: Backend returned a result; staged copy deleted
    FAILED: Processing error; processing_error holds the reason
    """

    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


class DocumentModel(Base, IntegerIDMixin, TimestampMixin):
    """
    Document ORM model tracking the ingestion pipeline state.

    Lifecycle: discovery sync (PENDING) → batch driver (PROCESSING) →
    backend result (COMPLETED) or failure (FAILED). Only an explicit
    operator action moves a row back to PENDING.

    Attributes:
        id: Registry-assigned integer identity
        user_id: Owning user; documents are partitioned per user
        remote_file_id: Google Drive file id (unique per user)
        file_name: Display name from the remote source
        file_path: Display path in the remote source
        mime_type: Remote MIME type
        size: Remote size in bytes, if reported
        remote_view_link: Browser link to the remote file
        remote_modified_at: Remote modification time
        local_file_path: Staged copy on disk; null once completed
        downloaded_at: When the staged copy was written
        processing_status: Current lifecycle state
        processed: Derived flag, true iff processing_status is COMPLETED
        processing_error: Last failure reason
        result: Opaque JSON payload returned by the processing backend

    Constraints:
        (user_id, remote_file_id) unique
    """

    __tablename__ = "user_drive_documents"
    __table_args__ = (
        UniqueConstraint(
            "user_id",
            "remote_file_id",
            name="ux_user_drive_documents_user_file",
        ),
    )

    user_id: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    remote_file_id: Mapped[str] = mapped_column(String(255), nullable=False)

    file_name: Mapped[str] = mapped_column(String(1024), nullable=False)
    file_path: Mapped[str] = mapped_column(String(2048), nullable=False)
    mime_type: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    size: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
    remote_view_link: Mapped[str | None] = mapped_column(String(2048), nullable=True)
    remote_modified_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    local_file_path: Mapped[str | None] = mapped_column(
        String(2048),
        nullable=True,
        doc="Local staging path; present only while the staged copy exists",
    )
    downloaded_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    processing_status: Mapped[DocumentStatus] = mapped_column(
        Enum(
            DocumentStatus,
            native_enum=False,
            length=32,
            values_callable=lambda statuses: [s.value for s in statuses],
        ),
        nullable=False,
        default=DocumentStatus.PENDING,
        index=True,
    )
    processed: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, index=True
    )
    processing_error: Mapped[str | None] = mapped_column(Text, nullable=True)
    result: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)

    def __repr__(self) -> str:
        return (
            f"<DocumentModel id={self.id} user_id={self.user_id!r} "
            f"remote_file_id={self.remote_file_id!r} status={self.processing_status}>"
        )
