"""
Document domain models and schemas.

Registry input rows and request/response schemas for document operations.

Dependencies: pydantic
System role: Document API contracts
"""

import enum
from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from docsync.models.remote import RemoteFile
from docsync.models.staging import StagedFile

StatusName = Literal["pending", "processing", "completed", "failed"]


class DocumentUpsert(BaseModel):
    """One discovered remote file, plus staging info when it was downloaded."""

    remote_file_id: str
    file_name: str
    file_path: str
    mime_type: str
    size: int | None = None
    remote_view_link: str | None = None
    remote_modified_at: datetime | None = None
    local_file_path: str | None = None
    downloaded_at: datetime | None = None

    @classmethod
    def from_remote(cls, file: RemoteFile, staged: StagedFile | None = None) -> "DocumentUpsert":
        """Build a registry row from listing metadata and an optional staged copy."""
        return cls(
            remote_file_id=file.id,
            file_name=file.name,
            # Drive has no cheap full path; the display name stands in for it
            file_path=file.name,
            mime_type=file.mime_type,
            size=file.size,
            remote_view_link=file.web_view_link,
            remote_modified_at=file.modified_at,
            local_file_path=staged.local_path if staged else None,
            downloaded_at=staged.downloaded_at if staged else None,
        )


class DocumentResponse(BaseModel):
    """Response schema for a registry row."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: str
    remote_file_id: str
    file_name: str
    file_path: str
    mime_type: str
    size: int | None = None
    remote_view_link: str | None = None
    remote_modified_at: datetime | None = None
    local_file_path: str | None = None
    downloaded_at: datetime | None = None
    processing_status: StatusName
    processed: bool
    processing_error: str | None = None
    result: dict[str, Any] | None = None
    created_at: datetime
    updated_at: datetime

    @field_validator("processing_status", mode="before")
    @classmethod
    def _status_value(cls, value):
        return value.value if isinstance(value, enum.Enum) else value


class DocumentListResponse(BaseModel):
    """Paginated document list response."""

    documents: list[DocumentResponse]
    total: int
    limit: int
    offset: int


class UnprocessedDocumentsResponse(BaseModel):
    """Pending documents for one user, oldest first."""

    documents: list[DocumentResponse]
    count: int
    limit: int


class DocumentStats(BaseModel):
    """Per-user registry counters."""

    total: int = 0
    completed: int = 0
    pending: int = 0
    processing: int = 0
    failed: int = 0
    unprocessed: int = 0
    by_mime_type: dict[str, int] = Field(default_factory=dict)


class StatusUpdateRequest(BaseModel):
    """Operator request to force a document status."""

    status: StatusName
    error: str | None = Field(
        default=None,
        description="Failure reason; required when status is 'failed'",
    )
