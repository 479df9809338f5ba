"""
Local staging models.

Dependencies: pydantic
System role: Return types of the local staging manager
"""

from datetime import datetime

from pydantic import BaseModel, Field


class StagedFile(BaseModel):
    """Location and size of a file written to the staging area."""

    local_path: str = Field(description="Absolute path of the staged copy")
    size: int = Field(description="Bytes written")
    downloaded_at: datetime = Field(description="When the staged copy was written (UTC)")


class DiskUsage(BaseModel):
    """Aggregate size of the staging tree."""

    total_bytes: int = 0
    file_count: int = 0


class CleanupResult(BaseModel):
    """Outcome of an age-based cleanup sweep."""

    removed_files: int = 0
    removed_dirs: int = 0
    freed_bytes: int = 0
