"""
Pipeline result models.

Outcomes of discovery syncs, single-document processing, batch driver
runs, and the scheduler status snapshot.

Dependencies: pydantic
System role: Return types for the application services
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field


class SyncResult(BaseModel):
    """Outcome of one discovery + download + upsert sync for a user."""

    total: int = Field(default=0, description="Documents discovered remotely")
    new: int = Field(default=0, description="Rows inserted")
    updated: int = Field(default=0, description="Existing rows refreshed")
    downloaded: int = Field(default=0, description="Files staged locally")
    skipped: int = Field(default=0, description="Files not re-downloaded (processing/completed)")
    errors: list[str] = Field(default_factory=list, description="Per-file failures")


class ProcessingOutcome(BaseModel):
    """Result of processing a single document."""

    document_id: int
    success: bool
    result: dict[str, Any] | None = None
    error: str | None = None


class BatchResult(BaseModel):
    """Counters returned by the batch driver."""

    total: int = 0
    processed: int = 0
    failed: int = 0


class SchedulerStatus(BaseModel):
    """Snapshot of the scheduler state."""

    is_running: bool
    is_busy: bool = False
    pattern: str
    next_run_estimate: datetime | None = None
    last_run_started_at: datetime | None = None
    last_run_finished_at: datetime | None = None
    last_result: BatchResult | None = None
