"""
Scheduler API endpoints.

Routes: GET /scheduler/status, POST /scheduler/start, POST /scheduler/stop,
POST /scheduler/trigger

Dependencies: docsync.application.scheduler
System role: Processing scheduler control HTTP API
"""

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from docsync.api.deps import get_scheduler
from docsync.application.scheduler import ProcessingScheduler
from docsync.models.pipeline import BatchResult, SchedulerStatus

from .error_handling import handle_docsync_errors


class SchedulerControlResponse(BaseModel):
    """Outcome of a start/stop request."""

    changed: bool
    message: str
    status: SchedulerStatus


router = APIRouter(prefix="/scheduler", tags=["scheduler"])


@router.get("/status", response_model=SchedulerStatus)
async def scheduler_status(
    scheduler: ProcessingScheduler = Depends(get_scheduler),
) -> SchedulerStatus:
    return scheduler.status()


@router.post("/start", response_model=SchedulerControlResponse)
async def start_scheduler(
    scheduler: ProcessingScheduler = Depends(get_scheduler),
) -> SchedulerControlResponse:
    """Start periodic processing (no-op when already running)."""
    changed = scheduler.start()
    return SchedulerControlResponse(
        changed=changed,
        message="Scheduler started" if changed else "Scheduler already running",
        status=scheduler.status(),
    )


@router.post("/stop", response_model=SchedulerControlResponse)
async def stop_scheduler(
    scheduler: ProcessingScheduler = Depends(get_scheduler),
) -> SchedulerControlResponse:
    """Stop periodic processing; an in-flight run is allowed to finish."""
    changed = scheduler.stop()
    return SchedulerControlResponse(
        changed=changed,
        message="Scheduler stopped" if changed else "Scheduler not running",
        status=scheduler.status(),
    )


@router.post("/trigger", response_model=BatchResult)
@handle_docsync_errors
async def trigger_processing(
    scheduler: ProcessingScheduler = Depends(get_scheduler),
) -> BatchResult:
    """
    Run the batch driver now and return its counters.

    Raises:
        HTTPException(409): A run is already in progress
    """
    return await scheduler.trigger_now()
