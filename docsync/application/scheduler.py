"""
Processing scheduler.

Runs the batch driver on a fixed interval inside the application's event
loop, and on demand through ``trigger_now``. At most one batch runs at a
time: a scheduled tick that finds a run in flight is skipped, a manual
trigger is rejected with PipelineBusyError.

Dependencies: asyncio (stdlib), docsync.application.services
System role: Periodic background processing
"""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta

from docsync.application.services.processing_worker import ProcessingWorker
from docsync.boundary.db.base import utcnow
from docsync.configs.scheduler import SchedulerSettings
from docsync.core.exceptions import PipelineBusyError
from docsync.models.pipeline import BatchResult, SchedulerStatus
from docsync.observability.log_utils import log_exception_with_context

logger = logging.getLogger(__name__)


@dataclass
class SchedulerState:
    """Mutable scheduler state, owned by one ProcessingScheduler."""

    task: asyncio.Task | None = None
    stop_event: asyncio.Event | None = None
    run_lock: asyncio.Lock = field(default_factory=asyncio.Lock)
    next_run_at: datetime | None = None
    last_run_started_at: datetime | None = None
    last_run_finished_at: datetime | None = None
    last_result: BatchResult | None = None
    # Loop tasks told to stop that may still be finishing a run
    retiring: set[asyncio.Task] = field(default_factory=set)

    @property
    def is_running(self) -> bool:
        return (
            self.task is not None
            and not self.task.done()
            and self.stop_event is not None
            and not self.stop_event.is_set()
        )


class ProcessingScheduler:
    """Interval timer around ProcessingWorker.process_all_unprocessed."""

    def __init__(
        self,
        worker: ProcessingWorker,
        settings: SchedulerSettings | None = None,
    ) -> None:
        """
        Initialize the scheduler (not started).

        Args:
            worker: Processing worker whose batch driver is run
            settings: Interval and autostart settings
        """
        self.worker = worker
        self._settings = settings or SchedulerSettings()
        self.state = SchedulerState()

    @property
    def interval_seconds(self) -> float:
        return self._settings.interval_seconds

    @property
    def pattern(self) -> str:
        return f"every {self.interval_seconds:g}s"

    def start(self) -> bool:
        """
        Start the periodic loop. Idempotent.

        Returns:
            bool: True if the loop was started, False if already running
        """
        if self.state.is_running:
            logger.info(f"{__name__}:start - Scheduler already running")
            return False

        stop_event = asyncio.Event()
        self.state.stop_event = stop_event
        self.state.next_run_at = utcnow() + timedelta(seconds=self.interval_seconds)
        self.state.task = asyncio.create_task(self._loop(stop_event), name="processing-scheduler")
        logger.info(
            f"{__name__}:start - Scheduler started",
            extra={"pattern": self.pattern},
        )
        return True

    def stop(self) -> bool:
        """
        Stop scheduling further runs. Idempotent.

        A run already in flight is allowed to finish; only the next tick
        is prevented.

        Returns:
            bool: True if a running loop was stopped
        """
        if not self.state.is_running:
            logger.info(f"{__name__}:stop - Scheduler not running")
            return False

        self.state.stop_event.set()
        task = self.state.task
        self.state.retiring.add(task)
        task.add_done_callback(self.state.retiring.discard)
        self.state.task = None
        self.state.next_run_at = None
        logger.info(f"{__name__}:stop - Scheduler stopped")
        return True

    async def shutdown(self) -> None:
        """Stop the loop and wait for any in-flight run to finish."""
        self.stop()
        if self.state.retiring:
            await asyncio.gather(*self.state.retiring, return_exceptions=True)

    @property
    def is_busy(self) -> bool:
        return self.state.run_lock.locked()

    def status(self) -> SchedulerStatus:
        return SchedulerStatus(
            is_running=self.state.is_running,
            is_busy=self.is_busy,
            pattern=self.pattern,
            next_run_estimate=self.state.next_run_at if self.state.is_running else None,
            last_run_started_at=self.state.last_run_started_at,
            last_run_finished_at=self.state.last_run_finished_at,
            last_result=self.state.last_result,
        )

    async def trigger_now(self) -> BatchResult:
        """
        Run the batch driver immediately.

        Raises:
            PipelineBusyError: Another run is in flight
        """
        if self.is_busy:
            raise PipelineBusyError()
        async with self.state.run_lock:
            logger.info(f"{__name__}:trigger_now - Manual run requested")
            return await self._run()

    async def _run(self) -> BatchResult:
        self.state.last_run_started_at = utcnow()
        try:
            result = await self.worker.process_all_unprocessed()
            self.state.last_result = result
            return result
        finally:
            self.state.last_run_finished_at = utcnow()

    async def _tick(self) -> None:
        """One scheduled run. Never raises."""
        if self.is_busy:
            logger.warning(f"{__name__}:_tick - Previous run still in progress, skipping")
            return
        try:
            async with self.state.run_lock:
                result = await self._run()
            logger.info(
                f"{__name__}:_tick - Scheduled run finished",
                extra={"total": result.total, "processed": result.processed, "failed": result.failed},
            )
        except Exception as e:
            log_exception_with_context(logger, f"{__name__}:_tick - Scheduled run failed", e)

    async def _loop(self, stop_event: asyncio.Event) -> None:
        while not stop_event.is_set():
            try:
                await asyncio.wait_for(stop_event.wait(), timeout=self.interval_seconds)
            except asyncio.TimeoutError:
                pass
            if stop_event.is_set():
                break
            await self._tick()
            if not stop_event.is_set():
                self.state.next_run_at = utcnow() + timedelta(seconds=self.interval_seconds)
