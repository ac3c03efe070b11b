"""Single-consumer background worker loop."""

import asyncio
import logging
from enum import StrEnum

from stock_research.jobs.queue import WorkQueue
from stock_research.jobs.service import AnalysisService, safe_error_message

logger = logging.getLogger(__name__)


class WorkerState(StrEnum):
    IDLE = "Idle"
    PROCESSING = "Processing"
    STOPPED = "Stopped"


class AnalysisWorker:
    """
    Dequeues work items and runs them one at a time.

    A failing job is logged and the loop moves on. Cancelling the worker
    task while idle exits cleanly; while processing, the current job is
    marked Failed by the service before the loop exits.

    Args:
        queue: Source of work items
        service: Executes each job
        max_concurrent_jobs: Reserved; jobs are always processed sequentially
    """

    def __init__(self, queue: WorkQueue, service: AnalysisService, max_concurrent_jobs: int = 1):
        if not 1 <= max_concurrent_jobs <= 100:
            raise ValueError(
                f"Invalid max_concurrent_jobs {max_concurrent_jobs}. Must be between 1 and 100"
            )
        self.queue = queue
        self.service = service
        self.max_concurrent_jobs = max_concurrent_jobs
        self.state = WorkerState.STOPPED
        self.processed_count = 0
        self.current_job_id: str | None = None
        self._task: asyncio.Task | None = None

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def run(self) -> None:
        """Process work items until cancelled."""
        if self.max_concurrent_jobs > 1:
            logger.warning(
                f"MAX_CONCURRENT_JOBS={self.max_concurrent_jobs} is not supported yet; "
                "processing jobs sequentially"
            )

        logger.info("Analysis worker started")
        try:
            while True:
                self.state = WorkerState.IDLE
                item = await self.queue.dequeue()

                self.state = WorkerState.PROCESSING
                self.current_job_id = item.job_id
                logger.info(f"Dequeued job {item.job_id} ({item.ticker})")
                try:
                    await self.service.run_job(item.job_id, item.ticker)
                except asyncio.CancelledError:
                    raise
                except Exception as e:
                    logger.exception(f"Unexpected error processing job {item.job_id}; continuing")
                    self.service.mark_failed(item.job_id, safe_error_message(e))
                finally:
                    self.processed_count += 1
                    self.current_job_id = None
        except asyncio.CancelledError:
            logger.info("Analysis worker stopping due to cancellation")
            raise
        finally:
            self.state = WorkerState.STOPPED
            logger.info(f"Analysis worker stopped after {self.processed_count} job(s)")

    def start(self) -> asyncio.Task:
        """Start the loop as a background task on the running event loop."""
        if self.is_running:
            return self._task
        self._task = asyncio.create_task(self.run(), name="analysis-worker")
        return self._task

    async def stop(self) -> None:
        """Cancel the loop and wait for it to finish."""
        if self._task is None:
            return
        task, self._task = self._task, None
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            # Propagate only when the caller of stop() is itself being cancelled
            current = asyncio.current_task()
            if current is not None and current.cancelling():
                raise
