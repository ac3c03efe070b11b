"""Service boundary: submission, job execution, and read accessors."""

import asyncio
import logging
import traceback
import uuid
from collections.abc import Callable
from datetime import datetime

from stock_research.agent.orchestrator import AnalysisOrchestrator
from stock_research.jobs.queue import WorkQueue
from stock_research.jobs.store import InMemoryJobStore
from stock_research.models import Job, JobStatus, Report, StepResult, StepStatus, WorkItem
from stock_research.utils.clock import utc_now
from stock_research.utils.sanitize import truncate
from stock_research.utils.validators import normalize_ticker

logger = logging.getLogger(__name__)

CANCELLED_MESSAGE = "Job execution was cancelled due to shutdown or timeout."
FAILURE_STEP_NAME = "Job Execution"
ERROR_MESSAGE_MAX_LENGTH = 500
STACK_SUMMARY_FRAMES = 3
STACK_SUMMARY_MAX_LENGTH = 300


def safe_error_message(exc: BaseException) -> str:
    """Type-prefixed error message, truncated for storage and display."""
    message = f"{type(exc).__name__}: {exc}"
    return truncate(message, ERROR_MESSAGE_MAX_LENGTH, suffix="... (truncated)")


def stack_trace_summary(exc: BaseException) -> str:
    """First few traceback frames joined on one line."""
    frames = traceback.extract_tb(exc.__traceback__)
    if not frames:
        return "No stack trace available"
    lines = [f"{f.filename}:{f.lineno} in {f.name}" for f in frames[:STACK_SUMMARY_FRAMES]]
    return truncate(" | ".join(lines), STACK_SUMMARY_MAX_LENGTH)


class AnalysisService:
    """
    Coordinates the queue, the job store, and the orchestrator.

    `submit` is called by clients; `run_job` by the worker. Read accessors
    never mutate.
    """

    def __init__(
        self,
        store: InMemoryJobStore,
        queue: WorkQueue,
        orchestrator: AnalysisOrchestrator,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.store = store
        self.queue = queue
        self.orchestrator = orchestrator
        self._clock = clock

    async def submit(self, ticker: str | None) -> Job:
        """
        Validate a ticker and schedule its analysis.

        The work item is enqueued before the job is registered, so a full
        queue never leaves a job behind. Job creation follows the enqueue
        without an intervening await, so the worker cannot observe the item
        before the job exists.

        Raises:
            TickerValidationError: Bad ticker (no job created)
            QueueFullError: Queue stayed full past the enqueue timeout (no job created)
        """
        normalized = normalize_ticker(ticker)
        job_id = str(uuid.uuid4())
        logger.info(f"Submitting analysis for {normalized} as job {job_id}")

        await self.queue.enqueue(WorkItem(job_id=job_id, ticker=normalized))
        return self.store.create_job(normalized, job_id=job_id)

    async def run_job(self, job_id: str, ticker: str) -> None:
        """
        Execute one job to a terminal status.

        Failures are recorded on the job and not raised. Cancellation is
        recorded and then re-raised so the worker can stop.
        """
        logger.info(f"Starting job {job_id} ({ticker})")
        try:
            self.store.update_status(job_id, JobStatus.RUNNING)
            report, steps = await self.orchestrator.execute(
                ticker,
                on_step=lambda step: self.store.append_step(job_id, step),
            )
            self.store.save_result(job_id, report)
            self.store.update_status(job_id, JobStatus.SUCCEEDED)
            logger.info(
                f"Job {job_id} ({ticker}) succeeded: {report.signal}, "
                f"confidence {report.confidence:.0%}, {len(steps)} steps"
            )
        except asyncio.CancelledError as e:
            logger.warning(f"Job {job_id} ({ticker}) cancelled")
            self.mark_failed(job_id, CANCELLED_MESSAGE)
            self._append_failure_step(job_id, e, CANCELLED_MESSAGE)
            raise
        except Exception as e:
            logger.exception(f"Job {job_id} ({ticker}) failed: {e}")
            self.mark_failed(job_id, safe_error_message(e))
            self._append_failure_step(job_id, e, str(e))

    def get_job(self, job_id: str) -> Job | None:
        return self.store.get_job(job_id)

    def get_steps(self, job_id: str) -> tuple[StepResult, ...] | None:
        job = self.store.get_job(job_id)
        return job.steps if job is not None else None

    def get_result(self, job_id: str) -> Report | None:
        job = self.store.get_job(job_id)
        return job.result if job is not None else None

    def mark_failed(self, job_id: str, message: str) -> None:
        """
        Best-effort move of a job to Failed with `message`.

        A Queued job passes through Running first. Errors while writing the
        status are logged and not raised.
        """
        try:
            job = self.store.get_job(job_id)
            if job is not None and job.status == JobStatus.QUEUED:
                # Failed is only reachable through Running
                self.store.update_status(job_id, JobStatus.RUNNING)
            self.store.update_status(job_id, JobStatus.FAILED, error=message)
        except Exception:
            logger.exception(f"Could not mark job {job_id} as Failed")

    def _append_failure_step(self, job_id: str, exc: BaseException, message: str) -> None:
        now = self._clock()
        error_type = type(exc).__name__
        step = StepResult(
            step_name=FAILURE_STEP_NAME,
            status=StepStatus.FAILED,
            started_at=now,
            finished_at=now,
            summary=f"Job execution failed: {error_type}",
            artifacts={
                "error_type": error_type,
                "error_message": message,
                "stack_trace_summary": stack_trace_summary(exc),
            },
        )
        try:
            self.store.append_step(job_id, step)
        except Exception:
            logger.exception(f"Could not append failure step to job {job_id}")
