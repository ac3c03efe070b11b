"""
In-memory job store.

Mutations on the same job are serialized by that job's lock; different jobs
never contend. Every read returns a frozen Job snapshot.
"""

import logging
import threading
import uuid
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime

from stock_research.errors import (
    InvalidStatusTransitionError,
    JobNotFoundError,
    ResultAlreadySavedError,
)
from stock_research.models import Job, JobStatus, Report, StepResult
from stock_research.utils.clock import utc_now

logger = logging.getLogger(__name__)

# Allowed next statuses; same-status updates are handled separately as no-ops
_TRANSITIONS: dict[JobStatus, frozenset[JobStatus]] = {
    JobStatus.QUEUED: frozenset({JobStatus.RUNNING}),
    JobStatus.RUNNING: frozenset({JobStatus.SUCCEEDED, JobStatus.FAILED}),
    JobStatus.SUCCEEDED: frozenset(),
    JobStatus.FAILED: frozenset(),
}


@dataclass
class _JobRecord:
    id: str
    ticker: str
    created_at: datetime
    status: JobStatus = JobStatus.QUEUED
    started_at: datetime | None = None
    finished_at: datetime | None = None
    error: str | None = None
    steps: list[StepResult] = field(default_factory=list)
    result: Report | None = None
    lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def snapshot(self) -> Job:
        return Job(
            id=self.id,
            ticker=self.ticker,
            status=self.status,
            created_at=self.created_at,
            started_at=self.started_at,
            finished_at=self.finished_at,
            error=self.error,
            steps=tuple(self.steps),
            result=self.result,
        )


class InMemoryJobStore:
    """Keyed map of jobs with one lock per job id."""

    def __init__(self, clock: Callable[[], datetime] = utc_now):
        self._clock = clock
        self._jobs: dict[str, _JobRecord] = {}
        # Held only to insert or look up records
        self._registry_lock = threading.Lock()

    def __len__(self) -> int:
        with self._registry_lock:
            return len(self._jobs)

    def create_job(self, ticker: str, job_id: str | None = None) -> Job:
        """
        Register a new Queued job.

        Args:
            ticker: Normalized ticker
            job_id: Pre-assigned id (default: new uuid4)

        Raises:
            ValueError: If the id is already taken
        """
        record = _JobRecord(
            id=job_id or str(uuid.uuid4()),
            ticker=ticker,
            created_at=self._clock(),
        )
        with self._registry_lock:
            if record.id in self._jobs:
                raise ValueError(f"Job with ID {record.id} already exists.")
            self._jobs[record.id] = record

        logger.info(f"Created job {record.id} for {ticker}")
        return record.snapshot()

    def get_job(self, job_id: str) -> Job | None:
        record = self._lookup(job_id)
        if record is None:
            return None
        with record.lock:
            return record.snapshot()

    def list_jobs(self) -> list[Job]:
        """All jobs, newest first."""
        with self._registry_lock:
            records = list(self._jobs.values())
        snapshots = []
        for record in records:
            with record.lock:
                snapshots.append(record.snapshot())
        return sorted(snapshots, key=lambda j: j.created_at, reverse=True)

    def update_status(self, job_id: str, status: JobStatus, error: str | None = None) -> Job:
        """
        Move a job forward through Queued -> Running -> Succeeded | Failed.

        Repeating the current status is a no-op and never re-stamps timestamps.
        `started_at` is set on the first move to Running, `finished_at` on the
        terminal move.

        Raises:
            JobNotFoundError: Unknown job id
            InvalidStatusTransitionError: Backward move, skipped Running, or
                Succeeded without a saved report
        """
        record = self._require(job_id)
        with record.lock:
            if status == record.status:
                return record.snapshot()

            if status not in _TRANSITIONS[record.status]:
                raise InvalidStatusTransitionError(job_id, str(record.status), str(status))

            if status == JobStatus.SUCCEEDED and record.result is None:
                raise InvalidStatusTransitionError(
                    job_id, str(record.status), f"{status} (no report saved)"
                )

            now = self._clock()
            record.status = status
            if status == JobStatus.RUNNING and record.started_at is None:
                record.started_at = now
            if status.is_terminal and record.finished_at is None:
                record.finished_at = now
            if error is not None:
                record.error = error

            logger.info(f"Job {job_id} -> {status}")
            return record.snapshot()

    def append_step(self, job_id: str, step: StepResult) -> None:
        record = self._require(job_id)
        with record.lock:
            record.steps.append(step)
            count = len(record.steps)
        logger.info(f"Job {job_id}: appended step '{step.step_name}' ({step.status}), {count} total")

    def save_result(self, job_id: str, report: Report) -> None:
        """
        Attach the final report. Allowed once, while the job is Running.

        Raises:
            JobNotFoundError: Unknown job id
            ResultAlreadySavedError: A report exists or the job is not Running
        """
        record = self._require(job_id)
        with record.lock:
            if record.result is not None:
                raise ResultAlreadySavedError(f"Job {job_id} already has a saved report.")
            if record.status != JobStatus.RUNNING:
                raise ResultAlreadySavedError(
                    f"Job {job_id} is {record.status}; a report can only be saved while Running."
                )
            record.result = report
        logger.info(f"Job {job_id}: saved report ({report.signal}, confidence {report.confidence:.0%})")

    def _lookup(self, job_id: str) -> _JobRecord | None:
        with self._registry_lock:
            return self._jobs.get(job_id)

    def _require(self, job_id: str) -> _JobRecord:
        record = self._lookup(job_id)
        if record is None:
            raise JobNotFoundError(job_id)
        return record
