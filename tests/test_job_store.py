"""Tests for the in-memory job store state machine."""

import threading
from datetime import datetime

import pytest

from stock_research.errors import (
    InvalidStatusTransitionError,
    JobNotFoundError,
    ResultAlreadySavedError,
)
from stock_research.jobs.store import InMemoryJobStore
from stock_research.models import (
    JobStatus,
    Report,
    ScoreBreakdown,
    Signal,
    StepResult,
    StepStatus,
)


def _report(now: datetime) -> Report:
    return Report(
        company="Test Corp",
        thesis="Thesis",
        signal=Signal.NEUTRAL,
        insights=(),
        sources=(),
        confidence=0.5,
        score_breakdown=ScoreBreakdown(50, 50, 50, 50, 0.4, 0.3, 0.3),
        generated_at=now,
    )


def _step(name: str, now: datetime) -> StepResult:
    return StepResult(step_name=name, status=StepStatus.SUCCEEDED, started_at=now, summary=name)


class TestCreateAndGet:
    """Tests for job creation and reads."""

    def test_new_job_is_queued(self, store: InMemoryJobStore, now: datetime) -> None:
        """Test a new job is Queued with only created_at set."""
        job = store.create_job("NVDA")

        assert job.status == JobStatus.QUEUED
        assert job.created_at == now
        assert job.started_at is None
        assert job.finished_at is None
        assert job.steps == ()
        assert job.result is None

    def test_preassigned_id(self, store: InMemoryJobStore) -> None:
        """Test a caller-provided id is used."""
        job = store.create_job("NVDA", job_id="00000000-0000-4000-8000-000000000001")
        assert store.get_job(job.id) == job

    def test_duplicate_id_rejected(self, store: InMemoryJobStore) -> None:
        """Test ids are unique."""
        store.create_job("NVDA", job_id="dup")
        with pytest.raises(ValueError, match="already exists"):
            store.create_job("AAPL", job_id="dup")

    def test_unknown_job_is_none(self, store: InMemoryJobStore) -> None:
        """Test reads of unknown ids return None."""
        assert store.get_job("missing") is None

    def test_snapshots_are_immutable(self, store: InMemoryJobStore, now: datetime) -> None:
        """Test later mutations do not leak into earlier snapshots."""
        job = store.create_job("NVDA")
        before = store.get_job(job.id)

        store.append_step(job.id, _step("Planning", now))

        assert before.steps == ()
        assert store.get_job(job.id).step_count == 1

    def test_list_and_len(self, store: InMemoryJobStore) -> None:
        """Test listing returns every job."""
        store.create_job("NVDA")
        store.create_job("AAPL")

        assert len(store) == 2
        assert {j.ticker for j in store.list_jobs()} == {"NVDA", "AAPL"}


class TestStatusTransitions:
    """Tests for forward-only status updates."""

    def test_happy_path_timestamps(self, store: InMemoryJobStore, now: datetime) -> None:
        """Test Running sets started_at and Succeeded sets finished_at."""
        job = store.create_job("NVDA")

        running = store.update_status(job.id, JobStatus.RUNNING)
        store.save_result(job.id, _report(now))
        done = store.update_status(job.id, JobStatus.SUCCEEDED)

        assert running.started_at == now
        assert running.finished_at is None
        assert done.status == JobStatus.SUCCEEDED
        assert done.finished_at == now
        assert done.has_result

    def test_same_status_is_idempotent(self) -> None:
        """Test repeating Running does not re-stamp started_at."""
        times = iter([
            datetime(2025, 1, 1), datetime(2025, 1, 2), datetime(2025, 1, 3),
        ])
        store = InMemoryJobStore(clock=lambda: next(times))
        job = store.create_job("NVDA")

        first = store.update_status(job.id, JobStatus.RUNNING)
        second = store.update_status(job.id, JobStatus.RUNNING)

        assert first.started_at == second.started_at == datetime(2025, 1, 2)

    def test_cannot_skip_running(self, store: InMemoryJobStore) -> None:
        """Test Queued cannot jump to a terminal status."""
        job = store.create_job("NVDA")

        with pytest.raises(InvalidStatusTransitionError):
            store.update_status(job.id, JobStatus.FAILED, error="boom")
        assert store.get_job(job.id).status == JobStatus.QUEUED

    def test_cannot_regress(self, store: InMemoryJobStore) -> None:
        """Test terminal jobs never move back."""
        job = store.create_job("NVDA")
        store.update_status(job.id, JobStatus.RUNNING)
        store.update_status(job.id, JobStatus.FAILED, error="boom")

        for status in (JobStatus.QUEUED, JobStatus.RUNNING, JobStatus.SUCCEEDED):
            with pytest.raises(InvalidStatusTransitionError):
                store.update_status(job.id, status)

    def test_succeeded_requires_report(self, store: InMemoryJobStore) -> None:
        """Test Succeeded is refused without a saved report."""
        job = store.create_job("NVDA")
        store.update_status(job.id, JobStatus.RUNNING)

        with pytest.raises(InvalidStatusTransitionError, match="no report"):
            store.update_status(job.id, JobStatus.SUCCEEDED)

    def test_failed_records_error(self, store: InMemoryJobStore) -> None:
        """Test the error message is stored on failure."""
        job = store.create_job("NVDA")
        store.update_status(job.id, JobStatus.RUNNING)

        failed = store.update_status(job.id, JobStatus.FAILED, error="RuntimeError: boom")

        assert failed.error == "RuntimeError: boom"
        assert failed.finished_at is not None

    def test_unknown_id(self, store: InMemoryJobStore, now: datetime) -> None:
        """Test every mutation on an unknown id raises JobNotFoundError."""
        with pytest.raises(JobNotFoundError):
            store.update_status("missing", JobStatus.RUNNING)
        with pytest.raises(JobNotFoundError):
            store.append_step("missing", _step("Planning", now))
        with pytest.raises(JobNotFoundError):
            store.save_result("missing", _report(now))


class TestStepsAndResult:
    """Tests for step appends and report saving."""

    def test_steps_keep_order(self, store: InMemoryJobStore, now: datetime) -> None:
        """Test steps are returned in insertion order."""
        job = store.create_job("NVDA")
        for name in ("Planning", "Data Gathering", "Scoring and Synthesis"):
            store.append_step(job.id, _step(name, now))

        names = [s.step_name for s in store.get_job(job.id).steps]
        assert names == ["Planning", "Data Gathering", "Scoring and Synthesis"]

    def test_steps_can_follow_terminal_status(self, store: InMemoryJobStore, now: datetime) -> None:
        """Test a failure step can be appended after the job failed."""
        job = store.create_job("NVDA")
        store.update_status(job.id, JobStatus.RUNNING)
        store.update_status(job.id, JobStatus.FAILED, error="boom")

        store.append_step(job.id, _step("Job Execution", now))

        assert store.get_job(job.id).step_count == 1

    def test_result_saved_once(self, store: InMemoryJobStore, now: datetime) -> None:
        """Test a second save is refused."""
        job = store.create_job("NVDA")
        store.update_status(job.id, JobStatus.RUNNING)
        store.save_result(job.id, _report(now))

        with pytest.raises(ResultAlreadySavedError):
            store.save_result(job.id, _report(now))

    def test_result_requires_running(self, store: InMemoryJobStore, now: datetime) -> None:
        """Test a report cannot be saved on a Queued job."""
        job = store.create_job("NVDA")

        with pytest.raises(ResultAlreadySavedError, match="only be saved while Running"):
            store.save_result(job.id, _report(now))

    def test_concurrent_appends(self, store: InMemoryJobStore, now: datetime) -> None:
        """Test appends from many threads are all recorded."""
        job = store.create_job("NVDA")

        def append_many() -> None:
            for _ in range(50):
                store.append_step(job.id, _step("Planning", now))

        threads = [threading.Thread(target=append_many) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert store.get_job(job.id).step_count == 400
