"""Tests for the analysis service: submission and job execution."""

import asyncio

import pytest
from conftest import fixed_clock

from stock_research.agent import orchestrator as orchestrator_module
from stock_research.agent.orchestrator import AnalysisOrchestrator
from stock_research.errors import QueueFullError, TickerValidationError
from stock_research.jobs.queue import WorkQueue
from stock_research.jobs.service import (
    CANCELLED_MESSAGE,
    FAILURE_STEP_NAME,
    AnalysisService,
    safe_error_message,
    stack_trace_summary,
)
from stock_research.jobs.store import InMemoryJobStore
from stock_research.models import JobStatus, Signal, StepStatus


class TestSubmit:
    """Tests for AnalysisService.submit."""

    @pytest.mark.anyio
    async def test_creates_queued_job(self, service: AnalysisService, queue: WorkQueue) -> None:
        """Test a valid ticker is normalized, enqueued, and registered as Queued."""
        job = await service.submit("  nvda ")

        assert job.ticker == "NVDA"
        assert job.status == JobStatus.QUEUED
        assert job.created_at == fixed_clock()
        assert queue.qsize() == 1

        item = await queue.dequeue()
        assert item.job_id == job.id
        assert item.ticker == "NVDA"

    @pytest.mark.anyio
    async def test_ids_are_unique(self, service: AnalysisService) -> None:
        """Test each submission gets its own id."""
        first = await service.submit("NVDA")
        second = await service.submit("NVDA")

        assert first.id != second.id

    @pytest.mark.anyio
    @pytest.mark.parametrize("ticker", [None, "", "   ", "TOOLONGTICKER", "NV$DA"])
    async def test_invalid_ticker_creates_nothing(
        self, service: AnalysisService, store: InMemoryJobStore, queue: WorkQueue, ticker
    ) -> None:
        """Test rejected tickers leave neither a job nor a queued item."""
        with pytest.raises(TickerValidationError):
            await service.submit(ticker)

        assert len(store) == 0
        assert queue.qsize() == 0

    @pytest.mark.anyio
    async def test_queue_full_creates_nothing(
        self, store: InMemoryJobStore, orchestrator: AnalysisOrchestrator
    ) -> None:
        """Test a submission that times out on a full queue leaves no job behind."""
        queue = WorkQueue(capacity=1, enqueue_timeout=0.05)
        service = AnalysisService(store=store, queue=queue, orchestrator=orchestrator, clock=fixed_clock)
        await service.submit("NVDA")

        with pytest.raises(QueueFullError):
            await service.submit("AAPL")

        assert len(store) == 1
        assert [j.ticker for j in store.list_jobs()] == ["NVDA"]


class TestRunJob:
    """Tests for AnalysisService.run_job."""

    @pytest.mark.anyio
    async def test_success(self, service: AnalysisService) -> None:
        """Test a successful run records four steps, the report, and Succeeded."""
        job = await service.submit("NVDA")

        await service.run_job(job.id, job.ticker)
        done = service.get_job(job.id)

        assert done.status == JobStatus.SUCCEEDED
        assert done.started_at is not None
        assert done.finished_at is not None
        assert done.error is None
        assert done.step_count == 4
        assert all(s.status == StepStatus.SUCCEEDED for s in done.steps)
        assert service.get_result(job.id).signal == Signal.BULLISH
        assert service.get_steps(job.id) == done.steps

    @pytest.mark.anyio
    async def test_failure_is_recorded(self, service: AnalysisService, monkeypatch) -> None:
        """Test an orchestrator error marks the job Failed with a failure step."""
        async def fail(ticker, on_step=None):
            raise RuntimeError("provider exploded")

        monkeypatch.setattr(service.orchestrator, "execute", fail)
        job = await service.submit("NVDA")

        await service.run_job(job.id, job.ticker)
        failed = service.get_job(job.id)

        assert failed.status == JobStatus.FAILED
        assert failed.error == "RuntimeError: provider exploded"
        assert failed.result is None

        step = failed.steps[-1]
        assert step.step_name == FAILURE_STEP_NAME
        assert step.status == StepStatus.FAILED
        assert step.artifacts["error_type"] == "RuntimeError"
        assert step.artifacts["error_message"] == "provider exploded"
        assert "in fail" in step.artifacts["stack_trace_summary"]

    @pytest.mark.anyio
    async def test_partial_steps_kept_on_failure(self, service: AnalysisService, monkeypatch) -> None:
        """Test steps appended before a failure survive alongside the failure step."""
        def explode(*args, **kwargs):
            raise ZeroDivisionError("division by zero")

        monkeypatch.setattr(orchestrator_module, "calculate_scores", explode)
        job = await service.submit("NVDA")

        await service.run_job(job.id, job.ticker)
        failed = service.get_job(job.id)

        assert [s.step_name for s in failed.steps] == [
            "Planning", "Data Gathering", "Scoring and Synthesis", FAILURE_STEP_NAME,
        ]
        assert failed.error.startswith("MissingStepOutputError: Scoring and Synthesis")

    @pytest.mark.anyio
    async def test_cancellation(self, service: AnalysisService, monkeypatch) -> None:
        """Test cancellation marks the job Failed and is re-raised."""
        async def hang(ticker, on_step=None):
            await asyncio.sleep(3600)

        monkeypatch.setattr(service.orchestrator, "execute", hang)
        job = await service.submit("NVDA")
        task = asyncio.create_task(service.run_job(job.id, job.ticker))
        await asyncio.sleep(0.01)

        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

        cancelled = service.get_job(job.id)
        assert cancelled.status == JobStatus.FAILED
        assert cancelled.error == CANCELLED_MESSAGE
        assert cancelled.steps[-1].artifacts["error_type"] == "CancelledError"

    @pytest.mark.anyio
    async def test_mark_failed_from_queued(self, service: AnalysisService) -> None:
        """Test a Queued job is moved through Running on its way to Failed."""
        job = await service.submit("NVDA")

        service.mark_failed(job.id, "gave up")
        failed = service.get_job(job.id)

        assert failed.status == JobStatus.FAILED
        assert failed.started_at is not None
        assert failed.error == "gave up"

    def test_reads_of_unknown_job(self, service: AnalysisService) -> None:
        """Test read accessors return None for unknown ids."""
        assert service.get_job("missing") is None
        assert service.get_steps("missing") is None
        assert service.get_result("missing") is None


class TestErrorFormatting:
    """Tests for stored error text helpers."""

    def test_safe_message_prefix(self) -> None:
        """Test the exception type prefixes the message."""
        assert safe_error_message(ValueError("bad input")) == "ValueError: bad input"

    def test_safe_message_truncated(self) -> None:
        """Test long messages are cut at 500 characters with a marker."""
        message = safe_error_message(RuntimeError("x" * 1000))

        assert len(message) == 500 + len("... (truncated)")
        assert message.endswith("... (truncated)")

    def test_stack_summary_without_traceback(self) -> None:
        """Test an exception that was never raised has no frames."""
        assert stack_trace_summary(RuntimeError("never raised")) == "No stack trace available"

    def test_stack_summary_frames(self) -> None:
        """Test raised exceptions summarize as file:line in function."""
        def inner():
            raise RuntimeError("boom")

        try:
            inner()
        except RuntimeError as e:
            summary = stack_trace_summary(e)

        assert "in inner" in summary
        assert " | " in summary
