"""Analysis job tools: submit, poll status, inspect steps, fetch the report."""

from time import perf_counter
from typing import Any

from stock_research.errors import QueueFullError, TickerValidationError
from stock_research.jobs.service import AnalysisService
from stock_research.models import Job, JobStatus
from stock_research.utils.provenance import ErrorType, build_error_response, build_meta
from stock_research.utils.validators import is_valid_job_id

RETRY_AFTER_SECONDS = 5

FOLLOW_UP_TOOLS = {
    "status": "get_analysis_job",
    "steps": "get_analysis_steps",
    "result": "get_analysis_result",
}


def _lookup(service: AnalysisService, job_id: str, tool: str) -> Job | dict[str, Any]:
    """Resolve a job id or return the matching error response."""
    if not is_valid_job_id(job_id):
        return build_error_response(
            ErrorType.INVALID_JOB_ID,
            f"'{job_id}' is not a valid job id. Expected a UUID.",
            tool=tool,
            job_id=job_id,
        )
    job = service.get_job(job_id)
    if job is None:
        return build_error_response(
            ErrorType.NOT_FOUND, f"Job {job_id} not found.", tool=tool, job_id=job_id
        )
    return job


async def submit_analysis(service: AnalysisService, ticker: str) -> dict[str, Any]:
    """
    Submit a ticker for asynchronous analysis.

    Args:
        service: Analysis service
        ticker: Ticker symbol (trimmed and uppercased)

    Returns:
        Dict with job id, status, submitted_at, and follow-up tool names,
        or a validation_error / queue_full error response
    """
    start = perf_counter()
    try:
        job = await service.submit(ticker)
    except TickerValidationError as e:
        return build_error_response(
            ErrorType.VALIDATION_ERROR, str(e), tool="submit_analysis", ticker=ticker
        )
    except QueueFullError as e:
        return build_error_response(
            ErrorType.QUEUE_FULL,
            str(e),
            tool="submit_analysis",
            retry_after_seconds=RETRY_AFTER_SECONDS,
            queue_capacity=e.capacity,
        )

    return {
        "meta": build_meta("submit_analysis", (perf_counter() - start) * 1000),
        "job_id": job.id,
        "ticker": job.ticker,
        "status": str(job.status),
        "submitted_at": job.created_at.isoformat(),
        "follow_up": {name: {"tool": tool, "job_id": job.id} for name, tool in FOLLOW_UP_TOOLS.items()},
    }


def get_analysis_job(service: AnalysisService, job_id: str) -> dict[str, Any]:
    """Job metadata: status, timestamps, error, step count, and result availability."""
    job = _lookup(service, job_id, "get_analysis_job")
    if isinstance(job, dict):
        return job
    return {"meta": build_meta("get_analysis_job"), **job.to_dict()}


def get_analysis_steps(
    service: AnalysisService,
    job_id: str,
    include_artifacts: bool = True,
) -> dict[str, Any]:
    """Ordered step trace. Artifacts are omitted when `include_artifacts` is False."""
    job = _lookup(service, job_id, "get_analysis_steps")
    if isinstance(job, dict):
        return job
    return {
        "meta": build_meta("get_analysis_steps"),
        "job_id": job.id,
        "status": str(job.status),
        "step_count": job.step_count,
        "steps": [step.to_dict(include_artifacts=include_artifacts) for step in job.steps],
    }


def get_analysis_result(service: AnalysisService, job_id: str) -> dict[str, Any]:
    """
    Final report for a finished job.

    Returns:
        The report when Succeeded; job_pending with retry_after_seconds while
        Queued or Running; job_failed with the error when Failed;
        result_missing if Succeeded without a report
    """
    job = _lookup(service, job_id, "get_analysis_result")
    if isinstance(job, dict):
        return job

    if job.status in (JobStatus.QUEUED, JobStatus.RUNNING):
        return build_error_response(
            ErrorType.JOB_PENDING,
            f"Job is {job.status}. Poll again shortly.",
            tool="get_analysis_result",
            job_id=job.id,
            retry_after_seconds=RETRY_AFTER_SECONDS,
            status=str(job.status),
        )

    if job.status == JobStatus.FAILED:
        return build_error_response(
            ErrorType.JOB_FAILED,
            job.error or "Job failed.",
            tool="get_analysis_result",
            job_id=job.id,
            status=str(job.status),
            failed_at=job.finished_at.isoformat() if job.finished_at else None,
        )

    if job.result is None:
        return build_error_response(
            ErrorType.RESULT_MISSING,
            "Job succeeded but no report was saved.",
            tool="get_analysis_result",
            job_id=job.id,
            status=str(job.status),
        )

    return {
        "meta": build_meta("get_analysis_result"),
        "job_id": job.id,
        "ticker": job.ticker,
        "status": str(job.status),
        "report": job.result.to_dict(),
    }
