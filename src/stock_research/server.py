"""Stock Research MCP Server using FastMCP."""

import json
import logging
import os
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastmcp import FastMCP

from stock_research import SCHEMA_VERSION, SERVER_VERSION
from stock_research.config import Settings
from stock_research.runtime import build_runtime
from stock_research.tools import (
    get_analysis_job,
    get_analysis_result,
    get_analysis_steps,
    health,
    submit_analysis,
)

# Configure logging
log_level = os.environ.get("LOG_LEVEL", "INFO").upper()
logging.basicConfig(level=getattr(logging, log_level, logging.INFO))
logger = logging.getLogger(__name__)

settings = Settings.from_env()
runtime = build_runtime(settings)


@asynccontextmanager
async def lifespan(server: FastMCP) -> AsyncIterator[None]:
    """Run the analysis worker for as long as the server is up."""
    runtime.worker.start()
    logger.info(
        f"Worker started (queue capacity {settings.queue_capacity}, "
        f"enqueue timeout {settings.enqueue_timeout_seconds}s)"
    )
    try:
        yield
    finally:
        await runtime.worker.stop()
        logger.info("Worker stopped")


# Create FastMCP server instance
mcp = FastMCP(
    name="stock-research",
    lifespan=lifespan,
)


# ============================================================================
# TOOLS
# ============================================================================


@mcp.tool(name="submit_analysis")
async def submit_analysis_job(ticker: str | None = None) -> str:
    """
    Submit a stock ticker for asynchronous multi-step analysis.

    The job runs in the background through Planning, Data Gathering,
    Scoring and Synthesis, and Reflection and Finalization. Poll
    get_analysis_job until status is Succeeded or Failed, then call
    get_analysis_result.

    Args:
        ticker: Ticker symbol, 1-10 chars of A-Z, 0-9, '.', '-' (default: DEFAULT_TICKER)

    Returns:
        JSON with job_id, status (Queued), submitted_at, and follow-up tools
    """
    result = await submit_analysis(runtime.service, ticker or settings.default_ticker)
    return json.dumps(result, indent=2, default=str)


@mcp.tool(name="get_analysis_job")
async def get_analysis_job_status(job_id: str) -> str:
    """
    Get job metadata: status, timestamps, error, step count, and whether a report exists.

    Args:
        job_id: Job id returned by submit_analysis

    Returns:
        JSON with job status (Queued, Running, Succeeded, Failed)
    """
    result = get_analysis_job(runtime.service, job_id)
    return json.dumps(result, indent=2, default=str)


@mcp.tool(name="get_analysis_steps")
async def get_analysis_job_steps(job_id: str) -> str:
    """
    Get the ordered step trace of an analysis job.

    Each step has name, status, timestamps, and summary. Step artifacts
    (plan, gathered data counts, score breakdown, reflection adjustments)
    are included when VERBOSE_STEP_ARTIFACTS is enabled.

    Args:
        job_id: Job id returned by submit_analysis

    Returns:
        JSON with steps in execution order
    """
    result = get_analysis_steps(
        runtime.service,
        job_id,
        include_artifacts=settings.verbose_step_artifacts,
    )
    return json.dumps(result, indent=2, default=str)


@mcp.tool(name="get_analysis_result")
async def get_analysis_job_result(job_id: str) -> str:
    """
    Get the final investment report for a finished job.

    Render the report as: company and signal with confidence, the thesis
    verbatim, score breakdown with weights, insights with impact, then
    limitations (if any) and sources.

    If the job is still Queued or Running, the response is a job_pending
    error with retry_after_seconds; wait and poll again.

    Args:
        job_id: Job id returned by submit_analysis

    Returns:
        JSON with the report, or job_pending / job_failed / result_missing error
    """
    result = get_analysis_result(runtime.service, job_id)
    return json.dumps(result, indent=2, default=str)


@mcp.tool(name="health")
async def health_check() -> str:
    """
    Check server health: queue depth, worker state, and processed job count.

    Returns:
        JSON with status, timestamp, service name, queue, and worker info
    """
    result = health(runtime)
    return json.dumps(result, indent=2, default=str)


# ============================================================================
# ENTRY POINT
# ============================================================================


def main() -> None:
    """Run the MCP server."""
    logger.info(f"Starting Stock Research MCP Server v{SERVER_VERSION} (schema v{SCHEMA_VERSION})")
    mcp.run()


if __name__ == "__main__":
    main()
