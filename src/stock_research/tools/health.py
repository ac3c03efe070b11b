"""Health check tool."""

from typing import Any

from stock_research.runtime import Runtime
from stock_research.utils.clock import utc_now
from stock_research.utils.provenance import build_meta

SERVICE_NAME = "stock-research"


def health(runtime: Runtime) -> dict[str, Any]:
    """Service status, queue depth, and worker state."""
    worker = runtime.worker
    return {
        "meta": build_meta("health"),
        "status": "healthy" if worker.is_running else "degraded",
        "timestamp": utc_now().isoformat(),
        "service": SERVICE_NAME,
        "queue": {
            "depth": runtime.queue.qsize(),
            "capacity": runtime.queue.capacity,
        },
        "worker": {
            "state": str(worker.state),
            "running": worker.is_running,
            "processed_count": worker.processed_count,
            "current_job_id": worker.current_job_id,
            "max_concurrent_jobs": worker.max_concurrent_jobs,
        },
        "jobs_tracked": len(runtime.store),
    }
