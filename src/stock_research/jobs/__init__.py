"""Job pipeline: queue, store, service, and worker."""

from stock_research.jobs.queue import WorkQueue
from stock_research.jobs.service import CANCELLED_MESSAGE, AnalysisService
from stock_research.jobs.store import InMemoryJobStore
from stock_research.jobs.worker import AnalysisWorker, WorkerState

__all__ = [
    "WorkQueue",
    "InMemoryJobStore",
    "AnalysisService",
    "CANCELLED_MESSAGE",
    "AnalysisWorker",
    "WorkerState",
]
