"""Wiring of queue, store, orchestrator, service, and worker from Settings."""

from dataclasses import dataclass

from stock_research.agent.orchestrator import AnalysisOrchestrator
from stock_research.config import DEFAULT_WEIGHTS, ScoringWeights, Settings
from stock_research.data.mock_providers import (
    MockFinancialDataProvider,
    MockNewsProvider,
    MockRiskProvider,
)
from stock_research.jobs.queue import WorkQueue
from stock_research.jobs.service import AnalysisService
from stock_research.jobs.store import InMemoryJobStore
from stock_research.jobs.worker import AnalysisWorker


@dataclass
class Runtime:
    settings: Settings
    store: InMemoryJobStore
    queue: WorkQueue
    service: AnalysisService
    worker: AnalysisWorker


def build_runtime(settings: Settings, weights: ScoringWeights = DEFAULT_WEIGHTS) -> Runtime:
    """Assemble the pipeline with the mock providers."""
    latency = settings.provider_latency_seconds
    orchestrator = AnalysisOrchestrator(
        financial_provider=MockFinancialDataProvider(latency_seconds=latency),
        news_provider=MockNewsProvider(latency_seconds=latency),
        risk_provider=MockRiskProvider(latency_seconds=latency),
        weights=weights,
    )
    store = InMemoryJobStore()
    queue = WorkQueue(
        capacity=settings.queue_capacity,
        enqueue_timeout=settings.enqueue_timeout_seconds,
    )
    service = AnalysisService(store=store, queue=queue, orchestrator=orchestrator)
    worker = AnalysisWorker(
        queue=queue,
        service=service,
        max_concurrent_jobs=settings.max_concurrent_jobs,
    )
    return Runtime(settings=settings, store=store, queue=queue, service=service, worker=worker)
