"""Pytest configuration and fixtures."""

from datetime import datetime, timedelta

import pytest
import pytz

from stock_research.agent.orchestrator import AnalysisOrchestrator
from stock_research.data.mock_providers import (
    MockFinancialDataProvider,
    MockNewsProvider,
    MockRiskProvider,
)
from stock_research.jobs.queue import WorkQueue
from stock_research.jobs.service import AnalysisService
from stock_research.jobs.store import InMemoryJobStore
from stock_research.models import FinancialSnapshot, NewsItem, RiskItem

FIXED_NOW = datetime(2025, 1, 15, 12, 0, tzinfo=pytz.utc)


def fixed_clock() -> datetime:
    return FIXED_NOW


def make_news(hint: str | None, days_old: float, now: datetime = FIXED_NOW) -> NewsItem:
    """News item with the given sentiment hint published `days_old` days before `now`."""
    return NewsItem(
        headline=f"{hint or 'no hint'} headline",
        published_at=now - timedelta(days=days_old),
        sentiment_hint=hint,
    )


def make_risk(severity: str | None) -> RiskItem:
    return RiskItem(title=f"{severity} risk", description="Test risk", severity=severity)


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def now() -> datetime:
    """Fixed reference time for recency calculations."""
    return FIXED_NOW


@pytest.fixture
def strong_snapshot() -> FinancialSnapshot:
    """Snapshot that hits the top tier of every financial rule."""
    return FinancialSnapshot(
        ticker="TEST",
        company_name="Test Corp",
        profit_margin=45.0,
        revenue_growth_yoy=60.0,
        return_on_equity=55.0,
        source_ref="mock://financials/TEST",
    )


@pytest.fixture
def weak_snapshot() -> FinancialSnapshot:
    """Snapshot with shrinking revenue and negative margin."""
    return FinancialSnapshot(
        ticker="WEAK",
        company_name="Weak Corp",
        profit_margin=-5.0,
        revenue_growth_yoy=-12.0,
        return_on_equity=3.0,
        source_ref="mock://financials/WEAK",
    )


@pytest.fixture
def store() -> InMemoryJobStore:
    return InMemoryJobStore(clock=fixed_clock)


@pytest.fixture
def orchestrator() -> AnalysisOrchestrator:
    """Orchestrator over the mock providers with a fixed clock."""
    return AnalysisOrchestrator(
        financial_provider=MockFinancialDataProvider(clock=fixed_clock),
        news_provider=MockNewsProvider(clock=fixed_clock),
        risk_provider=MockRiskProvider(clock=fixed_clock),
        clock=fixed_clock,
    )


@pytest.fixture
def queue() -> WorkQueue:
    return WorkQueue(capacity=10, enqueue_timeout=0.5)


@pytest.fixture
def service(store: InMemoryJobStore, queue: WorkQueue, orchestrator: AnalysisOrchestrator) -> AnalysisService:
    return AnalysisService(store=store, queue=queue, orchestrator=orchestrator, clock=fixed_clock)
