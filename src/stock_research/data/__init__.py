"""Data providers."""

from stock_research.data.mock_providers import (
    MockFinancialDataProvider,
    MockNewsProvider,
    MockRiskProvider,
)
from stock_research.data.providers import (
    FinancialDataProvider,
    NewsProvider,
    ProviderResult,
    RiskProvider,
    call_provider,
)

__all__ = [
    "FinancialDataProvider",
    "NewsProvider",
    "RiskProvider",
    "ProviderResult",
    "call_provider",
    "MockFinancialDataProvider",
    "MockNewsProvider",
    "MockRiskProvider",
]
