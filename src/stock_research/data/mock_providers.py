"""
Deterministic mock providers.

NVDA gets detailed data; every other ticker gets a generic profile built
from the ticker symbol. News timestamps are relative to the provider clock
so sentiment recency buckets stay stable.
"""

import asyncio
from collections.abc import Callable
from datetime import datetime, timedelta

from stock_research.models import FinancialSnapshot, NewsItem, RiskItem
from stock_research.utils.clock import utc_now

DETAILED_TICKER = "NVDA"


class _MockProvider:
    """Shared latency and clock handling for the mock providers."""

    kind = "data"

    def __init__(self, latency_seconds: float = 0.0, clock: Callable[[], datetime] = utc_now):
        if latency_seconds < 0:
            raise ValueError(f"Invalid latency {latency_seconds}. Must not be negative")
        self.latency_seconds = latency_seconds
        self._clock = clock

    def source_uri(self, ticker: str) -> str:
        return f"mock://{self.kind}/{ticker}"

    async def _simulate_latency(self) -> None:
        if self.latency_seconds > 0:
            await asyncio.sleep(self.latency_seconds)


class MockFinancialDataProvider(_MockProvider):
    kind = "financials"

    async def fetch(self, ticker: str) -> FinancialSnapshot:
        await self._simulate_latency()
        if ticker.upper() == DETAILED_TICKER:
            return FinancialSnapshot(
                ticker="NVDA",
                company_name="NVIDIA Corporation",
                revenue=60_922_000_000.0,
                net_income=29_760_000_000.0,
                earnings_per_share=11.93,
                profit_margin=48.9,
                revenue_growth_yoy=126.0,
                total_assets=65_728_000_000.0,
                total_liabilities=20_989_000_000.0,
                free_cash_flow=27_090_000_000.0,
                return_on_equity=123.8,
                fiscal_period="FY2024",
                source_ref=self.source_uri("NVDA"),
            )
        return FinancialSnapshot(
            ticker=ticker,
            company_name=f"{ticker} Corporation",
            revenue=10_000_000_000.0,
            net_income=1_200_000_000.0,
            earnings_per_share=2.45,
            profit_margin=12.0,
            revenue_growth_yoy=5.5,
            total_assets=25_000_000_000.0,
            total_liabilities=15_000_000_000.0,
            free_cash_flow=1_500_000_000.0,
            return_on_equity=15.2,
            fiscal_period="FY2024",
            source_ref=self.source_uri(ticker),
        )


class MockNewsProvider(_MockProvider):
    kind = "news"

    async def fetch(self, ticker: str) -> list[NewsItem]:
        await self._simulate_latency()
        now = self._clock()

        def days_ago(days: int) -> datetime:
            return now - timedelta(days=days)

        if ticker.upper() == DETAILED_TICKER:
            return [
                NewsItem(
                    headline="NVIDIA Reports Record Revenue Driven by AI Demand",
                    summary=(
                        "NVIDIA announces quarterly revenue up 206% year-over-year, fueled by "
                        "unprecedented demand for AI chips and data center solutions."
                    ),
                    published_at=days_ago(2),
                    sentiment_hint="positive",
                    source="Mock Financial News",
                    url="mock://news/nvda/record-revenue",
                ),
                NewsItem(
                    headline="Tech Giants Compete for NVIDIA GPU Supply",
                    summary=(
                        "Major cloud providers scramble to secure H100 and Blackwell chips. "
                        "Supply constraints persist despite increased production capacity."
                    ),
                    published_at=days_ago(5),
                    sentiment_hint="positive",
                    source="Mock Tech Insider",
                    url="mock://news/nvda/gpu-demand",
                ),
                NewsItem(
                    headline="NVIDIA Faces Increased Competition from AMD and Custom AI Chips",
                    summary=(
                        "Analysts warn of growing competition as AMD ramps up MI300 production "
                        "and hyperscalers develop proprietary AI accelerators."
                    ),
                    published_at=days_ago(7),
                    sentiment_hint="negative",
                    source="Mock Market Watch",
                    url="mock://news/nvda/competition",
                ),
                NewsItem(
                    headline="Export Restrictions on AI Chips to China Impact NVIDIA",
                    summary=(
                        "Tighter export controls on advanced semiconductors create revenue "
                        "headwinds despite China-specific chip variants."
                    ),
                    published_at=days_ago(10),
                    sentiment_hint="negative",
                    source="Mock Reuters",
                    url="mock://news/nvda/export-controls",
                ),
                NewsItem(
                    headline="NVIDIA Announces Breakthrough in AI Model Training Efficiency",
                    summary=(
                        "New tensor core architecture promises a 40% improvement in AI "
                        "training performance."
                    ),
                    published_at=days_ago(12),
                    sentiment_hint="positive",
                    source="Mock Tech Review",
                    url="mock://news/nvda/ai-breakthrough",
                ),
            ]
        return [
            NewsItem(
                headline=f"{ticker} Reports Quarterly Earnings",
                summary=(
                    f"{ticker} announces quarterly results meeting analyst expectations "
                    "with steady revenue growth."
                ),
                published_at=days_ago(3),
                sentiment_hint="neutral",
                source="Mock Business News",
                url=f"mock://news/{ticker}/earnings",
            ),
            NewsItem(
                headline=f"{ticker} Announces Strategic Partnership",
                summary=f"{ticker} enters new partnership to expand market reach and product offerings.",
                published_at=days_ago(8),
                sentiment_hint="positive",
                source="Mock Industry News",
                url=f"mock://news/{ticker}/partnership",
            ),
        ]


class MockRiskProvider(_MockProvider):
    kind = "risks"

    async def fetch(self, ticker: str) -> list[RiskItem]:
        await self._simulate_latency()
        if ticker.upper() == DETAILED_TICKER:
            return [
                RiskItem(
                    title="Valuation Risk - High P/E Ratio",
                    description=(
                        "Premium valuation multiples reflect high growth expectations. A slowdown "
                        "in AI adoption could compress multiples sharply."
                    ),
                    severity="high",
                    category="valuation",
                ),
                RiskItem(
                    title="Competitive Pressure from AMD and Custom Silicon",
                    description=(
                        "AMD's MI300 series and hyperscaler custom chips could erode market share "
                        "and pricing power."
                    ),
                    severity="high",
                    category="market",
                ),
                RiskItem(
                    title="Geopolitical and Export Control Risks",
                    description=(
                        "U.S.-China technology restrictions limit access to the Chinese market."
                    ),
                    severity="high",
                    category="regulatory",
                ),
                RiskItem(
                    title="Customer Concentration Risk",
                    description="Heavy reliance on a small number of large cloud customers.",
                    severity="medium",
                    category="operational",
                ),
                RiskItem(
                    title="Supply Chain and Manufacturing Dependencies",
                    description="Dependence on TSMC for advanced chip manufacturing.",
                    severity="medium",
                    category="operational",
                ),
                RiskItem(
                    title="AI Market Sustainability Questions",
                    description=(
                        "If AI monetization disappoints, demand for AI chips could correct sharply."
                    ),
                    severity="medium",
                    category="market",
                ),
                RiskItem(
                    title="Technology Obsolescence Risk",
                    description="Alternative compute architectures could disrupt GPU-centric designs.",
                    severity="low",
                    category="technology",
                ),
            ]
        return [
            RiskItem(
                title="Market Competition",
                description=(
                    f"{ticker} faces competition from established players and new entrants "
                    "in its market segment."
                ),
                severity="medium",
                category="market",
            ),
            RiskItem(
                title="Regulatory Compliance",
                description=(
                    f"{ticker} must navigate evolving regulatory requirements across "
                    "multiple jurisdictions."
                ),
                severity="medium",
                category="regulatory",
            ),
            RiskItem(
                title="Economic Sensitivity",
                description=(
                    f"{ticker} business performance may be affected by macroeconomic "
                    "conditions and market cycles."
                ),
                severity="low",
                category="market",
            ),
        ]
