"""Domain models for analysis jobs, step traces, and reports."""

from dataclasses import asdict, dataclass, field
from datetime import datetime
from enum import StrEnum
from types import MappingProxyType
from typing import Any, Mapping


class JobStatus(StrEnum):
    QUEUED = "Queued"
    RUNNING = "Running"
    SUCCEEDED = "Succeeded"
    FAILED = "Failed"

    @property
    def is_terminal(self) -> bool:
        return self in (JobStatus.SUCCEEDED, JobStatus.FAILED)


class StepStatus(StrEnum):
    NOT_STARTED = "NotStarted"
    RUNNING = "Running"
    SUCCEEDED = "Succeeded"
    FAILED = "Failed"


class Signal(StrEnum):
    BULLISH = "Bullish"
    NEUTRAL = "Neutral"
    BEARISH = "Bearish"


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


# ============================================================================
# PROVIDER DTOs
# ============================================================================


@dataclass(frozen=True)
class FinancialSnapshot:
    """Structured financial data for a company. Percentages are 0-100 scale."""

    ticker: str
    company_name: str
    revenue: float = 0.0
    net_income: float = 0.0
    earnings_per_share: float = 0.0
    profit_margin: float = 0.0
    revenue_growth_yoy: float = 0.0
    total_assets: float = 0.0
    total_liabilities: float = 0.0
    free_cash_flow: float = 0.0
    return_on_equity: float = 0.0
    fiscal_period: str | None = None
    source_ref: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class NewsItem:
    """A news headline with an optional sentiment hint (positive/negative/neutral)."""

    headline: str
    published_at: datetime
    summary: str | None = None
    sentiment_hint: str | None = None
    url: str | None = None
    source: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["published_at"] = _iso(self.published_at)
        return data


@dataclass(frozen=True)
class RiskItem:
    """A known risk factor. Severity is low/medium/high/critical or free text."""

    title: str
    description: str
    severity: str | None = None
    category: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


# ============================================================================
# REPORT
# ============================================================================


@dataclass(frozen=True)
class Insight:
    type: str
    detail: str
    impact: float | None = None

    def __post_init__(self) -> None:
        if self.impact is not None and not -1.0 <= self.impact <= 1.0:
            raise ValueError(f"Invalid impact {self.impact}. Must be within [-1, 1]")

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class SourceRef:
    type: str
    ref: str
    notes: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class ScoreBreakdown:
    """
    Explainable decomposition of the composite score.

    Component scores are on a 0-100 scale. The sentiment component is the
    raw [-1, 1] sentiment mapped onto 0-100.
    """

    financial_score: float
    sentiment_score: float
    market_score: float
    composite_score: float
    financial_weight: float
    sentiment_weight: float
    market_weight: float

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class Report:
    """Final investment report. Produced once per successful job."""

    company: str
    thesis: str
    signal: Signal
    insights: tuple[Insight, ...]
    sources: tuple[SourceRef, ...]
    confidence: float
    score_breakdown: ScoreBreakdown
    generated_at: datetime
    limitations: tuple[str, ...] | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "company": self.company,
            "thesis": self.thesis,
            "signal": str(self.signal),
            "insights": [i.to_dict() for i in self.insights],
            "sources": [s.to_dict() for s in self.sources],
            "confidence": self.confidence,
            "limitations": list(self.limitations) if self.limitations is not None else None,
            "score_breakdown": self.score_breakdown.to_dict(),
            "generated_at": _iso(self.generated_at),
        }


# ============================================================================
# JOBS
# ============================================================================


@dataclass(frozen=True)
class WorkItem:
    """Unit carried by the work queue. Consumed exactly once."""

    job_id: str
    ticker: str


@dataclass(frozen=True)
class StepResult:
    """
    Sealed record of one pipeline step.

    `artifacts` is the JSON-safe observability view. `output` carries the
    step's typed output (see stock_research.agent.outputs) for the next step;
    it is None when the step failed and is never serialized.
    """

    step_name: str
    status: StepStatus
    started_at: datetime
    summary: str
    finished_at: datetime | None = None
    artifacts: Mapping[str, Any] = field(default_factory=dict)
    output: Any = field(default=None, compare=False, repr=False)

    def __post_init__(self) -> None:
        # Freeze the artifact mapping along with the record
        object.__setattr__(self, "artifacts", MappingProxyType(dict(self.artifacts)))

    def to_dict(self, include_artifacts: bool = True) -> dict[str, Any]:
        data: dict[str, Any] = {
            "step_name": self.step_name,
            "status": str(self.status),
            "started_at": _iso(self.started_at),
            "finished_at": _iso(self.finished_at),
            "summary": self.summary,
        }
        if include_artifacts:
            data["artifacts"] = dict(self.artifacts)
        return data


@dataclass(frozen=True)
class Job:
    """Read-only snapshot of an analysis job as held by the job store."""

    id: str
    ticker: str
    status: JobStatus
    created_at: datetime
    started_at: datetime | None = None
    finished_at: datetime | None = None
    error: str | None = None
    steps: tuple[StepResult, ...] = ()
    result: Report | None = None

    @property
    def step_count(self) -> int:
        return len(self.steps)

    @property
    def has_result(self) -> bool:
        return self.result is not None

    def to_dict(self) -> dict[str, Any]:
        """Job metadata (no steps, no report)."""
        return {
            "job_id": self.id,
            "ticker": self.ticker,
            "status": str(self.status),
            "created_at": _iso(self.created_at),
            "started_at": _iso(self.started_at),
            "finished_at": _iso(self.finished_at),
            "error": self.error,
            "step_count": self.step_count,
            "has_result": self.has_result,
        }
