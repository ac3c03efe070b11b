"""
Typed outputs for each pipeline step.

Each step hands its successor one of these frozen records instead of an
open dictionary. `to_artifacts()` derives the JSON-safe view exposed in the
step trace.
"""

from dataclasses import dataclass, field
from typing import Any

from stock_research.models import (
    FinancialSnapshot,
    Insight,
    NewsItem,
    Report,
    RiskItem,
    ScoreBreakdown,
    Signal,
)


@dataclass(frozen=True)
class PlanningOutput:
    ticker: str
    planned_steps: tuple[str, ...]
    required_tools: tuple[str, ...]
    key_metrics: tuple[str, ...]
    focus_areas: tuple[str, ...]

    def to_artifacts(self) -> dict[str, Any]:
        return {
            "ticker": self.ticker,
            "planned_steps": list(self.planned_steps),
            "required_tools": list(self.required_tools),
            "key_metrics": list(self.key_metrics),
            "focus_areas": list(self.focus_areas),
        }


@dataclass(frozen=True)
class GatheringOutput:
    """Everything the providers returned, plus warnings and completeness."""

    financial_data: FinancialSnapshot | None
    news_items: tuple[NewsItem, ...]
    risks: tuple[RiskItem, ...]
    sources_accessed: tuple[str, ...]
    data_warnings: tuple[str, ...]
    data_completeness: float
    provenance: tuple[dict[str, Any], ...] = field(default=(), compare=False)

    @property
    def has_financial_data(self) -> bool:
        return self.financial_data is not None

    def to_artifacts(self) -> dict[str, Any]:
        return {
            "financial_snapshot": self.financial_data.to_dict() if self.financial_data else None,
            "news_count": len(self.news_items),
            "risk_count": len(self.risks),
            "data_warnings": list(self.data_warnings),
            "sources": list(self.sources_accessed),
            "data_completeness": self.data_completeness,
            "provenance": [dict(p) for p in self.provenance],
        }


@dataclass(frozen=True)
class ScoringOutput:
    score_breakdown: ScoreBreakdown
    preliminary_signal: Signal
    preliminary_confidence: float
    thesis: str
    insights: tuple[Insight, ...]
    sentiment_score: float
    sentiment_category: str
    positive_news: int
    negative_news: int
    neutral_news: int
    high_severity_risks: int
    data_completeness: float

    def to_artifacts(self) -> dict[str, Any]:
        return {
            "score_breakdown": self.score_breakdown.to_dict(),
            "composite_score": self.score_breakdown.composite_score,
            "preliminary_signal": str(self.preliminary_signal),
            "preliminary_confidence": self.preliminary_confidence,
            "sentiment_analysis": {
                "score": self.sentiment_score,
                "category": self.sentiment_category,
                "positive": self.positive_news,
                "negative": self.negative_news,
                "neutral": self.neutral_news,
            },
            "high_severity_risks": self.high_severity_risks,
            "data_completeness": self.data_completeness,
            "insight_count": len(self.insights),
        }


@dataclass(frozen=True)
class ReflectionOutput:
    report: Report
    final_signal: Signal
    final_confidence: float
    adjustments_applied: int
    limitations_count: int
    confidence_adjustment: float
    rules: dict[str, bool | None] = field(default_factory=dict, compare=False)

    def to_artifacts(self) -> dict[str, Any]:
        return {
            "final_signal": str(self.final_signal),
            "final_confidence": self.final_confidence,
            "adjustments_applied": self.adjustments_applied,
            "limitations_count": self.limitations_count,
            "confidence_adjustment": self.confidence_adjustment,
            "rules": dict(self.rules),
        }


StepOutput = PlanningOutput | GatheringOutput | ScoringOutput | ReflectionOutput
