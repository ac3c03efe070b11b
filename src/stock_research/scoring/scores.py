"""
Deterministic scoring rules: financial health, risk, composite, and confidence.

All component scores are on a 0-100 scale. Thresholds are kept as module
constants so the rules are readable in one place.
"""

from collections.abc import Sequence

import numpy as np

from stock_research.config import DEFAULT_WEIGHTS, ScoringWeights
from stock_research.models import FinancialSnapshot, RiskItem, ScoreBreakdown

NEUTRAL_FINANCIAL_SCORE = 50.0
NO_RISKS_SCORE = 75.0
RISK_BASE_SCORE = 100.0

# (exclusive lower bound, points); first match wins, else the fallback applies
REVENUE_GROWTH_TIERS = ((50.0, 25.0), (20.0, 20.0), (10.0, 15.0), (5.0, 10.0), (0.0, 5.0))
REVENUE_GROWTH_FALLBACK = -10.0
PROFIT_MARGIN_TIERS = ((40.0, 15.0), (30.0, 12.0), (20.0, 10.0), (10.0, 5.0), (0.0, 2.0))
PROFIT_MARGIN_FALLBACK = -10.0
ROE_TIERS = ((50.0, 10.0), (30.0, 8.0), (20.0, 6.0), (15.0, 4.0), (10.0, 2.0))
ROE_FALLBACK = 0.0

RISK_DEDUCTIONS = {
    "critical": 20.0,
    "high": 12.0,
    "medium": 6.0,
    "low": 2.0,
}
UNKNOWN_RISK_DEDUCTION = 4.0
HIGH_SEVERITIES = ("high", "critical")

BASE_CONFIDENCE = 0.70
HIGH_DISPERSION = 30.0
HIGH_DISPERSION_FACTOR = 0.85
MODERATE_DISPERSION = 20.0
MODERATE_DISPERSION_FACTOR = 0.92
EXTREME_COMPOSITE_HIGH = 75.0
EXTREME_COMPOSITE_LOW = 30.0
EXTREME_COMPOSITE_FACTOR = 1.05


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def _tier_points(value: float, tiers: tuple[tuple[float, float], ...], fallback: float) -> float:
    for lower_bound, points in tiers:
        if value > lower_bound:
            return points
    return fallback


def normalize_sentiment(sentiment: float) -> float:
    """Map a [-1, 1] sentiment onto the 0-100 component scale."""
    return (sentiment + 1.0) * 50.0


def calculate_financial_score(snapshot: FinancialSnapshot | None) -> float:
    """
    Score financial health from growth, margin, and return on equity.

    Starts neutral at 50. Revenue growth adds up to +25, profit margin up
    to +15, ROE up to +10. Negative growth or margin costs 10 points each.

    Args:
        snapshot: Financial data, or None when unavailable

    Returns:
        Score in [0, 100]; 50 when no data is available
    """
    if snapshot is None:
        return NEUTRAL_FINANCIAL_SCORE

    score = NEUTRAL_FINANCIAL_SCORE
    score += _tier_points(snapshot.revenue_growth_yoy, REVENUE_GROWTH_TIERS, REVENUE_GROWTH_FALLBACK)
    score += _tier_points(snapshot.profit_margin, PROFIT_MARGIN_TIERS, PROFIT_MARGIN_FALLBACK)
    score += _tier_points(snapshot.return_on_equity, ROE_TIERS, ROE_FALLBACK)
    return _clamp(score, 0.0, 100.0)


def risk_deduction(severity: str | None) -> float:
    """Points deducted for one risk item, by case-insensitive severity."""
    key = (severity or "").strip().lower()
    return RISK_DEDUCTIONS.get(key, UNKNOWN_RISK_DEDUCTION)


def calculate_risk_score(risks: Sequence[RiskItem]) -> float:
    """
    Score the risk profile. Higher means lower risk.

    No identified risks scores 75. Otherwise start at 100 and deduct per item
    by severity.
    """
    if not risks:
        return NO_RISKS_SCORE

    score = RISK_BASE_SCORE - sum(risk_deduction(r.severity) for r in risks)
    return _clamp(score, 0.0, 100.0)


def count_high_severity(risks: Sequence[RiskItem]) -> int:
    return sum(1 for r in risks if (r.severity or "").strip().lower() in HIGH_SEVERITIES)


def calculate_scores(
    snapshot: FinancialSnapshot | None,
    sentiment: float,
    risks: Sequence[RiskItem],
    weights: ScoringWeights = DEFAULT_WEIGHTS,
) -> ScoreBreakdown:
    """
    Build the full score breakdown for one ticker.

    The market component is the risk score.

    Args:
        snapshot: Financial data (None when retrieval failed)
        sentiment: Aggregated news sentiment in [-1, 1]
        risks: Identified risk factors
        weights: Component weights (sum to 1.0)

    Returns:
        ScoreBreakdown with component scores, composite, and weights
    """
    financial_score = calculate_financial_score(snapshot)
    sentiment_score = normalize_sentiment(sentiment)
    market_score = calculate_risk_score(risks)

    composite = (
        financial_score * weights.financial
        + sentiment_score * weights.sentiment
        + market_score * weights.market
    )

    return ScoreBreakdown(
        financial_score=financial_score,
        sentiment_score=sentiment_score,
        market_score=market_score,
        composite_score=composite,
        financial_weight=weights.financial,
        sentiment_weight=weights.sentiment,
        market_weight=weights.market,
    )


def score_dispersion(scores: ScoreBreakdown) -> float:
    """Population standard deviation of the three component scores."""
    components = np.array([scores.financial_score, scores.sentiment_score, scores.market_score])
    return float(np.std(components))


def calculate_confidence(scores: ScoreBreakdown, data_completeness: float) -> float:
    """
    Initial confidence from data completeness and score agreement.

    Starts at 0.70 scaled by completeness. Disagreeing components reduce it,
    extreme composites raise it slightly.

    Returns:
        Confidence in [0, 1]
    """
    confidence = BASE_CONFIDENCE * data_completeness

    dispersion = score_dispersion(scores)
    if dispersion > HIGH_DISPERSION:
        confidence *= HIGH_DISPERSION_FACTOR
    elif dispersion > MODERATE_DISPERSION:
        confidence *= MODERATE_DISPERSION_FACTOR

    if scores.composite_score > EXTREME_COMPOSITE_HIGH or scores.composite_score < EXTREME_COMPOSITE_LOW:
        confidence *= EXTREME_COMPOSITE_FACTOR

    return _clamp(confidence, 0.0, 1.0)
