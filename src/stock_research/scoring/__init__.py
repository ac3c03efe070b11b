"""Pure scoring kernel: sentiment, component scores, signals, and insights."""

from stock_research.scoring.scores import (
    calculate_confidence,
    calculate_financial_score,
    calculate_risk_score,
    calculate_scores,
    count_high_severity,
    normalize_sentiment,
    score_dispersion,
)
from stock_research.scoring.sentiment import (
    analyze_sentiment,
    categorize_sentiment,
    count_sentiments,
    recency_weight,
)
from stock_research.scoring.signals import generate_insights, generate_signal, generate_thesis

__all__ = [
    "analyze_sentiment",
    "categorize_sentiment",
    "count_sentiments",
    "recency_weight",
    "calculate_confidence",
    "calculate_financial_score",
    "calculate_risk_score",
    "calculate_scores",
    "count_high_severity",
    "normalize_sentiment",
    "score_dispersion",
    "generate_insights",
    "generate_signal",
    "generate_thesis",
]
