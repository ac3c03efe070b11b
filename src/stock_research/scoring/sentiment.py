"""Recency-weighted news sentiment aggregation."""

from collections.abc import Sequence
from datetime import datetime

import numpy as np

from stock_research.models import NewsItem
from stock_research.utils.clock import age_in_days, utc_now

SENTIMENT_HINT_SCORES = {
    "positive": 1.0,
    "negative": -1.0,
    "neutral": 0.0,
}

# (max age in days, exclusive) -> weight; anything older gets the floor weight
RECENCY_WEIGHTS: tuple[tuple[float, float], ...] = (
    (3.0, 1.0),
    (7.0, 0.8),
    (14.0, 0.6),
    (30.0, 0.4),
)
RECENCY_FLOOR_WEIGHT = 0.2

# Lower bound (inclusive) -> category, checked top down
SENTIMENT_CATEGORIES: tuple[tuple[float, str], ...] = (
    (0.6, "Very Positive"),
    (0.2, "Positive"),
    (-0.2, "Neutral"),
    (-0.6, "Negative"),
)
SENTIMENT_CATEGORY_FLOOR = "Very Negative"


def parse_sentiment_hint(hint: str | None) -> float:
    """Map a provider sentiment hint to +1/-1/0. Unknown or missing hints are neutral."""
    if hint is None or not hint.strip():
        return 0.0
    return SENTIMENT_HINT_SCORES.get(hint.strip().lower(), 0.0)


def recency_weight(published_at: datetime, now: datetime | None = None) -> float:
    """Weight for an article by age. Future-dated articles count as brand new."""
    days_old = age_in_days(published_at, now)
    for max_age, weight in RECENCY_WEIGHTS:
        if days_old < max_age:
            return weight
    return RECENCY_FLOOR_WEIGHT


def analyze_sentiment(news_items: Sequence[NewsItem], now: datetime | None = None) -> float:
    """
    Aggregate sentiment across articles, weighting recent news higher.

    score = sum(sentiment * weight) / sum(weight)

    Args:
        news_items: Articles to score
        now: Reference time for article age (default: current UTC time)

    Returns:
        Sentiment in [-1.0, 1.0]; 0.0 when there are no articles
    """
    if not news_items:
        return 0.0

    reference = now if now is not None else utc_now()
    scores = np.array([parse_sentiment_hint(item.sentiment_hint) for item in news_items])
    weights = np.array([recency_weight(item.published_at, reference) for item in news_items])

    total_weight = float(weights.sum())
    if total_weight <= 0:
        return 0.0
    return float(np.dot(scores, weights) / total_weight)


def categorize_sentiment(score: float) -> str:
    """Describe a [-1, 1] sentiment score as a category label."""
    for lower_bound, label in SENTIMENT_CATEGORIES:
        if score >= lower_bound:
            return label
    return SENTIMENT_CATEGORY_FLOOR


def count_sentiments(news_items: Sequence[NewsItem]) -> dict[str, int]:
    """Count articles by hint. Anything not positive/negative counts as neutral."""
    counts = {"positive": 0, "negative": 0, "neutral": 0}
    for item in news_items:
        hint = (item.sentiment_hint or "").strip().lower()
        if hint in ("positive", "negative"):
            counts[hint] += 1
        else:
            counts["neutral"] += 1
    return counts
