"""Validation utilities for submitted tickers and job ids."""

import operator
import re
import uuid
from collections.abc import Callable

from stock_research.errors import TickerValidationError

TICKER_MIN_LENGTH = 1
TICKER_MAX_LENGTH = 10
TICKER_PATTERN = re.compile(r"^[A-Z0-9.\-]+$")


def normalize_ticker(raw: str | None) -> str:
    """
    Normalize and validate a ticker symbol.

    Trims whitespace and uppercases, then checks length and character set.

    Args:
        raw: Ticker as submitted by the client

    Returns:
        Normalized ticker (e.g., " nvda " -> "NVDA")

    Raises:
        TickerValidationError: If the ticker is empty, too long, or malformed
    """
    if raw is None or not raw.strip():
        raise TickerValidationError("Ticker cannot be empty or whitespace.")

    ticker = raw.strip().upper()

    if not TICKER_MIN_LENGTH <= len(ticker) <= TICKER_MAX_LENGTH:
        raise TickerValidationError(
            f"Ticker must be between {TICKER_MIN_LENGTH} and {TICKER_MAX_LENGTH} characters."
        )

    if not TICKER_PATTERN.match(ticker):
        raise TickerValidationError(
            "Ticker contains invalid characters. Only alphanumeric, dots, and hyphens allowed."
        )

    return ticker


def is_valid_job_id(value: str) -> bool:
    """Check that a job id is a canonical UUID string."""
    try:
        return str(uuid.UUID(value)) == value.lower()
    except (ValueError, AttributeError, TypeError):
        return False


def check_rule(
    value: float | None,
    threshold: float,
    comparator: Callable[[float, float], bool] = operator.gt,
) -> bool | None:
    """
    Check a rule with nullable boolean semantics.

    If value is None, returns None (not False).

    Args:
        value: The value to check (may be None)
        threshold: The threshold to compare against
        comparator: Comparison function (default: operator.gt)

    Returns:
        True/False if value is not None, None otherwise
    """
    if value is None:
        return None
    return comparator(value, threshold)
