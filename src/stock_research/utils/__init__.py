"""Utility modules."""

from stock_research.utils.clock import age_in_days, ensure_utc, utc_now
from stock_research.utils.provenance import (
    ErrorType,
    build_error_response,
    build_meta,
    build_provenance,
)
from stock_research.utils.sanitize import sanitize_text, truncate
from stock_research.utils.validators import check_rule, is_valid_job_id, normalize_ticker

__all__ = [
    "age_in_days",
    "ensure_utc",
    "utc_now",
    "ErrorType",
    "build_error_response",
    "build_meta",
    "build_provenance",
    "sanitize_text",
    "truncate",
    "check_rule",
    "is_valid_job_id",
    "normalize_ticker",
]
