"""UTC clock helpers."""

from datetime import datetime

import pytz


def utc_now() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(pytz.utc)


def ensure_utc(value: datetime) -> datetime:
    """
    Coerce a datetime to aware UTC.

    Naive datetimes are assumed to already be in UTC.
    """
    if value.tzinfo is None:
        return pytz.utc.localize(value)
    return value.astimezone(pytz.utc)


def age_in_days(then: datetime, now: datetime | None = None) -> float:
    """Fractional days elapsed between `then` and `now`, floored at 0."""
    reference = ensure_utc(now) if now is not None else utc_now()
    days = (reference - ensure_utc(then)).total_seconds() / 86400.0
    return max(days, 0.0)
