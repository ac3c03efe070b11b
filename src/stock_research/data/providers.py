"""Data provider contracts and the result wrapper used by the gathering step."""

import logging
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from typing import Generic, Protocol, TypeVar

from stock_research.models import FinancialSnapshot, NewsItem, RiskItem

logger = logging.getLogger(__name__)

T = TypeVar("T")


class FinancialDataProvider(Protocol):
    """Source of a structured financial snapshot for a ticker."""

    async def fetch(self, ticker: str) -> FinancialSnapshot: ...

    def source_uri(self, ticker: str) -> str: ...


class NewsProvider(Protocol):
    """Source of recent headlines with sentiment hints for a ticker."""

    async def fetch(self, ticker: str) -> Sequence[NewsItem]: ...

    def source_uri(self, ticker: str) -> str: ...


class RiskProvider(Protocol):
    """Source of known risk factors for a ticker."""

    async def fetch(self, ticker: str) -> Sequence[RiskItem]: ...

    def source_uri(self, ticker: str) -> str: ...


@dataclass(frozen=True)
class ProviderResult(Generic[T]):
    """
    Outcome of one provider call: a value or a warning, never an exception.

    `source` is the reference the data came from; it is kept even when the
    call failed so the report can still cite what was attempted.
    """

    source: str
    value: T | None = None
    warning: str | None = None

    @property
    def ok(self) -> bool:
        return self.warning is None and self.value is not None


async def call_provider(
    label: str,
    source: str,
    fetch: Callable[[], Awaitable[T]],
) -> ProviderResult[T]:
    """
    Await a provider call and convert failures into a warning.

    Cancellation is not caught and propagates to the caller.

    Args:
        label: Human name for warnings (e.g., "Financial data")
        source: Source reference for provenance
        fetch: Zero-argument coroutine factory performing the call

    Returns:
        ProviderResult with either the value or a "<label> retrieval failed" warning
    """
    try:
        value = await fetch()
    except Exception as e:
        logger.warning(f"{label} retrieval failed for {source}: {e}")
        return ProviderResult(source=source, warning=f"{label} retrieval failed: {e}")
    return ProviderResult(source=source, value=value)
