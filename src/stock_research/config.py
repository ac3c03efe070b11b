"""Runtime configuration and scoring weights."""

import math
import os
from dataclasses import dataclass

_TRUTHY = {"1", "true", "yes", "on"}
_FALSY = {"0", "false", "no", "off"}

QUEUE_CAPACITY_RANGE = (1, 10000)
MAX_CONCURRENT_JOBS_RANGE = (1, 100)


@dataclass(frozen=True)
class ScoringWeights:
    """Immutable weights for the composite score. Must sum to 1.0."""

    financial: float = 0.40
    sentiment: float = 0.30
    market: float = 0.30

    def __post_init__(self) -> None:
        for name in ("financial", "sentiment", "market"):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                raise ValueError(f"Invalid {name} weight {value}. Must be within [0, 1]")

        total = self.financial + self.sentiment + self.market
        if not math.isclose(total, 1.0, abs_tol=1e-9):
            raise ValueError(f"Scoring weights must sum to 1.0, got {total}")


DEFAULT_WEIGHTS = ScoringWeights()


@dataclass(frozen=True)
class Settings:
    """Immutable service settings. Use `Settings.from_env()` at startup."""

    queue_capacity: int = 100
    enqueue_timeout_seconds: float = 5.0
    max_concurrent_jobs: int = 1
    default_ticker: str = "NVDA"
    verbose_step_artifacts: bool = True
    provider_latency_seconds: float = 0.0

    def __post_init__(self) -> None:
        # Normalize default ticker: uppercase, strip whitespace
        object.__setattr__(self, "default_ticker", self.default_ticker.upper().strip())

        low, high = QUEUE_CAPACITY_RANGE
        if not low <= self.queue_capacity <= high:
            raise ValueError(
                f"Invalid QUEUE_CAPACITY {self.queue_capacity}. Must be between {low} and {high}"
            )

        low, high = MAX_CONCURRENT_JOBS_RANGE
        if not low <= self.max_concurrent_jobs <= high:
            raise ValueError(
                f"Invalid MAX_CONCURRENT_JOBS {self.max_concurrent_jobs}. "
                f"Must be between {low} and {high}"
            )

        if self.enqueue_timeout_seconds <= 0:
            raise ValueError(
                f"Invalid ENQUEUE_TIMEOUT_SECONDS {self.enqueue_timeout_seconds}. Must be positive"
            )

        if self.provider_latency_seconds < 0:
            raise ValueError(
                f"Invalid PROVIDER_LATENCY_SECONDS {self.provider_latency_seconds}. "
                "Must not be negative"
            )

        if not self.default_ticker:
            raise ValueError("DEFAULT_TICKER cannot be empty")

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> "Settings":
        """
        Build settings from environment variables.

        Args:
            environ: Mapping to read from (default: os.environ)

        Returns:
            Validated Settings

        Raises:
            ValueError: If a variable is malformed or out of range
        """
        env = os.environ if environ is None else environ
        return cls(
            queue_capacity=int(env.get("QUEUE_CAPACITY", "100")),
            enqueue_timeout_seconds=float(env.get("ENQUEUE_TIMEOUT_SECONDS", "5.0")),
            max_concurrent_jobs=int(env.get("MAX_CONCURRENT_JOBS", "1")),
            default_ticker=env.get("DEFAULT_TICKER", "NVDA"),
            verbose_step_artifacts=_parse_bool(
                "VERBOSE_STEP_ARTIFACTS", env.get("VERBOSE_STEP_ARTIFACTS", "true")
            ),
            provider_latency_seconds=float(env.get("PROVIDER_LATENCY_SECONDS", "0.0")),
        )


def _parse_bool(name: str, raw: str) -> bool:
    value = raw.strip().lower()
    if value in _TRUTHY:
        return True
    if value in _FALSY:
        return False
    raise ValueError(f"Invalid {name} '{raw}'. Must be one of: {sorted(_TRUTHY | _FALSY)}")
