"""Response metadata, data provenance, and tool error responses."""

from collections.abc import Iterable
from datetime import datetime
from enum import StrEnum
from typing import Any

from stock_research import SCHEMA_VERSION, SERVER_VERSION


class ErrorType(StrEnum):
    """Error categories a tool response can carry."""

    VALIDATION_ERROR = "validation_error"
    QUEUE_FULL = "queue_full"
    INVALID_JOB_ID = "invalid_job_id"
    NOT_FOUND = "not_found"
    JOB_PENDING = "job_pending"
    JOB_FAILED = "job_failed"
    RESULT_MISSING = "result_missing"

    @property
    def retryable(self) -> bool:
        """Whether the same call can succeed later without changing its arguments."""
        return self in (ErrorType.QUEUE_FULL, ErrorType.JOB_PENDING)


def build_meta(tool: str, duration_ms: float | None = None) -> dict[str, Any]:
    """
    Build standard metadata block for responses.

    Args:
        tool: Name of the tool producing this response
        duration_ms: Execution time in milliseconds (optional)
    """
    meta: dict[str, Any] = {
        "server_version": SERVER_VERSION,
        "schema_version": SCHEMA_VERSION,
        "tool": tool,
    }
    if duration_ms is not None:
        meta["duration_ms"] = round(duration_ms, 1)
    return meta


def build_provenance(
    source: str,
    as_of: datetime | None = None,
    warnings: Iterable[str] = (),
    **fields: Any,
) -> dict[str, Any]:
    """Provenance entry for one provider call: source, retrieval time, warnings, extra counts."""
    return {
        "source": source,
        "as_of": as_of.isoformat() if as_of is not None else None,
        "warnings": list(warnings),
        **fields,
    }


def build_error_response(
    error_type: ErrorType,
    message: str,
    tool: str = "error",
    **fields: Any,
) -> dict[str, Any]:
    """
    Build a tool error response.

    Fields whose value is None are left out, so callers can pass optional
    context (job id, timestamps) unconditionally. `retryable` is derived
    from the error type.

    Args:
        error_type: Error category
        message: Human-readable error message
        tool: Tool that produced the error
        **fields: Context such as job_id, status, retry_after_seconds

    Raises:
        ValueError: If error_type is not a known ErrorType value
    """
    kind = ErrorType(error_type)
    response: dict[str, Any] = {
        "error": True,
        "error_type": str(kind),
        "retryable": kind.retryable,
        "message": message,
        "meta": build_meta(tool),
    }
    response.update((key, value) for key, value in fields.items() if value is not None)
    return response
