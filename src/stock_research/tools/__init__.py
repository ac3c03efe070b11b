"""MCP tool implementations."""

from stock_research.tools.analysis import (
    get_analysis_job,
    get_analysis_result,
    get_analysis_steps,
    submit_analysis,
)
from stock_research.tools.health import health

__all__ = [
    "submit_analysis",
    "get_analysis_job",
    "get_analysis_steps",
    "get_analysis_result",
    "health",
]
