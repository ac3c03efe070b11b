"""Analysis pipeline."""

from stock_research.agent.orchestrator import (
    GATHERING,
    PLANNING,
    REFLECTION,
    SCORING,
    AnalysisOrchestrator,
)
from stock_research.agent.outputs import (
    GatheringOutput,
    PlanningOutput,
    ReflectionOutput,
    ScoringOutput,
    StepOutput,
)

__all__ = [
    "AnalysisOrchestrator",
    "PLANNING",
    "GATHERING",
    "SCORING",
    "REFLECTION",
    "PlanningOutput",
    "GatheringOutput",
    "ScoringOutput",
    "ReflectionOutput",
    "StepOutput",
]
