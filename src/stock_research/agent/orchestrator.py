"""
Four-step analysis pipeline: Planning, Data Gathering, Scoring and Synthesis,
Reflection and Finalization.

Each step is sealed into a StepResult as soon as it finishes and handed to
the `on_step` callback, so callers can persist progress incrementally.
"""

import logging
import operator
from collections.abc import Awaitable, Callable
from dataclasses import replace
from datetime import datetime

from stock_research.agent.outputs import (
    GatheringOutput,
    PlanningOutput,
    ReflectionOutput,
    ScoringOutput,
    StepOutput,
)
from stock_research.config import DEFAULT_WEIGHTS, ScoringWeights
from stock_research.data.providers import (
    FinancialDataProvider,
    NewsProvider,
    RiskProvider,
    call_provider,
)
from stock_research.errors import MissingStepOutputError
from stock_research.models import (
    FinancialSnapshot,
    Insight,
    NewsItem,
    Report,
    RiskItem,
    Signal,
    SourceRef,
    StepResult,
    StepStatus,
)
from stock_research.scoring import (
    analyze_sentiment,
    calculate_confidence,
    calculate_scores,
    categorize_sentiment,
    count_high_severity,
    count_sentiments,
    generate_insights,
    generate_signal,
    generate_thesis,
)
from stock_research.utils.clock import utc_now
from stock_research.utils.provenance import build_provenance
from stock_research.utils.sanitize import sanitize_text
from stock_research.utils.validators import check_rule

logger = logging.getLogger(__name__)

PLANNING = "Planning"
GATHERING = "Data Gathering"
SCORING = "Scoring and Synthesis"
REFLECTION = "Reflection and Finalization"

PLANNED_STEPS = (
    "Data Gathering - Collect financial, news, and risk data",
    "Scoring - Calculate component and composite scores",
    "Synthesis - Generate thesis and insights",
    "Reflection - Validate data quality and adjust confidence",
)
REQUIRED_TOOLS = (
    "FinancialDataProvider - Financial statements and metrics",
    "NewsProvider - Recent news and sentiment",
    "RiskProvider - Risk factors and severity assessment",
)
KEY_METRICS = (
    "Revenue growth YoY",
    "Profit margins",
    "Return on Equity",
    "News sentiment score",
    "Risk severity distribution",
    "Data completeness",
)
FOCUS_AREAS = (
    "Financial performance and growth trajectory",
    "Market sentiment and public perception",
    "Risk factors and competitive positioning",
    "Valuation considerations",
)

# Data completeness contribution per source
FINANCIAL_COMPLETENESS = 0.4
NEWS_COMPLETENESS = 0.3
RISK_COMPLETENESS = 0.3

# Reflection rules
WARNING_CONFIDENCE_FACTOR = 0.9
CONFLICT_THRESHOLD = 30.0
CONFLICT_CONFIDENCE_FACTOR = 0.85
FORCE_NEUTRAL_CONFIDENCE = 0.45

SOURCE_TYPES = (
    ("financials", "financial"),
    ("news", "news"),
    ("risks", "risk"),
)

StepCallback = Callable[[StepResult], None]


def classify_source(ref: str) -> str:
    """Type a source reference by substring: financial, news, risk, or unknown."""
    for marker, source_type in SOURCE_TYPES:
        if marker in ref:
            return source_type
    return "unknown"


def _sanitize_snapshot(snapshot: FinancialSnapshot) -> FinancialSnapshot:
    return replace(snapshot, company_name=sanitize_text(snapshot.company_name) or "")


def _sanitize_news(item: NewsItem) -> NewsItem:
    return replace(
        item,
        headline=sanitize_text(item.headline) or "",
        summary=sanitize_text(item.summary),
    )


def _sanitize_risk(item: RiskItem) -> RiskItem:
    return replace(
        item,
        title=sanitize_text(item.title) or "",
        description=sanitize_text(item.description) or "",
    )


class AnalysisOrchestrator:
    """
    Runs the deterministic analysis pipeline for one ticker.

    Args:
        financial_provider: Source of the financial snapshot
        news_provider: Source of recent headlines
        risk_provider: Source of known risks
        weights: Composite score weights
        clock: Returns the current UTC time (injectable for tests)
    """

    def __init__(
        self,
        financial_provider: FinancialDataProvider,
        news_provider: NewsProvider,
        risk_provider: RiskProvider,
        weights: ScoringWeights = DEFAULT_WEIGHTS,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.financial_provider = financial_provider
        self.news_provider = news_provider
        self.risk_provider = risk_provider
        self.weights = weights
        self._clock = clock

    async def execute(
        self,
        ticker: str,
        on_step: StepCallback | None = None,
    ) -> tuple[Report, list[StepResult]]:
        """
        Run all four steps and return the final report with the step trace.

        Raises:
            MissingStepOutputError: If a step failed and the next step cannot run
            asyncio.CancelledError: If the surrounding task is cancelled
        """
        steps: list[StepResult] = []

        def record(step: StepResult) -> None:
            steps.append(step)
            logger.debug(f"{ticker}: step '{step.step_name}' {step.status}: {step.summary}")
            if on_step is not None:
                on_step(step)

        # Planning is descriptive only and does not gate later steps
        record(await self._run_step(PLANNING, lambda: self._plan(ticker)))

        gathering_step = await self._run_step(GATHERING, lambda: self._gather(ticker))
        record(gathering_step)
        gathering = self._expect(gathering_step, GatheringOutput)

        scoring_step = await self._run_step(SCORING, lambda: self._score(ticker, gathering))
        record(scoring_step)
        scoring = self._expect(scoring_step, ScoringOutput)

        reflection_step = await self._run_step(
            REFLECTION, lambda: self._reflect(ticker, gathering, scoring)
        )
        record(reflection_step)
        reflection = self._expect(reflection_step, ReflectionOutput)

        return reflection.report, steps

    async def _run_step(
        self,
        name: str,
        action: Callable[[], Awaitable[tuple[StepOutput, str]]],
    ) -> StepResult:
        started_at = self._clock()
        try:
            output, summary = await action()
        except Exception as e:
            logger.warning(f"{name} step failed: {type(e).__name__}: {e}")
            return StepResult(
                step_name=name,
                status=StepStatus.FAILED,
                started_at=started_at,
                finished_at=self._clock(),
                summary=f"{name} step failed: {e}",
                artifacts={"error": str(e)},
            )

        return StepResult(
            step_name=name,
            status=StepStatus.SUCCEEDED,
            started_at=started_at,
            finished_at=self._clock(),
            summary=summary,
            artifacts=output.to_artifacts(),
            output=output,
        )

    @staticmethod
    def _expect(step: StepResult, output_type: type) -> StepOutput:
        if not isinstance(step.output, output_type):
            raise MissingStepOutputError(step.step_name, step.artifacts.get("error"))
        return step.output

    async def _plan(self, ticker: str) -> tuple[PlanningOutput, str]:
        plan = PlanningOutput(
            ticker=ticker,
            planned_steps=PLANNED_STEPS,
            required_tools=REQUIRED_TOOLS,
            key_metrics=KEY_METRICS,
            focus_areas=FOCUS_AREAS,
        )
        summary = (
            f"Created structured analysis plan for {ticker}. "
            f"Identified {len(plan.required_tools)} data sources and "
            f"{len(plan.key_metrics)} key metrics to evaluate."
        )
        return plan, summary

    async def _gather(self, ticker: str) -> tuple[GatheringOutput, str]:
        sources: list[str] = []
        warnings: list[str] = []
        provenance: list[dict] = []

        financial = await call_provider(
            "Financial data",
            self.financial_provider.source_uri(ticker),
            lambda: self.financial_provider.fetch(ticker),
        )
        snapshot = _sanitize_snapshot(financial.value) if financial.ok else None
        if financial.warning:
            warnings.append(financial.warning)
        elif snapshot is not None and snapshot.source_ref:
            sources.append(snapshot.source_ref)
        provenance.append(build_provenance(
            financial.source,
            as_of=self._clock(),
            warnings=[financial.warning] if financial.warning else [],
        ))

        news = await call_provider(
            "News data",
            self.news_provider.source_uri(ticker),
            lambda: self.news_provider.fetch(ticker),
        )
        news_items = tuple(_sanitize_news(n) for n in news.value or ())
        news_warning = news.warning
        if news_warning is None and not news_items:
            news_warning = "No news items retrieved."
        if news_warning:
            warnings.append(news_warning)
        else:
            sources.append(news.source)
        provenance.append(build_provenance(
            news.source,
            as_of=self._clock(),
            items=len(news_items),
            warnings=[news_warning] if news_warning else [],
        ))

        risk = await call_provider(
            "Risk data",
            self.risk_provider.source_uri(ticker),
            lambda: self.risk_provider.fetch(ticker),
        )
        risks = tuple(_sanitize_risk(r) for r in risk.value or ())
        risk_warning = risk.warning
        if risk_warning is None and not risks:
            risk_warning = "No risk factors identified."
        if risk_warning:
            warnings.append(risk_warning)
        else:
            sources.append(risk.source)
        provenance.append(build_provenance(
            risk.source,
            as_of=self._clock(),
            items=len(risks),
            warnings=[risk_warning] if risk_warning else [],
        ))

        completeness = 0.0
        if snapshot is not None:
            completeness += FINANCIAL_COMPLETENESS
        if news_items:
            completeness += NEWS_COMPLETENESS
        if risks:
            completeness += RISK_COMPLETENESS
        completeness = round(min(completeness, 1.0), 4)

        output = GatheringOutput(
            financial_data=snapshot,
            news_items=news_items,
            risks=risks,
            sources_accessed=tuple(sources),
            data_warnings=tuple(warnings),
            data_completeness=completeness,
            provenance=tuple(provenance),
        )

        summary = (
            f"Gathered data from {len(sources)} sources. "
            f"Financial: {'yes' if output.has_financial_data else 'no'}, "
            f"News: {len(news_items)} items, "
            f"Risks: {len(risks)} factors. "
            f"Data completeness: {completeness:.0%}."
        )
        if warnings:
            summary += f" {len(warnings)} warning(s) recorded."
        return output, summary

    async def _score(self, ticker: str, gathering: GatheringOutput) -> tuple[ScoringOutput, str]:
        sentiment = analyze_sentiment(gathering.news_items, now=self._clock())
        category = categorize_sentiment(sentiment)
        counts = count_sentiments(gathering.news_items)

        scores = calculate_scores(gathering.financial_data, sentiment, gathering.risks, self.weights)
        confidence = calculate_confidence(scores, gathering.data_completeness)
        signal = generate_signal(scores.composite_score, confidence)

        company = self._company_name(ticker, gathering)
        thesis = generate_thesis(ticker, company, scores, signal, confidence)

        high_severity = count_high_severity(gathering.risks)
        insights = generate_insights(scores, sentiment, len(gathering.risks), high_severity)

        output = ScoringOutput(
            score_breakdown=scores,
            preliminary_signal=signal,
            preliminary_confidence=confidence,
            thesis=thesis,
            insights=tuple(insights),
            sentiment_score=sentiment,
            sentiment_category=category,
            positive_news=counts["positive"],
            negative_news=counts["negative"],
            neutral_news=counts["neutral"],
            high_severity_risks=high_severity,
            data_completeness=gathering.data_completeness,
        )
        summary = (
            f"Calculated composite score: {scores.composite_score:.1f}/100. "
            f"Preliminary signal: {signal} (Confidence: {confidence:.0%}). "
            f"Generated {len(insights)} insights and investment thesis."
        )
        return output, summary

    async def _reflect(
        self,
        ticker: str,
        gathering: GatheringOutput,
        scoring: ScoringOutput,
    ) -> tuple[ReflectionOutput, str]:
        limitations: list[str] = []
        adjustments: list[Insight] = []
        confidence = scoring.preliminary_confidence
        signal = scoring.preliminary_signal
        scores = scoring.score_breakdown
        completeness = gathering.data_completeness
        divergence = abs(scores.financial_score - scores.sentiment_score)

        rules = {
            "incomplete_data": check_rule(completeness, 1.0, operator.lt),
            "has_warnings": bool(gathering.data_warnings),
            "conflicting_signals": check_rule(divergence, CONFLICT_THRESHOLD),
        }

        if rules["incomplete_data"]:
            limitations.append(
                f"Data completeness at {completeness:.0%}. "
                "Some data sources were incomplete or unavailable."
            )
            adjustments.append(Insight(
                type="limitation",
                detail="Incomplete data coverage reduces confidence in analysis conclusion.",
                impact=-0.3,
            ))
            confidence *= completeness

        if rules["has_warnings"]:
            limitations.append(f"{len(gathering.data_warnings)} data retrieval warning(s) recorded.")
            confidence *= WARNING_CONFIDENCE_FACTOR

        if rules["conflicting_signals"]:
            limitations.append(
                "Significant variance between financial fundamentals and market sentiment "
                "suggests conflicting signals."
            )
            adjustments.append(Insight(
                type="risk",
                detail=(
                    "Conflicting signals between financial strength and market sentiment "
                    "create uncertainty."
                ),
                impact=-0.4,
            ))
            confidence *= CONFLICT_CONFIDENCE_FACTOR

        rules["low_confidence"] = check_rule(confidence, FORCE_NEUTRAL_CONFIDENCE, operator.lt)
        if rules["low_confidence"] and scoring.preliminary_signal != Signal.NEUTRAL:
            limitations.append("Low confidence due to data quality issues. Adjusting signal to Neutral.")
            signal = Signal.NEUTRAL
            adjustments.append(Insight(
                type="limitation",
                detail="Insufficient confidence to maintain directional bias. Neutral stance recommended.",
                impact=0.0,
            ))

        confidence = max(0.0, min(1.0, confidence))

        report = Report(
            company=self._company_name(ticker, gathering),
            thesis=scoring.thesis or "Analysis incomplete.",
            signal=signal,
            insights=scoring.insights + tuple(adjustments),
            sources=tuple(
                SourceRef(type=classify_source(ref), ref=ref) for ref in gathering.sources_accessed
            ),
            confidence=confidence,
            score_breakdown=scores,
            generated_at=self._clock(),
            limitations=tuple(limitations) if limitations else None,
        )

        output = ReflectionOutput(
            report=report,
            final_signal=signal,
            final_confidence=confidence,
            adjustments_applied=len(adjustments),
            limitations_count=len(limitations),
            confidence_adjustment=confidence - scoring.preliminary_confidence,
            rules=rules,
        )

        adjustment_note = (
            f" Applied {len(adjustments)} reflection adjustment(s)."
            if adjustments
            else " No adjustments needed."
        )
        summary = (
            f"Reflection complete. Final signal: {signal} (Confidence: {confidence:.0%}). "
            f"Data completeness: {completeness:.0%}. "
            f"Limitations: {len(limitations)}.{adjustment_note}"
        )
        return output, summary

    @staticmethod
    def _company_name(ticker: str, gathering: GatheringOutput) -> str:
        if gathering.has_financial_data and gathering.financial_data.company_name:
            return gathering.financial_data.company_name
        return f"{ticker} Corporation"
