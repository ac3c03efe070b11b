"""Signal derivation, thesis text, and rule-based insights."""

from stock_research.models import Insight, ScoreBreakdown, Signal

MIN_SIGNAL_CONFIDENCE = 0.40
BULLISH_THRESHOLD = 65.0
NEUTRAL_THRESHOLD = 45.0

# Thesis rationale thresholds (component scores, 0-100)
STRONG_COMPONENT = {"financial": 70.0, "sentiment": 60.0, "market": 65.0}
WEAK_COMPONENT = 40.0
LOW_CONVICTION_CONFIDENCE = 0.60

# Insight thresholds
STRONG_FINANCIAL = 75.0
WEAK_FINANCIAL = 35.0
POSITIVE_SENTIMENT = 0.5
NEGATIVE_SENTIMENT = -0.3
MANY_HIGH_SEVERITY_RISKS = 3
MANY_RISKS = 5
FEW_RISKS = 2
HIGH_COMPOSITE = 80.0


def generate_signal(composite_score: float, confidence: float) -> Signal:
    """
    Derive the investment signal.

    Confidence below 0.40 is always Neutral. Otherwise composite >= 65 is
    Bullish, >= 45 Neutral, anything lower Bearish.
    """
    if confidence < MIN_SIGNAL_CONFIDENCE:
        return Signal.NEUTRAL
    if composite_score >= BULLISH_THRESHOLD:
        return Signal.BULLISH
    if composite_score >= NEUTRAL_THRESHOLD:
        return Signal.NEUTRAL
    return Signal.BEARISH


def _rationale(company: str, scores: ScoreBreakdown, signal: Signal, confidence: float) -> list[str]:
    lines = ["Investment Rationale:"]

    if signal == Signal.BULLISH:
        lines.append(f"The analysis indicates a favorable investment opportunity for {company}.")
        if scores.financial_score > STRONG_COMPONENT["financial"]:
            lines.append("Strong financial fundamentals support growth prospects.")
        if scores.sentiment_score > STRONG_COMPONENT["sentiment"]:
            lines.append("Positive market sentiment and news flow reinforce the bullish outlook.")
        if scores.market_score > STRONG_COMPONENT["market"]:
            lines.append("Risk profile is manageable relative to potential upside.")
    elif signal == Signal.BEARISH:
        lines.append(f"The analysis suggests caution regarding {company}.")
        if scores.financial_score < WEAK_COMPONENT:
            lines.append("Financial fundamentals show concerning trends.")
        if scores.sentiment_score < WEAK_COMPONENT:
            lines.append("Negative market sentiment and news flow indicate headwinds.")
        if scores.market_score < WEAK_COMPONENT:
            lines.append("Risk factors present significant challenges.")
    else:
        lines.append(f"The analysis indicates a balanced outlook for {company}.")
        lines.append("Mixed signals suggest a wait-and-see approach may be prudent.")
        if confidence < LOW_CONVICTION_CONFIDENCE:
            lines.append(
                "Limited data or conflicting indicators reduce conviction in either direction."
            )

    return lines


def generate_thesis(
    ticker: str,
    company: str,
    scores: ScoreBreakdown,
    signal: Signal,
    confidence: float,
) -> str:
    """
    Build the multi-line investment thesis.

    Layout: header, signal with confidence, composite score, component
    breakdown with weights, then rationale lines for the signal.
    """
    lines = [
        f"Investment Analysis for {company} ({ticker}):",
        "",
        f"Signal: {signal} (Confidence: {confidence:.0%})",
        f"Composite Score: {scores.composite_score:.1f}/100",
        "",
        "Score Breakdown:",
        f"- Financial Health: {scores.financial_score:.1f}/100 (Weight: {scores.financial_weight:.0%})",
        f"- Market Sentiment: {scores.sentiment_score:.1f}/100 (Weight: {scores.sentiment_weight:.0%})",
        f"- Risk Assessment: {scores.market_score:.1f}/100 (Weight: {scores.market_weight:.0%})",
        "",
    ]
    lines.extend(_rationale(company, scores, signal, confidence))
    return "\n".join(lines).strip()


def generate_insights(
    scores: ScoreBreakdown,
    sentiment: float,
    risk_count: int,
    high_severity_count: int,
) -> list[Insight]:
    """
    Rule-based insights from the score breakdown.

    Args:
        scores: Component and composite scores
        sentiment: Raw sentiment in [-1, 1] (not the 0-100 component)
        risk_count: Number of identified risks
        high_severity_count: Risks with high or critical severity

    Returns:
        Insights in rule order: financial, sentiment, risk, valuation
    """
    insights: list[Insight] = []

    if scores.financial_score > STRONG_FINANCIAL:
        insights.append(Insight(
            type="financial",
            detail="Exceptional financial performance with strong revenue growth and profitability metrics.",
            impact=0.8,
        ))
    elif scores.financial_score < WEAK_FINANCIAL:
        insights.append(Insight(
            type="financial",
            detail="Weak financial fundamentals raise concerns about long-term sustainability.",
            impact=-0.7,
        ))

    if sentiment > POSITIVE_SENTIMENT:
        insights.append(Insight(
            type="sentiment",
            detail="Strong positive sentiment in recent news suggests favorable market perception.",
            impact=0.6,
        ))
    elif sentiment < NEGATIVE_SENTIMENT:
        insights.append(Insight(
            type="sentiment",
            detail="Negative news sentiment indicates market concerns about near-term prospects.",
            impact=-0.5,
        ))

    if high_severity_count >= MANY_HIGH_SEVERITY_RISKS:
        insights.append(Insight(
            type="risk",
            detail=(
                f"Multiple high-severity risks identified ({high_severity_count} critical factors) "
                "require careful monitoring."
            ),
            impact=-0.7,
        ))
    elif risk_count > MANY_RISKS:
        insights.append(Insight(
            type="risk",
            detail=f"Elevated risk count ({risk_count} factors) suggests complex risk profile.",
            impact=-0.4,
        ))
    elif risk_count < FEW_RISKS:
        insights.append(Insight(
            type="risk",
            detail=(
                "Limited identified risks may indicate stable operating environment "
                "or incomplete risk assessment."
            ),
            impact=0.3,
        ))

    if scores.composite_score > HIGH_COMPOSITE:
        insights.append(Insight(
            type="valuation",
            detail=(
                "High composite score suggests strong investment case, "
                "but consider current valuation multiples."
            ),
            impact=0.5,
        ))

    return insights
