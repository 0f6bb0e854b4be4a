"""Deterministic template explanation.

Used whenever the generative explainer is disabled, slow, or failing, so
every result can always be explained. Same inputs, same text.
"""

from collections.abc import Sequence
from dataclasses import dataclass

from riskradar.engine.factors import round_half_up
from riskradar.models.risk import AppliedOverride, FactorContribution, RiskLevel, RiskResult
from riskradar.models.token import TokenData

MAX_INSIGHTS = 4
MAX_RED_FLAGS_IN_ANALYSIS = 2

_RECOMMENDATIONS = {
    RiskLevel.CRITICAL: (
        "CRITICAL RISK - Avoid. Multiple red flags point to a possible scam or rug pull."
    ),
    RiskLevel.HIGH: (
        "HIGH RISK - Exercise extreme caution. Only commit what you can afford to lose "
        "and research thoroughly first."
    ),
    RiskLevel.MEDIUM: (
        "MEDIUM RISK - Proceed with caution. Standard due diligence required; "
        "consider limiting exposure."
    ),
    RiskLevel.LOW: (
        "LOW RISK - Fundamentals look relatively strong. Still do your own research "
        "and manage position size."
    ),
}


@dataclass(frozen=True)
class TokenSummary:
    """Display facts about the token, independent of scoring."""

    name: str
    symbol: str
    chain: str
    market_cap: float | None = None
    liquidity_usd: float | None = None
    holder_count: int | None = None
    age_days: float | None = None
    price: float | None = None

    @classmethod
    def from_token(cls, data: TokenData) -> "TokenSummary":
        return cls(
            name=data.name or data.address[:12],
            symbol=data.symbol or "?",
            chain=data.chain.value,
            market_cap=data.market_cap,
            liquidity_usd=data.liquidity_usd,
            holder_count=data.holder_count,
            age_days=data.age_days,
            price=data.price,
        )


@dataclass(frozen=True)
class Explanation:
    overview: str
    key_insights: tuple[str, ...]
    risk_analysis: str
    recommendation: str
    technical_details: str
    calculation_breakdown: str
    generated_by: str = "fallback"  # "fallback" or "llm"


def generate_explanation(
    token_summary: TokenSummary,
    top_factors: Sequence[FactorContribution],
    risk_score: int,
    risk_level: RiskLevel,
    red_flags: Sequence[str],
    *,
    base_score: int | None = None,
    overrides: Sequence[AppliedOverride] = (),
) -> Explanation:
    by_score = sorted(top_factors, key=lambda c: (-c.score, c.name.value))
    top = by_score[:MAX_INSIGHTS]

    return Explanation(
        overview=_overview(token_summary, risk_score, risk_level),
        key_insights=tuple(_insight(c) for c in top),
        risk_analysis=_risk_analysis(top, risk_score, risk_level, red_flags),
        recommendation=_RECOMMENDATIONS[risk_level],
        technical_details=_technical_details(token_summary),
        calculation_breakdown=_calculation_breakdown(
            top_factors, risk_score, risk_level, base_score, overrides
        ),
    )


def explain_result(result: RiskResult, token_summary: TokenSummary) -> Explanation:
    return generate_explanation(
        token_summary,
        result.contributions,
        result.overall_risk_score,
        result.risk_level,
        result.critical_flags,
        base_score=result.calculated_score,
        overrides=result.overrides,
    )


def _overview(s: TokenSummary, risk_score: int, risk_level: RiskLevel) -> str:
    mcap = f"${s.market_cap / 1e6:,.2f}M market cap" if s.market_cap else "unknown market cap"
    liq = f"${s.liquidity_usd / 1e3:,.2f}K liquidity" if s.liquidity_usd else "limited liquidity"
    holders = f"{s.holder_count:,} holders" if s.holder_count else "unknown holder count"
    return (
        f"{s.name} ({s.symbol}) is a {s.chain} token with {mcap}, {liq}, and {holders}. "
        f"Risk score: {risk_score}/100 ({risk_level.value})."
    )


def _insight(c: FactorContribution) -> str:
    if c.score > 70:
        return f"High {c.name.label} risk ({c.score}/100)"
    if c.score > 50:
        return f"Moderate {c.name.label} concern ({c.score}/100)"
    return f"Low {c.name.label} risk ({c.score}/100)"


def _risk_analysis(
    top: Sequence[FactorContribution],
    risk_score: int,
    risk_level: RiskLevel,
    red_flags: Sequence[str],
) -> str:
    parts = [f"This token presents {risk_level.value} RISK with a score of {risk_score}/100."]

    def names(threshold: int) -> str:
        return ", ".join(c.name.label for c in top if c.score > threshold)

    match risk_level:
        case RiskLevel.CRITICAL:
            if names(70):
                parts.append(f"Major concerns include {names(70)}.")
        case RiskLevel.HIGH:
            if names(60):
                parts.append(f"Primary concerns are {names(60)}.")
        case RiskLevel.MEDIUM:
            if names(50):
                parts.append(f"Some concerns exist in {names(50)}, but overall metrics are acceptable.")
            else:
                parts.append("Most risk factors are within acceptable ranges.")
        case RiskLevel.LOW:
            if sum(1 for c in top if c.score < 40) >= 3:
                parts.append("Strong fundamentals across most risk factors.")
            if names(60):
                parts.append(
                    f"Minor concerns in {names(60)}, outweighed by strong performance elsewhere."
                )

    if red_flags:
        parts.append(f"Critical flags detected: {', '.join(red_flags[:MAX_RED_FLAGS_IN_ANALYSIS])}.")
    parts.append(f"Overall assessment: {risk_level.value} risk.")
    return " ".join(parts)


def _technical_details(s: TokenSummary) -> str:
    age = f"Age: {s.age_days:g} days" if s.age_days is not None else "Age: unknown"
    price = f", current price ${s.price:g}" if s.price else ""
    holders = (
        f"Distributed across {s.holder_count:,} wallets."
        if s.holder_count
        else "Holder distribution data limited."
    )
    return f"{s.chain} blockchain. {age}{price}. {holders}"


def _calculation_breakdown(
    contributions: Sequence[FactorContribution],
    risk_score: int,
    risk_level: RiskLevel,
    base_score: int | None,
    overrides: Sequence[AppliedOverride],
) -> str:
    ordered = sorted(contributions, key=lambda c: (-c.contribution, c.name.value))
    total = sum(c.contribution for c in ordered)
    if base_score is None:
        base_score = max(0, min(100, round_half_up(total)))

    lines = ["Risk Score Calculation:", "", "Weighted Formula:"]
    lines += [
        f"  • {c.name.label}: {c.score}/100 × {c.weight * 100:.0f}% = {c.contribution:.2f}"
        for c in ordered
    ]
    lines += [
        "",
        f"Weighted Sum: {total:.2f}",
        f"Base Score: {base_score}/100",
    ]
    for o in overrides:
        lines.append(f"Override ({o.name}): {o.score_before} -> {o.score_after}, {o.reason}")
    lines.append(f"Final Score: {risk_score}/100 ({risk_level.value})")
    return "\n".join(lines)
