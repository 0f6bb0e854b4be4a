"""Token risk analysis: factors -> weights -> overrides -> RiskResult."""

from datetime import datetime, timezone

from loguru import logger

from riskradar.engine.banding import risk_level_for
from riskradar.engine.confidence import assess_confidence, data_freshness
from riskradar.engine.factors import score_factors
from riskradar.engine.overrides import apply_battle_tested_override, apply_critical_flag_override
from riskradar.engine.security_checks import collect_security_checks
from riskradar.engine.thresholds import ScoringThresholds
from riskradar.engine.weights import (
    aggregate,
    get_weighting_rationale,
    get_weights,
    weighted_contributions,
)
from riskradar.models.risk import AppliedOverride, RiskResult, Severity, UpcomingRisks
from riskradar.models.token import TokenData

# Fraction of supply unlocking in the next 30 days
EXTREME_UNLOCK = 0.30
HIGH_UNLOCK = 0.15
MEDIUM_UNLOCK = 0.05


def analyze_token(
    data: TokenData,
    *,
    now: datetime | None = None,
    thresholds: ScoringThresholds | None = None,
) -> RiskResult:
    """Score one token. Missing data lowers confidence, it never raises."""
    t = thresholds or ScoringThresholds()
    now = now or datetime.now(timezone.utc)

    factor_scores = score_factors(data)
    weights = get_weights(data.chain)
    contributions = weighted_contributions(factor_scores, weights)
    base_score = aggregate(factor_scores, weights)

    checks = collect_security_checks(data)
    critical = [c for c in checks if c.severity == Severity.CRITICAL]

    overrides: list[AppliedOverride] = []
    flagged = apply_critical_flag_override(base_score, len(critical))
    if flagged.override_applied:
        overrides.append(
            AppliedOverride("critical_flags", flagged.override_reason or "", base_score, flagged.final_score)
        )
    battle = apply_battle_tested_override(
        flagged.final_score, data.market_cap, checks, base_score=base_score, thresholds=t
    )
    if battle.override_applied:
        overrides.append(
            AppliedOverride("battle_tested", battle.override_reason or "", flagged.final_score, battle.final_score)
        )
    final_score = battle.final_score

    assessment = assess_confidence(factor_scores, data.has_detailed_security_data, thresholds=t)
    freshness = data_freshness(data.data_timestamp, now, t.staleness_window_min)

    result = RiskResult(
        overall_risk_score=final_score,
        risk_level=risk_level_for(final_score),
        confidence_score=assessment.confidence,
        data_tier=assessment.tier,
        data_freshness=freshness,
        breakdown={f.name.value: f.score for f in factor_scores},
        critical_flags=tuple(c.message for c in critical),
        warning_flags=tuple(c.message for c in checks if c.severity == Severity.WARNING),
        positive_signals=tuple(c.message for c in checks if c.severity == Severity.INFO),
        data_sources=data.data_sources,
        upcoming_risks=forecast_upcoming_risks(data.next_unlock_30d_pct),
        override_applied=bool(overrides),
        override_reason="; ".join(o.reason for o in overrides) or None,
        overrides=tuple(overrides),
        calculated_score=base_score,
        chain=data.chain,
        factor_scores=tuple(factor_scores),
        contributions=tuple(contributions),
        weighting_rationale=get_weighting_rationale(data.chain),
        analyzed_at=now,
    )

    logger.info(
        f"[ENGINE] {data.display_name} on {data.chain.value}: "
        f"score={final_score} ({result.risk_level.value}) base={base_score} "
        f"confidence={assessment.confidence} tier={assessment.tier.value} "
        f"critical={len(critical)}"
    )
    return result


def forecast_upcoming_risks(unlock_fraction: float | None) -> UpcomingRisks | None:
    if unlock_fraction is None:
        return None
    if unlock_fraction > EXTREME_UNLOCK:
        forecast = "EXTREME"
    elif unlock_fraction > HIGH_UNLOCK:
        forecast = "HIGH"
    elif unlock_fraction > MEDIUM_UNLOCK:
        forecast = "MEDIUM"
    else:
        forecast = "LOW"
    return UpcomingRisks(next_30_days=unlock_fraction, forecast=forecast)
