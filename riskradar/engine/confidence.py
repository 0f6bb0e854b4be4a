"""Confidence and data-tier assessment.

Confidence says how much of the score rests on real data rather than
neutral estimates. Freshness is reported alongside, not folded in.
"""

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime, timezone

from riskradar.engine.factors import round_half_up
from riskradar.engine.thresholds import ScoringThresholds
from riskradar.models.risk import DataTier, FactorQuality, FactorScore

QUALITY_WEIGHTS: dict[FactorQuality, float] = {
    FactorQuality.FULL: 1.0,
    FactorQuality.PARTIAL: 0.5,
    FactorQuality.ESTIMATED: 0.25,
    FactorQuality.MISSING: 0.0,
}


@dataclass(frozen=True)
class ConfidenceAssessment:
    confidence: int  # 0-100
    tier: DataTier


def assess_confidence(
    factor_scores: Sequence[FactorScore],
    has_detailed_security_data: bool,
    *,
    thresholds: ScoringThresholds | None = None,
) -> ConfidenceAssessment:
    t = thresholds or ScoringThresholds()
    if not factor_scores:
        return ConfidenceAssessment(confidence=0, tier=DataTier.MINIMAL)

    mean = sum(QUALITY_WEIGHTS[f.quality] for f in factor_scores) / len(factor_scores)
    confidence = round_half_up(mean * 100)
    if not has_detailed_security_data:
        confidence = min(confidence, t.no_security_confidence_cap)

    full_share = sum(1 for f in factor_scores if f.quality == FactorQuality.FULL) / len(factor_scores)
    if full_share >= t.full_tier_min_full_share and has_detailed_security_data:
        tier = DataTier.FULL
    elif confidence >= t.partial_tier_min_confidence:
        tier = DataTier.PARTIAL
    else:
        tier = DataTier.MINIMAL

    return ConfidenceAssessment(confidence=max(0, min(100, confidence)), tier=tier)


def data_freshness(timestamp: datetime, now: datetime, window_min: float = 60.0) -> float:
    """1.0 for just-fetched data, decaying linearly to 0.0 at the staleness window."""
    # Naive datetimes are UTC
    if timestamp.tzinfo is None:
        timestamp = timestamp.replace(tzinfo=timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    age_min = (now - timestamp).total_seconds() / 60
    if age_min <= 0:
        return 1.0
    if window_min <= 0 or age_min >= window_min:
        return 0.0
    return round(1 - age_min / window_min, 4)
