"""Post-aggregation score overrides.

Two passes, always in this order:

1. Critical-flag ladder: discrete CRITICAL findings push the score up,
   with a floor, because a weighted average can dilute a single fatal flaw.
2. Battle-tested: very large market caps pull the score down, since
   long-lived mega caps trip heuristic flags without being scams.

Neither pass raises.
"""

from collections.abc import Sequence
from dataclasses import dataclass

from loguru import logger

from riskradar.engine.factors import round_half_up
from riskradar.engine.thresholds import ScoringThresholds
from riskradar.models.risk import SecurityCheck, Severity


@dataclass(frozen=True)
class OverrideRule:
    min_critical: int
    penalty: int
    floor: int | None


@dataclass(frozen=True)
class OverrideOutcome:
    final_score: int
    override_applied: bool
    override_reason: str | None


# Evaluated top-down, first match wins
CRITICAL_FLAG_LADDER: tuple[OverrideRule, ...] = (
    OverrideRule(min_critical=3, penalty=35, floor=75),
    OverrideRule(min_critical=2, penalty=25, floor=65),
    OverrideRule(min_critical=1, penalty=15, floor=None),
)


def apply_critical_flag_override(
    base_score: int,
    critical_count: int,
    ladder: Sequence[OverrideRule] = CRITICAL_FLAG_LADDER,
) -> OverrideOutcome:
    base_score = max(0, min(100, base_score))
    rule = next((r for r in ladder if critical_count >= r.min_critical), None)
    if rule is None:
        return OverrideOutcome(base_score, False, None)

    final = base_score + rule.penalty
    if rule.floor is not None:
        final = max(final, rule.floor)
    final = min(final, 100)

    if final == base_score:
        return OverrideOutcome(base_score, False, None)

    floor_note = f", floor {rule.floor}" if rule.floor is not None else ""
    reason = (
        f"{critical_count} critical flag{'s' if critical_count != 1 else ''}: "
        f"+{rule.penalty}{floor_note} ({base_score} -> {final})"
    )
    logger.info(f"[OVERRIDE] {reason}")
    return OverrideOutcome(final, True, reason)


def apply_battle_tested_override(
    score: int,
    market_cap: float | None,
    checks: Sequence[SecurityCheck],
    *,
    base_score: int | None = None,
    thresholds: ScoringThresholds | None = None,
) -> OverrideOutcome:
    """Discount a mega cap's score; never raises it.

    When base_score (the pre-ladder weighted score) is given, the result
    is also held to the discounted base, so a non-honeypot critical flag
    cannot leave a battle-tested token above its own weighted score.
    """
    t = thresholds or ScoringThresholds()
    if market_cap is None or market_cap < t.battle_tested_market_cap_usd:
        return OverrideOutcome(score, False, None)

    if any(c.name == "honeypot" and c.severity == Severity.CRITICAL for c in checks):
        logger.info(f"[BATTLE] ${market_cap / 1e9:,.0f}B market cap but honeypot detected, no discount")
        return OverrideOutcome(score, False, None)

    final = min(score, round_half_up(score * (1 - t.battle_tested_discount)), t.battle_tested_cap)
    if base_score is not None:
        final = min(final, round_half_up(max(0, base_score) * (1 - t.battle_tested_discount)))
    final = max(0, final)
    if final == score:
        return OverrideOutcome(score, False, None)

    reason = (
        f"battle-tested: ${market_cap / 1e9:,.0f}B market cap "
        f"(-{t.battle_tested_discount:.0%}, cap {t.battle_tested_cap}; {score} -> {final})"
    )
    logger.info(f"[BATTLE] {reason}")
    return OverrideOutcome(final, True, reason)
