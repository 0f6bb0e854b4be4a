from dataclasses import dataclass, field

from config.settings import settings


@dataclass(frozen=True)
class ScoringThresholds:
    """Tunable engine constants. Defaults come from the environment."""

    staleness_window_min: float = field(default_factory=lambda: settings.staleness_window_min)
    no_security_confidence_cap: int = field(default_factory=lambda: settings.no_security_confidence_cap)
    battle_tested_market_cap_usd: float = field(
        default_factory=lambda: settings.battle_tested_market_cap_usd
    )
    battle_tested_discount: float = field(default_factory=lambda: settings.battle_tested_discount)
    battle_tested_cap: int = field(default_factory=lambda: settings.battle_tested_cap)
    full_tier_min_full_share: float = 0.8  # >= 80% FULL factors for the FULL tier
    partial_tier_min_confidence: int = 40
