"""Chain-specific factor weights and weighted aggregation."""

from collections.abc import Iterable

from loguru import logger

from riskradar.engine.factors import round_half_up
from riskradar.models.risk import FactorContribution, FactorName, FactorScore
from riskradar.models.token import ChainType

WeightVector = dict[FactorName, float]

_EVM_WEIGHTS: WeightVector = {
    FactorName.CONTRACT_CONTROL: 0.22,
    FactorName.TAX_FEE: 0.08,
    FactorName.SUPPLY_DILUTION: 0.15,
    FactorName.HOLDER_CONCENTRATION: 0.15,
    FactorName.LIQUIDITY_DEPTH: 0.16,
    FactorName.ACTIVITY: 0.10,
    FactorName.BURN_DEFLATION: 0.06,
    FactorName.TOKEN_AGE: 0.08,
}

# No token tax on Solana; freeze/mint authorities dominate instead
_SOLANA_WEIGHTS: WeightVector = {
    FactorName.CONTRACT_CONTROL: 0.35,
    FactorName.TAX_FEE: 0.0,
    FactorName.SUPPLY_DILUTION: 0.12,
    FactorName.HOLDER_CONCENTRATION: 0.14,
    FactorName.LIQUIDITY_DEPTH: 0.18,
    FactorName.ACTIVITY: 0.10,
    FactorName.BURN_DEFLATION: 0.05,
    FactorName.TOKEN_AGE: 0.06,
}

_CARDANO_WEIGHTS: WeightVector = {
    FactorName.SUPPLY_DILUTION: 0.25,
    FactorName.CONTRACT_CONTROL: 0.20,
    FactorName.TAX_FEE: 0.0,
    FactorName.HOLDER_CONCENTRATION: 0.15,
    FactorName.LIQUIDITY_DEPTH: 0.15,
    FactorName.ACTIVITY: 0.10,
    FactorName.BURN_DEFLATION: 0.08,
    FactorName.TOKEN_AGE: 0.07,
}


def get_weights(chain: ChainType) -> WeightVector:
    """Weight vector for a chain family. Always covers every factor, sums to 1.0."""
    match chain:
        case ChainType.SOLANA:
            return dict(_SOLANA_WEIGHTS)
        case ChainType.CARDANO:
            return dict(_CARDANO_WEIGHTS)
        case ChainType.EVM | ChainType.OTHER:
            return dict(_EVM_WEIGHTS)


def get_weighting_rationale(chain: ChainType) -> str:
    match chain:
        case ChainType.SOLANA:
            return (
                "Solana prioritizes contract control (35%) because mint and freeze "
                "authorities can inflate supply or lock holder wallets."
            )
        case ChainType.CARDANO:
            return (
                "Cardano emphasizes supply policy (25%) since minting-policy rules "
                "are the main lever a token issuer keeps."
            )
        case ChainType.EVM:
            return (
                "EVM chains use balanced weighting (22% contract control) covering "
                "honeypots, transfer taxes and upgradeable proxies."
            )
        case ChainType.OTHER:
            return "Unrecognized chain: standard EVM-style balanced weighting applied."


def weighted_contributions(
    factor_scores: Iterable[FactorScore], weights: WeightVector
) -> list[FactorContribution]:
    """Per-factor score × weight records, largest contribution first."""
    contributions = [
        FactorContribution(
            name=f.name,
            score=f.score,
            weight=weights.get(f.name, 0.0),
            contribution=f.score * weights.get(f.name, 0.0),
        )
        for f in factor_scores
    ]
    contributions.sort(key=lambda c: (-c.contribution, c.name.value))
    return contributions


def aggregate(factor_scores: Iterable[FactorScore], weights: WeightVector) -> int:
    """Weighted sum of factor scores, rounded half-up and clamped to 0-100."""
    total = sum(c.contribution for c in weighted_contributions(factor_scores, weights))
    score = max(0, min(100, round_half_up(total)))
    logger.debug(f"[ENGINE] Weighted sum {total:.2f} -> base score {score}")
    return score
