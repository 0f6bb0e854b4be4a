"""Factor scorer: raw TokenData to independent 0-100 risk sub-scores.

Pure function: no IO, never raises. Higher = riskier for every factor.
Each factor decides its own quality label from which of its inputs were
present; a factor with nothing to go on returns NEUTRAL_SCORE so the
aggregation step never sees a hole.
"""

import math

from loguru import logger

from riskradar.models.risk import FactorName, FactorQuality, FactorScore
from riskradar.models.token import ChainType, TokenData

NEUTRAL_SCORE = 50

# Supply dilution
LOCKED_SUPPLY_WEIGHT = 70  # points at 100% of supply locked/uncirculated
UNKNOWN_LOCKED_RISK = 30
UNCAPPED_SUPPLY_PENALTY = 20
UNCAPPED_BURNING_PENALTY = 10

# Holder concentration
CONCENTRATION_KNEE = 0.30  # risk rises steeply above this top-10 share
CONCENTRATION_SATURATION = 0.85

# Liquidity depth (liquidity / market cap)
DEEP_POOL_USD = 5_000_000
DEEP_POOL_CAP = 50

# Contract / authority control
HONEYPOT_PENALTY = 100
MINT_AUTHORITY_PENALTY = 30
FREEZE_AUTHORITY_PENALTY = 35
OWNER_ACTIVE_PENALTY = 20
CLOSED_SOURCE_PENALTY = 15
PROXY_PENALTY = 15
POLICY_UNLOCKED_PENALTY = 40
POLICY_UNEXPIRED_PENALTY = 10

# Tax / fee
TAX_MULTIPLIER = 2.0
HIGH_TAX_PCT = 10.0
HIGH_TAX_STEP = 20
MODIFIABLE_TAX_PENALTY = 15
_TAXLESS_CHAINS = frozenset({ChainType.SOLANA, ChainType.CARDANO})

# Activity
HOLDER_LOG_SLOPE = 20  # 100k holders -> 0
TX_LOG_SLOPE = 25  # 10k daily txs -> 0
NEW_TOKEN_DAYS = 7
NEW_TOKEN_ACTIVITY_BUMP = 15
# (volume / market cap upper bound, penalty); above the last bound is churn
DEAD_VOLUME_BRACKETS = ((0.0001, 30), (0.001, 20), (0.005, 10))
CHURN_VOLUME_BRACKETS = ((5.0, 25), (2.0, 12))

# Burn / deflation
CAPPED_BURN_BASE = 50
UNCAPPED_BURN_BASE = 80
BURN_RATIO_SLOPE = 140

# Token age
AGE_FLOOR = 5
AGE_DECAY_DAYS = 40.0


def score_factors(data: TokenData) -> list[FactorScore]:
    """Score every factor for one token. Order is stable."""
    factors = [
        score_supply_dilution(data),
        score_holder_concentration(data),
        score_liquidity_depth(data),
        score_contract_control(data),
        score_tax_fee(data),
        score_activity(data),
        score_burn_deflation(data),
        score_token_age(data),
    ]
    logger.debug(
        f"[FACTORS] {data.address[:12]} ({data.chain.value}): "
        + ", ".join(f"{f.name.value}={f.score}/{f.quality.value}" for f in factors)
    )
    return factors


def score_supply_dilution(data: TokenData) -> FactorScore:
    locked_ratio: float | None = None
    quality = FactorQuality.ESTIMATED
    basis = "circulating share unknown"

    if data.total_supply and data.circulating_supply is not None:
        locked_ratio = (data.total_supply - data.circulating_supply) / data.total_supply
        quality = FactorQuality.FULL
        basis = f"{1 - locked_ratio:.0%} of total supply circulating"
    elif data.market_cap and data.fully_diluted_value:
        locked_ratio = max(0.0, 1 - data.market_cap / data.fully_diluted_value)
        quality = FactorQuality.PARTIAL
        basis = f"market cap is {1 - locked_ratio:.0%} of FDV"

    if data.is_uncapped:
        cap_penalty = UNCAPPED_BURNING_PENALTY if data.burned_supply else UNCAPPED_SUPPLY_PENALTY
        basis += "; uncapped max supply"
    else:
        cap_penalty = 0

    if locked_ratio is None:
        raw = UNKNOWN_LOCKED_RISK + cap_penalty
    else:
        raw = locked_ratio * LOCKED_SUPPLY_WEIGHT + cap_penalty

    return FactorScore(FactorName.SUPPLY_DILUTION, _clamp(raw), quality, basis)


def score_holder_concentration(data: TokenData) -> FactorScore:
    top10 = data.top10_holders_pct
    if top10 is None:
        return _missing(FactorName.HOLDER_CONCENTRATION, "top-10 holder share unknown")

    if top10 <= CONCENTRATION_KNEE:
        raw = top10 / CONCENTRATION_KNEE * 30
    elif top10 < CONCENTRATION_SATURATION:
        span = CONCENTRATION_SATURATION - CONCENTRATION_KNEE
        raw = 30 + (top10 - CONCENTRATION_KNEE) / span * 70
    else:
        raw = 100

    return FactorScore(
        FactorName.HOLDER_CONCENTRATION,
        _clamp(raw),
        FactorQuality.FULL,
        f"top 10 wallets hold {top10:.0%}",
    )


def score_liquidity_depth(data: TokenData) -> FactorScore:
    liq = data.liquidity_usd
    if liq is None:
        return _missing(FactorName.LIQUIDITY_DEPTH, "liquidity unknown")

    if not data.market_cap:
        # No market cap to compare against, judge the pool size alone
        if liq < 1_000:
            raw = 90
        elif liq < 10_000:
            raw = 70
        elif liq < 100_000:
            raw = 50
        elif liq < 1_000_000:
            raw = 30
        else:
            raw = 15
        return FactorScore(
            FactorName.LIQUIDITY_DEPTH,
            raw,
            FactorQuality.ESTIMATED,
            f"${liq:,.0f} liquidity, market cap unknown",
        )

    ratio = liq / data.market_cap
    raw = _depth_risk(ratio)
    rationale = f"liquidity is {ratio:.2%} of market cap"
    if liq >= DEEP_POOL_USD and raw > DEEP_POOL_CAP:
        raw = DEEP_POOL_CAP
        rationale += f" (capped: ${liq / 1e6:,.1f}M pool)"

    return FactorScore(FactorName.LIQUIDITY_DEPTH, _clamp(raw), FactorQuality.FULL, rationale)


def score_contract_control(data: TokenData) -> FactorScore:
    if data.is_honeypot:
        return FactorScore(
            FactorName.CONTRACT_CONTROL,
            HONEYPOT_PENALTY,
            FactorQuality.FULL,
            "honeypot: sells are blocked",
        )

    findings = _control_findings(data)
    known = [(label, penalty) for label, flag, penalty in findings if flag is not None]
    if not known:
        return _missing(FactorName.CONTRACT_CONTROL, "no contract/authority data")

    hits = [(label, penalty) for label, flag, penalty in findings if flag]
    raw = sum(penalty for _, penalty in hits)
    quality = FactorQuality.FULL if len(known) == len(findings) else FactorQuality.PARTIAL
    rationale = ", ".join(label for label, _ in hits) if hits else "no control risks found"

    return FactorScore(FactorName.CONTRACT_CONTROL, _clamp(raw), quality, rationale)


def score_tax_fee(data: TokenData) -> FactorScore:
    if data.chain in _TAXLESS_CHAINS:
        return FactorScore(
            FactorName.TAX_FEE,
            0,
            FactorQuality.FULL,
            f"no token tax mechanism on {data.chain.value}",
        )

    taxes = [t for t in (data.buy_tax_pct, data.sell_tax_pct) if t is not None]
    if not taxes:
        return _missing(FactorName.TAX_FEE, "buy/sell tax unknown")

    raw = sum(taxes) * TAX_MULTIPLIER
    if max(taxes) > HIGH_TAX_PCT:
        raw += HIGH_TAX_STEP
    if data.tax_modifiable:
        raw += MODIFIABLE_TAX_PENALTY

    quality = FactorQuality.FULL if len(taxes) == 2 else FactorQuality.PARTIAL
    buy = f"{data.buy_tax_pct:g}%" if data.buy_tax_pct is not None else "?"
    sell = f"{data.sell_tax_pct:g}%" if data.sell_tax_pct is not None else "?"
    return FactorScore(FactorName.TAX_FEE, _clamp(raw), quality, f"buy {buy} / sell {sell}")


def score_activity(data: TokenData) -> FactorScore:
    parts: list[float] = []
    notes: list[str] = []
    if data.holder_count is not None:
        parts.append(_log_risk(data.holder_count, HOLDER_LOG_SLOPE))
        notes.append(f"{data.holder_count:,} holders")
    if data.tx_count_24h is not None:
        parts.append(_log_risk(data.tx_count_24h, TX_LOG_SLOPE))
        notes.append(f"{data.tx_count_24h:,} txs/24h")
    if not parts:
        return _missing(FactorName.ACTIVITY, "holder and transaction counts unknown")

    raw = sum(parts) / len(parts)
    if data.volume_24h is not None and data.market_cap:
        ratio = data.volume_24h / data.market_cap
        penalty = _volume_penalty(ratio)
        raw += penalty
        if penalty:
            notes.append(f"24h volume is {ratio:.2%} of market cap")
    if data.age_days is not None and data.age_days < NEW_TOKEN_DAYS:
        raw += NEW_TOKEN_ACTIVITY_BUMP
        notes.append(f"only {data.age_days:g} days old")

    quality = FactorQuality.FULL if len(parts) == 2 else FactorQuality.PARTIAL
    return FactorScore(FactorName.ACTIVITY, _clamp(raw), quality, ", ".join(notes))


def score_burn_deflation(data: TokenData) -> FactorScore:
    base = UNCAPPED_BURN_BASE if data.is_uncapped else CAPPED_BURN_BASE
    supply_note = "uncapped supply" if data.is_uncapped else "capped supply"

    if data.burned_supply is not None and data.total_supply:
        burn_ratio = data.burned_supply / data.total_supply
        raw = base - burn_ratio * BURN_RATIO_SLOPE
        return FactorScore(
            FactorName.BURN_DEFLATION,
            _clamp(raw),
            FactorQuality.FULL,
            f"{burn_ratio:.1%} of supply burned, {supply_note}",
        )

    return FactorScore(
        FactorName.BURN_DEFLATION,
        base,
        FactorQuality.ESTIMATED,
        f"burn data unavailable, {supply_note}",
    )


def score_token_age(data: TokenData) -> FactorScore:
    if data.age_days is None:
        return _missing(FactorName.TOKEN_AGE, "token age unknown")

    raw = AGE_FLOOR + (100 - AGE_FLOOR) * math.exp(-data.age_days / AGE_DECAY_DAYS)
    return FactorScore(
        FactorName.TOKEN_AGE,
        _clamp(raw),
        FactorQuality.FULL,
        f"{data.age_days:g} days old",
    )


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _clamp(raw: float) -> int:
    return max(0, min(100, round_half_up(raw)))


def _missing(name: FactorName, rationale: str) -> FactorScore:
    return FactorScore(name, NEUTRAL_SCORE, FactorQuality.MISSING, f"{rationale} (neutral estimate)")


def _log_risk(count: int, slope: float) -> float:
    return max(0.0, 100 - slope * math.log10(count + 1))


def _volume_penalty(ratio: float) -> int:
    """Near-zero turnover means a dead market; extreme turnover means churn."""
    for bound, penalty in DEAD_VOLUME_BRACKETS:
        if ratio < bound:
            return penalty
    for bound, penalty in CHURN_VOLUME_BRACKETS:
        if ratio > bound:
            return penalty
    return 0


def _depth_risk(ratio: float) -> float:
    """Log-interpolated depth risk: <=1% of mcap is high, >=10% is low."""
    if ratio <= 0.001:
        return 100.0
    if ratio >= 1.0:
        return 0.0
    lg = math.log10(ratio)
    if ratio <= 0.01:
        return 100 - 10 * (lg + 3)
    if ratio <= 0.10:
        return 90 - 80 * (lg + 2)
    return 10 - 10 * (lg + 1)


def _negate(flag: bool | None) -> bool | None:
    return None if flag is None else not flag


def _control_findings(data: TokenData) -> list[tuple[str, bool | None, int]]:
    """(label, flag, penalty) triples relevant to the token's chain family."""
    match data.chain:
        case ChainType.SOLANA:
            return [
                ("mint authority active", data.is_mintable, MINT_AUTHORITY_PENALTY),
                ("freeze authority active", data.freeze_authority, FREEZE_AUTHORITY_PENALTY),
            ]
        case ChainType.CARDANO:
            findings = [
                ("minting policy not time-locked", _negate(data.policy_locked), POLICY_UNLOCKED_PENALTY),
            ]
            if data.policy_locked:
                findings.append(
                    ("policy time-lock not yet expired", _negate(data.policy_expired), POLICY_UNEXPIRED_PENALTY)
                )
            return findings
        case ChainType.EVM | ChainType.OTHER:
            return [
                ("owner can mint", data.is_mintable, MINT_AUTHORITY_PENALTY),
                ("ownership not renounced", _negate(data.owner_renounced), OWNER_ACTIVE_PENALTY),
                ("source not verified", _negate(data.is_open_source), CLOSED_SOURCE_PENALTY),
                ("upgradeable proxy", data.is_proxy, PROXY_PENALTY),
            ]
