"""Chain-aware discrete security findings.

Checks are context-aware: the same raw value can be CRITICAL on a
two-day-old token and merely a WARNING on an established one. CRITICAL
findings drive the override ladder; WARNING and INFO become flag lists.
"""

from loguru import logger

from riskradar.models.risk import SecurityCheck, Severity
from riskradar.models.token import ChainType, TokenData

CRITICAL_SELL_TAX_PCT = 20.0
HIGH_TAX_PCT = 10.0
CRITICAL_TOP10 = 0.80
HIGH_TOP10 = 0.50
CRITICAL_MIN_HOLDERS = 10
LOW_HOLDERS = 50
EXTREME_MCAP_LIQ_RATIO = 1000
YOUNG_TOKEN_DAYS = 30
SOLANA_YOUNG_TOKEN_DAYS = 90
LIQUIDITY_DRAIN = -0.50
LIQUIDITY_DECLINE = -0.15
DEPLOYER_HOLDING_WARN_PCT = 20.0
ACTIVE_DEPLOYER_MIN_HOLDING_PCT = 5.0

# Wash trading
WASH_MIN_TXS = 50
WASH_MAX_WALLETS = 20
BUYER_SELLER_IMBALANCE = 5.0
VOLUME_PER_WALLET_MULTIPLE = 10

# Holder velocity
HOLDER_EXODUS_7D = -0.30
HOLDER_CHURN_7D = -0.15
BOT_GROWTH_7D = 1.0
BOT_GROWTH_MAX_HOLDERS = 1_000
HOLDER_DECLINE_30D = -0.20
STEADY_GROWTH_30D = (0.20, 1.0)


def collect_security_checks(data: TokenData) -> list[SecurityCheck]:
    checks = _common_checks(data)
    checks.extend(_wash_trading_checks(data))
    checks.extend(_holder_velocity_checks(data))

    match data.chain:
        case ChainType.SOLANA:
            checks.extend(_solana_checks(data))
        case ChainType.CARDANO:
            checks.extend(_cardano_checks(data))
        case ChainType.EVM | ChainType.OTHER:
            checks.extend(_evm_checks(data))

    if not data.has_detailed_security_data:
        checks.append(
            SecurityCheck(
                "no_security_data",
                Severity.WARNING,
                "Detailed contract security data unavailable; analysis relies on market data",
            )
        )

    critical = sum(1 for c in checks if c.severity == Severity.CRITICAL)
    logger.debug(
        f"[ENGINE] {data.address[:12]}: {len(checks)} security checks, {critical} critical"
    )
    return checks


def _common_checks(data: TokenData) -> list[SecurityCheck]:
    checks: list[SecurityCheck] = []
    young = data.age_days is not None and data.age_days < YOUNG_TOKEN_DAYS

    if data.is_honeypot:
        checks.append(SecurityCheck("honeypot", Severity.CRITICAL, "Honeypot: token cannot be sold", 100))
    if data.cannot_buy:
        checks.append(SecurityCheck("cannot_buy", Severity.CRITICAL, "Token cannot be bought", 40))

    sell_tax = data.sell_tax_pct
    if sell_tax is not None:
        if sell_tax >= CRITICAL_SELL_TAX_PCT:
            checks.append(
                SecurityCheck("high_sell_tax", Severity.CRITICAL, f"Sell tax of {sell_tax:g}% traps holders", 30)
            )
        elif sell_tax > HIGH_TAX_PCT:
            checks.append(SecurityCheck("elevated_sell_tax", Severity.WARNING, f"Sell tax of {sell_tax:g}%", 15))
    if data.buy_tax_pct is not None and data.buy_tax_pct > HIGH_TAX_PCT:
        checks.append(
            SecurityCheck("high_buy_tax", Severity.WARNING, f"Buy tax of {data.buy_tax_pct:g}%", 10)
        )
    if data.tax_modifiable:
        checks.append(SecurityCheck("tax_modifiable", Severity.WARNING, "Owner can change the tax rate", 15))

    top10 = data.top10_holders_pct
    if top10 is not None:
        if top10 >= CRITICAL_TOP10:
            checks.append(
                SecurityCheck(
                    "extreme_concentration", Severity.CRITICAL, f"Top 10 wallets hold {top10:.0%} of supply", 30
                )
            )
        elif top10 >= HIGH_TOP10:
            checks.append(
                SecurityCheck("high_concentration", Severity.WARNING, f"Top 10 wallets hold {top10:.0%} of supply", 15)
            )

    holders = data.holder_count
    if holders is not None:
        if holders < CRITICAL_MIN_HOLDERS:
            checks.append(
                SecurityCheck("very_few_holders", Severity.CRITICAL, f"Only {holders} holders", 25)
            )
        elif holders < LOW_HOLDERS:
            checks.append(SecurityCheck("low_holder_count", Severity.WARNING, _holder_message(data), 10))

    liq = data.liquidity_usd
    mcap = data.market_cap
    if liq is not None and mcap is not None:
        if (liq < 1_000 and mcap > 100_000) or (liq < 10_000 and mcap > 1_000_000):
            checks.append(
                SecurityCheck(
                    "liquidity_mismatch",
                    Severity.CRITICAL,
                    f"${liq:,.0f} liquidity cannot support a ${mcap:,.0f} market cap",
                    30,
                )
            )
        if young and liq > 0 and mcap / liq > EXTREME_MCAP_LIQ_RATIO:
            checks.append(
                SecurityCheck(
                    "extreme_mcap_liquidity_ratio",
                    Severity.CRITICAL,
                    f"Market cap is {mcap / liq:,.0f}x liquidity on a {data.age_days:g}-day-old token",
                    25,
                )
            )

    change = data.liquidity_change_7d
    if change is not None:
        if change < LIQUIDITY_DRAIN:
            checks.append(
                SecurityCheck("liquidity_drain", Severity.CRITICAL, f"Liquidity fell {-change:.0%} in 7 days", 30)
            )
        elif change < LIQUIDITY_DECLINE:
            checks.append(
                SecurityCheck("liquidity_declining", Severity.WARNING, f"Liquidity fell {-change:.0%} in 7 days", 10)
            )

    deployer = data.deployer_holding_pct
    if deployer is not None and deployer > DEPLOYER_HOLDING_WARN_PCT:
        checks.append(
            SecurityCheck("deployer_holding", Severity.WARNING, f"Deployer holds {deployer:g}% of supply", 15)
        )
    if (
        data.deployer_tx_last_7_days
        and deployer is not None
        and deployer > ACTIVE_DEPLOYER_MIN_HOLDING_PCT
    ):
        checks.append(
            SecurityCheck(
                "active_deployer",
                Severity.WARNING,
                f"Deployer made {data.deployer_tx_last_7_days} txs this week while holding {deployer:g}%",
                10,
            )
        )

    if data.liquidity_locked:
        checks.append(SecurityCheck("liquidity_locked", Severity.INFO, "Liquidity is locked"))
    if data.owner_renounced:
        checks.append(SecurityCheck("ownership_renounced", Severity.INFO, "Contract ownership renounced"))

    return checks


def _wash_trading_checks(data: TokenData) -> list[SecurityCheck]:
    """Circular trading between a handful of wallets inflates tx counts and volume."""
    buyers, sellers = data.unique_buyers_24h, data.unique_sellers_24h
    if not buyers or not sellers:
        return []

    checks: list[SecurityCheck] = []
    wallets = buyers + sellers
    if data.tx_count_24h is not None and data.tx_count_24h > WASH_MIN_TXS and wallets < WASH_MAX_WALLETS:
        checks.append(
            SecurityCheck(
                "wash_trading",
                Severity.CRITICAL,
                f"{data.tx_count_24h:,} txs in 24h from only {wallets} wallets: likely wash trading",
                35,
            )
        )

    ratio = buyers / sellers
    if ratio > BUYER_SELLER_IMBALANCE or ratio < 1 / BUYER_SELLER_IMBALANCE:
        checks.append(
            SecurityCheck(
                "buy_sell_imbalance",
                Severity.WARNING,
                f"Extreme buy/sell imbalance: {buyers} buyers vs {sellers} sellers",
                25,
            )
        )

    if data.volume_24h and data.market_cap:
        per_wallet = data.volume_24h / wallets
        avg_position = data.market_cap / (data.holder_count or 1)
        if per_wallet > avg_position * VOLUME_PER_WALLET_MULTIPLE:
            checks.append(
                SecurityCheck(
                    "artificial_volume",
                    Severity.WARNING,
                    f"${per_wallet:,.0f} traded per active wallet is too high for the holder base",
                    20,
                )
            )
    return checks


def _holder_velocity_checks(data: TokenData) -> list[SecurityCheck]:
    current = data.holder_count
    if current is None:
        return []

    checks: list[SecurityCheck] = []
    if data.holders_7d_ago:
        change = (current - data.holders_7d_ago) / data.holders_7d_ago
        if change < HOLDER_EXODUS_7D:
            checks.append(
                SecurityCheck("holder_exodus", Severity.CRITICAL, f"{-change:.0%} of holders exited in 7 days", 40)
            )
        elif change < HOLDER_CHURN_7D:
            checks.append(
                SecurityCheck("holder_churn", Severity.WARNING, f"{-change:.0%} of holders exited in 7 days", 25)
            )
        if change > BOT_GROWTH_7D and current < BOT_GROWTH_MAX_HOLDERS:
            checks.append(
                SecurityCheck(
                    "suspicious_holder_growth",
                    Severity.WARNING,
                    f"Holders grew {change:.0%} in 7 days on a small base: possible bot wallets",
                    20,
                )
            )

    if data.holders_30d_ago:
        change = (current - data.holders_30d_ago) / data.holders_30d_ago
        low, high = STEADY_GROWTH_30D
        if change < HOLDER_DECLINE_30D:
            checks.append(
                SecurityCheck("holders_declining", Severity.WARNING, f"Holder count down {-change:.0%} over 30 days", 15)
            )
        elif low < change < high:
            checks.append(
                SecurityCheck("steady_holder_growth", Severity.INFO, f"Holder count up {change:.0%} over 30 days")
            )
    return checks


def _evm_checks(data: TokenData) -> list[SecurityCheck]:
    checks: list[SecurityCheck] = []
    if data.is_mintable and not data.owner_renounced:
        if data.age_days is not None and data.age_days < YOUNG_TOKEN_DAYS:
            checks.append(
                SecurityCheck(
                    "mintable_new_token",
                    Severity.CRITICAL,
                    f"Owner can mint new supply on a {data.age_days:g}-day-old token",
                    30,
                )
            )
        else:
            checks.append(SecurityCheck("mintable", Severity.WARNING, "Owner can mint new supply", 15))
    if data.is_proxy:
        checks.append(SecurityCheck("proxy_contract", Severity.WARNING, "Upgradeable proxy: logic can change", 15))
    if data.is_open_source is False:
        checks.append(SecurityCheck("unverified_source", Severity.WARNING, "Contract source is not verified", 15))
    return checks


def _solana_checks(data: TokenData) -> list[SecurityCheck]:
    checks: list[SecurityCheck] = []
    if data.freeze_authority:
        checks.append(
            SecurityCheck("freeze_authority", Severity.CRITICAL, "Freeze authority can lock holder wallets", 35)
        )
    if data.is_mintable:
        if data.age_days is not None and data.age_days < SOLANA_YOUNG_TOKEN_DAYS:
            checks.append(
                SecurityCheck("mint_authority", Severity.CRITICAL, "Mint authority still active on a young token", 30)
            )
        else:
            checks.append(SecurityCheck("mint_authority", Severity.WARNING, "Mint authority still active", 15))
    if data.freeze_authority is False and data.is_mintable is False:
        checks.append(SecurityCheck("authorities_revoked", Severity.INFO, "Mint and freeze authorities revoked"))
    return checks


def _cardano_checks(data: TokenData) -> list[SecurityCheck]:
    if data.policy_locked is False:
        return [
            SecurityCheck(
                "policy_unlocked", Severity.CRITICAL, "Minting policy is not time-locked: supply can grow", 40
            )
        ]
    if data.policy_locked and data.policy_expired is False:
        return [
            SecurityCheck(
                "policy_not_expired", Severity.WARNING, "Minting policy is time-locked but still open", 10
            )
        ]
    if data.policy_locked and data.policy_expired:
        return [SecurityCheck("policy_expired", Severity.INFO, "Minting policy has expired: supply is fixed")]
    return []


def _holder_message(data: TokenData) -> str:
    holders = data.holder_count
    if data.age_days is not None and data.age_days < 7:
        return f"New token with only {holders} holders"
    if data.market_cap is not None and data.market_cap > 1_000_000:
        return f"Only {holders} holders for a ${data.market_cap:,.0f} market cap"
    return f"Low holder count ({holders})"
