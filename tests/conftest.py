"""Shared token fixtures."""

from datetime import datetime, timezone

import pytest

from riskradar.models.token import ChainType, TokenData

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def established_token() -> TokenData:
    """Large, long-lived, fully renounced EVM token with complete data."""
    return TokenData(
        address="0x514910771af9ca656af840dff83e8264ecf986ca",
        chain=ChainType.EVM,
        chain_id=1,
        name="Chainlink",
        symbol="LINK",
        market_cap=2_340_000_000,
        fully_diluted_value=2_340_000_000,
        liquidity_usd=18_900_000,
        volume_24h=300_000_000,
        price=13.5,
        total_supply=1_000_000_000,
        circulating_supply=1_000_000_000,
        max_supply=1_000_000_000,
        burned_supply=0,
        holder_count=492_693,
        top10_holders_pct=0.12,
        tx_count_24h=25_000,
        age_days=245,
        is_honeypot=False,
        is_mintable=False,
        owner_renounced=True,
        is_open_source=True,
        is_proxy=False,
        buy_tax_pct=0,
        sell_tax_pct=0,
        liquidity_locked=True,
        has_detailed_security_data=True,
        data_timestamp=NOW,
        data_sources=("coingecko", "goplus", "etherscan"),
    )


@pytest.fixture
def risky_new_token() -> TokenData:
    """Two-day-old mintable token with a punitive sell tax and whale-held supply."""
    return TokenData(
        address="0xdeadbeef00000000000000000000000000000001",
        chain=ChainType.EVM,
        chain_id=56,
        name="Moon Rocket",
        symbol="MRKT",
        market_cap=50_000,
        liquidity_usd=2_000,
        price=0.00005,
        total_supply=1_000_000_000,
        circulating_supply=400_000_000,
        max_supply=None,
        holder_count=35,
        top10_holders_pct=0.85,
        tx_count_24h=120,
        age_days=2,
        is_honeypot=False,
        is_mintable=True,
        owner_renounced=False,
        is_open_source=True,
        is_proxy=False,
        buy_tax_pct=5,
        sell_tax_pct=25,
        has_detailed_security_data=True,
        data_timestamp=NOW,
        data_sources=("dexscreener", "goplus"),
    )


@pytest.fixture
def market_only_token() -> TokenData:
    """Only market data fetched, every security provider failed."""
    return TokenData(
        address="0xfa11bac000000000000000000000000000000002",
        chain=ChainType.EVM,
        market_cap=3_000_000,
        liquidity_usd=250_000,
        volume_24h=80_000,
        price=0.03,
        has_detailed_security_data=False,
        data_timestamp=NOW,
        data_sources=("coingecko",),
    )
