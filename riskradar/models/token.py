"""Provider-agnostic token input.

Every field has exactly one canonical unit:

- USD amounts (market_cap, liquidity_usd, ...) are plain dollars, >= 0
- supply amounts are token units, >= 0; max_supply=None means uncapped
- top10_holders_pct and next_unlock_30d_pct are fractions (0-1)
- buy_tax_pct, sell_tax_pct and deployer_holding_pct are percents (0-100)
- liquidity_change_7d is a fractional change (-0.4 = dropped 40%)

None is the only way to say "unknown". Conversion from provider units
happens in riskradar.ingest, never inside scoring.

Payload keys are accepted as snake_case or camelCase. Digit runs may be
followed by either case (volume24h and volume24H), and a few provider
spellings are listed explicitly in _PROVIDER_ALIASES.
"""

import re
from datetime import datetime, timezone
from enum import Enum

from pydantic import (
    AliasChoices,
    AliasGenerator,
    BaseModel,
    ConfigDict,
    Field,
    ValidationInfo,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel

EVM_CHAIN_IDS = frozenset({1, 10, 56, 137, 250, 8453, 42161, 43114, 11155111})
SOLANA_CHAIN_ID = 501
CARDANO_CHAIN_ID = 1815

# Providers round supplies independently; tolerate tiny overshoot
_SUPPLY_TOLERANCE = 1.001

# Spellings to_camel cannot derive from the field name
_PROVIDER_ALIASES: dict[str, tuple[str, ...]] = {
    "liquidity_usd": ("liquidityUSD",),
    "top10_holders_pct": ("top10HoldersPercentage",),
    "fully_diluted_value": ("fdv",),
}


def input_aliases(name: str) -> tuple[str, ...]:
    """Every payload key accepted for a field, snake_case name first."""
    camel = to_camel(name)
    digit_lower = re.sub(r"(\d)([A-Z])", lambda m: m.group(1) + m.group(2).lower(), camel)
    keys = [name, camel, digit_lower, *_PROVIDER_ALIASES.get(name, ())]
    return tuple(dict.fromkeys(keys))


def _validation_alias(name: str) -> AliasChoices:
    return AliasChoices(*input_aliases(name))


class ChainType(str, Enum):
    """Coarse chain family. Selects the weight vector and security rules."""

    EVM = "EVM"
    SOLANA = "SOLANA"
    CARDANO = "CARDANO"
    OTHER = "OTHER"

    @classmethod
    def from_chain_id(cls, chain_id: int | None) -> "ChainType":
        if chain_id in EVM_CHAIN_IDS:
            return cls.EVM
        if chain_id == SOLANA_CHAIN_ID:
            return cls.SOLANA
        if chain_id == CARDANO_CHAIN_ID:
            return cls.CARDANO
        return cls.OTHER


class TokenData(BaseModel):
    """Already-fetched token data for one analysis request."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        allow_inf_nan=False,
        populate_by_name=True,
        alias_generator=AliasGenerator(validation_alias=_validation_alias),
    )

    # Identifiers
    address: str
    chain: ChainType = ChainType.OTHER
    chain_id: int | None = None
    name: str | None = None
    symbol: str | None = None

    # Market (USD)
    market_cap: float | None = Field(default=None, ge=0)
    fully_diluted_value: float | None = Field(default=None, ge=0)
    liquidity_usd: float | None = Field(default=None, ge=0)
    volume_24h: float | None = Field(default=None, ge=0)
    price: float | None = Field(default=None, ge=0)

    # Supply (token units)
    total_supply: float | None = Field(default=None, ge=0)
    circulating_supply: float | None = Field(default=None, ge=0)
    max_supply: float | None = Field(default=None, ge=0)  # None = uncapped
    burned_supply: float | None = Field(default=None, ge=0)

    # Holders
    holder_count: int | None = Field(default=None, ge=0)
    top10_holders_pct: float | None = Field(default=None, ge=0, le=1)  # fraction

    # Activity
    tx_count_24h: int | None = Field(default=None, ge=0)
    age_days: float | None = Field(default=None, ge=0)
    unique_buyers_24h: int | None = Field(default=None, ge=0)
    unique_sellers_24h: int | None = Field(default=None, ge=0)
    holders_7d_ago: int | None = Field(default=None, ge=0)
    holders_30d_ago: int | None = Field(default=None, ge=0)

    # Discrete security findings
    is_honeypot: bool | None = None
    is_mintable: bool | None = None
    owner_renounced: bool | None = None
    owner_address: str | None = None
    is_open_source: bool | None = None
    is_proxy: bool | None = None
    cannot_buy: bool | None = None
    tax_modifiable: bool | None = None
    liquidity_locked: bool | None = None
    freeze_authority: bool | None = None  # Solana
    policy_locked: bool | None = None  # Cardano minting policy time-lock
    policy_expired: bool | None = None
    buy_tax_pct: float | None = Field(default=None, ge=0, le=100)
    sell_tax_pct: float | None = Field(default=None, ge=0, le=100)
    deployer_holding_pct: float | None = Field(default=None, ge=0, le=100)
    deployer_tx_last_7_days: int | None = Field(default=None, ge=0)

    # Forward-looking / trend inputs
    next_unlock_30d_pct: float | None = Field(default=None, ge=0, le=1)  # fraction
    liquidity_change_7d: float | None = Field(default=None, ge=-1)

    has_detailed_security_data: bool = False
    data_timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    data_sources: tuple[str, ...] = Field(min_length=1)

    @model_validator(mode="before")
    @classmethod
    def _derive_chain(cls, data):
        """Fill the chain family from chain_id when the caller omitted it."""
        if isinstance(data, dict) and data.get("chain") is None:
            chain_id = data.get("chain_id", data.get("chainId"))
            if isinstance(chain_id, int):
                data = {**data, "chain": ChainType.from_chain_id(chain_id)}
        return data

    @field_validator("chain", mode="before")
    @classmethod
    def _upper_chain(cls, v):
        if isinstance(v, str):
            return v.strip().upper()
        return v

    @field_validator("address")
    @classmethod
    def _strip_address(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("address must not be empty")
        return v

    @field_validator("circulating_supply")
    @classmethod
    def _circulating_within_total(cls, v: float | None, info: ValidationInfo) -> float | None:
        total = info.data.get("total_supply")
        if v is None or total is None:
            return v
        if v > total * _SUPPLY_TOLERANCE:
            raise ValueError(f"circulating supply {v:g} exceeds total supply {total:g}")
        return min(v, total)

    @field_validator("burned_supply")
    @classmethod
    def _burned_within_total(cls, v: float | None, info: ValidationInfo) -> float | None:
        total = info.data.get("total_supply")
        if v is None or total is None or total == 0:
            return v
        if v > total * _SUPPLY_TOLERANCE:
            raise ValueError(f"burned supply {v:g} exceeds total supply {total:g}")
        return min(v, total)

    @field_validator("data_timestamp")
    @classmethod
    def _assume_utc(cls, v: datetime) -> datetime:
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v

    @field_validator("data_sources")
    @classmethod
    def _clean_sources(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        seen: list[str] = []
        for src in v:
            src = src.strip()
            if src and src not in seen:
                seen.append(src)
        if not seen:
            raise ValueError("at least one data source must be named")
        return tuple(seen)

    @property
    def is_uncapped(self) -> bool:
        return self.max_supply is None

    @property
    def display_name(self) -> str:
        if self.name and self.symbol:
            return f"{self.name} ({self.symbol})"
        return self.name or self.symbol or self.address[:12]
