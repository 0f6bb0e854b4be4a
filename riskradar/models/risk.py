"""Scoring output types.

Everything here is immutable once built. Dataclasses are used for the
intermediate pieces the engine passes around; RiskResult is a pydantic
model so the API layer can dump it straight to JSON.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from types import MappingProxyType

from pydantic import BaseModel, ConfigDict, field_serializer, field_validator

from riskradar.models.token import ChainType


class FactorName(str, Enum):
    SUPPLY_DILUTION = "supply_dilution"
    HOLDER_CONCENTRATION = "holder_concentration"
    LIQUIDITY_DEPTH = "liquidity_depth"
    CONTRACT_CONTROL = "contract_control"
    TAX_FEE = "tax_fee"
    ACTIVITY = "activity"
    BURN_DEFLATION = "burn_deflation"
    TOKEN_AGE = "token_age"

    @property
    def label(self) -> str:
        return self.value.replace("_", " ")


class FactorQuality(str, Enum):
    FULL = "FULL"
    PARTIAL = "PARTIAL"
    ESTIMATED = "ESTIMATED"
    MISSING = "MISSING"


class Severity(str, Enum):
    CRITICAL = "CRITICAL"
    WARNING = "WARNING"
    INFO = "INFO"


class RiskLevel(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"


class DataTier(str, Enum):
    FULL = "FULL"
    PARTIAL = "PARTIAL"
    MINIMAL = "MINIMAL"


@dataclass(frozen=True)
class FactorScore:
    """One independently scored risk dimension (0 = safest, 100 = riskiest)."""

    name: FactorName
    score: int
    quality: FactorQuality
    rationale: str


@dataclass(frozen=True)
class SecurityCheck:
    """A discrete finding, independent of the continuous factor scores."""

    name: str
    severity: Severity
    message: str
    score_hint: int = 0  # suggested risk contribution, informational only


@dataclass(frozen=True)
class FactorContribution:
    """score × weight = contribution, as summed into the base score."""

    name: FactorName
    score: int
    weight: float
    contribution: float


@dataclass(frozen=True)
class AppliedOverride:
    name: str  # "critical_flags" or "battle_tested"
    reason: str
    score_before: int
    score_after: int


@dataclass(frozen=True)
class UpcomingRisks:
    next_30_days: float  # fraction of supply unlocking
    forecast: str  # LOW / MEDIUM / HIGH / EXTREME


class RiskResult(BaseModel):
    """Complete, explainable analysis result handed to the API/UI layer.

    Sequences are tuples and breakdown is a read-only mapping, so a cached
    result cannot be edited in place by a consumer.
    """

    model_config = ConfigDict(frozen=True)

    overall_risk_score: int
    risk_level: RiskLevel
    confidence_score: int
    data_tier: DataTier
    data_freshness: float
    breakdown: Mapping[str, int]
    critical_flags: tuple[str, ...]
    warning_flags: tuple[str, ...]
    positive_signals: tuple[str, ...]
    data_sources: tuple[str, ...]
    upcoming_risks: UpcomingRisks | None = None

    override_applied: bool = False
    override_reason: str | None = None
    overrides: tuple[AppliedOverride, ...] = ()

    calculated_score: int
    chain: ChainType
    factor_scores: tuple[FactorScore, ...]
    contributions: tuple[FactorContribution, ...]
    weighting_rationale: str
    analyzed_at: datetime

    @field_validator("breakdown", mode="after")
    @classmethod
    def _freeze_breakdown(cls, v: Mapping[str, int]) -> Mapping[str, int]:
        return MappingProxyType(dict(v))

    @field_serializer("breakdown")
    def _dump_breakdown(self, v: Mapping[str, int]) -> dict[str, int]:
        return dict(v)
