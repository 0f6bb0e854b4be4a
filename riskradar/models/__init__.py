from riskradar.models.risk import (
    AppliedOverride,
    DataTier,
    FactorContribution,
    FactorName,
    FactorQuality,
    FactorScore,
    RiskLevel,
    RiskResult,
    SecurityCheck,
    Severity,
    UpcomingRisks,
)
from riskradar.models.token import ChainType, TokenData

__all__ = [
    "AppliedOverride",
    "ChainType",
    "DataTier",
    "FactorContribution",
    "FactorName",
    "FactorQuality",
    "FactorScore",
    "RiskLevel",
    "RiskResult",
    "SecurityCheck",
    "Severity",
    "TokenData",
    "UpcomingRisks",
]
