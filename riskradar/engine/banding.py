from riskradar.models.risk import RiskLevel

MEDIUM_FROM = 30
HIGH_FROM = 60
CRITICAL_FROM = 80


def risk_level_for(score: int) -> RiskLevel:
    if score >= CRITICAL_FROM:
        return RiskLevel.CRITICAL
    if score >= HIGH_FROM:
        return RiskLevel.HIGH
    if score >= MEDIUM_FROM:
        return RiskLevel.MEDIUM
    return RiskLevel.LOW
