"""Load-to-capacity risk classification."""

from gridpulse.schemas.forecast import RiskLevel

CRITICAL_RATIO = 0.95
HIGH_RATIO = 0.85
MODERATE_RATIO = 0.75

RISK_RANK: dict[RiskLevel, int] = {
    RiskLevel.LOW: 0,
    RiskLevel.MODERATE: 1,
    RiskLevel.HIGH: 2,
    RiskLevel.CRITICAL: 3,
}


def classify_risk(risk_ratio: float) -> RiskLevel:
    if risk_ratio >= CRITICAL_RATIO:
        return RiskLevel.CRITICAL
    if risk_ratio >= HIGH_RATIO:
        return RiskLevel.HIGH
    if risk_ratio >= MODERATE_RATIO:
        return RiskLevel.MODERATE
    return RiskLevel.LOW
