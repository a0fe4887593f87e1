"""Peak risk and predictive overload alerting over a 24h forecast.

An alert fires for the earliest hour whose load/capacity ratio reaches the
critical threshold with at least the minimum lead time. Confidence grows with
the margin above threshold (0.6 at threshold, capped at 0.95).
"""

from typing import Sequence

from gridpulse.schemas.forecast import ForecastAnalysis, ForecastPoint, OverloadAlert, PeakRiskInfo

DEFAULT_CRITICAL_THRESHOLD = 0.9
DEFAULT_MIN_LEAD_TIME_HOURS = 2

MIN_CONFIDENCE = 0.6
MAX_CONFIDENCE = 0.95
CONFIDENCE_SPAN = 0.2  # ratio margin that moves confidence by 1.0


def find_peak_risk(points: Sequence[ForecastPoint]) -> PeakRiskInfo | None:
    if not points:
        return None

    peak = points[0]
    for point in points[1:]:
        if point.risk_ratio > peak.risk_ratio:
            peak = point

    return PeakRiskInfo(
        hour=peak.hour,
        offset_hours=peak.offset_hours,
        timestamp=peak.timestamp,
        predicted_load_kw=peak.predicted_load_kw,
        risk_ratio=peak.risk_ratio,
        risk_level=peak.risk_level,
    )


def assess_overload_risk(
    points: Sequence[ForecastPoint],
    critical_threshold: float = DEFAULT_CRITICAL_THRESHOLD,
    min_lead_time_hours: int = DEFAULT_MIN_LEAD_TIME_HOURS,
) -> OverloadAlert | None:
    critical = [
        p for p in points
        if p.risk_ratio >= critical_threshold and p.offset_hours >= min_lead_time_hours
    ]
    if not critical:
        return None

    first = min(critical, key=lambda p: p.offset_hours)

    excess = first.risk_ratio - critical_threshold
    confidence = min(MAX_CONFIDENCE, MIN_CONFIDENCE + excess / CONFIDENCE_SPAN)

    return OverloadAlert(
        first_critical_hour=first.hour,
        hours_ahead=first.offset_hours,
        predicted_load_kw=first.predicted_load_kw,
        risk_ratio=first.risk_ratio,
        confidence=confidence,
        critical_hours_count=len(critical),
        recommended_action=_recommended_action(first.risk_ratio, first.offset_hours),
    )


def analyze(
    points: Sequence[ForecastPoint],
    critical_threshold: float = DEFAULT_CRITICAL_THRESHOLD,
    min_lead_time_hours: int = DEFAULT_MIN_LEAD_TIME_HOURS,
) -> ForecastAnalysis:
    """Bundle a forecast with its peak risk and overload alert."""
    return ForecastAnalysis(
        points=list(points),
        peak_risk=find_peak_risk(points),
        overload_alert=assess_overload_risk(points, critical_threshold, min_lead_time_hours),
    )


def _recommended_action(risk_ratio: float, hours_ahead: int) -> str:
    if risk_ratio >= 0.98:
        prefix = "URGENT: Pre-stage crew for immediate intervention. "
    elif risk_ratio >= 0.92:
        prefix = "WARNING: Monitor closely and prepare load management. "
    else:
        prefix = "ADVISORY: Voluntary load reduction recommended. "

    if hours_ahead >= 6:
        timing = f"Expected in {hours_ahead} hours - plan scheduled response."
    elif hours_ahead >= 3:
        timing = f"Expected in {hours_ahead} hours - coordinate with barangay officials."
    else:
        timing = f"Expected in {hours_ahead} hours - immediate action required."

    return prefix + timing
