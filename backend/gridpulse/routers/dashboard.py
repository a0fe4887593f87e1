from datetime import datetime, timezone

from fastapi import APIRouter, Query

from gridpulse.config import settings
from gridpulse.schemas.dashboard import DashboardResponse, FleetSummary
from gridpulse.schemas.forecast import RiskLevel
from gridpulse.schemas.transformer import FleetAlert
from gridpulse.services import fleet

router = APIRouter(tags=["dashboard"])


@router.get("/dashboard/", response_model=DashboardResponse)
async def get_dashboard(barangay: str | None = Query(None)):
    """Composite dashboard endpoint: latest fleet forecasts and overload alerts."""
    transformers = fleet.list_transformers(barangay)
    forecasts = fleet.get_fleet_forecasts(barangay)
    alerts = fleet.get_fleet_alerts(forecasts)

    peak_levels = [
        f.forecast.peak_risk.risk_level for f in forecasts if f.forecast.peak_risk
    ]
    load_pcts = [
        f.recent_mean_kw / f.capacity_kw * 100 for f in forecasts if f.capacity_kw > 0
    ]

    summary = FleetSummary(
        total_transformers=len(transformers),
        forecasted_transformers=len(forecasts),
        alerts_count=len(alerts),
        critical_transformers=sum(1 for lvl in peak_levels if lvl == RiskLevel.CRITICAL),
        warning_transformers=sum(1 for lvl in peak_levels if lvl == RiskLevel.HIGH),
        average_load_pct=round(sum(load_pcts) / len(load_pcts), 1) if load_pcts else 0.0,
    )

    return DashboardResponse(
        barangay=barangay,
        as_of=datetime.now(timezone.utc),
        refresh_interval_seconds=settings.dashboard_refresh_interval,
        summary=summary,
        transformers=forecasts,
        alerts=alerts,
        recommendations=_build_recommendations(summary, alerts),
    )


def _build_recommendations(summary: FleetSummary, alerts: list[FleetAlert]) -> list[str]:
    notes = []
    if summary.critical_transformers > 0:
        notes.append(
            f"Schedule immediate maintenance for {summary.critical_transformers} critical transformer(s)"
        )
    if summary.warning_transformers > 3:
        notes.append("Consider load balancing across transformers in warning state")
    if alerts:
        nearest = alerts[0]
        notes.append(
            f"Prepare for predicted overload at {nearest.transformer_name}"
            f" in {nearest.alert.hours_ahead} hours"
        )
    if summary.average_load_pct > 75:
        notes.append("Average grid load is high - consider infrastructure expansion")
    return notes
