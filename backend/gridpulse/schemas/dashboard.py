from datetime import datetime

from pydantic import BaseModel

from gridpulse.schemas.transformer import FleetAlert, TransformerForecast


class FleetSummary(BaseModel):
    total_transformers: int = 0
    forecasted_transformers: int = 0
    alerts_count: int = 0
    critical_transformers: int = 0  # peak risk CRITICAL within 24h
    warning_transformers: int = 0  # peak risk HIGH within 24h
    average_load_pct: float = 0.0


class DashboardResponse(BaseModel):
    barangay: str | None = None
    as_of: datetime
    refresh_interval_seconds: int = 15
    summary: FleetSummary
    transformers: list[TransformerForecast] = []
    alerts: list[FleetAlert] = []
    recommendations: list[str] = []
