from datetime import datetime

from pydantic import BaseModel, Field

from gridpulse.schemas.forecast import ForecastAnalysis, OverloadAlert


class TransformerCreate(BaseModel):
    transformer_id: str = Field(min_length=1, max_length=64)
    name: str
    barangay: str | None = None
    capacity_kw: float


class TransformerStatus(BaseModel):
    transformer_id: str
    name: str
    barangay: str | None = None
    capacity_kw: float
    has_baseline: bool = False
    reading_count: int = 0
    recent_mean_kw: float | None = None
    updated_at: datetime | None = None


class LoadReading(BaseModel):
    load_kw: float = Field(ge=0)


class TransformerForecast(BaseModel):
    transformer_id: str
    name: str
    barangay: str | None = None
    capacity_kw: float
    current_hour: int
    recent_mean_kw: float
    computed_at: datetime
    forecast: ForecastAnalysis


class FleetAlert(BaseModel):
    transformer_id: str
    transformer_name: str
    barangay: str | None = None
    alert: OverloadAlert
