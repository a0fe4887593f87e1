from datetime import datetime
from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_serializer

# Display precision applied when a record is serialized
KW_DECIMALS = 2
RATIO_DECIMALS = 3


class RiskLevel(str, Enum):
    LOW = "LOW"
    MODERATE = "MODERATE"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"


class ForecastPoint(BaseModel):
    model_config = ConfigDict(frozen=True)

    hour: int  # hour of day, 0-23
    offset_hours: int  # hours ahead of now, 0-23
    timestamp: datetime
    predicted_load_kw: float
    baseline_load_kw: float
    adjustment_kw: float
    risk_ratio: float  # predicted load / capacity
    risk_level: RiskLevel

    @field_serializer("predicted_load_kw", "baseline_load_kw", "adjustment_kw")
    def _round_kw(self, value: float) -> float:
        return round(value, KW_DECIMALS)

    @field_serializer("risk_ratio")
    def _round_ratio(self, value: float) -> float:
        return round(value, RATIO_DECIMALS)


class PeakRiskInfo(BaseModel):
    model_config = ConfigDict(frozen=True)

    hour: int
    offset_hours: int
    timestamp: datetime
    predicted_load_kw: float
    risk_ratio: float
    risk_level: RiskLevel

    @field_serializer("predicted_load_kw")
    def _round_kw(self, value: float) -> float:
        return round(value, KW_DECIMALS)

    @field_serializer("risk_ratio")
    def _round_ratio(self, value: float) -> float:
        return round(value, RATIO_DECIMALS)


class OverloadAlert(BaseModel):
    model_config = ConfigDict(frozen=True)

    alert_type: Literal["PREDICTIVE_OVERLOAD"] = "PREDICTIVE_OVERLOAD"
    first_critical_hour: int
    hours_ahead: int
    predicted_load_kw: float
    risk_ratio: float
    confidence: float  # 0.6-0.95
    critical_hours_count: int
    recommended_action: str

    @field_serializer("predicted_load_kw")
    def _round_kw(self, value: float) -> float:
        return round(value, KW_DECIMALS)

    @field_serializer("risk_ratio", "confidence")
    def _round_ratio(self, value: float) -> float:
        return round(value, RATIO_DECIMALS)


class ForecastAnalysis(BaseModel):
    model_config = ConfigDict(frozen=True)

    points: list[ForecastPoint] = []
    peak_risk: PeakRiskInfo | None = None
    overload_alert: OverloadAlert | None = None


class BaselinePattern(BaseModel):
    peak_hour: int = Field(default=19, ge=0, le=23)
    peak_load_kw: float = Field(default=150.0, ge=0)
    base_load_kw: float = Field(default=80.0, ge=0)


class BaselineUpdate(BaseModel):
    """Either explicit hourly averages (all 24 hours) or a synthetic pattern."""
    hourly_averages: dict[int, float] | None = None
    pattern: BaselinePattern | None = None


class ForecastRequest(BaselineUpdate):
    current_hour: int = Field(ge=0, le=23)
    recent_mean_kw: float
    transformer_capacity_kw: float
    alpha: float | None = Field(default=None, ge=0, le=1)
    critical_threshold: float | None = Field(default=None, gt=0)
    min_lead_time_hours: int | None = Field(default=None, ge=0, le=23)
