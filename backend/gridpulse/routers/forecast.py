from fastapi import APIRouter, HTTPException

from gridpulse.config import settings
from gridpulse.schemas.forecast import BaselinePattern, ForecastAnalysis, ForecastRequest
from gridpulse.services import overload_alert
from gridpulse.services.baseline import IncompleteBaselineError, baseline_from_pattern
from gridpulse.services.fleet import resolve_baseline
from gridpulse.services.load_forecast import LoadForecaster

router = APIRouter(prefix="/forecast", tags=["forecast"])


@router.post("/", response_model=ForecastAnalysis)
async def run_forecast(req: ForecastRequest):
    """One-off 24h forecast from a caller-supplied baseline and recent load."""
    try:
        baseline = resolve_baseline(req)
    except IncompleteBaselineError as e:
        raise HTTPException(status_code=422, detail=str(e))

    alpha = settings.forecast_alpha if req.alpha is None else req.alpha
    forecaster = LoadForecaster(alpha=alpha)
    forecaster.set_baseline(baseline)
    points = forecaster.forecast_24h(
        req.current_hour, req.recent_mean_kw, req.transformer_capacity_kw,
    )

    return overload_alert.analyze(
        points,
        critical_threshold=(
            settings.critical_threshold if req.critical_threshold is None else req.critical_threshold
        ),
        min_lead_time_hours=(
            settings.min_lead_time_hours if req.min_lead_time_hours is None else req.min_lead_time_hours
        ),
    )


@router.post("/baseline", response_model=dict[int, float])
async def synthesize_baseline(pattern: BaselinePattern):
    """Raised-cosine diurnal baseline for the given peak hour and loads."""
    baseline = baseline_from_pattern(pattern.peak_hour, pattern.peak_load_kw, pattern.base_load_kw)
    return {hour: round(load, 2) for hour, load in baseline.as_dict().items()}
