from fastapi import APIRouter, HTTPException, Query

from gridpulse.schemas.forecast import BaselineUpdate
from gridpulse.schemas.transformer import LoadReading, TransformerCreate, TransformerForecast, TransformerStatus
from gridpulse.services import fleet
from gridpulse.services.baseline import BaselineNotConfiguredError, IncompleteBaselineError

router = APIRouter(prefix="/transformers", tags=["transformers"])


@router.get("/", response_model=list[TransformerStatus])
async def list_transformers(barangay: str | None = Query(None)):
    """List registered transformers, optionally filtered by barangay."""
    return fleet.list_transformers(barangay)


@router.post("/", response_model=TransformerStatus, status_code=201)
async def register_transformer(data: TransformerCreate):
    return fleet.register_transformer(data)


@router.get("/{transformer_id}", response_model=TransformerStatus)
async def get_transformer(transformer_id: str):
    status = fleet.get_status(transformer_id)
    if status is None:
        raise HTTPException(status_code=404, detail=f"Transformer {transformer_id} not found")
    return status


@router.put("/{transformer_id}/baseline", response_model=TransformerStatus)
async def set_baseline(transformer_id: str, update: BaselineUpdate):
    """Replace the transformer's hourly baseline (explicit averages or pattern)."""
    try:
        status = fleet.set_baseline(transformer_id, update)
    except IncompleteBaselineError as e:
        raise HTTPException(status_code=422, detail=str(e))
    if status is None:
        raise HTTPException(status_code=404, detail=f"Transformer {transformer_id} not found")
    return status


@router.post("/{transformer_id}/readings", response_model=TransformerStatus)
async def add_reading(transformer_id: str, reading: LoadReading):
    status = fleet.record_reading(transformer_id, reading.load_kw)
    if status is None:
        raise HTTPException(status_code=404, detail=f"Transformer {transformer_id} not found")
    return status


@router.get("/{transformer_id}/forecast", response_model=TransformerForecast)
async def get_forecast(
    transformer_id: str,
    current_hour: int | None = Query(None, ge=0, le=23),
):
    """24h forecast with peak risk and overload alert, at the site's current hour by default."""
    try:
        result = fleet.forecast_transformer(transformer_id, current_hour=current_hour)
    except BaselineNotConfiguredError as e:
        raise HTTPException(status_code=409, detail=str(e))
    if result is None:
        raise HTTPException(status_code=404, detail=f"Transformer {transformer_id} not found")
    return result
