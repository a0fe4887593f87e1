"""Fleet service: transformer registry, recent load windows, and forecast cache.

Each registered transformer owns a LoadForecaster. Registry entries and
baselines are persisted; load readings and forecasts live in memory only.
"""

import logging
import threading
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
from zoneinfo import ZoneInfo

from sqlalchemy.orm import Session

from gridpulse.config import settings
from gridpulse.database import SessionLocal
from gridpulse.models.transformer import TransformerRecord
from gridpulse.schemas.forecast import BaselineUpdate
from gridpulse.schemas.transformer import (
    FleetAlert,
    TransformerCreate,
    TransformerForecast,
    TransformerStatus,
)
from gridpulse.services import overload_alert
from gridpulse.services.baseline import (
    BaselineNotConfiguredError,
    HourlyBaseline,
    IncompleteBaselineError,
    baseline_from_pattern,
)
from gridpulse.services.load_forecast import LoadForecaster

logger = logging.getLogger(__name__)


@dataclass
class _Transformer:
    transformer_id: str
    name: str
    barangay: str | None
    capacity_kw: float
    forecaster: LoadForecaster
    readings: deque = field(default_factory=deque)
    updated_at: datetime | None = None


_registry: dict[str, _Transformer] = {}
_forecast_cache: dict[str, TransformerForecast] = {}
_lock = threading.Lock()


def site_current_hour() -> int:
    return datetime.now(ZoneInfo(settings.site_timezone)).hour


def resolve_baseline(update: BaselineUpdate) -> HourlyBaseline:
    """Explicit hourly averages win over a pattern; neither means the configured default pattern."""
    if update.hourly_averages is not None:
        return HourlyBaseline.from_mapping(update.hourly_averages)
    if update.pattern is not None:
        p = update.pattern
        return baseline_from_pattern(p.peak_hour, p.peak_load_kw, p.base_load_kw)
    return baseline_from_pattern(
        settings.baseline_peak_hour,
        settings.baseline_peak_load_kw,
        settings.baseline_base_load_kw,
    )


def load_registry() -> int:
    """Populate the in-memory registry from the database."""
    db: Session = SessionLocal()
    try:
        records = db.query(TransformerRecord).all()
        with _lock:
            for rec in records:
                forecaster = LoadForecaster(alpha=settings.forecast_alpha)
                if rec.baseline_kw:
                    try:
                        forecaster.set_baseline(HourlyBaseline(tuple(rec.baseline_kw)))
                    except IncompleteBaselineError as e:
                        logger.warning("Ignoring stored baseline for %s: %s", rec.transformer_id, e)
                _registry[rec.transformer_id] = _Transformer(
                    transformer_id=rec.transformer_id,
                    name=rec.name,
                    barangay=rec.barangay,
                    capacity_kw=rec.capacity_kw,
                    forecaster=forecaster,
                    readings=deque(maxlen=settings.reading_window_size),
                    updated_at=rec.updated_at,
                )
        logger.info("Loaded %d transformers from database", len(records))
        return len(records)
    finally:
        db.close()


def register_transformer(data: TransformerCreate) -> TransformerStatus:
    """Add a transformer, or update name/barangay/capacity of an existing one."""
    now = datetime.now(timezone.utc)
    with _lock:
        entry = _registry.get(data.transformer_id)
        if entry is None:
            entry = _Transformer(
                transformer_id=data.transformer_id,
                name=data.name,
                barangay=data.barangay,
                capacity_kw=data.capacity_kw,
                forecaster=LoadForecaster(alpha=settings.forecast_alpha),
                readings=deque(maxlen=settings.reading_window_size),
            )
            _registry[data.transformer_id] = entry
        else:
            entry.name = data.name
            entry.barangay = data.barangay
            entry.capacity_kw = data.capacity_kw
        entry.updated_at = now
        _forecast_cache.pop(data.transformer_id, None)

    _persist(entry)
    return _status(entry)


def set_baseline(transformer_id: str, update: BaselineUpdate) -> TransformerStatus | None:
    entry = _registry.get(transformer_id)
    if entry is None:
        return None

    entry.forecaster.set_baseline(resolve_baseline(update))
    entry.updated_at = datetime.now(timezone.utc)
    with _lock:
        _forecast_cache.pop(transformer_id, None)
    _persist(entry)
    return _status(entry)


def record_reading(transformer_id: str, load_kw: float) -> TransformerStatus | None:
    entry = _registry.get(transformer_id)
    if entry is None:
        return None
    with _lock:
        entry.readings.append(load_kw)
    return _status(entry)


def get_status(transformer_id: str) -> TransformerStatus | None:
    entry = _registry.get(transformer_id)
    return _status(entry) if entry else None


def list_transformers(barangay: str | None = None) -> list[TransformerStatus]:
    with _lock:
        entries = list(_registry.values())
    return [
        _status(e) for e in sorted(entries, key=lambda e: e.transformer_id)
        if barangay is None or e.barangay == barangay
    ]


def forecast_transformer(
    transformer_id: str, current_hour: int | None = None,
) -> TransformerForecast | None:
    """Forecast one transformer from its recent mean load.

    Without readings the baseline at the current hour stands in for the
    recent mean, so the forecast is the baseline itself.
    Raises BaselineNotConfiguredError if no baseline has been set.
    """
    entry = _registry.get(transformer_id)
    if entry is None:
        return None

    hour = site_current_hour() if current_hour is None else current_hour

    with _lock:
        readings = list(entry.readings)
    recent_mean = sum(readings) / len(readings) if readings else None

    points = entry.forecaster.forecast_24h(hour, recent_mean, entry.capacity_kw)
    if recent_mean is None:
        recent_mean = points[0].baseline_load_kw
    analysis = overload_alert.analyze(
        points,
        critical_threshold=settings.critical_threshold,
        min_lead_time_hours=settings.min_lead_time_hours,
    )

    result = TransformerForecast(
        transformer_id=entry.transformer_id,
        name=entry.name,
        barangay=entry.barangay,
        capacity_kw=entry.capacity_kw,
        current_hour=hour,
        recent_mean_kw=round(recent_mean, 2),
        computed_at=datetime.now(timezone.utc),
        forecast=analysis,
    )
    with _lock:
        _forecast_cache[transformer_id] = result
    return result


def refresh_all() -> int:
    """Recompute forecasts for every transformer with a baseline."""
    with _lock:
        ids = list(_registry)
    logger.info("Starting forecast refresh for %d transformers", len(ids))

    hour = site_current_hour()
    refreshed = 0
    for transformer_id in ids:
        try:
            if forecast_transformer(transformer_id, current_hour=hour) is not None:
                refreshed += 1
        except BaselineNotConfiguredError:
            logger.warning("Skipping %s: baseline not configured", transformer_id)

    logger.info("Forecast refresh complete: %d/%d transformers", refreshed, len(ids))
    return refreshed


def get_cached_forecast(transformer_id: str) -> TransformerForecast | None:
    return _forecast_cache.get(transformer_id)


def get_fleet_forecasts(barangay: str | None = None) -> list[TransformerForecast]:
    with _lock:
        forecasts = list(_forecast_cache.values())
    return sorted(
        (f for f in forecasts if barangay is None or f.barangay == barangay),
        key=lambda f: f.transformer_id,
    )


def get_fleet_alerts(forecasts: list[TransformerForecast]) -> list[FleetAlert]:
    """Active overload alerts, nearest onset first."""
    alerts = [
        FleetAlert(
            transformer_id=f.transformer_id,
            transformer_name=f.name,
            barangay=f.barangay,
            alert=f.forecast.overload_alert,
        )
        for f in forecasts if f.forecast.overload_alert is not None
    ]
    alerts.sort(key=lambda a: (a.alert.hours_ahead, -a.alert.risk_ratio))
    return alerts


def _status(entry: _Transformer) -> TransformerStatus:
    readings = list(entry.readings)
    return TransformerStatus(
        transformer_id=entry.transformer_id,
        name=entry.name,
        barangay=entry.barangay,
        capacity_kw=entry.capacity_kw,
        has_baseline=entry.forecaster.baseline is not None,
        reading_count=len(readings),
        recent_mean_kw=round(sum(readings) / len(readings), 2) if readings else None,
        updated_at=entry.updated_at,
    )


def _persist(entry: _Transformer):
    baseline = entry.forecaster.baseline
    db: Session = SessionLocal()
    try:
        record = db.get(TransformerRecord, entry.transformer_id)
        if record is None:
            record = TransformerRecord(transformer_id=entry.transformer_id)
            db.add(record)
        record.name = entry.name
        record.barangay = entry.barangay
        record.capacity_kw = entry.capacity_kw
        record.baseline_kw = list(baseline.loads_kw) if baseline else None
        db.commit()
    except Exception as e:
        db.rollback()
        logger.error("Failed to persist transformer %s: %s", entry.transformer_id, e)
    finally:
        db.close()
