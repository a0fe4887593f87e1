"""24-hour transformer load forecast.

Hourly baseline + decaying adjustment from the most recent observed load:
    adjustment = alpha * (recent_mean - baseline[current_hour])
    predicted[k] = max(0, baseline[hour + k] + adjustment * exp(-k / 12))
"""

import math
import threading
from datetime import datetime, timedelta, timezone
from typing import Callable, Mapping

from gridpulse.schemas.forecast import ForecastPoint
from gridpulse.services.baseline import (
    HOURS_PER_DAY,
    BaselineNotConfiguredError,
    HourlyBaseline,
    baseline_from_pattern,
)
from gridpulse.services.risk import classify_risk

DEFAULT_ALPHA = 0.5
DECAY_HOURS = 12.0  # e-folding time of the adjustment
FORECAST_HORIZON_HOURS = 24


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class LoadForecaster:
    """Holds one transformer's baseline snapshot and produces forecasts from it.

    The baseline is replaced as a whole; a forecast reads a single snapshot
    so it never mixes two baselines.
    """

    def __init__(
        self,
        alpha: float = DEFAULT_ALPHA,
        clock: Callable[[], datetime] | None = None,
    ):
        self.alpha = alpha
        self._clock = clock or _utc_now
        self._baseline: HourlyBaseline | None = None
        self._lock = threading.Lock()

    @property
    def baseline(self) -> HourlyBaseline | None:
        return self._baseline

    def set_baseline(self, hourly_averages: Mapping[int, float] | HourlyBaseline) -> None:
        if isinstance(hourly_averages, HourlyBaseline):
            snapshot = hourly_averages
        else:
            snapshot = HourlyBaseline.from_mapping(hourly_averages)
        with self._lock:
            self._baseline = snapshot

    def generate_baseline_from_pattern(
        self,
        peak_hour: int = 19,
        peak_load: float = 150.0,
        base_load: float = 80.0,
    ) -> HourlyBaseline:
        snapshot = baseline_from_pattern(peak_hour, peak_load, base_load)
        with self._lock:
            self._baseline = snapshot
        return snapshot

    def forecast_24h(
        self,
        current_hour: int,
        recent_mean_kw: float | None,
        transformer_capacity_kw: float,
    ) -> list[ForecastPoint]:
        """Without a recent mean the baseline at current_hour stands in, so the adjustment is zero."""
        baseline = self._baseline
        if baseline is None:
            raise BaselineNotConfiguredError(
                "Baseline not set. Call set_baseline() or generate_baseline_from_pattern() first."
            )
        if not 0 <= current_hour < HOURS_PER_DAY:
            raise ValueError(f"current_hour must be 0-23, got {current_hour}")

        if recent_mean_kw is None:
            recent_mean_kw = baseline[current_hour]
        adjustment = self.alpha * (recent_mean_kw - baseline[current_hour])
        now = self._clock()

        points: list[ForecastPoint] = []
        for offset in range(FORECAST_HORIZON_HOURS):
            future_hour = (current_hour + offset) % HOURS_PER_DAY
            baseline_load = baseline[future_hour]
            decayed = adjustment * math.exp(-offset / DECAY_HOURS)
            predicted = max(0.0, baseline_load + decayed)
            ratio = _risk_ratio(predicted, transformer_capacity_kw)

            points.append(ForecastPoint(
                hour=future_hour,
                offset_hours=offset,
                timestamp=now + timedelta(hours=offset),
                predicted_load_kw=predicted,
                baseline_load_kw=baseline_load,
                adjustment_kw=decayed,
                risk_ratio=ratio,
                risk_level=classify_risk(ratio),
            ))

        return points


def _risk_ratio(load_kw: float, capacity_kw: float) -> float:
    # Non-positive capacity reports as no risk rather than failing
    if capacity_kw <= 0:
        return 0.0
    return load_kw / capacity_kw
