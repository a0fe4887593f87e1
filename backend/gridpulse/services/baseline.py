"""Hourly baseline model.

Expected load (kW) for each hour of the day. Either supplied from historical
hourly averages or synthesized as a raised cosine around the evening peak.
"""

import math
from dataclasses import dataclass
from typing import Mapping

HOURS_PER_DAY = 24


class BaselineNotConfiguredError(RuntimeError):
    """Raised when a forecast is requested before any baseline is set."""


class IncompleteBaselineError(ValueError):
    """Raised when hourly averages do not cover exactly hours 0-23."""


@dataclass(frozen=True)
class HourlyBaseline:
    loads_kw: tuple[float, ...]  # index = hour of day

    def __post_init__(self):
        object.__setattr__(self, "loads_kw", tuple(float(v) for v in self.loads_kw))
        if len(self.loads_kw) != HOURS_PER_DAY:
            raise IncompleteBaselineError(
                f"Baseline needs {HOURS_PER_DAY} hourly values, got {len(self.loads_kw)}"
            )

    def __getitem__(self, hour: int) -> float:
        return self.loads_kw[hour]

    @classmethod
    def from_mapping(cls, hourly_averages: Mapping[int, float]) -> "HourlyBaseline":
        hours = {int(h) for h in hourly_averages}
        expected = set(range(HOURS_PER_DAY))
        missing = sorted(expected - hours)
        extra = sorted(hours - expected)
        if missing or extra:
            raise IncompleteBaselineError(
                f"Baseline must cover hours 0-23 (missing={missing}, unexpected={extra})"
            )
        by_hour = {int(h): float(v) for h, v in hourly_averages.items()}
        return cls(tuple(by_hour[h] for h in range(HOURS_PER_DAY)))

    def as_dict(self) -> dict[int, float]:
        return dict(enumerate(self.loads_kw))


def baseline_from_pattern(
    peak_hour: int = 19,
    peak_load: float = 150.0,
    base_load: float = 80.0,
) -> HourlyBaseline:
    """Raised-cosine diurnal curve: peak_load at peak_hour, base_load 12h away."""
    variation = (peak_load - base_load) / 2
    loads = []
    for hour in range(HOURS_PER_DAY):
        phase = (hour - peak_hour) * 2 * math.pi / HOURS_PER_DAY
        loads.append(base_load + variation * (1 + math.cos(phase)))
    return HourlyBaseline(tuple(loads))
