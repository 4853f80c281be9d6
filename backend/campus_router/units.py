from __future__ import annotations

import math
from dataclasses import dataclass

from .settings import settings


@dataclass(frozen=True)
class UnitConverter:
    """Planar map units to metres, metres to walking minutes."""

    pixel_to_meter_ratio: float = 1.5
    walking_speed_m_per_min: float = 65.0

    def __post_init__(self) -> None:
        if not (self.pixel_to_meter_ratio >= 0.0 and math.isfinite(self.pixel_to_meter_ratio)):
            raise ValueError("pixel_to_meter_ratio must be a finite non-negative number")
        if not (self.walking_speed_m_per_min > 0.0 and math.isfinite(self.walking_speed_m_per_min)):
            raise ValueError("walking_speed_m_per_min must be a finite positive number")

    @classmethod
    def from_settings(cls) -> "UnitConverter":
        return cls(
            pixel_to_meter_ratio=float(settings.pixel_to_meter_ratio),
            walking_speed_m_per_min=float(settings.walking_speed_m_per_min),
        )

    def to_real_distance(self, planar_length: float) -> float:
        return float(planar_length) * self.pixel_to_meter_ratio

    def to_walking_time(self, real_distance: float) -> float:
        if real_distance <= 0.0:
            return 0.0
        return float(real_distance) / self.walking_speed_m_per_min


def _plural(count: int, unit: str) -> str:
    return f"{count} {unit}{'s' if count > 1 else ''}"


def format_walking_time(minutes: float) -> str:
    """Render fractional minutes as e.g. ``"2 minutes 30 seconds"``."""
    if not math.isfinite(minutes) or minutes <= 0.0:
        return "0 seconds"
    whole = int(math.floor(minutes))
    seconds = int(round((minutes - whole) * 60))
    if seconds == 60:
        whole += 1
        seconds = 0
    if whole == 0:
        return _plural(seconds, "second") if seconds else "0 seconds"
    if seconds == 0:
        return _plural(whole, "minute")
    return f"{_plural(whole, 'minute')} {_plural(seconds, 'second')}"
