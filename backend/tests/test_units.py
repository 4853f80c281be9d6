from __future__ import annotations

import math

import pytest

from campus_router.settings import settings
from campus_router.units import UnitConverter, format_walking_time


def test_zero_distance_converts_to_zero_time() -> None:
    converter = UnitConverter()
    assert converter.to_walking_time(converter.to_real_distance(0.0)) == 0.0


def test_conversion_uses_configured_ratio_and_speed() -> None:
    converter = UnitConverter(pixel_to_meter_ratio=2.0, walking_speed_m_per_min=80.0)

    assert converter.to_real_distance(10.0) == 20.0
    assert converter.to_walking_time(20.0) == 0.25
    assert math.isinf(converter.to_real_distance(math.inf))


def test_from_settings_reads_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(settings, "pixel_to_meter_ratio", 3.0)
    monkeypatch.setattr(settings, "walking_speed_m_per_min", 75.0)

    converter = UnitConverter.from_settings()
    assert converter.pixel_to_meter_ratio == 3.0
    assert converter.walking_speed_m_per_min == 75.0


@pytest.mark.parametrize("speed", [0.0, -1.0, math.inf])
def test_walking_speed_must_be_positive_and_finite(speed: float) -> None:
    with pytest.raises(ValueError):
        UnitConverter(walking_speed_m_per_min=speed)


@pytest.mark.parametrize(
    ("minutes", "expected"),
    [
        (0.0, "0 seconds"),
        (12.0 / 65.0, "11 seconds"),
        (1.0 / 60.0, "1 second"),
        (1.0, "1 minute"),
        (2.5, "2 minutes 30 seconds"),
        (1.0 + 1.0 / 60.0, "1 minute 1 second"),
        (1.999, "2 minutes"),
    ],
)
def test_format_walking_time(minutes: float, expected: str) -> None:
    assert format_walking_time(minutes) == expected
