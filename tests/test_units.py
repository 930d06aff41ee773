import math

import pytest

from loopwalk import config
from loopwalk.units import (
    DEFAULT_PACE,
    KM_PER_MILE,
    PACE_PRESETS,
    convert_distance,
    convert_pace,
    distance_to_time,
    format_distance,
    format_pace,
    format_time,
    time_to_distance,
    to_km,
)


def test_time_distance_conversions():
    assert time_to_distance(60, 12) == 5
    assert distance_to_time(5, 12) == 60
    with pytest.raises(ValueError):
        time_to_distance(30, 0)


def test_convert_distance_and_pace():
    assert math.isclose(convert_distance(10, "metric", "imperial"), 6.21371)
    assert math.isclose(convert_distance(1, "imperial", "metric"), KM_PER_MILE)
    assert convert_distance(3, "metric", "metric") == 3
    assert math.isclose(convert_pace(12, "metric", "imperial"), 12 * KM_PER_MILE)
    assert math.isclose(convert_pace(12 * KM_PER_MILE, "imperial", "metric"), 12)
    with pytest.raises(ValueError):
        convert_distance(1, "metric", "furlongs")


def test_to_km():
    assert to_km(2.5, "metric") == 2.5
    assert math.isclose(to_km(1, "imperial"), KM_PER_MILE)


def test_format_distance():
    assert format_distance(5.123, "metric") == "5.12 km"
    assert format_distance(3.0, "metric") == "3 km"
    assert format_distance(3.1, "imperial") == "3.1 mi"


def test_format_time():
    assert format_time(45) == "45m"
    assert format_time(90) == "1h 30m"
    assert format_time(125) == "2h 5m"
    assert format_time(60) == "1h 0m"
    assert format_time(59.7) == "1h 0m"


def test_format_pace():
    assert format_pace(10.5, "metric") == "10:30/km"
    assert format_pace(12, "imperial") == "12:00/mi"


def test_default_pace_matches_moderate_preset():
    moderate = {p["label"]: p["pace"] for p in PACE_PRESETS["metric"]}["Moderate"]
    assert DEFAULT_PACE == {"unit": config.DEFAULT_PACE_UNIT, "pace": moderate}
