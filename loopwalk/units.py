"""Pace and distance conversion plus display formatting."""
from __future__ import annotations

import math
from typing import Dict, List

KM_PER_MILE = 1.609344
MILES_PER_KM = 0.621371

UNITS = ("metric", "imperial")

PACE_PRESETS: Dict[str, List[Dict[str, object]]] = {
    "metric": [
        {"label": "Leisurely", "pace": 15.0},  # 4 km/h
        {"label": "Moderate", "pace": 12.0},  # 5 km/h
        {"label": "Brisk", "pace": 10.0},  # 6 km/h
        {"label": "Fast", "pace": 8.5},  # ~7 km/h
    ],
    "imperial": [
        {"label": "Leisurely", "pace": 24.0},  # 2.5 mph
        {"label": "Moderate", "pace": 19.3},  # 3.1 mph
        {"label": "Brisk", "pace": 16.0},  # 3.75 mph
        {"label": "Fast", "pace": 13.7},  # 4.4 mph
    ],
}

DEFAULT_PACE = {"unit": "metric", "pace": 12.0}


def _check_unit(unit: str) -> None:
    if unit not in UNITS:
        raise ValueError(f"Unknown unit: {unit}")


def time_to_distance(time_minutes: float, pace: float) -> float:
    """Distance covered in time_minutes at pace (minutes per unit)."""
    if pace <= 0:
        raise ValueError("pace must be positive")
    return time_minutes / pace


def distance_to_time(distance: float, pace: float) -> float:
    return distance * pace


def convert_distance(distance: float, from_unit: str, to_unit: str) -> float:
    _check_unit(from_unit)
    _check_unit(to_unit)
    if from_unit == to_unit:
        return distance
    if from_unit == "metric":
        return distance * MILES_PER_KM
    return distance * KM_PER_MILE


def convert_pace(pace: float, from_unit: str, to_unit: str) -> float:
    _check_unit(from_unit)
    _check_unit(to_unit)
    if from_unit == to_unit:
        return pace
    if from_unit == "metric":
        return pace * KM_PER_MILE  # min/km -> min/mile
    return pace / KM_PER_MILE


def to_km(distance: float, unit: str) -> float:
    _check_unit(unit)
    return distance * KM_PER_MILE if unit == "imperial" else distance


def _format_number(value: float) -> str:
    rounded = round(value * 100) / 100
    if rounded == int(rounded):
        return str(int(rounded))
    return f"{rounded:.2f}".rstrip("0").rstrip(".")


def format_distance(distance: float, unit: str) -> str:
    _check_unit(unit)
    label = "km" if unit == "metric" else "mi"
    return f"{_format_number(distance)} {label}"


def format_time(minutes: float) -> str:
    hours = int(math.floor(minutes / 60))
    mins = int(round(minutes % 60))
    if mins == 60:
        hours += 1
        mins = 0
    if hours == 0:
        return f"{mins}m"
    return f"{hours}h {mins}m"


def format_pace(pace: float, unit: str) -> str:
    _check_unit(unit)
    minutes = int(math.floor(pace))
    seconds = int(round((pace - minutes) * 60))
    if seconds == 60:
        minutes += 1
        seconds = 0
    label = "km" if unit == "metric" else "mi"
    return f"{minutes}:{seconds:02d}/{label}"
