"""Waypoint proposal strategies.

Neither strategy talks to a routing provider; they only turn an isochrone
ring or a target distance into candidate turnaround points.
"""
from __future__ import annotations

import math
import random
from typing import List, Sequence

from . import config
from .geo import Coordinate, km_to_degrees, offset_point
from .models import PaceSetting
from .units import time_to_distance, to_km


def isochrone_sample_count(polygon_size: int) -> int:
    return int(min(config.ISOCHRONE_MAX_SAMPLES, max(config.ISOCHRONE_MIN_SAMPLES, polygon_size / 4)))


def sample_isochrone_waypoints(
    polygon: Sequence[Coordinate],
    count: int,
    rng: random.Random,
) -> List[Coordinate]:
    """Evenly stride the ring, then top up with jittered random ring points."""
    if not polygon or count <= 0:
        return []

    points: List[Coordinate] = []
    step = max(1, len(polygon) // count)
    for i in range(0, len(polygon), step):
        if len(points) >= count:
            break
        points.append(polygon[i])

    half_jitter = config.ISOCHRONE_JITTER_DEG / 2
    while len(points) < count:
        lat, lon = polygon[rng.randrange(len(polygon))]
        points.append(
            (
                lat + rng.uniform(-half_jitter, half_jitter),
                lon + rng.uniform(-half_jitter, half_jitter),
            )
        )
    return points


def target_distance_km(duration_minutes: float, pace: PaceSetting) -> float:
    return to_km(time_to_distance(duration_minutes, pace.pace), pace.unit)


def loop_radius_km(distance_km: float) -> float:
    # A loop of the target length approximated as a circle's circumference.
    return distance_km / math.pi


def sample_radius_waypoints(
    start: Coordinate,
    radius_km: float,
    rng: random.Random,
    count: int = config.RADIUS_WAYPOINT_COUNT,
) -> List[Coordinate]:
    waypoints: List[Coordinate] = []
    for i in range(count):
        angle = (i / count) * 2 * math.pi
        variation = rng.uniform(config.RADIUS_VARIATION_MIN, config.RADIUS_VARIATION_MAX)
        waypoints.append(offset_point(start, angle, km_to_degrees(radius_km * variation)))
    return waypoints
