"""Offline routing provider producing plausible out-and-back geometry.

Used for demo mode and as the planner's last-resort stage. Geometry is a
noisy straight line to the waypoint and back; durations follow from the path
length at a fixed walking pace. Responses use the same GeoJSON shape as
openrouteservice so the rest of the pipeline cannot tell them apart.
"""
from __future__ import annotations

import math
import random
from typing import Any, Dict, List, Optional

from . import config
from .geo import Coordinate, latlon_to_lonlat, offset_point, path_length_km

_INSTRUCTIONS = [
    "Head north",
    "Turn right",
    "Continue straight",
    "Turn left",
    "Take the path",
    "Follow the trail",
    "Turn around",
    "Head back",
]


class SyntheticRoutingProvider:
    name = "synthetic"

    def __init__(
        self,
        rng: Optional[random.Random] = None,
        pace_min_per_km: float = config.SYNTHETIC_PACE_MIN_PER_KM,
    ) -> None:
        self.rng = rng or random.Random()
        self.pace_min_per_km = pace_min_per_km
        self._route_seed = self.rng.getrandbits(64)

    def get_route(self, start: Coordinate, waypoint: Optional[Coordinate] = None) -> Dict[str, Any]:
        if waypoint is None:
            angle = self.rng.random() * 2 * math.pi
            waypoint = offset_point(start, angle, 0.005 + self.rng.random() * 0.01)

        rng = self._route_rng(start, waypoint)
        outbound = self._path_points(rng, start, waypoint)
        inbound = self._path_points(rng, waypoint, start)
        coordinates = outbound + inbound[1:]

        distance_km = path_length_km(coordinates)
        duration_s = distance_km * self.pace_min_per_km * 60
        return {
            "type": "FeatureCollection",
            "features": [
                {
                    "type": "Feature",
                    "geometry": {"type": "LineString", "coordinates": latlon_to_lonlat(coordinates)},
                    "properties": {
                        "distance": distance_km * 1000,
                        "duration": duration_s,
                        "segments": self._segments(rng, coordinates),
                    },
                }
            ],
        }

    def get_isochrone(self, start: Coordinate, time_seconds: float) -> Dict[str, Any]:
        radius_km = (time_seconds / 60) * config.SYNTHETIC_WALK_SPEED_KMH / 60
        radius_deg = radius_km / config.KM_PER_DEGREE
        count = config.SYNTHETIC_ISOCHRONE_POINTS

        ring: List[Coordinate] = []
        for i in range(count):
            angle = (i / count) * 2 * math.pi
            variation = config.RADIUS_VARIATION_MIN + self.rng.random() * (
                config.RADIUS_VARIATION_MAX - config.RADIUS_VARIATION_MIN
            )
            ring.append(offset_point(start, angle, radius_deg * variation))
        ring.append(ring[0])

        return {
            "type": "FeatureCollection",
            "features": [
                {
                    "type": "Feature",
                    "geometry": {"type": "Polygon", "coordinates": [latlon_to_lonlat(ring)]},
                    "properties": {"value": time_seconds},
                }
            ],
        }

    def _route_rng(self, start: Coordinate, waypoint: Coordinate) -> random.Random:
        # Seeded per request so thread-pooled callers get the same geometry in any order.
        key = f"{self._route_seed}:{start[0]:.7f},{start[1]:.7f}:{waypoint[0]:.7f},{waypoint[1]:.7f}"
        return random.Random(key)

    def _path_points(self, rng: random.Random, start: Coordinate, end: Coordinate) -> List[Coordinate]:
        start_lat, start_lon = start
        end_lat, end_lon = end
        num_segments = 8 + rng.randrange(8)
        noise = config.SYNTHETIC_NOISE_DEG

        points: List[Coordinate] = [(start_lat, start_lon)]
        for i in range(1, num_segments):
            t = i / num_segments
            lat = start_lat + (end_lat - start_lat) * t + (rng.random() - 0.5) * noise
            lon = start_lon + (end_lon - start_lon) * t + (rng.random() - 0.5) * noise
            if rng.random() < config.SYNTHETIC_TURN_PROBABILITY:
                turn_angle = (rng.random() - 0.5) * math.pi / 3
                turn_distance = 0.001 + rng.random() * 0.002
                lat, lon = offset_point((lat, lon), turn_angle, turn_distance)
            points.append((lat, lon))
        points.append((end_lat, end_lon))
        return points

    def _segments(self, rng: random.Random, coordinates: List[Coordinate]) -> List[Dict[str, Any]]:
        segments = []
        size = max(2, len(coordinates) // 6)
        for i in range(0, len(coordinates) - 1, size):
            distance_m = path_length_km(coordinates[i : i + size + 1]) * 1000
            segments.append(
                {
                    "distance": distance_m,
                    "duration": distance_m / 1000 * self.pace_min_per_km * 60,
                    "instruction": rng.choice(_INSTRUCTIONS),
                }
            )
        return segments
