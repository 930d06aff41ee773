"""Geospatial helpers."""
from __future__ import annotations

import math
from typing import Optional, Sequence, Tuple

from . import config

Coordinate = Tuple[float, float]
Bounds = Tuple[Coordinate, Coordinate]


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    r = 6371.0
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    dphi = math.radians(lat2 - lat1)
    dlambda = math.radians(lon2 - lon1)

    a = math.sin(dphi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(dlambda / 2) ** 2
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return r * c


def distance_km(a: Coordinate, b: Coordinate) -> float:
    return haversine_km(a[0], a[1], b[0], b[1])


def path_length_km(coordinates: Sequence[Coordinate]) -> float:
    total = 0.0
    for prev, curr in zip(coordinates, coordinates[1:]):
        total += distance_km(prev, curr)
    return total


def bounds(coordinates: Sequence[Coordinate]) -> Optional[Bounds]:
    """Return ((min_lat, min_lon), (max_lat, max_lon)) or None for no points."""
    if not coordinates:
        return None
    lats = [c[0] for c in coordinates]
    lons = [c[1] for c in coordinates]
    return (min(lats), min(lons)), (max(lats), max(lons))


def center(coordinates: Sequence[Coordinate]) -> Optional[Coordinate]:
    box = bounds(coordinates)
    if box is None:
        return None
    (lat_min, lon_min), (lat_max, lon_max) = box
    return (lat_min + lat_max) / 2, (lon_min + lon_max) / 2


def km_to_degrees(km: float) -> float:
    return km / config.KM_PER_DEGREE


def offset_point(origin: Coordinate, angle_rad: float, radius_deg: float) -> Coordinate:
    """Move radius_deg along angle_rad (0 = east, counter-clockwise)."""
    lat, lon = origin
    return lat + math.sin(angle_rad) * radius_deg, lon + math.cos(angle_rad) * radius_deg


def is_valid_coordinate(value: object) -> bool:
    if not isinstance(value, (tuple, list)) or len(value) != 2:
        return False
    lat, lon = value
    if isinstance(lat, bool) or isinstance(lon, bool):
        return False
    if not isinstance(lat, (int, float)) or not isinstance(lon, (int, float)):
        return False
    if not (math.isfinite(lat) and math.isfinite(lon)):
        return False
    return -90.0 <= lat <= 90.0 and -180.0 <= lon <= 180.0


def lonlat_to_latlon(points: Sequence[Sequence[float]]) -> list:
    """Convert GeoJSON [lon, lat] positions into (lat, lon) tuples."""
    return [(float(p[1]), float(p[0])) for p in points]


def latlon_to_lonlat(points: Sequence[Coordinate]) -> list:
    return [[float(p[1]), float(p[0])] for p in points]
