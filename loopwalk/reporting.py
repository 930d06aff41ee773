"""Output reporting helpers."""
from __future__ import annotations

import json
import os
import tempfile
from contextlib import contextmanager
from typing import Any, Dict, Iterator, Optional, TextIO

from .geo import latlon_to_lonlat
from .models import PaceSetting, Route
from .units import convert_distance, format_distance, format_pace, format_time


def ensure_dir(path: str) -> None:
    os.makedirs(path, exist_ok=True)


def _fsync_dir(path: str) -> None:
    try:
        dir_fd = os.open(path, os.O_DIRECTORY)
    except Exception:
        return
    try:
        os.fsync(dir_fd)
    except Exception:
        pass
    finally:
        os.close(dir_fd)


@contextmanager
def atomic_writer(
    path: str,
    mode: str = "w",
    encoding: str = "utf-8",
    newline: Optional[str] = None,
) -> Iterator[TextIO]:
    dir_path = os.path.dirname(path) or "."
    base = os.path.basename(path)
    fd, tmp_path = tempfile.mkstemp(prefix=f".{base}.", suffix=".tmp", dir=dir_path)
    try:
        with os.fdopen(fd, mode, encoding=encoding, newline=newline) as f:
            yield f
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_path, path)
        _fsync_dir(dir_path)
    except Exception:
        try:
            os.unlink(tmp_path)
        except Exception:
            pass
        raise


def write_json_object(path: str, payload: Dict[str, Any]) -> None:
    with atomic_writer(path, mode="w", encoding="utf-8") as f:
        json.dump(payload, f, ensure_ascii=False, indent=2)


def route_to_geojson(route: Route) -> Dict[str, Any]:
    return {
        "type": "FeatureCollection",
        "features": [
            {
                "type": "Feature",
                "geometry": {"type": "LineString", "coordinates": latlon_to_lonlat(route.coordinates)},
                "properties": {
                    "id": route.id,
                    "name": route.name,
                    "distance_km": route.distance_km,
                    "duration_minutes": route.duration_minutes,
                    "created_at": route.created_at.isoformat(),
                },
            },
            {
                "type": "Feature",
                "geometry": {"type": "Point", "coordinates": [route.start_point[1], route.start_point[0]]},
                "properties": {"role": "start"},
            },
        ],
    }


def write_route_json(path: str, route: Route) -> None:
    write_json_object(path, route.to_dict())


def write_route_geojson(path: str, route: Route) -> None:
    write_json_object(path, route_to_geojson(route))


def render_route_summary(route: Route, pace: PaceSetting, stage: Optional[str] = None) -> str:
    distance = convert_distance(route.distance_km, "metric", pace.unit)
    lines = [
        f"Route {route.id}" + (f" ({route.name})" if route.name else ""),
        f"- distance: {format_distance(distance, pace.unit)}",
        f"- duration: {format_time(route.duration_minutes)}",
        f"- pace: {format_pace(pace.pace, pace.unit)}",
        f"- points: {len(route.coordinates)}",
        f"- start: {route.start_point[0]:.5f}, {route.start_point[1]:.5f}",
        f"- created_at: {route.created_at.isoformat()}",
    ]
    if stage:
        lines.append(f"- stage: {stage}")
    if route.is_favorite:
        lines.append("- favorite: yes")
    return "\n".join(lines)
