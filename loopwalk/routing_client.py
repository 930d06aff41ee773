"""Routing/isochrone provider interface, proxy-backed client and response parsing."""
from __future__ import annotations

from typing import Any, Dict, List, Optional, Protocol, Tuple

from . import config
from .errors import InvalidIsochroneError, MalformedRouteError
from .geo import Coordinate, lonlat_to_latlon
from .http import HttpClient, RequestBudget, RequestMetrics


class RoutingProvider(Protocol):
    name: str

    def get_route(self, start: Coordinate, waypoint: Coordinate) -> Dict[str, Any]:
        ...

    def get_isochrone(self, start: Coordinate, time_seconds: float) -> Dict[str, Any]:
        ...


class ProxyRoutingClient:
    """Talks to the credential-holding proxy in front of openrouteservice."""

    name = "proxy"

    def __init__(
        self,
        http_client: HttpClient,
        base_url: str = config.PROXY_BASE_URL,
        profile: str = config.ORS_PROFILE,
        budget: Optional[RequestBudget] = None,
        metrics: Optional[RequestMetrics] = None,
    ) -> None:
        self.http = http_client
        self.base_url = base_url.rstrip("/")
        self.profile = profile
        self.budget = budget
        self.metrics = metrics

    def get_route(self, start: Coordinate, waypoint: Coordinate) -> Dict[str, Any]:
        if self.budget is not None:
            self.budget.consume("routes")
        elif self.metrics is not None:
            self.metrics.inc_network("routes")
        body = build_route_body(start, waypoint, self.profile)
        try:
            return self.http.post_json(self.base_url + config.PROXY_ROUTE_PATH, body)
        except Exception:
            if self.metrics is not None:
                self.metrics.inc_failure("routes")
            raise

    def get_isochrone(self, start: Coordinate, time_seconds: float) -> Dict[str, Any]:
        if self.budget is not None:
            self.budget.consume("isochrones")
        elif self.metrics is not None:
            self.metrics.inc_network("isochrones")
        body = build_isochrone_body(start, time_seconds, self.profile)
        try:
            return self.http.post_json(self.base_url + config.PROXY_ISOCHRONE_PATH, body)
        except Exception:
            if self.metrics is not None:
                self.metrics.inc_failure("isochrones")
            raise


def build_route_body(start: Coordinate, waypoint: Coordinate, profile: str) -> Dict[str, Any]:
    return {
        "start": [start[1], start[0]],
        "waypoints": [[waypoint[1], waypoint[0]]],
        "profile": profile,
    }


def build_isochrone_body(start: Coordinate, time_seconds: float, profile: str) -> Dict[str, Any]:
    return {
        "start": [start[1], start[0]],
        "timeSeconds": time_seconds,
        "profile": profile,
    }


def _first_feature(response: Any) -> Optional[Dict[str, Any]]:
    if not isinstance(response, dict):
        return None
    features = response.get("features")
    if not isinstance(features, list) or not features or not isinstance(features[0], dict):
        return None
    return features[0]


def _dict_field(container: Dict[str, Any], key: str) -> Dict[str, Any]:
    value = container.get(key)
    return value if isinstance(value, dict) else {}


def _positions(raw: Any) -> Optional[List[Coordinate]]:
    """GeoJSON [lon, lat] positions as (lat, lon), or None if raw is not a position list."""
    if not isinstance(raw, list):
        return None
    for position in raw:
        if not isinstance(position, (list, tuple)) or len(position) < 2:
            return None
        lon, lat = position[0], position[1]
        if isinstance(lon, bool) or isinstance(lat, bool):
            return None
        if not isinstance(lon, (int, float)) or not isinstance(lat, (int, float)):
            return None
    return lonlat_to_latlon(raw)


def parse_route_response(response: Dict[str, Any]) -> Tuple[List[Coordinate], float, float]:
    """Return (lat/lon coordinates, distance in km, duration in minutes)."""
    feature = _first_feature(response)
    if feature is None:
        raise MalformedRouteError("Route response has no features")

    coordinates = _positions(_dict_field(feature, "geometry").get("coordinates"))
    if coordinates is None:
        raise MalformedRouteError("Route geometry is not a coordinate list")
    if len(coordinates) < 2:
        raise MalformedRouteError("Route geometry has fewer than 2 points")

    props = _dict_field(feature, "properties")
    summary = _dict_field(props, "summary")
    distance_m = summary.get("distance", props.get("distance"))
    duration_s = summary.get("duration", props.get("duration"))
    try:
        distance_km = float(distance_m) / 1000.0
        duration_min = float(duration_s) / 60.0
    except (TypeError, ValueError) as exc:
        raise MalformedRouteError("Route response is missing distance or duration") from exc
    if not (distance_km > 0 and duration_min > 0):
        raise MalformedRouteError(
            f"Route response has non-positive distance/duration: {distance_m}m, {duration_s}s"
        )
    return coordinates, distance_km, duration_min


def parse_isochrone_polygon(response: Dict[str, Any]) -> List[Coordinate]:
    """Return the outer ring of the first isochrone feature as (lat, lon) points."""
    feature = _first_feature(response)
    if feature is None:
        raise InvalidIsochroneError("Invalid isochrone response: no features")
    rings = _dict_field(feature, "geometry").get("coordinates")
    if not isinstance(rings, list):
        raise InvalidIsochroneError("Invalid isochrone response: geometry has no rings")
    polygon = _positions(rings[0]) if rings else []
    if polygon is None:
        raise InvalidIsochroneError("Invalid isochrone response: outer ring is not a coordinate list")
    if len(polygon) < config.ISOCHRONE_MIN_POINTS:
        raise InvalidIsochroneError(
            f"Invalid isochrone response: {len(polygon)} points < {config.ISOCHRONE_MIN_POINTS}"
        )
    return polygon
