"""Domain records passed between the planner stages."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from . import config
from .geo import Coordinate, is_valid_coordinate
from .units import UNITS


@dataclass(frozen=True)
class PaceSetting:
    unit: str = config.DEFAULT_PACE_UNIT
    pace: float = config.DEFAULT_PACE_VALUE

    def __post_init__(self) -> None:
        if self.unit not in UNITS:
            raise ValueError(f"Unknown pace unit: {self.unit}")
        if not self.pace or self.pace <= 0:
            raise ValueError("pace must be positive")

    def to_dict(self) -> Dict[str, Any]:
        return {"unit": self.unit, "pace": self.pace}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PaceSetting":
        return cls(unit=data.get("unit", config.DEFAULT_PACE_UNIT), pace=float(data.get("pace", config.DEFAULT_PACE_VALUE)))


@dataclass(frozen=True)
class RouteRequest:
    start: Coordinate
    target_duration_minutes: float
    pace: PaceSetting = field(default_factory=PaceSetting)
    recent_route_fingerprints: Tuple[Tuple[str, ...], ...] = ()

    def __post_init__(self) -> None:
        if not is_valid_coordinate(self.start):
            raise ValueError(f"Invalid start coordinate: {self.start!r}")
        if not self.target_duration_minutes or self.target_duration_minutes <= 0:
            raise ValueError("target_duration_minutes must be positive")
        # Freeze the history snapshot so stages cannot mutate the caller's lists.
        object.__setattr__(self, "start", (float(self.start[0]), float(self.start[1])))
        object.__setattr__(
            self,
            "recent_route_fingerprints",
            tuple(tuple(fps) for fps in self.recent_route_fingerprints),
        )


@dataclass
class RouteCandidate:
    coordinates: List[Coordinate]
    distance_km: float
    duration_minutes: float
    fingerprints: List[str]
    score: float
    waypoint: Optional[Coordinate] = None


@dataclass
class Route:
    id: str
    distance_km: float
    duration_minutes: float
    coordinates: List[Coordinate]
    start_point: Coordinate
    created_at: datetime
    fingerprints: List[str]
    is_favorite: bool = False
    name: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "distance_km": self.distance_km,
            "duration_minutes": self.duration_minutes,
            "coordinates": [[lat, lon] for lat, lon in self.coordinates],
            "start_point": [self.start_point[0], self.start_point[1]],
            "created_at": self.created_at.isoformat(),
            "is_favorite": self.is_favorite,
            "fingerprints": list(self.fingerprints),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Route":
        created_at = datetime.fromisoformat(data["created_at"])
        if created_at.tzinfo is None:
            created_at = created_at.replace(tzinfo=timezone.utc)
        start = data["start_point"]
        return cls(
            id=data["id"],
            name=data.get("name"),
            distance_km=float(data["distance_km"]),
            duration_minutes=float(data["duration_minutes"]),
            coordinates=[(float(lat), float(lon)) for lat, lon in data.get("coordinates", [])],
            start_point=(float(start[0]), float(start[1])),
            created_at=created_at,
            is_favorite=bool(data.get("is_favorite", False)),
            fingerprints=list(data.get("fingerprints", [])),
        )
