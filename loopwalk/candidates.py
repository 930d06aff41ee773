"""Turn sampled waypoints into scored out-and-back route candidates."""
from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

from .dedupe import segmentize, variety_score
from .errors import BudgetExceededError
from .geo import Coordinate
from .models import RouteCandidate
from .routing_client import RoutingProvider, parse_route_response

logger = logging.getLogger(__name__)


@dataclass
class WaypointOutcome:
    waypoint: Coordinate
    candidate: Optional[RouteCandidate] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.candidate is not None


def candidate_from_response(
    response: Dict[str, Any],
    waypoint: Optional[Coordinate],
    recent_fingerprints: Sequence[Sequence[str]],
) -> RouteCandidate:
    coordinates, distance_km, duration_min = parse_route_response(response)
    fingerprints = segmentize(coordinates)
    return RouteCandidate(
        coordinates=coordinates,
        distance_km=distance_km,
        duration_minutes=duration_min,
        fingerprints=fingerprints,
        score=variety_score(fingerprints, recent_fingerprints),
        waypoint=waypoint,
    )


def evaluate_waypoint(
    start: Coordinate,
    waypoint: Coordinate,
    provider: RoutingProvider,
    recent_fingerprints: Sequence[Sequence[str]],
) -> WaypointOutcome:
    try:
        response = provider.get_route(start, waypoint)
        candidate = candidate_from_response(response, waypoint, recent_fingerprints)
    except BudgetExceededError:
        raise
    except Exception as exc:
        # One bad waypoint never sinks the batch.
        logger.warning("Failed to build route for waypoint %s: %s: %s", waypoint, type(exc).__name__, exc)
        return WaypointOutcome(waypoint=waypoint, error=f"{type(exc).__name__}: {exc}")
    return WaypointOutcome(waypoint=waypoint, candidate=candidate)


def build_candidates(
    start: Coordinate,
    waypoints: Sequence[Coordinate],
    provider: RoutingProvider,
    recent_fingerprints: Sequence[Sequence[str]] = (),
    max_workers: int = 1,
) -> List[RouteCandidate]:
    """Request one out-and-back route per waypoint, skipping the ones that fail.

    With max_workers > 1 requests run on a thread pool; candidates still come
    back in waypoint order so ties in selection resolve the same way.
    """
    if max_workers <= 1 or len(waypoints) <= 1:
        outcomes = [evaluate_waypoint(start, wp, provider, recent_fingerprints) for wp in waypoints]
    else:
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            outcomes = list(
                executor.map(
                    lambda wp: evaluate_waypoint(start, wp, provider, recent_fingerprints),
                    waypoints,
                )
            )

    candidates = [o.candidate for o in outcomes if o.candidate is not None]
    failed = sum(1 for o in outcomes if not o.ok)
    if failed:
        logger.info("Candidates: %s built, %s waypoints skipped", len(candidates), failed)
    return candidates
