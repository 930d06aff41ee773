"""Loop planning orchestration.

Stages run strictly in order, each at most once:

1. isochrone-guided sampling against the configured provider
2. radius-heuristic sampling against the same provider
3. radius-heuristic sampling against the synthetic provider

Whatever a stage raises, or a stage that ends with no candidate, hands over to
the next one. Only the last stage can end the run without a route, and no
exception leaves plan().
"""
from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence

from .candidates import build_candidates
from .errors import StageFailedError
from .geo import Coordinate
from .models import Route, RouteRequest
from .routing_client import RoutingProvider, parse_isochrone_polygon
from .sampling import (
    isochrone_sample_count,
    loop_radius_km,
    sample_isochrone_waypoints,
    sample_radius_waypoints,
    target_distance_km,
)
from .selection import select_best
from .synthetic import SyntheticRoutingProvider

logger = logging.getLogger(__name__)

NO_ROUTE_MESSAGE = "Could not generate a suitable route. Try adjusting your duration or location."


@dataclass
class StageAttempt:
    name: str
    provider: str
    candidates: int = 0
    error: Optional[str] = None


@dataclass
class PlanResult:
    route: Optional[Route]
    stage: Optional[str] = None
    attempts: List[StageAttempt] = field(default_factory=list)

    @property
    def message(self) -> Optional[str]:
        return None if self.route is not None else NO_ROUTE_MESSAGE


class LoopPlanner:
    def __init__(
        self,
        provider: RoutingProvider,
        fallback_provider: Optional[RoutingProvider] = None,
        rng: Optional[random.Random] = None,
        max_workers: int = 1,
    ) -> None:
        self.provider = provider
        self.rng = rng or random.Random()
        self.fallback_provider = fallback_provider or SyntheticRoutingProvider(rng=self.rng)
        self.max_workers = max_workers

    def plan(self, request: RouteRequest) -> PlanResult:
        result = PlanResult(route=None)
        stages = [
            ("isochrone", self.provider, self._isochrone_stage),
            ("radius", self.provider, self._radius_stage),
        ]
        for name, provider, stage in stages:
            route = self._attempt(result, name, provider, stage, request)
            if route is not None:
                return result

        # Last resort; its failures are recorded like the others.
        self._attempt(result, "radius", self.fallback_provider, self._radius_stage, request)
        if result.route is None:
            logger.error("No route found for start=%s duration=%s", request.start, request.target_duration_minutes)
        return result

    def _attempt(
        self,
        result: PlanResult,
        name: str,
        provider: RoutingProvider,
        stage: Callable[[RouteRequest, RoutingProvider, StageAttempt], Route],
        request: RouteRequest,
    ) -> Optional[Route]:
        provider_name = getattr(provider, "name", type(provider).__name__)
        attempt = StageAttempt(name=name, provider=provider_name)
        result.attempts.append(attempt)
        logger.info("Stage %s: %s (%s)", len(result.attempts), name, provider_name)
        try:
            route = stage(request, provider, attempt)
        except Exception as exc:
            attempt.error = f"{type(exc).__name__}: {exc}" if str(exc) else type(exc).__name__
            logger.warning("Stage %s (%s) failed: %s", name, provider_name, attempt.error)
            return None
        result.route = route
        result.stage = f"{name}:{provider_name}"
        return route

    def _isochrone_stage(self, request: RouteRequest, provider: RoutingProvider, attempt: StageAttempt) -> Route:
        outbound_seconds = request.target_duration_minutes * 60 / 2
        polygon = parse_isochrone_polygon(provider.get_isochrone(request.start, outbound_seconds))
        waypoints = sample_isochrone_waypoints(polygon, isochrone_sample_count(len(polygon)), self.rng)
        return self._build_and_select(request, provider, waypoints, attempt)

    def _radius_stage(self, request: RouteRequest, provider: RoutingProvider, attempt: StageAttempt) -> Route:
        radius_km = loop_radius_km(target_distance_km(request.target_duration_minutes, request.pace))
        waypoints = sample_radius_waypoints(request.start, radius_km, self.rng)
        return self._build_and_select(request, provider, waypoints, attempt)

    def _build_and_select(
        self,
        request: RouteRequest,
        provider: RoutingProvider,
        waypoints: Sequence[Coordinate],
        attempt: StageAttempt,
    ) -> Route:
        candidates = build_candidates(
            request.start,
            waypoints,
            provider,
            request.recent_route_fingerprints,
            max_workers=self.max_workers,
        )
        attempt.candidates = len(candidates)
        route = select_best(candidates, request.start, request.target_duration_minutes)
        if route is None:
            raise StageFailedError(f"No candidates from {len(waypoints)} waypoints")
        return route


def plan_loop(
    request: RouteRequest,
    provider: RoutingProvider,
    fallback_provider: Optional[RoutingProvider] = None,
    rng: Optional[random.Random] = None,
    max_workers: int = 1,
) -> PlanResult:
    planner = LoopPlanner(provider, fallback_provider=fallback_provider, rng=rng, max_workers=max_workers)
    return planner.plan(request)


def generate_loop_route(
    request: RouteRequest,
    provider: RoutingProvider,
    fallback_provider: Optional[RoutingProvider] = None,
    rng: Optional[random.Random] = None,
    max_workers: int = 1,
) -> Optional[Route]:
    return plan_loop(request, provider, fallback_provider, rng=rng, max_workers=max_workers).route
