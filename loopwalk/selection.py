"""Candidate ranking and promotion to a persisted-shape Route."""
from __future__ import annotations

import random
import string
import time
from datetime import datetime, timezone
from typing import Callable, List, Optional

from . import config
from .geo import Coordinate
from .models import Route, RouteCandidate

_ID_ALPHABET = string.digits + string.ascii_lowercase


def generate_route_id(rng: Optional[random.Random] = None) -> str:
    rng = rng or random.Random()
    suffix = "".join(rng.choice(_ID_ALPHABET) for _ in range(9))
    return f"route_{int(time.time() * 1000)}_{suffix}"


def composite_score(candidate: RouteCandidate, target_duration_minutes: float) -> float:
    """Duration fit plus a freshness bonus; candidate.score holds freshness here."""
    duration_error = abs(candidate.duration_minutes - target_duration_minutes) / target_duration_minutes
    return max(0.0, 1 - duration_error + candidate.score * config.VARIETY_WEIGHT)


def rank_candidates(candidates: List[RouteCandidate], target_duration_minutes: float) -> List[RouteCandidate]:
    for candidate in candidates:
        candidate.score = composite_score(candidate, target_duration_minutes)
    # sorted() is stable, so proposal order breaks ties.
    return sorted(candidates, key=lambda c: c.score, reverse=True)


def select_best(
    candidates: List[RouteCandidate],
    start: Coordinate,
    target_duration_minutes: float,
    now: Optional[datetime] = None,
    id_factory: Optional[Callable[[], str]] = None,
) -> Optional[Route]:
    if not candidates:
        return None

    best = rank_candidates(candidates, target_duration_minutes)[0]
    return Route(
        id=(id_factory or generate_route_id)(),
        distance_km=best.distance_km,
        duration_minutes=best.duration_minutes,
        coordinates=list(best.coordinates),
        start_point=start,
        created_at=now or datetime.now(timezone.utc).replace(microsecond=0),
        fingerprints=list(best.fingerprints),
        is_favorite=False,
    )
