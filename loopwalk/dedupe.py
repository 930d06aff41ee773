"""Segment fingerprints and recency-weighted route variety scoring.

Routes are cut into windows of coordinates; each window is rounded to about
11 m and hashed into a short string. Comparing the fingerprint sets of two
routes (Jaccard) tells how much path they share.
"""
from __future__ import annotations

import hashlib
import json
from typing import Iterable, List, Sequence

from . import config
from .geo import Coordinate


def segment_hash(coordinates: Sequence[Coordinate]) -> str:
    scale = 10 ** config.SEGMENT_HASH_DECIMALS
    rounded = [[round(lat * scale), round(lon * scale)] for lat, lon in coordinates]
    payload = json.dumps(rounded, separators=(",", ":"))
    digest = hashlib.sha256(payload.encode("ascii")).hexdigest()
    return digest[: config.SEGMENT_HASH_LENGTH]


def segmentize(coordinates: Sequence[Coordinate]) -> List[str]:
    if len(coordinates) < 2:
        return []

    window = config.SEGMENT_WINDOW
    segments: List[str] = []
    # Windows overlap by one boundary point; a trailing remainder shorter than a
    # full step is dropped.
    for i in range(0, len(coordinates) - window, window):
        segments.append(segment_hash(coordinates[i : i + window + 1]))
    return segments


def overlap(segments_a: Iterable[str], segments_b: Iterable[str]) -> float:
    a = set(segments_a)
    b = set(segments_b)
    if not a or not b:
        return 0.0
    return len(a & b) / len(a | b)


def variety_score(candidate: Sequence[str], recent: Sequence[Sequence[str]]) -> float:
    """Freshness in [0, 1] of candidate against recent routes, most recent first."""
    if not recent:
        return 1.0

    decay = config.VARIETY_RECENCY_DECAY
    total = 0.0
    weight_sum = 0.0
    for index, route_segments in enumerate(recent):
        weight = decay ** index
        total += overlap(candidate, route_segments) * weight
        weight_sum += weight

    return max(0.0, 1.0 - total / weight_sum)
