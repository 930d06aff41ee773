"""HTTP client with retry/backoff and request budgeting."""
from __future__ import annotations

import json
import logging
import random
import threading
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional

import requests

from .errors import BudgetExceededError, RoutingHttpError

logger = logging.getLogger(__name__)

REQUEST_KINDS = ("routes", "isochrones")
RETRYABLE_STATUSES = (429, 500, 502, 503, 504)


def _check_kind(kind: str) -> None:
    if kind not in REQUEST_KINDS:
        raise ValueError(f"Unknown request kind: {kind}")


@dataclass
class RequestMetrics:
    """Per-run counters of outgoing routing requests and their failures."""

    network_routes: int = 0
    network_isochrones: int = 0
    failed_routes: int = 0
    failed_isochrones: int = 0
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    def _bump(self, prefix: str, kind: str) -> None:
        _check_kind(kind)
        attr = f"{prefix}_{kind}"
        with self._lock:
            setattr(self, attr, getattr(self, attr) + 1)

    def network(self, kind: str) -> int:
        _check_kind(kind)
        return int(getattr(self, f"network_{kind}"))

    def inc_network(self, kind: str) -> None:
        self._bump("network", kind)

    def inc_failure(self, kind: str) -> None:
        self._bump("failed", kind)


class RequestBudget:
    """Caps the number of routing requests one run may send.

    Counts live on the shared RequestMetrics when one is given, so the cap and
    the reported totals can never drift apart. Safe to consume from worker
    threads.
    """

    def __init__(
        self,
        max_routes: int,
        max_isochrones: int,
        on_consume: Optional[Callable[[str, int, int], None]] = None,
        metrics: Optional[RequestMetrics] = None,
    ) -> None:
        self.limits = {"routes": max_routes, "isochrones": max_isochrones}
        self.on_consume = on_consume
        self.metrics = metrics
        self._counts = dict.fromkeys(REQUEST_KINDS, 0)
        self._lock = threading.Lock()

    def count(self, kind: str) -> int:
        if self.metrics is not None:
            return self.metrics.network(kind)
        _check_kind(kind)
        return self._counts[kind]

    @property
    def routes_count(self) -> int:
        return self.count("routes")

    @property
    def isochrones_count(self) -> int:
        return self.count("isochrones")

    def consume(self, kind: str) -> None:
        with self._lock:
            used = self.count(kind)
            limit = self.limits[kind]
            if used >= limit:
                raise BudgetExceededError(f"{kind.capitalize()} request budget exceeded: {used} >= {limit}")
            if self.metrics is not None:
                self.metrics.inc_network(kind)
            else:
                self._counts[kind] += 1
            routes, isochrones = self.routes_count, self.isochrones_count
        if self.on_consume:
            self.on_consume(kind, routes, isochrones)


class HttpClient:
    def __init__(
        self,
        timeout: int = 20,
        retry_max: int = 3,
        backoff_base: float = 0.5,
        backoff_max: float = 8.0,
        extra_headers: Optional[Dict[str, str]] = None,
    ) -> None:
        self.timeout = timeout
        self.retry_max = max(1, int(retry_max))
        self.backoff_base = backoff_base
        self.backoff_max = backoff_max
        self.extra_headers = dict(extra_headers or {})
        self.session = requests.Session()

    def post_json(self, url: str, body: Dict[str, Any]) -> Dict[str, Any]:
        headers = {"Content-Type": "application/json"}
        headers.update(self.extra_headers)

        payload = json.dumps(body)
        for attempt in range(1, self.retry_max + 1):
            try:
                resp = self.session.post(url, data=payload, headers=headers, timeout=self.timeout)
            except requests.RequestException:
                if attempt >= self.retry_max:
                    raise
                logger.warning("Request to %s failed (attempt %s)", url, attempt)
                time.sleep(self._retry_delay(attempt))
                continue

            status = resp.status_code
            if 200 <= status < 300:
                try:
                    return resp.json()
                except ValueError:
                    logger.error("Non-JSON response from %s", url)
                    raise

            if status in RETRYABLE_STATUSES:
                logger.warning("HTTP %s from %s (attempt %s)", status, url, attempt)
                if attempt >= self.retry_max:
                    raise RoutingHttpError(status, _response_text(resp), url=url)
                time.sleep(self._retry_delay(attempt, resp))
                continue

            # Non-retryable
            logger.error("HTTP %s from %s", status, url)
            raise RoutingHttpError(status, _response_text(resp), url=url)

        raise RuntimeError("Unexpected HTTP retry loop exit")

    def _retry_delay(self, attempt: int, resp: Optional[requests.Response] = None) -> float:
        """Seconds to wait before the next attempt; a server Retry-After wins, capped."""
        retry_after = resp.headers.get("Retry-After") if resp is not None else None
        if retry_after:
            try:
                return max(0.0, min(float(retry_after), self.backoff_max))
            except ValueError:
                pass
        base = min(self.backoff_base * (2 ** (attempt - 1)), self.backoff_max)
        return base + random.uniform(0, self.backoff_base)


def _response_text(resp: Any) -> str:
    return str(getattr(resp, "text", "") or "")[:200]
