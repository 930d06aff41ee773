"""Exception types raised by the routing layer and the planner."""
from __future__ import annotations


class RoutingError(RuntimeError):
    pass


class RoutingHttpError(RoutingError):
    def __init__(self, status_code: int, body: str = "", url: str = "") -> None:
        self.status_code = int(status_code)
        self.body = (body or "")[:200]
        self.url = url
        message = f"Routing service error: HTTP {self.status_code}"
        if url:
            message += f" from {url}"
        if self.body:
            message += f" ({self.body})"
        super().__init__(message)


class MalformedRouteError(RoutingError):
    pass


class InvalidIsochroneError(RoutingError):
    pass


class StageFailedError(RuntimeError):
    pass


class BudgetExceededError(RuntimeError):
    pass
