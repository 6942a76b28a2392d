"""Offline routing client: straight-line estimates only."""

from __future__ import annotations

from itinerary_engine.domain.planning.common import add_minutes
from itinerary_engine.planner.distance import straight_line_estimate
from itinerary_engine.tools.interfaces import RouteRequest, RouteResult


def estimated_route(request: RouteRequest) -> RouteResult:
    estimate = straight_line_estimate(request.origin, request.destination, request.mode)
    return RouteResult(
        path=estimate.path,
        duration_minutes=estimate.duration_minutes,
        distance_meters=estimate.distance_meters,
        instructions=[],
        arrival_time=add_minutes(request.departure_time, estimate.duration_minutes),
        is_estimated=True,
    )


class MockRoutingClient:
    """Answers every request with a heuristic estimate, marked as such."""

    def __init__(self) -> None:
        self.calls: int = 0

    async def route(self, request: RouteRequest) -> RouteResult:
        self.calls += 1
        return estimated_route(request)


__all__ = ["MockRoutingClient", "estimated_route"]
