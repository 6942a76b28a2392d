"""Deterministic distance and straight-line travel estimation.

This module is the single source of fallback estimates: the segment
recalculator, the offline routing client and the "no route" answer of the
HTTP client all build their estimated segments here.
"""

from __future__ import annotations

import math

from itinerary_engine.domain.constants import MIN_SEGMENT_MINUTES, MODE_SPEED_KMH
from itinerary_engine.domain.enums import TravelMode
from itinerary_engine.domain.models import Coordinate
from itinerary_engine.shared.exceptions import ToolError

EARTH_RADIUS_KM = 6371.0


def haversine(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    dlat = math.radians(lat2 - lat1)
    dlon = math.radians(lon2 - lon1)
    a = (
        math.sin(dlat / 2) ** 2
        + math.cos(math.radians(lat1))
        * math.cos(math.radians(lat2))
        * math.sin(dlon / 2) ** 2
    )
    return EARTH_RADIUS_KM * 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def straight_line_meters(origin: Coordinate, destination: Coordinate) -> float:
    return haversine(origin.lat, origin.lng, destination.lat, destination.lng) * 1000.0


def mode_speed_kmh(mode: TravelMode | str) -> float:
    try:
        return MODE_SPEED_KMH[TravelMode(mode)]
    except ValueError:
        raise ToolError("distance_estimator", f"Unknown transport mode: {mode}") from None


def estimate_travel_minutes(distance_meters: float, mode: TravelMode | str) -> int:
    if distance_meters <= 0:
        return 0
    minutes = (distance_meters / 1000.0) / mode_speed_kmh(mode) * 60.0
    return max(MIN_SEGMENT_MINUTES, int(round(minutes)))


class StraightLineEstimate:
    __slots__ = ("distance_meters", "duration_minutes", "path")

    def __init__(self, distance_meters: float, duration_minutes: int, path: list[Coordinate]):
        self.distance_meters = distance_meters
        self.duration_minutes = duration_minutes
        self.path = path


def straight_line_estimate(
    origin: Coordinate,
    destination: Coordinate,
    mode: TravelMode | str,
) -> StraightLineEstimate:
    distance = round(straight_line_meters(origin, destination), 1)
    return StraightLineEstimate(
        distance_meters=distance,
        duration_minutes=estimate_travel_minutes(distance, mode),
        path=[origin, destination],
    )


__all__ = [
    "StraightLineEstimate",
    "estimate_travel_minutes",
    "haversine",
    "mode_speed_kmh",
    "straight_line_estimate",
    "straight_line_meters",
]
