"""Tool abstraction protocols and I/O schemas."""

from __future__ import annotations

from typing import Any, Optional, Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from itinerary_engine.domain.enums import TravelMode
from itinerary_engine.domain.models import Coordinate, Location, PlaceActivity
from itinerary_engine.shared.exceptions import ToolError


class _WireModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class RouteRequest(_WireModel):
    origin: Coordinate
    destination: Coordinate
    mode: TravelMode = TravelMode.WALK
    departure_time: Optional[str] = None
    timezone: Optional[str] = None


class RouteResult(_WireModel):
    path: list[Coordinate] = Field(default_factory=list)
    duration_minutes: int = Field(default=0, ge=0)
    distance_meters: float = Field(default=0.0, ge=0.0)
    instructions: list[str] = Field(default_factory=list)
    arrival_time: Optional[str] = None
    is_estimated: bool = False

    @field_validator("path", "instructions", mode="before")
    @classmethod
    def _none_as_empty(cls, value: Any) -> Any:
        return [] if value is None else value

    @field_validator("duration_minutes", mode="before")
    @classmethod
    def _round_minutes(cls, value: Any) -> Any:
        if isinstance(value, float):
            return int(round(value))
        return value

    @field_validator("is_estimated", mode="before")
    @classmethod
    def _none_as_false(cls, value: Any) -> Any:
        return False if value is None else value


@runtime_checkable
class RoutingClient(Protocol):
    async def route(self, request: RouteRequest) -> RouteResult: ...


@runtime_checkable
class LocationLookup(Protocol):
    def find_location(self, activity: PlaceActivity) -> Location | None: ...


__all__ = [
    "LocationLookup",
    "RouteRequest",
    "RouteResult",
    "RoutingClient",
    "ToolError",
]
