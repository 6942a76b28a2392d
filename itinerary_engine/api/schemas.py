"""API request/response models."""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from itinerary_engine.domain.models import ConflictReport, Coordinate, Day, Location
from itinerary_engine.domain.enums import TravelMode


class _ApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class HealthResponse(BaseModel):
    status: str = "ok"
    routing_provider: str = Field(default="mock")


class RouteProxyRequest(_ApiModel):
    origin: Coordinate
    destination: Coordinate
    mode: TravelMode = Field(default=TravelMode.WALK, description="出行方式")
    departure_time: Optional[str] = Field(default=None, description="出发时间 HH:MM")
    timezone: Optional[str] = None


class ScheduleRequest(_ApiModel):
    day: Day
    order: Optional[list[str]] = Field(default=None, description="新的活动顺序；缺省保持原顺序")
    locations: list[Location] = Field(default_factory=list, description="活动关联的地点记录")


class ScheduleResponse(_ApiModel):
    day: dict[str, Any]
    conflicts: ConflictReport


class ConflictsRequest(_ApiModel):
    day: Day


class ErrorResponse(BaseModel):
    error: bool = True
    code: str
    message: str
