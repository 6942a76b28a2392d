"""Pydantic domain models.

Field names are snake_case in Python and camelCase on the wire, so a day
dumped with ``by_alias=True`` matches the schedule/conflict contract that
presentation layers consume.
"""

from __future__ import annotations

import datetime as dt
import uuid
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from itinerary_engine.domain.constants import DEFAULT_TIMEZONE
from itinerary_engine.domain.enums import (
    ConflictKind,
    ScheduleStatus,
    Severity,
    TimeOfDay,
    TravelMode,
    Weekday,
    WindowStatus,
)
from itinerary_engine.domain.planning.common import is_valid_hhmm, weekday_for


def new_activity_id() -> str:
    return f"act-{uuid.uuid4().hex[:12]}"


def _check_hhmm(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    if not text:
        return None
    if not is_valid_hhmm(text):
        raise ValueError(f"expected HH:MM, got {value!r}")
    return text


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Coordinate(_CamelModel):
    lat: float = Field(ge=-90.0, le=90.0)
    lng: float = Field(ge=-180.0, le=180.0)


class OperatingPeriod(_CamelModel):
    day: Weekday
    open: str
    close: str
    is_overnight: bool = False

    @field_validator("open", "close")
    @classmethod
    def _validate_times(cls, value: Optional[str]) -> Optional[str]:
        return _check_hhmm(value)


class OperatingHours(_CamelModel):
    periods: list[OperatingPeriod] = Field(default_factory=list)
    notes: Optional[str] = None

    def period_for(self, weekday: Weekday | None) -> OperatingPeriod | None:
        if weekday is None:
            return None
        for period in self.periods:
            if period.day == weekday:
                return period
        return None


class Location(_CamelModel):
    id: str
    name: str
    city: str = ""
    category: str = ""
    coordinates: Optional[Coordinate] = None
    operating_hours: Optional[OperatingHours] = None


class OperatingWindow(_CamelModel):
    opens_at: str
    closes_at: str
    is_overnight: bool = False
    note: Optional[str] = None
    status: WindowStatus = WindowStatus.WITHIN


class ActivitySchedule(_CamelModel):
    arrival_time: str
    departure_time: str
    status: ScheduleStatus = ScheduleStatus.SCHEDULED
    arrival_buffer_minutes: int = 0
    operating_window: Optional[OperatingWindow] = None
    # midnights crossed since the day started, at arrival
    day_offset: int = Field(default=0, ge=0)


class TravelSegment(_CamelModel):
    """Travel leg into an activity from its nearest preceding place."""

    mode: TravelMode = TravelMode.WALK
    duration_minutes: int = Field(default=0, ge=0)
    distance_meters: float = Field(default=0.0, ge=0.0)
    path: list[Coordinate] = Field(default_factory=list)
    instructions: list[str] = Field(default_factory=list)
    departure_time: Optional[str] = None
    arrival_time: Optional[str] = None
    is_estimated: bool = False


class PlaceActivity(_CamelModel):
    kind: Literal["place"] = "place"
    id: str = Field(default_factory=new_activity_id, min_length=1)
    title: str
    time_of_day: TimeOfDay = TimeOfDay.MORNING
    location_id: Optional[str] = None
    tags: list[str] = Field(default_factory=list)
    duration_min: Optional[int] = Field(default=None, ge=0)
    coordinates: Optional[Coordinate] = None
    manual_start_time: Optional[str] = None
    notes: Optional[str] = None
    schedule: Optional[ActivitySchedule] = None
    travel_from_previous: Optional[TravelSegment] = None

    @field_validator("manual_start_time")
    @classmethod
    def _validate_manual(cls, value: Optional[str]) -> Optional[str]:
        return _check_hhmm(value)


class NoteActivity(_CamelModel):
    kind: Literal["note"] = "note"
    id: str = Field(default_factory=new_activity_id, min_length=1)
    title: str = "Note"
    time_of_day: TimeOfDay = TimeOfDay.MORNING
    notes: str = ""
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    manual_start_time: Optional[str] = None
    schedule: Optional[ActivitySchedule] = None

    @field_validator("start_time", "end_time", "manual_start_time")
    @classmethod
    def _validate_times(cls, value: Optional[str]) -> Optional[str]:
        return _check_hhmm(value)


Activity = Annotated[Union[PlaceActivity, NoteActivity], Field(discriminator="kind")]


class Day(_CamelModel):
    id: str = Field(min_length=1)
    activities: list[Activity] = Field(default_factory=list)
    timezone: str = DEFAULT_TIMEZONE
    date: Optional[dt.date] = None
    weekday: Optional[Weekday] = None
    start_time: Optional[str] = None

    @field_validator("start_time")
    @classmethod
    def _validate_start(cls, value: Optional[str]) -> Optional[str]:
        return _check_hhmm(value)

    @model_validator(mode="after")
    def _derive_weekday(self) -> "Day":
        if self.weekday is None and self.date is not None:
            self.weekday = weekday_for(self.date)
        return self

    def activity(self, activity_id: str) -> PlaceActivity | NoteActivity | None:
        for item in self.activities:
            if item.id == activity_id:
                return item
        return None

    @property
    def activity_ids(self) -> list[str]:
        return [item.id for item in self.activities]


class Conflict(_CamelModel):
    id: str = ""
    activity_id: str
    kind: ConflictKind
    severity: Severity = Severity.WARNING
    message: str = ""
    details: dict[str, Any] = Field(default_factory=dict)

    @model_validator(mode="after")
    def _default_id(self) -> "Conflict":
        if not self.id:
            self.id = f"{self.kind.value}-{self.activity_id}"
        return self


class ConflictSummary(_CamelModel):
    total: int = 0
    errors: int = 0
    warnings: int = 0
    info: int = 0


class ConflictReport(_CamelModel):
    day_id: str = ""
    conflicts: list[Conflict] = Field(default_factory=list)
    summary: ConflictSummary = Field(default_factory=ConflictSummary)

    @model_validator(mode="after")
    def _summarize(self) -> "ConflictReport":
        self.summary = ConflictSummary(
            total=len(self.conflicts),
            errors=sum(1 for c in self.conflicts if c.severity == Severity.ERROR),
            warnings=sum(1 for c in self.conflicts if c.severity == Severity.WARNING),
            info=sum(1 for c in self.conflicts if c.severity == Severity.INFO),
        )
        return self

    def by_activity(self, activity_id: str) -> list[Conflict]:
        return [c for c in self.conflicts if c.activity_id == activity_id]

    def has_conflicts(self, activity_id: str) -> bool:
        return any(c.activity_id == activity_id for c in self.conflicts)

    def kinds_for(self, activity_id: str) -> set[ConflictKind]:
        return {c.kind for c in self.by_activity(activity_id)}


__all__ = [
    "Activity",
    "ActivitySchedule",
    "Conflict",
    "ConflictKind",
    "ConflictReport",
    "ConflictSummary",
    "Coordinate",
    "Day",
    "Location",
    "NoteActivity",
    "OperatingHours",
    "OperatingPeriod",
    "OperatingWindow",
    "PlaceActivity",
    "TravelSegment",
    "new_activity_id",
]
