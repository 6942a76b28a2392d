"""Shared helpers for conflict rules."""

from __future__ import annotations

from typing import Iterator, Sequence

from itinerary_engine.domain.constants import MINUTES_IN_DAY
from itinerary_engine.domain.models import NoteActivity, PlaceActivity
from itinerary_engine.domain.planning.common import parse_hhmm


def scheduled_places(activities: Sequence[PlaceActivity | NoteActivity]) -> list[PlaceActivity]:
    return [a for a in activities if isinstance(a, PlaceActivity) and a.schedule is not None]


def consecutive_places(
    activities: Sequence[PlaceActivity | NoteActivity],
) -> Iterator[tuple[PlaceActivity, PlaceActivity]]:
    places = scheduled_places(activities)
    for index in range(1, len(places)):
        yield places[index - 1], places[index]


def arrival_minutes(activity: PlaceActivity) -> int | None:
    """Arrival in minutes since the start of the schedule's first day."""
    if activity.schedule is None:
        return None
    arrival = parse_hhmm(activity.schedule.arrival_time)
    if arrival is None:
        return None
    return arrival % MINUTES_IN_DAY + activity.schedule.day_offset * MINUTES_IN_DAY


def departure_minutes(activity: PlaceActivity) -> int | None:
    arrival = arrival_minutes(activity)
    departure = parse_hhmm(activity.schedule.departure_time) if activity.schedule else None
    if arrival is None or departure is None:
        return departure
    departure = departure % MINUTES_IN_DAY + activity.schedule.day_offset * MINUTES_IN_DAY
    # a stay that runs past midnight departs on the next day
    if departure < arrival:
        departure += MINUTES_IN_DAY
    return departure


__all__ = ["arrival_minutes", "consecutive_places", "departure_minutes", "scheduled_places"]
