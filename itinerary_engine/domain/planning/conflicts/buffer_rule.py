"""Insufficient-buffer rule: a manual time pins arrival before the stop is reachable."""

from __future__ import annotations

from typing import Sequence

from itinerary_engine.domain.enums import ConflictKind, Severity
from itinerary_engine.domain.models import Conflict, NoteActivity, PlaceActivity
from itinerary_engine.domain.planning.common import format_hhmm, parse_hhmm
from itinerary_engine.domain.planning.conflicts.common import scheduled_places


class BufferRule:
    def check(self, activities: Sequence[PlaceActivity | NoteActivity]) -> list[Conflict]:
        conflicts: list[Conflict] = []
        for activity in scheduled_places(activities):
            shortfall = activity.schedule.arrival_buffer_minutes
            if shortfall >= 0:
                continue
            arrival = parse_hhmm(activity.schedule.arrival_time)
            earliest = format_hhmm(arrival - shortfall) if arrival is not None else None
            travel = activity.travel_from_previous.duration_minutes if activity.travel_from_previous else 0
            message = f"Pinned arrival {activity.schedule.arrival_time} is {-shortfall} min earlier than reachable"
            if earliest is not None:
                message += f"; earliest realistic arrival is {earliest}"
            conflicts.append(
                Conflict(
                    activity_id=activity.id,
                    kind=ConflictKind.INSUFFICIENT_BUFFER,
                    severity=Severity.WARNING,
                    message=message,
                    details={
                        "gapMinutes": shortfall,
                        "travelTime": travel,
                        "earliestArrival": earliest,
                    },
                )
            )
        return conflicts


__all__ = ["BufferRule"]
