"""Overlap rule: a stop starts before the previous stop ends."""

from __future__ import annotations

from typing import Sequence

from itinerary_engine.domain.enums import ConflictKind, Severity
from itinerary_engine.domain.models import Conflict, NoteActivity, PlaceActivity
from itinerary_engine.domain.planning.conflicts.common import (
    arrival_minutes,
    consecutive_places,
    departure_minutes,
)


class OverlapRule:
    def check(self, activities: Sequence[PlaceActivity | NoteActivity]) -> list[Conflict]:
        conflicts: list[Conflict] = []
        for previous, current in consecutive_places(activities):
            prev_departure = departure_minutes(previous)
            arrival = arrival_minutes(current)
            if prev_departure is None or arrival is None:
                continue
            if arrival >= prev_departure:
                continue
            overlap = prev_departure - arrival
            conflicts.append(
                Conflict(
                    activity_id=current.id,
                    kind=ConflictKind.OVERLAP,
                    severity=Severity.ERROR,
                    message=f"Overlaps with {previous.title} by {overlap} min",
                    details={
                        "overlapMinutes": overlap,
                        "relatedActivityId": previous.id,
                        "relatedActivityTitle": previous.title,
                    },
                )
            )
        return conflicts


__all__ = ["OverlapRule"]
