"""Conflict detector: aggregate independent rules over one day."""

from __future__ import annotations

from typing import Sequence

from itinerary_engine.domain.models import ConflictReport, Day, NoteActivity, PlaceActivity
from itinerary_engine.domain.planning.conflicts.base import ConflictRule
from itinerary_engine.domain.planning.conflicts.buffer_rule import BufferRule
from itinerary_engine.domain.planning.conflicts.open_hours_rule import OpenHoursRule
from itinerary_engine.domain.planning.conflicts.overlap_rule import OverlapRule


class ConflictDetector:
    def __init__(self, rules: tuple[ConflictRule, ...]) -> None:
        self._rules = rules

    @classmethod
    def default(cls) -> "ConflictDetector":
        return cls((OverlapRule(), OpenHoursRule(), BufferRule()))

    def detect(
        self,
        activities: Sequence[PlaceActivity | NoteActivity],
        *,
        day_id: str = "",
    ) -> ConflictReport:
        position = {activity.id: index for index, activity in enumerate(activities)}
        found = []
        for rule in self._rules:
            found.extend(rule.check(activities))
        found.sort(key=lambda conflict: position.get(conflict.activity_id, len(position)))
        return ConflictReport(day_id=day_id, conflicts=found)


def detect_conflicts(day: Day, detector: ConflictDetector | None = None) -> ConflictReport:
    return (detector or ConflictDetector.default()).detect(day.activities, day_id=day.id)


__all__ = ["ConflictDetector", "detect_conflicts"]
