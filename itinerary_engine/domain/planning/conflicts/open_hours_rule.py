"""Out-of-hours rule: a place is reached while it is closed."""

from __future__ import annotations

from typing import Sequence

from itinerary_engine.domain.enums import ConflictKind, ScheduleStatus, Severity
from itinerary_engine.domain.models import Conflict, NoteActivity, PlaceActivity
from itinerary_engine.domain.planning.common import parse_hhmm
from itinerary_engine.domain.planning.conflicts.common import scheduled_places


def _describe(activity: PlaceActivity) -> str:
    schedule = activity.schedule
    window = schedule.operating_window if schedule else None
    if schedule is None or window is None:
        return f"{activity.title} is closed at the scheduled time"
    arrival = parse_hhmm(schedule.arrival_time)
    opens = parse_hhmm(window.opens_at)
    if not window.is_overnight and arrival is not None and opens is not None and arrival < opens:
        return f"Scheduled arrival at {schedule.arrival_time}, but opens at {window.opens_at}"
    return f"Scheduled arrival at {schedule.arrival_time}, but closes at {window.closes_at}"


class OpenHoursRule:
    def check(self, activities: Sequence[PlaceActivity | NoteActivity]) -> list[Conflict]:
        conflicts: list[Conflict] = []
        for activity in scheduled_places(activities):
            if activity.schedule.status != ScheduleStatus.OUT_OF_HOURS:
                continue
            window = activity.schedule.operating_window
            details = {"scheduledTime": activity.schedule.arrival_time}
            if window is not None:
                details["opensAt"] = window.opens_at
                details["closesAt"] = window.closes_at
            conflicts.append(
                Conflict(
                    activity_id=activity.id,
                    kind=ConflictKind.OUT_OF_HOURS,
                    severity=Severity.ERROR,
                    message=_describe(activity),
                    details=details,
                )
            )
        return conflicts


__all__ = ["OpenHoursRule"]
