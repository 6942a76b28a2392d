"""Daily schedule computation.

A single sequential pass over the ordered activities derives arrival and
departure for every stop. The pass is pure: inputs are never mutated and
every activity in the result carries a freshly built ``schedule``.
"""

from __future__ import annotations

from typing import Mapping, Sequence

from itinerary_engine.domain.constants import DEFAULT_DAY_START, DEFAULT_TRAVEL_MODE, MINUTES_IN_DAY
from itinerary_engine.domain.enums import ScheduleStatus, TravelMode, Weekday, WindowStatus
from itinerary_engine.domain.models import (
    ActivitySchedule,
    Day,
    NoteActivity,
    OperatingHours,
    OperatingPeriod,
    OperatingWindow,
    PlaceActivity,
    TravelSegment,
)
from itinerary_engine.domain.planning.common import format_hhmm, parse_hhmm, shift_weekday, unwrap_near

ScheduledActivity = PlaceActivity | NoteActivity


def _window_bounds(period: OperatingPeriod) -> tuple[int, int, bool]:
    opens = parse_hhmm(period.open) or 0
    closes = parse_hhmm(period.close)
    if closes is None:
        closes = MINUTES_IN_DAY
    overnight = bool(period.is_overnight) or closes < opens
    return opens, closes, overnight


def is_within_window(arrival_minutes: int, period: OperatingPeriod) -> bool:
    opens, closes, overnight = _window_bounds(period)
    clock = arrival_minutes % MINUTES_IN_DAY
    if overnight:
        return clock >= opens or clock < closes
    return opens <= clock < closes


def evaluate_operating_window(
    arrival_minutes: int,
    hours: OperatingHours | None,
    weekday: Weekday | None,
) -> tuple[ScheduleStatus, OperatingWindow | None]:
    """Judge ``arrival_minutes`` against the hours of the day it falls on.

    ``weekday`` is the weekday the schedule started on; an arrival past
    midnight is checked against the following day's period.
    """
    weekday = shift_weekday(weekday, arrival_minutes // MINUTES_IN_DAY)
    period = hours.period_for(weekday) if hours is not None else None
    if period is None:
        return ScheduleStatus.SCHEDULED, None
    inside = is_within_window(arrival_minutes, period)
    _, _, overnight = _window_bounds(period)
    window = OperatingWindow(
        opens_at=period.open,
        closes_at=period.close,
        is_overnight=overnight,
        note=hours.notes if hours is not None else None,
        status=WindowStatus.WITHIN if inside else WindowStatus.OUTSIDE,
    )
    return (ScheduleStatus.SCHEDULED if inside else ScheduleStatus.OUT_OF_HOURS), window


def placeholder_segment(mode: TravelMode = DEFAULT_TRAVEL_MODE) -> TravelSegment:
    """Zero-duration leg used when no routed or estimated segment exists yet."""
    return TravelSegment(mode=mode, duration_minutes=0, distance_meters=0.0, is_estimated=True)


def _initial_clock(activities: Sequence[ScheduledActivity], day_start: str | None) -> int:
    start = parse_hhmm(day_start)
    if start is None:
        start = parse_hhmm(DEFAULT_DAY_START) or 9 * 60
    if activities:
        pinned = parse_hhmm(activities[0].manual_start_time)
        if pinned is not None:
            return pinned
    return start


def _pinned_minutes(value: str | None, expected: int) -> int | None:
    pinned = parse_hhmm(value)
    if pinned is None:
        return None
    return unwrap_near(pinned, expected)


def _schedule_note(note: NoteActivity, clock: int) -> NoteActivity:
    # a note's own start time pins it like a manual override
    arrival = _pinned_minutes(note.manual_start_time or note.start_time, clock)
    if arrival is None:
        arrival = clock
    departure = arrival
    end = _pinned_minutes(note.end_time, arrival)
    if end is not None and end > arrival:
        departure = end
    schedule = ActivitySchedule(
        arrival_time=format_hhmm(arrival),
        departure_time=format_hhmm(departure),
        status=ScheduleStatus.SCHEDULED,
        arrival_buffer_minutes=0,
        day_offset=arrival // MINUTES_IN_DAY,
    )
    return note.model_copy(update={"schedule": schedule})


def compute_schedule(
    activities: Sequence[ScheduledActivity],
    segments: Mapping[str, TravelSegment] | None = None,
    operating_hours: Mapping[str, OperatingHours] | None = None,
    *,
    weekday: Weekday | None = None,
    day_start: str | None = None,
    default_mode: TravelMode = DEFAULT_TRAVEL_MODE,
) -> list[ScheduledActivity]:
    """Derive arrival/departure/status for every activity of one day.

    ``segments`` maps a place activity id to the travel leg *into* it. When
    omitted, each activity's own ``travel_from_previous`` is used. A place
    with a predecessor but no known leg gets a zero-duration estimated one;
    a place without a predecessor never carries a leg.

    A manual start time is taken at face value, on whichever calendar day
    puts it nearest the travel-implied arrival. Pinning it earlier than that
    arrival leaves a negative ``arrival_buffer_minutes``, which the conflict
    detector reports. A note's own ``start_time`` pins it the same way.

    Times past midnight wrap on output; ``schedule.day_offset`` keeps the
    number of midnights crossed.
    """
    hours_by_id = operating_hours or {}
    clock = _initial_clock(activities, day_start)
    has_previous_place = False
    result: list[ScheduledActivity] = []

    for activity in activities:
        if isinstance(activity, NoteActivity):
            result.append(_schedule_note(activity, clock))
            continue

        segment: TravelSegment | None = None
        travel = 0
        if has_previous_place:
            if segments is not None:
                segment = segments.get(activity.id)
            else:
                segment = activity.travel_from_previous
            if segment is None:
                segment = placeholder_segment(default_mode)
            travel = int(segment.duration_minutes)
            segment = segment.model_copy(
                update={
                    "departure_time": format_hhmm(clock),
                    "arrival_time": format_hhmm(clock + travel),
                }
            )

        expected = clock + travel
        pinned = _pinned_minutes(activity.manual_start_time, expected)
        arrival = pinned if pinned is not None else expected
        buffer = arrival - expected if pinned is not None else 0
        departure = arrival + int(activity.duration_min or 0)

        status, window = evaluate_operating_window(arrival, hours_by_id.get(activity.id), weekday)
        schedule = ActivitySchedule(
            arrival_time=format_hhmm(arrival),
            departure_time=format_hhmm(departure),
            status=status,
            arrival_buffer_minutes=buffer,
            operating_window=window,
            day_offset=arrival // MINUTES_IN_DAY,
        )
        result.append(
            activity.model_copy(update={"schedule": schedule, "travel_from_previous": segment})
        )
        clock = departure
        has_previous_place = True

    return result


def schedule_day(
    day: Day,
    segments: Mapping[str, TravelSegment] | None = None,
    operating_hours: Mapping[str, OperatingHours] | None = None,
    *,
    default_start: str | None = None,
    default_mode: TravelMode = DEFAULT_TRAVEL_MODE,
) -> Day:
    activities = compute_schedule(
        day.activities,
        segments,
        operating_hours,
        weekday=day.weekday,
        day_start=day.start_time or default_start,
        default_mode=default_mode,
    )
    return day.model_copy(update={"activities": activities})


__all__ = [
    "compute_schedule",
    "evaluate_operating_window",
    "is_within_window",
    "placeholder_segment",
    "schedule_day",
]
