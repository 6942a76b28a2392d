"""Shared helpers for clock arithmetic on ``HH:MM`` strings."""

from __future__ import annotations

import datetime as dt
import re

from itinerary_engine.domain.constants import MINUTES_IN_DAY
from itinerary_engine.domain.enums import Weekday

_HHMM_RE = re.compile(r"^(\d{1,2}):(\d{2})$")
_WEEKDAYS = tuple(Weekday)


def parse_hhmm(value: str | None) -> int | None:
    if not value:
        return None
    match = _HHMM_RE.match(str(value).strip())
    if not match:
        return None
    hours, minutes = int(match.group(1)), int(match.group(2))
    if minutes > 59 or hours > 24 or (hours == 24 and minutes):
        return None
    return hours * 60 + minutes


def format_hhmm(total_minutes: int | float) -> str:
    """Format minutes since midnight, wrapping past midnight."""
    normalized = int(round(total_minutes)) % MINUTES_IN_DAY
    return f"{normalized // 60:02d}:{normalized % 60:02d}"


def is_valid_hhmm(value: str | None) -> bool:
    return parse_hhmm(value) is not None


def add_minutes(value: str | None, minutes: int | float) -> str | None:
    start = parse_hhmm(value)
    if start is None:
        return None
    return format_hhmm(start + minutes)


def unwrap_near(clock: int, reference: int) -> int:
    """Place a wall-clock time on the calendar day nearest to ``reference``.

    Both values are minutes; ``reference`` may run past midnight. The
    result is never before the first day.
    """
    days = max(0, round((reference - clock) / MINUTES_IN_DAY))
    return clock + days * MINUTES_IN_DAY


def weekday_for(date: dt.date | None) -> Weekday | None:
    if date is None:
        return None
    return _WEEKDAYS[date.weekday()]


def shift_weekday(weekday: Weekday | None, days: int) -> Weekday | None:
    if weekday is None:
        return None
    return _WEEKDAYS[(_WEEKDAYS.index(weekday) + days) % len(_WEEKDAYS)]


__all__ = [
    "add_minutes",
    "format_hhmm",
    "is_valid_hhmm",
    "parse_hhmm",
    "shift_weekday",
    "unwrap_near",
    "weekday_for",
]
