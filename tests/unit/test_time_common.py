"""HH:MM clock helpers."""

from __future__ import annotations

import datetime as dt

from itinerary_engine.domain.enums import Weekday
from itinerary_engine.domain.planning.common import (
    add_minutes,
    format_hhmm,
    is_valid_hhmm,
    parse_hhmm,
    shift_weekday,
    unwrap_near,
    weekday_for,
)


def test_parse_hhmm_valid_and_invalid():
    assert parse_hhmm("09:00") == 540
    assert parse_hhmm("9:05") == 545
    assert parse_hhmm("24:00") == 1440
    assert parse_hhmm("24:01") is None
    assert parse_hhmm("24:59") is None
    assert parse_hhmm("25:00") is None
    assert parse_hhmm("10:60") is None
    assert parse_hhmm("noon") is None
    assert parse_hhmm(None) is None
    assert parse_hhmm("") is None


def test_format_hhmm_wraps_past_midnight():
    assert format_hhmm(0) == "00:00"
    assert format_hhmm(620) == "10:20"
    assert format_hhmm(24 * 60 + 30) == "00:30"


def test_add_minutes():
    assert add_minutes("09:00", 80) == "10:20"
    assert add_minutes("23:50", 20) == "00:10"
    assert add_minutes(None, 10) is None


def test_is_valid_hhmm():
    assert is_valid_hhmm("18:30")
    assert not is_valid_hhmm("18.30")


def test_weekday_for():
    assert weekday_for(dt.date(2026, 10, 19)) == Weekday.MONDAY
    assert weekday_for(dt.date(2026, 10, 25)) == Weekday.SUNDAY
    assert weekday_for(None) is None


def test_unwrap_near_picks_the_closest_calendar_day():
    assert unwrap_near(parse_hhmm("00:30"), parse_hhmm("23:55")) == 24 * 60 + 30
    assert unwrap_near(parse_hhmm("23:30"), 24 * 60 + 30) == parse_hhmm("23:30")
    assert unwrap_near(parse_hhmm("11:25"), parse_hhmm("11:40")) == parse_hhmm("11:25")
    assert unwrap_near(parse_hhmm("23:00"), parse_hhmm("01:00")) == parse_hhmm("23:00")


def test_shift_weekday_wraps_the_week():
    assert shift_weekday(Weekday.SUNDAY, 1) == Weekday.MONDAY
    assert shift_weekday(Weekday.MONDAY, 0) == Weekday.MONDAY
    assert shift_weekday(None, 1) is None
