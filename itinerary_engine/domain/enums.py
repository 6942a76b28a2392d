"""Domain enums."""

from enum import Enum


class ActivityKind(str, Enum):
    PLACE = "place"
    NOTE = "note"


class TimeOfDay(str, Enum):
    MORNING = "morning"
    AFTERNOON = "afternoon"
    EVENING = "evening"


class TravelMode(str, Enum):
    WALK = "walk"
    CAR = "car"
    TAXI = "taxi"
    BUS = "bus"
    TRAIN = "train"
    SUBWAY = "subway"
    TRANSIT = "transit"
    BICYCLE = "bicycle"


class ScheduleStatus(str, Enum):
    SCHEDULED = "scheduled"
    OUT_OF_HOURS = "out-of-hours"


class WindowStatus(str, Enum):
    WITHIN = "within"
    OUTSIDE = "outside"


class ConflictKind(str, Enum):
    OVERLAP = "overlap"
    OUT_OF_HOURS = "out-of-hours"
    INSUFFICIENT_BUFFER = "insufficient-buffer"


class Severity(str, Enum):
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


class SegmentState(str, Enum):
    IDLE = "idle"
    REQUESTING = "requesting"
    RESOLVED = "resolved"
    FALLBACK = "fallback"


class Weekday(str, Enum):
    MONDAY = "monday"
    TUESDAY = "tuesday"
    WEDNESDAY = "wednesday"
    THURSDAY = "thursday"
    FRIDAY = "friday"
    SATURDAY = "saturday"
    SUNDAY = "sunday"
