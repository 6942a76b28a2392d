"""Domain constants shared by deterministic logic."""

from itinerary_engine.domain.enums import TravelMode

SUPPORTED_MODES = frozenset(mode.value for mode in TravelMode)

# Straight-line fallback speeds (km/h).
MODE_SPEED_KMH = {
    TravelMode.WALK: 4.8,
    TravelMode.BICYCLE: 15.0,
    TravelMode.CAR: 40.0,
    TravelMode.TAXI: 35.0,
    TravelMode.BUS: 20.0,
    TravelMode.TRAIN: 60.0,
    TravelMode.SUBWAY: 30.0,
    TravelMode.TRANSIT: 25.0,
}

DEFAULT_DAY_START = "09:00"
DEFAULT_TRAVEL_MODE = TravelMode.WALK
DEFAULT_TIMEZONE = "Asia/Tokyo"
MINUTES_IN_DAY = 24 * 60
MIN_SEGMENT_MINUTES = 1
