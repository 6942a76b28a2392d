"""Location adapters."""

from itinerary_engine.adapters.location.static import StaticLocationLookup

__all__ = ["StaticLocationLookup"]
