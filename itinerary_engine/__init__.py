"""Itinerary timeline scheduling and travel-recalculation engine."""

__version__ = "0.1.0"
