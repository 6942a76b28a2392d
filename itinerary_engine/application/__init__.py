"""Application layer: segment recalculation and reorder coordination."""

from itinerary_engine.application.reorder_coordinator import ReorderCoordinator
from itinerary_engine.application.segment_recalculator import SegmentRecalculator

__all__ = ["ReorderCoordinator", "SegmentRecalculator"]
