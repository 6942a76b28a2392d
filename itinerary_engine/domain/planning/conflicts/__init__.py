"""Schedule conflict rules and the detector that runs them."""

from itinerary_engine.domain.planning.conflicts.engine import ConflictDetector, detect_conflicts

__all__ = ["ConflictDetector", "detect_conflicts"]
