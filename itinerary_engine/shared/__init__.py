"""Shared cross-layer types and exceptions."""

from itinerary_engine.shared.exceptions import RoutingTimeout, RoutingUnavailable, ToolError

__all__ = ["ToolError", "RoutingUnavailable", "RoutingTimeout"]
