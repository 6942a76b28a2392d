"""Route adapters."""

from itinerary_engine.adapters.route.mock import MockRoutingClient
from itinerary_engine.adapters.route.real import HttpRoutingClient

__all__ = ["HttpRoutingClient", "MockRoutingClient"]
