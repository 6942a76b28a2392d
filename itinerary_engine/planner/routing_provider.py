"""Routing client selection driven by settings."""

from __future__ import annotations

import logging

from itinerary_engine.adapters.route.mock import MockRoutingClient
from itinerary_engine.adapters.route.real import HttpRoutingClient
from itinerary_engine.config.settings import EngineSettings, load_settings
from itinerary_engine.shared.exceptions import ToolError
from itinerary_engine.tools.interfaces import RoutingClient

_LOGGER = logging.getLogger("itinerary-engine.routing")


def _http_client(settings: EngineSettings) -> HttpRoutingClient:
    return HttpRoutingClient(
        settings.routing_service_url,
        token=settings.routing_api_token,
        timeout_seconds=settings.route_timeout_seconds,
        cache_ttl=settings.route_cache_ttl_seconds,
    )


def build_routing_client(settings: EngineSettings | None = None) -> RoutingClient:
    settings = settings or load_settings()
    if settings.routing_provider == "http":
        return _http_client(settings)
    if settings.routing_provider == "auto" and settings.effective_routing_provider() == "http":
        try:
            return _http_client(settings)
        except ToolError as exc:
            _LOGGER.warning(
                "routing client auto fallback to mock during init: %s",
                type(exc).__name__,
            )
            return MockRoutingClient()
    return MockRoutingClient()


__all__ = ["build_routing_client"]
