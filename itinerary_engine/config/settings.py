"""Environment-driven engine settings."""

from __future__ import annotations

import os

from pydantic import BaseModel, Field

from itinerary_engine.domain.constants import DEFAULT_DAY_START, DEFAULT_TIMEZONE, SUPPORTED_MODES
from itinerary_engine.domain.enums import TravelMode
from itinerary_engine.domain.planning.common import is_valid_hhmm

_ROUTING_PROVIDERS = {"http", "mock", "auto"}


def _is_configured(value: str | None) -> bool:
    return bool(value and value.strip())


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if not _is_configured(raw):
        return default
    try:
        value = float(str(raw).strip())
    except ValueError:
        return default
    return value if value > 0 else default


def resolve_routing_provider() -> str:
    mode = str(os.getenv("ROUTING_PROVIDER") or "").strip().lower()
    if mode in _ROUTING_PROVIDERS:
        return mode
    return "auto"


def resolve_default_mode() -> TravelMode:
    raw = str(os.getenv("DEFAULT_TRAVEL_MODE") or "").strip().lower()
    if raw in SUPPORTED_MODES:
        return TravelMode(raw)
    return TravelMode.WALK


def resolve_day_start() -> str:
    raw = str(os.getenv("DAY_START_TIME") or "").strip()
    return raw if is_valid_hhmm(raw) else DEFAULT_DAY_START


class EngineSettings(BaseModel):
    routing_provider: str = Field(default="auto")
    routing_service_url: str = Field(default="")
    routing_api_token: str = Field(default="")
    route_timeout_seconds: float = Field(default=10.0, gt=0)
    route_cache_ttl_seconds: float = Field(default=1800.0, gt=0)
    day_start: str = Field(default=DEFAULT_DAY_START)
    default_mode: TravelMode = Field(default=TravelMode.WALK)
    default_timezone: str = Field(default=DEFAULT_TIMEZONE)
    location_data_file: str = Field(default="")

    def effective_routing_provider(self) -> str:
        if self.routing_provider == "auto":
            return "http" if _is_configured(self.routing_service_url) else "mock"
        return self.routing_provider


def load_settings() -> EngineSettings:
    return EngineSettings(
        routing_provider=resolve_routing_provider(),
        routing_service_url=str(os.getenv("ROUTING_SERVICE_URL") or "").strip(),
        routing_api_token=str(os.getenv("ROUTING_API_TOKEN") or "").strip(),
        route_timeout_seconds=_float_env("ROUTE_TIMEOUT_SECONDS", 10.0),
        route_cache_ttl_seconds=_float_env("ROUTE_CACHE_TTL_SECONDS", 1800.0),
        day_start=resolve_day_start(),
        default_mode=resolve_default_mode(),
        default_timezone=str(os.getenv("DEFAULT_TIMEZONE") or "").strip() or DEFAULT_TIMEZONE,
        location_data_file=str(os.getenv("LOCATION_DATA_FILE") or "").strip(),
    )


__all__ = ["EngineSettings", "load_settings", "resolve_routing_provider"]
