"""Runtime configuration."""

from itinerary_engine.config.settings import EngineSettings, load_settings

__all__ = ["EngineSettings", "load_settings"]
