"""In-memory location lookup backed by a list of location records."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Iterable

from pydantic import TypeAdapter

from itinerary_engine.domain.models import Location, PlaceActivity
from itinerary_engine.planner.coordinates import normalize_name

_LOCATIONS = TypeAdapter(list[Location])


class StaticLocationLookup:
    def __init__(self, locations: Iterable[Location] = ()) -> None:
        self._by_id: dict[str, Location] = {}
        self._by_name: dict[str, Location] = {}
        for location in locations:
            self._by_id[location.id] = location
            key = normalize_name(location.name)
            if key:
                self._by_name.setdefault(key, location)

    @classmethod
    def from_payload(cls, data: list[dict[str, Any]]) -> "StaticLocationLookup":
        return cls(_LOCATIONS.validate_python(data))

    @classmethod
    def from_file(cls, path: Path | str) -> "StaticLocationLookup":
        with open(path, encoding="utf-8") as fh:
            return cls.from_payload(json.load(fh))

    def __len__(self) -> int:
        return len(self._by_id)

    def find_location(self, activity: PlaceActivity) -> Location | None:
        if activity.location_id and activity.location_id in self._by_id:
            return self._by_id[activity.location_id]
        return self._by_name.get(normalize_name(activity.title))


__all__ = ["StaticLocationLookup"]
