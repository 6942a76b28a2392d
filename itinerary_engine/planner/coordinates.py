"""Coordinate resolution for place activities.

First hit wins, no blending:
  1. coordinates embedded on the activity
  2. coordinates of the resolved location record
  3. location-id fallback table
  4. name table, keyed by the resolved location's name
  5. name table, keyed by the activity title

``None`` is a normal answer: the stop is left out of routing and mapping.
"""

from __future__ import annotations

import json
import re
import unicodedata
from functools import lru_cache
from pathlib import Path
from typing import Any, Mapping

from itinerary_engine.domain.models import Coordinate, Location, PlaceActivity

_FALLBACK_FILE = Path(__file__).resolve().parents[1] / "data" / "location_coordinates.json"
_NON_WORD_RE = re.compile(r"[^0-9a-z]+")
_MIN_FUZZY_LENGTH = 4


def normalize_name(value: str | None) -> str:
    if not value:
        return ""
    text = unicodedata.normalize("NFKD", str(value))
    text = "".join(ch for ch in text if not unicodedata.combining(ch)).lower()
    return _NON_WORD_RE.sub(" ", text).strip()


def _to_coordinate(raw: Any) -> Coordinate | None:
    if not isinstance(raw, Mapping):
        return None
    try:
        return Coordinate(lat=float(raw["lat"]), lng=float(raw["lng"]))
    except (KeyError, TypeError, ValueError):
        return None


class CoordinateTables:
    """Fallback coordinate tables: by location id and by fuzzy name."""

    def __init__(
        self,
        by_location_id: Mapping[str, Coordinate] | None = None,
        by_name: Mapping[str, Coordinate] | None = None,
    ) -> None:
        self._by_id = dict(by_location_id or {})
        self._by_name: dict[str, Coordinate] = {}
        for name, coordinate in (by_name or {}).items():
            key = normalize_name(name)
            if key:
                self._by_name[key] = coordinate
        # Longest keys first so "ueno park zoo" prefers "ueno park" over "park".
        self._fuzzy_keys = sorted(self._by_name, key=len, reverse=True)

    @classmethod
    def from_payload(cls, data: Mapping[str, Any]) -> "CoordinateTables":
        by_id: dict[str, Coordinate] = {}
        for key, raw in (data.get("byLocationId") or {}).items():
            coordinate = _to_coordinate(raw)
            if coordinate is not None:
                by_id[str(key)] = coordinate
        by_name: dict[str, Coordinate] = {}
        for key, raw in (data.get("byName") or {}).items():
            coordinate = _to_coordinate(raw)
            if coordinate is not None:
                by_name[str(key)] = coordinate
        return cls(by_location_id=by_id, by_name=by_name)

    @classmethod
    def from_file(cls, path: Path | str) -> "CoordinateTables":
        with open(path, encoding="utf-8") as fh:
            return cls.from_payload(json.load(fh))

    def for_location_id(self, location_id: str | None) -> Coordinate | None:
        if not location_id:
            return None
        return self._by_id.get(location_id)

    def for_name(self, name: str | None) -> Coordinate | None:
        query = normalize_name(name)
        if not query:
            return None
        exact = self._by_name.get(query)
        if exact is not None:
            return exact
        if len(query) < _MIN_FUZZY_LENGTH:
            return None
        padded = f" {query} "
        for key in self._fuzzy_keys:
            if len(key) < _MIN_FUZZY_LENGTH:
                continue
            if f" {key} " in padded or f" {query} " in f" {key} ":
                return self._by_name[key]
        return None


@lru_cache(maxsize=1)
def default_tables() -> CoordinateTables:
    return CoordinateTables.from_file(_FALLBACK_FILE)


def resolve_coordinates(
    activity: PlaceActivity,
    location: Location | None = None,
    *,
    tables: CoordinateTables | None = None,
) -> Coordinate | None:
    if activity.coordinates is not None:
        return activity.coordinates
    if location is not None and location.coordinates is not None:
        return location.coordinates

    lookup = tables if tables is not None else default_tables()
    location_id = location.id if location is not None else activity.location_id
    hit = lookup.for_location_id(location_id)
    if hit is None and location is not None and activity.location_id != location_id:
        hit = lookup.for_location_id(activity.location_id)
    if hit is not None:
        return hit
    if location is not None:
        hit = lookup.for_name(location.name)
        if hit is not None:
            return hit
    return lookup.for_name(activity.title)


__all__ = ["CoordinateTables", "default_tables", "normalize_name", "resolve_coordinates"]
