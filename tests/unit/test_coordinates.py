"""Coordinate resolution order and fallback tables."""

from __future__ import annotations

import json

from itinerary_engine.domain.models import Coordinate, Location, PlaceActivity
from itinerary_engine.planner.coordinates import (
    CoordinateTables,
    default_tables,
    normalize_name,
    resolve_coordinates,
)

_EMBEDDED = Coordinate(lat=1.0, lng=1.0)
_LOCATION = Coordinate(lat=2.0, lng=2.0)
_BY_ID = Coordinate(lat=3.0, lng=3.0)
_BY_LOCATION_NAME = Coordinate(lat=4.0, lng=4.0)
_BY_TITLE = Coordinate(lat=5.0, lng=5.0)


def _tables() -> CoordinateTables:
    return CoordinateTables(
        by_location_id={"loc-1": _BY_ID},
        by_name={"Golden Pavilion": _BY_LOCATION_NAME, "Morning Market": _BY_TITLE},
    )


def test_normalize_name_strips_accents_and_punctuation():
    assert normalize_name("  Café de l'Opéra ") == "cafe de l opera"
    assert normalize_name("Kiyomizu-dera") == "kiyomizu dera"
    assert normalize_name(None) == ""


def test_embedded_coordinates_win():
    activity = PlaceActivity(title="Morning Market", coordinates=_EMBEDDED, location_id="loc-1")
    location = Location(id="loc-1", name="Golden Pavilion", coordinates=_LOCATION)
    assert resolve_coordinates(activity, location, tables=_tables()) == _EMBEDDED


def test_location_record_coordinates_come_second():
    activity = PlaceActivity(title="Morning Market", location_id="loc-1")
    location = Location(id="loc-1", name="Golden Pavilion", coordinates=_LOCATION)
    assert resolve_coordinates(activity, location, tables=_tables()) == _LOCATION


def test_id_table_then_location_name_then_title():
    tables = _tables()
    activity = PlaceActivity(title="Morning Market", location_id="loc-1")
    assert resolve_coordinates(activity, Location(id="loc-1", name="Golden Pavilion"), tables=tables) == _BY_ID

    activity = PlaceActivity(title="Morning Market", location_id="loc-9")
    assert resolve_coordinates(activity, Location(id="loc-9", name="Golden Pavilion"), tables=tables) == _BY_LOCATION_NAME

    assert resolve_coordinates(activity, Location(id="loc-9", name="Somewhere"), tables=tables) == _BY_TITLE
    assert resolve_coordinates(activity, None, tables=tables) == _BY_TITLE


def test_activity_location_id_is_used_without_a_location_record():
    activity = PlaceActivity(title="Unknown", location_id="loc-1")
    assert resolve_coordinates(activity, tables=_tables()) == _BY_ID


def test_unresolvable_returns_none():
    assert resolve_coordinates(PlaceActivity(title="Nowhere"), tables=_tables()) is None


def test_fuzzy_name_match_on_word_boundaries():
    tables = CoordinateTables(by_name={"Ueno Park": _BY_TITLE, "Park": _BY_ID})
    assert tables.for_name("Ueno Park Zoo") == _BY_TITLE
    assert tables.for_name("ueno") == _BY_TITLE
    assert tables.for_name("Uenopark") is None
    # short queries must match exactly
    assert tables.for_name("par") is None


def test_tables_from_file(tmp_path):
    path = tmp_path / "coords.json"
    path.write_text(
        json.dumps(
            {
                "byLocationId": {"x": {"lat": 10, "lng": 20}, "bad": {"lat": "n/a"}},
                "byName": {"Somewhere Nice": {"lat": 11, "lng": 21}},
            }
        ),
        encoding="utf-8",
    )
    tables = CoordinateTables.from_file(path)
    assert tables.for_location_id("x") == Coordinate(lat=10, lng=20)
    assert tables.for_location_id("bad") is None
    assert tables.for_name("somewhere nice") == Coordinate(lat=11, lng=21)


def test_bundled_tables_resolve_well_known_places():
    tables = default_tables()
    assert tables.for_location_id("tokyo-senso-ji") == Coordinate(lat=35.7148, lng=139.7967)
    assert resolve_coordinates(PlaceActivity(title="Senso-ji Temple")) == Coordinate(lat=35.7148, lng=139.7967)
