"""Predecessor derivation over a day's ordered activity list.

Order lives only in list position. One pass turns it into an explicit
``destination id -> predecessor id`` map so lookups are O(1) and two
orderings can be diffed boundary by boundary.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Sequence

from itinerary_engine.domain.enums import ActivityKind
from itinerary_engine.domain.models import NoteActivity, PlaceActivity


def segment_key(from_id: str, to_id: str) -> str:
    return f"{from_id}-{to_id}"


@dataclass(frozen=True)
class Boundary:
    from_id: str
    to_id: str

    @property
    def key(self) -> str:
        return segment_key(self.from_id, self.to_id)


def derive_predecessors(activities: Sequence[PlaceActivity | NoteActivity]) -> dict[str, str]:
    """Map every place activity that has one to its nearest preceding place.

    Notes are skipped: they neither need a segment nor break one.
    """
    predecessors: dict[str, str] = {}
    last_place_id: str | None = None
    for activity in activities:
        if activity.kind != ActivityKind.PLACE.value:
            continue
        if last_place_id is not None:
            predecessors[activity.id] = last_place_id
        last_place_id = activity.id
    return predecessors


def changed_boundaries(
    previous: dict[str, str],
    current: dict[str, str],
) -> list[Boundary]:
    """Boundaries in ``current`` whose predecessor differs from ``previous``."""
    return [
        Boundary(from_id=prev, to_id=dest)
        for dest, prev in current.items()
        if previous.get(dest) != prev
    ]


def removed_boundaries(previous: dict[str, str], current: dict[str, str]) -> list[Boundary]:
    return [
        Boundary(from_id=prev, to_id=dest)
        for dest, prev in previous.items()
        if current.get(dest) != prev
    ]


def place_ids(activities: Iterable[PlaceActivity | NoteActivity]) -> list[str]:
    return [a.id for a in activities if a.kind == ActivityKind.PLACE.value]


__all__ = [
    "Boundary",
    "changed_boundaries",
    "derive_predecessors",
    "place_ids",
    "removed_boundaries",
    "segment_key",
]
