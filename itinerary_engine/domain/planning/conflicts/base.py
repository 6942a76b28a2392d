"""Base types for conflict rules."""

from __future__ import annotations

from typing import Protocol, Sequence

from itinerary_engine.domain.models import Conflict, NoteActivity, PlaceActivity


class ConflictRule(Protocol):
    """Single-responsibility rule over one day's computed schedule."""

    def check(self, activities: Sequence[PlaceActivity | NoteActivity]) -> list[Conflict]:
        ...


__all__ = ["ConflictRule"]
