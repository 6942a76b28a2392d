"""Reorder coordination for one or more live day timelines.

Every change to a day's stop sequence (drag, insert, delete, copy) and
every edit that can move times goes through ``on_sequence_change``:

1. derive the predecessor map of the new order;
2. hand only the boundaries whose predecessor changed (or whose endpoint
   moved) to the segment recalculator;
3. apply a best-effort schedule right away using stale or estimated legs;
4. re-apply schedule and conflicts each time a routed leg commits.

Days never share state: each has its own session and recalculator.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from functools import partial
from typing import Any, Callable, Optional, Sequence

from itinerary_engine.config.settings import EngineSettings, load_settings
from itinerary_engine.domain.enums import SegmentState, TravelMode
from itinerary_engine.domain.exceptions import InvalidSequence, ModeChangeRejected, UnknownActivity
from itinerary_engine.domain.models import (
    ConflictReport,
    Coordinate,
    Day,
    Location,
    NoteActivity,
    OperatingHours,
    PlaceActivity,
    TravelSegment,
    new_activity_id,
)
from itinerary_engine.domain.planning.adjacency import (
    Boundary,
    changed_boundaries,
    derive_predecessors,
    removed_boundaries,
    segment_key,
)
from itinerary_engine.domain.planning.conflicts import ConflictDetector
from itinerary_engine.domain.planning.scheduling import placeholder_segment, schedule_day
from itinerary_engine.infrastructure.logging import StructuredLogger, get_logger
from itinerary_engine.application.segment_recalculator import SegmentRecalculator, estimated_segment
from itinerary_engine.planner.coordinates import CoordinateTables, resolve_coordinates
from itinerary_engine.tools.interfaces import LocationLookup, RoutingClient

_LOGGER = logging.getLogger("itinerary-engine.timeline")

Listener = Callable[[Day, ConflictReport], None]

_EDITABLE_FIELDS = frozenset(
    {"title", "duration_min", "manual_start_time", "notes", "start_time", "end_time", "coordinates", "location_id", "time_of_day"}
)


@dataclass
class _DaySession:
    day: Day
    recalculator: SegmentRecalculator
    predecessors: dict[str, str] = field(default_factory=dict)
    # destination activity id -> (predecessor id, leg into it)
    segments: dict[str, tuple[str, TravelSegment]] = field(default_factory=dict)
    coordinates: dict[str, Optional[Coordinate]] = field(default_factory=dict)
    locations: dict[tuple[str, str], Optional[Location]] = field(default_factory=dict)
    report: ConflictReport = field(default_factory=ConflictReport)


class ReorderCoordinator:
    def __init__(
        self,
        client: RoutingClient,
        *,
        locations: LocationLookup | None = None,
        tables: CoordinateTables | None = None,
        settings: EngineSettings | None = None,
        detector: ConflictDetector | None = None,
        logger: StructuredLogger | None = None,
    ) -> None:
        self._client = client
        self._locations = locations
        self._tables = tables
        self._settings = settings or load_settings()
        self._detector = detector or ConflictDetector.default()
        self._log = logger or get_logger()
        self._sessions: dict[str, _DaySession] = {}
        self._listeners: list[Listener] = []

    # ── observation ────────────────────────────────────

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def current(self, day_id: str) -> Day:
        return self._session(day_id).day

    def conflicts(self, day_id: str) -> ConflictReport:
        return self._session(day_id).report

    def segment_state(self, day_id: str, from_id: str, to_id: str) -> SegmentState:
        return self._session(day_id).recalculator.state(segment_key(from_id, to_id))

    def pending(self, day_id: str) -> int:
        session = self._sessions.get(day_id)
        return session.recalculator.pending if session is not None else 0

    # ── entry point ────────────────────────────────────

    def on_sequence_change(self, day: Day, new_order: Sequence[str]) -> Day:
        """Re-sequence ``day`` to ``new_order`` and return the best-effort schedule.

        Ids missing from ``new_order`` are dropped from the day. Routed legs for
        the changed boundaries arrive later and are applied as they commit.
        """
        ordered = self._ordered_activities(day, new_order)
        session = self._sessions.get(day.id)
        if session is None:
            session = self._new_session(day)

        coordinates = {a.id: self._coordinates_for(session, a) for a in ordered if isinstance(a, PlaceActivity)}
        moved = {
            activity_id
            for activity_id, coordinate in coordinates.items()
            if activity_id in session.coordinates and session.coordinates[activity_id] != coordinate
        }

        predecessors = derive_predecessors(ordered)
        for boundary in removed_boundaries(session.predecessors, predecessors):
            session.recalculator.forget(boundary.key)
            held = session.segments.get(boundary.to_id)
            if held is not None and held[0] == boundary.from_id:
                del session.segments[boundary.to_id]

        stale = changed_boundaries(session.predecessors, predecessors)
        stale_keys = {b.key for b in stale}
        for dest, prev in predecessors.items():
            boundary = Boundary(from_id=prev, to_id=dest)
            if boundary.key not in stale_keys and (dest in moved or prev in moved):
                stale.append(boundary)
                stale_keys.add(boundary.key)

        by_id = {a.id: a for a in ordered}
        for boundary in stale:
            mode = self._mode_for(session, by_id[boundary.to_id])
            origin = coordinates.get(boundary.from_id)
            destination = coordinates.get(boundary.to_id)
            session.segments[boundary.to_id] = (
                boundary.from_id,
                self._interim_segment(origin, destination, mode),
            )

        session.predecessors = predecessors
        session.coordinates = coordinates
        session.day = day.model_copy(update={"activities": ordered})
        scheduled = self._apply(session)

        departures = {
            a.id: a.schedule.departure_time for a in scheduled.activities if a.schedule is not None
        }
        for boundary in stale:
            origin = coordinates.get(boundary.from_id)
            destination = coordinates.get(boundary.to_id)
            if origin is None or destination is None:
                # an older fetch for this key must not overwrite the placeholder
                session.recalculator.forget(boundary.key)
                continue
            session.recalculator.request(
                boundary.from_id,
                boundary.to_id,
                origin=origin,
                destination=destination,
                mode=session.segments[boundary.to_id][1].mode,
                departure_time=departures.get(boundary.from_id),
                timezone=day.timezone,
            )
        return scheduled

    # ── edit operations ────────────────────────────────

    def change_travel_mode(self, day_id: str, activity_id: str, mode: TravelMode | str) -> Day:
        session = self._session(day_id)
        activity = self._require(session, activity_id)
        from_id = session.predecessors.get(activity_id)
        if not isinstance(activity, PlaceActivity) or from_id is None:
            raise ModeChangeRejected(activity_id, "activity has no incoming travel segment")

        previous = session.day.activity(from_id)
        departure = previous.schedule.departure_time if previous is not None and previous.schedule else None
        session.recalculator.change_mode(
            from_id,
            activity_id,
            mode,
            origin=session.coordinates.get(from_id),
            destination=session.coordinates.get(activity_id),
            departure_time=departure,
            timezone=session.day.timezone,
        )
        held = session.segments.get(activity_id)
        current = held[1] if held is not None else placeholder_segment(self._settings.default_mode)
        session.segments[activity_id] = (from_id, current.model_copy(update={"mode": TravelMode(mode)}))
        return self._apply(session)

    def update_activity(self, day_id: str, activity_id: str, **changes: Any) -> Day:
        """Edit duration, manual time, coordinates, ... and recompute the day.

        Passing ``manual_start_time=None`` clears a manual override.
        """
        unknown = set(changes) - _EDITABLE_FIELDS
        if unknown:
            raise ValueError(f"Fields not editable: {sorted(unknown)}")
        session = self._session(day_id)
        activity = self._require(session, activity_id)
        payload = activity.model_dump()
        payload.update({k: v for k, v in changes.items() if k in type(activity).model_fields})
        updated = type(activity).model_validate(payload)
        activities = [updated if a.id == activity_id else a for a in session.day.activities]
        day = session.day.model_copy(update={"activities": activities})
        return self.on_sequence_change(day, day.activity_ids)

    def insert_activity(
        self,
        day_id: str,
        activity: PlaceActivity | NoteActivity,
        index: int | None = None,
    ) -> Day:
        session = self._session(day_id)
        if session.day.activity(activity.id) is not None:
            raise InvalidSequence(f"Activity id already in day: {activity.id}")
        activities = list(session.day.activities)
        position = len(activities) if index is None else max(0, min(index, len(activities)))
        activities.insert(position, activity)
        day = session.day.model_copy(update={"activities": activities})
        return self.on_sequence_change(day, day.activity_ids)

    def remove_activity(self, day_id: str, activity_id: str) -> Day:
        session = self._session(day_id)
        self._require(session, activity_id)
        order = [i for i in session.day.activity_ids if i != activity_id]
        return self.on_sequence_change(session.day, order)

    def copy_activity(self, day_id: str, activity_id: str) -> Day:
        """Duplicate a stop right after the original under a fresh id."""
        session = self._session(day_id)
        original = self._require(session, activity_id)
        clone = original.model_copy(
            update={"id": new_activity_id(), "schedule": None, "manual_start_time": None}
        )
        if isinstance(clone, PlaceActivity):
            clone = clone.model_copy(update={"travel_from_previous": None})
        index = session.day.activity_ids.index(activity_id) + 1
        return self.insert_activity(day_id, clone, index)

    # ── lifecycle ──────────────────────────────────────

    async def settle(self, day_id: str) -> Day:
        """Wait until every in-flight segment of ``day_id`` has committed or been dropped."""
        session = self._session(day_id)
        while True:
            tasks = session.recalculator.pending_tasks()
            if not tasks:
                break
            results = await asyncio.gather(*tasks, return_exceptions=True)
            for result in results:
                if isinstance(result, Exception):
                    raise result
        return session.day

    def teardown(self, day_id: str) -> None:
        session = self._sessions.pop(day_id, None)
        if session is not None:
            session.recalculator.cancel_all()

    def close(self) -> None:
        for day_id in list(self._sessions):
            self.teardown(day_id)

    # ── internals ──────────────────────────────────────

    def _session(self, day_id: str) -> _DaySession:
        session = self._sessions.get(day_id)
        if session is None:
            raise KeyError(f"Unknown day: {day_id}")
        return session

    def _new_session(self, day: Day) -> _DaySession:
        recalculator = SegmentRecalculator(
            self._client,
            on_commit=partial(self._on_segment_commit, day.id),
            timeout_seconds=self._settings.route_timeout_seconds,
            logger=self._log,
        )
        session = _DaySession(day=day, recalculator=recalculator)
        self._sessions[day.id] = session
        return session

    @staticmethod
    def _require(session: _DaySession, activity_id: str) -> PlaceActivity | NoteActivity:
        activity = session.day.activity(activity_id)
        if activity is None:
            raise UnknownActivity(activity_id)
        return activity

    @staticmethod
    def _ordered_activities(day: Day, new_order: Sequence[str]) -> list[PlaceActivity | NoteActivity]:
        by_id = {a.id: a for a in day.activities}
        seen: set[str] = set()
        ordered: list[PlaceActivity | NoteActivity] = []
        for activity_id in new_order:
            if activity_id in seen:
                raise InvalidSequence(f"Duplicate activity id in order: {activity_id}")
            if activity_id not in by_id:
                raise InvalidSequence(f"Activity id not in day {day.id}: {activity_id}")
            seen.add(activity_id)
            ordered.append(by_id[activity_id])
        return ordered

    def _location_for(self, session: _DaySession, activity: PlaceActivity) -> Location | None:
        if self._locations is None:
            return None
        key = (activity.id, activity.location_id or activity.title)
        if key not in session.locations:
            session.locations[key] = self._locations.find_location(activity)
        return session.locations[key]

    def _coordinates_for(self, session: _DaySession, activity: PlaceActivity) -> Coordinate | None:
        return resolve_coordinates(activity, self._location_for(session, activity), tables=self._tables)

    def _mode_for(self, session: _DaySession, activity: PlaceActivity | NoteActivity) -> TravelMode:
        held = session.segments.get(activity.id)
        if held is not None:
            return held[1].mode
        if isinstance(activity, PlaceActivity) and activity.travel_from_previous is not None:
            return activity.travel_from_previous.mode
        return self._settings.default_mode

    def _interim_segment(
        self,
        origin: Coordinate | None,
        destination: Coordinate | None,
        mode: TravelMode,
    ) -> TravelSegment:
        if origin is None or destination is None:
            return placeholder_segment(mode)
        return estimated_segment(origin, destination, mode)

    def _operating_hours(self, session: _DaySession) -> dict[str, OperatingHours]:
        hours: dict[str, OperatingHours] = {}
        for activity in session.day.activities:
            if not isinstance(activity, PlaceActivity):
                continue
            location = self._location_for(session, activity)
            if location is not None and location.operating_hours is not None:
                hours[activity.id] = location.operating_hours
        return hours

    def _apply(self, session: _DaySession) -> Day:
        segments = {dest: leg for dest, (_, leg) in session.segments.items()}
        scheduled = schedule_day(
            session.day,
            segments,
            self._operating_hours(session),
            default_start=self._settings.day_start,
            default_mode=self._settings.default_mode,
        )
        session.day = scheduled
        session.report = self._detector.detect(scheduled.activities, day_id=scheduled.id)
        self._log.schedule_applied(
            scheduled.id,
            conflicts=session.report.summary.total,
            pending_segments=session.recalculator.pending,
        )
        for listener in list(self._listeners):
            listener(scheduled, session.report)
        return scheduled

    def _on_segment_commit(
        self,
        day_id: str,
        key: str,
        to_id: str,
        segment: TravelSegment,
        state: SegmentState,
    ) -> None:
        session = self._sessions.get(day_id)
        if session is None:
            return
        from_id = session.predecessors.get(to_id)
        if from_id is None or segment_key(from_id, to_id) != key:
            _LOGGER.info("dropping segment %s: boundary no longer present", key)
            return
        session.segments[to_id] = (from_id, segment)
        self._apply(session)


__all__ = ["ReorderCoordinator"]
