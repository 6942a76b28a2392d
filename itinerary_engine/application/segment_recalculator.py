"""Travel segment recalculation with per-segment cancellation.

Each segment key (``<fromId>-<toId>``) owns a small state machine::

    idle -> requesting -> resolved
                       -> fallback

Every request bumps the segment's generation token and cancels the
previous in-flight task, so at most one request per key is outstanding.
A finished request commits only if its token is still the current one;
anything else is dropped, even when the network call completed after
cancellation was requested.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Callable, Optional

from itinerary_engine.domain.constants import SUPPORTED_MODES
from itinerary_engine.domain.enums import SegmentState, TravelMode
from itinerary_engine.domain.exceptions import ModeChangeRejected
from itinerary_engine.domain.models import Coordinate, TravelSegment
from itinerary_engine.domain.planning.adjacency import segment_key
from itinerary_engine.domain.planning.common import add_minutes
from itinerary_engine.infrastructure.logging import StructuredLogger, get_logger
from itinerary_engine.planner.distance import straight_line_estimate
from itinerary_engine.shared.exceptions import ToolError
from itinerary_engine.tools.interfaces import RouteRequest, RouteResult, RoutingClient

_LOGGER = logging.getLogger("itinerary-engine.segments")

CommitCallback = Callable[[str, str, TravelSegment, SegmentState], None]


def fallback_segment(request: RouteRequest) -> TravelSegment:
    """Straight-line estimate for a leg whose route could not be fetched."""
    estimate = straight_line_estimate(request.origin, request.destination, request.mode)
    return TravelSegment(
        mode=request.mode,
        duration_minutes=estimate.duration_minutes,
        distance_meters=estimate.distance_meters,
        path=estimate.path,
        instructions=[],
        departure_time=request.departure_time,
        arrival_time=add_minutes(request.departure_time, estimate.duration_minutes),
        is_estimated=True,
    )


def estimated_segment(
    origin: Coordinate,
    destination: Coordinate,
    mode: TravelMode,
    departure_time: str | None = None,
) -> TravelSegment:
    return fallback_segment(
        RouteRequest(origin=origin, destination=destination, mode=mode, departure_time=departure_time)
    )


def resolved_segment(request: RouteRequest, result: RouteResult) -> TravelSegment:
    return TravelSegment(
        mode=request.mode,
        duration_minutes=result.duration_minutes,
        distance_meters=result.distance_meters,
        path=list(result.path),
        instructions=list(result.instructions),
        departure_time=request.departure_time,
        arrival_time=result.arrival_time or add_minutes(request.departure_time, result.duration_minutes),
        is_estimated=bool(result.is_estimated),
    )


@dataclass
class SegmentRecord:
    key: str
    from_id: str
    to_id: str
    mode: TravelMode = TravelMode.WALK
    state: SegmentState = SegmentState.IDLE
    token: int = 0
    segment: Optional[TravelSegment] = None
    task: Optional[asyncio.Task] = field(default=None, repr=False)

    @property
    def in_flight(self) -> bool:
        return self.task is not None and not self.task.done()


class SegmentRecalculator:
    def __init__(
        self,
        client: RoutingClient,
        *,
        on_commit: CommitCallback | None = None,
        timeout_seconds: float | None = None,
        logger: StructuredLogger | None = None,
    ) -> None:
        self._client = client
        self._on_commit = on_commit
        self._timeout = timeout_seconds
        self._log = logger or get_logger()
        self._records: dict[str, SegmentRecord] = {}

    # ── inspection ─────────────────────────────────────

    def record(self, key: str) -> SegmentRecord | None:
        return self._records.get(key)

    def state(self, key: str) -> SegmentState:
        record = self._records.get(key)
        return record.state if record is not None else SegmentState.IDLE

    def token(self, key: str) -> int:
        record = self._records.get(key)
        return record.token if record is not None else 0

    def pending_tasks(self) -> list[asyncio.Task]:
        return [r.task for r in self._records.values() if r.task is not None and not r.task.done()]

    @property
    def pending(self) -> int:
        return len(self.pending_tasks())

    # ── transitions ────────────────────────────────────

    def request(
        self,
        from_id: str,
        to_id: str,
        *,
        origin: Coordinate,
        destination: Coordinate,
        mode: TravelMode,
        departure_time: str | None = None,
        timezone: str | None = None,
    ) -> asyncio.Task:
        """Move the segment to ``requesting`` and start a route fetch.

        Must be called from inside a running event loop.
        """
        key = segment_key(from_id, to_id)
        record = self._records.get(key)
        if record is None:
            record = SegmentRecord(key=key, from_id=from_id, to_id=to_id)
            self._records[key] = record
        self._cancel(record, reason="superseded")

        record.token += 1
        record.mode = TravelMode(mode)
        record.state = SegmentState.REQUESTING
        route_request = RouteRequest(
            origin=origin,
            destination=destination,
            mode=record.mode,
            departure_time=departure_time,
            timezone=timezone,
        )
        self._log.segment_request(key, mode=record.mode.value, token=record.token)
        record.task = asyncio.get_running_loop().create_task(
            self._run(record, record.token, route_request),
            name=f"segment:{key}#{record.token}",
        )
        return record.task

    def change_mode(
        self,
        from_id: str,
        to_id: str,
        mode: TravelMode | str,
        *,
        origin: Coordinate | None,
        destination: Coordinate | None,
        departure_time: str | None = None,
        timezone: str | None = None,
    ) -> asyncio.Task:
        """User-initiated mode change; rejected without any state change on bad input."""
        key = segment_key(from_id, to_id)
        value = mode.value if isinstance(mode, TravelMode) else str(mode)
        if value not in SUPPORTED_MODES:
            self._log.warning("segment_recalculator", f"mode change rejected: unsupported mode {value}", segment=key)
            raise ModeChangeRejected(key, f"unsupported mode {value!r}")
        if origin is None or destination is None:
            self._log.warning("segment_recalculator", "mode change rejected: missing coordinates", segment=key)
            raise ModeChangeRejected(key, "missing coordinates")
        return self.request(
            from_id,
            to_id,
            origin=origin,
            destination=destination,
            mode=TravelMode(value),
            departure_time=departure_time,
            timezone=timezone,
        )

    def forget(self, key: str) -> None:
        record = self._records.pop(key, None)
        if record is not None:
            self._cancel(record, reason="boundary_removed")
            record.token += 1

    def cancel_all(self) -> None:
        """Tear down: cancel every outstanding request and invalidate its token."""
        for record in self._records.values():
            self._cancel(record, reason="teardown")
            record.token += 1
        self._records.clear()

    # ── internals ──────────────────────────────────────

    def _cancel(self, record: SegmentRecord, *, reason: str) -> None:
        if record.in_flight:
            record.task.cancel()
            self._log.segment_discarded(record.key, token=record.token, reason=reason)

    def _is_current(self, record: SegmentRecord, token: int) -> bool:
        return self._records.get(record.key) is record and record.token == token

    async def _fetch(self, request: RouteRequest) -> RouteResult:
        if self._timeout is None:
            return await self._client.route(request)
        return await asyncio.wait_for(self._client.route(request), timeout=self._timeout)

    async def _run(self, record: SegmentRecord, token: int, request: RouteRequest) -> TravelSegment | None:
        try:
            result = await self._fetch(request)
        except (ToolError, asyncio.TimeoutError) as exc:
            if not self._is_current(record, token):
                self._log.segment_discarded(record.key, token=token, reason="stale_failure")
                return None
            _LOGGER.warning(
                "routing fallback to straight line: %s mode=%s error=%s",
                record.key,
                request.mode.value,
                type(exc).__name__,
            )
            self._log.error("routing", str(exc) or type(exc).__name__, segment=record.key)
            segment = fallback_segment(request)
            self._commit(record, token, segment, SegmentState.FALLBACK, error=type(exc).__name__)
            return segment

        if not self._is_current(record, token):
            self._log.segment_discarded(record.key, token=token, reason="stale_result")
            return None
        segment = resolved_segment(request, result)
        self._commit(record, token, segment, SegmentState.RESOLVED)
        return segment

    def _commit(
        self,
        record: SegmentRecord,
        token: int,
        segment: TravelSegment,
        state: SegmentState,
        **extra: object,
    ) -> None:
        record.segment = segment
        record.state = state
        self._log.segment_commit(
            record.key,
            state=state.value,
            token=token,
            duration_minutes=segment.duration_minutes,
            is_estimated=segment.is_estimated,
            **extra,
        )
        if self._on_commit is not None:
            self._on_commit(record.key, record.to_id, segment, state)


__all__ = [
    "SegmentRecalculator",
    "SegmentRecord",
    "estimated_segment",
    "fallback_segment",
    "resolved_segment",
]
