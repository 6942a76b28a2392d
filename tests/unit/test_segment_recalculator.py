"""Travel segment recalculation: supersede, fallback, rejection."""

from __future__ import annotations

import asyncio

import pytest

from itinerary_engine.application.segment_recalculator import SegmentRecalculator
from itinerary_engine.domain.constants import MODE_SPEED_KMH
from itinerary_engine.domain.enums import SegmentState, TravelMode
from itinerary_engine.domain.exceptions import ModeChangeRejected
from itinerary_engine.domain.models import Coordinate
from itinerary_engine.shared.exceptions import RoutingTimeout, RoutingUnavailable
from itinerary_engine.tools.interfaces import RouteRequest, RouteResult

_ORIGIN = Coordinate(lat=35.0, lng=135.0)
# ~5 km due north
_DEST = Coordinate(lat=35.044966, lng=135.0)


class _GatedClient:
    """Each request blocks until its gate is opened."""

    def __init__(self, *, answer_when_cancelled: bool = False) -> None:
        self.requests: list[RouteRequest] = []
        self.gates: list[asyncio.Event] = []
        self._answer_when_cancelled = answer_when_cancelled

    async def route(self, request: RouteRequest) -> RouteResult:
        gate = asyncio.Event()
        self.requests.append(request)
        self.gates.append(gate)
        minutes = 10 * len(self.requests)
        try:
            await gate.wait()
        except asyncio.CancelledError:
            if not self._answer_when_cancelled:
                raise
        return RouteResult(path=[request.origin, request.destination], duration_minutes=minutes, distance_meters=5000)


class _FailingClient:
    def __init__(self, exc: Exception) -> None:
        self._exc = exc
        self.calls = 0

    async def route(self, request: RouteRequest) -> RouteResult:
        self.calls += 1
        raise self._exc


class _SlowClient:
    async def route(self, request: RouteRequest) -> RouteResult:
        await asyncio.sleep(5)
        return RouteResult(duration_minutes=1)


async def _until(predicate, attempts: int = 50) -> None:
    for _ in range(attempts):
        if predicate():
            return
        await asyncio.sleep(0)
    raise AssertionError("condition not reached")


def _recorder():
    commits: list[tuple] = []

    def on_commit(key, to_id, segment, state):
        commits.append((key, to_id, segment, state))

    return commits, on_commit


@pytest.mark.asyncio
async def test_success_commits_resolved_segment():
    client = _GatedClient()
    commits, on_commit = _recorder()
    recalculator = SegmentRecalculator(client, on_commit=on_commit)

    task = recalculator.request("a", "b", origin=_ORIGIN, destination=_DEST, mode=TravelMode.WALK, departure_time="10:00")
    assert recalculator.state("a-b") == SegmentState.REQUESTING
    await _until(lambda: len(client.gates) == 1)
    client.gates[0].set()
    segment = await task

    assert recalculator.state("a-b") == SegmentState.RESOLVED
    assert segment.duration_minutes == 10
    assert segment.is_estimated is False
    assert segment.departure_time == "10:00"
    assert segment.arrival_time == "10:10"
    assert commits == [("a-b", "b", segment, SegmentState.RESOLVED)]
    assert recalculator.pending == 0


@pytest.mark.asyncio
async def test_newer_request_cancels_the_older_one():
    client = _GatedClient()
    commits, on_commit = _recorder()
    recalculator = SegmentRecalculator(client, on_commit=on_commit)

    first = recalculator.request("a", "b", origin=_ORIGIN, destination=_DEST, mode=TravelMode.WALK)
    await asyncio.sleep(0)
    second = recalculator.request("a", "b", origin=_ORIGIN, destination=_DEST, mode=TravelMode.CAR)
    assert recalculator.token("a-b") == 2
    assert recalculator.pending == 1

    with pytest.raises(asyncio.CancelledError):
        await first
    await _until(lambda: len(client.gates) == 2)
    client.gates[1].set()
    await second

    assert len(commits) == 1
    assert commits[0][2].mode == TravelMode.CAR
    assert commits[0][2].duration_minutes == 20


@pytest.mark.asyncio
async def test_late_result_of_superseded_request_is_never_applied():
    client = _GatedClient(answer_when_cancelled=True)
    commits, on_commit = _recorder()
    recalculator = SegmentRecalculator(client, on_commit=on_commit)

    first = recalculator.request("a", "b", origin=_ORIGIN, destination=_DEST, mode=TravelMode.WALK)
    await asyncio.sleep(0)
    second = recalculator.request("a", "b", origin=_ORIGIN, destination=_DEST, mode=TravelMode.BUS)

    # the client ignores cancellation and still returns a result
    assert await first is None
    await _until(lambda: len(client.gates) == 2)
    client.gates[1].set()
    await second

    assert [c[2].mode for c in commits] == [TravelMode.BUS]
    assert recalculator.record("a-b").segment.duration_minutes == 20


@pytest.mark.asyncio
async def test_routing_timeout_falls_back_to_straight_line_car_estimate():
    commits, on_commit = _recorder()
    recalculator = SegmentRecalculator(_FailingClient(RoutingTimeout("routing", "slow")), on_commit=on_commit)

    segment = await recalculator.request("a", "b", origin=_ORIGIN, destination=_DEST, mode=TravelMode.CAR)

    expected = 5.0 / MODE_SPEED_KMH[TravelMode.CAR] * 60
    assert recalculator.state("a-b") == SegmentState.FALLBACK
    assert segment.is_estimated is True
    assert segment.mode == TravelMode.CAR
    assert abs(segment.duration_minutes - expected) <= 1
    assert 4900 < segment.distance_meters < 5100
    assert segment.path == [_ORIGIN, _DEST]
    assert commits[0][3] == SegmentState.FALLBACK


@pytest.mark.asyncio
async def test_unavailable_service_falls_back():
    recalculator = SegmentRecalculator(_FailingClient(RoutingUnavailable("routing", "HTTP 503")))
    segment = await recalculator.request("a", "b", origin=_ORIGIN, destination=_DEST, mode=TravelMode.WALK)
    assert segment.is_estimated is True
    assert recalculator.state("a-b") == SegmentState.FALLBACK


@pytest.mark.asyncio
async def test_local_time_bound_is_treated_as_failure():
    recalculator = SegmentRecalculator(_SlowClient(), timeout_seconds=0.01)
    segment = await recalculator.request("a", "b", origin=_ORIGIN, destination=_DEST, mode=TravelMode.TAXI)
    assert segment.is_estimated is True
    assert recalculator.state("a-b") == SegmentState.FALLBACK


@pytest.mark.asyncio
async def test_unexpected_errors_propagate():
    recalculator = SegmentRecalculator(_FailingClient(RuntimeError("bug")))
    task = recalculator.request("a", "b", origin=_ORIGIN, destination=_DEST, mode=TravelMode.WALK)
    with pytest.raises(RuntimeError):
        await task


@pytest.mark.asyncio
async def test_mode_change_with_unsupported_mode_is_rejected_without_state_change():
    client = _FailingClient(RoutingUnavailable("routing", "unused"))
    recalculator = SegmentRecalculator(client)
    with pytest.raises(ModeChangeRejected) as exc_info:
        recalculator.change_mode("a", "b", "hovercraft", origin=_ORIGIN, destination=_DEST)
    assert exc_info.value.segment_key == "a-b"
    assert recalculator.state("a-b") == SegmentState.IDLE
    assert recalculator.token("a-b") == 0
    assert client.calls == 0


@pytest.mark.asyncio
async def test_mode_change_with_missing_coordinate_is_rejected():
    recalculator = SegmentRecalculator(_GatedClient())
    with pytest.raises(ModeChangeRejected):
        recalculator.change_mode("a", "b", TravelMode.CAR, origin=_ORIGIN, destination=None)
    assert recalculator.record("a-b") is None


@pytest.mark.asyncio
async def test_mode_change_is_honored_when_the_fetch_fails():
    recalculator = SegmentRecalculator(_FailingClient(RoutingUnavailable("routing", "down")))
    segment = await recalculator.change_mode("a", "b", "bicycle", origin=_ORIGIN, destination=_DEST)
    assert segment.mode == TravelMode.BICYCLE
    assert segment.is_estimated is True


@pytest.mark.asyncio
async def test_cancel_all_drops_every_in_flight_request():
    client = _GatedClient(answer_when_cancelled=True)
    commits, on_commit = _recorder()
    recalculator = SegmentRecalculator(client, on_commit=on_commit)

    tasks = [
        recalculator.request("a", "b", origin=_ORIGIN, destination=_DEST, mode=TravelMode.WALK),
        recalculator.request("b", "c", origin=_DEST, destination=_ORIGIN, mode=TravelMode.WALK),
    ]
    await _until(lambda: len(client.gates) == 2)
    recalculator.cancel_all()
    results = await asyncio.gather(*tasks, return_exceptions=True)

    assert results == [None, None]
    assert commits == []
    assert recalculator.record("a-b") is None
    assert recalculator.pending == 0


@pytest.mark.asyncio
async def test_forget_discards_a_single_segment():
    client = _GatedClient()
    commits, on_commit = _recorder()
    recalculator = SegmentRecalculator(client, on_commit=on_commit)
    task = recalculator.request("a", "b", origin=_ORIGIN, destination=_DEST, mode=TravelMode.WALK)
    await asyncio.sleep(0)
    recalculator.forget("a-b")
    with pytest.raises(asyncio.CancelledError):
        await task
    assert commits == []
    assert recalculator.state("a-b") == SegmentState.IDLE
