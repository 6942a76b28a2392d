"""HTTP routing adapter.

POSTs ``{origin, destination, mode, departureTime?, timezone?}`` to
``<ROUTING_SERVICE_URL>/api/routing/route`` and expects
``{path, durationMinutes, distanceMeters, instructions?, arrivalTime?, isEstimated?}``.

Failure policy:
  - timeout                     -> RoutingTimeout
  - network error / non-2xx     -> RoutingUnavailable
  - malformed payload           -> RoutingUnavailable
  - 404 or ``noRoute: true``    -> straight-line estimate, ``isEstimated=True``
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

import httpx
from pydantic import ValidationError

from itinerary_engine.adapters.route.mock import estimated_route
from itinerary_engine.domain.models import Coordinate
from itinerary_engine.domain.planning.common import add_minutes
from itinerary_engine.infrastructure.cache import RouteCache, route_cache
from itinerary_engine.infrastructure.http_client import AsyncHttpClient
from itinerary_engine.shared.exceptions import RoutingTimeout, RoutingUnavailable
from itinerary_engine.tools.interfaces import RouteRequest, RouteResult

_ROUTE_PATH = "/api/routing/route"
_NO_ROUTE_STATUS = frozenset({404})
_LOGGER = logging.getLogger("itinerary-engine.routing")


def dedupe_path(path: list[Coordinate]) -> list[Coordinate]:
    merged: list[Coordinate] = []
    for point in path:
        if merged and merged[-1].lat == point.lat and merged[-1].lng == point.lng:
            continue
        merged.append(point)
    return merged


class HttpRoutingClient:
    def __init__(
        self,
        base_url: str,
        *,
        token: str = "",
        timeout_seconds: float = 10.0,
        cache: Optional[RouteCache] = route_cache,
        cache_ttl: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        if not base_url:
            raise RoutingUnavailable("routing", "ROUTING_SERVICE_URL is not configured")
        self._url = base_url.rstrip("/") + _ROUTE_PATH
        self._token = token
        self._timeout = timeout_seconds
        self._cache = cache
        self._cache_ttl = cache_ttl
        self._http = AsyncHttpClient(
            timeout=timeout_seconds,
            tool_name="routing",
            secrets=(token,) if token else (),
            transport=transport,
        )

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        return headers

    async def route(self, request: RouteRequest) -> RouteResult:
        if self._cache is not None:
            cached = self._cache.get(request)
            if cached is not None:
                return cached

        payload = request.model_dump(mode="json", by_alias=True, exclude_none=True)
        try:
            status, data = await asyncio.wait_for(
                self._http.post_json(
                    self._url,
                    payload=payload,
                    headers=self._headers(),
                    passthrough_status=_NO_ROUTE_STATUS,
                ),
                timeout=self._timeout,
            )
        except asyncio.TimeoutError:
            raise RoutingTimeout("routing", f"route request exceeded {self._timeout}s") from None

        if status in _NO_ROUTE_STATUS or data.get("noRoute"):
            _LOGGER.info(
                "routing service found no route (%s), answering with estimate mode=%s",
                status,
                request.mode.value,
            )
            return estimated_route(request)

        try:
            result = RouteResult.model_validate(data)
        except ValidationError as exc:
            raise RoutingUnavailable("routing", f"malformed route payload: {exc.error_count()} errors") from None

        result = result.model_copy(
            update={
                "path": dedupe_path(result.path),
                "arrival_time": result.arrival_time
                or add_minutes(request.departure_time, result.duration_minutes),
            }
        )
        if self._cache is not None:
            self._cache.set(request, result, ttl=self._cache_ttl)
        return result


__all__ = ["HttpRoutingClient", "dedupe_path"]
