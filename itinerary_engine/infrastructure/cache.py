"""In-process route cache: one ``RouteResult`` per route request, with TTL."""

from __future__ import annotations

import threading
import time
from typing import Optional

from itinerary_engine.tools.interfaces import RouteRequest, RouteResult

RouteKey = tuple[float, float, float, float, str, str, str]

# ~1 m; nearby taps on the same place share an entry
_COORD_PRECISION = 5


def route_key(request: RouteRequest) -> RouteKey:
    return (
        round(request.origin.lat, _COORD_PRECISION),
        round(request.origin.lng, _COORD_PRECISION),
        round(request.destination.lat, _COORD_PRECISION),
        round(request.destination.lng, _COORD_PRECISION),
        request.mode.value,
        request.departure_time or "",
        request.timezone or "",
    )


class RouteCache:
    def __init__(self, default_ttl: float = 1800.0, max_size: int = 300):
        self._store: dict[RouteKey, tuple[RouteResult, float]] = {}
        self._default_ttl = default_ttl
        self._max_size = max_size
        self._lock = threading.Lock()

    def get(self, request: RouteRequest) -> Optional[RouteResult]:
        key = route_key(request)
        with self._lock:
            entry = self._store.get(key)
            if entry is None:
                return None
            result, expire_at = entry
            if time.time() > expire_at:
                del self._store[key]
                return None
            return result

    def set(self, request: RouteRequest, result: RouteResult, ttl: Optional[float] = None) -> None:
        ttl = ttl if ttl is not None else self._default_ttl
        with self._lock:
            if len(self._store) >= self._max_size:
                # Drop the soonest-expiring tenth.
                items = sorted(self._store.items(), key=lambda x: x[1][1])
                for k, _ in items[: self._max_size // 10 + 1]:
                    del self._store[k]
            self._store[route_key(request)] = (result, time.time() + ttl)

    def clear(self) -> None:
        with self._lock:
            self._store.clear()

    def __len__(self) -> int:
        return len(self._store)


route_cache = RouteCache()
