from __future__ import annotations

import time
from collections.abc import Iterable
from threading import Lock

from .graph_store import GraphStore
from .logging_utils import log_event
from .route_engine import Route, RouteEngine


class RouteCache:
    """Precomputed routes between every ordered pair of key locations.

    Entries are frozen ``Route`` objects shared between callers. A rebuild
    replaces the whole table; there is no per-entry invalidation.
    """

    def __init__(self, *, enabled: bool = True) -> None:
        self._enabled = bool(enabled)
        self._lock = Lock()
        self._routes: dict[tuple[str, str], Route] = {}
        self._key_location_count = 0

        self._hits = 0
        self._misses = 0

    def rebuild(
        self,
        store: GraphStore,
        engine: RouteEngine | None = None,
        *,
        categories: Iterable[str] = ("building", "gate"),
    ) -> int:
        engine = engine or RouteEngine(store)
        keys = [node.id for node in store.key_locations(categories)]
        t0 = time.perf_counter()

        routes: dict[tuple[str, str], Route] = {}
        if self._enabled:
            for start_id in keys:
                for end_id in keys:
                    if start_id != end_id:
                        routes[(start_id, end_id)] = engine.compute_route(start_id, end_id)

        with self._lock:
            self._routes = routes
            self._key_location_count = len(keys)
            self._hits = 0
            self._misses = 0

        log_event(
            "route_cache_rebuilt",
            enabled=self._enabled,
            key_location_count=len(keys),
            entry_count=len(routes),
            unreachable_pairs=sum(1 for route in routes.values() if not route.found),
            duration_ms=round((time.perf_counter() - t0) * 1000, 2),
        )
        return len(routes)

    def lookup(self, start_id: str, end_id: str) -> Route | None:
        with self._lock:
            route = self._routes.get((start_id, end_id))
            if route is None:
                self._misses += 1
            else:
                self._hits += 1
            return route

    def __len__(self) -> int:
        with self._lock:
            return len(self._routes)

    def stats(self) -> dict[str, int | bool]:
        with self._lock:
            return {
                "enabled": self._enabled,
                "size": len(self._routes),
                "key_locations": self._key_location_count,
                "hits": self._hits,
                "misses": self._misses,
            }
