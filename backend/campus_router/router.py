from __future__ import annotations

import logging
import time
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from .errors import GraphDataError, normalize_reason_code
from .graph_store import Edge, GraphStore, Node
from .loader import load_pathways_document, pathways_path
from .logging_utils import log_event
from .models import EdgeRecord, NodeRecord, PathwaysDocument
from .route_cache import RouteCache
from .route_engine import Route, RouteEngine
from .settings import settings
from .units import UnitConverter


def _iso_utc_now() -> str:
    return datetime.now(UTC).replace(microsecond=0).isoformat().replace("+00:00", "Z")


def _coerce_node(raw: Node | NodeRecord | Mapping[str, Any]) -> Node:
    if isinstance(raw, Node):
        return raw
    if isinstance(raw, NodeRecord):
        return raw.to_node()
    return NodeRecord.model_validate(raw).to_node()


def _coerce_edge(raw: Edge | EdgeRecord | Mapping[str, Any]) -> Edge:
    if isinstance(raw, Edge):
        return raw
    if isinstance(raw, EdgeRecord):
        return raw.to_edge()
    return EdgeRecord.model_validate(raw).to_edge()


@dataclass(frozen=True)
class _LoadedState:
    store: GraphStore
    engine: RouteEngine
    cache: RouteCache
    source: str
    loaded_at_utc: str


class CampusRouter:
    """Query facade over one loaded campus graph.

    Store, engine and cache are built together on every load and installed as
    a single reference, so queries never observe a half-built graph.
    """

    def __init__(
        self,
        *,
        converter: UnitConverter | None = None,
        key_categories: Iterable[str] | None = None,
        cache_enabled: bool | None = None,
    ) -> None:
        self.converter = converter or UnitConverter.from_settings()
        self.key_categories = (
            tuple(str(c).strip().lower() for c in key_categories)
            if key_categories is not None
            else settings.key_categories()
        )
        self.cache_enabled = settings.route_cache_enabled if cache_enabled is None else bool(cache_enabled)
        self._state: _LoadedState | None = None

    @property
    def is_loaded(self) -> bool:
        return self._state is not None

    @property
    def source(self) -> str | None:
        return self._state.source if self._state is not None else None

    def _require_state(self) -> _LoadedState:
        if self._state is None:
            raise GraphDataError(reason_code="graph_not_loaded", message="campus graph has not been loaded")
        return self._state

    def load(
        self,
        nodes: Iterable[Node | NodeRecord | Mapping[str, Any]],
        edges: Iterable[Edge | EdgeRecord | Mapping[str, Any]],
        *,
        source: str = "inline",
    ) -> bool:
        t0 = time.perf_counter()
        try:
            try:
                node_list = [_coerce_node(raw) for raw in nodes]
                edge_list = [_coerce_edge(raw) for raw in edges]
            except ValidationError as e:
                raise GraphDataError(
                    reason_code="pathways_invalid",
                    message="node/edge record failed validation",
                    details={"error_count": e.error_count()},
                ) from e
            store = GraphStore()
            store.load(node_list, edge_list)
            engine = RouteEngine(store, self.converter)
            cache = RouteCache(enabled=self.cache_enabled)
            cache.rebuild(store, engine, categories=self.key_categories)
        except GraphDataError as e:
            self._log_load_failure(e, source=source)
            return False

        self._state = _LoadedState(
            store=store,
            engine=engine,
            cache=cache,
            source=source,
            loaded_at_utc=_iso_utc_now(),
        )
        log_event(
            "pathways_loaded",
            source=source,
            node_count=len(node_list),
            walkable_edge_count=store.graph.walkable_edge_count,
            key_location_count=len(store.key_locations(self.key_categories)),
            cached_routes=len(cache),
            duration_ms=round((time.perf_counter() - t0) * 1000, 2),
        )
        return True

    def load_document(self, document: PathwaysDocument, *, source: str = "document") -> bool:
        return self.load(document.nodes, document.edges, source=source)

    def load_from_file(self, path: str | Path | None = None) -> bool:
        source = str(pathways_path(path))
        try:
            document = load_pathways_document(path)
        except GraphDataError as e:
            self._log_load_failure(e, source=source)
            return False
        return self.load_document(document, source=source)

    def _log_load_failure(self, error: GraphDataError, *, source: str) -> None:
        log_event(
            "pathways_load_failed",
            level=logging.WARNING,
            source=source,
            reason_code=normalize_reason_code(error.reason_code),
            error=str(error),
            details=error.details or {},
            kept_previous=self._state is not None,
        )

    def route_lookup(self, start_id: str, end_id: str) -> tuple[Route, bool]:
        """Return the route and whether it came from the precomputed table."""
        state = self._require_state()
        cached = state.cache.lookup(start_id, end_id)
        if cached is not None:
            return cached, True
        return state.engine.compute_route(start_id, end_id), False

    def find_route(self, start_id: str, end_id: str) -> Route:
        return self.route_lookup(start_id, end_id)[0]

    def compute_route(self, start_id: str, end_id: str) -> Route:
        return self._require_state().engine.compute_route(start_id, end_id)

    def nodes(self) -> tuple[Node, ...]:
        return self._state.store.nodes() if self._state is not None else ()

    def get_node(self, node_id: str) -> Node | None:
        return self._state.store.get_node(node_id) if self._state is not None else None

    def get_nodes_by_category(self, category: str) -> tuple[Node, ...]:
        return self._state.store.get_nodes_by_category(category) if self._state is not None else ()

    def neighbors(self, node_id: str) -> dict[str, float]:
        return self._state.store.neighbors(node_id) if self._state is not None else {}

    def nearest_node(self, x: float, y: float, category: str | None = None) -> str | None:
        return self._state.store.nearest_node(x, y, category) if self._state is not None else None

    def key_locations(self) -> tuple[Node, ...]:
        return self._state.store.key_locations(self.key_categories) if self._state is not None else ()

    def cache_stats(self) -> dict[str, int | bool]:
        if self._state is None:
            return {"enabled": self.cache_enabled, "size": 0, "key_locations": 0, "hits": 0, "misses": 0}
        return self._state.cache.stats()

    def summary(self) -> dict[str, Any]:
        if self._state is None:
            return {"loaded": False}
        graph = self._state.store.graph
        return {
            "loaded": True,
            "source": self._state.source,
            "loaded_at_utc": self._state.loaded_at_utc,
            "node_count": len(graph.nodes),
            "edge_count": graph.edge_count,
            "walkable_edge_count": graph.walkable_edge_count,
            "key_location_count": len(self.key_locations()),
        }
