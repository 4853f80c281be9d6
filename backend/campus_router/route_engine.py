from __future__ import annotations

import heapq
from dataclasses import dataclass
from math import inf
from typing import Literal

from .graph_store import GraphStore
from .units import UnitConverter

RouteStatus = Literal["ok", "no_path", "unknown_node"]


@dataclass(frozen=True)
class PathResult:
    nodes: tuple[str, ...]
    cost: float


class PathNotFoundError(ValueError):
    pass


@dataclass(frozen=True)
class Waypoint:
    id: str
    x: float
    y: float
    name: str


@dataclass(frozen=True)
class Route:
    """A walkable route; an empty node sequence with infinite length means no route."""

    nodes: tuple[str, ...]
    waypoints: tuple[Waypoint, ...]
    planar_length: float
    distance_m: float
    estimated_time_min: float
    status: RouteStatus = "ok"

    @property
    def found(self) -> bool:
        return self.status == "ok"

    @classmethod
    def not_found(cls, status: RouteStatus = "no_path") -> "Route":
        return cls(
            nodes=(),
            waypoints=(),
            planar_length=inf,
            distance_m=inf,
            estimated_time_min=0.0,
            status=status,
        )


def dijkstra_shortest_path(
    *,
    adjacency: dict[str, dict[str, float]],
    start: str,
    goal: str,
) -> PathResult:
    """Single-source shortest path over non-negative, undirected weights.

    The search stops as soon as ``goal`` is settled. Which of several
    equal-cost paths is returned is not specified.
    """
    if start not in adjacency or goal not in adjacency:
        raise PathNotFoundError("start/goal not in graph")
    if start == goal:
        return PathResult(nodes=(start,), cost=0.0)

    distances: dict[str, float] = {start: 0.0}
    previous: dict[str, str] = {}
    settled: set[str] = set()
    heap: list[tuple[float, str]] = [(0.0, start)]
    while heap:
        cost, node = heapq.heappop(heap)
        if node in settled:
            continue
        if node == goal:
            break
        settled.add(node)
        for nxt, length in adjacency[node].items():
            if nxt in settled:
                continue
            candidate = cost + length
            if candidate < distances.get(nxt, inf):
                distances[nxt] = candidate
                previous[nxt] = node
                heapq.heappush(heap, (candidate, nxt))

    if goal not in previous:
        raise PathNotFoundError("no path")

    path = [goal]
    while path[-1] != start:
        path.append(previous[path[-1]])
    path.reverse()
    return PathResult(nodes=tuple(path), cost=distances[goal])


class RouteEngine:
    """Computes routes on demand against the store it was given."""

    def __init__(self, store: GraphStore, converter: UnitConverter | None = None) -> None:
        self.store = store
        self.converter = converter or UnitConverter.from_settings()

    def compute_route(self, start_id: str, end_id: str) -> Route:
        graph = self.store.graph
        if start_id not in graph.node_index or end_id not in graph.node_index:
            return Route.not_found("unknown_node")
        try:
            result = dijkstra_shortest_path(adjacency=graph.adjacency, start=start_id, goal=end_id)
        except PathNotFoundError:
            return Route.not_found("no_path")

        waypoints = tuple(
            Waypoint(id=node.id, x=node.x, y=node.y, name=node.display_name)
            for node in (graph.node_index[node_id] for node_id in result.nodes)
        )
        distance_m = self.converter.to_real_distance(result.cost)
        return Route(
            nodes=result.nodes,
            waypoints=waypoints,
            planar_length=result.cost,
            distance_m=distance_m,
            estimated_time_min=self.converter.to_walking_time(distance_m),
        )
