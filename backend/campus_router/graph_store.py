from __future__ import annotations

import math
from collections.abc import Iterable
from dataclasses import dataclass, replace

from .errors import GraphDataError
from .logging_utils import log_event


@dataclass(frozen=True)
class Node:
    id: str
    category: str
    x: float
    y: float
    display_name: str


@dataclass(frozen=True)
class Edge:
    from_id: str
    to_id: str
    length: float
    walkable: bool = True


@dataclass(frozen=True)
class CampusGraph:
    nodes: tuple[Node, ...]
    node_index: dict[str, Node]
    adjacency: dict[str, dict[str, float]]
    edge_count: int
    walkable_edge_count: int


def planar_distance(x1: float, y1: float, x2: float, y2: float) -> float:
    return math.hypot(x2 - x1, y2 - y1)


def build_campus_graph(nodes: Iterable[Node], edges: Iterable[Edge]) -> CampusGraph:
    """Build the undirected walkable adjacency for a node/edge list.

    Non-walkable edges are counted but never reach the adjacency. When two
    records connect the same pair, the later record's length wins.
    """
    # Categories compare case-insensitively, whichever way the node was built.
    node_list = tuple(replace(node, category=str(node.category).strip().lower()) for node in nodes)
    node_index: dict[str, Node] = {}
    adjacency: dict[str, dict[str, float]] = {}
    for node in node_list:
        if node.id in node_index:
            raise GraphDataError(
                reason_code="pathways_invalid",
                message=f"duplicate node id: {node.id}",
                details={"node_id": node.id},
            )
        node_index[node.id] = node
        adjacency[node.id] = {}

    edge_count = 0
    walkable_count = 0
    for edge in edges:
        edge_count += 1
        if not edge.walkable:
            continue
        try:
            length = float(edge.length)
        except (TypeError, ValueError):
            length = math.nan
        if not math.isfinite(length) or length < 0.0:
            raise GraphDataError(
                reason_code="pathways_invalid",
                message=f"edge {edge.from_id}-{edge.to_id} has invalid length {edge.length!r}",
                details={"from_id": edge.from_id, "to_id": edge.to_id},
            )
        for endpoint in (edge.from_id, edge.to_id):
            if endpoint not in adjacency:
                raise GraphDataError(
                    reason_code="pathways_invalid",
                    message=f"edge {edge.from_id}-{edge.to_id} references unknown node {endpoint}",
                    details={"from_id": edge.from_id, "to_id": edge.to_id},
                )
        adjacency[edge.from_id][edge.to_id] = length
        adjacency[edge.to_id][edge.from_id] = length
        walkable_count += 1

    return CampusGraph(
        nodes=node_list,
        node_index=node_index,
        adjacency=adjacency,
        edge_count=edge_count,
        walkable_edge_count=walkable_count,
    )


class GraphStore:
    """Owns the campus nodes and the walkable adjacency derived from them.

    The graph is replaced wholesale by ``load``; a failed load leaves the
    previous graph (or the empty state) in place.
    """

    def __init__(self) -> None:
        self._graph: CampusGraph | None = None

    @property
    def is_loaded(self) -> bool:
        return self._graph is not None

    @property
    def graph(self) -> CampusGraph:
        if self._graph is None:
            raise GraphDataError(reason_code="graph_not_loaded", message="campus graph has not been loaded")
        return self._graph

    def load(self, nodes: Iterable[Node], edges: Iterable[Edge]) -> None:
        graph = build_campus_graph(nodes, edges)
        self._graph = graph
        log_event(
            "graph_built",
            node_count=len(graph.nodes),
            edge_count=graph.edge_count,
            walkable_edge_count=graph.walkable_edge_count,
        )

    def nodes(self) -> tuple[Node, ...]:
        if self._graph is None:
            return ()
        return self._graph.nodes

    def get_node(self, node_id: str) -> Node | None:
        if self._graph is None:
            return None
        return self._graph.node_index.get(node_id)

    def get_nodes_by_category(self, category: str) -> tuple[Node, ...]:
        wanted = str(category or "").strip().lower()
        return tuple(node for node in self.nodes() if node.category == wanted)

    def neighbors(self, node_id: str) -> dict[str, float]:
        if self._graph is None:
            return {}
        return dict(self._graph.adjacency.get(node_id, {}))

    def key_locations(self, categories: Iterable[str]) -> tuple[Node, ...]:
        # Grouped by category in the order given, input order within a group.
        out: list[Node] = []
        for category in categories:
            out.extend(self.get_nodes_by_category(category))
        return tuple(out)

    def nearest_node(self, x: float, y: float, category: str | None = None) -> str | None:
        wanted = str(category).strip().lower() if category else None
        nearest_id: str | None = None
        best = math.inf
        for node in self.nodes():
            if wanted is not None and node.category != wanted:
                continue
            distance = planar_distance(node.x, node.y, x, y)
            # Strict comparison keeps the first node in input order on ties.
            if distance < best:
                best = distance
                nearest_id = node.id
        return nearest_id
