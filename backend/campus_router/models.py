from __future__ import annotations

import math
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .graph_store import Edge, Node
from .route_engine import Route
from .units import format_walking_time


def _rename_legacy_keys(value: object, renames: dict[str, str]) -> object:
    if not isinstance(value, dict):
        return value
    data = dict(value)
    for legacy, current in renames.items():
        if current not in data and legacy in data:
            data[current] = data.pop(legacy)
    return data


class NodeRecord(BaseModel):
    """One location on the campus map, coordinates in percent of the viewport."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str = Field(..., min_length=1)
    category: str = Field(..., min_length=1)
    x: float = Field(..., ge=0, le=100)
    y: float = Field(..., ge=0, le=100)
    display_name: str | None = Field(default=None, alias="displayName")

    @model_validator(mode="before")
    @classmethod
    def accept_legacy_aliases(cls, value: object) -> object:
        return _rename_legacy_keys(value, {"type": "category", "name": "displayName"})

    @field_validator("id", mode="before")
    @classmethod
    def stringify_id(cls, v: object) -> object:
        if isinstance(v, int) and not isinstance(v, bool):
            return str(v)
        return v

    @field_validator("category")
    @classmethod
    def normalise_category(cls, v: str) -> str:
        return v.strip().lower()

    def to_node(self) -> Node:
        return Node(
            id=self.id,
            category=self.category,
            x=float(self.x),
            y=float(self.y),
            display_name=self.display_name or self.id,
        )


class EdgeRecord(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    from_id: str = Field(..., min_length=1, alias="fromId")
    to_id: str = Field(..., min_length=1, alias="toId")
    length: float = Field(..., ge=0)
    walkable: bool = True

    @model_validator(mode="before")
    @classmethod
    def accept_legacy_aliases(cls, value: object) -> object:
        return _rename_legacy_keys(value, {"start": "fromId", "end": "toId", "distance": "length"})

    @field_validator("from_id", "to_id", mode="before")
    @classmethod
    def stringify_ids(cls, v: object) -> object:
        if isinstance(v, int) and not isinstance(v, bool):
            return str(v)
        return v

    @field_validator("length")
    @classmethod
    def finite(cls, v: float) -> float:
        if not math.isfinite(v):
            raise ValueError("length must be finite")
        return v

    def to_edge(self) -> Edge:
        return Edge(from_id=self.from_id, to_id=self.to_id, length=float(self.length), walkable=self.walkable)


class PathwaysDocument(BaseModel):
    """The campus data file: ``nodes`` plus ``edges`` (``paths`` in older files)."""

    nodes: list[NodeRecord]
    edges: list[EdgeRecord] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def accept_legacy_aliases(cls, value: object) -> object:
        return _rename_legacy_keys(value, {"paths": "edges"})


class NodeResponse(BaseModel):
    id: str
    category: str
    x: float
    y: float
    display_name: str

    @classmethod
    def from_node(cls, node: Node) -> "NodeResponse":
        return cls(id=node.id, category=node.category, x=node.x, y=node.y, display_name=node.display_name)


class WaypointResponse(BaseModel):
    id: str
    x: float
    y: float
    name: str


class RouteResponse(BaseModel):
    status: Literal["ok", "no_path", "unknown_node"]
    start: str
    end: str
    nodes: list[str]
    waypoints: list[WaypointResponse]
    # JSON has no infinity: ``None`` stands for "no route".
    planar_length: float | None
    distance_m: float | None
    estimated_time_min: float
    time_display: str | None
    cached: bool = False

    @classmethod
    def from_route(cls, route: Route, *, start: str, end: str, cached: bool) -> "RouteResponse":
        return cls(
            status=route.status,
            start=start,
            end=end,
            nodes=list(route.nodes),
            waypoints=[WaypointResponse(id=w.id, x=w.x, y=w.y, name=w.name) for w in route.waypoints],
            planar_length=route.planar_length if route.found else None,
            distance_m=route.distance_m if route.found else None,
            estimated_time_min=route.estimated_time_min,
            time_display=format_walking_time(route.estimated_time_min) if route.found else None,
            cached=cached,
        )


class NearestNodeResponse(BaseModel):
    x: float
    y: float
    category: str | None = None
    node: NodeResponse | None = None


class CacheStatsResponse(BaseModel):
    enabled: bool
    size: int
    key_locations: int
    hits: int
    misses: int


class ReloadResponse(BaseModel):
    loaded: bool
    source: str | None = None
    node_count: int = 0
    walkable_edge_count: int = 0
    key_location_count: int = 0
