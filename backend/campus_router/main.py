from __future__ import annotations

import time
import uuid
from contextlib import asynccontextmanager
from typing import Annotated

from fastapi import Depends, FastAPI, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware

from .errors import GraphDataError
from .logging_utils import log_event
from .models import (
    CacheStatsResponse,
    NearestNodeResponse,
    NodeResponse,
    ReloadResponse,
    RouteResponse,
)
from .router import CampusRouter


@asynccontextmanager
async def lifespan(app: FastAPI):
    campus = CampusRouter()
    # A missing or broken file leaves the router unloaded; /route answers 503.
    campus.load_from_file()
    app.state.campus = campus
    yield


app = FastAPI(title="Campus Walking Router", version="0.1.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)


def campus_router(request: Request) -> CampusRouter:
    campus: CampusRouter | None = getattr(request.app.state, "campus", None)  # type: ignore[attr-defined]
    if campus is None:
        raise HTTPException(status_code=503, detail="campus router not initialised")
    return campus


CampusDep = Annotated[CampusRouter, Depends(campus_router)]


@app.get("/health")
async def health(request: Request) -> dict[str, object]:
    campus: CampusRouter | None = getattr(request.app.state, "campus", None)  # type: ignore[attr-defined]
    return {"status": "ok", "graph_loaded": bool(campus is not None and campus.is_loaded)}


@app.get("/nodes", response_model=list[NodeResponse])
async def list_nodes(campus: CampusDep, category: str | None = None) -> list[NodeResponse]:
    nodes = campus.get_nodes_by_category(category) if category else campus.nodes()
    return [NodeResponse.from_node(node) for node in nodes]


@app.get("/nodes/nearest", response_model=NearestNodeResponse)
async def nearest_node(
    campus: CampusDep,
    x: Annotated[float, Query()],
    y: Annotated[float, Query()],
    category: str | None = None,
) -> NearestNodeResponse:
    node_id = campus.nearest_node(x, y, category)
    node = campus.get_node(node_id) if node_id is not None else None
    return NearestNodeResponse(
        x=x,
        y=y,
        category=category,
        node=NodeResponse.from_node(node) if node is not None else None,
    )


@app.get("/nodes/{node_id}", response_model=NodeResponse)
async def get_node(node_id: str, campus: CampusDep) -> NodeResponse:
    node = campus.get_node(node_id)
    if node is None:
        raise HTTPException(status_code=404, detail="node not found")
    return NodeResponse.from_node(node)


@app.get("/locations", response_model=list[NodeResponse])
async def key_locations(campus: CampusDep) -> list[NodeResponse]:
    return [NodeResponse.from_node(node) for node in campus.key_locations()]


@app.get("/route", response_model=RouteResponse)
async def find_route(
    campus: CampusDep,
    start: Annotated[str, Query(min_length=1)],
    end: Annotated[str, Query(min_length=1)],
) -> RouteResponse:
    request_id = str(uuid.uuid4())
    t0 = time.perf_counter()

    try:
        route, cached = campus.route_lookup(start, end)
    except GraphDataError as e:
        raise HTTPException(status_code=503, detail=str(e)) from e

    log_event(
        "route_request",
        request_id=request_id,
        start=start,
        end=end,
        status=route.status,
        cached=cached,
        hops=max(0, len(route.nodes) - 1),
        duration_ms=round((time.perf_counter() - t0) * 1000, 2),
    )

    return RouteResponse.from_route(route, start=start, end=end, cached=cached)


@app.post("/pathways/reload", response_model=ReloadResponse)
# Plain def: the file read and cache rebuild run in the threadpool.
def reload_pathways(campus: CampusDep) -> ReloadResponse:
    if not campus.load_from_file():
        raise HTTPException(status_code=503, detail="pathways reload failed; previous graph kept")
    summary = campus.summary()
    return ReloadResponse(
        loaded=True,
        source=summary.get("source"),
        node_count=int(summary.get("node_count", 0)),
        walkable_edge_count=int(summary.get("walkable_edge_count", 0)),
        key_location_count=int(summary.get("key_location_count", 0)),
    )


@app.get("/cache/stats", response_model=CacheStatsResponse)
async def cache_stats(campus: CampusDep) -> CacheStatsResponse:
    return CacheStatsResponse(**campus.cache_stats())
