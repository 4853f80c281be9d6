from __future__ import annotations

import argparse
import json
from pathlib import Path
from typing import Any, Sequence

from campus_router.errors import GraphDataError
from campus_router.loader import load_pathways_document, pathways_path
from campus_router.router import CampusRouter


def _unreachable_key_pairs(campus: CampusRouter) -> list[list[str]]:
    keys = [node.id for node in campus.key_locations()]
    pairs: list[list[str]] = []
    for i, start_id in enumerate(keys):
        for end_id in keys[i + 1 :]:
            if not campus.find_route(start_id, end_id).found:
                pairs.append([start_id, end_id])
    return pairs


def check(*, path: Path, key_categories: Sequence[str] | None = None) -> dict[str, Any]:
    try:
        document = load_pathways_document(path)
    except GraphDataError as e:
        raise RuntimeError(f"{e.reason_code}: {e}") from e

    campus = CampusRouter(key_categories=key_categories)
    if not campus.load_document(document, source=str(path)):
        raise RuntimeError(f"pathways_invalid: graph could not be built from {path}")

    summary = campus.summary()
    isolated = [node.id for node in campus.nodes() if not campus.neighbors(node.id)]
    unreachable = _unreachable_key_pairs(campus)
    return {
        "path": str(path),
        "nodes": summary["node_count"],
        "edges": summary["edge_count"],
        "walkable_edges": summary["walkable_edge_count"],
        "key_locations": summary["key_location_count"],
        "cached_routes": campus.cache_stats()["size"],
        "isolated_nodes": isolated,
        "unreachable_key_pairs": unreachable,
        "fully_connected": not unreachable,
    }


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Validate a campus pathways file and report key-location coverage.")
    parser.add_argument("--pathways", type=Path, default=None, help="Pathways JSON path (defaults to PATHWAYS_PATH).")
    parser.add_argument(
        "--key-categories",
        default=None,
        help="Comma separated categories treated as key locations (defaults to KEY_LOCATION_CATEGORIES).",
    )
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(list(argv) if argv is not None else None)
    categories = (
        [c.strip() for c in str(args.key_categories).split(",") if c.strip()]
        if args.key_categories
        else None
    )
    try:
        payload = check(path=pathways_path(args.pathways), key_categories=categories)
    except RuntimeError as e:
        print(json.dumps({"ok": False, "error": str(e)}, indent=2))
        return 1
    print(json.dumps({"ok": True, **payload}, indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
