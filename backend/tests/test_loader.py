from __future__ import annotations

import json
from pathlib import Path

import pytest

from campus_router.errors import GraphDataError, normalize_reason_code
from campus_router.loader import load_pathways_document, pathways_path
from campus_router.router import CampusRouter
from campus_router.settings import settings


def _write(path: Path, payload: object) -> Path:
    path.write_text(json.dumps(payload), encoding="utf-8")
    return path


def test_legacy_pathways_file_is_parsed(tmp_path: Path) -> None:
    path = _write(
        tmp_path / "pathways.json",
        {
            "nodes": [
                {"id": "gate", "type": "gate", "x": 5, "y": 5, "name": "Gate"},
                {"id": 7, "type": "building", "x": 15, "y": 5, "name": "Block 7"},
            ],
            "paths": [{"start": "gate", "end": 7, "distance": 10}],
        },
    )

    document = load_pathways_document(path)

    assert [n.id for n in document.nodes] == ["gate", "7"]
    assert document.nodes[1].category == "building"
    assert document.edges[0].to_id == "7"
    assert document.edges[0].walkable is True


def test_missing_file_is_unavailable(tmp_path: Path) -> None:
    with pytest.raises(GraphDataError) as exc_info:
        load_pathways_document(tmp_path / "absent.json")
    assert exc_info.value.reason_code == "pathways_unavailable"


@pytest.mark.parametrize("content", ["{not json", "[1, 2, 3]", '{"nodes": [{"id": "a"}]}'])
def test_malformed_files_are_invalid(tmp_path: Path, content: str) -> None:
    path = tmp_path / "pathways.json"
    path.write_text(content, encoding="utf-8")

    with pytest.raises(GraphDataError) as exc_info:
        load_pathways_document(path)
    assert exc_info.value.reason_code == "pathways_invalid"


def test_default_path_comes_from_settings(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    path = _write(tmp_path / "campus.json", {"nodes": [], "edges": []})
    monkeypatch.setattr(settings, "pathways_path", str(path))

    assert pathways_path() == path
    assert pathways_path(" ") == path
    assert load_pathways_document().nodes == []


def test_load_from_file_signals_failure_with_boolean(tmp_path: Path) -> None:
    campus = CampusRouter()

    assert campus.load_from_file(tmp_path / "absent.json") is False
    assert campus.is_loaded is False


def test_bundled_campus_map_loads() -> None:
    campus = CampusRouter()

    assert campus.load_from_file(Path(__file__).resolve().parents[1] / "assets" / "pathways.json") is True
    route = campus.find_route("gate_main", "library")
    assert route.found
    assert route.nodes[0] == "gate_main"
    assert route.nodes[-1] == "library"
    assert campus.get_node("pond") is not None
    assert campus.neighbors("pond") == {}


def test_unknown_reason_codes_normalise_to_invalid() -> None:
    assert normalize_reason_code("graph_not_loaded") == "graph_not_loaded"
    assert normalize_reason_code("something_else") == "pathways_invalid"
