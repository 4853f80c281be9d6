from __future__ import annotations

import json
from pathlib import Path

import pytest

import scripts.check_pathways as check_pathways


def _write(tmp_path: Path, payload: object) -> Path:
    path = tmp_path / "pathways.json"
    path.write_text(json.dumps(payload), encoding="utf-8")
    return path


def test_check_reports_coverage_and_unreachable_pairs(tmp_path: Path) -> None:
    path = _write(
        tmp_path,
        {
            "nodes": [
                {"id": "gate", "type": "gate", "x": 0, "y": 0, "name": "Gate"},
                {"id": "hall", "type": "building", "x": 10, "y": 0, "name": "Hall"},
                {"id": "barn", "type": "building", "x": 90, "y": 90, "name": "Barn"},
            ],
            "paths": [
                {"start": "gate", "end": "hall", "distance": 10, "walkable": True},
                {"start": "hall", "end": "barn", "distance": 110, "walkable": False},
            ],
        },
    )

    report = check_pathways.check(path=path)

    assert report["nodes"] == 3
    assert report["edges"] == 2
    assert report["walkable_edges"] == 1
    assert report["key_locations"] == 3
    assert report["cached_routes"] == 6
    assert report["isolated_nodes"] == ["barn"]
    assert sorted(map(tuple, report["unreachable_key_pairs"])) == [("barn", "gate"), ("hall", "barn")]
    assert report["fully_connected"] is False


def test_check_raises_for_broken_file(tmp_path: Path) -> None:
    path = tmp_path / "pathways.json"
    path.write_text("{oops", encoding="utf-8")

    with pytest.raises(RuntimeError, match="pathways_invalid"):
        check_pathways.check(path=path)


def test_main_exit_codes(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    bundled = Path(__file__).resolve().parents[1] / "assets" / "pathways.json"
    assert check_pathways.main(["--pathways", str(bundled)]) == 0
    out = json.loads(capsys.readouterr().out)
    assert out["ok"] is True
    assert out["fully_connected"] is True
    assert out["isolated_nodes"] == ["pond"]

    assert check_pathways.main(["--pathways", str(tmp_path / "absent.json"), "--key-categories", "gate"]) == 1
    out = json.loads(capsys.readouterr().out)
    assert out["ok"] is False
    assert "pathways_unavailable" in out["error"]
