from __future__ import annotations

import json
from pathlib import Path

from pydantic import ValidationError

from .errors import GraphDataError
from .models import PathwaysDocument
from .settings import settings


def pathways_path(path: str | Path | None = None) -> Path:
    if path is not None and str(path).strip():
        return Path(path)
    return Path(settings.pathways_path)


def load_pathways_document(path: str | Path | None = None) -> PathwaysDocument:
    source = pathways_path(path)
    if not source.is_file():
        raise GraphDataError(
            reason_code="pathways_unavailable",
            message=f"pathways file not found: {source}",
            details={"path": str(source)},
        )
    try:
        text = source.read_text(encoding="utf-8")
    except OSError as e:
        raise GraphDataError(
            reason_code="pathways_unavailable",
            message=f"pathways file unreadable: {source}",
            details={"path": str(source)},
        ) from e
    try:
        raw = json.loads(text)
    except json.JSONDecodeError as e:
        raise GraphDataError(
            reason_code="pathways_invalid",
            message=f"invalid JSON in pathways file: {source}",
            details={"path": str(source), "line": e.lineno},
        ) from e
    if not isinstance(raw, dict):
        raise GraphDataError(
            reason_code="pathways_invalid",
            message=f"expected JSON object in {source}",
            details={"path": str(source)},
        )
    try:
        return PathwaysDocument.model_validate(raw)
    except ValidationError as e:
        raise GraphDataError(
            reason_code="pathways_invalid",
            message=f"pathways file failed validation: {source}",
            details={"path": str(source), "error_count": e.error_count()},
        ) from e
