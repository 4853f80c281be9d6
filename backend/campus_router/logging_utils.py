from __future__ import annotations

import logging
from pathlib import Path
from tempfile import gettempdir
from typing import Any

from pythonjsonlogger import jsonlogger

from .settings import settings

LOGGER_NAME = "campus_router"
LOG_FILE_NAME = "router.log.jsonl"


def _parse_level(name: str) -> int:
    level = logging.getLevelName(name.upper())
    return level if isinstance(level, int) else logging.INFO


def _writable_log_dir(out_dir: str) -> Path | None:
    for log_dir in (
        Path(out_dir) / "logs",
        Path(gettempdir()) / "campus-router" / "logs",
    ):
        try:
            log_dir.mkdir(parents=True, exist_ok=True)
            probe = log_dir / ".writetest"
            probe.touch(exist_ok=True)
            probe.unlink(missing_ok=True)
            return log_dir
        except OSError:
            continue
    return None


def get_logger() -> logging.Logger:
    logger = logging.getLogger(LOGGER_NAME)

    # Prevent duplicate handlers (uvicorn --reload imports twice)
    if getattr(logger, "_configured", False):
        return logger

    logger.setLevel(_parse_level(settings.log_level))
    logger.propagate = False

    formatter = jsonlogger.JsonFormatter("%(asctime)s %(levelname)s %(name)s %(message)s")

    stream = logging.StreamHandler()
    stream.setFormatter(formatter)
    logger.addHandler(stream)

    log_dir = _writable_log_dir(settings.out_dir)
    if log_dir is not None:
        try:
            file_handler = logging.FileHandler(log_dir / LOG_FILE_NAME, encoding="utf-8")
            file_handler.setFormatter(formatter)
            logger.addHandler(file_handler)
        except OSError:
            pass

    logger._configured = True  # type: ignore[attr-defined]
    return logger


def log_event(event: str, *, level: int = logging.INFO, **fields: Any) -> None:
    """Emit one structured record; ``event`` is both the message and a JSON key."""
    get_logger().log(level, event, extra={"event": event, **fields})
