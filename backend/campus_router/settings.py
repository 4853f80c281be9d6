from __future__ import annotations

from pathlib import Path

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _default_pathways_path() -> str:
    # The bundled campus map lives next to the package in backend/assets.
    return str(Path(__file__).resolve().parents[1] / "assets" / "pathways.json")


def _default_out_dir() -> str:
    return str(Path(__file__).resolve().parents[1] / "out")


class Settings(BaseSettings):
    """Validated settings (env-driven), keeping map calibration out of code."""

    model_config = SettingsConfigDict(
        # Support both "repo root/.env" and "backend/.env" (local dev)
        env_file=(".env", "../.env"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    pathways_path: str = Field(default_factory=_default_pathways_path, alias="PATHWAYS_PATH")

    out_dir: str = Field(default_factory=_default_out_dir, alias="OUT_DIR")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Planar (percentage) units to metres; retune per campus map.
    pixel_to_meter_ratio: float = Field(default=1.5, ge=0.0, alias="PIXEL_TO_METER_RATIO")
    # Average human walking pace is roughly 60-80 m/min.
    walking_speed_m_per_min: float = Field(default=65.0, gt=0.0, alias="WALKING_SPEED_M_PER_MIN")

    key_location_categories: str = Field(default="building,gate", alias="KEY_LOCATION_CATEGORIES")
    route_cache_enabled: bool = Field(default=True, alias="ROUTE_CACHE_ENABLED")

    @model_validator(mode="after")
    def _normalise(self) -> "Settings":
        self.log_level = str(self.log_level or "INFO").strip().upper() or "INFO"
        self.key_location_categories = ",".join(self.key_categories())
        return self

    def key_categories(self) -> tuple[str, ...]:
        seen: list[str] = []
        for raw in str(self.key_location_categories or "").split(","):
            category = raw.strip().lower()
            if category and category not in seen:
                seen.append(category)
        return tuple(seen)


settings = Settings()
