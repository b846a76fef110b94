"""Runtime configuration assembled from CLI flags."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Literal

from mapty.workout.model import Coords
from mapty.workout.store import default_data_dir

StorageBackend = Literal["browser", "file"]

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 8089
DEFAULT_ZOOM = 13
GEOLOCATION_TIMEOUT_SEC = 60.0
TILE_URL = "https://{s}.tile.openstreetmap.org/{z}/{x}/{y}.png"
TILE_ATTRIBUTION = (
    '&copy; <a href="https://www.openstreetmap.org/copyright">OpenStreetMap</a> contributors'
)


@dataclass(frozen=True)
class AppConfig:
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    storage: StorageBackend = "browser"
    data_dir: Path | None = None
    storage_secret: str = "mapty-local"
    fixed_location: Coords | None = None
    geolocation_timeout_sec: float = GEOLOCATION_TIMEOUT_SEC

    @property
    def resolved_data_dir(self) -> Path:
        return self.data_dir or default_data_dir()


def parse_location(text: str) -> Coords:
    """Parse ``"LAT,LNG"`` into a coordinate pair."""
    parts = [p.strip() for p in text.split(",")]
    if len(parts) != 2:
        raise ValueError(f"Location '{text}' must look like LAT,LNG")
    try:
        lat, lng = float(parts[0]), float(parts[1])
    except ValueError as exc:
        raise ValueError(f"Location '{text}' must contain two numbers") from exc
    if not -90 <= lat <= 90 or not -180 <= lng <= 180:
        raise ValueError(f"Location '{text}' is out of range")
    return (lat, lng)
