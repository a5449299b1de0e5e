"""Runtime configuration for the SheetMap project."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class StoragePaths:
    """Collection of filesystem paths used by the application."""

    outputs: Path
    place_index: Path

    def ensure(self) -> None:
        """Ensure the backing directories exist."""
        self.outputs.mkdir(parents=True, exist_ok=True)


@dataclass(frozen=True)
class AppConfig:
    """High level runtime configuration values."""

    google_api_key: str = ""
    request_timeout: int = 10  # seconds
    max_sessions: int = 32


@dataclass(frozen=True)
class MapDefaults:
    """Initial viewport handed to the map front-end."""

    center: tuple[float, float] = (51.1087443, 17.0143368)
    zoom: int = 13


@dataclass(frozen=True)
class QueueConfig:
    """Configuration for the Redis-backed task queue."""

    redis_url: str = "redis://localhost:6379/0"
    queue_name: str = "sheet-map"
    default_timeout: int = 60 * 10  # seconds


APP_CONFIG = AppConfig(
    google_api_key=os.environ.get("SHEET_MAP_API_KEY", ""),
    request_timeout=int(os.environ.get("SHEET_MAP_REQUEST_TIMEOUT", AppConfig.request_timeout)),
    max_sessions=int(os.environ.get("SHEET_MAP_MAX_SESSIONS", AppConfig.max_sessions)),
)
MAP_DEFAULTS = MapDefaults()
STORAGE_PATHS = StoragePaths(
    outputs=Path(os.environ.get("SHEET_MAP_OUTPUTS", "outputs")),
    place_index=Path(os.environ.get("SHEET_MAP_PLACE_INDEX", "data/places.sqlite")),
)
QUEUE_CONFIG = QueueConfig(
    redis_url=os.environ.get("SHEET_MAP_REDIS_URL", QueueConfig.redis_url),
    queue_name=os.environ.get("SHEET_MAP_QUEUE", QueueConfig.queue_name),
    default_timeout=int(
        os.environ.get("SHEET_MAP_QUEUE_TIMEOUT", QueueConfig.default_timeout)
    ),
)

STORAGE_PATHS.ensure()
