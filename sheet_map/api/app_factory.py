"""Flask application factory."""

from __future__ import annotations

import logging
import threading
from collections import OrderedDict
from typing import Callable

from flask import Flask
from flask_cors import CORS
from redis import Redis
from rq import Queue

from ..config import APP_CONFIG, QUEUE_CONFIG, STORAGE_PATHS
from ..core import MapConfig
from ..pipelines.map_session import RowSource
from ..services import GoogleSheetsSource, PlaceIndex
from .routes import api_bp

logger = logging.getLogger(__name__)

RowSourceFactory = Callable[[MapConfig], RowSource]


def google_sheets_source(config: MapConfig) -> RowSource:
    return GoogleSheetsSource(
        config.sheet_id,
        APP_CONFIG.google_api_key,
        timeout=APP_CONFIG.request_timeout,
    )


def create_app(
    *,
    row_source_factory: RowSourceFactory | None = None,
    place_index: PlaceIndex | None = None,
    max_sessions: int | None = None,
) -> Flask:
    """Create and configure the Flask application.

    The place index is loaded once here and shared by every request; pass
    ``place_index`` to supply an already loaded one. At most ``max_sessions``
    map sessions are kept; the least recently used one is dropped first.
    """

    app = Flask(__name__)

    CORS(app)
    app.register_blueprint(api_bp, url_prefix="/api")

    if place_index is None:
        place_index = PlaceIndex.load_optional(STORAGE_PATHS.place_index)

    redis_connection = Redis.from_url(QUEUE_CONFIG.redis_url)
    queue = Queue(
        name=QUEUE_CONFIG.queue_name,
        connection=redis_connection,
        default_timeout=QUEUE_CONFIG.default_timeout,
    )
    app.extensions["rq"] = {"queue": queue, "connection": redis_connection}
    app.extensions["sheet_map"] = {
        "place_index": place_index,
        "row_source_factory": row_source_factory or google_sheets_source,
        "sessions": OrderedDict(),
        "max_sessions": max_sessions or APP_CONFIG.max_sessions,
        "sessions_lock": threading.Lock(),
    }

    @app.get("/health")
    def health_check() -> dict[str, str]:
        return {"status": "healthy"}

    logger.info("Flask application initialised")
    return app
