"""REST API blueprint."""

from __future__ import annotations

import io
import uuid
from datetime import datetime

from flask import Blueprint, current_app, jsonify, request, send_file
from rq.exceptions import NoSuchJobError
from rq.job import Job

from ..core import ConfigurationError, MapConfig, RowSourceError
from ..pipelines import MapSession
from ..services import KmzExporter, map_payload
from ..utils import export_filename

api_bp = Blueprint("api", __name__)


@api_bp.errorhandler(ConfigurationError)
def handle_configuration_error(exc: ConfigurationError):
    return jsonify({"error": exc.as_dict()}), 400


@api_bp.errorhandler(RowSourceError)
def handle_row_source_error(exc: RowSourceError):
    return jsonify({"error": exc.as_dict()}), 502


@api_bp.get("/map")
def map_points():
    """Return the resolved points of a sheet with their popup rows."""

    config = MapConfig.from_params(request.args)
    points = _session(config).refresh()
    return jsonify(map_payload(points, config.labels)), 200


@api_bp.get("/map.kmz")
def map_kmz():
    config = MapConfig.from_params(request.args)
    points = _session(config).refresh()

    return send_file(
        io.BytesIO(KmzExporter().to_bytes(points, config.labels)),
        mimetype="application/vnd.google-earth.kmz",
        as_attachment=True,
        download_name=export_filename(config.sheet_id, ".kmz"),
    )


@api_bp.post("/exports")
def create_export():
    """Queue a KMZ export of a sheet."""

    params = request.get_json(silent=True) or request.form.to_dict()
    config = MapConfig.from_params(params)
    if not config.sheet_id:
        return jsonify({"error": "id field is required"}), 400

    job_id = str(uuid.uuid4())
    created_at = datetime.utcnow().isoformat()

    job = _queue().enqueue(
        "sheet_map.tasks.export_map",
        kwargs={"job_id": job_id, "params": config.as_params()},
        job_id=job_id,
        meta={"created_at": created_at},
    )

    response = {
        "job_id": job.id,
        "status": job.get_status(refresh=False),
        "created_at": created_at,
    }

    return jsonify(response), 202


@api_bp.get("/exports/<job_id>")
def export_status(job_id: str):
    try:
        job = Job.fetch(job_id, connection=_connection())
    except NoSuchJobError:
        return jsonify({"error": "Job not found"}), 404

    payload: dict[str, object] = {
        "job_id": job.id,
        "status": job.get_status(refresh=True),
        "created_at": job.meta.get("created_at"),
    }

    if job.is_finished:
        payload["result"] = job.result or {}
        return jsonify(payload), 200
    if job.is_failed:
        payload["error"] = job.meta.get("error", job.exc_info)
        return jsonify(payload), 500

    payload["progress"] = job.meta.get("progress", 0)
    return jsonify(payload), 200


def _session(config: MapConfig) -> MapSession:
    """Return the session resolving ``config``, creating it on first use.

    Popup labels do not affect resolution, so sessions are shared by sheet and
    strategy. Only the most recently used sessions are kept.
    """

    state = current_app.extensions["sheet_map"]
    sessions = state["sessions"]
    key = (config.sheet_id, config.strategy())
    with state["sessions_lock"]:
        session = sessions.get(key)
        if session is None:
            session = MapSession(
                config,
                state["row_source_factory"](config),
                state["place_index"],
            )
            sessions[key] = session
            while len(sessions) > state["max_sessions"]:
                sessions.popitem(last=False)
        else:
            sessions.move_to_end(key)
    return session


def _queue():
    return current_app.extensions["rq"]["queue"]


def _connection():
    return current_app.extensions["rq"]["connection"]
