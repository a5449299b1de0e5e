"""RQ task definitions for asynchronous map exports."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Mapping

from rq import get_current_job

from .config import APP_CONFIG, STORAGE_PATHS
from .core import ExportSummary, MapConfig, SheetMapError
from .pipelines import MapSession
from .services import GoogleSheetsSource, KmzExporter, PlaceIndex
from .utils import ensure_directory, export_filename

logger = logging.getLogger(__name__)


def export_map(*, job_id: str, params: Mapping[str, str]) -> dict:
    """Resolve the configured sheet and write its points to a KMZ file."""

    job = get_current_job()
    if job:
        job.meta["progress"] = 0
        job.save_meta()

    created_at = datetime.utcnow()

    try:
        config = MapConfig.from_params(params)
        source = GoogleSheetsSource(
            config.sheet_id,
            APP_CONFIG.google_api_key,
            timeout=APP_CONFIG.request_timeout,
        )
        result = source.fetch()

        place_index = None
        if config.coords_labels is None and config.location_label:
            place_index = PlaceIndex.load_optional(STORAGE_PATHS.place_index)
        try:
            session = MapSession(config, source, place_index)
            points = session.refresh_from(result)
        finally:
            if place_index is not None:
                place_index.close()
    except SheetMapError as exc:
        if job:
            job.meta["error"] = exc.as_dict()
            job.save_meta()
        raise

    output_dir = ensure_directory(STORAGE_PATHS.outputs / job_id)
    output_file = output_dir / export_filename(config.sheet_id, ".kmz")
    KmzExporter().export(points, config.labels, output_file)
    logger.info("Export %s finished; generated %s", job_id, output_file.name)

    if job:
        job.meta["progress"] = 100
        job.save_meta()

    return ExportSummary(
        job_id=job_id,
        created_at=created_at,
        completed_at=datetime.utcnow(),
        row_count=len(result.rows),
        point_count=len(points),
        generated_files=[output_file.name],
    ).as_dict()
