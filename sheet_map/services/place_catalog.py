"""Load place datasets used to build the place index."""

from __future__ import annotations

import csv
import logging
from pathlib import Path
from typing import Mapping, Sequence

from ..core import PlaceIndexError, PlaceRecord
from ..utils import resolve_encoding

logger = logging.getLogger(__name__)


class PlaceCatalogReader:
    """Read :class:`PlaceRecord` entries from a CSV gazetteer.

    Region names are stored in a single ``regions`` column separated by ``|``.
    """

    REQUIRED_COLUMNS: Sequence[str] = ("id", "name", "lat", "lon")
    REGION_SEPARATOR = "|"

    def __init__(self, *, encoding: str | None = None):
        self.encoding = encoding or "utf-8-sig"

    def load(self, path: Path | str) -> list[PlaceRecord]:
        path = Path(path)
        if not path.exists():
            raise PlaceIndexError(f"Place dataset not found: {path}")

        encoding = resolve_encoding(path, self.encoding)
        records: list[PlaceRecord] = []
        skipped = 0

        with path.open("r", encoding=encoding, errors="replace", newline="") as handle:
            reader = csv.DictReader(handle)
            self._validate_headers(reader.fieldnames or [], path)
            for line, row in enumerate(reader, start=2):
                record = self._parse_row(row)
                if record is None:
                    skipped += 1
                    logger.warning("Skipping place on line %s of %s", line, path.name)
                    continue
                records.append(record)

        if skipped:
            logger.info("Skipped %s place row(s) without a name or coordinates", skipped)
        return records

    def _parse_row(self, row: Mapping[str, str | None]) -> PlaceRecord | None:
        identifier = (row.get("id") or "").strip()
        name = (row.get("name") or "").strip()
        if not identifier or not name:
            return None
        try:
            lat = float(row.get("lat") or "")
            lon = float(row.get("lon") or "")
        except ValueError:
            return None

        regions = tuple(
            region.strip()
            for region in (row.get("regions") or "").split(self.REGION_SEPARATOR)
            if region.strip()
        )
        return PlaceRecord(id=identifier, name=name, lat=lat, lon=lon, region_names=regions)

    def _validate_headers(self, headers: Sequence[str], path: Path) -> None:
        missing = [column for column in self.REQUIRED_COLUMNS if column not in headers]
        if missing:
            raise PlaceIndexError(
                "Place dataset is missing required columns",
                details={"path": str(path), "missing": missing},
            )
