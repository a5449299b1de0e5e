"""Row sources: Google Sheets and local CSV files."""

from __future__ import annotations

import csv
import json
import logging
from pathlib import Path
from typing import Dict, Sequence
from urllib import error as urllib_error
from urllib import parse as urllib_parse
from urllib import request as urllib_request

from ..core import RowSourceError, SheetResult
from ..utils import resolve_encoding

logger = logging.getLogger(__name__)


class _HTTPClient:
    """Small wrapper around :func:`urllib.request.urlopen` with headers."""

    _DEFAULT_HEADERS = {"User-Agent": "SheetMap/1.0", "Accept": "application/json"}

    def get_json(self, url: str, params: Dict[str, object], timeout: int) -> Dict[str, object]:
        query = urllib_parse.urlencode(params)
        full_url = f"{url}?{query}"
        request = urllib_request.Request(full_url, headers=self._DEFAULT_HEADERS)
        with urllib_request.urlopen(request, timeout=timeout) as response:
            data = response.read()
        return json.loads(data.decode("utf-8"))


def rows_from_values(values: Sequence[Sequence[object]]) -> list[dict[str, str]]:
    """Convert a header-first grid of cells into row mappings.

    Short rows are padded with empty strings, fully blank rows are skipped and
    columns with a blank header are ignored.
    """

    if not values:
        return []
    header = [str(cell).strip() for cell in values[0]]
    rows: list[dict[str, str]] = []
    for raw in values[1:]:
        cells = [str(cell) if cell is not None else "" for cell in raw]
        if not any(cell.strip() for cell in cells):
            continue
        cells += [""] * (len(header) - len(cells))
        rows.append({name: cells[i] for i, name in enumerate(header) if name})
    return rows


class GoogleSheetsSource:
    """Read the first worksheet of a Google spreadsheet."""

    base_url = "https://sheets.googleapis.com/v4/spreadsheets"

    def __init__(
        self,
        sheet_id: str,
        api_key: str,
        *,
        http_client: _HTTPClient | None = None,
        timeout: int = 10,
    ):
        self.sheet_id = sheet_id
        self.api_key = api_key
        self.http_client = http_client or _HTTPClient()
        self.timeout = timeout

    def fetch(self) -> SheetResult:
        if not self.sheet_id:
            return SheetResult(rows=[], loading=False)

        spreadsheet_url = f"{self.base_url}/{urllib_parse.quote(self.sheet_id, safe='')}"
        metadata = self._get(spreadsheet_url, {"key": self.api_key, "fields": "sheets.properties.title"})

        sheets = metadata.get("sheets") if isinstance(metadata, dict) else None
        if not isinstance(sheets, list) or not sheets:
            return SheetResult(rows=[], loading=False)
        title = (sheets[0].get("properties") or {}).get("title")
        if not title:
            raise RowSourceError("Spreadsheet has no titled worksheet", details={"sheet_id": self.sheet_id})

        sheet_range = urllib_parse.quote("'{}'".format(title.replace("'", "''")), safe="")
        payload = self._get(f"{spreadsheet_url}/values/{sheet_range}", {"key": self.api_key})
        values = payload.get("values") if isinstance(payload, dict) else None

        rows = rows_from_values(values or [])
        logger.info("Fetched %s row(s) from sheet %s", len(rows), self.sheet_id)
        return SheetResult(rows=rows, loading=False)

    def _get(self, url: str, params: Dict[str, object]) -> Dict[str, object]:
        try:
            return self.http_client.get_json(url, params, self.timeout)
        except (urllib_error.URLError, ValueError) as exc:
            logger.warning("Google Sheets request failed: %s", exc)
            raise RowSourceError(
                "Unable to fetch spreadsheet",
                details={"sheet_id": self.sheet_id, "error": str(exc)},
            ) from exc


class CsvRowSource:
    """Read rows from a CSV file with a header row."""

    def __init__(self, path: Path | str, *, encoding: str | None = None):
        self.path = Path(path)
        self.encoding = encoding or "utf-8-sig"

    def fetch(self) -> SheetResult:
        if not self.path.exists():
            raise RowSourceError(f"CSV file not found: {self.path}")

        encoding = resolve_encoding(self.path, self.encoding)
        with self.path.open("r", encoding=encoding, errors="replace", newline="") as handle:
            reader = csv.reader(handle)
            rows = rows_from_values(list(reader))

        logger.info("Read %s row(s) from %s", len(rows), self.path.name)
        return SheetResult(rows=rows, loading=False)
