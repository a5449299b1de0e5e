"""Command line workflows: build the place index and map CSV rows."""

from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
from typing import Iterable, Optional

from .core import MapConfig, ResolvedPoint, SheetMapError
from .pipelines import MapSession
from .services import CsvRowSource, KmzExporter, PlaceCatalogReader, PlaceIndex, map_payload

__all__ = [
    "build_place_index",
    "map_csv_rows",
    "main",
]

LOGGER = logging.getLogger(__name__)


def build_place_index(
    places_csv: Path,
    index_path: Path,
    *,
    encoding: str | None = None,
) -> Path:
    """Build the place index artifact from a gazetteer CSV.

    Parameters
    ----------
    places_csv:
        CSV file with ``id``, ``name``, ``lat`` and ``lon`` columns and an
        optional ``regions`` column (region names separated by ``|``).
    index_path:
        Destination of the SQLite index. An existing file is replaced.
    encoding:
        Text encoding of ``places_csv``; ``"auto"`` sniffs it.

    Returns
    -------
    Path
        The path of the written index.
    """

    records = PlaceCatalogReader(encoding=encoding).load(places_csv)
    return PlaceIndex.build(records, index_path)


def map_csv_rows(
    source_csv: Path,
    config: MapConfig,
    *,
    index_path: Optional[Path] = None,
    json_output: Optional[Path] = None,
    kmz_output: Optional[Path] = None,
    encoding: str | None = None,
) -> list[ResolvedPoint]:
    """Resolve the rows of ``source_csv`` and write the requested outputs."""

    place_index = PlaceIndex.load(index_path) if index_path else None
    try:
        session = MapSession(config, CsvRowSource(source_csv, encoding=encoding), place_index)
        points = session.refresh()
    finally:
        if place_index is not None:
            place_index.close()

    if json_output is not None:
        with json_output.open("w", encoding="utf-8") as handle:
            json.dump(map_payload(points, config.labels), handle, ensure_ascii=False, indent=2)
    if kmz_output is not None:
        KmzExporter().export(points, config.labels, kmz_output)

    return points


def _build_argument_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Build the place index and turn spreadsheet rows into map points.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    build = subparsers.add_parser(
        "build-index",
        help="Build the place index from a gazetteer CSV.",
    )
    build.add_argument("places", type=Path, help="Gazetteer CSV (id,name,lat,lon,regions)")
    build.add_argument("index", type=Path, help="Output path of the SQLite place index")
    build.add_argument(
        "--encoding",
        help="Encoding of the gazetteer CSV; 'auto' detects it (default: utf-8-sig)",
    )

    points = subparsers.add_parser(
        "points",
        help="Resolve CSV rows to map points.",
    )
    points.add_argument("input", type=Path, help="CSV file with a header row")
    points.add_argument("--index", type=Path, help="Place index used for location lookups")
    points.add_argument(
        "--coords-labels",
        help="Comma separated latitude and longitude column names",
    )
    points.add_argument(
        "--location-label",
        help="Column holding a place name to look up in the index",
    )
    points.add_argument(
        "--labels",
        help="Comma separated list of columns to show in marker popups",
    )
    points.add_argument("--json", type=Path, help="Write the map payload as JSON")
    points.add_argument("--kmz", type=Path, help="Write the points to a KMZ file")
    points.add_argument(
        "--encoding",
        help="Encoding of the input CSV; 'auto' detects it (default: utf-8-sig)",
    )

    return parser


def main(argv: Optional[Iterable[str]] = None) -> int:
    parser = _build_argument_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)

    logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")

    try:
        if args.command == "build-index":
            build_place_index(args.places, args.index, encoding=args.encoding)
            return 0

        if args.command == "points":
            config = MapConfig.from_params(
                {
                    "id": args.input.stem,
                    "coordsLabels": args.coords_labels or "",
                    "locationLabel": args.location_label or "",
                    "labels": args.labels or "",
                }
            )
            resolved = map_csv_rows(
                args.input,
                config,
                index_path=args.index,
                json_output=args.json,
                kmz_output=args.kmz,
                encoding=args.encoding,
            )
            LOGGER.info("Mapped %s point(s)", len(resolved))
            return 0
    except SheetMapError as error:
        LOGGER.error("%s", error)
        return 1

    parser.error("Unknown command")


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    raise SystemExit(main())
