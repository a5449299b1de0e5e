"""Service layer exports."""

from .place_index import PlaceIndex
from .place_catalog import PlaceCatalogReader
from .resolver import LocationResolver
from .point_builder import PointBuilder
from .row_source import CsvRowSource, GoogleSheetsSource
from .popup import PopupRow, map_payload, popup_rows
from .kmz_exporter import KmzExporter

__all__ = [
    "PlaceIndex",
    "PlaceCatalogReader",
    "LocationResolver",
    "PointBuilder",
    "CsvRowSource",
    "GoogleSheetsSource",
    "PopupRow",
    "map_payload",
    "popup_rows",
    "KmzExporter",
]
