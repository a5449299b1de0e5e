"""Resolve spreadsheet rows to coordinates."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ..core import (
    Coordinate,
    DirectCoordinates,
    PlaceNameLookup,
    ResolutionStrategy,
    Row,
)
from ..utils import parse_coordinate

if TYPE_CHECKING:
    from .place_index import PlaceIndex

logger = logging.getLogger(__name__)


class LocationResolver:
    """Map one row to an optional coordinate.

    The resolver never raises for bad rows: every failure (missing strategy,
    unparsable coordinate, blank place name, no search match) yields ``None``.
    """

    def __init__(self, strategy: ResolutionStrategy | None, place_index: "PlaceIndex | None" = None):
        self.strategy = strategy
        self.place_index = place_index

    def resolve(self, row: Row) -> Coordinate | None:
        if isinstance(self.strategy, DirectCoordinates):
            return self._from_columns(row, self.strategy)
        if isinstance(self.strategy, PlaceNameLookup):
            return self._from_place_name(row, self.strategy)
        return None

    def _from_columns(self, row: Row, strategy: DirectCoordinates) -> Coordinate | None:
        lat = parse_coordinate(row.get(strategy.lat_column))
        lon = parse_coordinate(row.get(strategy.lon_column))
        if lat is None or lon is None:
            logger.debug(
                "Unusable coordinates %r/%r",
                row.get(strategy.lat_column),
                row.get(strategy.lon_column),
            )
            return None
        return Coordinate(lat, lon)

    def _from_place_name(self, row: Row, strategy: PlaceNameLookup) -> Coordinate | None:
        if self.place_index is None:
            return None

        text = row.get(strategy.name_column)
        if not text or not str(text).strip():
            return None

        hits = self.place_index.search(str(text))
        if not hits:
            logger.debug("No place matches %r", text)
            return None

        try:
            record = self.place_index.get_record(hits[0].ref)
        except KeyError:
            logger.debug("Search hit %s has no place record", hits[0].ref)
            return None
        return Coordinate(record.lat, record.lon)
