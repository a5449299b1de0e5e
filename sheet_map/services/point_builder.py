"""Turn a batch of rows into map points."""

from __future__ import annotations

import asyncio
import logging
from typing import Sequence

from ..core import ResolvedPoint, Row
from .resolver import LocationResolver

logger = logging.getLogger(__name__)


class PointBuilder:
    """Apply a :class:`LocationResolver` to every row of a batch."""

    def __init__(self, resolver: LocationResolver):
        self.resolver = resolver

    async def abuild(self, rows: Sequence[Row]) -> list[ResolvedPoint]:
        """Resolve all rows concurrently and keep the successful ones.

        ``asyncio.gather`` returns results by position, so the output follows
        the input order whatever order the resolutions finish in.
        """

        if self.resolver.strategy is None and rows:
            logger.warning("No coordinate or location columns configured; %s row(s) unmapped", len(rows))

        results = await asyncio.gather(*(self._resolve(row) for row in rows))
        points = [point for point in results if point is not None]

        logger.info("Resolved %s of %s row(s)", len(points), len(rows))
        return points

    def build(self, rows: Sequence[Row]) -> list[ResolvedPoint]:
        return asyncio.run(self.abuild(rows))

    async def _resolve(self, row: Row) -> ResolvedPoint | None:
        coordinate = self.resolver.resolve(row)
        if coordinate is None:
            return None
        return ResolvedPoint(lat=coordinate.lat, lon=coordinate.lon, source_row=row)
