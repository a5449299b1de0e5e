"""Keep the points of one configured map up to date."""

from __future__ import annotations

import asyncio
import hashlib
import json
import logging
import threading
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, Sequence

from ..core import MapConfig, ResolutionStrategy, ResolvedPoint, Row, SheetResult
from ..services import LocationResolver, PointBuilder

if TYPE_CHECKING:
    from ..services import PlaceIndex

logger = logging.getLogger(__name__)


class RowSource(Protocol):
    def fetch(self) -> SheetResult: ...


@dataclass(frozen=True, slots=True)
class BatchTag:
    """Identifies one resolution batch."""

    sequence: int
    fingerprint: str


def snapshot_fingerprint(rows: Sequence[Row], strategy: ResolutionStrategy | None) -> str:
    """Hash rows by value together with the strategy they are resolved with."""

    payload = json.dumps(
        {"strategy": repr(strategy), "rows": [dict(row) for row in rows]},
        sort_keys=True,
        ensure_ascii=False,
        default=str,
    )
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()


class MapSession:
    """Owns the latest resolved points for a map configuration.

    Points are recomputed only when the rows (compared by value) or the
    resolution strategy differ from the last published batch. Each batch is
    tagged when it starts; a batch that completes after a newer one was started
    is discarded rather than overwriting the newer state, and a batch that
    fails publishes nothing.
    """

    def __init__(self, config: MapConfig, row_source: RowSource, place_index: "PlaceIndex | None" = None):
        self.config = config
        self.row_source = row_source
        self.place_index = place_index
        self.points: list[ResolvedPoint] = []
        self._sequence = 0
        self._latest: BatchTag | None = None
        self._published: str | None = None
        self._lock = threading.Lock()

    def begin(self, rows: Sequence[Row], strategy: ResolutionStrategy | None) -> BatchTag | None:
        """Start a batch for ``rows``; ``None`` when they are already published."""

        fingerprint = snapshot_fingerprint(rows, strategy)
        with self._lock:
            if self._published == fingerprint:
                return None
            self._sequence += 1
            self._latest = BatchTag(self._sequence, fingerprint)
            return self._latest

    def complete(self, tag: BatchTag, points: list[ResolvedPoint]) -> bool:
        """Publish ``points`` unless a newer batch has started since ``tag``."""

        with self._lock:
            if tag != self._latest:
                logger.info("Discarding stale batch %s (latest is %s)", tag.sequence, self._sequence)
                return False
            self.points = points
            self._published = tag.fingerprint
            return True

    def abandon(self, tag: BatchTag) -> None:
        """Forget ``tag`` after its batch failed."""

        with self._lock:
            if tag == self._latest:
                self._latest = None

    async def arefresh(self, result: SheetResult) -> list[ResolvedPoint]:
        if result.loading:
            return self.points

        strategy = self.config.strategy()
        tag = self.begin(result.rows, strategy)
        if tag is None:
            logger.debug("Rows unchanged for sheet %s; keeping %s point(s)", self.config.sheet_id, len(self.points))
            return self.points

        builder = PointBuilder(LocationResolver(strategy, self.place_index))
        try:
            points = await builder.abuild(result.rows)
        except Exception:
            self.abandon(tag)
            raise
        self.complete(tag, points)
        return self.points

    def refresh_from(self, result: SheetResult) -> list[ResolvedPoint]:
        return asyncio.run(self.arefresh(result))

    def refresh(self) -> list[ResolvedPoint]:
        """Fetch rows from the source and bring the points up to date."""

        return self.refresh_from(self.row_source.fetch())
