"""Full-text searchable index of named places.

The index is a SQLite database holding a ``places`` table and an FTS5
virtual table over the ``name`` and ``region_names`` columns. It is produced
offline by :meth:`PlaceIndex.build` and copied into memory by
:meth:`PlaceIndex.load` once per session. After loading, the index is never
written to, so a single instance can be shared by every resolver.

Relevance ranking is FTS5's ``bm25`` over stemmed (``porter``) tokens; rows
with equal rank keep the order in which they were inserted at build time.
"""

from __future__ import annotations

import logging
import re
import sqlite3
from pathlib import Path
from typing import Iterable

from ..core import PlaceIndexError, PlaceRecord, SearchHit

logger = logging.getLogger(__name__)

_REGION_SEPARATOR = "\n"
_QUERY_TERM = re.compile(r"\w+")

_SCHEMA = """
CREATE TABLE places (
    pk INTEGER PRIMARY KEY,
    id TEXT NOT NULL UNIQUE,
    name TEXT NOT NULL,
    lat REAL NOT NULL,
    lon REAL NOT NULL,
    region_names TEXT NOT NULL DEFAULT ''
);
CREATE VIRTUAL TABLE places_fts USING fts5(
    name,
    region_names,
    content='places',
    content_rowid='pk',
    tokenize='porter unicode61 remove_diacritics 2'
);
"""

_SEARCH_SQL = """
SELECT places.id AS ref, bm25(places_fts) AS rank
FROM places_fts
JOIN places ON places.pk = places_fts.rowid
WHERE places_fts MATCH ?
ORDER BY rank, places_fts.rowid
"""


def build_match_expression(text: str) -> str | None:
    """Translate free text into an FTS5 query.

    Every word becomes a quoted term and the terms are OR-combined, so any
    punctuation the user typed is ignored instead of being parsed as query
    syntax. Returns ``None`` when the text has no words at all.
    """

    terms = _QUERY_TERM.findall(text)
    if not terms:
        return None
    return " OR ".join(f'"{term}"' for term in terms)


class PlaceIndex:
    """Read-only handle on a loaded place index."""

    def __init__(self, connection: sqlite3.Connection):
        self._connection = connection

    @classmethod
    def load(cls, path: Path | str) -> "PlaceIndex":
        """Copy the index stored at ``path`` into an in-memory database."""

        path = Path(path)
        if not path.exists():
            raise PlaceIndexError(f"Place index not found: {path}")

        memory = sqlite3.connect(":memory:", check_same_thread=False)
        try:
            source = sqlite3.connect(f"{path.resolve().as_uri()}?mode=ro", uri=True)
            try:
                source.backup(memory)
            finally:
                source.close()
            count = memory.execute("SELECT COUNT(*) FROM places").fetchone()[0]
            memory.execute("SELECT COUNT(*) FROM places_fts").fetchone()
        except sqlite3.DatabaseError as exc:
            memory.close()
            raise PlaceIndexError(
                "Place index is unreadable",
                details={"path": str(path), "error": str(exc)},
            ) from exc

        logger.info("Loaded place index %s with %s place(s)", path, count)
        return cls(memory)

    @classmethod
    def load_optional(cls, path: Path | str) -> "PlaceIndex | None":
        """Like :meth:`load`, but ``None`` when no artifact exists at ``path``."""

        if not Path(path).exists():
            logger.warning("No place index at %s; place name lookups will not resolve", path)
            return None
        return cls.load(path)

    @classmethod
    def build(cls, records: Iterable[PlaceRecord], path: Path | str) -> Path:
        """Write a new index artifact for ``records`` to ``path``."""

        path = Path(path)
        if path.exists():
            path.unlink()
        path.parent.mkdir(parents=True, exist_ok=True)

        connection = sqlite3.connect(str(path))
        try:
            count = _populate(connection, records)
        except sqlite3.DatabaseError as exc:
            connection.close()
            path.unlink(missing_ok=True)
            raise PlaceIndexError(
                "Unable to build place index",
                details={"path": str(path), "error": str(exc)},
            ) from exc
        connection.close()

        logger.info("Wrote place index with %s place(s) to %s", count, path)
        return path

    @classmethod
    def from_records(cls, records: Iterable[PlaceRecord]) -> "PlaceIndex":
        """Build an index directly in memory."""

        connection = sqlite3.connect(":memory:", check_same_thread=False)
        try:
            _populate(connection, records)
        except sqlite3.DatabaseError as exc:
            connection.close()
            raise PlaceIndexError("Unable to build place index", details={"error": str(exc)}) from exc
        return cls(connection)

    def search(self, text: str) -> list[SearchHit]:
        """Return hits for ``text`` ordered by descending relevance."""

        expression = build_match_expression(text)
        if expression is None:
            return []
        rows = self._connection.execute(_SEARCH_SQL, (expression,)).fetchall()
        # bm25() is lower-is-better; flip it so larger scores mean more relevant.
        return [SearchHit(ref=ref, score=-rank) for ref, rank in rows]

    def get_record(self, ref: str) -> PlaceRecord:
        row = self._connection.execute(
            "SELECT id, name, lat, lon, region_names FROM places WHERE id = ?",
            (ref,),
        ).fetchone()
        if row is None:
            raise KeyError(ref)
        identifier, name, lat, lon, regions = row
        return PlaceRecord(
            id=identifier,
            name=name,
            lat=lat,
            lon=lon,
            region_names=tuple(region for region in regions.split(_REGION_SEPARATOR) if region),
        )

    def __len__(self) -> int:
        return self._connection.execute("SELECT COUNT(*) FROM places").fetchone()[0]

    def close(self) -> None:
        self._connection.close()

    def __enter__(self) -> "PlaceIndex":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


def _populate(connection: sqlite3.Connection, records: Iterable[PlaceRecord]) -> int:
    connection.executescript(_SCHEMA)
    with connection:
        cursor = connection.executemany(
            "INSERT INTO places (id, name, lat, lon, region_names) VALUES (?, ?, ?, ?, ?)",
            (
                (
                    record.id,
                    record.name,
                    record.lat,
                    record.lon,
                    _REGION_SEPARATOR.join(record.region_names),
                )
                for record in records
            ),
        )
        connection.execute("INSERT INTO places_fts (places_fts) VALUES ('rebuild')")
    return cursor.rowcount
