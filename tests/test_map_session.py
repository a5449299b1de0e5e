from __future__ import annotations

import sqlite3

import pytest

from sheet_map.core import DirectCoordinates, MapConfig, PlaceNameLookup, SheetResult
from sheet_map.pipelines import MapSession, snapshot_fingerprint

ROWS = [
    {"lat": "51.1", "lon": "17.0", "name": "A"},
    {"lat": "0", "lon": "17.0", "name": "B"},
]


class FakeSource:
    def __init__(self, *results: SheetResult) -> None:
        self.results = list(results)
        self.calls = 0

    def fetch(self) -> SheetResult:
        result = self.results[min(self.calls, len(self.results) - 1)]
        self.calls += 1
        return result


def coords_config() -> MapConfig:
    return MapConfig(sheet_id="sheet", coords_labels=("lat", "lon"), labels=("name",))


def test_refresh_resolves_rows():
    session = MapSession(coords_config(), FakeSource(SheetResult(rows=ROWS)))

    points = session.refresh()

    assert [(p.lat, p.lon, p.source_row["name"]) for p in points] == [(51.1, 17.0, "A")]


def test_unchanged_rows_are_not_recomputed():
    copy = [dict(row) for row in ROWS]
    session = MapSession(coords_config(), FakeSource(SheetResult(rows=ROWS), SheetResult(rows=copy)))

    first = session.refresh()
    second = session.refresh()

    assert second is first


def test_changed_rows_are_recomputed():
    changed = ROWS + [{"lat": "52.2", "lon": "21.0", "name": "C"}]
    session = MapSession(coords_config(), FakeSource(SheetResult(rows=ROWS), SheetResult(rows=changed)))

    session.refresh()
    points = session.refresh()

    assert [p.source_row["name"] for p in points] == ["A", "C"]


def test_loading_result_is_ignored():
    session = MapSession(
        coords_config(),
        FakeSource(SheetResult(rows=ROWS), SheetResult(rows=[], loading=True)),
    )

    first = session.refresh()
    second = session.refresh()

    assert second is first
    assert len(second) == 1


def test_strategy_change_triggers_recompute():
    rows = [{"lat": "51.1", "lon": "17.0", "y": "52.2", "x": "21.0"}]
    session = MapSession(coords_config(), FakeSource(SheetResult(rows=rows)))
    session.refresh()

    session.config = MapConfig(sheet_id="sheet", coords_labels=("y", "x"))
    points = session.refresh()

    assert [(p.lat, p.lon) for p in points] == [(52.2, 21.0)]


def test_stale_batch_is_discarded():
    session = MapSession(coords_config(), FakeSource(SheetResult()))
    strategy = DirectCoordinates("lat", "lon")

    older = session.begin(ROWS, strategy)
    newer = session.begin(ROWS[:1], strategy)

    assert session.complete(newer, ["newer"]) is True
    assert session.complete(older, ["older"]) is False
    assert session.points == ["newer"]


def test_begin_skips_published_snapshot():
    session = MapSession(coords_config(), FakeSource(SheetResult()))
    strategy = DirectCoordinates("lat", "lon")

    tag = session.begin(ROWS, strategy)
    assert session.complete(tag, ["points"]) is True
    assert session.begin([dict(row) for row in ROWS], strategy) is None


def test_begin_restarts_snapshot_still_in_flight():
    session = MapSession(coords_config(), FakeSource(SheetResult()))
    strategy = DirectCoordinates("lat", "lon")

    first = session.begin(ROWS, strategy)
    second = session.begin([dict(row) for row in ROWS], strategy)

    assert second is not None and second != first
    assert session.complete(second, ["points"]) is True
    assert session.complete(first, ["stale"]) is False
    assert session.points == ["points"]


def test_fingerprint_compares_values_and_strategy():
    same = [dict(row) for row in ROWS]

    assert snapshot_fingerprint(ROWS, DirectCoordinates("lat", "lon")) == snapshot_fingerprint(
        same, DirectCoordinates("lat", "lon")
    )
    assert snapshot_fingerprint(ROWS, DirectCoordinates("lat", "lon")) != snapshot_fingerprint(
        ROWS, PlaceNameLookup("name")
    )
    assert snapshot_fingerprint(ROWS, None) != snapshot_fingerprint(ROWS[:1], None)


def test_place_lookup_session(place_index):
    config = MapConfig(sheet_id="sheet", location_label="city")
    session = MapSession(config, FakeSource(SheetResult(rows=[{"city": "Wrocław"}, {"city": ""}])), place_index)

    points = session.refresh()

    assert [(p.lat, p.lon) for p in points] == [(51.1, 17.0)]


class FlakyIndex:
    """Fails the first search, then delegates to a real index."""

    def __init__(self, index) -> None:
        self.index = index
        self.failures = 1

    def search(self, text):
        if self.failures:
            self.failures -= 1
            raise sqlite3.OperationalError("database is locked")
        return self.index.search(text)

    def get_record(self, ref):
        return self.index.get_record(ref)


def test_failed_batch_is_retried_with_same_rows(place_index):
    config = MapConfig(sheet_id="sheet", location_label="city")
    session = MapSession(config, FakeSource(SheetResult(rows=[{"city": "Wrocław"}])), FlakyIndex(place_index))

    with pytest.raises(sqlite3.OperationalError):
        session.refresh()
    assert session.points == []

    points = session.refresh()

    assert [(p.lat, p.lon) for p in points] == [(51.1, 17.0)]
