from __future__ import annotations

import io
import zipfile

import pytest

from sheet_map import create_app
from sheet_map.core import RowSourceError, SheetResult

ROWS = [
    {"name": "A", "lat": "51.1", "lon": "17.0", "city": "Wrocław"},
    {"name": "B", "lat": "0", "lon": "17.0", "city": "Atlantis"},
    {"name": "C", "lat": "50.06", "lon": "19.94", "city": "Kraków"},
]


class FakeSource:
    def __init__(self, rows) -> None:
        self.rows = rows

    def fetch(self) -> SheetResult:
        return SheetResult(rows=self.rows)


class BrokenSource:
    def fetch(self) -> SheetResult:
        raise RowSourceError("Unable to fetch spreadsheet", details={"sheet_id": "broken"})


@pytest.fixture()
def app(place_index):
    def source_factory(config):
        if config.sheet_id == "broken":
            return BrokenSource()
        return FakeSource(ROWS)

    app = create_app(row_source_factory=source_factory, place_index=place_index)
    app.config["TESTING"] = True
    return app


@pytest.fixture()
def client(app):
    return app.test_client()


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.get_json() == {"status": "healthy"}


def test_map_with_coordinate_columns(client):
    response = client.get("/api/map?id=sheet&coordsLabels=lat,lon&labels=name")

    assert response.status_code == 200
    payload = response.get_json()
    assert [(p["lat"], p["lon"]) for p in payload["points"]] == [(51.1, 17.0), (50.06, 19.94)]
    assert payload["points"][0]["popup"] == [
        {"label": "name", "text": "A", "display": "A", "link": False}
    ]
    assert payload["labels"] == ["name"]


def test_map_with_location_column(client):
    response = client.get("/api/map?id=sheet&locationLabel=city&labels=name,city")

    payload = response.get_json()
    assert [p["popup"][0]["text"] for p in payload["points"]] == ["A", "C"]
    assert payload["points"][0]["lat"] == 51.1


def test_map_without_strategy_is_empty(client):
    response = client.get("/api/map?id=sheet&labels=name")

    assert response.status_code == 200
    assert response.get_json()["points"] == []


def test_map_reuses_session_per_config(app, client):
    client.get("/api/map?id=sheet&coordsLabels=lat,lon")
    client.get("/api/map?id=sheet&coordsLabels=lat,lon")
    client.get("/api/map?id=sheet&locationLabel=city")

    assert len(app.extensions["sheet_map"]["sessions"]) == 2


def test_popup_labels_share_one_session(app, client):
    first = client.get("/api/map?id=sheet&coordsLabels=lat,lon&labels=name")
    second = client.get("/api/map?id=sheet&coordsLabels=lat,lon&labels=city")

    assert len(app.extensions["sheet_map"]["sessions"]) == 1
    assert first.get_json()["points"][0]["popup"][0]["text"] == "A"
    assert second.get_json()["points"][0]["popup"][0]["text"] == "Wrocław"


def test_least_recently_used_session_is_dropped(place_index):
    app = create_app(row_source_factory=lambda config: FakeSource(ROWS), place_index=place_index, max_sessions=2)
    client = app.test_client()

    for sheet_id in ("a", "b", "a", "c"):
        client.get(f"/api/map?id={sheet_id}&coordsLabels=lat,lon")

    sessions = app.extensions["sheet_map"]["sessions"]
    assert len(sessions) == 2
    assert [sheet_id for sheet_id, _ in sessions] == ["a", "c"]


def test_map_rejects_malformed_coords_labels(client):
    response = client.get("/api/map?id=sheet&coordsLabels=lat")

    assert response.status_code == 400
    assert response.get_json()["error"]["message"] == "coordsLabels must name two columns"


def test_map_reports_row_source_failure(client):
    response = client.get("/api/map?id=broken&coordsLabels=lat,lon")

    assert response.status_code == 502
    assert response.get_json()["error"]["details"] == {"sheet_id": "broken"}


def test_map_kmz_download(client):
    response = client.get("/api/map.kmz?id=sheet&coordsLabels=lat,lon&labels=name")

    assert response.status_code == 200
    assert "sheet.kmz" in response.headers["Content-Disposition"]
    with zipfile.ZipFile(io.BytesIO(response.data)) as archive:
        content = archive.read("doc.kml").decode("utf-8")
    assert content.count("<Placemark>") == 2


def test_create_export_requires_sheet_id(client):
    response = client.post("/api/exports", json={"coordsLabels": "lat,lon"})

    assert response.status_code == 400
