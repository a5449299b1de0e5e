from __future__ import annotations

import pytest

from sheet_map.core import PlaceRecord
from sheet_map.services import PlaceIndex

PLACES = [
    PlaceRecord(id="wro", name="Wrocław", lat=51.1, lon=17.0, region_names=("Lower Silesia", "Poland")),
    PlaceRecord(id="waw", name="Warszawa", lat=52.23, lon=21.01, region_names=("Masovia", "Poland")),
    PlaceRecord(id="krk", name="Kraków", lat=50.06, lon=19.94, region_names=("Lesser Poland", "Poland")),
    PlaceRecord(id="spr", name="Palm Springs", lat=33.83, lon=-116.55, region_names=("California",)),
]


@pytest.fixture()
def place_records() -> list[PlaceRecord]:
    return list(PLACES)


@pytest.fixture()
def place_index(place_records):
    index = PlaceIndex.from_records(place_records)
    yield index
    index.close()
