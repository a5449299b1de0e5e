from __future__ import annotations

import pytest

from sheet_map.core import ConfigurationError, DirectCoordinates, MapConfig, PlaceNameLookup


def test_coords_labels_select_direct_coordinates():
    config = MapConfig.from_params({"id": "abc", "coordsLabels": "lat, lon", "labels": "name, url"})

    assert config.sheet_id == "abc"
    assert config.strategy() == DirectCoordinates("lat", "lon")
    assert config.labels == ("name", "url")


def test_location_label_selects_lookup():
    config = MapConfig.from_params({"id": "abc", "locationLabel": "city"})
    assert config.strategy() == PlaceNameLookup("city")


def test_coords_labels_win_over_location_label():
    config = MapConfig.from_params({"coordsLabels": "lat,lon", "locationLabel": "city"})
    assert config.strategy() == DirectCoordinates("lat", "lon")


def test_empty_parameters_mean_no_strategy():
    config = MapConfig.from_params({"id": "abc", "coordsLabels": "", "locationLabel": " "})

    assert config.strategy() is None
    assert config.labels == ()


@pytest.mark.parametrize("value", ["lat", "lat,", ",lon"])
def test_malformed_coords_labels(value):
    with pytest.raises(ConfigurationError) as excinfo:
        MapConfig.from_params({"coordsLabels": value})
    assert excinfo.value.as_dict()["details"] == {"coordsLabels": value}


def test_extra_coords_labels_are_ignored():
    config = MapConfig.from_params({"coordsLabels": "lat,lon,alt"})

    assert config.coords_labels == ("lat", "lon")
    assert config.strategy() == DirectCoordinates("lat", "lon")


def test_as_params_rebuilds_same_config():
    config = MapConfig.from_params({"id": "abc", "locationLabel": "city", "labels": "name,city"})
    assert MapConfig.from_params(config.as_params()) == config
