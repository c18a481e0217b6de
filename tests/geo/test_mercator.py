"""Tests for geo.mercator module."""

import math

import pytest

from domain.models import TileIndex
from geo.mercator import (
    InvalidArgumentError,
    inside_center_tile,
    lat_lon_to_tile_coords,
    max_tile_index,
    tile_coords_to_lat_lon,
    tile_index_for,
    zoom_to_resolution,
)


class TestLatLonToTileCoords:
    """Tests for lat_lon_to_tile_coords."""

    @pytest.mark.parametrize('zoom', [1, 2, 5, 10, 17, 31])
    def test_origin_is_grid_center(self, zoom):
        """Equator / prime meridian lands on the grid center boundary."""
        x, y = lat_lon_to_tile_coords(0.0, 0.0, zoom)
        assert x == 2 ** (zoom - 1)
        assert y == 2 ** (zoom - 1)

    def test_zoom_zero_origin(self):
        x, y = lat_lon_to_tile_coords(0.0, 0.0, 0)
        assert (x, y) == (0.5, 0.5)

    def test_known_tile_london(self):
        """London at zoom 10 is tile 511/340."""
        x, y = lat_lon_to_tile_coords(51.5074, -0.1278, 10)
        assert math.floor(x) == 511
        assert math.floor(y) == 340

    def test_north_west_corner(self):
        x, y = lat_lon_to_tile_coords(85.0511, -180.0, 4)
        assert x == 0.0
        assert 0.0 <= y < 1e-3

    @pytest.mark.parametrize('zoom', [0, 1, 3, 8, 15, 20, 31])
    @pytest.mark.parametrize('lat', [-85.0511, -60.0, -1e-9, 0.0, 33.3, 85.0511])
    @pytest.mark.parametrize('lon', [-180.0, -45.5, 0.0, 179.999])
    def test_floor_within_grid(self, zoom, lat, lon):
        """Floored coordinates stay inside [0, 2**zoom - 1]."""
        x, y = lat_lon_to_tile_coords(lat, lon, zoom)
        edge = 2**zoom - 1
        assert 0 <= math.floor(x) <= edge
        assert 0 <= math.floor(y) <= edge

    def test_zoom_too_high(self):
        with pytest.raises(InvalidArgumentError, match='Zoom level 32'):
            lat_lon_to_tile_coords(0.0, 0.0, 32)

    def test_negative_zoom(self):
        with pytest.raises(InvalidArgumentError):
            lat_lon_to_tile_coords(0.0, 0.0, -1)

    @pytest.mark.parametrize('lat', [90.0, -90.0, 85.06, -85.0512])
    def test_latitude_out_of_range(self, lat):
        with pytest.raises(InvalidArgumentError, match='Latitude'):
            lat_lon_to_tile_coords(lat, 0.0, 5)

    @pytest.mark.parametrize('lon', [200.0, -180.5, 180.0001])
    def test_longitude_out_of_range(self, lon):
        with pytest.raises(InvalidArgumentError, match='Longitude'):
            lat_lon_to_tile_coords(0.0, lon, 5)

    def test_error_is_value_error(self):
        assert issubclass(InvalidArgumentError, ValueError)


class TestZoomToResolution:
    """Tests for zoom_to_resolution."""

    def test_equator_zoom_zero(self):
        assert zoom_to_resolution(0.0, 0) == 156543.034

    def test_halves_per_zoom_level(self):
        assert zoom_to_resolution(0.0, 1) == pytest.approx(156543.034 / 2)
        assert zoom_to_resolution(0.0, 18) == pytest.approx(156543.034 / 2**18)

    def test_shrinks_with_latitude(self):
        assert zoom_to_resolution(60.0, 1) == pytest.approx(156543.034 * 0.5 / 2)


class TestTileIndexFor:
    """Tests for tile_index_for and the origin offset."""

    def test_center_and_offset(self):
        index, (ox, oy) = tile_index_for(51.5074, -0.1278, 10)
        assert index == TileIndex(511, 340, 10)
        x, y = lat_lon_to_tile_coords(51.5074, -0.1278, 10)
        assert ox == pytest.approx(x - 511)
        assert oy == pytest.approx(y - 340)
        assert 0.0 <= ox < 1.0
        assert 0.0 <= oy < 1.0

    def test_east_edge_clamped_to_last_column(self):
        index, (ox, _) = tile_index_for(0.0, 180.0, 2)
        assert index.x == 3
        assert ox == pytest.approx(1.0)

    def test_invalid_input_raises(self):
        with pytest.raises(InvalidArgumentError):
            tile_index_for(90.0, 0.0, 3)


class TestInsideCenterTile:
    """Tests for inside_center_tile."""

    def test_point_in_same_tile(self):
        center, _ = tile_index_for(51.5074, -0.1278, 10)
        assert inside_center_tile(51.5075, -0.1279, 10, center)

    def test_point_in_neighbour_tile(self):
        center, _ = tile_index_for(51.5074, -0.1278, 10)
        assert not inside_center_tile(51.5074, 0.5, 10, center)
        assert not inside_center_tile(52.5, -0.1278, 10, center)

    def test_east_edge_point_inside_clamped_center(self):
        center, _ = tile_index_for(0.0, 180.0, 2)
        assert center == TileIndex(3, 2, 2)
        assert inside_center_tile(0.0, 180.0, 2, center)
        assert inside_center_tile(0.0, 179.9, 2, center)


class TestInverseProjection:
    """Tests for tile_coords_to_lat_lon."""

    def test_world_corner(self):
        lat, lon = tile_coords_to_lat_lon(0, 0, 0)
        assert lon == -180.0
        assert lat == pytest.approx(85.0511, abs=1e-4)

    def test_round_trip(self):
        x, y = lat_lon_to_tile_coords(48.8566, 2.3522, 14)
        lat, lon = tile_coords_to_lat_lon(x, y, 14)
        assert lat == pytest.approx(48.8566, abs=1e-9)
        assert lon == pytest.approx(2.3522, abs=1e-9)


def test_max_tile_index():
    assert max_tile_index(0) == 0
    assert max_tile_index(3) == 7
    assert max_tile_index(31) == 2**31 - 1
