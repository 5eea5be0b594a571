"""Tests for tiles.identifier module."""

import math

import pytest

from domain.errors import OutOfRangeError
from domain.models import Coordinate, TileId
from shared.constants import Resolution
from tiles.identifier import identify, validate_coordinate


class TestIdentify:
    """Tests for identify."""

    def test_northern_eastern(self):
        """(47.9, 5.1) should map to N47E005."""
        tile_id = identify(Coordinate(47.9, 5.1))
        assert tile_id == TileId(lat_band=47, lon_band=5, resolution=Resolution.SRTM1)
        assert tile_id.name == 'N47E005'

    def test_southern_western_floors_down(self):
        """Negative coordinates floor toward negative infinity."""
        tile_id = identify(Coordinate(-0.5, -0.5))
        assert (tile_id.lat_band, tile_id.lon_band) == (-1, -1)
        assert tile_id.name == 'S01W001'

    def test_exact_integer_corner(self):
        """An integer coordinate is the south-west corner of its tile."""
        tile_id = identify(Coordinate(-33.0, 151.0))
        assert tile_id.name == 'S33E151'

    def test_zero_is_north_east(self):
        """Band 0 uses N and E prefixes."""
        assert identify(Coordinate(0.0, 0.0)).name == 'N00E000'
        assert identify(Coordinate(0.3, -0.2)).name == 'N00W001'

    def test_resolution_is_carried(self):
        """The requested resolution ends up in the TileId."""
        tile_id = identify(Coordinate(45.8, 6.8), Resolution.SRTM3)
        assert tile_id.resolution is Resolution.SRTM3

    @pytest.mark.parametrize(
        ('lat', 'lon'),
        [(47.9, 5.1), (-0.5, -0.5), (12.0001, -77.9999), (-89.5, 179.99), (59.999999, -0.000001)],
    )
    def test_floor_property(self, lat, lon):
        """South-west corner never exceeds the coordinate and the tile contains it."""
        coord = Coordinate(lat, lon)
        tile_id = identify(coord)
        assert isinstance(tile_id.lat_band, int)
        assert isinstance(tile_id.lon_band, int)
        assert tile_id.south <= lat < tile_id.north
        assert tile_id.west <= lon < tile_id.east
        assert tile_id.contains(coord)

    def test_north_pole_folds_into_last_band(self):
        """Latitude 90 belongs to the N89 tile edge."""
        tile_id = identify(Coordinate(90.0, 10.5))
        assert tile_id.name == 'N89E010'
        assert tile_id.contains(Coordinate(90.0, 10.5))

    def test_antimeridian_folds_into_last_band(self):
        """Longitude 180 belongs to the E179 tile edge."""
        assert identify(Coordinate(10.5, 180.0)).name == 'N10E179'
        assert identify(Coordinate(10.5, -180.0)).name == 'N10W180'

    def test_just_outside_tile_goes_to_neighbour(self):
        """0.0001 degree past an edge resolves into the adjacent tile."""
        assert identify(Coordinate(48.0001, 5.5)).name == 'N48E005'
        assert identify(Coordinate(47.5, 4.9999)).name == 'N47E004'
        assert identify(Coordinate(46.9999, 5.5)).name == 'N46E005'

    @pytest.mark.parametrize(
        ('lat', 'lon'),
        [(90.0001, 0.0), (-90.0001, 0.0), (0.0, 180.0001), (0.0, -180.0001)],
    )
    def test_out_of_range(self, lat, lon):
        """Coordinates beyond WGS84 bounds are rejected."""
        with pytest.raises(OutOfRangeError):
            identify(Coordinate(lat, lon))

    @pytest.mark.parametrize('bad', [math.nan, math.inf, -math.inf])
    def test_non_finite(self, bad):
        """NaN and infinities are rejected."""
        with pytest.raises(OutOfRangeError):
            validate_coordinate(Coordinate(bad, 0.0))
        with pytest.raises(OutOfRangeError):
            validate_coordinate(Coordinate(0.0, bad))

    def test_out_of_range_is_value_error(self):
        """OutOfRangeError can be caught as ValueError."""
        with pytest.raises(ValueError):
            identify(Coordinate(95.0, 0.0))
