"""Mapping of geographic coordinates to SRTM tile identifiers."""

from __future__ import annotations

import math

from domain.errors import OutOfRangeError
from domain.models import Coordinate, TileId
from shared.constants import (
    DEFAULT_RESOLUTION,
    LAT_BAND_MAX,
    LAT_MAX,
    LAT_MIN,
    LON_BAND_MAX,
    LON_MAX,
    LON_MIN,
    Resolution,
)


def validate_coordinate(coordinate: Coordinate) -> None:
    """Raise OutOfRangeError unless the point is finite and within WGS84 bounds."""
    lat = coordinate.latitude
    lon = coordinate.longitude
    if not (math.isfinite(lat) and math.isfinite(lon)):
        msg = f'Coordinate must be finite: ({lat}, {lon})'
        raise OutOfRangeError(msg)
    if not (LAT_MIN <= lat <= LAT_MAX):
        msg = f'Latitude {lat} outside [{LAT_MIN}, {LAT_MAX}]'
        raise OutOfRangeError(msg)
    if not (LON_MIN <= lon <= LON_MAX):
        msg = f'Longitude {lon} outside [{LON_MIN}, {LON_MAX}]'
        raise OutOfRangeError(msg)


def identify(
    coordinate: Coordinate,
    resolution: Resolution = DEFAULT_RESOLUTION,
) -> TileId:
    """Return the tile whose south-west corner is floor(lat), floor(lon).

    Bands floor toward negative infinity, so (-0.5, -0.5) lands in S01W001.
    The north pole and the antimeridian have no tile of their own and are
    folded into the last band, on that tile's closed edge.
    """
    validate_coordinate(coordinate)
    lat_band = min(math.floor(coordinate.latitude), LAT_BAND_MAX)
    lon_band = min(math.floor(coordinate.longitude), LON_BAND_MAX)
    return TileId(lat_band=lat_band, lon_band=lon_band, resolution=resolution)
