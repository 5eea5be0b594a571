"""Error taxonomy of the elevation service.

Every failure surfaced by ``ElevationService.get_elevation`` is an
``ElevationError`` subclass, so callers can catch the whole family at once
or tell "no data here" apart from "tile could not be obtained".
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from domain.models import Coordinate, TileId


class ElevationError(Exception):
    """Base class for all elevation lookup failures."""


class OutOfRangeError(ElevationError, ValueError):
    """Coordinate lies outside [-90, 90] x [-180, 180] or is not finite."""


class MalformedTileError(ElevationError):
    """Tile bytes do not match the layout expected for the resolution."""


class TileSourceError(ElevationError):
    """Transport-level failure of a tile source (network, timeout, I/O)."""


class TileNotFoundError(TileSourceError):
    """The tile source has no archive with the requested name."""


class TileUnavailableError(ElevationError):
    """A tile could not be fetched, decompressed or decoded."""

    def __init__(self, tile_id: TileId, cause: BaseException) -> None:
        self.tile_id = tile_id
        self.cause = cause
        super().__init__(f'Tile {tile_id.name} ({tile_id.resolution.value}) unavailable: {cause!r}')


class ElevationUnavailableError(ElevationError):
    """The interpolation neighbourhood of a point contains a void sample."""

    def __init__(self, coordinate: Coordinate, tile_id: TileId) -> None:
        self.coordinate = coordinate
        self.tile_id = tile_id
        super().__init__(
            f'No elevation data at ({coordinate.latitude}, {coordinate.longitude}) '
            f'in tile {tile_id.name}'
        )
