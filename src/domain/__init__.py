"""Domain layer - value types, errors and settings."""
from domain.errors import (
    ElevationError,
    ElevationUnavailableError,
    MalformedTileError,
    OutOfRangeError,
    TileNotFoundError,
    TileSourceError,
    TileUnavailableError,
)
from domain.models import Coordinate, TileGrid, TileId, tile_name
from domain.settings import ElevationSettings, load_settings, save_settings

__all__ = [
    'Coordinate',
    'ElevationError',
    'ElevationSettings',
    'ElevationUnavailableError',
    'MalformedTileError',
    'OutOfRangeError',
    'TileGrid',
    'TileId',
    'TileNotFoundError',
    'TileSourceError',
    'TileUnavailableError',
    'load_settings',
    'save_settings',
    'tile_name',
]
