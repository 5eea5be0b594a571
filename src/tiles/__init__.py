"""SRTM tile handling.

This module provides:
- identify: coordinate -> TileId
- decode / encode / decompress: .hgt byte layout
- TileGridCache: in-memory grid cache with single-flight fetching
- Tile sources: HTTP (skadi), local directory, on-disk store
"""

from tiles.cache import CacheStats, TileGridCache
from tiles.decoder import decode, decompress, encode
from tiles.identifier import identify, validate_coordinate
from tiles.source import (
    DiskCachedTileSource,
    HttpTileSource,
    LocalTileSource,
    TileSource,
)

__all__ = [
    'CacheStats',
    'DiskCachedTileSource',
    'HttpTileSource',
    'LocalTileSource',
    'TileGridCache',
    'TileSource',
    'decode',
    'decompress',
    'encode',
    'identify',
    'validate_coordinate',
]
