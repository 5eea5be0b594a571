"""Decoding of raw ``.hgt`` tile contents into sample grids.

An ``.hgt`` file is a headerless square of big-endian signed 16-bit samples,
row-major, north row first, west to east within a row.
"""

from __future__ import annotations

import gzip
import zlib

import numpy as np

from domain.errors import MalformedTileError
from domain.models import TileGrid
from shared.constants import GZIP_MAGIC, Resolution

# Sample layout on disk
HGT_DTYPE = np.dtype('>i2')


def decode(raw: bytes, resolution: Resolution) -> TileGrid:
    """Parse decompressed tile bytes into a TileGrid of the given resolution."""
    expected = resolution.byte_length
    if len(raw) != expected:
        msg = (
            f'Tile size {len(raw)} bytes does not match {resolution.value} '
            f'({expected} bytes)'
        )
        other = Resolution.from_byte_length(len(raw))
        if other is not None:
            msg += f'; the data looks like {other.value}'
        raise MalformedTileError(msg)
    side = resolution.side
    samples = np.frombuffer(raw, dtype=HGT_DTYPE).reshape(side, side).astype(np.int16)
    return TileGrid(samples=samples, resolution=resolution)


def encode(grid: TileGrid) -> bytes:
    """Serialize a grid back into the ``.hgt`` byte layout."""
    return grid.samples.astype(HGT_DTYPE).tobytes()


def decompress(data: bytes) -> bytes:
    """Gunzip ``data`` if it carries the gzip magic; plain data passes through."""
    if not data.startswith(GZIP_MAGIC):
        return data
    try:
        return gzip.decompress(data)
    except (OSError, EOFError, zlib.error) as e:
        msg = f'Corrupt gzip tile archive: {e}'
        raise MalformedTileError(msg) from e
