"""Pytest configuration and fixtures for elevation tests."""

import asyncio
import sys
from pathlib import Path

import numpy as np
import pytest

# Add src directory to path for imports
src_path = Path(__file__).parent.parent / 'src'
sys.path.insert(0, str(src_path))

from domain.errors import TileNotFoundError  # noqa: E402
from shared.constants import Resolution  # noqa: E402


def make_samples(
    resolution: Resolution,
    fill: int = 0,
    overrides: dict[tuple[int, int], int] | None = None,
) -> np.ndarray:
    """Native int16 sample array of the resolution's size."""
    side = resolution.side
    samples = np.full((side, side), fill, dtype=np.int16)
    for (row, col), value in (overrides or {}).items():
        samples[row, col] = value
    return samples


def make_raw(
    resolution: Resolution,
    fill: int = 0,
    overrides: dict[tuple[int, int], int] | None = None,
) -> bytes:
    """Raw .hgt bytes (big-endian int16, row-major)."""
    return make_samples(resolution, fill, overrides).astype('>i2').tobytes()


class CountingSource:
    """Tile source serving fixed bytes and counting calls."""

    def __init__(self, tiles: dict[str, bytes], *, delay: float = 0.0) -> None:
        self.tiles = tiles
        self.delay = delay
        self.calls: list[str] = []

    async def fetch_raw(self, tile_name: str) -> bytes:
        self.calls.append(tile_name)
        if self.delay:
            await asyncio.sleep(self.delay)
        if tile_name not in self.tiles:
            raise TileNotFoundError(tile_name)
        return self.tiles[tile_name]


@pytest.fixture
def srtm3_flat_raw():
    """SRTM3 tile with every sample at 100 m."""
    return make_raw(Resolution.SRTM3, fill=100)
