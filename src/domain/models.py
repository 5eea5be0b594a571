"""Core value types: coordinates, tile identifiers and decoded grids."""

from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np

from shared.constants import (
    DEFAULT_RESOLUTION,
    LAT_BAND_MAX,
    LON_BAND_MAX,
    VOID_SAMPLE,
    Resolution,
)


@dataclass(frozen=True)
class Coordinate:
    """Geographic point in decimal degrees (WGS84)."""

    latitude: float
    longitude: float


def tile_name(lat_band: int, lon_band: int) -> str:
    """Canonical SRTM name of the tile with south-west corner (lat_band, lon_band)."""
    lat_prefix = 'N' if lat_band >= 0 else 'S'
    lon_prefix = 'E' if lon_band >= 0 else 'W'
    return f'{lat_prefix}{abs(lat_band):02d}{lon_prefix}{abs(lon_band):03d}'


def tile_folder(name: str) -> str:
    """Latitude part of a tile name (``N47E005`` -> ``N47``), the directory in tile stores."""
    return name[:3]


@dataclass(frozen=True)
class TileId:
    """Key of one 1x1 degree tile, named by its south-west corner."""

    lat_band: int
    lon_band: int
    resolution: Resolution = DEFAULT_RESOLUTION

    def __post_init__(self) -> None:
        if not (-LAT_BAND_MAX - 1 <= self.lat_band <= LAT_BAND_MAX):
            msg = f'Latitude band out of range: {self.lat_band}'
            raise ValueError(msg)
        if not (-LON_BAND_MAX - 1 <= self.lon_band <= LON_BAND_MAX):
            msg = f'Longitude band out of range: {self.lon_band}'
            raise ValueError(msg)

    @property
    def name(self) -> str:
        return tile_name(self.lat_band, self.lon_band)

    @property
    def folder(self) -> str:
        return tile_folder(self.name)

    @property
    def south(self) -> int:
        return self.lat_band

    @property
    def north(self) -> int:
        return self.lat_band + 1

    @property
    def west(self) -> int:
        return self.lon_band

    @property
    def east(self) -> int:
        return self.lon_band + 1

    def contains(self, coordinate: Coordinate) -> bool:
        """Whether the point lies on the tile, closed boundary included."""
        return (
            self.south <= coordinate.latitude <= self.north
            and self.west <= coordinate.longitude <= self.east
        )


@dataclass(frozen=True, eq=False)
class TileGrid:
    """Decoded square grid of int16 samples, rows north to south.

    The sample array is made read-only on construction; the void mask is the
    per-sample {elevation, void} classification consumed by the sampler.
    """

    samples: np.ndarray
    resolution: Resolution
    void_mask: np.ndarray = field(init=False, repr=False)

    def __post_init__(self) -> None:
        side = self.resolution.side
        if self.samples.shape != (side, side):
            msg = (
                f'Grid shape {self.samples.shape} does not match '
                f'{self.resolution.value} side {side}'
            )
            raise ValueError(msg)
        self.samples.flags.writeable = False
        mask = self.samples == VOID_SAMPLE
        mask.flags.writeable = False
        object.__setattr__(self, 'void_mask', mask)

    @property
    def side(self) -> int:
        return self.resolution.side

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TileGrid):
            return NotImplemented
        return self.resolution is other.resolution and np.array_equal(
            self.samples, other.samples
        )
