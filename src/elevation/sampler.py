"""Bilinear elevation sampling inside one decoded tile."""

from __future__ import annotations

import math
from typing import TYPE_CHECKING

from domain.errors import ElevationUnavailableError

if TYPE_CHECKING:
    from domain.models import Coordinate, TileGrid, TileId


def grid_position(coordinate: Coordinate, tile_id: TileId, side: int) -> tuple[float, float]:
    """Fractional (row, col) of a point in a grid of ``side`` samples per edge.

    Row 0 is the north edge, column 0 the west edge. Adjacent tiles share
    their edge samples, so ``side - 1`` intervals span one degree. The result
    is clamped into the grid to absorb rounding at tile boundaries.
    """
    last = side - 1
    row_f = (tile_id.lat_band + 1 - coordinate.latitude) * last
    col_f = (coordinate.longitude - tile_id.lon_band) * last
    return min(max(row_f, 0.0), float(last)), min(max(col_f, 0.0), float(last))


def sample(grid: TileGrid, coordinate: Coordinate, tile_id: TileId) -> float:
    """Elevation in metres at ``coordinate``, bilinearly interpolated.

    Raises ElevationUnavailableError if any sample of the interpolation
    window is void; an exact grid vertex only looks at its own sample.
    """
    side = grid.side
    row_f, col_f = grid_position(coordinate, tile_id, side)
    r0 = math.floor(row_f)
    c0 = math.floor(col_f)
    dy = row_f - r0
    dx = col_f - c0
    # On the last row/column the window collapses onto the edge
    r1 = min(r0 + 1, side - 1)
    c1 = min(c0 + 1, side - 1)

    samples = grid.samples
    voids = grid.void_mask

    if dx == 0.0 and dy == 0.0:
        if voids[r0, c0]:
            raise ElevationUnavailableError(coordinate, tile_id)
        return float(samples[r0, c0])

    if voids[r0, c0] or voids[r0, c1] or voids[r1, c0] or voids[r1, c1]:
        raise ElevationUnavailableError(coordinate, tile_id)

    h00 = float(samples[r0, c0])
    h01 = float(samples[r0, c1])
    h10 = float(samples[r1, c0])
    h11 = float(samples[r1, c1])
    return (
        h00 * (1 - dx) * (1 - dy)
        + h01 * dx * (1 - dy)
        + h10 * (1 - dx) * dy
        + h11 * dx * dy
    )
