"""Elevation module - point sampling and the elevation service."""

from .sampler import grid_position, sample
from .service import ElevationService

__all__ = [
    'ElevationService',
    'grid_position',
    'sample',
]
