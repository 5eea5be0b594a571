"""Elevation service: coordinate in, metres out."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from domain.models import Coordinate
from elevation.sampler import sample
from infrastructure.http.client import make_http_session, resolve_cache_dir
from shared.constants import DEFAULT_RESOLUTION, Resolution
from tiles.cache import TileGridCache
from tiles.identifier import identify
from tiles.source import DiskCachedTileSource, HttpTileSource, LocalTileSource

if TYPE_CHECKING:
    from collections.abc import Iterable
    from types import TracebackType

    import aiohttp

    from domain.settings import ElevationSettings
    from tiles.source import TileSource

logger = logging.getLogger(__name__)


class ElevationService:
    """Resolves single points to ground elevation from SRTM tiles.

    The service owns its TileGridCache; share one service instance between
    callers so tiles are fetched once per process.

    Usage:
        async with ElevationService.from_settings(settings) as service:
            h = await service.get_elevation(47.06, 5.72)
    """

    def __init__(
        self,
        cache: TileGridCache,
        *,
        resolution: Resolution = DEFAULT_RESOLUTION,
        session: aiohttp.ClientSession | None = None,
    ) -> None:
        self.cache = cache
        self.resolution = resolution
        # Session created by from_settings and closed together with the service
        self._session = session

    @classmethod
    def from_source(
        cls,
        source: TileSource,
        *,
        resolution: Resolution = DEFAULT_RESOLUTION,
        max_concurrent_fetches: int | None = None,
    ) -> ElevationService:
        kwargs = {}
        if max_concurrent_fetches is not None:
            kwargs['max_concurrent_fetches'] = max_concurrent_fetches
        return cls(TileGridCache(source, **kwargs), resolution=resolution)

    @classmethod
    def from_settings(cls, settings: ElevationSettings) -> ElevationService:
        """Build source chain and cache from settings.

        Must be called with a running event loop when the remote source is
        used, since it opens an HTTP session.
        """
        session: aiohttp.ClientSession | None = None
        source: TileSource
        if settings.data_path is not None:
            source = LocalTileSource(settings.data_path)
            logger.info('Using local tiles from %s', settings.data_path)
        else:
            session = make_http_session(
                resolve_cache_dir(settings.http_cache_dir),
                use_cache=settings.http_cache_enabled,
                expire_hours=settings.http_cache_expire_hours,
            )
            source = HttpTileSource(
                session,
                base_url=settings.base_url,
                timeout_s=settings.timeout_s,
                retries=settings.retries,
                backoff=settings.backoff,
            )
            logger.info('Using remote tiles from %s', settings.base_url)
            if settings.store_path is not None:
                source = DiskCachedTileSource(source, settings.store_path)
        cache = TileGridCache(source, max_concurrent_fetches=settings.max_concurrent_fetches)
        return cls(cache, resolution=settings.resolution, session=session)

    async def get_elevation(self, latitude: float, longitude: float) -> float:
        """Elevation in metres at (latitude, longitude).

        Raises:
            OutOfRangeError: coordinate outside WGS84 bounds.
            TileUnavailableError: the tile could not be fetched or decoded.
            ElevationUnavailableError: void data around the point.
        """
        coordinate = Coordinate(float(latitude), float(longitude))
        tile_id = identify(coordinate, self.resolution)
        grid = await self.cache.get_or_fetch(tile_id)
        value = sample(grid, coordinate, tile_id)
        logger.debug('Elevation at (%s, %s) in %s: %.2f m', latitude, longitude, tile_id.name, value)
        return value

    async def get_elevations(self, points: Iterable[tuple[float, float]]) -> list[float]:
        """Resolve independent points concurrently, preserving order.

        Each point is still a single-tile lookup. The first failure is raised.
        """
        return list(
            await asyncio.gather(*(self.get_elevation(lat, lon) for lat, lon in points))
        )

    async def aclose(self) -> None:
        await self.cache.aclose()
        if self._session is not None:
            await self._session.close()
            self._session = None

    async def __aenter__(self) -> ElevationService:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()
