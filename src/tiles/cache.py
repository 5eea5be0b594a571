"""In-memory cache of decoded tile grids with single-flight fetching.

Grids are immutable terrain data, so an entry lives as long as the cache.
Only the bookkeeping of in-flight fetches is mutable shared state; it is
touched from the event loop thread only.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING

from domain.errors import TileUnavailableError
from shared.constants import TILE_FETCH_CONCURRENCY
from tiles.decoder import decode

if TYPE_CHECKING:
    from domain.models import TileGrid, TileId
    from tiles.source import TileSource

logger = logging.getLogger(__name__)


@dataclass
class CacheStats:
    """Counters of the tile grid cache."""

    entries: int
    hits: int
    misses: int
    coalesced: int
    fetches: int
    failures: int


class TileGridCache:
    """Memoizes decoded grids by TileId.

    Concurrent misses for one tile share a single fetch task; every waiter
    gets the same grid or the same TileUnavailableError. Failures are not
    remembered, the next call fetches again.

    Usage:
        cache = TileGridCache(source)
        grid = await cache.get_or_fetch(tile_id)
    """

    def __init__(
        self,
        source: TileSource,
        *,
        max_concurrent_fetches: int = TILE_FETCH_CONCURRENCY,
    ) -> None:
        self.source = source
        self._grids: dict[TileId, TileGrid] = {}
        self._inflight: dict[TileId, asyncio.Task[TileGrid]] = {}
        self._sem = asyncio.Semaphore(max(1, int(max_concurrent_fetches)))
        self._hits = 0
        self._misses = 0
        self._coalesced = 0
        self._fetches = 0
        self._failures = 0

    def __contains__(self, tile_id: object) -> bool:
        return tile_id in self._grids

    def __len__(self) -> int:
        return len(self._grids)

    def peek(self, tile_id: TileId) -> TileGrid | None:
        """Cached grid or None, without fetching."""
        return self._grids.get(tile_id)

    def is_fetching(self, tile_id: TileId) -> bool:
        return tile_id in self._inflight

    def stats(self) -> CacheStats:
        return CacheStats(
            entries=len(self._grids),
            hits=self._hits,
            misses=self._misses,
            coalesced=self._coalesced,
            fetches=self._fetches,
            failures=self._failures,
        )

    def clear(self) -> None:
        """Drop published grids. In-flight fetches are left running."""
        self._grids.clear()

    async def get_or_fetch(self, tile_id: TileId) -> TileGrid:
        grid = self._grids.get(tile_id)
        if grid is not None:
            self._hits += 1
            return grid

        task = self._inflight.get(tile_id)
        if task is None:
            self._misses += 1
            task = asyncio.create_task(self._load(tile_id), name=f'fetch-{tile_id.name}')
            task.add_done_callback(lambda t, key=tile_id: self._finish(key, t))
            self._inflight[tile_id] = task
        else:
            self._coalesced += 1
            logger.debug('Waiting for in-flight fetch of %s', tile_id.name)

        try:
            # A cancelled waiter must not cancel the fetch shared with others
            return await asyncio.shield(task)
        except asyncio.CancelledError:
            if task.cancelled():
                raise TileUnavailableError(tile_id, asyncio.CancelledError()) from None
            raise

    async def _load(self, tile_id: TileId) -> TileGrid:
        try:
            async with self._sem:
                self._fetches += 1
                started = time.perf_counter()
                try:
                    raw = await self.source.fetch_raw(tile_id.name)
                    grid = decode(raw, tile_id.resolution)
                except Exception as e:
                    self._failures += 1
                    logger.warning('Tile %s unavailable: %s', tile_id.name, e)
                    raise TileUnavailableError(tile_id, e) from e
            self._grids[tile_id] = grid
            logger.info(
                'Tile %s (%s) loaded in %.2fs',
                tile_id.name,
                tile_id.resolution.value,
                time.perf_counter() - started,
            )
            return grid
        finally:
            self._inflight.pop(tile_id, None)

    def _finish(self, tile_id: TileId, task: asyncio.Task[TileGrid]) -> None:
        # A task cancelled before it started never runs the finally clause of _load
        if self._inflight.get(tile_id) is task:
            del self._inflight[tile_id]
        # Mark the exception as retrieved even when every waiter went away
        if not task.cancelled():
            task.exception()

    async def aclose(self) -> None:
        """Cancel in-flight fetches; their waiters see TileUnavailableError."""
        tasks = list(self._inflight.values())
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
