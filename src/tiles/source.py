"""Tile sources: where raw ``.hgt`` bytes come from.

A source resolves a tile name such as ``N47E005`` to the decompressed
contents of its archive. Implementations:

- HttpTileSource: the public skadi bucket (``{base}/N47/N47E005.hgt.gz``)
- LocalTileSource: a directory of ``.hgt`` or ``.hgt.gz`` files
- DiskCachedTileSource: read-through store of decompressed tiles on disk
"""

from __future__ import annotations

import asyncio
import logging
import os
import tempfile
from contextlib import suppress
from http import HTTPStatus
from pathlib import Path
from typing import TYPE_CHECKING, Protocol, runtime_checkable

import aiohttp

from domain.errors import MalformedTileError, TileNotFoundError, TileSourceError
from domain.models import tile_folder
from shared.constants import (
    HGT_GZ_SUFFIX,
    HGT_SUFFIX,
    HTTP_5XX_MAX,
    HTTP_5XX_MIN,
    HTTP_BACKOFF_FACTOR,
    HTTP_RETRIES_DEFAULT,
    HTTP_TIMEOUT_DEFAULT,
    SKADI_BASE_URL,
    Resolution,
)
from tiles.decoder import decompress

if TYPE_CHECKING:
    from collections.abc import Iterator

logger = logging.getLogger(__name__)


@runtime_checkable
class TileSource(Protocol):
    """Anything that can produce decompressed tile bytes by name."""

    async def fetch_raw(self, tile_name: str) -> bytes: ...


class HttpTileSource:
    """Fetches gzip-compressed tiles over HTTP from a skadi-style layout.

    401/403/404 fail immediately; 429 and 5xx responses as well as network
    errors are retried with exponential backoff.
    """

    def __init__(
        self,
        client: aiohttp.ClientSession,
        *,
        base_url: str = SKADI_BASE_URL,
        timeout_s: float = HTTP_TIMEOUT_DEFAULT,
        retries: int = HTTP_RETRIES_DEFAULT,
        backoff: float = HTTP_BACKOFF_FACTOR,
    ) -> None:
        self.client = client
        self.base_url = base_url.rstrip('/')
        self.timeout_s = timeout_s
        self.retries = max(1, int(retries))
        self.backoff = backoff

    def url_for(self, tile_name: str) -> str:
        return f'{self.base_url}/{tile_folder(tile_name)}/{tile_name}{HGT_GZ_SUFFIX}'

    async def fetch_compressed(self, tile_name: str) -> bytes:
        """Download the raw archive bytes of a tile."""
        url = self.url_for(tile_name)
        last_exc: Exception | None = None
        for attempt in range(self.retries):
            try:
                timeout = aiohttp.ClientTimeout(total=self.timeout_s)
                async with self.client.get(url, timeout=timeout) as resp:
                    sc = resp.status
                    if sc == HTTPStatus.OK:
                        return await resp.read()
                    if sc in (HTTPStatus.NOT_FOUND, HTTPStatus.FORBIDDEN):
                        # S3 answers 403 for missing keys in a non-listable bucket
                        msg = f'Tile {tile_name} not found (HTTP {sc}) url={url}'
                        raise TileNotFoundError(msg)
                    if sc == HTTPStatus.UNAUTHORIZED:
                        msg = f'Access denied (HTTP {sc}) for tile {tile_name} url={url}'
                        raise TileSourceError(msg)
                    is_rate_or_5xx = (sc == HTTPStatus.TOO_MANY_REQUESTS) or (
                        HTTP_5XX_MIN <= sc < HTTP_5XX_MAX
                    )
                    if is_rate_or_5xx:
                        last_exc = TileSourceError(f'HTTP {sc} for tile {tile_name} url={url}')
                    else:
                        last_exc = TileSourceError(
                            f'Unexpected HTTP {sc} for tile {tile_name} url={url}',
                        )
            except (aiohttp.ClientError, TimeoutError) as e:
                last_exc = e
            logger.debug(
                'Attempt %d/%d for %s failed: %s', attempt + 1, self.retries, tile_name, last_exc
            )
            if attempt + 1 < self.retries:
                await asyncio.sleep(self.backoff**attempt)
        msg = f'Failed to download tile {tile_name} after {self.retries} attempts: {last_exc}'
        raise TileSourceError(msg) from last_exc

    async def fetch_raw(self, tile_name: str) -> bytes:
        data = await self.fetch_compressed(tile_name)
        logger.info('Downloaded %s (%d bytes compressed)', tile_name, len(data))
        return await asyncio.to_thread(decompress, data)


class LocalTileSource:
    """Reads tiles from a directory, flat or split into latitude folders."""

    def __init__(self, root: str | Path) -> None:
        self.root = Path(root)

    def candidates(self, tile_name: str) -> Iterator[Path]:
        folder = tile_folder(tile_name)
        for base in (self.root / folder, self.root):
            for suffix in (HGT_SUFFIX, HGT_GZ_SUFFIX):
                yield base / f'{tile_name}{suffix}'

    def _read(self, tile_name: str) -> bytes:
        for path in self.candidates(tile_name):
            if path.is_file():
                try:
                    data = path.read_bytes()
                except OSError as e:
                    msg = f'Cannot read tile {tile_name} from {path}: {e}'
                    raise TileSourceError(msg) from e
                logger.debug('Read %s from %s', tile_name, path)
                return decompress(data)
        msg = f'Tile {tile_name} not found under {self.root}'
        raise TileNotFoundError(msg)

    async def fetch_raw(self, tile_name: str) -> bytes:
        return await asyncio.to_thread(self._read, tile_name)


class DiskCachedTileSource:
    """Keeps decompressed tiles from an upstream source on disk.

    Layout is ``{cache_dir}/{N47}/{N47E005}.hgt``. A tile is written to a
    temporary file first and renamed into place, so a reader never sees a
    partial file.
    """

    def __init__(self, upstream: TileSource, cache_dir: str | Path) -> None:
        self.upstream = upstream
        self.cache_dir = Path(cache_dir)

    def path_for(self, tile_name: str) -> Path:
        return self.cache_dir / tile_folder(tile_name) / f'{tile_name}{HGT_SUFFIX}'

    def _load(self, path: Path) -> bytes | None:
        try:
            data = path.read_bytes()
        except FileNotFoundError:
            return None
        if Resolution.from_byte_length(len(data)) is None:
            logger.warning('Ignoring stored tile %s of %d bytes', path, len(data))
            return None
        return data

    def _store(self, path: Path, data: bytes) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=path.parent, suffix='.part')
        try:
            with os.fdopen(fd, 'wb') as f:
                f.write(data)
            Path(tmp_name).replace(path)
        except BaseException:
            with suppress(OSError):
                Path(tmp_name).unlink()
            raise

    async def fetch_raw(self, tile_name: str) -> bytes:
        path = self.path_for(tile_name)
        data = await asyncio.to_thread(self._load, path)
        if data is not None:
            logger.debug('Tile %s served from %s', tile_name, path)
            return data
        data = await self.upstream.fetch_raw(tile_name)
        if Resolution.from_byte_length(len(data)) is None:
            msg = f'Tile {tile_name} from upstream has {len(data)} bytes, not an .hgt size'
            raise MalformedTileError(msg)
        try:
            await asyncio.to_thread(self._store, path, data)
        except OSError as e:
            # The tile itself is fine; only the local copy could not be kept
            logger.warning('Could not store tile %s at %s: %s', tile_name, path, e)
        else:
            logger.info('Stored tile %s at %s', tile_name, path)
        return data
