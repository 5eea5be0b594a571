"""Tests for ElevationService."""

from __future__ import annotations

import asyncio
import gzip
import tempfile
from pathlib import Path

import pytest

from conftest import CountingSource, make_raw
from domain.errors import (
    ElevationError,
    ElevationUnavailableError,
    OutOfRangeError,
    TileUnavailableError,
)
from domain.settings import ElevationSettings
from elevation.service import ElevationService
from shared.constants import VOID_SAMPLE, Resolution
from tiles.source import DiskCachedTileSource, HttpTileSource, LocalTileSource

STEP = 1.0 / 1200


@pytest.fixture
def tiles():
    """N47E005 is 100 m except 250 m nearest (47.5, 5.5); N48E005 is flat 500 m."""
    return {
        'N47E005': make_raw(Resolution.SRTM3, fill=100, overrides={(600, 600): 250}),
        'N48E005': make_raw(Resolution.SRTM3, fill=500),
        'N46E005': make_raw(Resolution.SRTM3, fill=100, overrides={(0, 600): VOID_SAMPLE}),
    }


@pytest.fixture
def source(tiles):
    return CountingSource(tiles)


@pytest.fixture
def service(source):
    return ElevationService.from_source(source, resolution=Resolution.SRTM3)


class TestGetElevation:
    """End-to-end lookups through the service."""

    @pytest.mark.asyncio
    async def test_vertex_returns_stored_value(self, service):
        """(47.5, 5.5) is an exact vertex of the peak sample."""
        assert await service.get_elevation(47.5, 5.5) == 250.0

    @pytest.mark.asyncio
    async def test_near_peak_is_interpolated(self, service):
        """A point next to the peak blends 100 and 250."""
        value = await service.get_elevation(47.5 - 0.4 * STEP, 5.5 + 0.3 * STEP)
        assert 100.0 < value < 250.0

    @pytest.mark.asyncio
    async def test_just_outside_resolves_into_adjacent_tile(self, service, source):
        """0.0001 degree north of N47E005 is served by N48E005."""
        assert await service.get_elevation(48.0001, 5.5) == pytest.approx(500.0)
        assert source.calls == ['N48E005']

    @pytest.mark.asyncio
    async def test_out_of_range(self, service, source):
        """Coordinates beyond the poles fail before any fetch."""
        with pytest.raises(OutOfRangeError):
            await service.get_elevation(90.0001, 5.5)
        with pytest.raises(OutOfRangeError):
            await service.get_elevation(10.0, -180.0001)
        assert source.calls == []

    @pytest.mark.asyncio
    async def test_void(self, service):
        """A void in the window is reported distinctly."""
        with pytest.raises(ElevationUnavailableError):
            await service.get_elevation(47.0 - 0.5 * STEP, 5.5 + 0.5 * STEP)

    @pytest.mark.asyncio
    async def test_missing_tile(self, service):
        """Tiles absent from the source are unavailable."""
        with pytest.raises(TileUnavailableError) as exc_info:
            await service.get_elevation(-10.5, 20.5)
        assert exc_info.value.tile_id.name == 'S11E020'
        assert isinstance(exc_info.value, ElevationError)

    @pytest.mark.asyncio
    async def test_resolution_mismatch(self, tiles):
        """SRTM3 bytes with an SRTM1 service are a tile failure."""
        service = ElevationService.from_source(CountingSource(tiles), resolution=Resolution.SRTM1)
        with pytest.raises(TileUnavailableError):
            await service.get_elevation(47.5, 5.5)

    @pytest.mark.asyncio
    async def test_tile_fetched_once_across_calls(self, service, source):
        """Repeated and concurrent lookups in one tile fetch it once."""
        values = await asyncio.gather(
            *(service.get_elevation(47.1 + i * 0.01, 5.2) for i in range(10))
        )
        await service.get_elevation(47.9, 5.9)
        assert values == pytest.approx([100.0] * 10)
        assert source.calls == ['N47E005']

    @pytest.mark.asyncio
    async def test_get_elevations_preserves_order(self, service):
        """Batch lookups keep the input order."""
        values = await service.get_elevations([(48.5, 5.5), (47.5, 5.5), (47.2, 5.2)])
        assert values == pytest.approx([500.0, 250.0, 100.0])

    @pytest.mark.asyncio
    async def test_get_elevations_raises_first_error(self, service):
        """A failing point fails the batch."""
        with pytest.raises(OutOfRangeError):
            await service.get_elevations([(47.5, 5.5), (95.0, 0.0)])


class TestFromSettings:
    """Tests for ElevationService.from_settings."""

    @pytest.mark.asyncio
    async def test_local_data_dir(self, tiles):
        """data_dir selects a LocalTileSource and no HTTP session."""
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir)
            (root / 'N47').mkdir()
            (root / 'N47' / 'N47E005.hgt.gz').write_bytes(gzip.compress(tiles['N47E005']))
            settings = ElevationSettings(data_dir=str(root), resolution='srtm3')
            async with ElevationService.from_settings(settings) as service:
                assert isinstance(service.cache.source, LocalTileSource)
                assert service._session is None
                assert await service.get_elevation(47.5, 5.5) == 250.0

    @pytest.mark.asyncio
    async def test_remote_with_store(self):
        """Default settings build an HTTP source, wrapped by the disk store if set."""
        with tempfile.TemporaryDirectory() as tmpdir:
            settings = ElevationSettings(store_dir=tmpdir)
            service = ElevationService.from_settings(settings)
            try:
                source = service.cache.source
                assert isinstance(source, DiskCachedTileSource)
                assert isinstance(source.upstream, HttpTileSource)
                assert service.resolution is Resolution.SRTM1
                assert service._session is not None
            finally:
                await service.aclose()
            assert service._session is None

    @pytest.mark.asyncio
    async def test_remote_without_store(self):
        """Without store_dir the HTTP source is used directly."""
        service = ElevationService.from_settings(ElevationSettings())
        try:
            assert isinstance(service.cache.source, HttpTileSource)
        finally:
            await service.aclose()
