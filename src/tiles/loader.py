"""
Tile loading session.

TileLoader materializes a block of tiles around a geographic center,
preferring cached files over downloads, and keeps the resulting tile list
for the caller to render.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from pathlib import Path
from typing import TYPE_CHECKING

from domain.models import LoadReport, MapTile, TileFailure
from geo.mercator import (
    inside_center_tile,
    tile_coords_to_lat_lon,
    tile_index_for,
    zoom_to_resolution,
)
from infrastructure.http.client import make_http_session, resolve_cache_dir
from shared.constants import DEFAULT_BLOCK_RADIUS, DOWNLOAD_CONCURRENCY, HTTP_TIMEOUT_DEFAULT
from tiles.fetcher import TileFetcher
from tiles.grid import GridBounds, grid_bounds, iter_grid

if TYPE_CHECKING:
    from collections.abc import Callable

    import aiohttp

    from domain.models import LoaderSettings, TileIndex

logger = logging.getLogger(__name__)


class TileLoader:
    """Load and cache a block of map tiles around a center point.

    The center tile and the origin offset are computed once at
    construction. Each ``start()`` replaces the previous tile list;
    ``abort()`` discards it and stops an in-flight ``start()`` from
    publishing.

    Usage:
        loader = TileLoader(source, lat, lon, zoom=17, block_radius=2,
                            cache_dir=Path('mapscache'))
        report = await loader.start()
        for tile in loader.tiles():
            print(tile.x, tile.y, tile.image_path)
    """

    def __init__(
        self,
        source: str,
        latitude: float,
        longitude: float,
        zoom: int,
        block_radius: int = DEFAULT_BLOCK_RADIUS,
        *,
        cache_dir: str | Path,
        concurrency: int = DOWNLOAD_CONCURRENCY,
        timeout_s: float = HTTP_TIMEOUT_DEFAULT,
        offline: bool = False,
        verify_cached: bool = False,
        on_progress: Callable[[int, int], None] | None = None,
    ) -> None:
        if block_radius < 0:
            msg = f'Block radius must be non-negative, got {block_radius}'
            raise ValueError(msg)
        if concurrency < 1:
            msg = f'Concurrency must be at least 1, got {concurrency}'
            raise ValueError(msg)

        self._source = source
        self._latitude = latitude
        self._longitude = longitude
        self._zoom = zoom
        self._block_radius = block_radius
        self._concurrency = concurrency
        self._on_progress = on_progress

        # Raises InvalidArgumentError before any state touches the disk
        self._center, self._origin_offset = tile_index_for(latitude, longitude, zoom)

        self._fetcher = TileFetcher(
            cache_dir,
            source,
            timeout_s=timeout_s,
            offline=offline,
            verify_cached=verify_cached,
        )
        self._tiles: list[MapTile] = []
        self._failures: list[TileFailure] = []
        self._last_report: LoadReport | None = None
        self._generation = 0

        logger.info(
            'TileLoader for %s: center tile %s, offset (%.4f, %.4f), radius %d, cache %s',
            source,
            self._center,
            self._origin_offset[0],
            self._origin_offset[1],
            block_radius,
            self._fetcher.cache_root,
        )

    @classmethod
    def from_settings(
        cls,
        settings: LoaderSettings,
        *,
        on_progress: Callable[[int, int], None] | None = None,
    ) -> TileLoader:
        cache_dir = settings.cache_dir or resolve_cache_dir()
        return cls(
            settings.source,
            settings.latitude,
            settings.longitude,
            settings.zoom,
            settings.block_radius,
            cache_dir=cache_dir,
            concurrency=settings.concurrency,
            timeout_s=settings.timeout_s,
            offline=settings.offline,
            verify_cached=settings.verify_cached,
            on_progress=on_progress,
        )

    # --- configuration and geometry

    @property
    def object_uri(self) -> str:
        """Tile source template."""
        return self._source

    @property
    def latitude(self) -> float:
        return self._latitude

    @property
    def longitude(self) -> float:
        return self._longitude

    @property
    def zoom(self) -> int:
        return self._zoom

    @property
    def block_radius(self) -> int:
        return self._block_radius

    @property
    def cache_root(self) -> Path:
        return self._fetcher.cache_root

    @property
    def fetcher(self) -> TileFetcher:
        return self._fetcher

    @property
    def last_report(self) -> LoadReport | None:
        return self._last_report

    def center_tile_index(self) -> TileIndex:
        return self._center

    def origin_offset(self) -> tuple[float, float]:
        """Fraction of a tile between the center tile corner and the true center."""
        return self._origin_offset

    def resolution(self) -> float:
        """Meters per pixel of the tiles at the configured center."""
        return zoom_to_resolution(self._latitude, self._zoom)

    def inside_center_tile(self, lat: float, lon: float) -> bool:
        return inside_center_tile(lat, lon, self._zoom, self._center)

    def bounds(self) -> GridBounds:
        return grid_bounds(self._center, self._block_radius)

    def geographic_bounds(self) -> tuple[float, float, float, float]:
        """(south, west, north, east) in degrees of the whole block."""
        b = self.bounds()
        north, west = tile_coords_to_lat_lon(b.min_x, b.min_y, self._zoom)
        south, east = tile_coords_to_lat_lon(b.max_x + 1, b.max_y + 1, self._zoom)
        return south, west, north, east

    def tiles(self) -> list[MapTile]:
        """Current tile list in row-major order."""
        return list(self._tiles)

    def failures(self) -> list[TileFailure]:
        return list(self._failures)

    def cache_coverage(self) -> tuple[int, int]:
        """(cached, total) tiles of the block already on disk."""
        return self._fetcher.check_tiles_in_cache(list(iter_grid(self.bounds())))

    # --- session control

    def abort(self) -> None:
        """Discard the tile list and stop an in-flight start() from publishing.

        Cache files are left untouched.
        """
        self._generation += 1
        self._tiles.clear()
        self._failures.clear()

    async def start(self, client: aiohttp.ClientSession | None = None) -> LoadReport:
        """
        Load the block around the center tile.

        Args:
            client: HTTP session to use. When omitted, a session is opened
                for this call (not in offline mode) and closed afterwards.

        Returns:
            LoadReport of this call. Per-tile failures are reported there
            and in the log, never raised.

        """
        self.abort()
        generation = self._generation

        bounds = self.bounds()
        indices = list(iter_grid(bounds))
        logger.info(
            'Loading %d tiles (x %d..%d, y %d..%d, z %d) around %s',
            len(indices),
            bounds.min_x,
            bounds.max_x,
            bounds.min_y,
            bounds.max_y,
            self._zoom,
            self._center,
        )

        stats_before = self._fetcher.stats
        owns_client = client is None and not self._fetcher.offline
        if owns_client:
            client = make_http_session()
        try:
            slots = await self._resolve_all(client, indices, generation)
        finally:
            if owns_client and client is not None:
                await client.close()

        report = LoadReport(attempted=indices)
        if generation != self._generation:
            report.cancelled = True
            logger.info('Tile load around %s aborted', self._center)
            return report

        for result in slots:
            if isinstance(result, MapTile):
                report.tiles.append(result)
            elif isinstance(result, TileFailure):
                report.failures.append(result)
        stats_after = self._fetcher.stats
        report.cached = stats_after['cache_hits'] - stats_before['cache_hits']
        report.fetched = stats_after['downloaded'] - stats_before['downloaded']

        self._tiles = list(report.tiles)
        self._failures = list(report.failures)
        self._last_report = report

        logger.info(
            'Loaded %d/%d tiles (%d cached, %d downloaded, %d failed)',
            len(report.tiles),
            len(indices),
            report.cached,
            report.fetched,
            len(report.failures),
        )
        return report

    async def _resolve_all(
        self,
        client: aiohttp.ClientSession | None,
        indices: list[TileIndex],
        generation: int,
    ) -> list[MapTile | TileFailure | None]:
        """Resolve all indices concurrently into per-index slots."""
        slots: list[MapTile | TileFailure | None] = [None] * len(indices)
        sem = asyncio.Semaphore(self._concurrency)
        done = 0
        total = len(indices)

        async def _worker(slot: int, index: TileIndex) -> None:
            nonlocal done
            async with sem:
                # Aborted: dispatch nothing more for the stale load
                if generation != self._generation:
                    return
                slots[slot] = await self._fetcher.resolve(client, index)
            done += 1
            if self._on_progress is not None:
                with contextlib.suppress(Exception):
                    self._on_progress(done, total)

        await asyncio.gather(
            *(_worker(i, index) for i, index in enumerate(indices)),
            return_exceptions=True,
        )
        return slots
