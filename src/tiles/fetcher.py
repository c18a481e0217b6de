"""Cache-first resolution of single tiles.

TileFetcher decides for one tile index whether the cached file can be
reused or the tile has to be downloaded, and persists downloads into the
cache. Failures are returned as TileFailure values, never raised.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from http import HTTPStatus
from pathlib import Path
from typing import TYPE_CHECKING

import aiohttp

from domain.models import MapTile, TileFailure
from shared.constants import (
    FAILURE_ERROR,
    FAILURE_HTTP_STATUS,
    FAILURE_OFFLINE,
    FAILURE_TRANSPORT,
    FAILURE_WRITE,
    HTTP_TIMEOUT_DEFAULT,
)
from tiles.keyspace import (
    cached_path,
    ensure_cache_root,
    is_valid_tile_file,
    resolve_url,
    write_tile_file,
)

if TYPE_CHECKING:
    from domain.models import TileIndex

logger = logging.getLogger(__name__)


@dataclass
class FetchResult:
    """Outcome of one HTTP GET."""

    url: str
    status: int | None
    data: bytes | None = None
    final_url: str | None = None
    error: str = ''

    @property
    def ok(self) -> bool:
        return self.status == HTTPStatus.OK and self.data is not None


async def fetch_tile_bytes(
    client: aiohttp.ClientSession,
    url: str,
    *,
    timeout_s: float = HTTP_TIMEOUT_DEFAULT,
) -> FetchResult:
    """
    Issue a single GET for a tile and return status and body.

    Transport errors and timeouts are folded into the result with
    ``status=None``; a single attempt is made.
    """
    try:
        timeout = aiohttp.ClientTimeout(total=timeout_s)
        resp = await client.get(url, timeout=timeout)
        try:
            sc = resp.status
            final_url = str(resp.url)
            if sc == HTTPStatus.OK:
                data = await resp.read()
                return FetchResult(url, sc, data, final_url)
            return FetchResult(url, sc, None, final_url)
        finally:
            resp.release()
    except (aiohttp.ClientError, asyncio.TimeoutError) as e:
        return FetchResult(url, None, error=str(e) or type(e).__name__)


class TileFetcher:
    """Resolve tiles of one source against the cache and the network."""

    def __init__(
        self,
        base_dir: str | Path,
        source: str,
        *,
        timeout_s: float = HTTP_TIMEOUT_DEFAULT,
        offline: bool = False,
        verify_cached: bool = False,
    ) -> None:
        self.base_dir = Path(base_dir)
        self.source = source
        self.timeout_s = timeout_s
        self.offline = offline
        self.verify_cached = verify_cached
        self.cache_root = ensure_cache_root(self.base_dir, source)
        self._stats = {
            'cache_hits': 0,
            'downloaded': 0,
            'failed': 0,
            'offline_misses': 0,
            'invalid_cached': 0,
        }

    @property
    def stats(self) -> dict[str, int]:
        return dict(self._stats)

    def reset_stats(self) -> None:
        for key in self._stats:
            self._stats[key] = 0

    def path_for(self, index: TileIndex) -> Path:
        return cached_path(self.base_dir, self.source, index)

    def url_for(self, index: TileIndex) -> str:
        return resolve_url(self.source, index)

    def lookup_cached(self, index: TileIndex) -> MapTile | None:
        """Return the cached tile for ``index`` or None. No network access."""
        path = self.path_for(index)
        if not path.is_file():
            return None
        if self.verify_cached and not is_valid_tile_file(path):
            self._stats['invalid_cached'] += 1
            return None
        return MapTile(index, path)

    def check_tiles_in_cache(self, indices: list[TileIndex]) -> tuple[int, int]:
        """Count how many of ``indices`` are already cached.

        Returns:
            (cached, total)
        """
        cached = sum(1 for index in indices if self.path_for(index).is_file())
        return cached, len(indices)

    def _fail(
        self,
        index: TileIndex,
        url: str | None,
        status: int | None,
        reason: str,
        detail: str = '',
    ) -> TileFailure:
        self._stats['failed'] += 1
        return TileFailure(index=index, url=url, status=status, reason=reason, detail=detail)

    async def resolve(
        self, client: aiohttp.ClientSession | None, index: TileIndex
    ) -> MapTile | TileFailure:
        """Reuse the cached file of ``index`` or download and persist it."""
        try:
            return await self._resolve(client, index)
        except Exception as e:
            logger.exception('Unexpected error loading tile %s', index)
            return self._fail(index, self.url_for(index), None, FAILURE_ERROR, str(e))

    async def _resolve(
        self, client: aiohttp.ClientSession | None, index: TileIndex
    ) -> MapTile | TileFailure:
        tile = self.lookup_cached(index)
        if tile is not None:
            self._stats['cache_hits'] += 1
            return tile

        if self.offline or client is None:
            self._stats['offline_misses'] += 1
            logger.debug('Tile %s not cached (offline)', index)
            return self._fail(index, None, None, FAILURE_OFFLINE)

        url = self.url_for(index)
        result = await fetch_tile_bytes(client, url, timeout_s=self.timeout_s)
        if not result.ok:
            if result.status is None:
                logger.error('Failed loading %s: %s', url, result.error)
                return self._fail(index, url, None, FAILURE_TRANSPORT, result.error)
            logger.error(
                'Failed loading %s with code %d', result.final_url or url, result.status
            )
            return self._fail(index, url, result.status, FAILURE_HTTP_STATUS)

        path = self.path_for(index)
        try:
            write_tile_file(path, result.data)
        except OSError as e:
            logger.error('Failed writing tile %s to %s: %s', index, path, e)
            return self._fail(index, url, result.status, FAILURE_WRITE, str(e))

        self._stats['downloaded'] += 1
        return MapTile(index, path)
