"""Tile addressing, caching and loading.

This module provides:
- keyspace: cache paths and URL templates of tiles
- TileFetcher: cache-first resolution of single tiles
- GridBounds: clamped block of tiles around a center tile
- TileLoader: loading session for a block of tiles
"""

from tiles.fetcher import FetchResult, TileFetcher, fetch_tile_bytes
from tiles.grid import GridBounds, grid_bounds, iter_grid
from tiles.keyspace import cache_root, cached_path, resolve_url, tile_file_name
from tiles.loader import TileLoader

__all__ = [
    'FetchResult',
    'GridBounds',
    'TileFetcher',
    'TileLoader',
    'cache_root',
    'cached_path',
    'fetch_tile_bytes',
    'grid_bounds',
    'iter_grid',
    'resolve_url',
    'tile_file_name',
]
