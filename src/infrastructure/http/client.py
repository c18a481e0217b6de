from __future__ import annotations

import os
import ssl
from pathlib import Path

import aiohttp
import certifi

from shared.constants import (
    APP_DIR_NAME,
    DOWNLOAD_CONCURRENCY,
    HOME_DIR_NAME,
    HTTP_USER_AGENT,
    TILE_CACHE_DIR,
)


def resolve_cache_dir() -> Path:
    """Default base directory of the tile cache."""
    raw_dir = Path(TILE_CACHE_DIR)
    if raw_dir.is_absolute():
        return raw_dir

    local = os.getenv('LOCALAPPDATA')
    if local:
        return (Path(local) / APP_DIR_NAME / raw_dir).resolve()
    # Fallback: user's home directory
    return (Path.home() / HOME_DIR_NAME / raw_dir).resolve()


def make_http_session(*, limit: int = DOWNLOAD_CONCURRENCY) -> aiohttp.ClientSession:
    """HTTP session with certifi CA bundle; must be created inside a running loop."""
    ssl_context = ssl.create_default_context(cafile=certifi.where())
    connector = aiohttp.TCPConnector(ssl=ssl_context, limit=limit)
    return aiohttp.ClientSession(
        connector=connector,
        headers={'User-Agent': HTTP_USER_AGENT},
    )
