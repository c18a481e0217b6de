"""On-disk tile cache layout.

Tiles of one source live under ``<base_dir>/<sha1(source)>/`` as
``x{x}_y{y}_z{z}.jpg``. The naming is stable across runs since the
existence of the file is the cache check.
"""

from __future__ import annotations

import hashlib
import logging
import os
import re
import tempfile
from pathlib import Path
from typing import TYPE_CHECKING

from PIL import Image

from shared.constants import TILE_FILE_TEMPLATE, TILE_TMP_SUFFIX

if TYPE_CHECKING:
    from domain.models import TileIndex

logger = logging.getLogger(__name__)

_PLACEHOLDERS = {
    axis: re.compile(r'\{' + axis + r'\}', re.IGNORECASE) for axis in ('x', 'y', 'z')
}


def source_hash(source: str) -> str:
    """Stable hex digest of a tile source template."""
    return hashlib.sha1(source.encode('utf-8')).hexdigest()  # noqa: S324


def cache_root(base_dir: str | Path, source: str) -> Path:
    """Cache directory of one tile source."""
    return Path(base_dir) / source_hash(source)


def ensure_cache_root(base_dir: str | Path, source: str) -> Path:
    """Create the cache directory of a source (with parents) and return it."""
    root = cache_root(base_dir, source)
    root.mkdir(parents=True, exist_ok=True)
    return root


def tile_file_name(index: TileIndex) -> str:
    return TILE_FILE_TEMPLATE.format(x=index.x, y=index.y, z=index.z)


def cached_path(base_dir: str | Path, source: str, index: TileIndex) -> Path:
    return cache_root(base_dir, source) / tile_file_name(index)


def resolve_url(source: str, index: TileIndex) -> str:
    """Substitute every {x}, {y}, {z} (any case) in the source template."""
    url = source
    for axis, value in (('x', index.x), ('y', index.y), ('z', index.z)):
        url = _PLACEHOLDERS[axis].sub(str(value), url)
    return url


def write_tile_file(path: Path, data: bytes) -> None:
    """
    Write tile bytes so that readers never observe a partial file.

    Data goes to a temporary file in the same directory which then replaces
    the target; concurrent writers of the same tile resolve as last write wins.
    """
    fd, tmp_name = tempfile.mkstemp(
        prefix=f'{path.stem}.', suffix=TILE_TMP_SUFFIX, dir=path.parent
    )
    try:
        with os.fdopen(fd, 'wb') as f:
            f.write(data)
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise


def is_valid_tile_file(path: Path) -> bool:
    """Check that a cached file is a complete, decodable image."""
    try:
        with Image.open(path) as img:
            img.load()
    except (OSError, SyntaxError) as e:
        logger.warning('Cached tile %s failed verification: %s', path, e)
        return False
    return True
