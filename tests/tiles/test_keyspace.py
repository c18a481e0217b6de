"""Tests for tiles.keyspace module."""

import pytest

from domain.models import TileIndex
from tiles.keyspace import (
    cache_root,
    cached_path,
    ensure_cache_root,
    is_valid_tile_file,
    resolve_url,
    source_hash,
    tile_file_name,
    write_tile_file,
)

OSM = 'https://tile.openstreetmap.org/{z}/{x}/{y}.png'


class TestResolveUrl:
    """Tests for resolve_url."""

    def test_substitutes_placeholders(self):
        url = resolve_url('http://x/{z}/{x}/{y}.png', TileIndex(3, 5, 2))
        assert url == 'http://x/2/3/5.png'

    def test_case_insensitive(self):
        url = resolve_url('http://x/{Z}/{X}/{y}.png', TileIndex(3, 5, 2))
        assert url == 'http://x/2/3/5.png'

    def test_all_occurrences(self):
        url = resolve_url('http://{x}.t/{z}/{x}/{y}?y={Y}', TileIndex(7, 1, 4))
        assert url == 'http://7.t/4/7/1?y=1'

    def test_without_placeholders(self):
        assert resolve_url('http://static/tile.png', TileIndex(1, 2, 3)) == (
            'http://static/tile.png'
        )

    def test_other_braces_untouched(self):
        url = resolve_url('http://h/{s}/{z}/{x}/{y}', TileIndex(0, 0, 0))
        assert url == 'http://h/{s}/0/0/0'


class TestCachePaths:
    """Tests for cache root and file naming."""

    def test_tile_file_name(self):
        assert tile_file_name(TileIndex(3, 5, 2)) == 'x3_y5_z2.jpg'

    def test_source_hash_stable(self):
        assert source_hash(OSM) == source_hash(OSM)
        assert len(source_hash(OSM)) == 40

    def test_distinct_sources_distinct_roots(self, tmp_path):
        other = 'https://server.arcgisonline.com/tile/{z}/{y}/{x}'
        assert cache_root(tmp_path, OSM) != cache_root(tmp_path, other)

    def test_root_under_base_dir(self, tmp_path):
        root = cache_root(tmp_path, OSM)
        assert root.parent == tmp_path
        assert root.name == source_hash(OSM)

    def test_cached_path(self, tmp_path):
        path = cached_path(tmp_path, OSM, TileIndex(3, 5, 2))
        assert path == cache_root(tmp_path, OSM) / 'x3_y5_z2.jpg'

    def test_ensure_cache_root_creates_parents(self, tmp_path):
        base = tmp_path / 'a' / 'b'
        root = ensure_cache_root(base, OSM)
        assert root.is_dir()
        # idempotent
        assert ensure_cache_root(base, OSM) == root


class TestWriteTileFile:
    """Tests for write_tile_file."""

    def test_writes_bytes_verbatim(self, tmp_path):
        path = tmp_path / 'x1_y2_z3.jpg'
        write_tile_file(path, b'\x00\xffdata')
        assert path.read_bytes() == b'\x00\xffdata'

    def test_overwrites_existing(self, tmp_path):
        path = tmp_path / 'x1_y2_z3.jpg'
        path.write_bytes(b'old contents')
        write_tile_file(path, b'new')
        assert path.read_bytes() == b'new'

    def test_leaves_no_temporary_files(self, tmp_path):
        write_tile_file(tmp_path / 'x1_y2_z3.jpg', b'data')
        assert [p.name for p in tmp_path.iterdir()] == ['x1_y2_z3.jpg']

    def test_missing_directory_raises(self, tmp_path):
        with pytest.raises(OSError):
            write_tile_file(tmp_path / 'missing' / 'x1_y2_z3.jpg', b'data')


class TestIsValidTileFile:
    """Tests for is_valid_tile_file."""

    def test_valid_jpeg(self, tmp_path, jpeg_bytes):
        path = tmp_path / 'tile.jpg'
        path.write_bytes(jpeg_bytes)
        assert is_valid_tile_file(path)

    def test_garbage(self, tmp_path):
        path = tmp_path / 'tile.jpg'
        path.write_bytes(b'<html>rate limited</html>')
        assert not is_valid_tile_file(path)

    def test_empty_file(self, tmp_path):
        path = tmp_path / 'tile.jpg'
        path.write_bytes(b'')
        assert not is_valid_tile_file(path)
