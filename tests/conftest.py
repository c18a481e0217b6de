"""Pytest configuration and fixtures for tile loader tests."""

import asyncio
import sys
from io import BytesIO
from pathlib import Path

import pytest

# Add src directory to path for imports
src_path = Path(__file__).parent.parent / 'src'
sys.path.insert(0, str(src_path))

from PIL import Image  # noqa: E402


class FakeResponse:
    """Minimal stand-in for aiohttp.ClientResponse."""

    def __init__(self, url, status, body=b''):
        self.url = url
        self.status = status
        self._body = body
        self.released = False

    async def read(self):
        return self._body

    def release(self):
        self.released = True


class FakeClient:
    """Records GET calls and answers from a url -> response table.

    Values may be an int status, a (status, body) tuple or an exception
    instance to raise. Unknown URLs answer ``default``.
    """

    def __init__(self, responses=None, *, body=b'tile', default=200, delay=None, on_get=None):
        self.responses = dict(responses or {})
        self.body = body
        self.default = default
        self.delay = delay
        self.on_get = on_get
        self.calls = []
        self.timeouts = []
        self.closed = False

    async def get(self, url, timeout=None):
        self.calls.append(url)
        self.timeouts.append(timeout)
        if self.on_get is not None:
            self.on_get(url)
        if self.delay is not None:
            await asyncio.sleep(self.delay(url))
        entry = self.responses.get(url, self.default)
        if isinstance(entry, BaseException):
            raise entry
        if isinstance(entry, tuple):
            status, body = entry
        else:
            status, body = entry, self.body
        return FakeResponse(url, status, body)

    async def close(self):
        self.closed = True


@pytest.fixture
def fake_client_cls():
    return FakeClient


@pytest.fixture
def jpeg_bytes():
    """A small valid JPEG image."""
    buf = BytesIO()
    Image.new('RGB', (8, 8), color=(10, 120, 30)).save(buf, format='JPEG')
    return buf.getvalue()


@pytest.fixture
def cache_dir(tmp_path):
    return tmp_path / 'mapscache'
