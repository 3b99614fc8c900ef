"""Test fixtures for static_maps tests."""

import io
import tempfile
import threading
from pathlib import Path
from typing import Callable, Dict, Generator, List, Optional, Tuple

import pytest
from PIL import Image

from static_maps.config import Config
from static_maps.exceptions import TileFetchError
from static_maps.tiles import MemoryTileCache, TileResponse


def make_png(size: int = 256, color: Tuple[int, int, int, int] = (200, 220, 240, 255)) -> bytes:
    """Encode a solid-color tile."""
    buffer = io.BytesIO()
    Image.new("RGBA", (size, size), color).save(buffer, format="PNG")
    return buffer.getvalue()


class FakeTransport:
    """
    In-memory tile transport.

    Serves a solid PNG for every URL unless a rule in ``failures`` matches.
    A rule maps a URL substring to an exception factory (raised on every
    attempt) or to a ``TileResponse`` returned instead of the tile.
    """

    def __init__(self, tile_bytes: Optional[bytes] = None, failures: Optional[Dict[str, object]] = None):
        self.tile_bytes = tile_bytes if tile_bytes is not None else make_png()
        self.failures = dict(failures or {})
        self.calls: List[str] = []
        self._lock = threading.Lock()

    def get(self, url, headers, timeout):
        with self._lock:
            self.calls.append(url)
        for fragment, outcome in self.failures.items():
            if fragment in url:
                if isinstance(outcome, TileResponse):
                    return outcome
                raise outcome(url)
        return TileResponse(content=self.tile_bytes, content_type="image/png")

    def calls_for(self, fragment: str) -> List[str]:
        return [url for url in self.calls if fragment in url]


def transient_error(url: str) -> TileFetchError:
    return TileFetchError(f"HTTP 503 for {url}", url=url, status=503, transient=True)


def permanent_error(url: str) -> TileFetchError:
    return TileFetchError(f"HTTP 404 for {url}", url=url, status=404)


class BrokenCache:
    """A cache whose every operation fails."""

    def get(self, key):
        raise RuntimeError("cache backend down")

    def set(self, key, data):
        raise RuntimeError("cache backend down")


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Provide a temporary directory that's cleaned up after tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def png_tile() -> Callable[..., bytes]:
    return make_png


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def cache() -> MemoryTileCache:
    return MemoryTileCache(ttl=60)


@pytest.fixture
def config() -> Config:
    """Config with fast retries and a small worker pool."""
    return Config(
        tile_request_retries=2,
        tile_request_limit=4,
        retry_backoff=0.0,
        cache_disabled=False,
    )
