"""
Tile grid computation, concurrent tile fetching and mosaic assembly.

Given a viewport (center, zoom, canvas size) and a tile layer, the
fetcher works out which tiles overlap the canvas, loads each one through
the cache or the transport on a bounded thread pool, and returns a
``TileMosaic`` holding exactly one image per grid cell. Tiles that cannot
be loaded become transparent placeholders: a bad tile degrades the map
but never fails the render.

Example:
    >>> from static_maps.tiles import TileFetcher, TileLayerConfig, RequestsTransport
    >>> fetcher = TileFetcher(RequestsTransport(), max_workers=4)
    >>> layer = TileLayerConfig.from_basemap("osm")
    >>> mosaic = fetcher.build_mosaic((13.4, 52.5), 12, 600, 400, layer)
    >>> base = mosaic.compose()
"""

import io
import logging
import math
import threading
import time
from concurrent.futures import FIRST_COMPLETED, ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set, Tuple

from PIL import Image, UnidentifiedImageError

from ..exceptions import RenderCancelledError, TileFetchError
from ..geometry import lat_to_tile_y, lon_to_tile_x
from .cache import NullTileCache, TileCache
from .layer import TileLayerConfig, tile_cache_key
from .transport import TileTransport

logger = logging.getLogger("static_maps.tiles")

TileIndex = Tuple[int, int]

# How often the coordinating thread checks the cancel event
_POLL_INTERVAL = 0.05


@dataclass(frozen=True)
class TileGrid:
    """The tiles overlapping a canvas at one zoom.

    ``x`` indices are unwrapped (they may fall outside ``[0, 2**zoom)``
    when the canvas crosses the anti-meridian); ``wrap_x`` maps them back
    to server indices. Ranges are inclusive.
    """

    zoom: int
    center_x: float
    center_y: float
    width: int
    height: int
    tile_size: int
    x_min: int
    x_max: int
    y_min: int
    y_max: int

    @classmethod
    def covering(
        cls,
        center: Tuple[float, float],
        zoom: int,
        width: int,
        height: int,
        tile_size: int
    ) -> "TileGrid":
        cx = lon_to_tile_x(center[0], zoom)
        cy = lat_to_tile_y(center[1], zoom)
        half_w = 0.5 * width / tile_size
        half_h = 0.5 * height / tile_size
        return cls(
            zoom=zoom,
            center_x=cx,
            center_y=cy,
            width=width,
            height=height,
            tile_size=tile_size,
            x_min=math.floor(cx - half_w),
            x_max=math.ceil(cx + half_w) - 1,
            y_min=math.floor(cy - half_h),
            y_max=math.ceil(cy + half_h) - 1,
        )

    @property
    def world_tiles(self) -> int:
        return 2 ** self.zoom

    def cells(self) -> List[TileIndex]:
        """All (x, y) cells in row-major order."""
        return [
            (x, y)
            for y in range(self.y_min, self.y_max + 1)
            for x in range(self.x_min, self.x_max + 1)
        ]

    def wrap_x(self, x: int) -> int:
        return x % self.world_tiles

    def in_world(self, y: int) -> bool:
        return 0 <= y < self.world_tiles

    def tile_origin(self, x: int, y: int) -> Tuple[int, int]:
        """Canvas pixel of the tile's top-left corner."""
        left = round((x - self.center_x) * self.tile_size + self.width / 2.0)
        top = round((y - self.center_y) * self.tile_size + self.height / 2.0)
        return left, top


@dataclass
class TileMosaic:
    """Fetched tiles for one layer, keyed by grid index.

    Attributes:
        grid: The tile grid the slots belong to.
        slots: One RGBA tile image per grid cell.
        blank: Cells filled with a transparent placeholder.
    """

    grid: TileGrid
    slots: Dict[TileIndex, Image.Image] = field(default_factory=dict)
    blank: Set[TileIndex] = field(default_factory=set)

    @property
    def zoom(self) -> int:
        return self.grid.zoom

    def compose(self) -> Image.Image:
        """Paste every slot at its grid position on a canvas-sized RGBA image."""
        canvas = Image.new("RGBA", (self.grid.width, self.grid.height), (0, 0, 0, 0))
        for index in self.grid.cells():
            tile = self.slots[index]
            canvas.paste(tile, self.grid.tile_origin(*index))
        return canvas


def blank_tile(tile_size: int) -> Image.Image:
    return Image.new("RGBA", (tile_size, tile_size), (0, 0, 0, 0))


class TileFetcher:
    """
    Loads the tiles of a grid concurrently.

    Args:
        transport: Object with ``get(url, headers, timeout)``
        cache: Object with ``get(key)``/``set(key, data)``; failures are ignored
        max_workers: Upper bound on concurrent tile requests
        retry_backoff: Base delay between retries, doubled per attempt
    """

    def __init__(
        self,
        transport: TileTransport,
        cache: Optional[TileCache] = None,
        max_workers: int = 4,
        retry_backoff: float = 0.25
    ):
        self.transport = transport
        self.cache = cache if cache is not None else NullTileCache()
        self.max_workers = max(1, int(max_workers))
        self.retry_backoff = retry_backoff

    def build_mosaic(
        self,
        center: Tuple[float, float],
        zoom: int,
        width: int,
        height: int,
        layer: TileLayerConfig,
        cancel_event: Optional[threading.Event] = None
    ) -> TileMosaic:
        """
        Build the mosaic covering a ``width`` x ``height`` canvas.

        Every grid cell gets a slot before this returns. Rows outside
        the world are blank without a request; vector tile layers are
        blank throughout.

        Raises:
            RenderCancelledError: If ``cancel_event`` is set before all
                tiles are resolved
        """
        grid = TileGrid.covering(center, zoom, width, height, layer.tile_size)
        mosaic = TileMosaic(grid=grid)
        cancel = cancel_event or threading.Event()
        started = time.perf_counter()

        logger.debug(
            f"Tile grid z={zoom} x=[{grid.x_min}, {grid.x_max}] y=[{grid.y_min}, {grid.y_max}] "
            f"({len(grid.cells())} tiles) for {layer.url_template}"
        )

        if layer.is_vector:
            logger.warning(f"Vector tiles are not supported, leaving layer blank: {layer.url_template}")

        jobs: List[TileIndex] = []
        for index in grid.cells():
            if layer.is_vector or not grid.in_world(index[1]):
                mosaic.slots[index] = blank_tile(layer.tile_size)
                mosaic.blank.add(index)
            else:
                jobs.append(index)

        if jobs:
            self._fetch_all(jobs, grid, layer, mosaic, cancel)

        elapsed_ms = (time.perf_counter() - started) * 1000.0
        logger.debug(
            f"Mosaic ready: {len(mosaic.slots)} slots, {len(mosaic.blank)} blank, {elapsed_ms:.0f} ms"
        )
        return mosaic

    def _fetch_all(
        self,
        jobs: List[TileIndex],
        grid: TileGrid,
        layer: TileLayerConfig,
        mosaic: TileMosaic,
        cancel: threading.Event
    ) -> None:
        if cancel.is_set():
            raise RenderCancelledError("Render cancelled before tile fetch")

        executor = ThreadPoolExecutor(
            max_workers=min(self.max_workers, len(jobs)),
            thread_name_prefix="tile-fetch",
        )
        try:
            future_to_index = {
                executor.submit(self._load_tile, layer, grid.wrap_x(x), y, grid.zoom, cancel): (x, y)
                for x, y in jobs
            }
            pending = set(future_to_index)
            while pending:
                if cancel.is_set():
                    raise RenderCancelledError("Render cancelled while fetching tiles")
                done, pending = wait(pending, timeout=_POLL_INTERVAL, return_when=FIRST_COMPLETED)
                for future in done:
                    index = future_to_index[future]
                    tile = future.result()
                    if tile is None:
                        tile = blank_tile(layer.tile_size)
                        mosaic.blank.add(index)
                    mosaic.slots[index] = tile
            if cancel.is_set():
                raise RenderCancelledError("Render cancelled while fetching tiles")
        finally:
            executor.shutdown(wait=False, cancel_futures=True)

    def _load_tile(
        self,
        layer: TileLayerConfig,
        x: int,
        y: int,
        zoom: int,
        cancel: threading.Event
    ) -> Optional[Image.Image]:
        """Load one tile from cache or network; None means blank."""
        key = tile_cache_key(layer, x, y, zoom)

        cached = self._cache_get(key)
        if cached is not None:
            tile = self._decode(cached, layer.tile_size)
            if tile is not None:
                logger.debug(f"Cache hit {zoom}/{x}/{y}")
                return tile
            logger.debug(f"Discarding undecodable cached tile {zoom}/{x}/{y}")

        url = layer.format_url(x, y, zoom)
        data = self._download(url, layer, cancel)
        if data is None:
            return None

        tile = self._decode(data, layer.tile_size)
        if tile is None:
            logger.warning(f"Undecodable tile image, using blank: {url}")
            return None

        self._cache_set(key, data)
        return tile

    def _download(self, url: str, layer: TileLayerConfig, cancel: threading.Event) -> Optional[bytes]:
        attempts = layer.retries + 1
        for attempt in range(attempts):
            if cancel.is_set():
                return None
            try:
                response = self.transport.get(url, layer.headers, layer.timeout)
            except TileFetchError as e:
                if not e.transient or attempt >= attempts - 1:
                    logger.warning(f"Tile fetch failed after {attempt + 1} attempt(s), using blank: {e}")
                    return None
                delay = self.retry_backoff * (2 ** attempt)
                logger.debug(f"Transient tile error ({e}); retrying in {delay:.2f}s ({attempt + 1}/{layer.retries})")
                if cancel.wait(delay):
                    return None
                continue
            except Exception as e:
                logger.warning(f"Unexpected error fetching {url}, using blank: {e}")
                return None

            content_type = (response.content_type or "").split(";", 1)[0].strip().lower()
            if content_type and not content_type.startswith("image/"):
                logger.warning(f"Unexpected content type '{content_type}' for {url}, using blank")
                return None
            return response.content
        return None

    @staticmethod
    def _decode(data: bytes, tile_size: int) -> Optional[Image.Image]:
        try:
            with Image.open(io.BytesIO(data)) as img:
                tile = img.convert("RGBA")
        except (UnidentifiedImageError, OSError, ValueError):
            return None
        if tile.size != (tile_size, tile_size):
            tile = tile.resize((tile_size, tile_size), Image.LANCZOS)
        return tile

    def _cache_get(self, key: str) -> Optional[bytes]:
        try:
            return self.cache.get(key)
        except Exception as e:
            logger.debug(f"Tile cache read failed for {key}: {e}")
            return None

    def _cache_set(self, key: str, data: bytes) -> None:
        try:
            self.cache.set(key, data)
        except Exception as e:
            logger.debug(f"Tile cache write failed for {key}: {e}")
