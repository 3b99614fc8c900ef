"""
Orchestration module for complete static map rendering.

This module provides the StaticMap class that coordinates option
validation, viewport solving, basemap mosaics, shape layers, the
attribution badge and encoding, from a ``RenderOptions`` value to a
finished image.
"""

import logging
import threading
import time
from typing import Optional

from PIL import Image

from ..config import Config
from ..exceptions import RenderCancelledError
from ..features import ShapeKind
from ..options import RenderOptions, RenderResult
from ..tiles import RequestsTransport, TileFetcher, TileCache, TileTransport, cache_from_config
from .annotations import add_attribution
from .canvas import encode_image, new_canvas
from .layers import DrawContext, draw_shapes
from .viewport import Bound, Viewport, extent_fits, solve_viewport

logger = logging.getLogger("static_maps.rendering.renderer")


class StaticMap:
    """
    Renders one static map from ``RenderOptions``.

    Rendering runs in fixed steps: validate, resolve the viewport, build
    one tile mosaic per layer, draw shapes in z-order, add the
    attribution badge, encode.

    Args:
        options: What to render
        config: Process settings (default: new Config instance)
        cache: Tile cache (default: built from config)
        transport: Tile transport (default: RequestsTransport)

    Example:
        >>> from static_maps import StaticMap, RenderOptions, Marker, TileLayerConfig
        >>> opts = RenderOptions(
        ...     width=600, height=400, padding_x=20, padding_y=20,
        ...     shapes=[Marker((0, 0)), Marker((10, 10))],
        ...     tile_layers=[TileLayerConfig.from_basemap("osm")],
        ... )
        >>> result = StaticMap(opts).render_to_bytes()
    """

    def __init__(
        self,
        options: RenderOptions,
        config: Optional[Config] = None,
        cache: Optional[TileCache] = None,
        transport: Optional[TileTransport] = None
    ):
        self.options = options
        self.config = config if config is not None else Config()
        self.cache = cache if cache is not None else cache_from_config(self.config)
        self.transport = transport if transport is not None else RequestsTransport(self.config.user_agent)
        self.fetcher = TileFetcher(
            self.transport,
            cache=self.cache,
            max_workers=self.config.tile_request_limit,
            retry_backoff=self.config.retry_backoff,
        )

        # Set during rendering
        self.viewport: Optional[Viewport] = None
        self.image: Optional[Image.Image] = None

    def resolve_viewport(self) -> Viewport:
        """
        Work out center and zoom from the options.

        Text labels are fitted with their zoom-dependent box: after a first
        fit on anchor points, zooms are tried downward from that fit and the
        first one where the bound with label boxes fits the padded canvas
        wins. A label wider than the canvas ends at ``min_zoom``.
        """
        opts = self.options
        tile_size = opts.tile_layers[0].tile_size if opts.tile_layers else self.config.tile_size
        min_zoom = opts.min_zoom if opts.min_zoom is not None else self.config.min_zoom
        max_zoom = opts.max_zoom if opts.max_zoom is not None else self.config.max_zoom
        layer_limits = [layer.max_zoom for layer in opts.tile_layers if layer.max_zoom is not None]
        if layer_limits:
            max_zoom = max(min_zoom, min(max_zoom, min(layer_limits)))

        def build_bound(zoom: Optional[int]) -> Bound:
            bound = Bound()
            for shape in opts.shapes:
                bound.include_shape(shape, zoom=zoom, tile_size=tile_size)
            for coord in opts.bounds:
                bound.include_point(coord)
            return bound

        solve_kwargs = dict(
            width=opts.width,
            height=opts.height,
            padding_x=opts.padding_x,
            padding_y=opts.padding_y,
            center=opts.center,
            zoom=opts.zoom,
            tile_size=tile_size,
            min_zoom=min_zoom,
            single_point_zoom=max(min_zoom, min(max_zoom, self.config.single_point_zoom)),
        )
        viewport = solve_viewport(build_bound(None), max_zoom=max_zoom, **solve_kwargs)

        has_labels = any(s.kind is ShapeKind.TEXT and s.coord is not None for s in opts.shapes)
        if not has_labels or opts.zoom is not None:
            return viewport

        solve_kwargs.pop("zoom")
        for zoom in range(viewport.zoom, min_zoom - 1, -1):
            bound = build_bound(zoom)
            candidate = solve_viewport(bound, zoom=zoom, max_zoom=max_zoom, **solve_kwargs)
            if extent_fits(candidate, bound.extent, opts.padding_x, opts.padding_y):
                return candidate
        logger.debug(f"Text labels do not fit a {opts.width}x{opts.height} canvas; using zoom {candidate.zoom}")
        return candidate

    def _base_layer(self, viewport: Viewport, cancel_event: Optional[threading.Event]) -> Image.Image:
        opts = self.options
        canvas = new_canvas(opts.width, opts.height)
        for layer in opts.tile_layers:
            mosaic = self.fetcher.build_mosaic(
                viewport.center, viewport.zoom, opts.width, opts.height, layer, cancel_event=cancel_event
            )
            if mosaic.blank:
                logger.warning(f"{len(mosaic.blank)} of {len(mosaic.slots)} tiles are blank for {layer.url_template}")
            canvas.alpha_composite(mosaic.compose())
        return canvas

    def _fetch_bytes(self, url: str) -> bytes:
        return self.transport.get(url, {}, self.config.tile_request_timeout).content

    def render(self, cancel_event: Optional[threading.Event] = None) -> Image.Image:
        """
        Render the map to an RGBA image.

        Args:
            cancel_event: Optional event; setting it aborts the render

        Returns:
            Rendered RGBA Pillow image of the requested size

        Raises:
            ValidationError: On invalid options
            ViewportError: When no center can be derived
            RenderCancelledError: When ``cancel_event`` is set
        """
        started = time.perf_counter()
        self.options.validate()
        opts = self.options

        self.viewport = self.resolve_viewport()
        logger.info(
            f"Rendering {opts.width}x{opts.height} map: center=({self.viewport.center[0]:.5f}, "
            f"{self.viewport.center[1]:.5f}) zoom={self.viewport.zoom} shapes={len(opts.shapes)} "
            f"layers={len(opts.tile_layers)}"
        )

        canvas = self._base_layer(self.viewport, cancel_event)

        if cancel_event is not None and cancel_event.is_set():
            raise RenderCancelledError("Render cancelled before drawing shapes")

        ctx = DrawContext(
            viewport=self.viewport,
            font_family=self.config.font_family,
            fetch=self._fetch_bytes,
        )
        draw_shapes(canvas, opts.shapes, ctx)

        attribution = opts.attribution_text
        if attribution:
            add_attribution(
                canvas,
                attribution,
                font_family=self.config.font_family,
                font_size=self.config.attribution_font_size,
            )

        self.image = canvas
        elapsed_ms = (time.perf_counter() - started) * 1000.0
        logger.info(f"Image rendered in {elapsed_ms:.0f} ms")
        return canvas

    def render_to_bytes(self, cancel_event: Optional[threading.Event] = None) -> RenderResult:
        """Render and encode in the requested format.

        Raises:
            EncodeError: For an unsupported format or encoder failure
        """
        image = self.render(cancel_event=cancel_event)
        quality = self.options.quality if self.options.quality is not None else self.config.default_quality
        data, content_type = encode_image(image, self.options.format, quality)
        return RenderResult(data=data, content_type=content_type)

    def save(self, output_path: str, cancel_event: Optional[threading.Event] = None) -> str:
        """
        Render, encode and write the map to ``output_path``.

        Returns:
            Path to saved file
        """
        result = self.render_to_bytes(cancel_event=cancel_event)
        with open(output_path, "wb") as f:
            f.write(result.data)
        logger.info(f"Map saved: {output_path} ({result.content_length / 1024:.1f} KB)")
        return output_path
