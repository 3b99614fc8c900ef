"""
Main API module for the static_maps package.

This module provides simplified user-facing functions around the
StaticMap renderer. ``render_map`` turns a ``RenderOptions`` value into
an encoded image; ``create_map`` builds the options from keyword
arguments and optionally writes the result to disk.

Example:
    >>> from static_maps import create_map
    >>>
    >>> # Fit two markers into a 600x400 map and save it
    >>> create_map(
    ...     markers=[(0, 0), (10, 10)],
    ...     width=600, height=400, padding=20,
    ...     basemap="osm",
    ...     output_path="two_markers.png"
    ... )

    >>> # Keep the bytes instead (e.g. to serve over HTTP)
    >>> result = create_map(center=(2.3522, 48.8566), zoom=12, width=300, height=300)
    >>> result.content_type, result.content_length
"""

import logging
import threading
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

from .config import Config
from .constants import BASEMAPS
from .exceptions import StaticMapsError
from .options import RenderOptions, RenderResult
from .rendering.renderer import StaticMap
from .tiles import TileCache, TileTransport, cache_from_config

logger = logging.getLogger(__name__)

_default_cache: Optional[TileCache] = None
_default_cache_lock = threading.Lock()


def get_default_cache(config: Optional[Config] = None) -> TileCache:
    """
    Process-wide tile cache shared by renders that don't pass their own.

    Created on first use from ``config`` (TTL, size, disabled flag).
    """
    global _default_cache
    with _default_cache_lock:
        if _default_cache is None:
            _default_cache = cache_from_config(config if config is not None else Config())
        return _default_cache


def list_basemaps(registry: Mapping[str, Mapping] = BASEMAPS) -> List[Dict[str, Any]]:
    """
    Describe the available basemaps.

    Returns:
        List of dicts with name, url, attribution and max_zoom, sorted by name
    """
    return [
        {"name": name, "url": entry["url"], "attribution": entry["attribution"], "max_zoom": entry["max_zoom"]}
        for name, entry in sorted(registry.items())
    ]


def render_map(
    options: RenderOptions,
    config: Optional[Config] = None,
    cache: Optional[TileCache] = None,
    transport: Optional[TileTransport] = None,
    cancel_event: Optional[threading.Event] = None
) -> RenderResult:
    """
    Render a map and return the encoded image.

    Tile failures only degrade the basemap; the errors below are the only
    ones that leave this function.

    Args:
        options: What to render
        config: Process settings (default: Config())
        cache: Tile cache (default: the process-wide cache)
        transport: Tile transport (default: RequestsTransport)
        cancel_event: Optional event; setting it aborts the render

    Returns:
        RenderResult with bytes, MIME type and content length

    Raises:
        ValidationError: On invalid options or shapes
        ViewportError: When no center can be derived
        EncodeError: For an unsupported format or encoder failure
        RenderCancelledError: When ``cancel_event`` is set
    """
    config = config if config is not None else Config()
    if cache is None:
        cache = get_default_cache(config)
    static_map = StaticMap(options, config=config, cache=cache, transport=transport)
    return static_map.render_to_bytes(cancel_event=cancel_event)


def create_map(
    center: Optional[Sequence[float]] = None,
    zoom: Optional[int] = None,
    width: int = 800,
    height: int = 800,
    basemap: Optional[Union[str, Sequence[str]]] = None,
    tile_url: Optional[str] = None,
    output_path: Optional[Union[str, Path]] = None,
    config: Optional[Config] = None,
    cache: Optional[TileCache] = None,
    transport: Optional[TileTransport] = None,
    **options
) -> Union[RenderResult, str]:
    """
    Create a static map from keyword arguments.

    Shape lists are given the way option files give them (``markers``,
    ``polylines``, ``polygons``, ``circles``, ``texts``, ``images``,
    ``multipolygons``); each entry is a mapping of shape fields or, for
    markers, a bare (lon, lat) pair.

    Args:
        center: Optional (lon, lat)
        zoom: Optional zoom level
        width, height: Output size in pixels
        basemap: Basemap name(s); default config.default_basemap unless
            tile_url is given
        tile_url: Custom tile URL template
        output_path: If given, write the image there and return the path
        config: Process settings
        cache: Tile cache
        transport: Tile transport
        **options: Other RenderOptions.from_dict keys (padding, format, ...)

    Returns:
        Output path if output_path was given, otherwise a RenderResult

    Raises:
        StaticMapsError: On any render failure or when the file cannot be written
    """
    config = config if config is not None else Config()

    data: Dict[str, Any] = dict(options)
    data.update(width=width, height=height)
    if center is not None:
        data["center"] = center
    if zoom is not None:
        data["zoom"] = zoom
    data.setdefault("format", config.default_format)
    if "markers" in data:
        data["markers"] = [m if isinstance(m, Mapping) else {"coord": m} for m in data["markers"]]
    if basemap is not None:
        data["basemap"] = basemap
    elif tile_url is None and not data.get("tile_layers"):
        data["basemap"] = config.default_basemap
    if tile_url is not None:
        data["tile_url"] = tile_url

    render_options = RenderOptions.from_dict(
        data,
        layer_defaults={
            "timeout": config.tile_request_timeout,
            "retries": config.tile_request_retries,
            "tile_size": config.tile_size,
        },
    )
    result = render_map(render_options, config=config, cache=cache, transport=transport)

    if output_path is None:
        return result

    output_path = Path(output_path)
    try:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_bytes(result.data)
    except OSError as e:
        raise StaticMapsError(f"Failed to save map to {output_path}: {e}") from e
    logger.info(f"Map saved: {output_path} ({result.content_length / 1024:.1f} KB)")
    return str(output_path)
