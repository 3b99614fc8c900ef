"""
static_maps - Render static raster map images from web map tiles.

This package stitches basemap tiles from XYZ/quadkey tile servers into a
single image of a requested size, draws vector shapes (markers,
polylines, polygons, circles, text labels and raster overlays) on top,
adds an attribution badge and encodes the result as PNG, JPEG, WebP or
PDF. Center and zoom can be given explicitly or fitted to the shapes.

Quick Start:
    >>> from static_maps import create_map
    >>>
    >>> # Fit two markers into a 600x400 map
    >>> create_map(
    ...     markers=[(0, 0), (10, 10)],
    ...     width=600, height=400, padding=20,
    ...     output_path="markers.png"
    ... )

    >>> # Fixed center and zoom, bytes instead of a file
    >>> result = create_map(center=(2.3522, 48.8566), zoom=12, width=300, height=300)
    >>> result.content_type
    'image/png'

Advanced Usage:
    >>> from static_maps import StaticMap, RenderOptions, TileLayerConfig
    >>> from static_maps import Polyline, Circle, Config
    >>>
    >>> opts = RenderOptions(
    ...     width=800, height=600,
    ...     shapes=[Polyline([(-0.13, 51.5), (-74.0, 40.7)]), Circle((-0.13, 51.5), radius=50000)],
    ...     tile_layers=[TileLayerConfig.from_basemap("carto-light")],
    ... )
    >>> image = StaticMap(opts, Config(tile_request_limit=4)).render()
"""

__version__ = "0.1.0"

# Initialize logging with default settings
from .logging_config import setup_logging
setup_logging()

# Core constants and configuration
from .constants import BASEMAPS, OUTPUT_FORMATS
from .config import Config

# Geometry
from . import geometry

# Shapes
from .features import (
    Marker,
    Polyline,
    Polygon,
    Circle,
    Text,
    Image,
    MultiPolygon,
    ShapeKind,
    Style,
)

# Tiles
from .tiles import MemoryTileCache, NullTileCache, RequestsTransport, TileLayerConfig

# Rendering components
from .options import AttributionOptions, RenderOptions, RenderResult
from .rendering.renderer import StaticMap

# User-facing API
from .api import create_map, list_basemaps, render_map

# Exceptions
from .exceptions import (
    StaticMapsError,
    ValidationError,
    ViewportError,
    TileFetchError,
    EncodeError,
    RenderCancelledError,
)

__all__ = [
    # Version
    "__version__",

    # Configuration
    "Config",
    "BASEMAPS",
    "OUTPUT_FORMATS",
    "setup_logging",

    # Geometry
    "geometry",

    # Shapes
    "Marker",
    "Polyline",
    "Polygon",
    "Circle",
    "Text",
    "Image",
    "MultiPolygon",
    "ShapeKind",
    "Style",

    # Tiles
    "TileLayerConfig",
    "MemoryTileCache",
    "NullTileCache",
    "RequestsTransport",

    # Rendering
    "RenderOptions",
    "RenderResult",
    "AttributionOptions",
    "StaticMap",

    # API
    "create_map",
    "render_map",
    "list_basemaps",

    # Exceptions
    "StaticMapsError",
    "ValidationError",
    "ViewportError",
    "TileFetchError",
    "EncodeError",
    "RenderCancelledError",
]
