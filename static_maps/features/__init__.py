"""
Shape model for static_maps.

The drawable variants form a closed set, each tagged with a
``ShapeKind``: Marker, Polyline, Polygon, Circle, Text, Image and
MultiPolygon. ``SHAPE_TYPES`` maps the lowercase type names used in
option files to their classes.

Example:
    >>> from static_maps.features import Marker, Circle
    >>> shapes = [Marker((13.4, 52.5)), Circle((13.4, 52.5), radius=500)]
"""

from types import MappingProxyType

from .base import Coordinate, Extent, Shape, ShapeKind, Style, parse_color, validate_dash
from .marker import Marker, resize_icon
from .polyline import Polyline, Polygon
from .circle import Circle
from .text import Text
from .image import Image, load_raster
from .multipolygon import MultiPolygon

SHAPE_TYPES = MappingProxyType({
    "marker": Marker,
    "polyline": Polyline,
    "polygon": Polygon,
    "circle": Circle,
    "text": Text,
    "image": Image,
    "multipolygon": MultiPolygon,
})

__all__ = [
    "Coordinate",
    "Extent",
    "Shape",
    "ShapeKind",
    "Style",
    "parse_color",
    "validate_dash",
    "Marker",
    "resize_icon",
    "Polyline",
    "Polygon",
    "Circle",
    "Text",
    "Image",
    "load_raster",
    "MultiPolygon",
    "SHAPE_TYPES",
]
