"""
Polyline and polygon shapes.

A polyline whose first and last coordinates are equal is a closed ring
and is reported as ``ShapeKind.POLYGON`` so it gets filled. An open
two-point polyline is expanded into a great-circle arc; longer polylines
are drawn through their vertices as given.
"""

import logging
from typing import List, Optional

from ..constants import DEFAULT_STROKE_COLOR, DEFAULT_STROKE_WIDTH
from ..geometry import geodesic_line
from .base import Coordinate, Extent, Shape, ShapeKind, Style, extent_of, validate_coordinates

logger = logging.getLogger("static_maps.features")


class Polyline(Shape):
    """
    An ordered line through two or more coordinates.

    Args:
        coords: Sequence of (lon, lat) pairs, drawn in order
        color: Stroke color (any Matplotlib color spec)
        fill: Fill color, only used when the ring is closed
        width: Stroke width in pixels
        dash: Optional dash pattern in pixels

    Raises:
        ValidationError: If fewer than 2 valid coordinates are given

    Example:
        >>> line = Polyline([(0, 0), (0, 90)])
        >>> len(line.coords) > 2
        True
    """

    def __init__(
        self,
        coords,
        color=DEFAULT_STROKE_COLOR,
        fill=None,
        width=DEFAULT_STROKE_WIDTH,
        dash=None,
    ):
        points = validate_coordinates(coords, field="coords", minimum=2)
        self.source_coords: List[Coordinate] = points
        self.style = Style.build(color=color, fill=fill, width=width, dash=dash)

        if points[0] == points[-1]:
            self.kind = ShapeKind.POLYGON
            self.coords = points
        elif len(points) == 2:
            self.kind = ShapeKind.POLYLINE
            self.coords = geodesic_line(points[0], points[1])
            logger.debug(f"Expanded 2-point polyline into {len(self.coords)} geodesic vertices")
        else:
            self.kind = ShapeKind.POLYLINE
            self.coords = points

    @property
    def closed(self) -> bool:
        return self.kind is ShapeKind.POLYGON

    def extent(self) -> Extent:
        return extent_of(self.coords)


class Polygon(Polyline):
    """A filled ring. Always closed, never geodesic-expanded."""

    def __init__(
        self,
        coords,
        color=DEFAULT_STROKE_COLOR,
        fill: Optional[str] = None,
        width=DEFAULT_STROKE_WIDTH,
        dash=None,
    ):
        points = validate_coordinates(coords, field="coords", minimum=2)
        self.source_coords = points
        self.style = Style.build(color=color, fill=fill, width=width, dash=dash)
        self.kind = ShapeKind.POLYGON
        self.coords = points if points[0] == points[-1] else points + [points[0]]
