"""MultiPolygon shape: several rings sharing one style."""

from typing import List

from ..constants import DEFAULT_STROKE_COLOR, DEFAULT_STROKE_WIDTH
from ..exceptions import ValidationError
from .base import Coordinate, Extent, Shape, ShapeKind, Style, extent_of, validate_coordinates


class MultiPolygon(Shape):
    """
    A set of polygon rings drawn and filled together.

    Args:
        coords: Sequence of rings, each a sequence of (lon, lat) pairs
        color: Stroke color
        fill: Fill color (None leaves the rings unfilled)
        width: Stroke width in pixels
        dash: Optional dash pattern in pixels

    Raises:
        ValidationError: If no rings are given or a ring has fewer than 2 points
    """

    kind = ShapeKind.MULTIPOLYGON

    def __init__(self, coords, color=DEFAULT_STROKE_COLOR, fill=None, width=DEFAULT_STROKE_WIDTH, dash=None):
        if not coords:
            raise ValidationError("coords needs at least one ring", field="coords")
        rings: List[List[Coordinate]] = []
        for ring in coords:
            points = validate_coordinates(ring, field="coords", minimum=2)
            if points[0] != points[-1]:
                points.append(points[0])
            rings.append(points)
        self.rings = rings
        self.style = Style.build(color=color, fill=fill, width=width, dash=dash)

    def extent(self) -> Extent:
        return extent_of([point for ring in self.rings for point in ring])
