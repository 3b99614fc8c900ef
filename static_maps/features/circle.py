"""Circle shape with a radius given in meters on the ground."""

import math

from ..constants import DEFAULT_STROKE_COLOR, DEFAULT_STROKE_WIDTH, METERS_PER_DEGREE
from ..geometry import clamp_latitude
from .base import Extent, Shape, ShapeKind, Style, validate_coordinate, validate_positive


class Circle(Shape):
    """
    A circle around a coordinate.

    Args:
        coord: Center (lon, lat)
        radius: Radius in meters; must be finite and positive
        color: Stroke color
        fill: Fill color; defaults to the stroke color
        width: Stroke width in pixels
        dash: Optional dash pattern in pixels

    Raises:
        ValidationError: On a missing or malformed center, or a bad radius

    Example:
        >>> c = Circle((11.6, 48.1), radius=10)
        >>> min_lon, min_lat, max_lon, max_lat = c.extent()
    """

    kind = ShapeKind.CIRCLE

    def __init__(self, coord, radius, color=DEFAULT_STROKE_COLOR, fill=None, width=DEFAULT_STROKE_WIDTH, dash=None):
        self.coord = validate_coordinate(coord, field="coord")
        self.radius = validate_positive(radius, field="radius")
        self.style = Style.build(
            color=color,
            fill=color if fill is None else fill,
            width=width,
            dash=dash,
        )

    def extent(self) -> Extent:
        lon, lat = self.coord
        lat_delta = self.radius / METERS_PER_DEGREE
        # Meridians converge, so a meter spans more longitude away from the equator
        lon_delta = self.radius / (METERS_PER_DEGREE * math.cos(math.radians(clamp_latitude(lat))))
        return lon - lon_delta, lat - lat_delta, lon + lon_delta, lat + lat_delta
