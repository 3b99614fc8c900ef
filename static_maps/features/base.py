"""
Common pieces of the shape model.

Every drawable shape carries a ``kind`` tag from the closed ``ShapeKind``
set, a ``Style`` and an ``extent()`` returning
``(min_lon, min_lat, max_lon, max_lat)``. Field validation happens at
construction and raises ``ValidationError`` naming the bad field.
"""

import math
from dataclasses import dataclass
from enum import Enum
from numbers import Real
from typing import Iterable, List, Optional, Sequence, Tuple

import matplotlib.colors as mcolors

from ..constants import DEFAULT_STROKE_COLOR, DEFAULT_STROKE_WIDTH
from ..exceptions import ValidationError
from ..geometry import wrap_longitude

Coordinate = Tuple[float, float]
Extent = Tuple[float, float, float, float]
RGBA = Tuple[int, int, int, int]


class ShapeKind(Enum):
    MARKER = "marker"
    POLYLINE = "polyline"
    POLYGON = "polygon"
    CIRCLE = "circle"
    TEXT = "text"
    IMAGE = "image"
    MULTIPOLYGON = "multipolygon"


def _is_finite_number(value) -> bool:
    return isinstance(value, Real) and not isinstance(value, bool) and math.isfinite(value)


def validate_coordinate(value, field: str = "coord") -> Coordinate:
    """
    Check a (lon, lat) pair and return it as floats.

    Longitudes outside [-180, 180] are wrapped. Latitudes are kept as
    given; projection clamps them to the Mercator range.

    Raises:
        ValidationError: If the value is not two finite numbers
    """
    if value is None:
        raise ValidationError(f"{field} is required", field=field)
    try:
        items = list(value)
    except TypeError:
        raise ValidationError(f"{field} must be a [lon, lat] pair, got {value!r}", field=field) from None
    if len(items) != 2 or not all(_is_finite_number(v) for v in items):
        raise ValidationError(f"{field} must be a [lon, lat] pair of finite numbers, got {value!r}", field=field)
    return wrap_longitude(float(items[0])), float(items[1])


def validate_coordinates(values, field: str = "coords", minimum: int = 2) -> List[Coordinate]:
    if values is None:
        raise ValidationError(f"{field} is required", field=field)
    coords = [validate_coordinate(v, field=field) for v in values]
    if len(coords) < minimum:
        raise ValidationError(f"{field} needs at least {minimum} coordinates, got {len(coords)}", field=field)
    return coords


def validate_positive(value, field: str) -> float:
    if not _is_finite_number(value) or value <= 0:
        raise ValidationError(f"{field} must be a finite positive number, got {value!r}", field=field)
    return float(value)


def validate_dash(dash) -> Optional[Tuple[float, ...]]:
    """
    Normalize a stroke dash pattern.

    Returns None for an empty pattern or one made only of zeros, which
    both mean a solid stroke.

    Raises:
        ValidationError: If any entry is negative or not a finite number
    """
    if dash is None:
        return None
    if isinstance(dash, str):
        dash = [part for part in dash.replace(",", " ").split() if part]
        try:
            dash = [float(part) for part in dash]
        except ValueError:
            raise ValidationError("dash must contain only numbers", field="dash") from None
    values = list(dash)
    if not all(_is_finite_number(v) and v >= 0 for v in values):
        raise ValidationError(f"dash must contain finite non-negative numbers, got {values!r}", field="dash")
    if not values or not any(values):
        return None
    return tuple(float(v) for v in values)


def parse_color(color, field: str = "color") -> Optional[RGBA]:
    """
    Parse any Matplotlib color spec (including ``#RRGGBBAA``) to 8-bit RGBA.

    Returns None for ``None``, which callers treat as "not drawn".
    """
    if color is None:
        return None
    try:
        r, g, b, a = mcolors.to_rgba(color)
    except ValueError:
        raise ValidationError(f"Invalid {field}: {color!r}", field=field) from None
    return int(round(r * 255)), int(round(g * 255)), int(round(b * 255)), int(round(a * 255))


def extent_of(coords: Iterable[Sequence[float]]) -> Extent:
    lons = [c[0] for c in coords]
    lats = [c[1] for c in coords]
    return min(lons), min(lats), max(lons), max(lats)


@dataclass(frozen=True)
class Style:
    """Stroke and fill settings shared by vector shapes.

    Attributes:
        color: Stroke color as RGBA, or None for no stroke.
        fill: Fill color as RGBA, or None for no fill.
        width: Stroke width in pixels.
        dash: Dash pattern in pixels (on, off, ...), or None for solid.
    """

    color: Optional[RGBA] = None
    fill: Optional[RGBA] = None
    width: float = DEFAULT_STROKE_WIDTH
    dash: Optional[Tuple[float, ...]] = None

    @classmethod
    def build(cls, color=DEFAULT_STROKE_COLOR, fill=None, width=DEFAULT_STROKE_WIDTH, dash=None) -> "Style":
        if width is None:
            width = DEFAULT_STROKE_WIDTH
        if not _is_finite_number(width) or width < 0:
            raise ValidationError(f"width must be a finite non-negative number, got {width!r}", field="width")
        return cls(
            color=parse_color(color, "color"),
            fill=parse_color(fill, "fill"),
            width=float(width),
            dash=validate_dash(dash),
        )


class Shape:
    """Base class for drawable shapes."""

    kind: ShapeKind
    style: Style

    def extent(self) -> Extent:
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{type(self).__name__}(kind={self.kind.value}, extent={self.extent()})"
