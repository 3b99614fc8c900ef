"""Text label shape."""

from typing import Optional

from ..constants import DEFAULT_TILE_SIZE, TEXT_ANCHORS, TEXT_CHAR_WIDTH_RATIO, TEXT_DEFAULTS
from ..exceptions import ValidationError
from ..geometry import lonlat_to_pixel, pixel_to_lonlat
from .base import Extent, Shape, ShapeKind, Style, _is_finite_number, validate_coordinate, validate_positive


class Text(Shape):
    """
    A text label anchored at a coordinate.

    The projected coordinate minus ``(offset_x, offset_y)`` is the anchor
    point; ``anchor`` selects whether the text starts, is centered, or
    ends there, and the anchor sits on the text baseline.

    Args:
        coord: (lon, lat) placement; only optional for attribution text
        text: Label content
        font: Font family name
        size: Font size in pixels
        anchor: One of "start", "middle", "end"
        offset_x: Horizontal pixel offset
        offset_y: Vertical pixel offset
        color: Outline color
        fill: Glyph fill color
        width: Outline width in pixels

    Raises:
        ValidationError: On a bad coordinate, anchor, size, offset or text
    """

    kind = ShapeKind.TEXT

    def __init__(
        self,
        coord=None,
        text: str = "",
        font: Optional[str] = None,
        size=TEXT_DEFAULTS["size"],
        anchor: str = TEXT_DEFAULTS["anchor"],
        offset_x=0,
        offset_y=0,
        color=TEXT_DEFAULTS["color"],
        fill=TEXT_DEFAULTS["fill"],
        width=TEXT_DEFAULTS["width"],
    ):
        self.coord = None if coord is None else validate_coordinate(coord, field="coord")
        if not isinstance(text, str):
            raise ValidationError(f"text must be a string, got {type(text).__name__}", field="text")
        if anchor not in TEXT_ANCHORS:
            raise ValidationError(f"anchor must be one of {TEXT_ANCHORS}, got {anchor!r}", field="anchor")
        for name, value in (("offset_x", offset_x), ("offset_y", offset_y)):
            if not _is_finite_number(value):
                raise ValidationError(f"{name} must be a finite number, got {value!r}", field=name)

        self.text = text
        self.font = font
        self.size = validate_positive(size, field="size")
        self.anchor = anchor
        self.offset_x = float(offset_x)
        self.offset_y = float(offset_y)
        self.style = Style.build(color=color, fill=fill, width=width)

    def estimated_width(self) -> float:
        return len(self.text) * self.size * TEXT_CHAR_WIDTH_RATIO

    def extent(self, zoom: Optional[float] = None, tile_size: int = DEFAULT_TILE_SIZE) -> Extent:
        """
        Geographic box covered by the label.

        Without a zoom only the anchor point is known. With one, the label
        box is estimated from character count and font size in pixels and
        un-projected back to lon/lat.

        Raises:
            ValidationError: If the text has no coordinate
        """
        if self.coord is None:
            raise ValidationError("Text extent needs a coordinate", field="coord")
        lon, lat = self.coord
        if zoom is None:
            return lon, lat, lon, lat

        px, py = lonlat_to_pixel(self.coord, zoom, tile_size)
        x = px - self.offset_x
        y = py - self.offset_y
        w = self.estimated_width()
        if self.anchor == "middle":
            x -= w / 2.0
        elif self.anchor == "end":
            x -= w

        west, north = pixel_to_lonlat(x, y - self.size, zoom, tile_size)
        east, south = pixel_to_lonlat(x + w, y, zoom, tile_size)
        return min(west, lon), min(south, lat), max(east, lon), max(north, lat)

    def __repr__(self) -> str:
        return f"Text(text={self.text!r}, coord={self.coord}, anchor={self.anchor})"
