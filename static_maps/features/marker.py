"""Point markers: the built-in pin or a custom icon."""

from typing import Optional, Tuple

from PIL import Image as PILImage, ImageOps

from ..constants import MARKER_DEFAULTS, MARKER_RESIZE_MODES
from ..exceptions import ValidationError
from .base import Extent, Shape, ShapeKind, Style, _is_finite_number, validate_coordinate


def _optional_size(value, field: str) -> Optional[float]:
    if value is None:
        return None
    if not _is_finite_number(value) or value <= 0:
        raise ValidationError(f"{field} must be a positive number, got {value!r}", field=field)
    return float(value)


def _optional_offset(value, field: str) -> Optional[float]:
    if value is None:
        return None
    if not _is_finite_number(value):
        raise ValidationError(f"{field} must be a finite number, got {value!r}", field=field)
    return float(value)


def resize_icon(icon: PILImage.Image, width: int, height: int, mode: str) -> PILImage.Image:
    """
    Resize an icon into a ``width`` x ``height`` box.

    Modes:
        fill: stretch to the box, ignoring aspect ratio
        cover: keep aspect, cover the box and crop the overflow
        contain: keep aspect, fit inside and pad transparently
        inside: keep aspect, fit inside, no padding
        outside: keep aspect, cover the box, no cropping
    """
    width, height = max(1, int(round(width))), max(1, int(round(height)))
    if icon.size == (width, height):
        return icon
    if mode == "fill":
        return icon.resize((width, height), PILImage.LANCZOS)
    if mode == "contain":
        return ImageOps.pad(icon, (width, height), method=PILImage.LANCZOS, color=(0, 0, 0, 0))
    if mode in ("inside", "outside"):
        sx, sy = width / icon.width, height / icon.height
        scale = min(sx, sy) if mode == "inside" else max(sx, sy)
        size = (max(1, round(icon.width * scale)), max(1, round(icon.height * scale)))
        return icon.resize(size, PILImage.LANCZOS)
    return ImageOps.fit(icon, (width, height), method=PILImage.LANCZOS)


class Marker(Shape):
    """
    A marker pinned to a coordinate.

    Without ``img`` a 20x20 pin is drawn in ``color``. The icon is placed
    so that the pixel ``(offset_x, offset_y)`` of the drawn icon lands on
    the coordinate; the default is the bottom-center.

    Args:
        coord: (lon, lat) position
        img: Optional icon source (path, URL, bytes, data URI or PIL image)
        width, height: Icon size; read from the icon when omitted
        draw_width, draw_height: Drawn size; default to width/height
        resize_mode: One of cover, contain, fill, inside, outside
        offset_x, offset_y: Anchor inside the drawn icon, in pixels
        color: Pin color when no icon is given

    Raises:
        ValidationError: On a bad coordinate, size or offset
    """

    kind = ShapeKind.MARKER

    def __init__(
        self,
        coord,
        img=None,
        width=None,
        height=None,
        draw_width=None,
        draw_height=None,
        resize_mode: str = MARKER_DEFAULTS["resize_mode"],
        offset_x=None,
        offset_y=None,
        color=MARKER_DEFAULTS["color"],
    ):
        self.coord = validate_coordinate(coord, field="coord")
        self.img = img
        self.width = _optional_size(width, "width")
        self.height = _optional_size(height, "height")
        self.draw_width = _optional_size(draw_width, "draw_width")
        self.draw_height = _optional_size(draw_height, "draw_height")
        self.resize_mode = resize_mode if resize_mode in MARKER_RESIZE_MODES else MARKER_DEFAULTS["resize_mode"]
        self._offset_x = _optional_offset(offset_x, "offset_x")
        self._offset_y = _optional_offset(offset_y, "offset_y")
        self.style = Style.build(color=color, fill=color, width=0)
        if img is None:
            self.set_size(self.width or MARKER_DEFAULTS["width"], self.height or MARKER_DEFAULTS["height"])

    def set_size(self, width: float, height: float) -> None:
        """Record the icon size once it is known; drawn size follows unless set."""
        self.width = float(width)
        self.height = float(height)
        if self.draw_width is None:
            self.draw_width = self.width
        if self.draw_height is None:
            self.draw_height = self.height

    def draw_size(self, icon_width: float, icon_height: float) -> Tuple[float, float]:
        """Drawn box for an icon of the given natural size, without touching the marker."""
        width = self.width or float(icon_width)
        height = self.height or float(icon_height)
        return self.draw_width or width, self.draw_height or height

    def anchor(self, draw_width: float, draw_height: float) -> Tuple[float, float]:
        """Pixel inside a ``draw_width`` x ``draw_height`` box that sits on the coordinate."""
        ox = self._offset_x if self._offset_x is not None else draw_width / 2.0
        oy = self._offset_y if self._offset_y is not None else draw_height
        return ox, oy

    @property
    def offset_x(self) -> float:
        return self.anchor(self.draw_width or 0.0, self.draw_height or 0.0)[0]

    @property
    def offset_y(self) -> float:
        return self.anchor(self.draw_width or 0.0, self.draw_height or 0.0)[1]

    def extent(self) -> Extent:
        lon, lat = self.coord
        return lon, lat, lon, lat
