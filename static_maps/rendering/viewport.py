"""
Viewport solving: choose the map center and zoom for a set of shapes.

``Bound`` aggregates shape extents. ``solve_viewport`` turns a bound and
the canvas geometry into a ``Viewport`` whose zoom is the largest
integer zoom (minus a one-level margin) at which the bound fits inside
the padded canvas. ``Viewport`` then maps lon/lat to canvas pixels for
the tile and shape layers.
"""

import logging
import math
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

from ..constants import DEFAULT_TILE_SIZE
from ..exceptions import ViewportError
from ..features import Extent, Shape, ShapeKind
from ..geometry import clamp_latitude, lat_to_tile_y, lon_to_tile_x, tile_x_to_lon, tile_y_to_lat

logger = logging.getLogger("static_maps.rendering.viewport")


class Bound:
    """Mutable min/max aggregate over shape extents."""

    def __init__(self):
        self.min_lon = math.inf
        self.min_lat = math.inf
        self.max_lon = -math.inf
        self.max_lat = -math.inf

    def include(self, extent: Sequence[float]) -> "Bound":
        min_lon, min_lat, max_lon, max_lat = extent
        self.min_lon = min(self.min_lon, min_lon)
        self.min_lat = min(self.min_lat, min_lat)
        self.max_lon = max(self.max_lon, max_lon)
        self.max_lat = max(self.max_lat, max_lat)
        return self

    def include_point(self, coord: Sequence[float]) -> "Bound":
        return self.include((coord[0], coord[1], coord[0], coord[1]))

    def include_shape(self, shape: Shape, zoom: Optional[float] = None, tile_size: int = DEFAULT_TILE_SIZE) -> "Bound":
        """Add a shape; text labels contribute their label box when a zoom is known."""
        if shape.kind is ShapeKind.TEXT:
            if shape.coord is None:
                return self
            return self.include(shape.extent(zoom=zoom, tile_size=tile_size))
        return self.include(shape.extent())

    @property
    def is_empty(self) -> bool:
        return self.min_lon > self.max_lon

    @property
    def extent(self) -> Extent:
        if self.is_empty:
            raise ViewportError("Bound is empty")
        return self.min_lon, self.min_lat, self.max_lon, self.max_lat

    @property
    def center(self) -> Tuple[float, float]:
        min_lon, min_lat, max_lon, max_lat = self.extent
        return (min_lon + max_lon) / 2.0, (min_lat + max_lat) / 2.0


@dataclass(frozen=True)
class Viewport:
    """A resolved map view: center, integer zoom and canvas geometry."""

    center: Tuple[float, float]
    zoom: int
    width: int
    height: int
    tile_size: int = DEFAULT_TILE_SIZE

    @property
    def center_tile(self) -> Tuple[float, float]:
        return lon_to_tile_x(self.center[0], self.zoom), lat_to_tile_y(self.center[1], self.zoom)

    @property
    def world_width(self) -> float:
        """Width of the whole world in canvas pixels."""
        return self.tile_size * 2.0 ** self.zoom

    def x_to_px(self, tile_x: float) -> float:
        return (tile_x - self.center_tile[0]) * self.tile_size + self.width / 2.0

    def y_to_px(self, tile_y: float) -> float:
        return (tile_y - self.center_tile[1]) * self.tile_size + self.height / 2.0

    def to_canvas(self, coord: Sequence[float]) -> Tuple[float, float]:
        """Canvas pixel position of a (lon, lat) coordinate."""
        return (
            self.x_to_px(lon_to_tile_x(coord[0], self.zoom)),
            self.y_to_px(lat_to_tile_y(coord[1], self.zoom)),
        )

    def nearest_world_shift(self, x: float) -> float:
        """Whole world widths that move canvas ``x`` to the copy nearest the canvas center."""
        world = self.world_width
        return round((self.width / 2.0 - x) / world) * world

    def to_canvas_nearest(self, coord: Sequence[float]) -> Tuple[float, float]:
        """Like ``to_canvas``, but on the world copy nearest the canvas center.

        Near the anti-meridian the tile mosaic shows both sides of the
        line, so a point at -179.5 belongs next to one at 179.5.
        """
        x, y = self.to_canvas(coord)
        return x + self.nearest_world_shift(x), y

    def to_lonlat(self, px: float, py: float) -> Tuple[float, float]:
        cx, cy = self.center_tile
        tx = (px - self.width / 2.0) / self.tile_size + cx
        ty = (py - self.height / 2.0) / self.tile_size + cy
        return tile_x_to_lon(tx, self.zoom), tile_y_to_lat(ty, self.zoom)


def extent_fits(viewport: Viewport, extent: Sequence[float], padding_x: int = 0, padding_y: int = 0) -> bool:
    """
    True if ``extent`` lands inside the padded canvas of ``viewport``.

    Longitudes are measured linearly from the center without wrapping,
    so label boxes running past the anti-meridian are judged by width.
    """
    min_lon, min_lat, max_lon, max_lat = extent
    scale = viewport.world_width / 360.0
    mid_x = viewport.width / 2.0
    left = mid_x + (min_lon - viewport.center[0]) * scale
    right = mid_x + (max_lon - viewport.center[0]) * scale
    top = viewport.y_to_px(lat_to_tile_y(max_lat, viewport.zoom))
    bottom = viewport.y_to_px(lat_to_tile_y(min_lat, viewport.zoom))
    return (
        left >= padding_x
        and right <= viewport.width - padding_x
        and top >= padding_y
        and bottom <= viewport.height - padding_y
    )


def _mercator_degrees(lat: float) -> float:
    """Latitude stretched by Web Mercator, in longitude-equivalent degrees."""
    phi = math.radians(clamp_latitude(lat))
    return math.degrees(math.asinh(math.tan(phi)))


def _fit_zoom(available_px: float, span_degrees: float, tile_size: int) -> Optional[int]:
    if span_degrees <= 0:
        return None
    return math.floor(math.log2(available_px * 360.0 / (span_degrees * tile_size)))


def fit_zoom(
    extent: Sequence[float],
    available_width: float,
    available_height: float,
    tile_size: int = DEFAULT_TILE_SIZE,
    center: Optional[Sequence[float]] = None
) -> Optional[int]:
    """
    Largest integer zoom at which ``extent`` fits the available pixels.

    Longitude spans map linearly to pixels. Latitude spans are measured
    after the Mercator stretch, which is the ``1/cos(latitude)``
    correction integrated over the span. With an explicit ``center`` the
    spans are doubled distances from it, so the fit is symmetric.

    Returns:
        The smaller of the two per-axis zooms, or None when both spans
        are zero (a single point)
    """
    min_lon, min_lat, max_lon, max_lat = extent
    lon_span = max_lon - min_lon
    merc_span = _mercator_degrees(max_lat) - _mercator_degrees(min_lat)
    if center is not None:
        lon_span = 2.0 * max(abs(max_lon - center[0]), abs(center[0] - min_lon))
        merc_center = _mercator_degrees(center[1])
        merc_span = 2.0 * max(
            abs(_mercator_degrees(max_lat) - merc_center),
            abs(merc_center - _mercator_degrees(min_lat)),
        )

    candidates = [
        z for z in (
            _fit_zoom(available_width, lon_span, tile_size),
            _fit_zoom(available_height, merc_span, tile_size),
        )
        if z is not None
    ]
    return min(candidates) if candidates else None


def solve_viewport(
    bound: Bound,
    width: int,
    height: int,
    padding_x: int = 0,
    padding_y: int = 0,
    center: Optional[Sequence[float]] = None,
    zoom: Optional[int] = None,
    tile_size: int = DEFAULT_TILE_SIZE,
    min_zoom: int = 0,
    max_zoom: int = 18,
    single_point_zoom: int = 15
) -> Viewport:
    """
    Resolve the map center and zoom.

    An explicit center and zoom are returned unchanged. Otherwise the
    center defaults to the midpoint of the bound, and the zoom to the
    fitted zoom minus one level of margin, clamped to
    ``[min_zoom, max_zoom]``. A bound that is a single point uses
    ``single_point_zoom``.

    Args:
        bound: Aggregated shape extents (may be empty if center is given)
        width, height: Canvas size in pixels
        padding_x, padding_y: Pixels kept free on each side when fitting
        center: Optional explicit (lon, lat)
        zoom: Optional explicit zoom
        tile_size: Tile edge in pixels
        min_zoom, max_zoom: Clamp range for fitted zooms
        single_point_zoom: Zoom for degenerate single-point bounds

    Returns:
        Viewport for the canvas

    Raises:
        ViewportError: Without a center and without shapes, or when the
            padding leaves no drawable area

    Example:
        >>> b = Bound().include_point((0, 0)).include_point((10, 10))
        >>> vp = solve_viewport(b, 600, 400, 20, 20)
        >>> vp.center, vp.zoom
        ((5.0, 5.0), 4)
    """
    if center is not None and zoom is not None:
        return Viewport((float(center[0]), float(center[1])), int(zoom), width, height, tile_size)

    if bound.is_empty:
        if center is None:
            raise ViewportError("Map needs a center or at least one shape")
        logger.debug(f"No shapes to fit; using single point zoom {single_point_zoom}")
        resolved = max(min_zoom, min(max_zoom, single_point_zoom))
        return Viewport((float(center[0]), float(center[1])), resolved, width, height, tile_size)

    if center is None:
        resolved_center = bound.center
    else:
        resolved_center = (float(center[0]), float(center[1]))

    if zoom is not None:
        return Viewport(resolved_center, int(zoom), width, height, tile_size)

    available_w = width - 2 * padding_x
    available_h = height - 2 * padding_y
    if available_w <= 0 or available_h <= 0:
        raise ViewportError(
            f"Padding ({padding_x}, {padding_y}) leaves no drawable area on a {width}x{height} canvas"
        )

    fitted = fit_zoom(bound.extent, available_w, available_h, tile_size, center=center)
    if fitted is None:
        resolved = single_point_zoom
    else:
        # One level of margin: the lat midpoint is not the Mercator midpoint
        resolved = fitted - 1
    resolved = max(min_zoom, min(max_zoom, resolved))

    logger.debug(
        f"Viewport fitted: extent={bound.extent} center=({resolved_center[0]:.5f}, {resolved_center[1]:.5f}) zoom={resolved}"
    )
    return Viewport(resolved_center, resolved, width, height, tile_size)
