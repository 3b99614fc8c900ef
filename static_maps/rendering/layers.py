"""
Shape layer rendering for static maps.

Shapes are drawn in a fixed z-order (polygons, polylines, circles,
markers and images, text) with insertion order kept inside each layer.
Each shape is painted on its own transparent overlay covering just the
visible part of its pixel box and alpha-composited onto the canvas, so
translucent colors blend with the basemap instead of replacing it.
Shapes whose box misses the canvas are skipped.

Drawing goes through ``DRAW_DISPATCH``, one function per ``ShapeKind``.
"""

import logging
import math
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from PIL import Image, ImageDraw

from ..features import (
    Circle,
    Image as ImageShape,
    Marker,
    MultiPolygon,
    Polyline,
    Shape,
    ShapeKind,
    Text,
    load_raster,
    resize_icon,
)
from ..geometry import meter_to_pixel
from .canvas import load_font
from .viewport import Viewport

logger = logging.getLogger("static_maps.rendering.layers")

Point = Tuple[float, float]
Box = Tuple[float, float, float, float]

Z_ORDER = {
    ShapeKind.POLYGON: 0,
    ShapeKind.MULTIPOLYGON: 0,
    ShapeKind.POLYLINE: 1,
    ShapeKind.CIRCLE: 2,
    ShapeKind.MARKER: 3,
    ShapeKind.IMAGE: 3,
    ShapeKind.TEXT: 4,
}

TEXT_ANCHOR_CODES = {"start": "ls", "middle": "ms", "end": "rs"}

# Extra pixels around a shape box for antialiasing and line joints
_BOX_MARGIN = 2


@dataclass
class DrawContext:
    """What draw functions need besides the shape and canvas."""

    viewport: Viewport
    font_family: str = "DejaVu Sans"
    fetch: Optional[Callable[[str], bytes]] = None


# ============================================================================
# Geometry helpers
# ============================================================================

def _bbox(points: Iterable[Point], pad: float = 0.0) -> Box:
    xs, ys = zip(*points)
    return min(xs) - pad, min(ys) - pad, max(xs) + pad, max(ys) + pad


def project_path(coords: Sequence[Sequence[float]], viewport: Viewport) -> List[Point]:
    """
    Project a path to canvas pixels, unwrapping across the anti-meridian.

    Consecutive points more than half a world apart are shifted by one
    world width, then the whole path is moved to the world copy closest
    to the canvas center.
    """
    world = viewport.world_width
    points: List[Point] = []
    for coord in coords:
        x, y = viewport.to_canvas(coord)
        if points:
            prev_x = points[-1][0]
            while x - prev_x > world / 2.0:
                x -= world
            while prev_x - x > world / 2.0:
                x += world
        points.append((x, y))

    mid_x = (min(p[0] for p in points) + max(p[0] for p in points)) / 2.0
    shift = viewport.nearest_world_shift(mid_x)
    if shift:
        points = [(x + shift, y) for x, y in points]
    return points


def dash_segments(points: Sequence[Point], pattern: Sequence[float]) -> List[List[Point]]:
    """Split a polyline into the "on" pieces of a dash pattern."""
    if len(pattern) % 2:
        pattern = list(pattern) * 2
    segments: List[List[Point]] = []
    index, remaining, drawing = 0, pattern[0], True
    current: List[Point] = [points[0]]

    for (x0, y0), (x1, y1) in zip(points, points[1:]):
        length = math.hypot(x1 - x0, y1 - y0)
        travelled = 0.0
        while length - travelled > remaining:
            travelled += remaining
            t = travelled / length
            cut = (x0 + (x1 - x0) * t, y0 + (y1 - y0) * t)
            if drawing:
                current.append(cut)
                segments.append(current)
            current = [cut]
            drawing = not drawing
            index = (index + 1) % len(pattern)
            remaining = pattern[index]
        remaining -= length - travelled
        if drawing:
            current.append((x1, y1))
        else:
            current = [(x1, y1)]

    if drawing and len(current) > 1:
        segments.append(current)
    return [seg for seg in segments if len(seg) > 1]


def composite_clipped(canvas: Image.Image, box: Box, paint: Callable[[ImageDraw.ImageDraw, Image.Image, int, int], None]) -> bool:
    """
    Paint onto a transparent overlay clipped to ``box`` and blend it in.

    ``paint(draw, overlay, dx, dy)`` receives the offset that maps canvas
    pixels to overlay pixels.

    Returns:
        False when the box misses the canvas and nothing was drawn
    """
    x0 = max(0, int(math.floor(box[0])))
    y0 = max(0, int(math.floor(box[1])))
    x1 = min(canvas.width, int(math.ceil(box[2])) + 1)
    y1 = min(canvas.height, int(math.ceil(box[3])) + 1)
    if x0 >= x1 or y0 >= y1:
        return False

    overlay = Image.new("RGBA", (x1 - x0, y1 - y0), (0, 0, 0, 0))
    paint(ImageDraw.Draw(overlay), overlay, -x0, -y0)
    canvas.alpha_composite(overlay, dest=(x0, y0))
    return True


def _shift(points: Sequence[Point], dx: int, dy: int) -> List[Point]:
    return [(x + dx, y + dy) for x, y in points]


def _stroke(draw: ImageDraw.ImageDraw, points: Sequence[Point], color, width: float, dash) -> None:
    if color is None or width <= 0 or len(points) < 2:
        return
    line_width = max(1, int(round(width)))
    pieces = dash_segments(points, dash) if dash else [points]
    for piece in pieces:
        draw.line(piece, fill=color, width=line_width, joint="curve")


# ============================================================================
# Per-kind draw functions
# ============================================================================

def draw_polyline(canvas: Image.Image, shape: Polyline, ctx: DrawContext) -> bool:
    points = project_path(shape.coords, ctx.viewport)
    style = shape.style
    box = _bbox(points, style.width / 2.0 + _BOX_MARGIN)

    def paint(draw, overlay, dx, dy):
        shifted = _shift(points, dx, dy)
        if shape.kind is ShapeKind.POLYGON and style.fill is not None and len(shifted) >= 3:
            draw.polygon(shifted, fill=style.fill)
        _stroke(draw, shifted, style.color, style.width, style.dash)

    return composite_clipped(canvas, box, paint)


def draw_multipolygon(canvas: Image.Image, shape: MultiPolygon, ctx: DrawContext) -> bool:
    rings = [project_path(ring, ctx.viewport) for ring in shape.rings]
    style = shape.style
    box = _bbox([p for ring in rings for p in ring], style.width / 2.0 + _BOX_MARGIN)

    def paint(draw, overlay, dx, dy):
        shifted = [_shift(ring, dx, dy) for ring in rings]
        if style.fill is not None:
            for ring in shifted:
                if len(ring) >= 3:
                    draw.polygon(ring, fill=style.fill)
        for ring in shifted:
            _stroke(draw, ring, style.color, style.width, style.dash)

    return composite_clipped(canvas, box, paint)


def circle_ring(center: Point, radius: float, segments: int = 90) -> List[Point]:
    cx, cy = center
    return [
        (cx + radius * math.cos(2.0 * math.pi * i / segments), cy + radius * math.sin(2.0 * math.pi * i / segments))
        for i in range(segments + 1)
    ]


def draw_circle(canvas: Image.Image, shape: Circle, ctx: DrawContext) -> bool:
    vp = ctx.viewport
    cx, cy = vp.to_canvas_nearest(shape.coord)
    radius = meter_to_pixel(shape.radius, vp.zoom, shape.coord[1], vp.tile_size)
    style = shape.style
    pad = radius + style.width / 2.0 + _BOX_MARGIN
    box = (cx - pad, cy - pad, cx + pad, cy + pad)

    def paint(draw, overlay, dx, dy):
        x, y = cx + dx, cy + dy
        bounds = [x - radius, y - radius, x + radius, y + radius]
        if style.dash:
            if style.fill is not None:
                draw.ellipse(bounds, fill=style.fill)
            _stroke(draw, circle_ring((x, y), radius), style.color, style.width, style.dash)
        else:
            outline_width = max(1, int(round(style.width))) if style.color is not None and style.width > 0 else 0
            draw.ellipse(
                bounds,
                fill=style.fill,
                outline=style.color if outline_width else None,
                width=outline_width,
            )

    return composite_clipped(canvas, box, paint)


def _paint_pin(draw: ImageDraw.ImageDraw, left: float, top: float, width: float, height: float, color) -> None:
    """Teardrop pin: round head over a point at the bottom-center."""
    r = width / 2.0
    head_cx, head_cy = left + r, top + r
    tip = (left + r, top + height)
    draw.polygon([(left + 0.15 * width, head_cy + 0.35 * r), (left + 0.85 * width, head_cy + 0.35 * r), tip], fill=color)
    draw.ellipse([head_cx - r, head_cy - r, head_cx + r, head_cy + r], fill=color)
    dot = r * 0.38
    draw.ellipse([head_cx - dot, head_cy - dot, head_cx + dot, head_cy + dot], fill=(255, 255, 255, 230))


def draw_marker(canvas: Image.Image, shape: Marker, ctx: DrawContext) -> bool:
    icon = None
    if shape.img is not None:
        icon = load_raster(shape.img, fetch=ctx.fetch)
        draw_width, draw_height = shape.draw_size(icon.width, icon.height)
        icon = resize_icon(icon, draw_width, draw_height, shape.resize_mode)
    else:
        draw_width, draw_height = shape.draw_width, shape.draw_height
    anchor_x, anchor_y = shape.anchor(draw_width, draw_height)

    x, y = ctx.viewport.to_canvas_nearest(shape.coord)
    left = x - anchor_x
    top = y - anchor_y
    width = icon.width if icon is not None else draw_width
    height = icon.height if icon is not None else draw_height
    box = (left, top, left + width, top + height)

    def paint(draw, overlay, dx, dy):
        if icon is None:
            _paint_pin(draw, left + dx, top + dy, width, height, shape.style.color)
        else:
            layer = Image.new("RGBA", overlay.size, (0, 0, 0, 0))
            layer.paste(icon, (int(round(left + dx)), int(round(top + dy))))
            overlay.alpha_composite(layer)

    return composite_clipped(canvas, box, paint)


def draw_image(canvas: Image.Image, shape: ImageShape, ctx: DrawContext) -> bool:
    vp = ctx.viewport
    min_lon, min_lat, max_lon, max_lat = shape.extent()
    left, top = vp.to_canvas((min_lon, max_lat))
    right, bottom = vp.to_canvas((max_lon, min_lat))
    shift = vp.nearest_world_shift((left + right) / 2.0)
    left, right = left + shift, right + shift
    if right - left < 1 or bottom - top < 1:
        return False
    box = (left, top, right, bottom)

    def paint(draw, overlay, dx, dy):
        raster = load_raster(shape.img, fetch=ctx.fetch)
        # Resample only the visible part of the raster
        ox0, oy0 = max(0.0, left + dx), max(0.0, top + dy)
        ox1, oy1 = min(float(overlay.width), right + dx), min(float(overlay.height), bottom + dy)
        if ox1 - ox0 < 1 or oy1 - oy0 < 1:
            return
        sx = raster.width / (right - left)
        sy = raster.height / (bottom - top)
        src_box = (
            (ox0 - (left + dx)) * sx,
            (oy0 - (top + dy)) * sy,
            (ox1 - (left + dx)) * sx,
            (oy1 - (top + dy)) * sy,
        )
        size = (max(1, int(round(ox1 - ox0))), max(1, int(round(oy1 - oy0))))
        piece = raster.resize(size, Image.BILINEAR, box=src_box)
        if shape.opacity < 1.0:
            alpha = piece.getchannel("A").point(lambda a: int(round(a * shape.opacity)))
            piece.putalpha(alpha)
        overlay.alpha_composite(piece, dest=(int(round(ox0)), int(round(oy0))))

    return composite_clipped(canvas, box, paint)


def draw_text(canvas: Image.Image, shape: Text, ctx: DrawContext) -> bool:
    if shape.coord is None or not shape.text:
        return False
    x, y = ctx.viewport.to_canvas_nearest(shape.coord)
    x -= shape.offset_x
    y -= shape.offset_y
    font = load_font(shape.font or ctx.font_family, int(round(shape.size)))
    anchor = TEXT_ANCHOR_CODES[shape.anchor]
    style = shape.style
    stroke_width = int(round(style.width)) if style.color is not None else 0

    measure = ImageDraw.Draw(canvas)
    box = measure.textbbox((x, y), shape.text, font=font, anchor=anchor, stroke_width=stroke_width)
    box = (box[0] - _BOX_MARGIN, box[1] - _BOX_MARGIN, box[2] + _BOX_MARGIN, box[3] + _BOX_MARGIN)

    def paint(draw, overlay, dx, dy):
        draw.text(
            (x + dx, y + dy),
            shape.text,
            font=font,
            anchor=anchor,
            fill=style.fill if style.fill is not None else (0, 0, 0, 0),
            stroke_width=stroke_width,
            stroke_fill=style.color,
        )

    return composite_clipped(canvas, box, paint)


DRAW_DISPATCH: Dict[ShapeKind, Callable[[Image.Image, Shape, DrawContext], bool]] = {
    ShapeKind.POLYGON: draw_polyline,
    ShapeKind.POLYLINE: draw_polyline,
    ShapeKind.MULTIPOLYGON: draw_multipolygon,
    ShapeKind.CIRCLE: draw_circle,
    ShapeKind.MARKER: draw_marker,
    ShapeKind.IMAGE: draw_image,
    ShapeKind.TEXT: draw_text,
}


def order_shapes(shapes: Sequence[Shape]) -> List[Shape]:
    """Stable sort into draw order; insertion order is kept within a layer."""
    return sorted(shapes, key=lambda s: Z_ORDER[s.kind])


def draw_shapes(canvas: Image.Image, shapes: Sequence[Shape], ctx: DrawContext) -> int:
    """
    Draw all shapes onto ``canvas`` in z-order.

    Returns:
        Number of shapes that touched the canvas
    """
    drawn = 0
    for shape in order_shapes(shapes):
        if DRAW_DISPATCH[shape.kind](canvas, shape, ctx):
            drawn += 1
        else:
            logger.debug(f"Skipped {shape.kind.value} outside the canvas")
    logger.debug(f"Drew {drawn}/{len(shapes)} shapes")
    return drawn
