"""
Attribution badge for rendered maps.

The badge sits in the bottom-right corner: a rounded, half-transparent
black box sized to the measured text width plus fixed padding, with
near-white right-aligned text. It is composited after every shape so it
is always on top.
"""

import logging
from typing import Optional, Tuple

from PIL import Image, ImageDraw

from ..constants import ATTRIBUTION_STYLE
from .canvas import load_font

logger = logging.getLogger("static_maps.rendering.annotations")


def attribution_box(
    text_width: float,
    canvas_size: Tuple[int, int],
    font_size: int = ATTRIBUTION_STYLE["font_size"]
) -> Tuple[float, float, float, float]:
    """Badge rectangle (left, top, right, bottom) for a measured text width."""
    width, height = canvas_size
    margin = ATTRIBUTION_STYLE["margin"]
    rect_w = text_width + 2 * ATTRIBUTION_STYLE["padding_x"]
    rect_h = font_size + 2 * ATTRIBUTION_STYLE["padding_y"]
    right = width - margin
    bottom = height - margin
    return right - rect_w, bottom - rect_h, right, bottom


def add_attribution(
    canvas: Image.Image,
    text: Optional[str],
    font_family: str = "DejaVu Sans",
    font_size: int = ATTRIBUTION_STYLE["font_size"]
) -> bool:
    """
    Draw the attribution badge onto ``canvas`` in place.

    Args:
        canvas: RGBA canvas
        text: Attribution text; nothing is drawn when empty
        font_family: Font family for the text
        font_size: Font size in pixels

    Returns:
        True if a badge was drawn
    """
    if not text:
        return False

    font = load_font(font_family, font_size)
    overlay = Image.new("RGBA", canvas.size, (0, 0, 0, 0))
    draw = ImageDraw.Draw(overlay)

    text_width = draw.textlength(text, font=font)
    left, top, right, bottom = attribution_box(text_width, canvas.size, font_size)
    if left < 0 or top < 0:
        logger.debug(f"Attribution badge wider than a {canvas.width}x{canvas.height} canvas, clipping")

    draw.rounded_rectangle(
        [left, top, right, bottom],
        radius=ATTRIBUTION_STYLE["radius"],
        fill=ATTRIBUTION_STYLE["background"],
    )
    draw.text(
        (right - ATTRIBUTION_STYLE["padding_x"], (top + bottom) / 2.0),
        text,
        font=font,
        fill=ATTRIBUTION_STYLE["text_color"],
        anchor="rm",
    )
    canvas.alpha_composite(overlay)
    return True
