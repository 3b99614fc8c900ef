"""
Canvas creation, font lookup and final image encoding.
"""

import io
import logging
from functools import lru_cache
from typing import Tuple

from matplotlib import font_manager
from PIL import Image, ImageFont

from ..constants import OUTPUT_FORMATS
from ..exceptions import EncodeError

logger = logging.getLogger("static_maps.rendering.canvas")


def new_canvas(width: int, height: int) -> Image.Image:
    return Image.new("RGBA", (int(width), int(height)), (0, 0, 0, 0))


@lru_cache(maxsize=64)
def load_font(family: str, size: int) -> ImageFont.FreeTypeFont:
    """
    Resolve a font family to a TrueType font at ``size`` pixels.

    Matplotlib's font manager does the family lookup and falls back to
    its bundled DejaVu Sans when the family is not installed.
    """
    props = font_manager.FontProperties(family=family)
    path = font_manager.findfont(props, fallback_to_default=True)
    try:
        return ImageFont.truetype(path, size=max(1, int(round(size))))
    except OSError as e:
        logger.warning(f"Cannot load font '{family}' from {path}: {e}; using Pillow default")
        return ImageFont.load_default(size=max(1, int(round(size))))


def normalize_format(fmt: str) -> str:
    """Lowercase and validate an output format name.

    Raises:
        EncodeError: If the format is not supported
    """
    key = (fmt or "").strip().lower()
    if key not in OUTPUT_FORMATS:
        raise EncodeError(f"Unsupported output format '{fmt}'. Use one of: {', '.join(OUTPUT_FORMATS)}")
    return key


def _flatten(image: Image.Image, background=(255, 255, 255)) -> Image.Image:
    base = Image.new("RGB", image.size, background)
    base.paste(image, mask=image.getchannel("A"))
    return base


def encode_image(image: Image.Image, fmt: str = "png", quality: int = 90) -> Tuple[bytes, str]:
    """
    Encode the rendered RGBA canvas.

    JPEG and PDF have no alpha channel, so the canvas is flattened onto
    white first.

    Args:
        image: RGBA canvas
        fmt: One of png, jpeg, jpg, webp, pdf
        quality: Encoder quality (jpeg/webp), 1-100

    Returns:
        (encoded bytes, MIME type)

    Raises:
        EncodeError: For an unsupported format or an encoder failure
    """
    key = normalize_format(fmt)
    fmt_info = OUTPUT_FORMATS[key]
    quality = max(1, min(100, int(quality)))

    buffer = io.BytesIO()
    try:
        if fmt_info["pil_format"] == "PNG":
            image.save(buffer, format="PNG", optimize=True)
        elif fmt_info["pil_format"] == "JPEG":
            _flatten(image).save(buffer, format="JPEG", quality=quality)
        elif fmt_info["pil_format"] == "WEBP":
            image.save(buffer, format="WEBP", quality=quality)
        else:
            _flatten(image).save(buffer, format="PDF", resolution=72.0)
    except (OSError, ValueError, KeyError) as e:
        raise EncodeError(f"Failed to encode {key}: {e}") from e

    data = buffer.getvalue()
    logger.debug(f"Encoded {image.width}x{image.height} {key}: {len(data)} bytes")
    return data, fmt_info["content_type"]
