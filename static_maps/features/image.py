"""
Raster overlays and raster loading.

``Image`` stretches a picture over a geographic extent. ``load_raster``
opens the image sources shapes accept (Pillow images, bytes, base64 data
URIs, file paths and http(s) URLs) and is shared with marker icons.
"""

import base64
import io
import logging
from pathlib import Path
from typing import Callable, Optional

from PIL import Image as PILImage

from ..exceptions import ValidationError
from .base import Extent, Shape, ShapeKind, Style, _is_finite_number, validate_coordinate

logger = logging.getLogger("static_maps.features")

FetchBytes = Callable[[str], bytes]


def load_raster(source, fetch: Optional[FetchBytes] = None) -> PILImage.Image:
    """
    Open an image source as an RGBA Pillow image.

    Args:
        source: PIL image, raw bytes, ``data:`` URI, path, or http(s) URL
        fetch: Callable returning the bytes behind a URL

    Returns:
        RGBA image

    Raises:
        ValidationError: If the source cannot be opened
    """
    if isinstance(source, PILImage.Image):
        return source.convert("RGBA")

    try:
        if isinstance(source, (bytes, bytearray)):
            data = bytes(source)
        elif isinstance(source, str) and source.startswith("data:"):
            _, _, payload = source.partition(",")
            data = base64.b64decode(payload)
        elif isinstance(source, str) and source.startswith(("http://", "https://")):
            if fetch is None:
                raise ValidationError(f"No fetcher available for {source}", field="img")
            data = fetch(source)
        else:
            data = Path(source).read_bytes()
        with PILImage.open(io.BytesIO(data)) as img:
            return img.convert("RGBA")
    except ValidationError:
        raise
    except Exception as e:
        raise ValidationError(f"Cannot load image {str(source)[:80]!r}: {e}", field="img") from e


class Image(Shape):
    """
    A raster stretched over ``(min_lon, min_lat, max_lon, max_lat)``.

    Args:
        img: Any source accepted by :func:`load_raster`
        extent: Geographic box the raster covers
        opacity: Multiplier applied to the raster alpha, in [0, 1]

    The style has no stroke and no fill; only the raster is drawn.

    Raises:
        ValidationError: On a missing source, a degenerate extent or bad opacity
    """

    kind = ShapeKind.IMAGE

    def __init__(self, img, extent, opacity=1.0):
        if img is None:
            raise ValidationError("img is required", field="img")
        if extent is None or len(extent) != 4:
            raise ValidationError("extent must be [min_lon, min_lat, max_lon, max_lat]", field="extent")
        min_lon, min_lat = validate_coordinate(extent[:2], field="extent")
        max_lon, max_lat = validate_coordinate(extent[2:], field="extent")
        if min_lon >= max_lon or min_lat >= max_lat:
            raise ValidationError(f"extent is empty: {tuple(extent)}", field="extent")
        if not _is_finite_number(opacity) or not (0.0 <= opacity <= 1.0):
            raise ValidationError(f"opacity must be within [0, 1], got {opacity!r}", field="opacity")

        self.img = img
        self.bbox = (min_lon, min_lat, max_lon, max_lat)
        self.opacity = float(opacity)
        self.style = Style(width=0.0)

    def extent(self) -> Extent:
        return self.bbox
