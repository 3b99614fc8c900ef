"""
Rendering subsystem for static maps.

Main Components:
    - viewport: Bound aggregation, Viewport and the zoom/center solver
    - layers: z-ordered shape drawing through a per-kind dispatch table
    - annotations: the attribution badge
    - canvas: canvas creation, font lookup and image encoding

The StaticMap orchestrator lives in ``static_maps.rendering.renderer``.
"""

from .viewport import Bound, Viewport, extent_fits, fit_zoom, solve_viewport
from .canvas import encode_image, load_font, new_canvas, normalize_format
from .layers import DRAW_DISPATCH, Z_ORDER, DrawContext, draw_shapes, order_shapes
from .annotations import add_attribution

__all__ = [
    "Bound",
    "Viewport",
    "extent_fits",
    "fit_zoom",
    "solve_viewport",
    "encode_image",
    "load_font",
    "new_canvas",
    "normalize_format",
    "DRAW_DISPATCH",
    "Z_ORDER",
    "DrawContext",
    "draw_shapes",
    "order_shapes",
    "add_attribution",
]
