"""
Render options and results.

``RenderOptions`` is the typed input of a render call and
``RenderResult`` its output. ``RenderOptions.from_dict`` builds options
from plain dictionaries (YAML/JSON option files and the CLI), turning
shape entries into shape objects and basemap names or URL templates into
tile layers.

Example:
    >>> opts = RenderOptions.from_dict({
    ...     "width": 600, "height": 400, "padding": 20,
    ...     "basemap": "osm",
    ...     "markers": [{"coord": [0, 0]}, {"coord": [10, 10]}],
    ... })
"""

import logging
import math
from dataclasses import dataclass, field
from numbers import Real
from typing import Any, Dict, List, Mapping, Optional, Sequence

from .constants import BASEMAPS
from .exceptions import ValidationError
from .features import SHAPE_TYPES, Coordinate, Shape
from .features.base import validate_coordinate
from .rendering.canvas import normalize_format
from .tiles import TileLayerConfig

logger = logging.getLogger("static_maps.options")

MAX_DIMENSION = 8192

# Plural keys accepted in option files, mapped to shape type names
_SHAPE_LIST_KEYS = {
    "markers": "marker",
    "polylines": "polyline",
    "polygons": "polygon",
    "circles": "circle",
    "texts": "text",
    "images": "image",
    "multipolygons": "multipolygon",
}


@dataclass
class AttributionOptions:
    """Whether and what to show in the attribution badge.

    Attributes:
        show: Draw the badge at all.
        text: Badge text; falls back to the first tile layer's attribution.
    """

    show: bool = True
    text: Optional[str] = None

    @classmethod
    def parse(cls, value: Any) -> "AttributionOptions":
        """
        Accept None, a bool, a mapping, or a ``"show:false|text:..."`` string.

        A plain string without ``show:``/``text:`` keys is used as the text.
        """
        if value is None:
            return cls()
        if isinstance(value, cls):
            return value
        if isinstance(value, bool):
            return cls(show=value)
        if isinstance(value, Mapping):
            return cls(show=bool(value.get("show", True)), text=value.get("text"))
        if isinstance(value, str):
            result = cls()
            keyed = False
            for part in value.split("|"):
                key, sep, rest = part.partition(":")
                if sep and key == "show":
                    result.show = rest.strip().lower() == "true"
                    keyed = True
                elif sep and key == "text":
                    result.text = rest
                    keyed = True
                elif part in ("true", "false"):
                    result.show = part == "true"
                    keyed = True
            if not keyed:
                result.text = value
            return result
        raise ValidationError(f"Invalid attribution option: {value!r}", field="attribution")


@dataclass
class RenderResult:
    """Encoded image returned by a render."""

    data: bytes
    content_type: str

    @property
    def content_length(self) -> int:
        return len(self.data)


def _check_int(value, field: str, minimum: int, maximum: Optional[int] = None) -> int:
    if isinstance(value, bool) or not isinstance(value, Real) or not math.isfinite(value) or int(value) != value:
        raise ValidationError(f"{field} must be an integer, got {value!r}", field=field)
    value = int(value)
    if value < minimum or (maximum is not None and value > maximum):
        upper = f" and <= {maximum}" if maximum is not None else ""
        raise ValidationError(f"{field} must be >= {minimum}{upper}, got {value}", field=field)
    return value


@dataclass
class RenderOptions:
    """Everything needed to render one map.

    Attributes:
        width: Output width in pixels.
        height: Output height in pixels.
        center: Explicit (lon, lat) center, or None to fit the shapes.
        zoom: Explicit zoom, or None to fit the shapes.
        padding_x: Pixels kept free left and right when fitting.
        padding_y: Pixels kept free top and bottom when fitting.
        format: Output format (png, jpeg, jpg, webp, pdf).
        quality: Encoder quality for jpeg/webp, or None for the config default.
        shapes: Shapes to draw, in insertion order.
        bounds: Extra (lon, lat) points that only influence fitting.
        tile_layers: Basemap layers, composited bottom to top.
        attribution: Attribution badge settings.
        min_zoom: Lower clamp for fitted zooms (config default if None).
        max_zoom: Upper clamp for fitted zooms (config default if None).
    """

    width: int = 800
    height: int = 800
    center: Optional[Coordinate] = None
    zoom: Optional[int] = None
    padding_x: int = 0
    padding_y: int = 0
    format: str = "png"
    quality: Optional[int] = None
    shapes: List[Shape] = field(default_factory=list)
    bounds: List[Coordinate] = field(default_factory=list)
    tile_layers: List[TileLayerConfig] = field(default_factory=list)
    attribution: AttributionOptions = field(default_factory=AttributionOptions)
    min_zoom: Optional[int] = None
    max_zoom: Optional[int] = None

    def validate(self) -> "RenderOptions":
        """
        Fail fast on structurally invalid options.

        Raises:
            ValidationError: On bad sizes, coordinates, zooms or shapes
            EncodeError: On an unsupported output format
        """
        self.width = _check_int(self.width, "width", 1, MAX_DIMENSION)
        self.height = _check_int(self.height, "height", 1, MAX_DIMENSION)
        self.padding_x = _check_int(self.padding_x, "padding_x", 0)
        self.padding_y = _check_int(self.padding_y, "padding_y", 0)
        if self.center is not None:
            self.center = validate_coordinate(self.center, field="center")
        if self.zoom is not None:
            self.zoom = _check_int(self.zoom, "zoom", 0, 24)
        for name in ("min_zoom", "max_zoom"):
            value = getattr(self, name)
            if value is not None:
                setattr(self, name, _check_int(value, name, 0, 24))
        if self.min_zoom is not None and self.max_zoom is not None and self.min_zoom > self.max_zoom:
            raise ValidationError("min_zoom must not exceed max_zoom", field="min_zoom")
        if self.quality is not None:
            self.quality = _check_int(self.quality, "quality", 1, 100)
        self.format = normalize_format(self.format)
        self.bounds = [validate_coordinate(c, field="bounds") for c in self.bounds]
        for shape in self.shapes:
            if not isinstance(shape, Shape):
                raise ValidationError(f"Not a shape: {shape!r}", field="shapes")
        for layer in self.tile_layers:
            if not isinstance(layer, TileLayerConfig):
                raise ValidationError(f"Not a tile layer: {layer!r}", field="tile_layers")
        self.attribution = AttributionOptions.parse(self.attribution)
        return self

    @property
    def attribution_text(self) -> Optional[str]:
        if not self.attribution.show:
            return None
        if self.attribution.text:
            return self.attribution.text
        for layer in self.tile_layers:
            if layer.attribution:
                return layer.attribution
        return None

    @classmethod
    def from_dict(
        cls,
        data: Mapping[str, Any],
        registry: Mapping[str, Mapping] = BASEMAPS,
        layer_defaults: Optional[Mapping[str, Any]] = None
    ) -> "RenderOptions":
        """
        Build options from a plain mapping.

        Recognized keys: width, height, center, zoom, padding (or
        padding_x/padding_y), format, quality, min_zoom, max_zoom,
        bounds, attribution, basemap (name or list of names), tile_url,
        tile_layers (list of TileLayerConfig field mappings), shapes
        (list of mappings with a ``type`` key) and the per-type lists
        markers, polylines, polygons, circles, texts, images, multipolygons.

        Args:
            data: Option mapping
            registry: Basemap registry used to resolve basemap names
            layer_defaults: Field defaults applied to every tile layer
                (timeout, retries, headers, tile_size)

        Raises:
            ValidationError: On unknown shape types or bad shape fields
        """
        data = dict(data)
        layer_defaults = dict(layer_defaults or {})

        padding = data.pop("padding", None)
        padding_x = data.pop("padding_x", padding if padding is not None else 0)
        padding_y = data.pop("padding_y", padding if padding is not None else 0)

        shapes: List[Shape] = []
        for entry in data.pop("shapes", []) or []:
            entry = dict(entry)
            kind = str(entry.pop("type", "")).lower()
            shapes.append(_build_shape(kind, entry))
        for key, kind in _SHAPE_LIST_KEYS.items():
            for entry in data.pop(key, []) or []:
                shapes.append(_build_shape(kind, dict(entry)))

        tile_layers = _build_layers(data, registry, layer_defaults)

        center = data.pop("center", None)
        known = {
            "width", "height", "zoom", "format", "quality", "min_zoom", "max_zoom", "bounds", "attribution",
        }
        unknown = set(data) - known
        if unknown:
            logger.warning(f"Ignoring unknown render options: {', '.join(sorted(unknown))}")

        return cls(
            width=data.get("width", 800),
            height=data.get("height", 800),
            center=tuple(center) if center is not None else None,
            zoom=data.get("zoom"),
            padding_x=padding_x,
            padding_y=padding_y,
            format=data.get("format", "png"),
            quality=data.get("quality"),
            shapes=shapes,
            bounds=[tuple(c) for c in data.get("bounds", []) or []],
            tile_layers=tile_layers,
            attribution=AttributionOptions.parse(data.get("attribution")),
            min_zoom=data.get("min_zoom"),
            max_zoom=data.get("max_zoom"),
        )


def _build_shape(kind: str, params: Dict[str, Any]) -> Shape:
    try:
        shape_cls = SHAPE_TYPES[kind]
    except KeyError:
        raise ValidationError(
            f"Unknown shape type '{kind}'. Use one of: {', '.join(SHAPE_TYPES)}", field="type"
        ) from None
    try:
        return shape_cls(**params)
    except TypeError as e:
        raise ValidationError(f"Invalid {kind} options: {e}", field=kind) from e


def _build_layers(
    data: Dict[str, Any],
    registry: Mapping[str, Mapping],
    layer_defaults: Dict[str, Any]
) -> List[TileLayerConfig]:
    layers: List[TileLayerConfig] = []

    basemap = data.pop("basemap", None)
    names: Sequence[str] = [basemap] if isinstance(basemap, str) else list(basemap or [])
    for name in names:
        layers.append(TileLayerConfig.from_basemap(name, registry=registry, **layer_defaults))

    tile_url = data.pop("tile_url", None)
    if tile_url:
        params = dict(layer_defaults)
        params["url_template"] = tile_url
        if data.get("tile_subdomains"):
            params["subdomains"] = tuple(data.pop("tile_subdomains"))
        layers.append(TileLayerConfig(**params))
    data.pop("tile_subdomains", None)

    for entry in data.pop("tile_layers", []) or []:
        params = {**layer_defaults, **dict(entry)}
        if "url" in params and "url_template" not in params:
            params["url_template"] = params.pop("url")
        try:
            layers.append(TileLayerConfig(**params))
        except TypeError as e:
            raise ValidationError(f"Invalid tile layer options: {e}", field="tile_layers") from e
    return layers

