"""
Constants and fixed parameters for the static_maps package.

This module defines the basemap registry, Web Mercator and geodesy
constants, default shape styling, attribution badge geometry and the
supported output formats.
"""

from types import MappingProxyType

# ============================================================================
# Basemap Registry
# ============================================================================

_ESRI_ATTRIBUTION = "Tiles © Esri"
_OSM_ATTRIBUTION = "© OpenStreetMap contributors"
_STAMEN_ATTRIBUTION = "Map tiles by Stamen Design, under CC BY 3.0. Data by OpenStreetMap"
_CARTO_ATTRIBUTION = "© OpenStreetMap contributors © CARTO"

_CARTO_SUBDOMAINS = ("a", "b", "c", "d")


def _basemap(url, attribution, max_zoom=19, subdomains=()):
    return MappingProxyType({
        "url": url,
        "attribution": attribution,
        "max_zoom": max_zoom,
        "subdomains": tuple(subdomains),
    })


# Built once at import; TileLayerConfig.from_basemap takes it as an argument.
BASEMAPS = MappingProxyType({
    "streets": _basemap(
        "https://services.arcgisonline.com/ArcGIS/rest/services/World_Street_Map/MapServer/tile/{z}/{y}/{x}",
        _ESRI_ATTRIBUTION,
    ),
    "satellite": _basemap(
        "https://server.arcgisonline.com/ArcGIS/rest/services/World_Imagery/MapServer/tile/{z}/{y}/{x}",
        "Tiles © Esri, Maxar, Earthstar Geographics",
    ),
    "topo": _basemap(
        "https://server.arcgisonline.com/ArcGIS/rest/services/World_Topo_Map/MapServer/tile/{z}/{y}/{x}",
        _ESRI_ATTRIBUTION,
    ),
    "gray-background": _basemap(
        "https://server.arcgisonline.com/ArcGIS/rest/services/Canvas/World_Light_Gray_Base/MapServer/tile/{z}/{y}/{x}",
        _ESRI_ATTRIBUTION,
        max_zoom=16,
    ),
    "oceans": _basemap(
        "https://server.arcgisonline.com/ArcGIS/rest/services/Ocean_Basemap/MapServer/tile/{z}/{y}/{x}",
        _ESRI_ATTRIBUTION,
        max_zoom=13,
    ),
    "national-geographic": _basemap(
        "https://server.arcgisonline.com/ArcGIS/rest/services/NatGeo_World_Map/MapServer/tile/{z}/{y}/{x}",
        "Tiles © Esri, National Geographic",
        max_zoom=16,
    ),
    "osm": _basemap(
        "https://tile.openstreetmap.org/{z}/{x}/{y}.png",
        _OSM_ATTRIBUTION,
    ),
    "otm": _basemap(
        "https://tile.opentopomap.org/{z}/{x}/{y}.png",
        "© OpenStreetMap contributors, SRTM | © OpenTopoMap (CC-BY-SA)",
        max_zoom=17,
    ),
    "stamen-toner": _basemap(
        "https://stamen-tiles.a.ssl.fastly.net/toner/{z}/{x}/{y}.png",
        _STAMEN_ATTRIBUTION,
    ),
    "stamen-toner-background": _basemap(
        "https://stamen-tiles.a.ssl.fastly.net/toner-background/{z}/{x}/{y}.png",
        _STAMEN_ATTRIBUTION,
    ),
    "stamen-toner-lite": _basemap(
        "https://stamen-tiles.a.ssl.fastly.net/toner-lite/{z}/{x}/{y}.png",
        _STAMEN_ATTRIBUTION,
    ),
    "stamen-terrain": _basemap(
        "https://stamen-tiles.a.ssl.fastly.net/terrain/{z}/{x}/{y}.png",
        _STAMEN_ATTRIBUTION,
        max_zoom=18,
    ),
    "stamen-terrain-background": _basemap(
        "https://stamen-tiles.a.ssl.fastly.net/terrain-background/{z}/{x}/{y}.png",
        _STAMEN_ATTRIBUTION,
        max_zoom=18,
    ),
    "stamen-watercolor": _basemap(
        "https://stamen-tiles.a.ssl.fastly.net/watercolor/{z}/{x}/{y}.png",
        _STAMEN_ATTRIBUTION,
        max_zoom=16,
    ),
    "carto-light": _basemap(
        "https://cartodb-basemaps-{s}.global.ssl.fastly.net/light_all/{z}/{x}/{y}.png",
        _CARTO_ATTRIBUTION,
        subdomains=_CARTO_SUBDOMAINS,
    ),
    "carto-dark": _basemap(
        "https://cartodb-basemaps-{s}.global.ssl.fastly.net/dark_all/{z}/{x}/{y}.png",
        _CARTO_ATTRIBUTION,
        subdomains=_CARTO_SUBDOMAINS,
    ),
    "carto-voyager": _basemap(
        "https://cartodb-basemaps-{s}.global.ssl.fastly.net/rastertiles/voyager/{z}/{x}/{y}.png",
        _CARTO_ATTRIBUTION,
        subdomains=_CARTO_SUBDOMAINS,
    ),
})

# ============================================================================
# Projection & Geodesy
# ============================================================================

MAX_LATITUDE = 85.05112878
DEFAULT_TILE_SIZE = 256

# Ground resolution at zoom 0 on the equator, meters per 256px-tile pixel
EQUATOR_METERS_PER_PIXEL = 156543.03392
METERS_PER_DEGREE = 111320.0
EARTH_RADIUS_M = 6371008.8

GEODESIC_STEP_DEGREES = 1.0
GEODESIC_MAX_SEGMENTS = 512

# ============================================================================
# Shape Styling Defaults
# ============================================================================

DEFAULT_STROKE_COLOR = "#000000BB"
DEFAULT_STROKE_WIDTH = 3

MARKER_DEFAULTS = {
    "width": 20,
    "height": 20,
    "color": "#d9534f",
    "resize_mode": "cover",
}
MARKER_RESIZE_MODES = ("cover", "contain", "fill", "inside", "outside")

TEXT_DEFAULTS = {
    "size": 12,
    "anchor": "start",
    "color": "#000000BB",
    "fill": "#000000",
    "width": 1,
}
TEXT_ANCHORS = ("start", "middle", "end")
# Average glyph advance as a fraction of font size, for extent estimates
TEXT_CHAR_WIDTH_RATIO = 0.6

# ============================================================================
# Attribution Badge
# ============================================================================

ATTRIBUTION_STYLE = {
    "font_size": 12,
    "padding_x": 10,
    "padding_y": 4,
    "margin": 5,
    "radius": 4,
    "background": (0, 0, 0, 128),
    "text_color": (255, 255, 255, 242),
}

# ============================================================================
# Output Formats
# ============================================================================

OUTPUT_FORMATS = MappingProxyType({
    "png": {"pil_format": "PNG", "content_type": "image/png"},
    "jpeg": {"pil_format": "JPEG", "content_type": "image/jpeg"},
    "jpg": {"pil_format": "JPEG", "content_type": "image/jpeg"},
    "webp": {"pil_format": "WEBP", "content_type": "image/webp"},
    "pdf": {"pil_format": "PDF", "content_type": "application/pdf"},
})

VECTOR_TILE_SUFFIXES = (".pbf", ".pmtiles", ".mvt")
RETRYABLE_STATUS_CODES = frozenset({429, 500, 502, 503, 504})
