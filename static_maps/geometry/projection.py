"""
Web Mercator projection math for static map rendering.

This module converts between geographic coordinates (longitude, latitude
in degrees) and the tile/pixel space used by slippy-map tile servers. At
zoom ``z`` the world is ``2**z`` tiles wide, and each tile is
``tile_size`` pixels wide, so pixel coordinates scale as
``tile_size * 2**z``.

Latitudes beyond ±85.05112878° are clamped before projection and
longitudes outside [-180, 180] are wrapped, so none of these functions
raise for out-of-range input.

Example:
    >>> from static_maps.geometry import lonlat_to_pixel, pixel_to_lonlat
    >>> px, py = lonlat_to_pixel((13.4, 52.5), zoom=10)
    >>> pixel_to_lonlat(px, py, zoom=10)
    (13.4..., 52.5...)
"""

import math
from typing import Tuple

from ..constants import DEFAULT_TILE_SIZE, EQUATOR_METERS_PER_PIXEL, MAX_LATITUDE


def clamp_latitude(lat: float) -> float:
    """Clamp a latitude to the Web Mercator valid range."""
    return max(-MAX_LATITUDE, min(MAX_LATITUDE, lat))


def wrap_longitude(lon: float) -> float:
    """Wrap a longitude into [-180, 180], leaving in-range values untouched."""
    if -180.0 <= lon <= 180.0:
        return lon
    return ((lon + 180.0) % 360.0) - 180.0


# ============================================================================
# Tile-unit forms
# ============================================================================

def lon_to_tile_x(lon: float, zoom: float) -> float:
    return (wrap_longitude(lon) + 180.0) / 360.0 * (2.0 ** zoom)


def lat_to_tile_y(lat: float, zoom: float) -> float:
    """Project a latitude to fractional tile rows (inverse Gudermannian)."""
    phi = math.radians(clamp_latitude(lat))
    merc = math.log(math.tan(phi) + 1.0 / math.cos(phi))
    return (1.0 - merc / math.pi) / 2.0 * (2.0 ** zoom)


def tile_x_to_lon(x: float, zoom: float) -> float:
    return x / (2.0 ** zoom) * 360.0 - 180.0


def tile_y_to_lat(y: float, zoom: float) -> float:
    n = math.pi * (1.0 - 2.0 * y / (2.0 ** zoom))
    return math.degrees(math.atan(math.sinh(n)))


# ============================================================================
# Pixel forms
# ============================================================================

def lon_to_pixel_x(lon: float, zoom: float, tile_size: int = DEFAULT_TILE_SIZE) -> float:
    """World pixel x of a longitude at ``zoom``."""
    return lon_to_tile_x(lon, zoom) * tile_size


def lat_to_pixel_y(lat: float, zoom: float, tile_size: int = DEFAULT_TILE_SIZE) -> float:
    """World pixel y of a latitude at ``zoom`` (clamped at the Mercator limit)."""
    return lat_to_tile_y(lat, zoom) * tile_size


def pixel_x_to_lon(px: float, zoom: float, tile_size: int = DEFAULT_TILE_SIZE) -> float:
    return tile_x_to_lon(px / tile_size, zoom)


def pixel_y_to_lat(py: float, zoom: float, tile_size: int = DEFAULT_TILE_SIZE) -> float:
    return tile_y_to_lat(py / tile_size, zoom)


def lonlat_to_pixel(
    coord: Tuple[float, float],
    zoom: float,
    tile_size: int = DEFAULT_TILE_SIZE
) -> Tuple[float, float]:
    """
    Project a (lon, lat) pair to world pixel coordinates.

    Args:
        coord: (longitude, latitude) in degrees
        zoom: Zoom level (fractional zooms are accepted)
        tile_size: Tile edge in pixels

    Returns:
        (x, y) world pixel coordinates, origin at the north-west corner
    """
    lon, lat = coord
    return lon_to_pixel_x(lon, zoom, tile_size), lat_to_pixel_y(lat, zoom, tile_size)


def pixel_to_lonlat(
    px: float,
    py: float,
    zoom: float,
    tile_size: int = DEFAULT_TILE_SIZE
) -> Tuple[float, float]:
    """Inverse of :func:`lonlat_to_pixel`."""
    return pixel_x_to_lon(px, zoom, tile_size), pixel_y_to_lat(py, zoom, tile_size)


# ============================================================================
# Distances and tile addressing
# ============================================================================

def meter_to_pixel(
    meters: float,
    zoom: float,
    lat: float,
    tile_size: int = DEFAULT_TILE_SIZE
) -> float:
    """
    Convert a ground distance to pixels at a given latitude and zoom.

    Uses the Web Mercator ground resolution, which shrinks with
    ``cos(latitude)`` away from the equator.

    Args:
        meters: Ground distance in meters
        zoom: Zoom level
        lat: Latitude where the distance is measured
        tile_size: Tile edge in pixels

    Returns:
        Distance in pixels
    """
    resolution = EQUATOR_METERS_PER_PIXEL * math.cos(math.radians(clamp_latitude(lat))) / (2.0 ** zoom)
    return meters / resolution * (tile_size / DEFAULT_TILE_SIZE)


def tile_xy_to_quadkey(x: int, y: int, zoom: int) -> str:
    """Bing-style quadkey for tile (x, y) at ``zoom``."""
    digits = []
    for i in range(zoom, 0, -1):
        digit = 0
        mask = 1 << (i - 1)
        if x & mask:
            digit += 1
        if y & mask:
            digit += 2
        digits.append(str(digit))
    return "".join(digits)
