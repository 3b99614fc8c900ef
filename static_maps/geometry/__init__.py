"""
Projection and geometry utilities for static_maps.

All functions here are pure and side-effect free:
- Web Mercator conversions between lon/lat, tile units and world pixels
- Ground distance to pixel scaling and quadkey tile addressing
- Great-circle interpolation for long polylines

Example:
    >>> from static_maps.geometry import lonlat_to_pixel, geodesic_line
    >>> lonlat_to_pixel((0.0, 0.0), zoom=1)
    (256.0, 256.0)
    >>> geodesic_line((0.0, 0.0), (0.0, 0.0))
    [(0.0, 0.0)]
"""

from .projection import (
    clamp_latitude,
    wrap_longitude,
    lon_to_tile_x,
    lat_to_tile_y,
    tile_x_to_lon,
    tile_y_to_lat,
    lon_to_pixel_x,
    lat_to_pixel_y,
    pixel_x_to_lon,
    pixel_y_to_lat,
    lonlat_to_pixel,
    pixel_to_lonlat,
    meter_to_pixel,
    tile_xy_to_quadkey,
)
from .geodesic import angular_distance, geodesic_line, haversine_distance

__all__ = [
    "clamp_latitude",
    "wrap_longitude",
    "lon_to_tile_x",
    "lat_to_tile_y",
    "tile_x_to_lon",
    "tile_y_to_lat",
    "lon_to_pixel_x",
    "lat_to_pixel_y",
    "pixel_x_to_lon",
    "pixel_y_to_lat",
    "lonlat_to_pixel",
    "pixel_to_lonlat",
    "meter_to_pixel",
    "tile_xy_to_quadkey",
    "angular_distance",
    "geodesic_line",
    "haversine_distance",
]
