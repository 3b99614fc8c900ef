"""
Great-circle helpers for long-distance polylines.

A straight segment between two lon/lat points, once projected to Web
Mercator, drifts away from the shortest path on the sphere. Two-point
polylines are therefore expanded into a great-circle arc with spherical
linear interpolation before drawing.
"""

import logging
import math
from typing import List, Sequence, Tuple

import numpy as np

from ..constants import EARTH_RADIUS_M, GEODESIC_MAX_SEGMENTS, GEODESIC_STEP_DEGREES
from .projection import wrap_longitude

logger = logging.getLogger("static_maps.geometry.geodesic")

Coordinate = Tuple[float, float]


def angular_distance(a: Sequence[float], b: Sequence[float]) -> float:
    """Central angle between two (lon, lat) points, in radians."""
    lon1, lat1 = np.radians(a[0]), np.radians(a[1])
    lon2, lat2 = np.radians(b[0]), np.radians(b[1])
    cos_delta = (
        np.sin(lat1) * np.sin(lat2)
        + np.cos(lat1) * np.cos(lat2) * np.cos(lon2 - lon1)
    )
    return float(np.arccos(np.clip(cos_delta, -1.0, 1.0)))


def haversine_distance(a: Sequence[float], b: Sequence[float]) -> float:
    """Great-circle distance in meters between two (lon, lat) points."""
    lon1, lat1, lon2, lat2 = map(math.radians, (a[0], a[1], b[0], b[1]))
    h = (
        math.sin((lat2 - lat1) / 2.0) ** 2
        + math.cos(lat1) * math.cos(lat2) * math.sin((lon2 - lon1) / 2.0) ** 2
    )
    return 2.0 * EARTH_RADIUS_M * math.asin(min(1.0, math.sqrt(h)))


def geodesic_line(
    a: Sequence[float],
    b: Sequence[float],
    step_degrees: float = GEODESIC_STEP_DEGREES,
    max_segments: int = GEODESIC_MAX_SEGMENTS
) -> List[Coordinate]:
    """
    Interpolate the great-circle path from ``a`` to ``b``.

    The arc is split into ``ceil(distance / step_degrees)`` segments (at
    least 2, at most ``max_segments``), and each intermediate point is
    found by slerp between the two unit vectors.

    Args:
        a: Start (lon, lat) in degrees
        b: End (lon, lat) in degrees
        step_degrees: Target angular length of one segment
        max_segments: Upper bound on the number of segments

    Returns:
        List of (lon, lat) tuples starting at ``a`` and ending at ``b``.
        Coincident endpoints give ``[a]``. Antipodal endpoints, where
        the great circle is not unique, give ``[a, b]``.

    Example:
        >>> path = geodesic_line((0.0, 0.0), (0.0, 90.0))
        >>> len(path) > 2
        True
    """
    start = (float(a[0]), float(a[1]))
    end = (float(b[0]), float(b[1]))

    delta = angular_distance(start, end)
    if delta < 1e-12:
        return [start]

    sin_delta = math.sin(delta)
    if abs(sin_delta) < 1e-12:
        logger.debug(f"Antipodal endpoints {start} -> {end}, keeping straight segment")
        return [start, end]

    segments = int(math.ceil(math.degrees(delta) / step_degrees))
    segments = max(2, min(max_segments, segments))

    lon1, lat1 = np.radians(start[0]), np.radians(start[1])
    lon2, lat2 = np.radians(end[0]), np.radians(end[1])

    f = np.linspace(0.0, 1.0, segments + 1)
    wa = np.sin((1.0 - f) * delta) / sin_delta
    wb = np.sin(f * delta) / sin_delta

    x = wa * np.cos(lat1) * np.cos(lon1) + wb * np.cos(lat2) * np.cos(lon2)
    y = wa * np.cos(lat1) * np.sin(lon1) + wb * np.cos(lat2) * np.sin(lon2)
    z = wa * np.sin(lat1) + wb * np.sin(lat2)

    lats = np.degrees(np.arctan2(z, np.hypot(x, y)))
    lons = np.degrees(np.arctan2(y, x))

    path = [(wrap_longitude(float(lon)), float(lat)) for lon, lat in zip(lons, lats)]
    # Pin the endpoints; atan2 is unstable at the poles
    path[0] = start
    path[-1] = end
    return path
