"""Tests for Web Mercator projection and great-circle interpolation."""

import math

import pytest

from static_maps.constants import MAX_LATITUDE
from static_maps.geometry import (
    angular_distance,
    clamp_latitude,
    geodesic_line,
    haversine_distance,
    lat_to_tile_y,
    lon_to_tile_x,
    lonlat_to_pixel,
    meter_to_pixel,
    pixel_to_lonlat,
    tile_xy_to_quadkey,
    wrap_longitude,
)


class TestProjection:
    """Tests for lon/lat <-> tile/pixel conversions."""

    def test_origin_maps_to_world_center(self):
        assert lonlat_to_pixel((0.0, 0.0), zoom=0) == pytest.approx((128.0, 128.0))
        assert lonlat_to_pixel((0.0, 0.0), zoom=1) == pytest.approx((256.0, 256.0))

    def test_world_corners(self):
        assert lon_to_tile_x(-180.0, 3) == pytest.approx(0.0)
        assert lon_to_tile_x(180.0, 3) == pytest.approx(8.0)
        assert lat_to_tile_y(MAX_LATITUDE, 3) == pytest.approx(0.0, abs=1e-6)
        assert lat_to_tile_y(-MAX_LATITUDE, 3) == pytest.approx(8.0, abs=1e-6)

    @pytest.mark.parametrize("coord", [(13.4, 52.5), (-74.0, 40.7), (151.2, -33.9), (0.0, 0.0)])
    def test_round_trip(self, coord):
        px, py = lonlat_to_pixel(coord, zoom=10)
        lon, lat = pixel_to_lonlat(px, py, zoom=10)
        assert lon == pytest.approx(coord[0], abs=1e-9)
        assert lat == pytest.approx(coord[1], abs=1e-9)

    def test_latitude_is_clamped(self):
        assert clamp_latitude(90.0) == MAX_LATITUDE
        assert clamp_latitude(-90.0) == -MAX_LATITUDE
        # Poles project to the world edge instead of infinity
        assert lat_to_tile_y(90.0, 2) == pytest.approx(lat_to_tile_y(MAX_LATITUDE, 2))

    def test_longitude_wrapping(self):
        assert wrap_longitude(180.0) == 180.0
        assert wrap_longitude(-180.0) == -180.0
        assert wrap_longitude(190.0) == pytest.approx(-170.0)
        assert wrap_longitude(-190.0) == pytest.approx(170.0)
        assert wrap_longitude(540.0) == pytest.approx(-180.0)

    def test_meter_to_pixel_equator(self):
        # One pixel at zoom 0 on the equator is ~156 km
        assert meter_to_pixel(156543.03392, zoom=0, lat=0.0) == pytest.approx(1.0)
        assert meter_to_pixel(1000.0, zoom=10, lat=0.0) == pytest.approx(1000.0 / (156543.03392 / 1024))

    def test_meter_to_pixel_grows_with_latitude(self):
        at_equator = meter_to_pixel(1000.0, zoom=12, lat=0.0)
        at_60 = meter_to_pixel(1000.0, zoom=12, lat=60.0)
        assert at_60 == pytest.approx(at_equator / math.cos(math.radians(60.0)))

    def test_meter_to_pixel_scales_with_tile_size(self):
        assert meter_to_pixel(500.0, 5, 10.0, tile_size=512) == pytest.approx(2 * meter_to_pixel(500.0, 5, 10.0))

    def test_quadkey(self):
        assert tile_xy_to_quadkey(3, 5, 3) == "213"
        assert tile_xy_to_quadkey(0, 0, 1) == "0"
        assert tile_xy_to_quadkey(0, 0, 0) == ""


class TestGeodesic:
    """Tests for great-circle expansion."""

    def test_same_point_returns_single_point(self):
        assert geodesic_line((12.0, 34.0), (12.0, 34.0)) == [(12.0, 34.0)]

    def test_quarter_meridian_is_densified(self):
        path = geodesic_line((0.0, 0.0), (0.0, 90.0))
        assert len(path) > 2
        assert path[0] == (0.0, 0.0)
        assert path[-1] == (0.0, 90.0)
        lats = [lat for _, lat in path]
        assert lats == sorted(lats)

    def test_segment_count_follows_step(self):
        path = geodesic_line((0.0, 0.0), (10.0, 0.0), step_degrees=3.0)
        assert len(path) == 5

    def test_short_segment_has_at_least_two_segments(self):
        path = geodesic_line((0.0, 0.0), (0.1, 0.0))
        assert len(path) == 3

    def test_segment_count_is_capped(self):
        path = geodesic_line((0.0, 0.0), (179.0, 0.0), step_degrees=0.01, max_segments=50)
        assert len(path) == 51

    def test_antipodal_points_keep_straight_segment(self):
        assert geodesic_line((0.0, 0.0), (180.0, 0.0)) == [(0.0, 0.0), (180.0, 0.0)]

    def test_points_lie_on_great_circle(self):
        a, b = (-0.13, 51.5), (-74.0, 40.7)
        total = angular_distance(a, b)
        for point in geodesic_line(a, b):
            assert angular_distance(a, point) + angular_distance(point, b) == pytest.approx(total, abs=1e-9)

    def test_great_circle_bulges_poleward(self):
        # London -> New York passes north of both endpoints
        path = geodesic_line((-0.13, 51.5), (-74.0, 40.7))
        assert max(lat for _, lat in path) > 51.5

    def test_haversine_distance(self):
        # One degree of latitude is ~111.2 km
        assert haversine_distance((0.0, 0.0), (0.0, 1.0)) == pytest.approx(111195.0, rel=1e-3)
