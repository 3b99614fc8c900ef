"""Tests for bound aggregation and the center/zoom solver."""

import pytest

from static_maps.config import Config
from static_maps.exceptions import ViewportError
from static_maps.features import Circle, Marker, Text
from static_maps.options import RenderOptions
from static_maps.rendering import Bound, Viewport, fit_zoom, solve_viewport
from static_maps.rendering.renderer import StaticMap


def _bound(*coords):
    bound = Bound()
    for coord in coords:
        bound.include_point(coord)
    return bound


def _assert_inside(viewport, coords, padding_x=0, padding_y=0):
    for coord in coords:
        x, y = viewport.to_canvas(coord)
        assert padding_x <= x <= viewport.width - padding_x, f"{coord} -> x={x}"
        assert padding_y <= y <= viewport.height - padding_y, f"{coord} -> y={y}"


class TestBound:

    def test_empty(self):
        bound = Bound()
        assert bound.is_empty
        with pytest.raises(ViewportError):
            bound.extent

    def test_aggregates_shapes(self):
        bound = Bound()
        bound.include_shape(Marker((0, 0)))
        bound.include_shape(Circle((10, 10), radius=111320))
        assert bound.extent == pytest.approx((0.0, 0.0, 10.0 + 1.0 / 0.984807753, 11.0), rel=1e-6)

    def test_text_without_coordinate_is_ignored(self):
        bound = Bound().include_shape(Text(text="attribution only"))
        assert bound.is_empty


class TestSolveViewport:
    """Tests for solve_viewport."""

    def test_two_markers_fit(self):
        coords = [(0.0, 0.0), (10.0, 10.0)]
        viewport = solve_viewport(_bound(*coords), 600, 400, padding_x=20, padding_y=20)
        assert viewport.center == (5.0, 5.0)
        assert viewport.zoom == 4
        _assert_inside(viewport, coords, 20, 20)

    def test_explicit_center_and_zoom_pass_through(self):
        viewport = solve_viewport(Bound(), 300, 300, center=(2.3522, 48.8566), zoom=12)
        assert viewport == Viewport((2.3522, 48.8566), 12, 300, 300)

    def test_explicit_zoom_fits_center(self):
        viewport = solve_viewport(_bound((0, 0), (10, 10)), 600, 400, zoom=7)
        assert viewport.center == (5.0, 5.0)
        assert viewport.zoom == 7

    def test_no_center_no_shapes(self):
        with pytest.raises(ViewportError):
            solve_viewport(Bound(), 300, 300)

    def test_center_without_shapes_uses_single_point_zoom(self):
        viewport = solve_viewport(Bound(), 300, 300, center=(1.0, 2.0), single_point_zoom=13)
        assert viewport.zoom == 13
        assert viewport.center == (1.0, 2.0)

    def test_single_point(self):
        viewport = solve_viewport(_bound((7.0, 45.0)), 300, 300, single_point_zoom=15)
        assert viewport.zoom == 15
        assert viewport.center == (7.0, 45.0)

    def test_single_point_zoom_is_clamped(self):
        viewport = solve_viewport(_bound((7.0, 45.0)), 300, 300, single_point_zoom=15, max_zoom=10)
        assert viewport.zoom == 10

    def test_padding_leaves_no_room(self):
        with pytest.raises(ViewportError):
            solve_viewport(_bound((0, 0), (1, 1)), 100, 100, padding_x=50)

    def test_explicit_center_keeps_all_shapes_visible(self):
        coords = [(0.0, 0.0), (10.0, 10.0)]
        viewport = solve_viewport(_bound(*coords), 600, 400, padding_x=20, padding_y=20, center=(0.0, 0.0))
        assert viewport.center == (0.0, 0.0)
        _assert_inside(viewport, coords, 20, 20)
        # Off-center fitting needs a wider view than the centered one
        assert viewport.zoom < 4

    @pytest.mark.parametrize(
        "coords",
        [
            [(-120.0, 30.0), (-70.0, 48.0)],
            [(-10.0, 60.0), (30.0, 75.0)],
            [(150.0, -40.0), (170.0, -30.0)],
            [(0.0, -60.0), (0.5, 60.0)],
        ],
    )
    def test_fitted_shapes_stay_inside(self, coords):
        viewport = solve_viewport(_bound(*coords), 500, 300, padding_x=10, padding_y=10)
        _assert_inside(viewport, coords, 10, 10)

    def test_zoom_is_clamped(self):
        viewport = solve_viewport(_bound((0.0, 0.0), (0.0001, 0.0001)), 600, 400, max_zoom=12)
        assert viewport.zoom == 12
        viewport = solve_viewport(_bound((-170.0, -80.0), (170.0, 80.0)), 64, 64, min_zoom=2)
        assert viewport.zoom == 2


class TestFitZoom:

    def test_point_has_no_fit(self):
        assert fit_zoom((1.0, 1.0, 1.0, 1.0), 500, 500) is None

    def test_axis_minimum(self):
        # Wide and flat: longitude decides
        assert fit_zoom((0.0, 0.0, 90.0, 0.0), 256, 256) == 2


class TestViewport:

    def test_center_maps_to_canvas_center(self):
        viewport = Viewport((13.4, 52.5), 10, 640, 480)
        assert viewport.to_canvas((13.4, 52.5)) == pytest.approx((320.0, 240.0))

    def test_round_trip(self):
        viewport = Viewport((13.4, 52.5), 10, 640, 480)
        lon, lat = viewport.to_lonlat(*viewport.to_canvas((13.5, 52.4)))
        assert (lon, lat) == pytest.approx((13.5, 52.4))


class TestTextRefit:
    """Labels are fitted by their box, not just their anchor point."""

    def test_label_box_stays_inside(self, transport):
        # ~511 px wide: fits next to a 10 degree span only below zoom 3
        label = Text((-90.0, 10.0), text=("East marker " * 6).strip(), size=12)
        markers = [Marker((-100.0, 0.0)), Marker((-90.0, 10.0))]
        options = RenderOptions(width=600, height=400, padding_x=20, padding_y=20, shapes=markers + [label])
        viewport = StaticMap(options, config=Config(), transport=transport).resolve_viewport()

        assert viewport.zoom == 2
        min_lon, min_lat, max_lon, max_lat = label.extent(zoom=viewport.zoom)
        _assert_inside(viewport, [(min_lon, min_lat), (max_lon, max_lat), (-100.0, 0.0)], 20, 20)

    def test_short_label_keeps_point_fit(self, transport):
        options = RenderOptions(
            width=600,
            height=400,
            padding_x=20,
            padding_y=20,
            shapes=[Marker((0.0, 0.0)), Marker((10.0, 10.0)), Text((10.0, 10.0), text="B")],
        )
        viewport = StaticMap(options, config=Config(), transport=transport).resolve_viewport()
        assert viewport.zoom == 4

    def test_label_wider_than_canvas_ends_at_min_zoom(self, transport):
        options = RenderOptions(
            width=200,
            height=200,
            min_zoom=1,
            shapes=[Marker((0.0, 0.0)), Text((0.0, 0.0), text="x" * 100)],
        )
        viewport = StaticMap(options, config=Config(), transport=transport).resolve_viewport()
        assert viewport.zoom == 1

    def test_labels_do_not_affect_explicit_zoom(self, transport):
        options = RenderOptions(
            width=300,
            height=300,
            zoom=6,
            shapes=[Marker((0.0, 0.0)), Text((0.0, 0.0), text="Origin")],
        )
        viewport = StaticMap(options, config=Config(), transport=transport).resolve_viewport()
        assert viewport.zoom == 6
