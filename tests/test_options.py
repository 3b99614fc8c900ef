"""Tests for RenderOptions.from_dict and attribution parsing."""

import pytest

from static_maps.exceptions import ValidationError
from static_maps.features import Circle, Marker, Polygon, Polyline, ShapeKind, Text
from static_maps.options import AttributionOptions, RenderOptions, RenderResult


class TestAttributionOptions:

    @pytest.mark.parametrize(
        "value, show, text",
        [
            (None, True, None),
            (True, True, None),
            (False, False, None),
            ({"show": True, "text": "© Me"}, True, "© Me"),
            ("show:false|text:© Me", False, "© Me"),
            ("show:true", True, None),
            ("false", False, None),
            ("© OpenStreetMap contributors", True, "© OpenStreetMap contributors"),
        ],
    )
    def test_parse(self, value, show, text):
        parsed = AttributionOptions.parse(value)
        assert (parsed.show, parsed.text) == (show, text)

    def test_parse_rejects_other_types(self):
        with pytest.raises(ValidationError) as exc:
            AttributionOptions.parse(42)
        assert exc.value.field == "attribution"


class TestFromDict:
    """Tests for building options from plain mappings."""

    def test_markers_and_padding(self):
        opts = RenderOptions.from_dict({
            "width": 600,
            "height": 400,
            "padding": 20,
            "basemap": "osm",
            "markers": [{"coord": [0, 0]}, {"coord": [10, 10], "color": "navy"}],
        })
        assert (opts.width, opts.height, opts.padding_x, opts.padding_y) == (600, 400, 20, 20)
        assert [type(s) for s in opts.shapes] == [Marker, Marker]
        assert len(opts.tile_layers) == 1
        assert opts.tile_layers[0].url_template.startswith("https://tile.openstreetmap.org/")

    def test_padding_axes(self):
        opts = RenderOptions.from_dict({"padding": 5, "padding_y": 9, "center": [1, 2], "zoom": 3})
        assert (opts.padding_x, opts.padding_y) == (5, 9)
        assert opts.center == (1, 2)

    def test_typed_shapes(self):
        opts = RenderOptions.from_dict({
            "center": [0, 0],
            "shapes": [
                {"type": "Circle", "coord": [0, 0], "radius": 100},
                {"type": "polyline", "coords": [[0, 0], [1, 1], [2, 0]]},
                {"type": "polygon", "coords": [[0, 0], [1, 0], [1, 1]]},
            ],
            "texts": [{"coord": [0, 0], "text": "Origin"}],
        })
        assert [type(s) for s in opts.shapes] == [Circle, Polyline, Polygon, Text]
        assert opts.shapes[2].kind is ShapeKind.POLYGON

    def test_unknown_shape_type(self):
        with pytest.raises(ValidationError) as exc:
            RenderOptions.from_dict({"shapes": [{"type": "hexagon"}]})
        assert exc.value.field == "type"

    def test_bad_shape_fields(self):
        with pytest.raises(ValidationError) as exc:
            RenderOptions.from_dict({"circles": [{"coord": [0, 0], "radius": 5, "colour": "red"}]})
        assert exc.value.field == "circle"

    def test_shape_validation_errors_propagate(self):
        with pytest.raises(ValidationError) as exc:
            RenderOptions.from_dict({"circles": [{"coord": [0, 0], "radius": 0}]})
        assert exc.value.field == "radius"

    def test_basemap_list_and_custom_layers(self):
        opts = RenderOptions.from_dict(
            {
                "basemap": ["satellite", "carto-light"],
                "tile_url": "https://{s}.tiles.test/{z}/{x}/{y}.png",
                "tile_subdomains": ["x", "y"],
                "tile_layers": [{"url": "https://overlay.test/{z}/{x}/{y}.png", "attribution": "Overlay"}],
            },
            layer_defaults={"timeout": 2.5, "retries": 0},
        )
        assert len(opts.tile_layers) == 4
        assert opts.tile_layers[2].subdomains == ("x", "y")
        assert opts.tile_layers[3].attribution == "Overlay"
        assert all(layer.timeout == 2.5 and layer.retries == 0 for layer in opts.tile_layers)

    def test_unknown_basemap(self):
        with pytest.raises(ValidationError) as exc:
            RenderOptions.from_dict({"basemap": "atlantis"})
        assert exc.value.field == "basemap"

    def test_bad_tile_layer_fields(self):
        with pytest.raises(ValidationError) as exc:
            RenderOptions.from_dict({"tile_layers": [{"url": "https://t.test/{z}/{x}/{y}.png", "opacity": 1}]})
        assert exc.value.field == "tile_layers"

    def test_attribution_and_bounds(self):
        opts = RenderOptions.from_dict({"attribution": "show:false", "bounds": [[0, 0], [5, 5]]})
        assert opts.attribution.show is False
        assert opts.bounds == [(0, 0), (5, 5)]

    def test_validate_normalizes(self):
        opts = RenderOptions.from_dict({"format": "JPG", "center": [190, 0], "zoom": 2.0})
        opts.validate()
        assert opts.format == "jpg"
        assert opts.center == pytest.approx((-170.0, 0.0))
        assert opts.zoom == 2 and isinstance(opts.zoom, int)

    def test_min_zoom_above_max_zoom(self):
        opts = RenderOptions(center=(0, 0), min_zoom=10, max_zoom=5)
        with pytest.raises(ValidationError) as exc:
            opts.validate()
        assert exc.value.field == "min_zoom"


def test_render_result_length():
    assert RenderResult(data=b"abc", content_type="image/png").content_length == 3
