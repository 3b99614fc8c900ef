"""Tests for the static-maps command line interface."""

import argparse
import functools
from unittest import mock

import pytest
import yaml
from PIL import Image as PILImage

from static_maps import cli
from static_maps.api import create_map
from static_maps.tiles import MemoryTileCache

from conftest import FakeTransport

TILE_URL = "https://tiles.test/{z}/{x}/{y}.png"


@pytest.fixture
def fake_network():
    """Route CLI renders through an in-memory transport."""
    transport = FakeTransport()
    patched = functools.partial(create_map, transport=transport, cache=MemoryTileCache())
    with mock.patch.object(cli, "create_map", side_effect=patched):
        yield transport


class TestParsers:

    def test_parse_lonlat(self):
        assert cli.parse_lonlat("2.35, 48.85") == (2.35, 48.85)

    @pytest.mark.parametrize("value", ["2.35", "a,b", "1,2,3"])
    def test_parse_lonlat_rejects(self, value):
        with pytest.raises(argparse.ArgumentTypeError):
            cli.parse_lonlat(value)

    def test_parse_path(self):
        assert cli.parse_path("0,0;10,10;20,0") == [(0.0, 0.0), (10.0, 10.0), (20.0, 0.0)]
        with pytest.raises(argparse.ArgumentTypeError):
            cli.parse_path("0,0")


class TestCommands:
    """Tests for CLI subcommands."""

    def test_no_command_prints_help(self, capsys):
        assert cli.main([]) == 1
        assert "usage" in capsys.readouterr().out.lower()

    def test_basemaps(self, capsys):
        assert cli.main(["basemaps"]) == 0
        out = capsys.readouterr().out
        assert "osm" in out
        assert "carto-dark" in out

    def test_basemaps_urls(self, capsys):
        assert cli.main(["basemaps", "--urls"]) == 0
        assert "https://tile.openstreetmap.org/{z}/{x}/{y}.png" in capsys.readouterr().out

    def test_render_markers(self, fake_network, temp_dir, capsys):
        output = temp_dir / "fit.png"
        code = cli.main([
            "render",
            "--marker", "0,0",
            "--marker", "10,10",
            "--width", "600",
            "--height", "400",
            "--padding", "20",
            "--tile-url", TILE_URL,
            "--output", str(output),
        ])
        assert code == 0
        assert "Success! Map saved to:" in capsys.readouterr().out
        with PILImage.open(output) as img:
            assert img.size == (600, 400)
        assert fake_network.calls and all("/4/" in url for url in fake_network.calls)

    def test_render_from_options_file(self, fake_network, temp_dir, capsys):
        options_file = temp_dir / "map.yaml"
        options_file.write_text(yaml.safe_dump({
            "width": 200,
            "height": 150,
            "center": [2.3522, 48.8566],
            "zoom": 12,
            "basemap": "osm",
            "circles": [{"coord": [2.3522, 48.8566], "radius": 300, "fill": "#FF000055"}],
        }))
        output = temp_dir / "paris.webp"
        code = cli.main([
            "render", "--silent",
            "--options", str(options_file),
            "--polyline", "2.34,48.85;2.36,48.86;2.37,48.85",
            "--format", "webp",
            "--output", str(output),
        ])
        assert code == 0
        assert capsys.readouterr().out.strip() == str(output)
        with PILImage.open(output) as img:
            assert img.format == "WEBP"
            assert img.size == (200, 150)
        assert all(url.startswith("https://tile.openstreetmap.org/12/") for url in fake_network.calls)

    def test_render_error_returns_one(self, fake_network, temp_dir, capsys):
        code = cli.main(["render", "--tile-url", TILE_URL, "--output", str(temp_dir / "x.png")])
        assert code == 1
        assert "Error:" in capsys.readouterr().err

    def test_render_unknown_basemap(self, fake_network, temp_dir, capsys):
        code = cli.main(["render", "--center", "0,0", "--zoom", "2", "--basemap", "atlantis",
                         "--output", str(temp_dir / "x.png")])
        assert code == 1
        assert "atlantis" in capsys.readouterr().err

    def test_bad_config_exits(self, temp_dir):
        with pytest.raises(SystemExit):
            cli.main(["render", "--config", str(temp_dir / "missing.yaml"), "--center", "0,0", "--zoom", "1"])

    def test_config_file_and_overrides(self, fake_network, temp_dir):
        config_file = temp_dir / "config.yaml"
        config_file.write_text(yaml.safe_dump({"default_basemap": "carto-light", "output_dir": str(temp_dir / "out")}))
        code = cli.main(["render", "--config", str(config_file), "--center", "0,0", "--zoom", "1",
                         "--width", "64", "--height", "64", "--retries", "0", "--no-cache"])
        assert code == 0
        assert (temp_dir / "out" / "map.png").exists()
        assert all("/light_all/1/" in url for url in fake_network.calls)

    def test_build_render_kwargs_attribution(self):
        args = argparse.Namespace(
            options=None, width=None, height=None, zoom=None, quality=None, format=None, center=(0.0, 0.0),
            padding=None, padding_x=None, padding_y=None, basemap=None, tile_url=None, subdomains=None,
            marker=None, marker_color="red", polyline=None, line_color="black", line_width=3,
            no_attribution=False, attribution="© Me",
        )
        kwargs = cli.build_render_kwargs(args)
        assert kwargs["attribution"] == {"show": True, "text": "© Me"}
        args.no_attribution = True
        assert cli.build_render_kwargs(args)["attribution"] is False
