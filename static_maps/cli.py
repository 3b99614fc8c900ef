"""
Command-line interface for the static_maps package.

Provides an argparse-based CLI with subcommands for rendering maps and
listing the built-in basemaps.

Usage:
    static-maps render --center 2.3522,48.8566 --zoom 12 --width 300 --height 300 --output paris.png
    static-maps render --marker 0,0 --marker 10,10 --width 600 --height 400 --padding 20 --output fit.png
    static-maps render --options map.yaml --output map.webp --format webp
    static-maps basemaps
"""

import argparse
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml

from .api import create_map, list_basemaps
from .config import Config
from .constants import OUTPUT_FORMATS
from .exceptions import StaticMapsError
from .logging_config import get_logger, setup_logging

logger = get_logger("cli")


def setup_logging_from_args(args: argparse.Namespace) -> None:
    """
    Configure logging based on command-line arguments.

    Args:
        args: Parsed command-line arguments with verbose, quiet, silent, log_file
    """
    if getattr(args, "silent", False):
        verbosity = -2
    elif getattr(args, "quiet", False):
        verbosity = -1
    elif getattr(args, "verbose", False):
        verbosity = 1
    else:
        verbosity = 0

    setup_logging(verbosity=verbosity, log_file=getattr(args, "log_file", None))


def parse_lonlat(value: str) -> Tuple[float, float]:
    """
    Parse a "LON,LAT" string.

    Raises:
        argparse.ArgumentTypeError: If the value is not two numbers
    """
    parts = [p.strip() for p in value.split(",")]
    if len(parts) != 2:
        raise argparse.ArgumentTypeError(f"Expected LON,LAT, got '{value}'")
    try:
        return float(parts[0]), float(parts[1])
    except ValueError:
        raise argparse.ArgumentTypeError(f"Expected numeric LON,LAT, got '{value}'") from None


def parse_path(value: str) -> List[Tuple[float, float]]:
    """Parse "LON,LAT;LON,LAT;..." into a coordinate list."""
    points = [parse_lonlat(p) for p in value.split(";") if p.strip()]
    if len(points) < 2:
        raise argparse.ArgumentTypeError(f"A path needs at least two LON,LAT points, got '{value}'")
    return points


def load_config(config_path: Optional[str]) -> Optional[Config]:
    """
    Load configuration from file.

    Returns:
        Config object or None if no path provided
    """
    if config_path is None:
        return None

    try:
        return Config.load_from_file(config_path)
    except (OSError, ValueError, TypeError, yaml.YAMLError) as e:
        print(f"Error loading config from {config_path}: {e}", file=sys.stderr)
        sys.exit(1)


def load_options_file(path: str) -> Dict[str, Any]:
    """Read a YAML or JSON options file (JSON is valid YAML)."""
    with open(path, "r") as f:
        data = yaml.safe_load(f)
    if not isinstance(data, dict):
        raise StaticMapsError(f"Options file {path} must contain a mapping")
    return data


def _cli_print(args: argparse.Namespace, *values: object, **kwargs) -> None:
    """Print unless --silent was provided."""
    if getattr(args, "silent", False):
        return
    print(*values, **kwargs)


def build_render_kwargs(args: argparse.Namespace) -> Dict[str, Any]:
    """Merge an options file with command-line overrides into create_map kwargs."""
    data: Dict[str, Any] = load_options_file(args.options) if args.options else {}

    for name in ("width", "height", "zoom", "quality", "format"):
        value = getattr(args, name)
        if value is not None:
            data[name] = value
    if args.center is not None:
        data["center"] = args.center
    if args.padding is not None:
        data["padding"] = args.padding
    if args.padding_x is not None:
        data["padding_x"] = args.padding_x
    if args.padding_y is not None:
        data["padding_y"] = args.padding_y
    if args.basemap:
        data["basemap"] = args.basemap
    if args.tile_url:
        data["tile_url"] = args.tile_url
    if args.subdomains:
        data["tile_subdomains"] = [s.strip() for s in args.subdomains.split(",") if s.strip()]

    markers = list(data.get("markers", []))
    markers.extend({"coord": coord, "color": args.marker_color} for coord in args.marker or [])
    if markers:
        data["markers"] = markers

    polylines = list(data.get("polylines", []))
    polylines.extend({"coords": path, "color": args.line_color, "width": args.line_width} for path in args.polyline or [])
    if polylines:
        data["polylines"] = polylines

    if args.no_attribution:
        data["attribution"] = False
    elif args.attribution:
        data["attribution"] = {"show": True, "text": args.attribution}

    return data


def default_output_path(config: Config, fmt: str) -> Path:
    config.ensure_directories()
    return config.output_dir / f"map.{fmt}"


def cmd_render(args: argparse.Namespace) -> int:
    """Handle 'render' subcommand."""
    try:
        config = load_config(args.config)
        if config is None:
            config = Config()
        if args.timeout is not None:
            config.tile_request_timeout = args.timeout
        if args.retries is not None:
            config.tile_request_retries = args.retries
        if args.workers is not None:
            config.tile_request_limit = args.workers
        if args.no_cache:
            config.cache_disabled = True
        config.validate()

        kwargs = build_render_kwargs(args)
        fmt = kwargs.get("format", config.default_format)
        output = args.output or default_output_path(config, fmt)
        _cli_print(args, f"Rendering map to {output}")
        logger.debug(f"Render arguments: {sorted(kwargs)}")

        output_path = create_map(output_path=output, config=config, **kwargs)

        if getattr(args, "silent", False):
            print(str(output_path))
        else:
            print(f"Success! Map saved to: {output_path}")
        return 0

    except StaticMapsError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except (OSError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def cmd_basemaps(args: argparse.Namespace) -> int:
    """Handle 'basemaps' subcommand."""
    for entry in list_basemaps():
        if args.urls:
            print(f"{entry['name']:<28} {entry['url']}")
        else:
            print(f"{entry['name']:<28} max_zoom={entry['max_zoom']:<3} {entry['attribution']}")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for CLI."""
    parser = argparse.ArgumentParser(
        prog="static-maps",
        description="Render static raster map images from basemap tiles and shapes",
        formatter_class=argparse.RawDescriptionHelpFormatter
    )

    def _add_common_globalish_args(p: argparse.ArgumentParser) -> None:
        """Add args that should work both before and after the subcommand."""
        p.add_argument(
            "-v", "--verbose",
            action="store_true",
            help="Enable DEBUG logging"
        )
        p.add_argument(
            "-q", "--quiet",
            action="store_true",
            help="Suppress INFO logging (WARNING+ only)"
        )
        p.add_argument(
            "--silent",
            action="store_true",
            help="Suppress most console output (prints only the output path)"
        )
        p.add_argument(
            "--log-file",
            type=str,
            help="Write logs to file"
        )

    _add_common_globalish_args(parser)

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # ========================================================================
    # render subcommand
    # ========================================================================
    parser_render = subparsers.add_parser(
        "render",
        help="Render a static map"
    )
    _add_common_globalish_args(parser_render)
    parser_render.add_argument("--options", type=str, help="Render options file (YAML/JSON)")
    parser_render.add_argument("--config", type=str, help="Config file path (YAML/JSON)")
    parser_render.add_argument("--output", "-o", type=str, help="Output file path")
    parser_render.add_argument("--center", type=parse_lonlat, help="Map center as LON,LAT")
    parser_render.add_argument("--zoom", type=int, help="Zoom level (fitted to shapes if omitted)")
    parser_render.add_argument("--width", type=int, help="Image width in pixels (default: 800)")
    parser_render.add_argument("--height", type=int, help="Image height in pixels (default: 800)")
    parser_render.add_argument("--padding", type=int, help="Padding on all sides when fitting shapes")
    parser_render.add_argument("--padding-x", type=int, help="Horizontal padding when fitting shapes")
    parser_render.add_argument("--padding-y", type=int, help="Vertical padding when fitting shapes")
    parser_render.add_argument(
        "--format",
        choices=sorted(OUTPUT_FORMATS),
        help="Output format (default: from config)"
    )
    parser_render.add_argument("--quality", type=int, help="JPEG/WebP quality (1-100)")
    parser_render.add_argument(
        "--basemap",
        action="append",
        help="Basemap name; repeat to stack layers (see 'static-maps basemaps')"
    )
    parser_render.add_argument("--tile-url", type=str, help="Custom tile URL template with {z}/{x}/{y}")
    parser_render.add_argument("--subdomains", type=str, help="Comma-separated values for {s} in --tile-url")
    parser_render.add_argument(
        "--marker",
        type=parse_lonlat,
        action="append",
        help="Marker at LON,LAT (repeatable)"
    )
    parser_render.add_argument("--marker-color", type=str, default="#d9534f", help="Marker color")
    parser_render.add_argument(
        "--polyline",
        type=parse_path,
        action="append",
        help="Polyline as 'LON,LAT;LON,LAT;...' (repeatable)"
    )
    parser_render.add_argument("--line-color", type=str, default="#000000BB", help="Polyline color")
    parser_render.add_argument("--line-width", type=float, default=3, help="Polyline width in pixels")
    parser_render.add_argument("--attribution", type=str, help="Attribution text override")
    parser_render.add_argument("--no-attribution", action="store_true", help="Do not draw the attribution badge")
    parser_render.add_argument("--timeout", type=float, help="Tile request timeout in seconds")
    parser_render.add_argument("--retries", type=int, help="Tile request retries")
    parser_render.add_argument("--workers", type=int, help="Concurrent tile requests")
    parser_render.add_argument("--no-cache", action="store_true", help="Disable the tile cache")
    parser_render.set_defaults(func=cmd_render)

    # ========================================================================
    # basemaps subcommand
    # ========================================================================
    parser_basemaps = subparsers.add_parser(
        "basemaps",
        help="List built-in basemaps"
    )
    _add_common_globalish_args(parser_basemaps)
    parser_basemaps.add_argument("--urls", action="store_true", help="Show tile URL templates")
    parser_basemaps.set_defaults(func=cmd_basemaps)

    args = parser.parse_args(argv)

    if not hasattr(args, "func"):
        parser.print_help()
        return 1

    setup_logging_from_args(args)

    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
