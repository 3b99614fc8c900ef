"""
Configuration management for the static_maps package.

This module provides process-level settings for map rendering: tile
request timeouts and retries, the fetch worker limit, zoom clamps, the
default basemap and output format, and the in-memory tile cache.
"""

import json
import os
import yaml
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path


CACHE_TTL_ENV = "STATIC_MAPS_TILE_CACHE_TTL"
CACHE_DISABLED_ENV = "STATIC_MAPS_DISABLE_TILE_CACHE"


def _default_request_limit() -> int:
    return min(8, 2 * (os.cpu_count() or 1))


def _env_cache_ttl() -> float:
    raw = os.environ.get(CACHE_TTL_ENV)
    if raw is None or raw.strip() == "":
        return 3600.0
    try:
        return float(raw)
    except ValueError:
        return 3600.0


def _env_cache_disabled() -> bool:
    return os.environ.get(CACHE_DISABLED_ENV, "").strip().lower() in ("1", "true", "yes")


def _file_kind(path: Path) -> str:
    """Return "yaml" or "json" for a config path, by suffix."""
    suffix = path.suffix.lower()
    if suffix in (".yaml", ".yml"):
        return "yaml"
    if suffix == ".json":
        return "json"
    raise ValueError(f"Unsupported file format: {path.suffix}. Use .yaml, .yml, or .json")


@dataclass
class Config:
    """Configuration for static map rendering.

    Attributes:
        tile_size: Edge length of basemap tiles in pixels.
        tile_request_timeout: Per-request timeout in seconds.
        tile_request_retries: Retries after the first attempt on transient failures.
        tile_request_limit: Maximum number of concurrent tile fetches.
        retry_backoff: Base delay in seconds, doubled after each retry.
        min_zoom: Lowest zoom the viewport solver may return.
        max_zoom: Highest zoom the viewport solver may return.
        single_point_zoom: Zoom used when all shapes coincide.
        default_basemap: Basemap name used when no tile layer is given.
        default_format: Output format used when none is requested.
        default_quality: Encoder quality for jpeg/webp (1-100).
        user_agent: User-Agent header sent with tile requests.
        font_family: Font family for text shapes and the attribution badge.
        attribution_font_size: Attribution badge font size in pixels.
        cache_ttl: Seconds a cached tile stays valid.
        cache_disabled: Skip the tile cache entirely.
        cache_max_entries: Entries kept before the oldest are evicted.
        output_dir: Directory for CLI output when no explicit path is given.
    """

    tile_size: int = 256
    tile_request_timeout: float = 10.0
    tile_request_retries: int = 2
    tile_request_limit: int = field(default_factory=_default_request_limit)
    retry_backoff: float = 0.25
    min_zoom: int = 0
    max_zoom: int = 18
    single_point_zoom: int = 15
    default_basemap: str = "osm"
    default_format: str = "png"
    default_quality: int = 90
    user_agent: str = "static-maps/0.1 (+https://github.com/static-maps/static-maps)"
    font_family: str = "DejaVu Sans"
    attribution_font_size: int = 12
    cache_ttl: float = field(default_factory=_env_cache_ttl)
    cache_disabled: bool = field(default_factory=_env_cache_disabled)
    cache_max_entries: int = 2048
    output_dir: Path = field(default_factory=lambda: Path("./output"))

    def __post_init__(self):
        """Convert string paths to Path objects if necessary."""
        if isinstance(self.output_dir, str):
            self.output_dir = Path(self.output_dir)

    @classmethod
    def load_from_file(cls, path: Path) -> "Config":
        """Load configuration from a YAML or JSON file.

        Args:
            path: Path to configuration file (.yaml, .yml, or .json).

        Returns:
            Config instance with loaded settings.

        Raises:
            ValueError: If file format is not supported.
            FileNotFoundError: If file does not exist.
        """
        path = Path(path)
        kind = _file_kind(path)
        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {path}")

        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) if kind == "yaml" else json.load(f)

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ValueError(f"Configuration file {path} must contain a mapping, got {type(data).__name__}")
        unknown = sorted(set(data) - {fld.name for fld in fields(cls)})
        if unknown:
            raise ValueError(f"Unknown configuration keys in {path}: {', '.join(unknown)}")
        return cls(**data)

    def save_to_file(self, path: Path) -> None:
        """Save configuration to a YAML or JSON file.

        Raises:
            ValueError: If file format is not supported.
        """
        path = Path(path)
        kind = _file_kind(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        data = asdict(self)
        data["output_dir"] = str(data["output_dir"])

        with open(path, "w", encoding="utf-8") as f:
            if kind == "yaml":
                yaml.safe_dump(data, f, default_flow_style=False, sort_keys=False)
            else:
                json.dump(data, f, indent=2)

    def validate(self) -> bool:
        """Validate configuration parameters.

        Returns:
            True if configuration is valid.

        Raises:
            ValueError: If any configuration parameter is invalid.
        """
        if self.tile_size <= 0:
            raise ValueError("tile_size must be positive")

        if self.tile_request_timeout <= 0:
            raise ValueError("tile_request_timeout must be positive")

        if not isinstance(self.tile_request_retries, int) or self.tile_request_retries < 0:
            raise ValueError("tile_request_retries must be an integer >= 0")

        if not isinstance(self.tile_request_limit, int) or self.tile_request_limit < 1:
            raise ValueError("tile_request_limit must be an integer >= 1")

        if self.retry_backoff < 0:
            raise ValueError("retry_backoff must be non-negative")

        if not (0 <= self.min_zoom <= self.max_zoom):
            raise ValueError("zoom range must satisfy 0 <= min_zoom <= max_zoom")

        if not (self.min_zoom <= self.single_point_zoom <= self.max_zoom):
            raise ValueError("single_point_zoom must lie within [min_zoom, max_zoom]")

        if not (1 <= self.default_quality <= 100):
            raise ValueError("default_quality must be in the range [1, 100]")

        if not isinstance(self.default_basemap, str) or not self.default_basemap:
            raise ValueError("default_basemap must be a non-empty string")

        if self.attribution_font_size <= 0:
            raise ValueError("attribution_font_size must be positive")

        if self.cache_ttl < 0:
            raise ValueError("cache_ttl must be non-negative")

        if self.cache_max_entries < 1:
            raise ValueError("cache_max_entries must be >= 1")

        return True

    def ensure_directories(self) -> None:
        """Create the output directory if it doesn't exist."""
        self.output_dir.mkdir(parents=True, exist_ok=True)


def get_default_config() -> Config:
    """Get a Config instance with default settings."""
    return Config()
