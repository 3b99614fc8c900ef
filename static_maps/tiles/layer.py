"""
Tile layer configuration and tile URL formatting.

A ``TileLayerConfig`` is immutable for the whole render. Layers can be
built from a URL template or looked up by name in a basemap registry
(``static_maps.constants.BASEMAPS`` by default), which is passed in
explicitly rather than read from module state.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, Optional, Tuple

from ..constants import BASEMAPS, DEFAULT_TILE_SIZE, VECTOR_TILE_SUFFIXES
from ..exceptions import ValidationError
from ..geometry import tile_xy_to_quadkey


@dataclass(frozen=True)
class TileLayerConfig:
    """Configuration for one basemap tile layer.

    Attributes:
        url_template: URL with {z}/{x}/{y} (or {quadkey}) and optional {s}.
        subdomains: Values substituted for {s}, rotated per tile.
        tile_size: Tile edge in pixels.
        timeout: Per-request timeout in seconds.
        retries: Retries after the first attempt on transient failures.
        headers: Extra HTTP headers (user agent, auth).
        reverse_y: Address rows bottom-up (TMS servers).
        attribution: Text for the attribution badge.
        max_zoom: Highest zoom the server provides, if known.
    """

    url_template: str
    subdomains: Tuple[str, ...] = ()
    tile_size: int = DEFAULT_TILE_SIZE
    timeout: float = 10.0
    retries: int = 2
    headers: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    reverse_y: bool = False
    attribution: Optional[str] = None
    max_zoom: Optional[int] = None

    def __post_init__(self):
        if not isinstance(self.url_template, str) or not self.url_template:
            raise ValidationError("url_template is required", field="url_template")
        has_xyz = all(p in self.url_template for p in ("{z}", "{x}", "{y}"))
        if not has_xyz and "{quadkey}" not in self.url_template:
            raise ValidationError(
                f"url_template needs {{z}}/{{x}}/{{y}} or {{quadkey}}: {self.url_template}",
                field="url_template",
            )
        if "{s}" in self.url_template and not self.subdomains:
            raise ValidationError("url_template uses {s} but no subdomains were given", field="subdomains")
        if not isinstance(self.tile_size, int) or self.tile_size <= 0:
            raise ValidationError("tile_size must be a positive integer", field="tile_size")
        if self.timeout <= 0:
            raise ValidationError("timeout must be positive", field="timeout")
        if not isinstance(self.retries, int) or self.retries < 0:
            raise ValidationError("retries must be an integer >= 0", field="retries")
        # Freeze mutable inputs so the layer is safe to share across fetch threads
        object.__setattr__(self, "subdomains", tuple(self.subdomains))
        object.__setattr__(self, "headers", MappingProxyType(dict(self.headers)))

    @classmethod
    def from_basemap(
        cls,
        name: str,
        registry: Mapping[str, Mapping] = BASEMAPS,
        **overrides
    ) -> "TileLayerConfig":
        """
        Build a layer from a named basemap.

        Args:
            name: Basemap name, e.g. "osm" or "carto-dark"
            registry: Name -> {url, attribution, max_zoom, subdomains} table
            **overrides: Any TileLayerConfig field to override

        Raises:
            ValidationError: If the name is not in the registry
        """
        try:
            entry = registry[name]
        except KeyError:
            raise ValidationError(
                f"Unknown basemap '{name}'. Available: {', '.join(sorted(registry))}",
                field="basemap",
            ) from None
        params = {
            "url_template": entry["url"],
            "subdomains": tuple(entry.get("subdomains", ())),
            "attribution": entry.get("attribution"),
            "max_zoom": entry.get("max_zoom"),
        }
        params.update(overrides)
        return cls(**params)

    @property
    def is_vector(self) -> bool:
        """True for vector tile sources, which this renderer cannot draw."""
        path = self.url_template.split("?", 1)[0].lower()
        return path.endswith(VECTOR_TILE_SUFFIXES)

    def format_url(self, x: int, y: int, z: int) -> str:
        """
        Fill the template for tile (x, y, z).

        ``x`` and ``y`` are XYZ indices; ``reverse_y`` is applied here. The
        subdomain rotates deterministically with the tile position.
        """
        row = (2 ** z - 1 - y) if self.reverse_y else y
        url = self.url_template
        if self.subdomains:
            url = url.replace("{s}", self.subdomains[(x + y) % len(self.subdomains)])
        if "{quadkey}" in url:
            url = url.replace("{quadkey}", tile_xy_to_quadkey(x, y, z))
        return url.replace("{z}", str(z)).replace("{x}", str(x)).replace("{y}", str(row))


def tile_cache_key(layer: TileLayerConfig, x: int, y: int, z: int) -> str:
    """Cache key for a tile; independent of the subdomain chosen for it."""
    return f"{layer.url_template}|{z}/{x}/{y}"
