"""
Tile fetch and composition engine.

Main Components:
    - TileLayerConfig: immutable tile source description
    - TileFetcher: concurrent, retrying, cache-aware tile loader
    - TileMosaic / TileGrid: index-keyed tile slots and their canvas placement
    - MemoryTileCache / NullTileCache: cache collaborators
    - RequestsTransport: HTTP transport
"""

from .layer import TileLayerConfig, tile_cache_key
from .cache import MemoryTileCache, NullTileCache, TileCache, cache_from_config
from .transport import RequestsTransport, TileResponse, TileTransport
from .fetcher import TileFetcher, TileGrid, TileMosaic, blank_tile

__all__ = [
    "TileLayerConfig",
    "tile_cache_key",
    "MemoryTileCache",
    "NullTileCache",
    "TileCache",
    "cache_from_config",
    "RequestsTransport",
    "TileResponse",
    "TileTransport",
    "TileFetcher",
    "TileGrid",
    "TileMosaic",
    "blank_tile",
]
