"""
Custom Tile Layers Example

This example builds ``RenderOptions`` by hand and renders them with
``StaticMap``: a satellite basemap with a labels overlay from a second
tile server, a great-circle flight path, a translucent range circle and
a text label that the fitted zoom makes room for.

Output: output/custom_layers.jpg
"""

import logging
from pathlib import Path

from static_maps import (
    AttributionOptions,
    Circle,
    Config,
    Marker,
    Polyline,
    RenderOptions,
    StaticMap,
    StaticMapsError,
    Text,
    TileLayerConfig,
    list_basemaps,
)

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

# ============================================================================
# Inspect the Basemap Registry
# ============================================================================

print("Available basemaps")
print("=" * 60)
for basemap in list_basemaps():
    print(f"  {basemap['name']:<14} max zoom {basemap['max_zoom']}")
print()

# ============================================================================
# Build the Layers and Shapes
# ============================================================================

config = Config(tile_request_timeout=5.0, tile_request_retries=1)

satellite = TileLayerConfig.from_basemap("satellite", timeout=config.tile_request_timeout)
labels = TileLayerConfig(
    url_template="https://{s}.basemaps.cartocdn.com/light_only_labels/{z}/{x}/{y}.png",
    subdomains=("a", "b", "c"),
    timeout=config.tile_request_timeout,
    attribution="© CARTO",
)

london = (-0.4543, 51.4700)
new_york = (-73.7781, 40.6413)

options = RenderOptions(
    width=1000,
    height=600,
    padding_x=30,
    padding_y=30,
    format="jpeg",
    quality=85,
    tile_layers=[satellite, labels],
    shapes=[
        # Two points expand into a great circle
        Polyline([london, new_york], color="#FFD700", width=3, dash=(8, 4)),
        Circle(london, radius=500_000, color="#FFFFFF99", fill="#FFFFFF33", width=2),
        Marker(london, color="#d9534f"),
        Marker(new_york, color="#0275d8"),
        Text(new_york, "JFK  New York", size=14, color="white", anchor="end", offset_x=12),
    ],
    attribution=AttributionOptions(text="Imagery © Esri  Labels © CARTO"),
)

# ============================================================================
# Render
# ============================================================================

try:
    static_map = StaticMap(options, config=config)
    output_path = Path("output/custom_layers.jpg")
    output_path.parent.mkdir(parents=True, exist_ok=True)
    static_map.save(str(output_path))
    print(f"Success! Map saved to: {output_path}")
    print(f"  Zoom: {static_map.viewport.zoom}")
    print(f"  Center: {static_map.viewport.center}")

except StaticMapsError as e:
    print(f"Error creating map: {e}")
