"""
Basic Map Rendering Example

This example demonstrates the simplest workflow: give the package a few
markers and let it pick the center and zoom that fit them, then save the
result as a PNG.

Output: output/basic_map.png, an OpenStreetMap basemap with two markers
and the line between them.
"""

import logging
from pathlib import Path

from static_maps import EncodeError, StaticMapsError, ViewportError, create_map

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

# ============================================================================
# Fit Markers Into the Frame
# ============================================================================

paris = (2.3522, 48.8566)
berlin = (13.4050, 52.5200)

print("Creating static map:")
print(f"  Markers: Paris {paris}, Berlin {berlin}")
print("  Size: 800x500, padding 40")
print()

try:
    output_path = create_map(
        width=800,
        height=500,
        padding=40,
        basemap="osm",
        markers=[
            {"coord": paris, "color": "#d9534f"},
            {"coord": berlin, "color": "#0275d8"},
        ],
        polylines=[{"coords": [paris, berlin], "color": "#000000BB", "width": 3}],
        texts=[{"coord": berlin, "text": "Berlin", "anchor": "middle", "offset_y": 30}],
        output_path=Path("output/basic_map.png"),
    )
    print(f"Success! Map saved to: {output_path}")

except ViewportError as e:
    print(f"Error creating map (nothing to fit): {e}")

except EncodeError as e:
    print(f"Error creating map (encoding failed): {e}")

except StaticMapsError as e:
    print(f"Error creating map: {e}")
    print()
    print("Common issues:")
    print("  - Network connectivity (tiles are downloaded on demand)")
    print("  - Tile server rate limits (missing tiles are left blank)")


# ============================================================================
# Keep the Bytes Instead
# ============================================================================

# Without output_path the encoded image is returned, e.g. to serve it
# from a web handler:

"""
from static_maps import create_map

result = create_map(center=paris, zoom=12, width=300, height=300, format="webp")
print(result.content_type, result.content_length)
"""
