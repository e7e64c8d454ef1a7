import argparse
import sys
from pathlib import Path

import matplotlib.pyplot as plt

# Add project root to path so we can import the rendering packages
sys.path.append(str(Path(__file__).parent.parent))
from rendering.field_overlay import draw_field
from rendering.map_rasterizer import rasterize_map
from track.navigation_field import load_field
from track.tile_map import load_tile_map
from utils.config import load_config
from utils.errors import TrackEditorError


def show_preview(overlay, raw=None, title="Lap Table"):
    """
    Show the overlaid table, next to the raw map render when given.

    overlay and raw are (height, width, 3) RGB arrays in display orientation.
    """
    if raw is None:
        fig, ax2 = plt.subplots(1, 1, figsize=(10, 9))
        ax1 = None
    else:
        fig, (ax1, ax2) = plt.subplots(1, 2, figsize=(20, 9))

    if ax1 is not None:
        ax1.imshow(raw, interpolation="nearest")
        ax1.set_title('Rendered Map')
        ax1.axis('off')

    ax2.imshow(overlay, interpolation="nearest")
    ax2.set_title('Lap Position Table (R=center, G=section, B=progress)')
    ax2.axis('off')

    fig.suptitle(title)
    plt.tight_layout()
    plt.show()


def main():
    parser = argparse.ArgumentParser(description="Preview a lap position table over its rendered track map.")
    parser.add_argument("--map", type=str, required=True, help="Path to the track .tmx file")
    parser.add_argument("--field", type=str, required=True, help="Path to the navigation field .npz file")
    parser.add_argument("--config", type=str, default=None, help="Path to an overlay YAML config")
    args = parser.parse_args()

    map_path = Path(args.map)
    if not map_path.exists():
        print(f"Error: Map file not found at {map_path}")
        return

    try:
        config = load_config(args.config)
        tile_map = load_tile_map(str(map_path))
        table = load_field(args.field)
        raw = rasterize_map(tile_map, max_target_size=config.max_target_size)
        overlay = draw_field(raw.copy(), table,
                             blend_factor=config.blend_factor,
                             clamp_channels=config.clamp_channels)
    except TrackEditorError as e:
        print(f"Error: {e}")
        return

    print(f"Previewing lap table for: {map_path}")
    print(f"Defined pixels: {table.defined_count()} / {table.width * table.height}")
    show_preview(overlay.to_top_down(), raw.to_top_down(), title=map_path.name)


if __name__ == "__main__":
    main()
