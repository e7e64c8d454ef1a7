"""
End-to-end lap table image generation: load, rasterize, overlay, save.
"""

import os
from pathlib import Path
from typing import Optional

from rendering.field_overlay import check_dimensions, draw_field
from rendering.map_rasterizer import rasterize_map
from rendering.pixel_buffer import PixelBuffer
from track.navigation_field import NavigationField, load_field
from track.tile_map import TileMap, load_tile_map
from utils.config import OverlayConfig
from utils.errors import ImageWriteError
from utils.progress import ConsoleProgress


def generate_table_image(tile_map: TileMap, table: NavigationField,
                         config: Optional[OverlayConfig] = None,
                         progress=None) -> PixelBuffer:
    """
    Render the map and draw the navigation field over it.

    Args:
        tile_map: Map to render
        table: Navigation field with the same pixel size as the map
        config: Overlay settings (defaults if None)
        progress: Optional callback receiving the per-row percentage

    Returns:
        Composited PixelBuffer
    """
    config = config or OverlayConfig()

    print("Drawing map")
    buffer = rasterize_map(tile_map, max_target_size=config.max_target_size)
    check_dimensions(buffer, table)

    print("Drawing table")
    draw_field(buffer, table, progress,
               blend_factor=config.blend_factor,
               clamp_channels=config.clamp_channels)
    return buffer


def save_png(buffer: PixelBuffer, output_path):
    """
    Write the buffer as an RGB PNG; the destination only appears once fully written.

    Raises:
        ImageWriteError: if the file cannot be written or moved into place
    """
    output_path = Path(output_path)
    tmp_path = output_path.with_name(f".{output_path.name}.tmp")
    try:
        buffer.to_image().save(tmp_path, format="PNG")
        os.replace(tmp_path, output_path)
    except (OSError, ValueError) as e:
        raise ImageWriteError(f"Could not write image '{output_path}': {e}") from e
    finally:
        if tmp_path.exists():
            tmp_path.unlink()


def generate_table(tmx_path, field_path, output_path,
                   config: Optional[OverlayConfig] = None) -> PixelBuffer:
    """
    Build the lap table image of a track and save it as a PNG.

    Nothing is written if loading, rendering or compositing fails.
    """
    config = config or OverlayConfig()
    tile_map = load_tile_map(tmx_path)
    table = load_field(field_path)

    if config.show_progress:
        with ConsoleProgress() as progress:
            buffer = generate_table_image(tile_map, table, config, progress)
    else:
        buffer = generate_table_image(tile_map, table, config)

    print("Saving PNG")
    save_png(buffer, output_path)
    return buffer
