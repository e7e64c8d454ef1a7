"""
Rasterizes a tile map into a full-resolution PixelBuffer.
"""

from contextlib import contextmanager
from typing import Tuple

import pygame

from rendering.pixel_buffer import PixelBuffer
from track.tile_map import ImageLayer, TileLayer, TileMap
from utils.config import DEFAULT_MAX_TARGET_SIZE
from utils.errors import MapRenderError

MAX_TARGET_SIZE = DEFAULT_MAX_TARGET_SIZE
CLEAR_COLOR = (0, 0, 0)


def map_pixel_size(tile_map: TileMap) -> Tuple[int, int]:
    """Pixel size of the map, taken from its first tile layer."""
    if not tile_map.layers:
        raise MapRenderError("Map has no layers")
    layer = tile_map.first_tile_layer()
    if layer is None:
        raise MapRenderError("Map has no tile layer")
    width, height = layer.pixel_width, layer.pixel_height
    if width <= 0 or height <= 0:
        raise MapRenderError(f"Tile layer '{layer.name}' has zero area ({width}x{height} px)")
    return width, height


@contextmanager
def offscreen_target(width: int, height: int, max_size: int = MAX_TARGET_SIZE):
    """
    Allocate an offscreen colour target for the duration of a with block.

    Raises:
        MapRenderError: if the size exceeds max_size or allocation fails
    """
    if width > max_size or height > max_size:
        raise MapRenderError(
            f"Offscreen target {width}x{height} exceeds the maximum size of {max_size} px"
        )
    try:
        surface = pygame.Surface((width, height), 0, 32)
        surface.fill(CLEAR_COLOR)
    except (pygame.error, MemoryError, ValueError) as e:
        raise MapRenderError(f"Could not allocate a {width}x{height} offscreen target: {e}") from e

    # pygame frees the surface when its last reference goes; callers must not keep it
    yield surface


def _with_opacity(image: pygame.Surface, opacity: float) -> pygame.Surface:
    if opacity >= 1.0:
        return image
    faded = image.copy()
    faded.set_alpha(max(0, int(opacity * 255)))
    return faded


def render_layers(tile_map: TileMap, surface: pygame.Surface):
    """
    Draw every visible layer onto surface, in map order.

    pygame surfaces already address pixels from the top-left corner with y going
    down, so tile (col, row) lands at (col * tile_width, row * tile_height).
    """
    for layer in tile_map.layers:
        if not layer.visible or layer.opacity <= 0.0:
            continue
        ox, oy = layer.offset
        if isinstance(layer, TileLayer):
            for col, row, image in layer.iter_tiles():
                surface.blit(_with_opacity(image, layer.opacity),
                             (col * layer.tile_width + ox, row * layer.tile_height + oy))
        elif isinstance(layer, ImageLayer):
            surface.blit(_with_opacity(layer.image, layer.opacity), (ox, oy))


def rasterize_map(tile_map: TileMap, max_target_size: int = MAX_TARGET_SIZE) -> PixelBuffer:
    """
    Render a tile map into a new PixelBuffer of the map's pixel size.

    Args:
        tile_map: Map to render
        max_target_size: Largest allowed side of the offscreen target

    Returns:
        PixelBuffer holding the rendered map (bottom-up storage)

    Raises:
        MapRenderError: on an empty map or an offscreen target failure
    """
    width, height = map_pixel_size(tile_map)

    with offscreen_target(width, height, max_target_size) as target:
        try:
            render_layers(tile_map, target)
            # surfarray is (width, height, 3); transpose to rows first
            rgb = pygame.surfarray.array3d(target).swapaxes(0, 1)
        except pygame.error as e:
            raise MapRenderError(f"Could not render map: {e}") from e

    return PixelBuffer.from_top_down(rgb)
