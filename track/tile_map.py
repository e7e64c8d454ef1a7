"""
Tile map data structures and the TMX loader.

A TileMap is a read-only list of layers. Tile layers hold one pygame surface per
occupied grid cell; image layers hold a single surface. The map's pixel size is
taken from its first tile layer.
"""

import xml.etree.ElementTree as ElementTree
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Tuple, Union

import pygame
import pytmx
from pytmx.util_pygame import handle_transformation

from utils.errors import MapLoadError


@dataclass
class TileLayer:
    """Grid of tiles sharing a tile size."""
    name: str
    width: int                  # grid columns
    height: int                 # grid rows
    tile_width: int
    tile_height: int
    tiles: Dict[Tuple[int, int], pygame.Surface] = field(default_factory=dict)
    opacity: float = 1.0
    visible: bool = True
    offset: Tuple[int, int] = (0, 0)

    @property
    def pixel_width(self) -> int:
        return self.width * self.tile_width

    @property
    def pixel_height(self) -> int:
        return self.height * self.tile_height

    def iter_tiles(self) -> Iterator[Tuple[int, int, pygame.Surface]]:
        """Yield (column, row, surface) in row-major order."""
        for (col, row) in sorted(self.tiles, key=lambda cell: (cell[1], cell[0])):
            yield col, row, self.tiles[(col, row)]


@dataclass
class ImageLayer:
    """A single image drawn at an offset."""
    name: str
    image: pygame.Surface
    opacity: float = 1.0
    visible: bool = True
    offset: Tuple[int, int] = (0, 0)


Layer = Union[TileLayer, ImageLayer]


@dataclass
class TileMap:
    """Container for the visual layers of a track."""
    layers: List[Layer] = field(default_factory=list)
    source_path: Optional[str] = None

    @property
    def tile_layers(self) -> List[TileLayer]:
        return [layer for layer in self.layers if isinstance(layer, TileLayer)]

    def first_tile_layer(self) -> Optional[TileLayer]:
        tile_layers = self.tile_layers
        return tile_layers[0] if tile_layers else None


def _surface_loader(filename, colorkey, **kwargs):
    """
    pytmx image loader that works without a display mode.

    pytmx's own pygame loader converts surfaces, which needs a window. Plain
    pygame.image.load results blit just as well onto an offscreen surface.
    """
    image = pygame.image.load(filename)
    if colorkey:
        if isinstance(colorkey, str) and not colorkey.startswith("#"):
            colorkey = f"#{colorkey}"
        image.set_colorkey(pygame.Color(colorkey))

    def load_image(rect=None, flags=None):
        if rect:
            tile = image.subsurface(rect).copy()
        else:
            tile = image.copy()
        if flags:
            tile = handle_transformation(tile, flags)
        return tile

    return load_image


def _layer_offset(layer) -> Tuple[int, int]:
    return int(getattr(layer, 'offsetx', 0) or 0), int(getattr(layer, 'offsety', 0) or 0)


def _layer_opacity(layer) -> float:
    opacity = getattr(layer, 'opacity', 1.0)
    return 1.0 if opacity is None else float(opacity)


def _convert_tile_layer(tmx: pytmx.TiledMap, layer: pytmx.TiledTileLayer) -> TileLayer:
    tiles = {}
    for col, row, image in layer.tiles():
        if image is not None:
            tiles[(col, row)] = image
    return TileLayer(
        name=layer.name or "",
        width=int(layer.width),
        height=int(layer.height),
        tile_width=int(tmx.tilewidth),
        tile_height=int(tmx.tileheight),
        tiles=tiles,
        opacity=_layer_opacity(layer),
        visible=bool(layer.visible),
        offset=_layer_offset(layer),
    )


def load_tile_map(tmx_path: str) -> TileMap:
    """
    Load a TMX tile map.

    Args:
        tmx_path: Path to the .tmx file; tileset images are resolved relative to it

    Returns:
        TileMap with tile and image layers in file order (object groups are skipped)

    Raises:
        MapLoadError: if the file or one of its tileset images cannot be read
    """
    try:
        tmx = pytmx.TiledMap(str(tmx_path), image_loader=_surface_loader)
    except (OSError, ElementTree.ParseError, pygame.error, ValueError, KeyError, TypeError) as e:
        raise MapLoadError(f"Could not load tile map '{tmx_path}': {e}") from e

    layers: List[Layer] = []
    for layer in tmx.layers:
        if isinstance(layer, pytmx.TiledTileLayer):
            layers.append(_convert_tile_layer(tmx, layer))
        elif isinstance(layer, pytmx.TiledImageLayer) and layer.image is not None:
            layers.append(ImageLayer(
                name=layer.name or "",
                image=layer.image,
                opacity=_layer_opacity(layer),
                visible=bool(layer.visible),
                offset=_layer_offset(layer),
            ))

    return TileMap(layers=layers, source_path=str(tmx_path))
