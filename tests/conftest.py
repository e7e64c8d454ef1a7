import os

os.environ.setdefault("SDL_VIDEODRIVER", "dummy")

import pygame
import pytest

from track.navigation_field import NavigationField, NavigationSample
from track.tile_map import TileLayer, TileMap

# Tile colours of the 2x2 test map, by (col, row)
TILE_COLORS = {
    (0, 0): (200, 30, 30),
    (1, 0): (30, 200, 30),
    (0, 1): (30, 30, 200),
    (1, 1): (120, 120, 40),
}


def solid_tile(color, size=(10, 10)):
    tile = pygame.Surface(size, pygame.SRCALPHA, 32)
    tile.fill((*color, 255))
    return tile


def expected_blend(map_channel, encoded_channel, k=0.7):
    return int(map_channel + (encoded_channel - map_channel) * k) & 0xFF


def make_tile_map(grid=(2, 2), tile_size=(10, 10), colors=None):
    colors = TILE_COLORS if colors is None else colors
    cols, rows = grid
    tiles = {
        (col, row): solid_tile(colors[(col, row)], tile_size)
        for row in range(rows)
        for col in range(cols)
        if (col, row) in colors
    }
    layer = TileLayer(
        name="Ground",
        width=cols,
        height=rows,
        tile_width=tile_size[0],
        tile_height=tile_size[1],
        tiles=tiles,
    )
    return TileMap(layers=[layer])


@pytest.fixture
def tile_map():
    return make_tile_map()


@pytest.fixture
def bottom_row_field():
    """20x20 field with samples on the last logical row only."""
    sample = NavigationSample(section_id=0, section_distance=0.5, center_distance=0.0)
    return NavigationField.from_samples(20, 20, 1, {(x, 19): sample for x in range(20)})


TMX_TEMPLATE = """<?xml version="1.0" encoding="UTF-8"?>
<map version="1.10" orientation="orthogonal" renderorder="right-down" width="2" height="2" tilewidth="10" tileheight="10" infinite="0" nextlayerid="4" nextobjectid="2">
 <tileset firstgid="1" name="tiles" tilewidth="10" tileheight="10" tilecount="2" columns="2">
  <image source="tiles.png" width="20" height="10"/>
 </tileset>
 <layer id="1" name="Ground" width="2" height="2">
  <data encoding="csv">
1,2,
2,1
</data>
 </layer>
 <layer id="2" name="Hidden" width="2" height="2" visible="0">
  <data encoding="csv">
2,2,
2,2
</data>
 </layer>
 <objectgroup id="3" name="Sections">
  <object id="1" x="0" y="0" width="10" height="10"/>
 </objectgroup>
</map>
"""

TMX_RED = (220, 20, 20)
TMX_BLUE = (20, 20, 220)


@pytest.fixture
def tmx_path(tmp_path):
    """2x2 map of 10x10 tiles: red/blue checkerboard, plus a hidden layer."""
    tileset = pygame.Surface((20, 10), 0, 32)
    tileset.fill(TMX_RED, pygame.Rect(0, 0, 10, 10))
    tileset.fill(TMX_BLUE, pygame.Rect(10, 0, 10, 10))
    pygame.image.save(tileset, str(tmp_path / "tiles.png"))

    path = tmp_path / "track.tmx"
    path.write_text(TMX_TEMPLATE)
    return path
