"""
Track data: tile maps and navigation fields.
"""

from .tile_map import TileMap, TileLayer, ImageLayer, load_tile_map
from .navigation_field import NavigationField, NavigationSample, FieldRow, load_field, save_field

__all__ = ['TileMap', 'TileLayer', 'ImageLayer', 'load_tile_map',
           'NavigationField', 'NavigationSample', 'FieldRow', 'load_field', 'save_field']
