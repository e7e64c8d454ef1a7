"""
Rendering package - map rasterization and lap table overlay.
"""

from .pixel_buffer import PixelBuffer
from .map_rasterizer import rasterize_map
from .field_overlay import draw_field, encode_sample_color

__all__ = ['PixelBuffer', 'rasterize_map', 'draw_field', 'encode_sample_color']
