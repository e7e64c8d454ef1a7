"""
RGBA pixel storage shared by the rasterizer and the field overlay.
"""

from typing import Tuple

import numpy as np
from PIL import Image


class PixelBuffer:
    """
    Mutable RGBA image stored bottom-up.

    Physical row 0 is the bottom row of the displayed image, the way a render
    target reads back. Logical row y (0 at the top) lives in physical row
    height - 1 - y. Alpha is always opaque.
    """

    def __init__(self, width: int, height: int, pixels: np.ndarray = None):
        self.width = int(width)
        self.height = int(height)
        if pixels is None:
            pixels = np.zeros((self.height, self.width, 4), dtype=np.uint8)
            pixels[:, :, 3] = 255
        elif pixels.shape != (self.height, self.width, 4) or pixels.dtype != np.uint8:
            raise ValueError(
                f"Expected uint8 pixels of shape {(self.height, self.width, 4)}, "
                f"got {pixels.dtype} {pixels.shape}"
            )
        self.pixels = pixels

    @classmethod
    def from_top_down(cls, rgb: np.ndarray) -> "PixelBuffer":
        """Build a buffer from a (height, width, 3|4) array in display orientation."""
        height, width = rgb.shape[:2]
        pixels = np.empty((height, width, 4), dtype=np.uint8)
        pixels[:, :, :3] = np.flipud(rgb[:, :, :3])
        pixels[:, :, 3] = 255
        return cls(width, height, pixels)

    @property
    def size(self) -> Tuple[int, int]:
        return self.width, self.height

    def physical_row(self, y: int) -> int:
        """Physical row holding logical row y."""
        return self.height - 1 - y

    def get_pixel(self, x: int, row: int) -> Tuple[int, int, int, int]:
        r, g, b, a = self.pixels[row, x]
        return int(r), int(g), int(b), int(a)

    def set_pixel(self, x: int, row: int, color):
        r, g, b = color[:3]
        self.pixels[row, x] = (r, g, b, 255)

    def copy(self) -> "PixelBuffer":
        return PixelBuffer(self.width, self.height, self.pixels.copy())

    def to_top_down(self) -> np.ndarray:
        """RGB array in display orientation (row 0 at the top)."""
        return np.ascontiguousarray(np.flipud(self.pixels[:, :, :3]))

    def to_image(self) -> Image.Image:
        return Image.fromarray(self.to_top_down())
