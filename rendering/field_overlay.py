"""
Draws a navigation field on top of a rasterized map.

Each pixel with a lap position is tinted toward a colour encoding it:
    R = round((1 - |center_distance|) * 255)   bright on the centerline, dark at the edges
    G = section_id * 255 // section_count       one shade per section
    B = round(section_distance * 255)           ramps up through each section
Channels are left unclamped unless asked otherwise, so out-of-range samples wrap
around when the blended value is stored in a byte.
"""

from typing import Callable, Optional, Tuple

import numpy as np

from rendering.pixel_buffer import PixelBuffer
from track.navigation_field import NavigationField, NavigationSample
from utils.config import DEFAULT_BLEND_FACTOR
from utils.errors import FieldLookupError
from utils.progress import row_percent

BLEND_FACTOR = DEFAULT_BLEND_FACTOR

ProgressCallback = Callable[[int], None]


def _round_half_up(values):
    return np.floor(np.asarray(values, dtype=np.float64) + 0.5).astype(np.int64)


def encode_channels(section_ids, section_distances, center_distances, section_count: int,
                    clamp: bool = False) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    Vectorised colour encoding of lap positions.

    Returns:
        (r, g, b) int64 arrays, unclamped unless clamp is True
    """
    if section_count < 1:
        raise ValueError("section_count must be >= 1 to encode samples")
    center = np.asarray(center_distances, dtype=np.float64)
    r = _round_half_up((1.0 - np.abs(center)) * 255)
    g = np.floor_divide(np.asarray(section_ids, dtype=np.int64) * 255, section_count)
    b = _round_half_up(np.asarray(section_distances, dtype=np.float64) * 255)
    if clamp:
        r, g, b = (np.clip(c, 0, 255) for c in (r, g, b))
    return r, g, b


def encode_sample_color(sample: NavigationSample, section_count: int,
                        clamp: bool = False) -> Tuple[int, int, int]:
    """Colour encoding of a single sample, before blending."""
    r, g, b = encode_channels(sample.section_id, sample.section_distance,
                              sample.center_distance, section_count, clamp)
    return int(r), int(g), int(b)


def lerp_channels(from_values, to_values, k: float) -> np.ndarray:
    """from + (to - from) * k, truncated toward zero."""
    start = np.asarray(from_values, dtype=np.int64)
    end = np.asarray(to_values, dtype=np.int64)
    return np.trunc(start + (end - start) * k).astype(np.int64)


def _to_bytes(values: np.ndarray) -> np.ndarray:
    # out-of-range results wrap like a byte store would
    return np.bitwise_and(values, 0xFF).astype(np.uint8)


def blend_pixel(buffer: PixelBuffer, x: int, row: int, color, k: float = BLEND_FACTOR):
    """Blend color into the pixel at physical (x, row) with weight k."""
    current = buffer.pixels[row, x, :3]
    blended = _to_bytes(lerp_channels(current, np.asarray(color[:3]), k))
    buffer.pixels[row, x, :3] = blended
    buffer.pixels[row, x, 3] = 255


def check_dimensions(buffer: PixelBuffer, table: NavigationField):
    if (buffer.width, buffer.height) != (table.width, table.height):
        raise FieldLookupError(
            f"Navigation field is {table.width}x{table.height} but the map renders "
            f"to {buffer.width}x{buffer.height}"
        )


def draw_field(buffer: PixelBuffer, table: NavigationField,
               progress: Optional[ProgressCallback] = None,
               blend_factor: float = BLEND_FACTOR,
               clamp_channels: bool = False) -> PixelBuffer:
    """
    Tint every pixel that has a lap position toward its encoded colour.

    The buffer is modified in place and must not be read or written by anyone
    else until this returns. Rows are processed top to bottom in field space;
    progress, if given, is called with the row percentage before each row.

    Args:
        buffer: Rasterized map, same size as the field
        table: Navigation field to draw
        progress: Optional callback receiving an integer percentage
        blend_factor: Weight of the encoded colour, 0.7 by default
        clamp_channels: Clip encoded channels to [0, 255] instead of wrapping

    Returns:
        The same buffer

    Raises:
        FieldLookupError: if the field and buffer sizes differ
    """
    check_dimensions(buffer, table)
    height = buffer.height

    for y in range(height):
        if progress is not None:
            progress(row_percent(y, height))

        row = table.row(y)
        defined = row.defined
        if not defined.any():
            continue

        r, g, b = encode_channels(row.section_ids[defined], row.section_distances[defined],
                                  row.center_distances[defined], table.section_count,
                                  clamp=clamp_channels)
        encoded = np.stack([r, g, b], axis=1)

        target = buffer.pixels[buffer.physical_row(y)]
        blended = lerp_channels(target[defined, :3], encoded, blend_factor)
        target[defined, :3] = _to_bytes(blended)
        target[defined, 3] = 255

    return buffer
