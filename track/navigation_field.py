"""
Per-pixel lap position data used for AI steering and lap tracking.

The field is produced elsewhere (from the track's section polygons); this module
only stores it, queries it and moves it to and from disk.
"""

from dataclasses import dataclass
from typing import Mapping, NamedTuple, Optional, Tuple

import numpy as np

from utils.errors import FieldLoadError, FieldLookupError

NO_SECTION = -1


@dataclass(frozen=True)
class NavigationSample:
    """Lap position of a single pixel."""
    section_id: int             # index into the ordered track sections
    section_distance: float     # progress through the section, [0, 1]
    center_distance: float      # signed offset from the centerline, [-1, 1]


class FieldRow(NamedTuple):
    """Vectorised view of one logical row of a field."""
    defined: np.ndarray             # bool mask, True where a sample exists
    section_ids: np.ndarray
    section_distances: np.ndarray
    center_distances: np.ndarray


class NavigationField:
    """
    Lap position table covering every pixel of a map.

    Coordinates are logical: x grows to the right, y grows downwards with y=0 at
    the top of the map. Arrays are indexed [y, x].
    """

    def __init__(self, width: int, height: int, section_count: int,
                 section_ids: Optional[np.ndarray] = None,
                 section_distances: Optional[np.ndarray] = None,
                 center_distances: Optional[np.ndarray] = None):
        if width <= 0 or height <= 0:
            raise ValueError(f"Field size must be positive, got {width}x{height}")
        self.width = int(width)
        self.height = int(height)
        self.section_count = int(section_count)

        shape = (self.height, self.width)
        self.section_ids = self._init_array(section_ids, shape, np.int32, NO_SECTION, 'section_ids')
        self.section_distances = self._init_array(section_distances, shape, np.float64, 0.0, 'section_distances')
        self.center_distances = self._init_array(center_distances, shape, np.float64, 0.0, 'center_distances')

        if self.section_count < 1 and self.defined_count() > 0:
            raise ValueError("section_count must be >= 1 when the field has samples")

    @staticmethod
    def _init_array(values, shape, dtype, fill, name):
        if values is None:
            return np.full(shape, fill, dtype=dtype)
        array = np.asarray(values, dtype=dtype)
        if array.shape != shape:
            raise ValueError(f"{name} has shape {array.shape}, expected {shape}")
        return array.copy()

    @classmethod
    def from_samples(cls, width: int, height: int, section_count: int,
                     samples: Mapping[Tuple[int, int], NavigationSample]) -> "NavigationField":
        """Build a field from a {(x, y): NavigationSample} mapping."""
        table = cls(width, height, section_count)
        for (x, y), sample in samples.items():
            table.set(x, y, sample)
        return table

    @property
    def shape(self) -> Tuple[int, int]:
        return self.height, self.width

    def _check_bounds(self, x, y):
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise FieldLookupError(f"({x}, {y}) is outside the {self.width}x{self.height} field")

    def get(self, x: int, y: int) -> Optional[NavigationSample]:
        """Return the sample at (x, y), or None if the pixel is off-track."""
        self._check_bounds(x, y)
        section_id = int(self.section_ids[y, x])
        if section_id == NO_SECTION:
            return None
        return NavigationSample(
            section_id=section_id,
            section_distance=float(self.section_distances[y, x]),
            center_distance=float(self.center_distances[y, x]),
        )

    def set(self, x: int, y: int, sample: Optional[NavigationSample]):
        self._check_bounds(x, y)
        if sample is None:
            self.section_ids[y, x] = NO_SECTION
            self.section_distances[y, x] = 0.0
            self.center_distances[y, x] = 0.0
            return
        if self.section_count < 1:
            raise ValueError("section_count must be >= 1 when the field has samples")
        self.section_ids[y, x] = sample.section_id
        self.section_distances[y, x] = sample.section_distance
        self.center_distances[y, x] = sample.center_distance

    def row(self, y: int) -> FieldRow:
        if not 0 <= y < self.height:
            raise FieldLookupError(f"Row {y} is outside the {self.width}x{self.height} field")
        ids = self.section_ids[y]
        return FieldRow(
            defined=ids != NO_SECTION,
            section_ids=ids,
            section_distances=self.section_distances[y],
            center_distances=self.center_distances[y],
        )

    def defined_count(self) -> int:
        return int(np.count_nonzero(self.section_ids != NO_SECTION))


def save_field(table: NavigationField, path):
    """Write a field to an .npz archive."""
    np.savez_compressed(
        path,
        section_ids=table.section_ids,
        section_distances=table.section_distances,
        center_distances=table.center_distances,
        section_count=np.array(table.section_count, dtype=np.int32),
    )


def load_field(path) -> NavigationField:
    """
    Load a field written by save_field().

    Raises:
        FieldLoadError: if the archive is missing, incomplete or inconsistent
    """
    try:
        archive = np.load(path)
    except (OSError, ValueError) as e:
        raise FieldLoadError(f"Could not load navigation field '{path}': {e}") from e
    if not hasattr(archive, 'files'):
        raise FieldLoadError(f"Navigation field '{path}' is not an .npz archive")

    try:
        with archive:
            section_ids = archive['section_ids']
            section_distances = archive['section_distances']
            center_distances = archive['center_distances']
            section_count = int(archive['section_count'])
    except (OSError, KeyError, ValueError, TypeError) as e:
        raise FieldLoadError(f"Could not load navigation field '{path}': {e}") from e

    if section_ids.ndim != 2:
        raise FieldLoadError(f"Navigation field '{path}' must be 2-D, got shape {section_ids.shape}")
    height, width = section_ids.shape
    try:
        return NavigationField(width, height, section_count,
                               section_ids, section_distances, center_distances)
    except ValueError as e:
        raise FieldLoadError(f"Invalid navigation field '{path}': {e}") from e
