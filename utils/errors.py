"""
Error types raised while building lap table images.
"""


class TrackEditorError(Exception):
    """Base class for all lap table generation errors."""


class MapLoadError(TrackEditorError):
    """The tile map source is missing or malformed."""


class FieldLoadError(TrackEditorError):
    """The navigation field file is missing or malformed."""


class MapRenderError(TrackEditorError):
    """The map could not be rasterized (empty map or offscreen target failure)."""


class FieldLookupError(TrackEditorError):
    """The navigation field does not line up with the pixel buffer."""


class ConfigError(TrackEditorError, ValueError):
    """The overlay configuration file is invalid."""


class ImageWriteError(TrackEditorError):
    """The output image could not be written."""
