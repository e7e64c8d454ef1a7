"""
Shared helpers: errors, configuration and progress reporting.
"""

from .errors import (
    TrackEditorError,
    MapLoadError,
    FieldLoadError,
    MapRenderError,
    FieldLookupError,
    ConfigError,
    ImageWriteError,
)
from .config import OverlayConfig, load_config
from .progress import ConsoleProgress, row_percent

__all__ = ['TrackEditorError', 'MapLoadError', 'FieldLoadError', 'MapRenderError',
           'FieldLookupError', 'ConfigError', 'ImageWriteError', 'OverlayConfig', 'load_config',
           'ConsoleProgress', 'row_percent']
