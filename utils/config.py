"""
Overlay configuration loaded from YAML.
"""

from dataclasses import dataclass, fields, asdict
from typing import Optional

import yaml

from utils.errors import ConfigError

# Largest offscreen target side, in pixels (typical GL_MAX_RENDERBUFFER_SIZE)
DEFAULT_MAX_TARGET_SIZE = 16384
DEFAULT_BLEND_FACTOR = 0.7


@dataclass
class OverlayConfig:
    """Settings for rendering a lap table image."""
    blend_factor: float = DEFAULT_BLEND_FACTOR
    clamp_channels: bool = False          # legacy behaviour wraps out-of-range channels
    max_target_size: int = DEFAULT_MAX_TARGET_SIZE
    show_progress: bool = True

    def validate(self):
        if not 0.0 <= self.blend_factor <= 1.0:
            raise ConfigError(f"blend_factor must be in [0, 1], got {self.blend_factor}")
        if self.max_target_size <= 0:
            raise ConfigError(f"max_target_size must be positive, got {self.max_target_size}")
        return self

    def to_dict(self):
        return asdict(self)


def load_config(config_path: Optional[str] = None) -> OverlayConfig:
    """
    Load overlay configuration from a YAML file.

    Args:
        config_path: Path to the YAML file, or None for the defaults

    Returns:
        Validated OverlayConfig
    """
    if config_path is None:
        return OverlayConfig()

    try:
        with open(config_path, 'r') as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise ConfigError(f"Could not read config '{config_path}': {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in config '{config_path}': {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config '{config_path}' must be a mapping, got {type(data).__name__}")

    known = {f.name for f in fields(OverlayConfig)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ConfigError(f"Unknown config keys in '{config_path}': {', '.join(unknown)}")

    try:
        config = OverlayConfig(
            blend_factor=float(data.get('blend_factor', DEFAULT_BLEND_FACTOR)),
            clamp_channels=bool(data.get('clamp_channels', False)),
            max_target_size=int(data.get('max_target_size', DEFAULT_MAX_TARGET_SIZE)),
            show_progress=bool(data.get('show_progress', True)),
        )
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Invalid value in config '{config_path}': {e}") from e

    return config.validate()
