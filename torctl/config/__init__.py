"""Configuration loading and validation."""

from torctl.config.loader import load_config
from torctl.config.schema import ControlConfig

__all__ = [
    "ControlConfig",
    "load_config",
]
