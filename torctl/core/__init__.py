"""Core errors, constants and logging setup."""

from torctl.core.errors import (
    AuthenticationError,
    CommandError,
    ConfigError,
    ControlConnectionError,
    LoadError,
    ProtocolError,
    ReplyFramingError,
    TorCtlError,
)

__all__ = [
    "TorCtlError",
    "ConfigError",
    "LoadError",
    "ControlConnectionError",
    "ProtocolError",
    "ReplyFramingError",
    "AuthenticationError",
    "CommandError",
]
