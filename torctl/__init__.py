"""torctl - asyncio client for the Tor control protocol."""

from torctl.config import ControlConfig, load_config
from torctl.control import ControlClient, ControlSession, Reply, Signal, StreamEvents
from torctl.core.errors import (
    AuthenticationError,
    CommandError,
    ConfigError,
    ControlConnectionError,
    ProtocolError,
    ReplyFramingError,
    TorCtlError,
)
from torctl.core.types import Endpoint

__version__ = "0.1.0"

__all__ = [
    "AuthenticationError",
    "CommandError",
    "ConfigError",
    "ControlClient",
    "ControlConfig",
    "ControlConnectionError",
    "ControlSession",
    "Endpoint",
    "ProtocolError",
    "Reply",
    "ReplyFramingError",
    "Signal",
    "StreamEvents",
    "TorCtlError",
    "load_config",
]
