"""Core constants and paths for torctl.

Single source of truth for protocol defaults and global paths.
"""

from pathlib import Path

TORCTL_DIR_NAME = ".torctl"

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 9051

# Status codes the client itself acts on
STATUS_OK = 250
STATUS_ASYNC_EVENT_CLASS = 6

LINE_TERMINATOR = "\r\n"

# Upper bound for a single reply line; protects against a misbehaving
# server streaming an endless line into memory.
MAX_LINE_LENGTH: int = 1024 * 1024  # 1 MB

READ_CHUNK_SIZE: int = 65536


def get_torctl_dir() -> Path:
    """Get ~/.torctl (global config directory)."""
    return Path.home() / TORCTL_DIR_NAME


def get_default_config_path() -> Path:
    """Get default config file path."""
    return get_torctl_dir() / "config.json"
