"""JSON loading helpers for config files.

- load_json_file() for files that must exist (raises LoadError otherwise)
- load_json_file_optional() for the default location (returns None if missing)
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from torctl.core.errors import LoadError

logger = logging.getLogger(__name__)


def load_json_file(path: Path) -> dict[str, Any]:
    """Load a JSON object from ``path``.

    An empty file counts as an empty object.

    Raises:
        LoadError: If the file is missing, unreadable, not valid JSON,
            or holds something other than an object.
    """
    resolved = path.expanduser().resolve()

    if not resolved.exists():
        raise LoadError(f"Config file not found: {path}")

    try:
        content = resolved.read_text(encoding="utf-8-sig")
    except OSError as e:
        raise LoadError(f"Failed to read config file {path}: {e}") from e

    content = content.strip()
    if not content:
        return {}

    try:
        result = json.loads(content)
    except json.JSONDecodeError as e:
        raise LoadError(f"Invalid JSON in {path}: {e}") from e

    if not isinstance(result, dict):
        raise LoadError(f"Expected object in {path}, got {type(result).__name__}")

    return result


def load_json_file_optional(path: Path) -> dict[str, Any] | None:
    """Like load_json_file(), but returns None when the file does not exist."""
    resolved = path.expanduser().resolve()

    if not resolved.is_file():
        logger.debug("Config file not found: %s", resolved)
        return None

    logger.debug("Loading config file: %s", resolved)
    return load_json_file(resolved)
