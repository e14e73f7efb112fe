"""Configuration loading with fail-fast behavior.

An explicit path must exist. Without one, ~/.torctl/config.json is used when
present, otherwise the pydantic defaults apply.
"""

import logging
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from torctl.config.load_utils import load_json_file, load_json_file_optional
from torctl.config.schema import ControlConfig
from torctl.core.constants import get_default_config_path
from torctl.core.errors import ConfigError, LoadError

logger = logging.getLogger(__name__)


def load_config(path: Path | None = None) -> ControlConfig:
    """Load and validate the control configuration.

    Args:
        path: Explicit config file. If None, the default location is tried.

    Returns:
        Validated ControlConfig.

    Raises:
        ConfigError: If a config file is unreadable, contains invalid JSON,
            or fails validation.
    """
    source = path if path is not None else get_default_config_path()

    try:
        if path is not None:
            data: dict[str, Any] | None = load_json_file(path)
        else:
            data = load_json_file_optional(source)
    except LoadError as e:
        raise ConfigError(e.message) from e

    if data is None:
        logger.debug("No config file at %s, using defaults", source)
        return ControlConfig()

    logger.info("Config loaded from: %s", source)
    try:
        return ControlConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Config validation failed for {source}: {e}") from e
