"""Tests for configure_logging()."""

import logging
from collections.abc import Iterator
from logging.handlers import RotatingFileHandler
from pathlib import Path

import pytest

from torctl.core.logging import configure_logging


@pytest.fixture
def restore_torctl_logger() -> Iterator[logging.Logger]:
    """Put the torctl logger back the way it was after each test."""
    torctl_logger = logging.getLogger("torctl")
    handlers = list(torctl_logger.handlers)
    level = torctl_logger.level
    propagate = torctl_logger.propagate
    yield torctl_logger
    for handler in torctl_logger.handlers:
        if handler not in handlers:
            handler.close()
    torctl_logger.handlers[:] = handlers
    torctl_logger.setLevel(level)
    torctl_logger.propagate = propagate


class TestConfigureLogging:
    """Tests for the logging bootstrap."""

    def test_console_only(self, restore_torctl_logger: logging.Logger) -> None:
        configure_logging(logging.INFO)

        assert len(restore_torctl_logger.handlers) == 1
        assert restore_torctl_logger.level == logging.INFO
        assert restore_torctl_logger.propagate is False

    def test_reconfigure_replaces_handlers(self, restore_torctl_logger: logging.Logger) -> None:
        configure_logging(logging.INFO)
        configure_logging(logging.DEBUG)

        assert len(restore_torctl_logger.handlers) == 1
        assert restore_torctl_logger.level == logging.DEBUG

    def test_file_handler(self, tmp_path: Path, restore_torctl_logger: logging.Logger) -> None:
        log_file = tmp_path / "logs" / "torctl.log"

        configure_logging(logging.WARNING, log_file=log_file)
        logging.getLogger("torctl.control.session").debug("Authenticated to control port x")
        for handler in restore_torctl_logger.handlers:
            handler.flush()

        assert any(isinstance(h, RotatingFileHandler) for h in restore_torctl_logger.handlers)
        assert restore_torctl_logger.level == logging.DEBUG
        assert "Authenticated to control port x" in log_file.read_text(encoding="utf-8")
