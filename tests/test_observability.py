"""Tests for logging configuration."""

from __future__ import annotations

import io
import json
import logging

import pytest

from secret_rotation.observability import LogLevel, configure_logging


@pytest.fixture
def package_logger():
    logger = logging.getLogger("secret_rotation")
    handlers, level = list(logger.handlers), logger.level
    yield logger
    logger.handlers[:] = handlers
    logger.setLevel(level)


class TestConfigureLogging:
    """Tests for configure_logging()."""

    def test_console_format(self, package_logger):
        stream = io.StringIO()
        configure_logging(level="INFO", format="console", stream=stream)
        logging.getLogger("secret_rotation.rotation").info("Rotated %s", "JWT_PUB")

        line = stream.getvalue().strip()
        assert "INFO" in line
        assert "[secret_rotation.rotation] Rotated JWT_PUB" in line
        assert "\033[" not in line

    def test_json_format(self, package_logger):
        stream = io.StringIO()
        configure_logging(level="DEBUG", format="json", stream=stream)
        logging.getLogger("secret_rotation.retention.planner").debug("Planned %d removals", 3)

        record = json.loads(stream.getvalue())
        assert record["level"] == "debug"
        assert record["logger"] == "secret_rotation.retention.planner"
        assert record["message"] == "Planned 3 removals"

    def test_level_filters(self, package_logger):
        stream = io.StringIO()
        configure_logging(level="WARNING", stream=stream)
        logging.getLogger("secret_rotation.x").info("hidden")
        assert stream.getvalue() == ""

    def test_reconfigure_replaces_handler(self, package_logger):
        configure_logging(stream=io.StringIO())
        configure_logging(stream=io.StringIO())
        installed = [h for h in package_logger.handlers if getattr(h, "_secret_rotation_handler", False)]
        assert len(installed) == 1

    def test_log_level_from_string(self):
        assert LogLevel.from_string("warn") is LogLevel.WARNING
        assert LogLevel.from_string("nonsense") is LogLevel.INFO
