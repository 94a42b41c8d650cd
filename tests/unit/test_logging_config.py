"""
Unit tests for structlog configuration.
"""

import io
import json
import logging

import pytest
import structlog

from loadspec.logging_config import add_app_context, configure_logging, flatten_extra


@pytest.fixture
def restore_logging():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
    structlog.reset_defaults()


class TestProcessors:
    def test_flatten_extra(self):
        event = flatten_extra(None, "info", {"event": "x", "extra": {"a": 1, "event": "y"}})
        assert event == {"event": "x", "a": 1}

    def test_flatten_extra_without_extra(self):
        assert flatten_extra(None, "info", {"event": "x"}) == {"event": "x"}

    def test_app_context(self):
        event = add_app_context(None, "info", {"event": "x"})
        assert event["app"] == "loadspec"
        assert "version" in event


class TestConfigureLogging:
    """Test suite for configure_logging."""

    def test_production_renders_json(self, restore_logging):
        stream = io.StringIO()
        configure_logging("INFO", "production", stream=stream)

        structlog.get_logger("loadspec.test").info(
            "Description parsed", extra={"method": "pattern-matching", "confidence": 0.5}
        )

        event = json.loads(stream.getvalue().strip().splitlines()[-1])
        assert event["event"] == "Description parsed"
        assert event["method"] == "pattern-matching"
        assert event["confidence"] == 0.5
        assert event["app"] == "loadspec"
        assert event["level"] == "info"
        assert "extra" not in event

    def test_level_filters_events(self, restore_logging):
        stream = io.StringIO()
        configure_logging("WARNING", "production", stream=stream)

        structlog.get_logger("loadspec.test").info("hidden")
        structlog.get_logger("loadspec.test").warning("shown")

        output = stream.getvalue()
        assert "hidden" not in output
        assert "shown" in output

    def test_development_renders_console(self, restore_logging):
        stream = io.StringIO()
        configure_logging("DEBUG", "development", stream=stream)

        logging.getLogger("loadspec.stdlib").info("stdlib message")

        assert "stdlib message" in stream.getvalue()
