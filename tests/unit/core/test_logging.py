"""Tests for structlog configuration."""

import io
import json

import structlog

from loopback_redirect.core.logging import configure_logging


class TestConfigureLogging:
    """Tests for configure_logging."""

    def test_json_output(self) -> None:
        """Test JSON lines carry the event name and context."""
        stream = io.StringIO()
        configure_logging("INFO", json_output=True, stream=stream)

        structlog.get_logger("test").info("redirect_listener_bound", port=53142)

        record = json.loads(stream.getvalue().strip())
        assert record["event"] == "redirect_listener_bound"
        assert record["port"] == 53142
        assert record["level"] == "info"
        assert "timestamp" in record

    def test_level_filtering(self) -> None:
        """Test records below the configured level are dropped."""
        stream = io.StringIO()
        configure_logging("WARNING", stream=stream)

        logger = structlog.get_logger("test")
        logger.info("quiet_event")
        logger.warning("loud_event")

        output = stream.getvalue()
        assert "quiet_event" not in output
        assert "loud_event" in output
