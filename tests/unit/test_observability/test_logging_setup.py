"""Unit tests for structured logging setup."""

import io
import json
import logging
from collections.abc import Iterator

import pytest
import structlog

from webrepo.observability.logging import (
    bind_call_context,
    clear_call_context,
    configure_logging,
    get_logger,
)


@pytest.fixture
def buffer() -> Iterator[io.StringIO]:
    """Output stream for configured logging, reset afterwards."""
    output = io.StringIO()
    yield output
    structlog.contextvars.clear_contextvars()
    structlog.reset_defaults()


class TestConfigureLogging:
    """Tests for configure_logging."""

    def test_json_records(self, buffer: io.StringIO) -> None:
        """Test that records are JSON with level and timestamp."""
        configure_logging(output=buffer, json_format=True)

        get_logger().info("response_received", status=200)

        record = json.loads(buffer.getvalue().splitlines()[-1])
        assert record["event"] == "response_received"
        assert record["status"] == 200
        assert record["level"] == "info"
        assert "timestamp" in record

    def test_level_filtering(self, buffer: io.StringIO) -> None:
        """Test that records below the level are dropped."""
        configure_logging(level=logging.WARNING, output=buffer, json_format=True)

        get_logger().info("request_built")
        get_logger().warning("decode_fallback_text")

        lines = buffer.getvalue().splitlines()
        assert len(lines) == 1
        assert json.loads(lines[0])["event"] == "decode_fallback_text"

    def test_console_format(self, buffer: io.StringIO) -> None:
        """Test that console rendering is plain text."""
        configure_logging(output=buffer, json_format=False)

        get_logger().info("call_failed", error_kind="http_code")

        output = buffer.getvalue()
        assert "call_failed" in output
        assert "http_code" in output

    def test_call_context(self, buffer: io.StringIO) -> None:
        """Test that the correlation id is merged into records."""
        configure_logging(output=buffer, json_format=True)

        call_id = bind_call_context("abc123")
        get_logger().info("request_built")
        clear_call_context()
        get_logger().info("response_received")

        first, second = (json.loads(line) for line in buffer.getvalue().splitlines())
        assert call_id == "abc123"
        assert first["call_id"] == "abc123"
        assert "call_id" not in second

    def test_generated_call_id(self, buffer: io.StringIO) -> None:
        """Test that an id is generated when none is given."""
        call_id = bind_call_context()

        assert len(call_id) == 32
