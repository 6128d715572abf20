"""Unit tests for the logging module."""

from __future__ import annotations

import json
import logging

import pytest
import structlog

from docling_serve_client.observability import (
    LogFormat,
    LogLevel,
    configure_logging,
    generate_request_id,
    get_logger,
)


# ---------------------------------------------------------------------------
# TestLogLevel
# ---------------------------------------------------------------------------


class TestLogLevel:
    """Tests for LogLevel enum."""

    def test_log_level_values(self) -> None:
        """Test LogLevel enum values."""
        assert LogLevel.DEBUG == "debug"
        assert LogLevel.INFO == "info"
        assert LogLevel.WARNING == "warning"
        assert LogLevel.ERROR == "error"
        assert LogLevel.CRITICAL == "critical"

    @pytest.mark.parametrize(
        ("level", "expected"),
        [
            (LogLevel.DEBUG, logging.DEBUG),
            (LogLevel.INFO, logging.INFO),
            (LogLevel.WARNING, logging.WARNING),
            (LogLevel.ERROR, logging.ERROR),
            (LogLevel.CRITICAL, logging.CRITICAL),
        ],
    )
    def test_to_stdlib_level(self, level: LogLevel, expected: int) -> None:
        """Test conversion to stdlib levels."""
        assert level.to_stdlib_level() == expected


class TestLogFormat:
    """Tests for LogFormat enum."""

    def test_log_format_values(self) -> None:
        """Test LogFormat enum values."""
        assert LogFormat.CONSOLE == "console"
        assert LogFormat.LOGFMT == "logfmt"
        assert LogFormat.JSON == "json"


# ---------------------------------------------------------------------------
# TestRequestId
# ---------------------------------------------------------------------------


class TestRequestId:
    """Tests for request ID generation."""

    def test_generate_request_id_length(self) -> None:
        """Test generated ID is 8 characters."""
        assert len(generate_request_id()) == 8

    def test_generate_request_id_is_hex(self) -> None:
        """Test generated ID is valid hex."""
        int(generate_request_id(), 16)

    def test_generate_request_id_unique(self) -> None:
        """Test generated IDs are unique."""
        ids = {generate_request_id() for _ in range(100)}
        assert len(ids) == 100


# ---------------------------------------------------------------------------
# TestConfigureLogging
# ---------------------------------------------------------------------------


class TestConfigureLogging:
    """Tests for configure_logging function."""

    def setup_method(self) -> None:
        """Reset structlog configuration before each test."""
        structlog.reset_defaults()

    def teardown_method(self) -> None:
        """Reset configuration."""
        structlog.reset_defaults()

    def test_configure_with_string_level(self) -> None:
        """Test configuring with string log level."""
        configure_logging(level="debug", log_format=LogFormat.LOGFMT)

    def test_configure_with_uppercase_string(self) -> None:
        """Test configuring with uppercase string level and format."""
        configure_logging(level="DEBUG", log_format="JSON")

    def test_configure_invalid_level_raises(self) -> None:
        """Test invalid log level raises ValueError."""
        with pytest.raises(ValueError, match="'invalid' is not a valid LogLevel"):
            configure_logging(level="invalid")

    def test_configure_invalid_format_raises(self) -> None:
        """Test invalid log format raises ValueError."""
        with pytest.raises(ValueError, match="is not a valid LogFormat"):
            configure_logging(log_format="xml")

    def test_configure_detects_format(self) -> None:
        """Test the format is detected when not given."""
        configure_logging(level=LogLevel.INFO)


# ---------------------------------------------------------------------------
# TestGetLogger
# ---------------------------------------------------------------------------


class TestGetLogger:
    """Tests for get_logger output."""

    def setup_method(self) -> None:
        """Reset before tests."""
        structlog.reset_defaults()

    def teardown_method(self) -> None:
        """Reset configuration."""
        structlog.contextvars.clear_contextvars()
        structlog.reset_defaults()

    def test_logger_can_log(self, capfd: pytest.CaptureFixture[str]) -> None:
        """Test that logger can write log messages."""
        # Configure after capfd is active to capture output
        configure_logging(level=LogLevel.DEBUG, log_format=LogFormat.LOGFMT)
        logger = get_logger(__name__)
        logger.info("test_event")

        captured = capfd.readouterr()
        assert "event=test_event" in captured.err
        assert "level=info" in captured.err

    def test_logger_includes_timestamp(self, capfd: pytest.CaptureFixture[str]) -> None:
        """Test that logger output includes an ISO timestamp."""
        configure_logging(level=LogLevel.DEBUG, log_format=LogFormat.LOGFMT)
        get_logger(__name__).info("test_event")

        captured = capfd.readouterr()
        assert "timestamp=" in captured.err
        assert "Z" in captured.err

    def test_logger_with_initial_context(
        self, capfd: pytest.CaptureFixture[str]
    ) -> None:
        """Test get_logger binds initial context."""
        configure_logging(level=LogLevel.DEBUG, log_format=LogFormat.LOGFMT)
        logger = get_logger(__name__, component="client")
        logger.info("test_event", request_id="abc12345")

        captured = capfd.readouterr()
        assert "component=client" in captured.err
        assert "request_id=abc12345" in captured.err

    def test_logger_includes_context_variables(
        self, capfd: pytest.CaptureFixture[str]
    ) -> None:
        """Test contextvars bound by the application are merged."""
        configure_logging(level=LogLevel.DEBUG, log_format=LogFormat.LOGFMT)
        structlog.contextvars.bind_contextvars(job="nightly")
        get_logger(__name__).info("test_event")

        captured = capfd.readouterr()
        assert "job=nightly" in captured.err

    def test_logger_level_filtering(self, capfd: pytest.CaptureFixture[str]) -> None:
        """Test that logger filters by level."""
        configure_logging(level=LogLevel.WARNING, log_format=LogFormat.LOGFMT)
        logger = get_logger(__name__)

        logger.debug("debug_message")
        logger.info("info_message")
        logger.warning("warning_message")

        captured = capfd.readouterr()
        assert "debug_message" not in captured.err
        assert "info_message" not in captured.err
        assert "warning_message" in captured.err

    def test_json_output(self, capfd: pytest.CaptureFixture[str]) -> None:
        """Test JSON format renders one object per line."""
        configure_logging(level=LogLevel.DEBUG, log_format=LogFormat.JSON)
        get_logger(__name__).info("api_response", status_code=200)

        captured = capfd.readouterr()
        record = json.loads(captured.err.strip().splitlines()[-1])
        assert record["event"] == "api_response"
        assert record["status_code"] == 200
        assert record["level"] == "info"
