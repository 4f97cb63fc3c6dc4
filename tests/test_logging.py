"""
Unit tests for logging utilities.

Tests verify:
- Logging setup and configuration
- Function call decorator behavior
- Correlation IDs and JSON formatting
"""

import json
import logging
import sys

import pytest

from s3publish.utils.logging import (
    JSONFormatter,
    clear_correlation_id,
    get_correlation_id,
    get_logger,
    log_function_call,
    set_correlation_id,
    setup_logging,
)


def test_setup_logging_configures_root_logger() -> None:
    """Test that setup_logging properly configures the root logger."""
    setup_logging(level="DEBUG")
    root_logger = logging.getLogger()
    assert root_logger.level == logging.DEBUG


def test_setup_logging_quiets_boto() -> None:
    setup_logging(level="DEBUG", enable_colors=False)
    assert logging.getLogger("botocore").level == logging.WARNING


def test_get_logger_returns_logger_instance() -> None:
    logger = get_logger("test_module")
    assert isinstance(logger, logging.Logger)
    assert logger.name == "test_module"


def test_log_function_call_decorator_logs_entry_and_exit(caplog) -> None:
    """Test that log_function_call logs function entry and exit."""

    @log_function_call
    def sample_function(x: int, y: int) -> int:
        return x + y

    with caplog.at_level(logging.DEBUG):
        result = sample_function(2, 3)

    assert result == 5
    messages = [record.getMessage() for record in caplog.records]
    assert any(m.startswith("ENTER sample_function(x=2, y=3)") for m in messages)
    assert any(m.startswith("EXIT sample_function -> 5") for m in messages)


def test_log_function_call_decorator_reraises(caplog) -> None:
    """Exceptions are logged and propagate unchanged."""

    @log_function_call
    def failing_function() -> None:
        raise ValueError("Test exception")

    with pytest.raises(ValueError, match="Test exception"):
        failing_function()

    errors = [r for r in caplog.records if r.levelno == logging.ERROR]
    assert errors
    assert "raised ValueError" in errors[-1].getMessage()


def test_log_function_call_preserves_metadata() -> None:
    @log_function_call
    def documented() -> None:
        """Docstring."""

    assert documented.__name__ == "documented"
    assert documented.__doc__ == "Docstring."


class TestCorrelationId:
    """Correlation ID context handling."""

    def test_set_and_get(self):
        set_correlation_id("job-abc")
        assert get_correlation_id() == "job-abc"
        clear_correlation_id()

    def test_generated_when_missing(self):
        clear_correlation_id()
        first = get_correlation_id()
        assert first
        assert get_correlation_id() == first
        clear_correlation_id()


class TestJSONFormatter:
    """JSON output for structured logging."""

    def test_format_includes_fields(self):
        set_correlation_id("job-json")
        record = logging.LogRecord(
            name="s3publish.transfer.worker_pool",
            level=logging.INFO,
            pathname=__file__,
            lineno=10,
            msg="[1/3] uploading %s",
            args=("v1/a.txt",),
            exc_info=None,
        )
        record.remote_key = "v1/a.txt"

        data = json.loads(JSONFormatter().format(record))

        assert data["level"] == "INFO"
        assert data["message"] == "[1/3] uploading v1/a.txt"
        assert data["correlation_id"] == "job-json"
        assert data["extra"] == {"remote_key": "v1/a.txt"}
        clear_correlation_id()

    def test_format_exception(self):
        try:
            raise RuntimeError("boom")
        except RuntimeError:
            exc_info = sys.exc_info()

        record = logging.LogRecord(
            name="test", level=logging.ERROR, pathname=__file__, lineno=1,
            msg="failed", args=(), exc_info=exc_info,
        )

        data = json.loads(JSONFormatter().format(record))

        assert data["exception"]["type"] == "RuntimeError"
        assert data["exception"]["message"] == "boom"
