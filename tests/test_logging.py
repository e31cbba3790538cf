"""
Unit tests for logging utilities.

Tests verify:
- Logging setup and configuration
- Function call decorator behavior
- JSON formatting and correlation IDs
"""

import json
import logging
import sys

from src.utils.logging import (
    JSONFormatter,
    clear_correlation_id,
    get_correlation_id,
    get_logger,
    log_function_call,
    set_correlation_id,
    setup_logging,
)


def test_setup_logging_configures_root_logger() -> None:
    setup_logging(level="DEBUG")
    root_logger = logging.getLogger()
    assert root_logger.level == logging.DEBUG


def test_setup_logging_unknown_level_falls_back_to_warning() -> None:
    setup_logging(level="chatty", enable_colors=False)
    assert logging.getLogger().level == logging.WARNING


def test_setup_logging_plain_handler_writes_to_stderr() -> None:
    setup_logging(level="INFO", enable_colors=False)
    handlers = logging.getLogger().handlers
    assert len(handlers) == 1
    assert handlers[0].stream is sys.stderr


def test_setup_logging_json(monkeypatch) -> None:
    monkeypatch.setenv("LOG_FORMAT", "json")
    setup_logging(level="INFO")
    assert isinstance(logging.getLogger().handlers[0].formatter, JSONFormatter)


def test_get_logger_returns_logger_instance() -> None:
    logger = get_logger("test_module")
    assert isinstance(logger, logging.Logger)
    assert logger.name == "test_module"


def test_log_function_call_decorator_logs_entry_and_exit(caplog) -> None:
    @log_function_call
    def sample_function(x: int, y: int) -> int:
        return x + y

    with caplog.at_level(logging.DEBUG, logger=__name__):
        result = sample_function(2, 3)

    assert result == 5
    messages = [record.getMessage() for record in caplog.records]
    assert any(m.startswith("ENTER sample_function(x=2, y=3)") for m in messages)
    assert any(m.startswith("EXIT sample_function -> 5") for m in messages)


def test_log_function_call_decorator_reraises() -> None:
    @log_function_call
    def failing_function() -> None:
        raise ValueError("Test exception")

    try:
        failing_function()
        assert False, "Exception should have been raised"
    except ValueError as e:
        assert str(e) == "Test exception"


def test_correlation_id_roundtrip() -> None:
    set_correlation_id("run-42")
    assert get_correlation_id() == "run-42"

    clear_correlation_id()
    generated = get_correlation_id()
    assert generated != "run-42"
    assert get_correlation_id() == generated


def test_json_formatter_includes_extra_and_exception() -> None:
    set_correlation_id("run-7")
    try:
        raise RuntimeError("disk full")
    except RuntimeError:
        record = logging.getLogger("src.archiver").makeRecord(
            "src.archiver",
            logging.ERROR,
            __file__,
            10,
            "Could not archive %s",
            ("site",),
            sys.exc_info(),
            extra={"archive_path": "/tmp/TempS3Archive.zip"},
        )

    payload = json.loads(JSONFormatter().format(record))

    assert payload["message"] == "Could not archive site"
    assert payload["level"] == "ERROR"
    assert payload["correlation_id"] == "run-7"
    assert payload["extra"] == {"archive_path": "/tmp/TempS3Archive.zip"}
    assert payload["exception"]["type"] == "RuntimeError"
    assert "disk full" in payload["exception"]["traceback"]
    clear_correlation_id()
