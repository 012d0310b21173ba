"""
Tests for logging infrastructure.
"""

import json
import logging
import sys

import pytest

from azblob.core.logging_config import (
    JSONFormatter,
    SensitiveDataFilter,
    _parse_size,
    clear_client_request_id,
    get_client_request_id,
    log_with_context,
    set_client_request_id,
    setup_logging,
)

TEST_LOGGER = "azblob_tests.logging"


def make_record(msg, level=logging.INFO, exc_info=None):
    return logging.LogRecord(
        name="test",
        level=level,
        pathname="",
        lineno=0,
        msg=msg,
        args=(),
        exc_info=exc_info
    )


@pytest.fixture
def isolated_logger():
    """Yield the name of a logger that is reset afterwards."""
    yield TEST_LOGGER
    test_logger = logging.getLogger(TEST_LOGGER)
    for handler in list(test_logger.handlers):
        test_logger.removeHandler(handler)
        handler.close()
    test_logger.propagate = True
    test_logger.setLevel(logging.NOTSET)


class TestLoggingSetup:
    """Test suite for logging setup."""

    def test_setup_logging_defaults(self, isolated_logger):
        """Test setting up logging with defaults."""
        configured = setup_logging(logger_name=isolated_logger)

        assert configured.level == logging.INFO
        assert len(configured.handlers) == 1
        assert not configured.propagate

    def test_setup_logging_is_idempotent(self, isolated_logger):
        """Test repeated setup does not stack handlers."""
        setup_logging(logger_name=isolated_logger)
        configured = setup_logging(logger_name=isolated_logger)

        assert len(configured.handlers) == 1

    def test_root_logger_untouched(self, isolated_logger):
        """Test the root logger keeps its handlers."""
        root_handlers = list(logging.getLogger().handlers)

        setup_logging(logger_name=isolated_logger)

        assert logging.getLogger().handlers == root_handlers

    def test_setup_logging_with_file(self, tmp_path, isolated_logger):
        """Test setting up logging with file output."""
        log_file = tmp_path / "logs" / "azblob.log"
        configured = setup_logging(log_file=str(log_file), logger_name=isolated_logger)

        configured.info("Test message AccountKey=c2VjcmV0;")

        content = log_file.read_text()
        assert "Test message" in content
        assert "c2VjcmV0" not in content

    def test_setup_logging_with_module_levels(self, isolated_logger):
        """Test per-module log levels."""
        setup_logging(
            level="INFO",
            module_levels={f"{isolated_logger}.signer": "DEBUG"},
            logger_name=isolated_logger,
        )

        assert logging.getLogger(f"{isolated_logger}.signer").isEnabledFor(logging.DEBUG)
        assert not logging.getLogger(isolated_logger).isEnabledFor(logging.DEBUG)
        logging.getLogger(f"{isolated_logger}.signer").setLevel(logging.NOTSET)


class TestJSONFormatter:
    """Test suite for JSON formatter."""

    def test_format_basic_message(self):
        """Test formatting a basic log message."""
        data = json.loads(JSONFormatter().format(make_record("Test message")))

        assert data["level"] == "INFO"
        assert data["module"] == "test"
        assert data["message"] == "Test message"
        assert "timestamp" in data
        assert "client_request_id" not in data

    def test_format_with_client_request_id(self):
        """Test the context request id is included."""
        set_client_request_id("req-42")

        try:
            data = json.loads(JSONFormatter().format(make_record("Test message")))
            assert data["client_request_id"] == "req-42"
        finally:
            clear_client_request_id()

        assert get_client_request_id() is None

    def test_format_with_exception(self):
        """Test formatting with exception info."""
        try:
            raise ValueError("Test error")
        except ValueError:
            record = make_record("Error occurred", logging.ERROR, sys.exc_info())

        data = json.loads(JSONFormatter().format(record))

        assert "ValueError" in data["exception"]
        assert "Test error" in data["exception"]

    def test_format_with_context(self, caplog):
        """Test log_with_context attaches context."""
        context_logger = logging.getLogger("azblob_tests.context")

        with caplog.at_level(logging.INFO, logger="azblob_tests.context"):
            log_with_context(context_logger, logging.INFO, "Uploaded", path="/c/b", size=3)

        data = json.loads(JSONFormatter().format(caplog.records[-1]))
        assert data["context"] == {"path": "/c/b", "size": 3}


class TestSensitiveDataFilter:
    """Test suite for sensitive data filter."""

    @pytest.mark.parametrize("message,secret", [
        ("Authorization: SharedKey acct:c2lnbmF0dXJl", "c2lnbmF0dXJl"),
        ("header value SharedKey acct:c2lnbmF0dXJl", "c2lnbmF0dXJl"),
        ("AccountName=a;AccountKey=c2VjcmV0a2V5;EndpointSuffix=x", "c2VjcmV0a2V5"),
        ("https://a.blob.core.windows.net/c/b?sv=2012-02-12&sig=abc%2Bdef&sr=b", "abc%2Bdef"),
    ])
    def test_redacts(self, message, secret):
        """Test secrets are replaced."""
        record = make_record(message)

        assert SensitiveDataFilter().filter(record) is True
        assert secret not in record.msg
        assert "***REDACTED***" in record.msg

    def test_keeps_account_name(self):
        """Test redaction leaves the account name readable."""
        record = make_record("SharedKey myaccount:c2lnbmF0dXJl")

        SensitiveDataFilter().filter(record)

        assert "myaccount" in record.msg

    def test_plain_message_unchanged(self):
        """Test messages without secrets pass through."""
        record = make_record("Created BlockBlob /c/b")

        SensitiveDataFilter().filter(record)

        assert record.msg == "Created BlockBlob /c/b"


class TestParseSize:
    """Test rotation size parsing."""

    @pytest.mark.parametrize("size,expected", [
        ("10MB", 10 * 1024 ** 2),
        ("1GB", 1024 ** 3),
        ("512KB", 512 * 1024),
        ("100B", 100),
        ("2048", 2048),
        ("1.5 MB", int(1.5 * 1024 ** 2)),
    ])
    def test_parse(self, size, expected):
        """Test suffixed and bare sizes."""
        assert _parse_size(size) == expected
