"""
Test suite for logging helpers and request middleware.

System role: Verification of observability utilities
"""

import logging
from unittest.mock import MagicMock

from fastapi.testclient import TestClient

from ragchat.api.main import create_app
from ragchat.configs.settings import Settings
from ragchat.core.exceptions import IndexUnavailableError
from ragchat.observability.correlation import (
    clear_correlation_id,
    get_correlation_id,
    set_correlation_id,
)
from ragchat.observability.log_utils import (
    log_exception_with_context,
    log_with_context,
    safe_log_value,
)
from ragchat.observability.logger import CorrelationIdFilter


class TestSafeLogValue:

    def test_none(self) -> None:
        assert safe_log_value(None) == "None"

    def test_collections_are_summarized(self) -> None:
        assert safe_log_value([1, 2, 3]) == "list(3 items)"
        assert safe_log_value({"a": 1}) == "dict(1 keys)"

    def test_long_values_are_truncated(self) -> None:
        value = safe_log_value("x" * 20, max_length=5)

        assert value == "xxxxx... (truncated, 20 total)"

    def test_models_are_named_not_dumped(self) -> None:
        assert safe_log_value(Settings()) == "<Settings>"


class TestLogWithContext:

    def test_context_is_passed_as_extra(self) -> None:
        # Arrange
        logger = MagicMock()

        # Act
        log_with_context(logger, logging.INFO, "ingest START", file_path="a.txt", history=[1, 2])

        # Assert
        logger.log.assert_called_once_with(
            logging.INFO,
            "ingest START",
            extra={"file_path": "a.txt", "history": "list(2 items)"},
        )

    def test_exception_context_includes_error_type(self) -> None:
        # Arrange
        logger = MagicMock()
        exc = ValueError("bad input")

        # Act
        log_exception_with_context(logger, "ingest FAILED", exc, file_path="a.txt")

        # Assert
        extra = logger.error.call_args.kwargs["extra"]
        assert extra["error_type"] == "ValueError"
        assert extra["error_msg"] == "bad input"
        assert logger.error.call_args.kwargs["exc_info"] is exc

    def test_domain_error_details_are_flattened(self) -> None:
        # Arrange
        logger = MagicMock()
        exc = IndexUnavailableError("Vector search failed", operation="search", details={"k": 2})

        # Act
        log_exception_with_context(logger, "query FAILED", exc)

        # Assert
        extra = logger.error.call_args.kwargs["extra"]
        assert extra["error_msg"] == "Vector search failed"
        assert "k=2" in extra["error_details"]
        assert "operation=search" in extra["error_details"]


class TestCorrelation:

    def test_set_get_clear(self) -> None:
        value = set_correlation_id("abc-123")

        assert value == "abc-123"
        assert get_correlation_id() == "abc-123"

        clear_correlation_id()
        assert get_correlation_id() == ""

    def test_generated_when_missing(self) -> None:
        value = set_correlation_id()

        assert len(value) == 36
        clear_correlation_id()

    def test_filter_attaches_correlation_id(self) -> None:
        # Arrange
        record = logging.LogRecord("test", logging.INFO, __file__, 1, "msg", None, None)
        set_correlation_id("req-1")

        # Act
        CorrelationIdFilter().filter(record)
        clear_correlation_id()

        # Assert
        assert record.correlation_id == "req-1"


class TestCorrelationMiddleware:

    def test_incoming_correlation_id_is_echoed(self, settings: Settings) -> None:
        client = TestClient(create_app(settings))

        response = client.get("/", headers={"X-Correlation-ID": "trace-42"})

        assert response.headers["X-Correlation-ID"] == "trace-42"

    def test_correlation_id_is_generated(self, settings: Settings) -> None:
        client = TestClient(create_app(settings))

        response = client.get("/")

        assert len(response.headers["X-Correlation-ID"]) == 36
