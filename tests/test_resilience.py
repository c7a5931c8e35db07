"""
Unit tests for error handling and logging helpers.
"""

import asyncio
import json
import logging
import pytest
from unittest.mock import AsyncMock

from src.hrdocs.core.monitoring import StructuredFormatter, monitor_performance, setup_logging
from src.hrdocs.core.resilience import (
    AnalysisError,
    AuthenticationError,
    PersistenceError,
    best_effort,
    fail_soft
)


class TestErrorTaxonomy:
    """Test the client-facing error hierarchy."""

    def test_message_is_kept(self):
        error = AuthenticationError("Unauthorized")

        assert isinstance(error, AnalysisError)
        assert error.message == "Unauthorized"
        assert str(error) == "Unauthorized"


class TestFailSoft:
    """Test degradation to default values."""

    def test_returns_default_on_error(self, caplog):
        @fail_soft(default="", operation="parsing")
        def broken(value):
            raise ValueError(f"cannot parse {value}")

        with caplog.at_level(logging.WARNING):
            assert broken("x") == ""

        assert "parsing failed" in caplog.text

    def test_passes_result_through(self):
        @fail_soft(default=None)
        def double(value):
            return value * 2

        assert double(21) == 42
        assert double.__name__ == "double"


class TestBestEffort:
    """Test calls whose failure must not abort a request."""

    def test_async_success(self):
        func = AsyncMock(return_value=None)

        assert asyncio.run(best_effort("mark processing", func, "doc-1", status="processing")) is True
        func.assert_awaited_once_with("doc-1", status="processing")

    def test_async_failure_is_swallowed(self):
        func = AsyncMock(side_effect=ConnectionError("offline"))

        assert asyncio.run(best_effort("mark processing", func)) is False

    def test_sync_callable(self):
        calls = []

        assert asyncio.run(best_effort("record", calls.append, 1)) is True
        assert calls == [1]


class TestMonitoring:
    """Test structured logging and the timing decorator."""

    def test_structured_formatter_includes_extras(self):
        record = logging.LogRecord("hrdocs", logging.INFO, __file__, 10, "Analyzed", None, None)
        record.document_id = "doc-1"
        record.execution_time_ms = 12.5

        entry = json.loads(StructuredFormatter().format(record))

        assert entry["message"] == "Analyzed"
        assert entry["level"] == "INFO"
        assert entry["document_id"] == "doc-1"
        assert entry["execution_time_ms"] == 12.5
        assert "request_id" not in entry

    def test_setup_logging_installs_single_handler(self):
        root = logging.getLogger()
        saved_handlers, saved_level = root.handlers[:], root.level
        try:
            setup_logging("debug", structured=True)
            setup_logging("debug", structured=True)

            assert len(root.handlers) == 1
            assert isinstance(root.handlers[0].formatter, StructuredFormatter)
            assert root.level == logging.DEBUG
        finally:
            root.handlers[:] = saved_handlers
            root.setLevel(saved_level)

    def test_monitor_performance_logs_success(self, caplog):
        @monitor_performance("document-analysis", "analyze_document")
        async def analyze(document_id=None):
            return "done"

        with caplog.at_level(logging.INFO, logger="document-analysis.analyze_document"):
            assert asyncio.run(analyze(document_id="doc-9")) == "done"

        record = caplog.records[-1]
        assert record.success is True
        assert record.document_id == "doc-9"
        assert record.execution_time_ms >= 0

    def test_monitor_performance_reraises(self, caplog):
        @monitor_performance("document-analysis", "analyze_document")
        async def analyze():
            raise PersistenceError("Failed to persist analysis results: offline")

        with caplog.at_level(logging.INFO, logger="document-analysis.analyze_document"):
            with pytest.raises(PersistenceError):
                asyncio.run(analyze())

        record = caplog.records[-1]
        assert record.success is False
        assert record.error_type == "PersistenceError"
