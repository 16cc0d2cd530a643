"""
Unit Tests for Error Handling System

Tests the widget error taxonomy and centralized error reporting.
"""

import logging
from datetime import datetime

import pytest

from utils.error_handling import (
    CacheBackendError,
    ErrorCategory,
    ErrorContext,
    ErrorHandler,
    ErrorSeverity,
    ExcessNeedsError,
    FormBuilderError,
    MissingNeedsError,
    NotCacheableError,
    UnsupportedOperation,
    WidgetError,
)


class TestWidgetError:
    """Test WidgetError and its subclasses."""

    def test_widget_error_creation(self):
        """Test basic WidgetError creation."""
        error = WidgetError(
            "Test error", category=ErrorCategory.RENDER_ERROR, severity=ErrorSeverity.HIGH, details={"test": "data"}
        )

        assert error.message == "Test error"
        assert error.category == ErrorCategory.RENDER_ERROR
        assert error.severity == ErrorSeverity.HIGH
        assert error.details == {"test": "data"}
        assert error.recoverable is True
        assert isinstance(error.timestamp, datetime)
        assert error.error_id.startswith("render_error_")

    def test_unsupported_operation(self):
        """Test UnsupportedOperation names the call and the builder."""
        error = UnsupportedOperation("bogus_field", builder="HTMLFormBuilder")

        assert str(error) == "undefined form builder method 'bogus_field' for HTMLFormBuilder"
        assert error.name == "bogus_field"
        assert error.resolved_name == "bogus_field"
        assert error.category == ErrorCategory.FORM_BUILDER_ERROR
        assert error.recoverable is False
        assert isinstance(error, AttributeError)

    def test_unsupported_operation_reports_renamed_call(self):
        """Test UnsupportedOperation mentions the name it was resolved to."""
        error = UnsupportedOperation("simple_fields_for", "fields_for")

        assert "resolved to 'fields_for'" in str(error)
        assert error.details["resolved_name"] == "fields_for"

    def test_form_builder_error(self):
        """Test FormBuilderError creation."""
        error = FormBuilderError("Cannot import", builder="pkg.Builder")

        assert error.severity == ErrorSeverity.HIGH
        assert error.details == {"builder": "pkg.Builder"}
        assert error.category == ErrorCategory.FORM_BUILDER_ERROR

    def test_cache_backend_error(self):
        """Test CacheBackendError creation."""
        error = CacheBackendError("Store unreachable", details={"error": "timeout"})

        assert error.category == ErrorCategory.CACHE_ERROR
        assert error.details == {"error": "timeout"}

    def test_not_cacheable_error(self):
        """Test NotCacheableError creation."""
        error = NotCacheableError("Sidebar")

        assert str(error) == "Sidebar has no cacheable declaration"
        assert error.widget == "Sidebar"
        assert error.severity == ErrorSeverity.LOW

    def test_needs_errors(self):
        """Test MissingNeedsError and ExcessNeedsError messages."""
        missing = MissingNeedsError("Card", ["post", "locale"])
        excess = ExcessNeedsError("Card", ["extra"])

        assert str(missing) == "Missing parameter(s) for Card: post, locale"
        assert missing.missing == ["post", "locale"]
        assert str(excess) == "Excess parameter(s) for Card: extra"
        assert excess.excess == ["extra"]
        assert missing.category == excess.category == ErrorCategory.VALIDATION_ERROR


class TestErrorHandler:
    """Test ErrorHandler functionality."""

    @pytest.fixture
    def error_handler(self):
        """Create error handler for testing."""
        return ErrorHandler(max_history_size=5)

    def test_handle_widget_error(self, error_handler):
        """Test handling WidgetError."""
        error = NotCacheableError("Sidebar")

        context = error_handler.handle_error(error, context={"path": "/"}, request_id="req-1")

        assert isinstance(context, ErrorContext)
        assert context.error_id == error.error_id
        assert context.category == ErrorCategory.CACHE_ERROR
        assert context.widget == "Sidebar"
        assert context.request_id == "req-1"
        assert context.details["path"] == "/"
        assert "Clear the fragment cache and retry" in context.recovery_suggestions

    def test_handle_generic_exception(self, error_handler):
        """Test handling a non-widget exception."""
        context = error_handler.handle_error(ValueError("bad value"))

        assert context.category == ErrorCategory.UNKNOWN_ERROR
        assert context.severity == ErrorSeverity.MEDIUM
        assert context.message == "bad value"
        assert context.error_id.startswith("error_")
        assert context.recovery_suggestions == []

    def test_logs_by_severity(self, error_handler, caplog):
        """Test the log level follows error severity."""
        with caplog.at_level(logging.DEBUG, logger="utils.error_handling"):
            error_handler.handle_error(FormBuilderError("broken builder"))
            error_handler.handle_error(NotCacheableError("Sidebar"))

        levels = [(record.levelno, record.getMessage()) for record in caplog.records]
        assert (logging.ERROR, "HIGH SEVERITY: broken builder") in levels
        assert (logging.INFO, "LOW SEVERITY: Sidebar has no cacheable declaration") in levels

    def test_error_statistics(self, error_handler):
        """Test error statistics collection."""
        error_handler.handle_error(MissingNeedsError("Card", ["post"]))
        error_handler.handle_error(ExcessNeedsError("Card", ["extra"]))
        error_handler.handle_error(CacheBackendError("down"))

        stats = error_handler.get_error_statistics()

        assert stats["total_errors"] == 3
        assert stats["recent_errors_24h"] == 3
        assert stats["errors_by_category"] == {"validation_error": 2, "cache_error": 1}
        assert stats["errors_by_widget"] == {"Card": 2}
        assert stats["most_common_category"] == "validation_error"
        assert stats["error_severity_distribution"]["medium"] == 3

    def test_history_is_bounded(self, error_handler):
        """Test error history keeps only the newest entries."""
        for index in range(8):
            error_handler.handle_error(WidgetError(f"error {index}"))

        assert len(error_handler.error_history) == 5
        assert error_handler.error_history[0].message == "error 3"

    def test_recent_errors(self, error_handler):
        """Test recent errors listing."""
        error_handler.handle_error(NotCacheableError("Sidebar"), request_id="abc")

        recent = error_handler.get_recent_errors(limit=10)

        assert len(recent) == 1
        assert recent[0]["widget"] == "Sidebar"
        assert recent[0]["request_id"] == "abc"
        assert recent[0]["category"] == "cache_error"
