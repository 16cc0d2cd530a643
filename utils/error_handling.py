"""
Error Handling

Provides the widget error taxonomy and centralized error reporting for
rendering, caching and form building.
"""

import logging
import time
import traceback
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import Any, Dict, List, Optional


class ErrorSeverity(str, Enum):
    """Error severity levels."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """Error categories for classification."""

    RENDER_ERROR = "render_error"
    CACHE_ERROR = "cache_error"
    FORM_BUILDER_ERROR = "form_builder_error"
    CONFIGURATION_ERROR = "configuration_error"
    VALIDATION_ERROR = "validation_error"
    UNKNOWN_ERROR = "unknown_error"


@dataclass
class ErrorContext:
    """Comprehensive error context information."""

    error_id: str
    timestamp: datetime
    category: ErrorCategory
    severity: ErrorSeverity
    message: str
    details: Dict[str, Any] = field(default_factory=dict)
    widget: Optional[str] = None
    operation: Optional[str] = None
    request_id: Optional[str] = None
    stack_trace: Optional[str] = None
    recovery_suggestions: List[str] = field(default_factory=list)


class WidgetError(Exception):
    """Base exception class for widget rendering errors."""

    def __init__(
        self,
        message: str,
        category: ErrorCategory = ErrorCategory.UNKNOWN_ERROR,
        severity: ErrorSeverity = ErrorSeverity.MEDIUM,
        details: Dict[str, Any] = None,
        widget: str = None,
        operation: str = None,
        recoverable: bool = True,
    ):
        super().__init__(message)
        self.message = message
        self.category = category
        self.severity = severity
        self.details = details or {}
        self.widget = widget
        self.operation = operation
        self.recoverable = recoverable
        self.timestamp = datetime.now()
        self.error_id = f"{category.value}_{int(time.time() * 1000)}"


class UnsupportedOperation(WidgetError, AttributeError):
    """Raised when neither a form proxy nor its parent builder understands a call."""

    def __init__(self, name: str, resolved_name: str = None, builder: str = None, **kwargs):
        resolved_name = resolved_name or name
        message = f"undefined form builder method '{name}'"
        if resolved_name != name:
            message += f" (resolved to '{resolved_name}')"
        if builder:
            message += f" for {builder}"

        super().__init__(
            message,
            category=ErrorCategory.FORM_BUILDER_ERROR,
            details={"name": name, "resolved_name": resolved_name, "builder": builder},
            operation=name,
            recoverable=False,
            **kwargs,
        )
        self.name = name
        self.resolved_name = resolved_name


class FormBuilderError(WidgetError):
    """Form builder configuration errors."""

    def __init__(self, message: str, builder: str = None, **kwargs):
        super().__init__(
            message,
            category=ErrorCategory.FORM_BUILDER_ERROR,
            severity=ErrorSeverity.HIGH,
            details={"builder": builder},
            **kwargs,
        )


class CacheBackendError(WidgetError):
    """Fragment cache storage errors."""

    def __init__(self, message: str, **kwargs):
        super().__init__(message, category=ErrorCategory.CACHE_ERROR, **kwargs)


class NotCacheableError(WidgetError):
    """Raised when cache keys are requested for a widget without a cacheable declaration."""

    def __init__(self, widget: str, **kwargs):
        super().__init__(
            f"{widget} has no cacheable declaration",
            category=ErrorCategory.CACHE_ERROR,
            severity=ErrorSeverity.LOW,
            widget=widget,
            **kwargs,
        )


class MissingNeedsError(WidgetError):
    """A widget was constructed without one of its required needed variables."""

    def __init__(self, widget: str, missing: List[str], **kwargs):
        super().__init__(
            f"Missing parameter(s) for {widget}: {', '.join(missing)}",
            category=ErrorCategory.VALIDATION_ERROR,
            details={"missing": list(missing)},
            widget=widget,
            **kwargs,
        )
        self.missing = list(missing)


class ExcessNeedsError(WidgetError):
    """A widget was constructed with parameters it does not declare."""

    def __init__(self, widget: str, excess: List[str], **kwargs):
        super().__init__(
            f"Excess parameter(s) for {widget}: {', '.join(excess)}",
            category=ErrorCategory.VALIDATION_ERROR,
            details={"excess": list(excess)},
            widget=widget,
            **kwargs,
        )
        self.excess = list(excess)


class ErrorHandler:
    """Centralized error handling and reporting."""

    def __init__(self, max_history_size: int = 1000):
        self.logger = logging.getLogger(__name__)
        self.error_history: List[ErrorContext] = []
        self.max_history_size = max_history_size

        # Error statistics
        self.error_counts: Dict[ErrorCategory, int] = {}
        self.widget_errors: Dict[str, int] = {}

    def handle_error(self, error: Exception, context: Dict[str, Any] = None, request_id: str = None) -> ErrorContext:
        """Handle and log an error with full context."""

        if isinstance(error, WidgetError):
            merged_details = {**(error.details or {}), **(context or {})}
            error_context = ErrorContext(
                error_id=error.error_id,
                timestamp=error.timestamp,
                category=error.category,
                severity=error.severity,
                message=error.message,
                details=merged_details,
                widget=error.widget,
                operation=error.operation,
                request_id=request_id,
                stack_trace=traceback.format_exc(),
            )
        else:
            error_context = ErrorContext(
                error_id=f"error_{int(time.time() * 1000)}",
                timestamp=datetime.now(),
                category=ErrorCategory.UNKNOWN_ERROR,
                severity=ErrorSeverity.MEDIUM,
                message=str(error),
                details=context or {},
                request_id=request_id,
                stack_trace=traceback.format_exc(),
            )

        error_context.recovery_suggestions = self._get_recovery_suggestions(error_context)

        self._log_error(error_context)
        self._update_statistics(error_context)
        self._store_error(error_context)

        return error_context

    def _get_recovery_suggestions(self, error_context: ErrorContext) -> List[str]:
        """Generate recovery suggestions based on error type."""
        suggestions = []

        if error_context.category == ErrorCategory.FORM_BUILDER_ERROR:
            suggestions.extend(
                [
                    "Check the form builder class path in the forms configuration",
                    "Verify the parent builder defines the called method",
                ]
            )
        elif error_context.category == ErrorCategory.CACHE_ERROR:
            suggestions.extend(
                [
                    "Verify the cache backend settings",
                    "Clear the fragment cache and retry",
                ]
            )
        elif error_context.category == ErrorCategory.VALIDATION_ERROR:
            suggestions.append("Check the parameters passed to the widget against its needs")

        return suggestions

    def _log_error(self, error_context: ErrorContext):
        """Log error with appropriate level."""
        log_data = {
            "error_id": error_context.error_id,
            "category": error_context.category.value,
            "severity": error_context.severity.value,
            "widget": error_context.widget,
            "operation": error_context.operation,
            "request_id": error_context.request_id,
            "details": error_context.details,
        }

        if error_context.severity == ErrorSeverity.CRITICAL:
            self.logger.critical(f"CRITICAL ERROR: {error_context.message}", extra=log_data)
        elif error_context.severity == ErrorSeverity.HIGH:
            self.logger.error(f"HIGH SEVERITY: {error_context.message}", extra=log_data)
        elif error_context.severity == ErrorSeverity.MEDIUM:
            self.logger.warning(f"MEDIUM SEVERITY: {error_context.message}", extra=log_data)
        else:
            self.logger.info(f"LOW SEVERITY: {error_context.message}", extra=log_data)

    def _update_statistics(self, error_context: ErrorContext):
        """Update error statistics."""
        self.error_counts[error_context.category] = self.error_counts.get(error_context.category, 0) + 1

        if error_context.widget:
            self.widget_errors[error_context.widget] = self.widget_errors.get(error_context.widget, 0) + 1

    def _store_error(self, error_context: ErrorContext):
        """Store error in history."""
        self.error_history.append(error_context)

        if len(self.error_history) > self.max_history_size:
            self.error_history = self.error_history[-self.max_history_size :]

    def get_error_statistics(self) -> Dict[str, Any]:
        """Get error statistics."""
        recent_errors = [e for e in self.error_history if e.timestamp > datetime.now() - timedelta(hours=24)]

        return {
            "total_errors": len(self.error_history),
            "recent_errors_24h": len(recent_errors),
            "errors_by_category": {category.value: count for category, count in self.error_counts.items()},
            "errors_by_widget": dict(self.widget_errors),
            "most_common_category": (
                max(self.error_counts, key=self.error_counts.get).value if self.error_counts else None
            ),
            "error_severity_distribution": self._get_severity_distribution(),
        }

    def _get_severity_distribution(self) -> Dict[str, int]:
        """Get distribution of error severities."""
        distribution = {severity.value: 0 for severity in ErrorSeverity}

        for error in self.error_history:
            distribution[error.severity.value] += 1

        return distribution

    def get_recent_errors(self, limit: int = 50) -> List[Dict[str, Any]]:
        """Get recent errors, newest first."""
        recent_errors = sorted(self.error_history[-limit:], key=lambda e: e.timestamp, reverse=True)

        return [
            {
                "error_id": error.error_id,
                "timestamp": error.timestamp.isoformat(),
                "category": error.category.value,
                "severity": error.severity.value,
                "message": error.message,
                "widget": error.widget,
                "operation": error.operation,
                "request_id": error.request_id,
                "recovery_suggestions": error.recovery_suggestions,
            }
            for error in recent_errors
        ]


# Global error handler instance
error_handler = ErrorHandler()
