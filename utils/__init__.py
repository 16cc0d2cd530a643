"""
Utilities Package

Provides the error taxonomy and error reporting shared by every package.
"""

from .error_handling import (
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
    error_handler,
)

__all__ = [
    'WidgetError',
    'UnsupportedOperation',
    'FormBuilderError',
    'CacheBackendError',
    'NotCacheableError',
    'MissingNeedsError',
    'ExcessNeedsError',
    'ErrorCategory',
    'ErrorSeverity',
    'ErrorContext',
    'ErrorHandler',
    'error_handler',
]
