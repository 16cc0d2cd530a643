"""
Observability Package

Provides structured logging with correlation IDs for widget rendering.
"""

from .logging import (
    ColoredFormatter,
    CorrelationIdFilter,
    CorrelationIdMiddleware,
    JSONFormatter,
    LogConfig,
    LogFormat,
    LogLevel,
    StructuredLogger,
    correlation_id_var,
    get_logger,
    log_execution_time,
    setup_logging,
)

__all__ = [
    'LogConfig',
    'LogFormat',
    'LogLevel',
    'StructuredLogger',
    'JSONFormatter',
    'ColoredFormatter',
    'CorrelationIdFilter',
    'CorrelationIdMiddleware',
    'correlation_id_var',
    'get_logger',
    'log_execution_time',
    'setup_logging',
]
