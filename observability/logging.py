"""
Structured Logging System

Provides structured logging with correlation IDs and multiple output formats
for rendering, fragment caching and form building.
"""

import asyncio
import contextvars
import functools
import json
import logging
import sys
import time
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional


class LogLevel(str, Enum):
    """Log levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LogFormat(str, Enum):
    """Log output formats."""

    JSON = "json"
    TEXT = "text"
    COLORED = "colored"


@dataclass
class LogConfig:
    """Logging configuration."""

    level: LogLevel = LogLevel.INFO
    format: LogFormat = LogFormat.JSON
    output_file: Optional[str] = None
    max_file_size: int = 10 * 1024 * 1024  # 10MB
    backup_count: int = 5
    enable_correlation_id: bool = True
    include_caller_info: bool = True
    custom_fields: Dict[str, Any] = None

    def __post_init__(self):
        if self.custom_fields is None:
            self.custom_fields = {}


# Context variable for correlation ID
correlation_id_var: contextvars.ContextVar[str] = contextvars.ContextVar('correlation_id', default=None)

_RESERVED_RECORD_KEYS = {
    'name',
    'msg',
    'args',
    'levelname',
    'levelno',
    'pathname',
    'filename',
    'module',
    'lineno',
    'funcName',
    'created',
    'msecs',
    'relativeCreated',
    'thread',
    'threadName',
    'processName',
    'process',
    'message',
    'exc_info',
    'exc_text',
    'stack_info',
    'taskName',
    'correlation_id',
}


class CorrelationIdFilter(logging.Filter):
    """Add correlation ID to log records."""

    def filter(self, record):
        correlation_id = correlation_id_var.get()
        if correlation_id:
            record.correlation_id = correlation_id
        else:
            record.correlation_id = str(uuid.uuid4())
            correlation_id_var.set(record.correlation_id)
        return True


class JSONFormatter(logging.Formatter):
    """JSON log formatter with structured output."""

    def __init__(self, include_caller_info=True, custom_fields=None):
        super().__init__()
        self.include_caller_info = include_caller_info
        self.custom_fields = custom_fields or {}

    def format(self, record):
        log_entry = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "correlation_id": getattr(record, 'correlation_id', None),
        }

        if self.include_caller_info:
            log_entry.update(
                {
                    "filename": record.filename,
                    "function": record.funcName,
                    "line_number": record.lineno,
                    "module": record.module,
                }
            )

        if record.exc_info:
            log_entry["exception"] = {
                "type": record.exc_info[0].__name__,
                "message": str(record.exc_info[1]),
                "traceback": self.formatException(record.exc_info),
            }

        extra_fields = {
            key: value
            for key, value in record.__dict__.items()
            if key not in _RESERVED_RECORD_KEYS and not key.startswith('_')
        }
        if extra_fields:
            log_entry["extra"] = extra_fields

        if self.custom_fields:
            log_entry.update(self.custom_fields)

        return json.dumps(log_entry, default=str, ensure_ascii=False)


class ColoredFormatter(logging.Formatter):
    """Colored console formatter for development."""

    COLORS = {
        'DEBUG': '\033[36m',  # Cyan
        'INFO': '\033[32m',  # Green
        'WARNING': '\033[33m',  # Yellow
        'ERROR': '\033[31m',  # Red
        'CRITICAL': '\033[35m',  # Magenta
        'ENDC': '\033[0m',
        'BOLD': '\033[1m',
    }

    def __init__(self):
        super().__init__()
        self.format_string = (
            "{color}{bold}[{levelname:8}]{endc} "
            "{color}{timestamp}{endc} "
            "{bold}{logger}{endc}:{function}:{line} "
            "- {message}"
        )

    def format(self, record):
        color = self.COLORS.get(record.levelname, '')

        formatted_message = self.format_string.format(
            color=color,
            bold=self.COLORS['BOLD'],
            endc=self.COLORS['ENDC'],
            levelname=record.levelname,
            timestamp=datetime.fromtimestamp(record.created).strftime('%H:%M:%S'),
            logger=record.name,
            function=record.funcName,
            line=record.lineno,
            message=record.getMessage(),
        )

        correlation_id = getattr(record, 'correlation_id', None)
        if correlation_id:
            formatted_message += f" {self.COLORS['BOLD']}(ID: {correlation_id[:8]}){self.COLORS['ENDC']}"

        if record.exc_info:
            formatted_message += "\n" + self.formatException(record.exc_info)

        return formatted_message


class StructuredLogger:
    """Structured logger with contextual information."""

    def __init__(self, name: str, config: LogConfig = None):
        self.name = name
        self.config = config or LogConfig()
        self.logger = logging.getLogger(name)
        self._setup_logger()

    def _setup_logger(self):
        """Setup logger with configuration."""
        self.logger.setLevel(getattr(logging, self.config.level.value))

        self.logger.handlers.clear()
        self.logger.filters.clear()

        if self.config.enable_correlation_id:
            self.logger.addFilter(CorrelationIdFilter())

        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(getattr(logging, self.config.level.value))

        if self.config.format == LogFormat.JSON:
            console_formatter = JSONFormatter(
                include_caller_info=self.config.include_caller_info,
                custom_fields=self.config.custom_fields,
            )
        elif self.config.format == LogFormat.COLORED:
            console_formatter = ColoredFormatter()
        else:  # TEXT
            console_formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')

        console_handler.setFormatter(console_formatter)
        self.logger.addHandler(console_handler)

        if self.config.output_file:
            from logging.handlers import RotatingFileHandler

            file_handler = RotatingFileHandler(
                self.config.output_file, maxBytes=self.config.max_file_size, backupCount=self.config.backup_count
            )
            file_handler.setLevel(getattr(logging, self.config.level.value))

            # Always use JSON format for file output
            file_handler.setFormatter(
                JSONFormatter(
                    include_caller_info=self.config.include_caller_info,
                    custom_fields=self.config.custom_fields,
                )
            )
            self.logger.addHandler(file_handler)

    def _log_with_context(self, level: int, message: str, **kwargs):
        """Log message with additional context."""
        exc_info = kwargs.pop('exc_info', None)
        stack_info = kwargs.pop('stack_info', None)
        stacklevel = kwargs.pop('stacklevel', 1)

        extra = kwargs if kwargs else None

        self.logger.log(
            level, message, exc_info=exc_info, stack_info=stack_info, stacklevel=stacklevel + 1, extra=extra
        )

    def debug(self, message: str, **kwargs):
        self._log_with_context(logging.DEBUG, message, **kwargs)

    def info(self, message: str, **kwargs):
        self._log_with_context(logging.INFO, message, **kwargs)

    def warning(self, message: str, **kwargs):
        self._log_with_context(logging.WARNING, message, **kwargs)

    def error(self, message: str, **kwargs):
        self._log_with_context(logging.ERROR, message, **kwargs)

    def critical(self, message: str, **kwargs):
        self._log_with_context(logging.CRITICAL, message, **kwargs)

    def exception(self, message: str, **kwargs):
        """Log exception with traceback."""
        kwargs['exc_info'] = True
        self.error(message, **kwargs)

    def log_render(self, widget: str, duration_ms: float, cached: bool = False, **kwargs):
        """Log a widget render."""
        self.debug(
            f"Rendered {widget} in {duration_ms:.2f}ms",
            widget=widget,
            duration_ms=duration_ms,
            cached=cached,
            operation_type="render",
            **kwargs,
        )

    def log_cache_event(self, event: str, key: str, **kwargs):
        """Log a fragment cache event (hit, miss, write, eviction)."""
        self.debug(
            f"Fragment cache {event}: {key}",
            cache_event=event,
            cache_key=key,
            operation_type="cache",
            **kwargs,
        )

    def log_request(self, method: str, path: str, status_code: int, response_time_ms: float, **kwargs):
        """Log HTTP request."""
        self.info(
            f"{method} {path} - {status_code}",
            method=method,
            path=path,
            status_code=status_code,
            response_time_ms=response_time_ms,
            request_type="http",
            **kwargs,
        )

    def log_performance(self, operation: str, duration_ms: float, **kwargs):
        """Log performance metrics."""
        self.info(
            f"Performance: {operation} completed in {duration_ms:.2f}ms",
            operation=operation,
            duration_ms=duration_ms,
            operation_type="performance",
            **kwargs,
        )

    def set_correlation_id(self, correlation_id: str):
        correlation_id_var.set(correlation_id)

    def get_correlation_id(self) -> Optional[str]:
        return correlation_id_var.get()


class CorrelationIdMiddleware:
    """Middleware to handle correlation IDs in web requests."""

    def __init__(self, header_name: str = "X-Correlation-ID"):
        self.header_name = header_name

    async def __call__(self, request, call_next):
        """Process request with correlation ID."""
        correlation_id = request.headers.get(self.header_name) or str(uuid.uuid4())
        correlation_id_var.set(correlation_id)

        start_time = time.time()
        response = await call_next(request)
        response.headers[self.header_name] = correlation_id

        get_logger(__name__).log_request(
            request.method, request.url.path, response.status_code, (time.time() - start_time) * 1000
        )
        return response


# Global logger registry
_loggers: Dict[str, StructuredLogger] = {}
_default_config: Optional[LogConfig] = None


def setup_logging(config: LogConfig):
    """Setup global logging configuration."""
    global _default_config
    _default_config = config

    # Loggers created before setup pick up the new configuration
    for name, logger in list(_loggers.items()):
        _loggers[name] = StructuredLogger(name, config)

    _loggers["root"] = StructuredLogger("root", config)


def get_logger(name: str, config: LogConfig = None) -> StructuredLogger:
    """Get or create logger with given name."""
    if name not in _loggers:
        logger_config = config or _default_config or LogConfig()
        _loggers[name] = StructuredLogger(name, logger_config)

    return _loggers[name]


def log_execution_time(operation_name: str = None, logger_name: str = None):
    """Decorator to log function execution time."""

    def decorator(func):
        @functools.wraps(func)
        async def async_wrapper(*args, **kwargs):
            logger = get_logger(logger_name or func.__module__)
            op_name = operation_name or f"{func.__module__}.{func.__name__}"

            start_time = time.time()
            try:
                result = await func(*args, **kwargs)
                logger.log_performance(op_name, (time.time() - start_time) * 1000, success=True)
                return result
            except Exception as e:
                logger.log_performance(op_name, (time.time() - start_time) * 1000, success=False, error=str(e))
                raise

        @functools.wraps(func)
        def sync_wrapper(*args, **kwargs):
            logger = get_logger(logger_name or func.__module__)
            op_name = operation_name or f"{func.__module__}.{func.__name__}"

            start_time = time.time()
            try:
                result = func(*args, **kwargs)
                logger.log_performance(op_name, (time.time() - start_time) * 1000, success=True)
                return result
            except Exception as e:
                logger.log_performance(op_name, (time.time() - start_time) * 1000, success=False, error=str(e))
                raise

        return async_wrapper if asyncio.iscoroutinefunction(func) else sync_wrapper

    return decorator
