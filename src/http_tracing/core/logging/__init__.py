"""
Logging system for HTTP client.

Provides structured logging with multiple formats, handlers, and filters.

Example:
    >>> from http_tracing.core.logging import HTTPClientLogger, LoggingConfig
    >>>
    >>> config = LoggingConfig(level="DEBUG", format="json")
    >>> logger = HTTPClientLogger(config)
    >>> logger.info("Request started", method="GET", url="https://api.com")
"""

from .config import LoggingConfig
from .logger import HTTPClientLogger
from .formatters import JSONFormatter, TextFormatter, ColoredFormatter, get_formatter
from .filters import TraceContextFilter, ExtraFieldsFilter
from .handlers import create_console_handler, create_file_handler

__all__ = [
    # Config
    "LoggingConfig",
    # Logger
    "HTTPClientLogger",
    # Formatters
    "JSONFormatter",
    "TextFormatter",
    "ColoredFormatter",
    "get_formatter",
    # Filters
    "TraceContextFilter",
    "ExtraFieldsFilter",
    # Handlers
    "create_console_handler",
    "create_file_handler",
]
