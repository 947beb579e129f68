"""
Main logger for HTTP client.

Wraps a stdlib logger with configured handlers, formatters and filters.
Keyword arguments become structured fields after sensitive-data masking.
"""

import logging
from typing import Any, List, Optional

from .config import LoggingConfig
from .formatters import get_formatter
from .filters import TraceContextFilter, ExtraFieldsFilter
from .handlers import create_console_handler, create_file_handler
from ...utils.sanitizer import mask_sensitive_data


class HTTPClientLogger:
    """
    Structured logger used by HTTPClient and AsyncHTTPClient.

    Example:
        >>> config = LoggingConfig(level="INFO", format="json")
        >>> logger = HTTPClientLogger(config, name="http_tracing.api.example.com")
        >>> logger.info("Request completed", method="GET", status_code=200)
    """

    def __init__(self, config: Optional[LoggingConfig] = None, name: str = "http_tracing.client"):
        """
        Args:
            config: Logging configuration (uses defaults if None)
            name: Logger name
        """
        self.config = config or LoggingConfig()
        self.name = name
        self._closed = False

        level = getattr(logging, self.config.level)

        self._logger = logging.getLogger(name)
        self._logger.setLevel(level)
        self._logger.propagate = False  # Don't propagate to root logger

        # Remove existing handlers (if reinitializing)
        self._logger.handlers.clear()

        filters: List[logging.Filter] = []
        if self.config.enable_trace_context:
            filters.append(TraceContextFilter())
        if self.config.extra_fields:
            filters.append(ExtraFieldsFilter(self.config.extra_fields))

        formatter = get_formatter(self.config.format)

        if self.config.enable_console:
            self._logger.addHandler(
                create_console_handler(level=level, formatter=formatter, filters=filters)
            )

        if self.config.enable_file and self.config.file_path:
            self._logger.addHandler(
                create_file_handler(
                    file_path=self.config.file_path,
                    level=level,
                    formatter=formatter,
                    filters=filters
                )
            )

    def _log(self, level: int, message: str, exc_info: bool = False, **kwargs: Any) -> None:
        if self._closed:
            return
        self._logger.log(level, message, exc_info=exc_info, extra=mask_sensitive_data(kwargs))

    def debug(self, message: str, **kwargs: Any) -> None:
        self._log(logging.DEBUG, message, **kwargs)

    def info(self, message: str, **kwargs: Any) -> None:
        """
        Log info message.

        Example:
            >>> logger.info("Request completed", status_code=200, duration_ms=150)
        """
        self._log(logging.INFO, message, **kwargs)

    def warning(self, message: str, **kwargs: Any) -> None:
        self._log(logging.WARNING, message, **kwargs)

    def error(self, message: str, **kwargs: Any) -> None:
        self._log(logging.ERROR, message, **kwargs)

    def exception(self, message: str, **kwargs: Any) -> None:
        """Log error with traceback; call from an exception handler."""
        self._log(logging.ERROR, message, exc_info=True, **kwargs)

    def close(self) -> None:
        """
        Flush and close all handlers.

        Idempotent: safe to call multiple times.
        """
        if self._closed:
            return

        for handler in self._logger.handlers[:]:
            handler.flush()
            handler.close()
            self._logger.removeHandler(handler)

        self._closed = True

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
