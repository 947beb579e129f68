"""
Logging configuration for HTTP client.

Level and format are plain strings normalized on construction, so
``LoggingConfig(level="debug", format="JSON")`` is valid.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
FORMATS = ("json", "text", "colored")


@dataclass(frozen=True)
class LoggingConfig:
    """
    Logging of request lifecycle events (started, completed, failed).

    Attributes:
        level: Minimum level name
        format: json, text or colored
        enable_console: Write to stdout
        enable_file: Write to a rotating file at ``file_path``
        file_path: Log file path
        enable_trace_context: Add trace_id/span_id of the active span
        extra_fields: Static fields added to every record (service, env, ...)

    Example:
        >>> LoggingConfig(level="debug", format="json").level
        'DEBUG'
    """

    level: str = "INFO"
    format: str = "text"
    enable_console: bool = True
    enable_file: bool = False
    file_path: Optional[str] = None
    enable_trace_context: bool = True
    extra_fields: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        level = self.level.upper()
        if level not in LEVELS:
            raise ValueError(f"Unknown log level: {self.level}. Available: {', '.join(LEVELS)}")

        log_format = self.format.lower()
        if log_format not in FORMATS:
            raise ValueError(f"Unknown log format: {self.format}. Available: {', '.join(FORMATS)}")

        if self.enable_file and not self.file_path:
            raise ValueError("file_path is required when enable_file=True")

        object.__setattr__(self, 'level', level)
        object.__setattr__(self, 'format', log_format)
