"""
Log filters that enrich records with trace context and static fields.
"""

import logging
from typing import Any, Dict

from opentelemetry import trace


class TraceContextFilter(logging.Filter):
    """
    Adds ``trace_id`` and ``span_id`` of the current OpenTelemetry span.

    Records emitted outside a valid span context are left untouched.

    Example:
        >>> handler.addFilter(TraceContextFilter())
        >>> with tracer.start_as_current_span("work"):
        ...     logger.info("inside")  # carries trace_id / span_id
    """

    def filter(self, record: logging.LogRecord) -> bool:
        span_context = trace.get_current_span().get_span_context()
        if span_context.is_valid:
            record.trace_id = trace.format_trace_id(span_context.trace_id)
            record.span_id = trace.format_span_id(span_context.span_id)
        return True


class ExtraFieldsFilter(logging.Filter):
    """
    Adds static fields (service, environment, ...) to all records.

    Fields already present on the record are not overwritten.
    """

    def __init__(self, extra_fields: Dict[str, Any]):
        super().__init__()
        self.extra_fields = extra_fields

    def filter(self, record: logging.LogRecord) -> bool:
        for key, value in self.extra_fields.items():
            if not hasattr(record, key):
                setattr(record, key, value)
        return True
