"""
OpenTelemetry tracing for http-client-tracing.

Example:
    >>> from http_tracing import HTTPClient
    >>> from http_tracing.contrib.opentelemetry import create_tracing, get_default_tracer
    >>>
    >>> from opentelemetry import trace
    >>> from opentelemetry.sdk.trace import TracerProvider
    >>> from opentelemetry.sdk.trace.export import ConsoleSpanExporter, SimpleSpanProcessor
    >>>
    >>> provider = TracerProvider()
    >>> provider.add_span_processor(SimpleSpanProcessor(ConsoleSpanExporter()))
    >>> trace.set_tracer_provider(provider)
    >>>
    >>> apply_tracing = create_tracing(get_default_tracer())
    >>> client = HTTPClient(base_url="https://api.example.com")
    >>> root_span = apply_tracing(client, span_name="users-api")
    >>> response = client.get("/users")  # Traced automatically
"""

from .interceptors import (
    DEFAULT_TRACER_NAME,
    REQUEST_ERROR_REASON,
    create_request_interceptor,
    create_tracing,
    get_default_tracer,
    request_error_interceptor,
    response_error_interceptor,
    response_success_interceptor,
)

__all__ = [
    "DEFAULT_TRACER_NAME",
    "REQUEST_ERROR_REASON",
    "create_request_interceptor",
    "create_tracing",
    "get_default_tracer",
    "request_error_interceptor",
    "response_error_interceptor",
    "response_success_interceptor",
]
