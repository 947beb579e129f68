"""
Basic tracing examples for http-client-tracing.

Every request made through the client gets its own CLIENT span, child of
the root span returned by ``apply_tracing``. Spans are printed to the
console by the OpenTelemetry SDK (``pip install opentelemetry-sdk``).
"""

import os
import sys

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..', 'src')))

from opentelemetry import trace
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import ConsoleSpanExporter, SimpleSpanProcessor

from http_tracing import HTTPClient, HTTPClientException, LoggingConfig
from http_tracing.contrib.opentelemetry import create_tracing, get_default_tracer


def setup_tracer_provider():
    """Composition root: the only place the global provider is configured."""
    provider = TracerProvider()
    provider.add_span_processor(SimpleSpanProcessor(ConsoleSpanExporter()))
    trace.set_tracer_provider(provider)
    return provider


def example_1_span_per_request():
    """Example 1: one root span, one child span per request."""
    print("\n" + "=" * 60)
    print("EXAMPLE 1: Span per request")
    print("=" * 60 + "\n")

    apply_tracing = create_tracing(get_default_tracer())

    with HTTPClient(base_url="https://httpbin.org") as client:
        root_span = apply_tracing(client, span_name="httpbin")

        response = client.get("/headers")
        print(f"Status: {response.status_code}")
        print(f"Sent traceparent: {response.json()['headers'].get('Traceparent')}")

        try:
            client.get("/status/503")
        except HTTPClientException as e:
            print(f"Error: {e}")
            print(f"Span finished for failed request: {e.config.span.name}")

    root_span.end()


def example_2_existing_root_span():
    """Example 2: attach requests to a span the application already has."""
    print("\n" + "=" * 60)
    print("EXAMPLE 2: Existing root span")
    print("=" * 60 + "\n")

    tracer = get_default_tracer("example-app")
    apply_tracing = create_tracing(tracer)

    with tracer.start_as_current_span("handle-order") as order_span:
        with HTTPClient(base_url="https://httpbin.org") as client:
            apply_tracing(client, span=order_span)
            response = client.post("/post", json={"order_id": 42})
            print(f"Status: {response.status_code}")


def example_3_logs_with_trace_ids():
    """Example 3: JSON logs carrying trace_id/span_id."""
    print("\n" + "=" * 60)
    print("EXAMPLE 3: Logs with trace context")
    print("=" * 60 + "\n")

    tracer = get_default_tracer("example-app")
    logging_config = LoggingConfig(level="INFO", format="json")

    with tracer.start_as_current_span("batch-job"):
        with HTTPClient(base_url="https://httpbin.org", logging=logging_config) as client:
            root_span = create_tracing(tracer)(client, span_name="httpbin")
            client.get("/get", params={"api_key": "hidden-in-logs-and-spans"})
            root_span.end()


if __name__ == "__main__":
    provider = setup_tracer_provider()
    try:
        example_1_span_per_request()
        example_2_existing_root_span()
        example_3_logs_with_trace_ids()
    finally:
        provider.shutdown()
