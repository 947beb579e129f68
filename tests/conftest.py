"""
Pytest configuration and fixtures for http-client-tracing tests.
"""

import pytest
import responses as responses_lib
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import SimpleSpanProcessor
from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter

from http_tracing.core.http_client import HTTPClient
from http_tracing.core.logging.config import LoggingConfig


@pytest.fixture
def base_url():
    """Base URL for testing."""
    return "https://api.example.com"


@pytest.fixture
def mock_responses():
    """Mock HTTP responses using responses library."""
    with responses_lib.RequestsMock(assert_all_requests_are_fired=False) as rsps:
        yield rsps


@pytest.fixture
def client(base_url):
    """HTTP client instance for testing."""
    client = HTTPClient(base_url=base_url, timeout=10)
    yield client
    client.close()


@pytest.fixture
def span_exporter():
    """In-memory exporter collecting finished spans."""
    exporter = InMemorySpanExporter()
    yield exporter
    exporter.clear()


@pytest.fixture
def tracer_provider(span_exporter):
    """
    Local TracerProvider (the global provider is never touched).
    """
    provider = TracerProvider()
    provider.add_span_processor(SimpleSpanProcessor(span_exporter))
    yield provider
    provider.shutdown()


@pytest.fixture
def tracer(tracer_provider):
    return tracer_provider.get_tracer("tests")


@pytest.fixture
def logging_config_with_file(tmp_path):
    """LoggingConfig writing JSON to a temporary file."""
    return LoggingConfig(
        level="DEBUG",
        format="json",
        enable_console=False,
        enable_file=True,
        file_path=str(tmp_path / "logs" / "client.log"),
    )
