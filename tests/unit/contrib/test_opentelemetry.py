"""
Tests for OpenTelemetry tracing interceptors.

Spans are collected with a local TracerProvider and InMemorySpanExporter.
"""

import pytest
import requests
import responses
from unittest.mock import Mock

from opentelemetry import trace
from opentelemetry.trace import SpanKind, StatusCode

from http_tracing.contrib.opentelemetry import (
    REQUEST_ERROR_REASON,
    create_tracing,
    get_default_tracer,
    request_error_interceptor,
    response_error_interceptor,
    response_success_interceptor,
)
from http_tracing.core.context import RequestConfig
from http_tracing.core.exceptions import (
    ConnectionError,
    HTTPClientException,
    HTTPError,
    InvalidArgumentError,
    ServerError,
)


def finished_ids(exporter):
    """Span ids of exported spans (the exporter holds read-only copies)."""
    return [span.context.span_id for span in exporter.get_finished_spans()]


@pytest.fixture
def apply_tracing(tracer):
    return create_tracing(tracer)


class TestCreateTracing:
    """Factory and apply() argument handling."""

    def test_returns_function(self, tracer):
        assert callable(create_tracing(tracer))

    def test_tracer_required(self):
        with pytest.raises(InvalidArgumentError):
            create_tracing(None)

    def test_no_client(self, apply_tracing):
        with pytest.raises(InvalidArgumentError):
            apply_tracing()

    def test_client_without_interceptors(self, apply_tracing):
        with pytest.raises(TypeError):
            apply_tracing(object(), span_name="test")

    def test_no_span_or_span_name(self, apply_tracing, client):
        with pytest.raises(InvalidArgumentError):
            apply_tracing(client)

    def test_empty_span_name(self, apply_tracing, client):
        with pytest.raises(InvalidArgumentError):
            apply_tracing(client, span_name="")

    def test_span_name_creates_root_span(self, apply_tracing, client):
        root = apply_tracing(client, span_name="test")

        assert isinstance(root, trace.Span)
        assert root.name == "test"

    def test_given_span_is_returned_unchanged(self, apply_tracing, client, tracer):
        span = tracer.start_span("test")

        assert apply_tracing(client, span=span) is span

    def test_registers_one_pair_per_phase(self, apply_tracing, client):
        apply_tracing(client, span_name="test")

        assert len(client.interceptors.request) == 1
        assert len(client.interceptors.response) == 1

    def test_default_tracer_helper(self):
        assert get_default_tracer() is not None


class TestRequestSpans:
    """Spans created for successful requests."""

    def test_response_config_carries_finished_span(
        self, apply_tracing, client, mock_responses, base_url, span_exporter
    ):
        mock_responses.add(responses.GET, f"{base_url}/users", json={"ok": True}, status=200)
        apply_tracing(client, span_name="test")

        response = client.get("/users")

        span = response.config.span
        assert isinstance(span, trace.Span)
        assert span.end_time is not None
        assert finished_ids(span_exporter) == [span.get_span_context().span_id]

    def test_span_name_kind_and_attributes(
        self, apply_tracing, client, mock_responses, base_url, span_exporter
    ):
        mock_responses.add(responses.GET, f"{base_url}/users", status=200)
        apply_tracing(client, span_name="test")

        client.get("/users")

        (span,) = span_exporter.get_finished_spans()
        assert span.name == f"GET: {base_url}/users"
        assert span.kind == SpanKind.CLIENT
        assert span.attributes["http.request.method"] == "GET"
        assert span.attributes["url.full"] == f"{base_url}/users"
        assert span.attributes["http.response.status_code"] == 200
        assert span.status.status_code == StatusCode.UNSET

    def test_url_attribute_is_sanitized(
        self, apply_tracing, client, mock_responses, span_exporter
    ):
        mock_responses.add(responses.GET, "https://other.example.com/data", status=200)
        apply_tracing(client, span_name="test")

        client.get("https://other.example.com/data?token=abc&page=2")

        (span,) = span_exporter.get_finished_spans()
        assert span.attributes["url.full"] == "https://other.example.com/data?token=REDACTED&page=2"

    def test_span_is_child_of_root(
        self, apply_tracing, client, mock_responses, base_url, span_exporter
    ):
        mock_responses.add(responses.GET, f"{base_url}/users", status=200)
        root = apply_tracing(client, span_name="test")

        client.get("/users")

        (span,) = span_exporter.get_finished_spans()
        root_context = root.get_span_context()
        assert span.parent.span_id == root_context.span_id
        assert span.context.trace_id == root_context.trace_id

    def test_traceparent_header_is_injected(
        self, apply_tracing, client, mock_responses, base_url, span_exporter
    ):
        mock_responses.add(responses.GET, f"{base_url}/users", status=200)
        apply_tracing(client, span_name="test")

        response = client.get("/users")

        sent = mock_responses.calls[0].request
        ctx = response.config.span.get_span_context()
        assert sent.headers["traceparent"] == (
            f"00-{ctx.trace_id:032x}-{ctx.span_id:016x}-{ctx.trace_flags:02x}"
        )

    def test_caller_headers_are_kept(
        self, apply_tracing, client, mock_responses, base_url
    ):
        mock_responses.add(responses.GET, f"{base_url}/users", status=200)
        apply_tracing(client, span_name="test")

        client.get("/users", headers={"X-Custom": "value"})

        sent = mock_responses.calls[0].request
        assert sent.headers["X-Custom"] == "value"
        assert "traceparent" in sent.headers

    def test_root_span_is_not_finished(
        self, apply_tracing, client, mock_responses, base_url, span_exporter
    ):
        mock_responses.add(responses.GET, f"{base_url}/users", status=200)
        root = apply_tracing(client, span_name="test")

        client.get("/users")

        assert root.end_time is None
        assert root.get_span_context().span_id not in finished_ids(span_exporter)

    def test_applying_twice_creates_one_span_per_request(
        self, apply_tracing, client, mock_responses, base_url, span_exporter
    ):
        mock_responses.add(responses.GET, f"{base_url}/users", status=200)
        apply_tracing(client, span_name="first")
        apply_tracing(client, span_name="second")

        client.get("/users")

        assert len(span_exporter.get_finished_spans()) == 1


class TestErrorSpans:
    """Spans finished on the error path."""

    def test_server_error_span(
        self, apply_tracing, client, mock_responses, base_url, span_exporter
    ):
        mock_responses.add(responses.GET, f"{base_url}/error", body="test", status=500)
        apply_tracing(client, span_name="test")

        with pytest.raises(ServerError) as exc_info:
            client.get("/error")

        span = exc_info.value.config.span
        assert isinstance(span, trace.Span)
        assert span.end_time is not None
        assert span.attributes["error"] is True
        assert span.attributes["http.response.status_code"] == 500
        assert span.attributes["error.type"] == "ServerError"
        assert span.status.status_code == StatusCode.ERROR
        assert [event.name for event in span.events] == ["exception"]
        assert finished_ids(span_exporter) == [span.get_span_context().span_id]

    def test_client_error_is_reraised_unchanged(
        self, apply_tracing, client, mock_responses, base_url
    ):
        mock_responses.add(responses.GET, f"{base_url}/missing", status=404)
        apply_tracing(client, span_name="test")

        with pytest.raises(HTTPError) as exc_info:
            client.get("/missing")

        assert type(exc_info.value) is HTTPError
        assert exc_info.value.status_code == 404

    def test_network_error_span(
        self, apply_tracing, client, mock_responses, base_url, span_exporter
    ):
        mock_responses.add(
            responses.GET, f"{base_url}/down",
            body=requests.exceptions.ConnectionError("refused"),
        )
        apply_tracing(client, span_name="test")

        with pytest.raises(ConnectionError):
            client.get("/down")

        (span,) = span_exporter.get_finished_spans()
        assert span.attributes["error.type"] == "ConnectionError"
        assert "http.response.status_code" not in span.attributes
        assert span.status.status_code == StatusCode.ERROR

    def test_request_interceptor_error_passes_through(
        self, apply_tracing, client, mock_responses, span_exporter
    ):
        apply_tracing(client, span_name="test")
        error = HTTPClientException("blocked")

        def reject(config):
            raise error

        # Registered after tracing, so it runs before it
        client.interceptors.request.use(reject)

        with pytest.raises(HTTPClientException) as exc_info:
            client.get("/users")

        assert exc_info.value is error
        assert len(mock_responses.calls) == 0
        assert finished_ids(span_exporter) == []

    def test_failure_in_later_request_interceptor_finishes_span(
        self, apply_tracing, client, mock_responses, span_exporter
    ):
        def reject(config):
            raise ValueError("missing tenant header")

        # Registered before tracing, so it runs after the span is started
        client.interceptors.request.use(reject)
        apply_tracing(client, span_name="test")

        with pytest.raises(ValueError) as exc_info:
            client.get("/users")

        assert len(mock_responses.calls) == 0
        (span,) = span_exporter.get_finished_spans()
        assert span.context.span_id == exc_info.value.config.span.get_span_context().span_id
        assert span.attributes["error.type"] == "ValueError"
        assert span.status.status_code == StatusCode.ERROR

    def test_invalid_interceptor_result_finishes_span(
        self, apply_tracing, client, mock_responses, span_exporter
    ):
        client.interceptors.request.use(lambda config: None)
        apply_tracing(client, span_name="test")

        with pytest.raises(HTTPClientException, match="must return RequestConfig"):
            client.get("/users")

        (span,) = span_exporter.get_finished_spans()
        assert span.attributes["error"] is True
        assert len(mock_responses.calls) == 0

    def test_request_preparation_error_finishes_span(
        self, apply_tracing, client, mock_responses, span_exporter
    ):
        apply_tracing(client, span_name="test")

        with pytest.raises(HTTPClientException) as exc_info:
            client.post("/users", json=object())

        error = exc_info.value
        assert isinstance(error.__cause__, TypeError)
        assert error.config.method == "POST"
        (span,) = span_exporter.get_finished_spans()
        assert span.context.span_id == error.config.span.get_span_context().span_id
        assert span.attributes["error.type"] == "HTTPClientException"
        assert span.status.status_code == StatusCode.ERROR


class TestBestEffort:
    """Tracing failures never change the request flow."""

    def test_inject_failure_does_not_fail_request(
        self, tracer, client, mock_responses, base_url, span_exporter
    ):
        mock_responses.add(responses.GET, f"{base_url}/users", status=200)
        propagator = Mock()
        propagator.inject.side_effect = RuntimeError("carrier rejected")
        create_tracing(tracer, propagator=propagator)(client, span_name="test")

        response = client.get("/users")

        assert response.status_code == 200
        assert "traceparent" not in mock_responses.calls[0].request.headers
        propagator.inject.assert_called_once()
        assert len(span_exporter.get_finished_spans()) == 1

    def test_start_span_failure_does_not_fail_request(
        self, client, mock_responses, base_url
    ):
        mock_responses.add(responses.GET, f"{base_url}/users", status=200)
        tracer = Mock()
        tracer.start_span.side_effect = RuntimeError("tracer down")
        create_tracing(tracer)(client, span=Mock())

        response = client.get("/users")

        assert response.status_code == 200
        assert response.config.span is None

    def test_set_attribute_failure_still_finishes_span(self, client, mock_responses, base_url):
        mock_responses.add(responses.GET, f"{base_url}/users", status=200)
        span = Mock()
        span.set_attribute.side_effect = RuntimeError("bad attribute")
        tracer = Mock()
        tracer.start_span.return_value = span
        create_tracing(tracer, propagator=Mock())(client, span=Mock())

        response = client.get("/users")

        assert response.status_code == 200
        span.end.assert_called_once()

    def test_end_failure_does_not_hide_http_error(self, client, mock_responses, base_url):
        mock_responses.add(responses.GET, f"{base_url}/error", status=503)
        span = Mock()
        span.end.side_effect = RuntimeError("exporter down")
        tracer = Mock()
        tracer.start_span.return_value = span
        create_tracing(tracer, propagator=Mock())(client, span=Mock())

        with pytest.raises(ServerError):
            client.get("/error")


class TestInterceptorFunctions:
    """Handlers called directly."""

    def make_config(self, span):
        config = RequestConfig("GET", "/users", base_url="https://api.example.com")
        config.span = span
        return config

    def test_request_error_interceptor_finishes_span(self, tracer):
        span = tracer.start_span("request")
        error = HTTPClientException("bad config", config=self.make_config(span))

        with pytest.raises(HTTPClientException) as exc_info:
            request_error_interceptor(error)

        assert exc_info.value is error
        assert span.end_time is not None
        assert span.attributes["error"] is True
        assert span.attributes["reason"] == REQUEST_ERROR_REASON

    def test_request_error_interceptor_without_config(self):
        error = ValueError("plain")

        with pytest.raises(ValueError) as exc_info:
            request_error_interceptor(error)

        assert exc_info.value is error

    def test_response_success_without_span(self):
        response = Mock(spec=["status_code"])
        assert response_success_interceptor(response) is response

    def test_span_finished_at_most_once(self):
        span = Mock()
        config = self.make_config(span)
        response = Mock(status_code=200, config=config)

        response_success_interceptor(response)
        response_success_interceptor(response)
        with pytest.raises(HTTPClientException):
            response_error_interceptor(HTTPClientException("late", config=config))

        span.end.assert_called_once()
        span.record_exception.assert_not_called()
