"""
OpenTelemetry tracing interceptors for HTTPClient and AsyncHTTPClient.

``create_tracing(tracer)`` returns a function that registers a request
pair and a response pair on a client. Every outgoing request gets a CLIENT
span, child of one root span per client, with W3C Trace Context headers
injected. The span travels on ``RequestConfig.span`` and is finished by
the response pair on success or on error.

Tracing is best-effort: failures inside the tracer or propagator are
logged at DEBUG and never change the request or response flow.
"""

import logging
from typing import Any, Callable, Optional

from opentelemetry import trace
from opentelemetry.propagators.textmap import TextMapPropagator
from opentelemetry.semconv.attributes.error_attributes import ERROR_TYPE
from opentelemetry.semconv.attributes.http_attributes import (
    HTTP_REQUEST_METHOD,
    HTTP_RESPONSE_STATUS_CODE,
)
from opentelemetry.semconv.attributes.url_attributes import URL_FULL
from opentelemetry.trace import Span, SpanKind, Status, StatusCode, Tracer
from opentelemetry.trace.propagation.tracecontext import TraceContextTextMapPropagator

from ...core.context import RequestConfig
from ...core.exceptions import InvalidArgumentError, RequestCancelledError
from ...core.utils import best_effort, sanitize_url

logger = logging.getLogger(__name__)

DEFAULT_TRACER_NAME = "http_tracing"

REQUEST_ERROR_REASON = "error in request"

# RequestConfig.metadata key marking a span that has already been ended
_SPAN_FINISHED = "_tracing_span_finished"


def get_default_tracer(name: str = DEFAULT_TRACER_NAME) -> Tracer:
    """
    Tracer from the global TracerProvider.

    Meant for the composition root only; library code receives its tracer
    through ``create_tracing``.

    Example:
        >>> apply_tracing = create_tracing(get_default_tracer())
    """
    return trace.get_tracer(name)


def _span_name(config: RequestConfig) -> str:
    return f"{config.method}: {config.base_url or ''}{config.url}"


def _open_span(config: Any) -> Optional[Span]:
    """Span attached to ``config`` that has not been finished yet."""
    span = getattr(config, "span", None)
    if span is None or config.metadata.get(_SPAN_FINISHED):
        return None
    return span


def _finish(config: RequestConfig, span: Span) -> None:
    config.metadata[_SPAN_FINISHED] = True
    with best_effort("finish span"):
        span.end()


def create_request_interceptor(
    tracer: Tracer,
    root_span: Span,
    propagator: TextMapPropagator,
) -> Callable[[RequestConfig], RequestConfig]:
    """
    Factory for the request interceptor.

    The produced interceptor starts a CLIENT span named
    ``"<METHOD>: <base_url><url>"`` as child of ``root_span``, tags method
    and URL, injects propagation headers into ``config.headers`` and stores
    the span on ``config.span``.
    """
    parent_context = trace.set_span_in_context(root_span)

    def tracing_request_interceptor(config: RequestConfig) -> RequestConfig:
        # One span per request even if tracing is applied twice
        if getattr(config, "span", None) is not None:
            return config

        with best_effort("start request span"):
            config.span = tracer.start_span(
                _span_name(config),
                context=parent_context,
                kind=SpanKind.CLIENT,
            )

        span = config.span
        if span is None:
            return config

        with best_effort("tag request span"):
            span.set_attribute(HTTP_REQUEST_METHOD, config.method)
            span.set_attribute(URL_FULL, sanitize_url(config.full_url))

        with best_effort("inject trace context"):
            propagator.inject(config.headers, context=trace.set_span_in_context(span))

        return config

    return tracing_request_interceptor


def request_error_interceptor(error: BaseException) -> Any:
    """
    Marks the span with an error and finishes it, then re-raises ``error``.

    Runs when an earlier request interceptor failed before sending.
    """
    config = getattr(error, "config", None)
    span = _open_span(config)
    if span is not None:
        with best_effort("tag request error"):
            span.set_attribute("error", True)
            span.set_attribute("reason", REQUEST_ERROR_REASON)
            span.set_status(Status(StatusCode.ERROR, REQUEST_ERROR_REASON))
        _finish(config, span)
    raise error


def response_success_interceptor(response: Any) -> Any:
    """Tags the status code and finishes the span. Returns ``response`` unchanged."""
    config = getattr(response, "config", None)
    span = _open_span(config)
    if span is not None:
        with best_effort("tag response status"):
            span.set_attribute(HTTP_RESPONSE_STATUS_CODE, response.status_code)
        _finish(config, span)
    return response


def response_error_interceptor(error: BaseException) -> Any:
    """
    Marks the span with the error and its status code, finishes it,
    then re-raises ``error``.
    """
    config = getattr(error, "config", None)
    span = _open_span(config)
    if span is not None:
        with best_effort("tag response error"):
            span.set_attribute("error", True)
            span.set_attribute(ERROR_TYPE, type(error).__name__)

            status_code = getattr(error, "status_code", None)
            if status_code is not None:
                span.set_attribute(HTTP_RESPONSE_STATUS_CODE, status_code)

            if isinstance(error, RequestCancelledError):
                span.set_attribute("cancelled", True)

            span.record_exception(error)
            span.set_status(Status(StatusCode.ERROR, str(error)))
        _finish(config, span)
    raise error


def _validate_client(client: Any) -> None:
    if client is None:
        raise InvalidArgumentError("http_tracing: HTTP client instance required!")

    interceptors = getattr(client, "interceptors", None)
    for phase in ("request", "response"):
        manager = getattr(interceptors, phase, None)
        if not callable(getattr(manager, "use", None)):
            raise InvalidArgumentError(
                f"http_tracing: client has no '{phase}' interceptor registration"
            )


def create_tracing(
    tracer: Tracer,
    propagator: Optional[TextMapPropagator] = None,
) -> Callable[..., Span]:
    """
    Factory for tracing initialization.

    Args:
        tracer: OpenTelemetry tracer used for root and request spans
        propagator: Header propagator (W3C Trace Context by default)

    Returns:
        ``apply_tracing_interceptors(client, span_name=None, span=None)``

    Raises:
        InvalidArgumentError: ``tracer`` is None

    Example:
        >>> apply_tracing = create_tracing(get_default_tracer())
        >>> client = HTTPClient(base_url="https://api.example.com")
        >>> root_span = apply_tracing(client, span_name="users-api")
        >>> client.get("/users")
        >>> client.close()
        >>> root_span.end()
    """
    if tracer is None:
        raise InvalidArgumentError("http_tracing: tracer instance required!")

    if propagator is None:
        propagator = TraceContextTextMapPropagator()

    def apply_tracing_interceptors(
        client: Any = None,
        span_name: Optional[str] = None,
        span: Optional[Span] = None,
    ) -> Span:
        """
        Registers tracing interceptors on ``client``.

        Uses ``span`` as the root span or starts a new one named
        ``span_name``. One of the two is required.

        Returns:
            Root span; the caller ends it when the client is disposed

        Raises:
            InvalidArgumentError: Missing client, or neither span nor span_name
        """
        _validate_client(client)

        if not span_name and span is None:
            raise InvalidArgumentError(
                "http_tracing: either span or span_name should be passed!"
            )

        root_span = span if span is not None else tracer.start_span(span_name)

        client.interceptors.request.use(
            create_request_interceptor(tracer, root_span, propagator),
            request_error_interceptor,
        )
        client.interceptors.response.use(
            response_success_interceptor,
            response_error_interceptor,
        )

        logger.debug(
            "Tracing interceptors registered on %s (root span: %s)",
            type(client).__name__, span_name or "<provided>",
        )

        return root_span

    return apply_tracing_interceptors
