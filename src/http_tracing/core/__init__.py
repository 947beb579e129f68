"""Core HTTP client modules."""

from .config import TimeoutConfig, HTTPClientConfig
from .context import RequestConfig
from .exceptions import (
    HTTPClientException,
    InvalidArgumentError,
    NetworkError,
    TimeoutError,
    ConnectionError,
    RequestCancelledError,
    HTTPError,
    ServerError,
    classify_requests_exception,
    classify_httpx_exception,
    error_for_status,
)
from .http_client import HTTPClient
from .interceptors import Interceptor, InterceptorManager, Interceptors
from .utils import best_effort, sanitize_url

__all__ = [
    # Config
    "TimeoutConfig",
    "HTTPClientConfig",
    # Core
    "HTTPClient",
    "RequestConfig",
    "Interceptor",
    "InterceptorManager",
    "Interceptors",
    # Exceptions
    "HTTPClientException",
    "InvalidArgumentError",
    "NetworkError",
    "TimeoutError",
    "ConnectionError",
    "RequestCancelledError",
    "HTTPError",
    "ServerError",
    "classify_requests_exception",
    "classify_httpx_exception",
    "error_for_status",
    # Utils
    "best_effort",
    "sanitize_url",
]
