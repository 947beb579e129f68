"""HTTP client with OpenTelemetry tracing interceptors."""

import logging
from importlib.metadata import version, PackageNotFoundError

from .core.http_client import HTTPClient
from .async_client import AsyncHTTPClient
from .core.config import HTTPClientConfig, TimeoutConfig
from .core.context import RequestConfig
from .core.exceptions import (
    HTTPClientException,
    InvalidArgumentError,
    NetworkError,
    TimeoutError,
    ConnectionError,
    RequestCancelledError,
    HTTPError,
    ServerError,
)
from .core.logging import LoggingConfig

# NullHandler prevents "No handler found" warnings;
# configure logging.getLogger('http_tracing') or pass LoggingConfig
logging.getLogger('http_tracing').addHandler(logging.NullHandler())

try:
    __version__ = version("http-client-tracing")
except PackageNotFoundError:
    # Package is not installed (development mode)
    __version__ = "0.0.0-dev"

__license__ = "MIT"

__all__ = [
    # Core
    "HTTPClient",
    "AsyncHTTPClient",
    "RequestConfig",

    # Config
    "HTTPClientConfig",
    "TimeoutConfig",
    "LoggingConfig",

    # Exceptions
    "HTTPClientException",
    "InvalidArgumentError",
    "NetworkError",
    "TimeoutError",
    "ConnectionError",
    "RequestCancelledError",
    "HTTPError",
    "ServerError",

    # Version
    "__version__",
]
