"""Request config carried through the interceptor chains."""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, TYPE_CHECKING
import uuid

if TYPE_CHECKING:
    from opentelemetry.trace import Span


@dataclass(eq=False)
class RequestConfig:
    """Per-request options passed through request and response interceptors.

    The client returns the same instance on ``response.config`` and on
    ``error.config`` of every error raised after the config was built, so
    a request interceptor can leave data here for the response phase.

    Attributes:
        method: HTTP method (GET, POST, etc.)
        url: Endpoint or absolute URL as passed by the caller
        base_url: Base URL of the client (may be None)
        headers: Outgoing headers; interceptors may mutate in place
        kwargs: Remaining transport parameters (params, json, data, ...)
        request_id: Unique identifier for this request
        metadata: Shared storage for interceptors
        span: Tracing span attached by the tracing interceptor

    Example:
        >>> config = RequestConfig('GET', '/users', base_url='https://api.example.com')
        >>> config.full_url
        'https://api.example.com/users'
    """

    method: str
    url: str
    base_url: Optional[str] = None
    headers: Dict[str, str] = field(default_factory=dict)
    kwargs: Dict[str, Any] = field(default_factory=dict)
    request_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    metadata: Dict[str, Any] = field(default_factory=dict)
    span: Optional['Span'] = None

    def __post_init__(self):
        self.method = self.method.upper()

    @property
    def full_url(self) -> str:
        """Absolute URL built from base_url and url."""
        if self.url.startswith(("http://", "https://")):
            return self.url

        if not self.base_url:
            return self.url

        return f"{self.base_url.rstrip('/')}/{self.url.lstrip('/')}"
