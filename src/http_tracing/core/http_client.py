# src/http_tracing/core/http_client.py
import time
from typing import Any, Dict, Optional
from urllib.parse import urlparse

import requests
from requests.adapters import HTTPAdapter

from .config import HTTPClientConfig
from .context import RequestConfig
from .exceptions import (
    HTTPClientException,
    attach_config,
    classify_requests_exception,
    error_for_status,
)
from .interceptors import Interceptors
from .logging import HTTPClientLogger
from .session_manager import ThreadSafeSessionManager
from .utils import sanitize_url


def build_logger(config: HTTPClientConfig) -> Optional[HTTPClientLogger]:
    """
    Создать HTTPClientLogger, если в конфиге задано логирование.

    Имя логгера включает домен base_url: ``http_tracing.api.example.com``,
    без base_url: ``http_tracing.client``.
    """
    if not config.logging:
        return None

    logger_name = "http_tracing.client"
    if config.base_url:
        logger_name = f"http_tracing.{urlparse(config.base_url).netloc}"

    return HTTPClientLogger(config=config.logging, name=logger_name)


def run_request_chain(interceptors: Interceptors, config: RequestConfig) -> RequestConfig:
    """
    Прогнать config через interceptors.request.

    Raises:
        HTTPClientException: Интерсептор вернул не RequestConfig
        Exception: Ошибка, оставшаяся в конце цепочки
    """
    result = interceptors.request.run(config)
    if not isinstance(result, RequestConfig):
        raise HTTPClientException(
            f"Request interceptor must return RequestConfig, got {type(result).__name__}",
            config=config,
        )
    return result


class HTTPClient:
    """
    Синхронный HTTP клиент на базе requests с цепочками интерсепторов.

    Каждый запрос проходит так:
        1. Строится RequestConfig (method, base_url, url, headers, kwargs)
        2. interceptors.request (в обратном порядке регистрации)
        3. Отправка через thread-local requests.Session
        4. interceptors.response (в порядке регистрации) с ответом
           или с ошибкой (HTTPError для 4xx/5xx, NetworkError, ...)

    Если цепочка запроса упала, шаг 3 пропускается и ошибка (с
    ``error.config``) сразу идет в interceptors.response.

    Контракт: один и тот же объект RequestConfig доступен как
    ``response.config`` и как ``error.config``.

    Example:
        >>> with HTTPClient(base_url="https://api.example.com") as client:
        ...     client.interceptors.request.use(add_auth_header)
        ...     response = client.get("/users")
        ...     response.config.method
        'GET'
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        config: Optional[HTTPClientConfig] = None,
        **kwargs: Any
    ):
        """
        Args:
            base_url: Базовый URL (игнорируется, если передан config)
            config: HTTPClientConfig
            **kwargs: Параметры для HTTPClientConfig.create
        """
        if config is None:
            config = HTTPClientConfig.create(base_url=base_url, **kwargs)

        self._config = config
        self.interceptors = Interceptors()
        self._logger = build_logger(config)
        self._session_manager = ThreadSafeSessionManager(session_factory=self._create_session)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

    def _create_session(self) -> requests.Session:
        session = requests.Session()

        adapter = HTTPAdapter(max_retries=0)
        session.mount('http://', adapter)
        session.mount('https://', adapter)

        if self._config.headers:
            session.headers.update(self._config.headers)

        return session

    def close(self) -> None:
        """Закрывает сессии всех потоков и логгер."""
        if self._logger is not None:
            self._logger.close()
        self._session_manager.close_all()

    # ==================== Запросы ====================

    def _build_config(self, method: str, url: str, kwargs: Dict[str, Any]) -> RequestConfig:
        headers = dict(kwargs.pop('headers', None) or {})
        return RequestConfig(
            method=method,
            url=url,
            base_url=self._config.base_url,
            headers=headers,
            kwargs=kwargs,
        )

    def request(self, method: str, url: str, **kwargs: Any) -> requests.Response:
        """
        Выполняет HTTP запрос через цепочки интерсепторов.

        Args:
            method: HTTP метод
            url: Endpoint или полный URL
            **kwargs: Параметры requests (params, json, data, headers, timeout, ...)

        Returns:
            requests.Response с атрибутом ``config``

        Raises:
            HTTPError: Статус 4xx/5xx (ServerError для 5xx)
            TimeoutError, ConnectionError: Сетевые ошибки
        """
        config = self._build_config(method, url, kwargs)
        try:
            config = run_request_chain(self.interceptors, config)
        except Exception as e:
            # Ошибка цепочки запроса продолжает путь по цепочке ответа
            return self.interceptors.response.run(error=attach_config(e, config))

        full_url = config.full_url
        transport_kwargs = dict(config.kwargs)
        timeout = transport_kwargs.pop('timeout', self._config.timeout.as_tuple())

        if self._logger:
            self._logger.info(
                "Request started",
                method=config.method,
                url=sanitize_url(full_url),
                request_id=config.request_id,
            )

        start_time = time.time()

        try:
            response = self.session.request(
                method=config.method,
                url=full_url,
                headers=config.headers,
                timeout=timeout,
                verify=self._config.verify_ssl,
                allow_redirects=self._config.allow_redirects,
                **transport_kwargs
            )
        except Exception as e:
            error = classify_requests_exception(e, full_url, config=config)
            error.__cause__ = e
            self._log_failure(config, error, start_time)
            return self.interceptors.response.run(error=error)

        response.config = config
        duration_ms = round((time.time() - start_time) * 1000, 2)

        error = error_for_status(
            response.status_code, full_url, config=config, response=response, reason=response.reason or ""
        )
        if error is not None:
            self._log_failure(config, error, start_time)
            return self.interceptors.response.run(error=error)

        if self._logger:
            self._logger.info(
                "Request completed",
                method=config.method,
                url=sanitize_url(full_url),
                status_code=response.status_code,
                duration_ms=duration_ms,
                request_id=config.request_id,
            )

        return self.interceptors.response.run(response)

    def _log_failure(self, config: RequestConfig, error: HTTPClientException, start_time: float) -> None:
        if not self._logger:
            return
        self._logger.error(
            "Request failed",
            method=config.method,
            url=sanitize_url(config.full_url),
            error=str(error),
            error_type=type(error).__name__,
            duration_ms=round((time.time() - start_time) * 1000, 2),
            request_id=config.request_id,
        )

    def get(self, url: str, **kwargs: Any) -> requests.Response:
        """Выполняет GET запрос."""
        return self.request("GET", url, **kwargs)

    def post(self, url: str, **kwargs: Any) -> requests.Response:
        """Выполняет POST запрос."""
        return self.request("POST", url, **kwargs)

    def put(self, url: str, **kwargs: Any) -> requests.Response:
        return self.request("PUT", url, **kwargs)

    def patch(self, url: str, **kwargs: Any) -> requests.Response:
        return self.request("PATCH", url, **kwargs)

    def delete(self, url: str, **kwargs: Any) -> requests.Response:
        return self.request("DELETE", url, **kwargs)

    def head(self, url: str, **kwargs: Any) -> requests.Response:
        return self.request("HEAD", url, **kwargs)

    def options(self, url: str, **kwargs: Any) -> requests.Response:
        return self.request("OPTIONS", url, **kwargs)

    # ==================== Свойства ====================

    @property
    def session(self) -> requests.Session:
        """Thread-local сессия текущего потока."""
        return self._session_manager.get_session()

    @property
    def base_url(self) -> Optional[str]:
        """Base URL (read-only)."""
        return self._config.base_url

    @property
    def config(self) -> HTTPClientConfig:
        return self._config
