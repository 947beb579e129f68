# src/http_tracing/async_client.py
"""
Асинхронный HTTP клиент на базе httpx.

Те же цепочки интерсепторов, что и у HTTPClient; интерсепторы
вызываются синхронно внутри корутины запроса.
"""

import asyncio
import logging
import time
from typing import Any, Dict, Optional

import httpx

from .core.config import HTTPClientConfig
from .core.context import RequestConfig
from .core.exceptions import (
    HTTPClientException,
    RequestCancelledError,
    attach_config,
    classify_httpx_exception,
    error_for_status,
)
from .core.http_client import build_logger, run_request_chain
from .core.interceptors import Interceptors
from .core.utils import sanitize_url

logger = logging.getLogger(__name__)


class AsyncHTTPClient:
    """
    Асинхронный HTTP клиент с цепочками интерсепторов.

    Если корутина запроса отменена (asyncio.CancelledError) во время
    отправки, цепочка interceptors.response получает RequestCancelledError
    с тем же RequestConfig, после чего CancelledError пробрасывается дальше.

    Example:
        >>> async with AsyncHTTPClient(base_url="https://api.example.com") as client:
        ...     response = await client.get("/users")
        ...     print(response.config.span)
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        *,
        config: Optional[HTTPClientConfig] = None,
        **kwargs: Any,
    ):
        if config is None:
            config = HTTPClientConfig.create(base_url=base_url, **kwargs)

        self._config = config
        self.interceptors = Interceptors()
        self._logger = build_logger(config)
        self._client = httpx.AsyncClient(
            headers=dict(config.headers),
            timeout=httpx.Timeout(config.timeout.read, connect=config.timeout.connect),
            verify=config.verify_ssl,
            follow_redirects=config.allow_redirects,
        )

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
        return False

    async def close(self) -> None:
        """Закрывает httpx.AsyncClient и логгер."""
        if self._logger is not None:
            self._logger.close()
        await self._client.aclose()

    def _build_config(self, method: str, url: str, kwargs: Dict[str, Any]) -> RequestConfig:
        headers = dict(kwargs.pop('headers', None) or {})
        return RequestConfig(
            method=method,
            url=url,
            base_url=self._config.base_url,
            headers=headers,
            kwargs=kwargs,
        )

    def _notify_cancelled(self, config: RequestConfig, url: str) -> None:
        try:
            self.interceptors.response.run(error=RequestCancelledError(url, config=config))
        except Exception as exc:
            # CancelledError wins over whatever the chain left behind
            logger.debug("Response chain after cancellation ended with %s", type(exc).__name__)

    async def request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        """
        Выполняет HTTP запрос через цепочки интерсепторов.

        Returns:
            httpx.Response с атрибутом ``config``

        Raises:
            HTTPError: Статус 4xx/5xx
            TimeoutError, ConnectionError: Сетевые ошибки
            asyncio.CancelledError: Корутина отменена
        """
        config = self._build_config(method, url, kwargs)
        try:
            config = run_request_chain(self.interceptors, config)
        except Exception as e:
            return self.interceptors.response.run(error=attach_config(e, config))

        full_url = config.full_url
        start_time = time.time()

        if self._logger:
            self._logger.info(
                "Request started",
                method=config.method,
                url=sanitize_url(full_url),
                request_id=config.request_id,
            )

        try:
            response = await self._client.request(
                config.method,
                full_url,
                headers=config.headers,
                **config.kwargs
            )
        except asyncio.CancelledError:
            self._notify_cancelled(config, full_url)
            raise
        except Exception as e:
            error = classify_httpx_exception(e, full_url, config=config)
            error.__cause__ = e
            self._log_failure(config, error, start_time)
            return self.interceptors.response.run(error=error)

        response.config = config

        error = error_for_status(
            response.status_code, full_url, config=config, response=response,
            reason=response.reason_phrase or ""
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
                duration_ms=round((time.time() - start_time) * 1000, 2),
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

    async def get(self, url: str, **kwargs: Any) -> httpx.Response:
        return await self.request("GET", url, **kwargs)

    async def post(self, url: str, **kwargs: Any) -> httpx.Response:
        return await self.request("POST", url, **kwargs)

    async def put(self, url: str, **kwargs: Any) -> httpx.Response:
        return await self.request("PUT", url, **kwargs)

    async def patch(self, url: str, **kwargs: Any) -> httpx.Response:
        return await self.request("PATCH", url, **kwargs)

    async def delete(self, url: str, **kwargs: Any) -> httpx.Response:
        return await self.request("DELETE", url, **kwargs)

    async def head(self, url: str, **kwargs: Any) -> httpx.Response:
        return await self.request("HEAD", url, **kwargs)

    async def options(self, url: str, **kwargs: Any) -> httpx.Response:
        return await self.request("OPTIONS", url, **kwargs)

    @property
    def base_url(self) -> Optional[str]:
        """Base URL (read-only)."""
        return self._config.base_url

    @property
    def config(self) -> HTTPClientConfig:
        return self._config
