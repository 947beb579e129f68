"""
Иерархия исключений HTTP клиента.

Каждое исключение, выброшенное после построения RequestConfig,
несет этот же объект в атрибуте ``config`` (и ``response``, если он есть).
"""

from typing import Any, Optional, TYPE_CHECKING

import httpx
import requests

if TYPE_CHECKING:
    from .context import RequestConfig

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# BASE
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

class HTTPClientException(Exception):
    """Базовое исключение HTTP клиента."""

    def __init__(
        self,
        message: str,
        config: Optional['RequestConfig'] = None,
        response: Optional[Any] = None,
    ):
        self.message = message
        self.config = config
        self.response = response
        super().__init__(message)


class InvalidArgumentError(HTTPClientException, TypeError):
    """Неверные аргументы при настройке (клиент, трейсер, опции)."""

    def __init__(self, message: str):
        super().__init__(message)

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# СЕТЕВЫЕ ОШИБКИ
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

class NetworkError(HTTPClientException):
    """Сетевая ошибка."""

    def __init__(
        self,
        message: str,
        url: Optional[str] = None,
        config: Optional['RequestConfig'] = None,
    ):
        self.url = url
        full_message = message
        if url:
            full_message += f" (url: {url})"
        super().__init__(full_message, config=config)


class TimeoutError(NetworkError):
    """Таймаут запроса."""
    pass


class ConnectionError(NetworkError):
    """
    Ошибка подключения.

    Примеры:
    - Connection refused
    - Connection reset
    - DNS resolution failed
    """
    pass


class RequestCancelledError(HTTPClientException):
    """Запрос отменен до получения ответа (asyncio cancellation)."""

    def __init__(self, url: str, config: Optional['RequestConfig'] = None):
        self.url = url
        super().__init__(f"Request cancelled for {url}", config=config)

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# HTTP ОШИБКИ
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

class HTTPError(HTTPClientException):
    """
    HTTP ответ с кодом 4xx/5xx.

    Args:
        status_code: HTTP статус
        url: URL
        message: Дополнительное сообщение
        config: RequestConfig запроса
        response: Объект ответа
    """

    def __init__(
        self,
        status_code: int,
        url: str,
        message: str = "",
        config: Optional['RequestConfig'] = None,
        response: Optional[Any] = None,
    ):
        self.status_code = status_code
        self.url = url

        msg = f"HTTP {status_code} error for {url}"
        if message:
            msg += f": {message}"

        super().__init__(msg, config=config, response=response)


class ServerError(HTTPError):
    """5xx ошибка сервера."""
    pass

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# УТИЛИТЫ
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

def attach_config(error: BaseException, config: 'RequestConfig') -> BaseException:
    """
    Записать ``config`` в ошибку, у которой его еще нет.

    Ошибки из пользовательских интерсепторов (ValueError, ...) тоже
    получают ``error.config``; сам объект ошибки не меняется.
    """
    if getattr(error, 'config', None) is None:
        error.config = config
    return error


def error_for_status(
    status_code: int,
    url: str,
    config: Optional['RequestConfig'] = None,
    response: Optional[Any] = None,
    reason: str = "",
) -> Optional[HTTPError]:
    """
    Вернуть HTTPError для статуса >= 400 или None.

    Examples:
        >>> error_for_status(200, "https://example.com") is None
        True
        >>> isinstance(error_for_status(503, "https://example.com"), ServerError)
        True
    """
    if status_code < 400:
        return None

    if status_code >= 500:
        return ServerError(status_code, url, reason, config=config, response=response)

    return HTTPError(status_code, url, reason, config=config, response=response)


def classify_requests_exception(
    exc: Exception,
    url: str,
    config: Optional['RequestConfig'] = None,
) -> HTTPClientException:
    """
    Конвертировать ошибку отправки в наши исключения.

    Неизвестные ошибки (например TypeError при сериализации json)
    оборачиваются в HTTPClientException.

    Args:
        exc: Исключение из requests.Session.request
        url: URL запроса
        config: RequestConfig, который попадет в ``error.config``

    Returns:
        Наше исключение с правильной классификацией

    Examples:
        >>> exc = requests.exceptions.Timeout()
        >>> isinstance(classify_requests_exception(exc, "https://example.com"), TimeoutError)
        True
    """
    if isinstance(exc, requests.exceptions.Timeout):
        return TimeoutError("Request timeout", url, config=config)

    elif isinstance(exc, requests.exceptions.ConnectionError):
        return ConnectionError("Connection error", url, config=config)

    elif isinstance(exc, requests.exceptions.HTTPError) and exc.response is not None:
        response = exc.response
        error = error_for_status(
            response.status_code, url, config=config, response=response, reason=response.reason or ""
        )
        if error is not None:
            return error

    # Неизвестная ошибка - оборачиваем
    return HTTPClientException(str(exc), config=config)


def classify_httpx_exception(
    exc: Exception,
    url: str,
    config: Optional['RequestConfig'] = None,
) -> HTTPClientException:
    """
    Конвертировать httpx исключения в наши исключения.

    Examples:
        >>> exc = httpx.ConnectTimeout("timed out")
        >>> isinstance(classify_httpx_exception(exc, "https://example.com"), TimeoutError)
        True
    """
    if isinstance(exc, httpx.TimeoutException):
        return TimeoutError("Request timeout", url, config=config)

    elif isinstance(exc, (httpx.ConnectError, httpx.NetworkError)):
        return ConnectionError("Connection error", url, config=config)

    elif isinstance(exc, httpx.InvalidURL):
        return HTTPClientException(f"Invalid URL: {exc}", config=config)

    elif isinstance(exc, httpx.HTTPStatusError):
        response = exc.response
        error = error_for_status(
            response.status_code, url, config=config, response=response,
            reason=response.reason_phrase or ""
        )
        if error is not None:
            return error

    return HTTPClientException(str(exc), config=config)
