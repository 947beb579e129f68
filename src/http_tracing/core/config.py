"""
Конфигурация HTTP клиента.

Все конфиги immutable (frozen dataclasses) для потокобезопасности.
"""

from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple, Union, TYPE_CHECKING
from types import MappingProxyType

if TYPE_CHECKING:
    from .logging import LoggingConfig

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# TIMEOUT CONFIG
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

@dataclass(frozen=True)
class TimeoutConfig:
    """
    Конфигурация таймаутов.

    Args:
        connect: Таймаут подключения (сек)
        read: Таймаут чтения данных (сек)

    Examples:
        >>> TimeoutConfig(connect=5, read=30).as_tuple()
        (5, 30)
    """
    connect: float = 5
    read: float = 30

    def __post_init__(self):
        """Валидация."""
        if self.connect <= 0:
            raise ValueError("connect timeout must be positive")
        if self.read <= 0:
            raise ValueError("read timeout must be positive")

    def as_tuple(self) -> Tuple[float, float]:
        """Вернуть как (connect, read) для requests."""
        return (self.connect, self.read)

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# CLIENT CONFIG
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

@dataclass(frozen=True)
class HTTPClientConfig:
    """
    Главная конфигурация клиента.

    Args:
        base_url: Базовый URL, к которому добавляются endpoint'ы
        headers: Заголовки по умолчанию (read-only mapping)
        timeout: Таймауты
        verify_ssl: Проверять SSL сертификаты
        allow_redirects: Следовать редиректам
        logging: Конфигурация логирования (None = только NullHandler)

    Examples:
        >>> config = HTTPClientConfig.create(base_url="https://api.example.com", timeout=10)
        >>> config.timeout.read
        10
    """
    base_url: Optional[str] = None
    headers: MappingProxyType = field(default_factory=lambda: MappingProxyType({}))
    timeout: TimeoutConfig = field(default_factory=TimeoutConfig)
    verify_ssl: bool = True
    allow_redirects: bool = True
    logging: Optional['LoggingConfig'] = None

    def __post_init__(self):
        """Валидация и заморозка заголовков."""
        if self.base_url is not None and not self.base_url.startswith(("http://", "https://")):
            raise ValueError(f"base_url must start with http:// or https://, got: {self.base_url}")

        if not isinstance(self.headers, MappingProxyType):
            object.__setattr__(self, 'headers', MappingProxyType(dict(self.headers)))

    @classmethod
    def create(
        cls,
        base_url: Optional[str] = None,
        headers: Optional[Dict[str, str]] = None,
        timeout: Union[int, float, TimeoutConfig] = 30,
        verify_ssl: bool = True,
        allow_redirects: bool = True,
        logging: Optional['LoggingConfig'] = None,
    ) -> 'HTTPClientConfig':
        """
        Создать конфиг из простых значений.

        Число в ``timeout`` используется и для connect, и для read.
        """
        if not isinstance(timeout, TimeoutConfig):
            timeout = TimeoutConfig(connect=timeout, read=timeout)

        return cls(
            base_url=base_url,
            headers=MappingProxyType(dict(headers or {})),
            timeout=timeout,
            verify_ssl=verify_ssl,
            allow_redirects=allow_redirects,
            logging=logging,
        )
