# src/http_tracing/utils/sanitizer.py
"""
Маскирование чувствительных данных перед записью в лог.

Защищает пароли, токены и API ключи в полях, которые HTTPClientLogger
получает через ``**kwargs``.
"""

import re
from typing import Any, Dict


# Список чувствительных ключей (case-insensitive, частичное совпадение)
SENSITIVE_KEYS = {
    'password', 'passwd', 'pwd',
    'token', 'access_token', 'refresh_token', 'jwt',
    'secret', 'client_secret',
    'api_key', 'api-key', 'apikey', 'private_key',
    'authorization', 'auth',
    'cookie', 'session', 'csrf_token',
    'credentials',
}

# Паттерны sensitive данных в строках
SENSITIVE_PATTERNS = [
    (re.compile(r'(Bearer\s+)([A-Za-z0-9\-._~+/]+=*)', re.IGNORECASE), r'\1***REDACTED***'),
    (re.compile(r'(Basic\s+)([A-Za-z0-9+/]+=*)', re.IGNORECASE), r'\1***REDACTED***'),
    (re.compile(r'(api[_-]?key[\s:=]+)([^\s&,;]+)', re.IGNORECASE), r'\1***REDACTED***'),
    (re.compile(r'(token[\s:=]+)([^\s&,;]+)', re.IGNORECASE), r'\1***REDACTED***'),
    (re.compile(r'(password[\s:=]+)([^\s&,;]+)', re.IGNORECASE), r'\1***REDACTED***'),
]


def mask_sensitive_data(data: Any, mask: str = "***REDACTED***") -> Any:
    """
    Рекурсивно маскирует чувствительные данные в словарях, списках, строках.

    Args:
        data: Данные для маскирования
        mask: Строка-заменитель

    Returns:
        Копия данных с замаскированными значениями

    Examples:
        >>> mask_sensitive_data({"Authorization": "Bearer abc", "page": 1})
        {'Authorization': '***REDACTED***', 'page': 1}

        >>> mask_sensitive_data("https://api.example.com?api_key=secret123")
        'https://api.example.com?api_key=***REDACTED***'
    """
    if data is None or isinstance(data, (bool, int, float)):
        return data

    if isinstance(data, str):
        result = data
        for pattern, replacement in SENSITIVE_PATTERNS:
            result = pattern.sub(replacement, result)
        return result

    if isinstance(data, dict):
        return mask_headers(data, mask)

    if isinstance(data, (list, tuple)):
        return type(data)(mask_sensitive_data(item, mask) for item in data)

    # Объекты (спаны, ответы) возвращаем как есть
    return data


def mask_headers(headers: Dict[str, Any], mask: str = "***REDACTED***") -> Dict[str, Any]:
    """
    Маскирует значения чувствительных ключей словаря.

    Examples:
        >>> mask_headers({"Cookie": "a=b", "traceparent": "00-abc-def-01"})
        {'Cookie': '***REDACTED***', 'traceparent': '00-abc-def-01'}
    """
    result = {}
    for key, value in headers.items():
        key_lower = str(key).lower()
        if any(sensitive in key_lower for sensitive in SENSITIVE_KEYS):
            result[key] = mask
        else:
            result[key] = mask_sensitive_data(value, mask)
    return result
