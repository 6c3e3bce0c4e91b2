"""
================================================================================
Mascaramento de Dados Sensíveis
================================================================================

Logs capturados em ambientes reais carregam tokens, senhas e cookies.
Com `redact_secrets` ligado, esses valores são substituídos antes de
entrarem no código gerado.

## Exemplo:

    >>> redact({"username": "ana", "password": "s3cret"})
    {'username': 'ana', 'password': '***REDACTED***'}
"""

from __future__ import annotations

from typing import Any

from ..ingestion.models import FieldValue

SENSITIVE_PATTERNS: tuple[str, ...] = (
    "password",
    "passwd",
    "pwd",
    "secret",
    "token",
    "api_key",
    "apikey",
    "api-key",
    "authorization",
    "bearer",
    "credential",
    "private_key",
    "access_key",
    "session",
    "cookie",
)

REDACTED_VALUE = "***REDACTED***"


def is_sensitive_key(key: str) -> bool:
    key_lower = key.lower()
    return any(pattern in key_lower for pattern in SENSITIVE_PATTERNS)


def redact(data: Any) -> Any:
    """
    Cópia de `data` com valores de chaves sensíveis mascarados.

    Containers sob chaves sensíveis são percorridos, não substituídos.
    Strings soltas não são alteradas.
    """
    if isinstance(data, dict):
        result: dict[Any, Any] = {}
        for key, value in data.items():
            if isinstance(value, (dict, list)):
                result[key] = redact(value)
            elif isinstance(key, str) and is_sensitive_key(key):
                result[key] = REDACTED_VALUE
            else:
                result[key] = value
        return result
    if isinstance(data, list):
        return [redact(item) for item in data]
    return data


def redact_field(field: FieldValue) -> FieldValue:
    """Aplica `redact` a um campo decodificado; outros estados passam intactos."""
    if not field.is_decoded:
        return field
    return FieldValue.decoded(redact(field.value))
