"""
Helpers de renderização compartilhados pelos emissores.

Literais JS/Python, identificadores e a seleção de headers e chaves de resposta
que entram no código gerado.
"""

from __future__ import annotations

import json
import pprint
import re
from typing import Any
from urllib.parse import urlsplit

from ..ingestion.models import FieldValue, HttpTransaction

# Headers que mudam a cada requisição ou são definidos pelo cliente HTTP
VOLATILE_HEADERS = frozenset({
    "connection",
    "content-length",
    "host",
    "keep-alive",
    "transfer-encoding",
    "accept-encoding",
    "user-agent",
    "date",
    "postman-token",
})

_NON_IDENT = re.compile(r"\W+")


def identifier(text: str) -> str:
    """Identificador Python/JS válido a partir de texto livre."""
    ident = _NON_IDENT.sub("_", text.lower()).strip("_")
    if not ident:
        return "untitled"
    return f"t_{ident}" if ident[0].isdigit() else ident


def js_string(text: str) -> str:
    escaped = (
        text.replace("\\", "\\\\")
        .replace("'", "\\'")
        .replace("\n", "\\n")
        .replace("\r", "\\r")
        .replace("\t", "\\t")
    )
    return f"'{escaped}'"


def py_string(text: str) -> str:
    return json.dumps(text, ensure_ascii=False)


def _reindent(text: str, indent: str) -> str:
    lines = text.splitlines()
    return "\n".join([lines[0]] + [indent + line for line in lines[1:]])


def js_literal(value: Any, indent: str = "") -> str:
    """Literal JS (JSON é um subconjunto válido), reindentado."""
    return _reindent(json.dumps(value, indent=2, ensure_ascii=False), indent)


def py_literal(value: Any, indent: str = "") -> str:
    """Literal Python preservando a ordem das chaves."""
    text = pprint.pformat(value, indent=1, width=88 - len(indent), sort_dicts=False)
    return _reindent(text, indent)


def request_target(url: str | None) -> str:
    """
    Caminho usado no código gerado: URLs absolutas viram relativas
    à `baseURL` do ambiente.
    """
    if not url:
        return "/"
    parts = urlsplit(url)
    if parts.scheme and parts.netloc:
        path = parts.path or "/"
        return f"{path}?{parts.query}" if parts.query else path
    return url


def origin_of(url: str | None) -> str | None:
    """`https://api.example.com/x` → `https://api.example.com`"""
    if not url:
        return None
    parts = urlsplit(url)
    if parts.scheme and parts.netloc:
        return f"{parts.scheme}://{parts.netloc}"
    return None


def emitted_headers(field: FieldValue) -> dict[str, str]:
    """Headers decodificados sem os voláteis; valores viram string."""
    if not field.is_decoded or not isinstance(field.value, dict):
        return {}
    return {
        str(key): value if isinstance(value, str) else json.dumps(value, ensure_ascii=False)
        for key, value in field.value.items()
        if str(key).lower() not in VOLATILE_HEADERS
    }


def response_keys(field: FieldValue, limit: int) -> list[str]:
    """Primeiras `limit` chaves de topo de um body de resposta objeto."""
    if limit <= 0 or not field.is_decoded or not isinstance(field.value, dict):
        return []
    return [str(key) for key in list(field.value)[:limit]]


def step_title(txn: HttpTransaction, index: int) -> str:
    if txn.step_name:
        return txn.step_name
    if txn.method or txn.url:
        return f"{txn.method or 'GET'} {request_target(txn.url)}"
    return f"Passo {index}"
