"""
================================================================================
Parser Genérico (fallback)
================================================================================

Usado quando nenhum dialeto conhecido foi detectado (ou com
`--format generic`). Faz uma varredura linha a linha e recupera
transações grosseiras:

```
GET /api/users HTTP/1.1          → requisição
HTTP/1.1 200 OK                  → status da requisição aberta
POST https://x.io/orders -> 201  → requisição + status na mesma linha
```

Texto sem nenhum conteúdo HTTP gera zero transações, sem erro.
"""

from __future__ import annotations

import logging
import re

from ..errors import ParseWarning
from .models import HttpTransaction, LogContext

logger = logging.getLogger(__name__)

_REQUEST = re.compile(
    r"\b(?P<method>GET|POST|PUT|DELETE|PATCH|HEAD|OPTIONS)\s+(?P<url>https?://[^\s\"'<>]+|/[^\s\"'<>]*)"
)

_STATUS_PATTERNS = (
    re.compile(r"HTTP/\d(?:\.\d)?\s+(?P<code>[1-5]\d\d)\b(?:\s+(?P<text>[A-Za-z][A-Za-z ]*))?"),
    re.compile(r"\bstatus(?:[ _]?code)?\b\W{0,3}(?P<code>[1-5]\d\d)\b", re.IGNORECASE),
    re.compile(r"(?:->|=>|→)\s*(?P<code>[1-5]\d\d)\b"),
    re.compile(
        r"\b(?P<code>[1-5]\d\d)\s+(?P<text>OK|Created|Accepted|No Content|Moved Permanently|Found|"
        r"Not Modified|Bad Request|Unauthorized|Forbidden|Not Found|Method Not Allowed|Conflict|"
        r"Unprocessable Entity|Too Many Requests|Internal Server Error|Bad Gateway|Service Unavailable)\b",
        re.IGNORECASE,
    ),
)

# Depois da URL, na mesma linha: "GET /users 200 12ms"
_TRAILING_CODE = re.compile(r"^\s+(?:HTTP/\d(?:\.\d)?\s+)?(?P<code>[1-5]\d\d)\b")


def _find_status(text: str) -> tuple[int, str | None] | None:
    for pattern in _STATUS_PATTERNS:
        match = pattern.search(text)
        if match:
            status_text = match.groupdict().get("text")
            return int(match.group("code")), status_text.strip() if status_text else None
    return None


def parse_generic(content: str, context: LogContext) -> list[HttpTransaction]:
    """
    Extrai transações grosseiras de texto arbitrário.

    Cada linha com `<MÉTODO> <caminho>` abre uma transação; o primeiro
    status encontrado antes da próxima requisição a fecha.
    """
    transactions: list[HttpTransaction] = []
    current: HttpTransaction | None = None

    def close() -> None:
        if current is not None and current.response_status is None:
            current.orphan = "request"
            context.report(ParseWarning.orphan_request(current.method, current.url, context.source, current.line))

    for number, line in enumerate(content.splitlines(), start=1):
        request = _REQUEST.search(line)
        if request:
            close()
            current = HttpTransaction(
                method=request.group("method"),
                url=request.group("url").rstrip(".,;)"),
                line=number,
            )
            transactions.append(current)
            trailing = _TRAILING_CODE.match(line[request.end():])
            status = (int(trailing.group("code")), None) if trailing else _find_status(line[request.end():])
            if status:
                current.response_status, current.status_text = status
            continue

        status = _find_status(line)
        if status is None:
            continue
        if current is not None and current.response_status is None:
            current.response_status, current.status_text = status
        else:
            context.report(ParseWarning.orphan_response(context.source, number))
            orphan = HttpTransaction(
                response_status=status[0],
                status_text=status[1],
                orphan="response",
                line=number,
            )
            transactions.append(orphan)
            current = None

    close()
    logger.debug("%s: %d transação(ões) genéricas", context.source, len(transactions))
    return transactions
