"""
================================================================================
Parser do Formato Nativo (blocos emoji)
================================================================================

Lê os logs escritos pelo logger HTTP do próprio framework:

```
================================================================================
📤 HTTP REQUEST
================================================================================
🧪 Test Case: Login @smoke
📍 Test Step: Submit credentials
🌐 Method: POST
🔗 URL: https://api.example.com/auth/login
📋 Request Headers:
{ "content-type": "application/json" }
📤 Request Body:
{ "username": "ana" }
================================================================================

📥 HTTP RESPONSE
📊 Status: 200 OK
📥 Response Body:
{ "token": "abc" }
```

## Pareamento:

Respostas fecham a requisição aberta mais recente (pilha LIFO). Resposta
sem requisição vira transação órfã; requisições nunca fechadas viram
transações parciais. Nada é descartado.

Os emojis são opcionais: os rótulos são reconhecidos pelo texto.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field

from ..errors import ParseWarning
from .fields import decode_blob, decode_headers
from .models import HttpTransaction, LogContext

logger = logging.getLogger(__name__)


# =============================================================================
# PADRÕES
# =============================================================================

# Prefixo de emoji/símbolos opcional antes do rótulo
_PREFIX = r"^[ \t]*[^\w\s\"'{\[]*[ \t]*"

_BLOCK_MARKER = re.compile(_PREFIX + r"HTTP (?P<kind>REQUEST|RESPONSE)\s*$")
_STEP_HEADER = re.compile(_PREFIX + r"TEST STEP:\s*(?P<name>.*?)\s*$")
_TEST_HEADER = re.compile(_PREFIX + r"TEST:\s*(?P<name>.*?)\s*$")
_SEPARATOR = re.compile(r"^\s*(?:={3,}|─{3,}|-{10,})\s*$")

_MULTILINE_LABELS = {
    "request headers": "request_headers",
    "response headers": "response_headers",
    "headers": "headers",
    "request body": "request_body",
    "response body": "response_body",
    "body": "body",
}

_SINGLE_LABELS = {
    "test case": "test_case",
    "test step": "test_step",
    "method": "method",
    "url": "url",
    "timestamp": "timestamp",
    "test id": "test_id",
    "scenario": "scenario",
    "status": "status",
    "response time": "response_time",
}

_LABEL = re.compile(
    _PREFIX
    + r"(?P<label>"
    + "|".join(sorted((re.escape(k) for k in (*_MULTILINE_LABELS, *_SINGLE_LABELS)), key=len, reverse=True))
    + r")\s*:\s*(?P<rest>.*)$",
    re.IGNORECASE,
)

_STATUS = re.compile(r"^(?P<code>[1-5]\d\d)\b\s*(?P<text>.*)$")
_MILLIS = re.compile(r"(\d+)")
_PLACEHOLDERS = {"", "undefined", "null", "unknown test", "n/a"}


# =============================================================================
# BLOCOS
# =============================================================================


@dataclass
class _Block:
    kind: str
    line: int
    fields: dict[str, str] = field(default_factory=lambda: {})
    field_lines: dict[str, int] = field(default_factory=lambda: {})


def _clean(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    return None if value.lower() in _PLACEHOLDERS else value


def _split_blocks(lines: list[str]) -> list[tuple[str, str | _Block]]:
    """
    Separa o log em eventos: ("test", nome), ("step", nome), ("block", _Block).
    """
    events: list[tuple[str, str | _Block]] = []
    current: _Block | None = None
    label: str | None = None
    buffer: list[str] = []

    def flush_label() -> None:
        nonlocal label, buffer
        if current is not None and label is not None:
            current.fields[label] = "\n".join(buffer).strip()
        label, buffer = None, []

    def close_block() -> None:
        nonlocal current
        flush_label()
        if current is not None:
            events.append(("block", current))
        current = None

    for index, line in enumerate(lines, start=1):
        marker = _BLOCK_MARKER.match(line)
        if marker:
            close_block()
            current = _Block(kind=marker.group("kind").lower(), line=index)
            continue

        step = _STEP_HEADER.match(line)
        if step:
            close_block()
            events.append(("step", step.group("name")))
            continue

        test = _TEST_HEADER.match(line)
        if test and current is None:
            events.append(("test", test.group("name")))
            continue

        if current is None:
            continue

        if _SEPARATOR.match(line):
            # A primeira cerca vem logo após o marcador; a seguinte fecha o bloco
            if current.fields or label is not None:
                close_block()
            continue

        labelled = _LABEL.match(line)
        if labelled:
            flush_label()
            key = labelled.group("label").lower()
            rest = labelled.group("rest")
            if key in _MULTILINE_LABELS:
                label = _MULTILINE_LABELS[key]
                buffer = [rest] if rest.strip() else []
                current.field_lines[label] = index
            else:
                current.fields[_SINGLE_LABELS[key]] = rest.strip()
                current.field_lines[_SINGLE_LABELS[key]] = index
            continue

        if label is not None:
            buffer.append(line)

    close_block()
    return events


# =============================================================================
# PARSER
# =============================================================================


def _apply_response(txn: HttpTransaction, block: _Block, context: LogContext) -> None:
    status_text = block.fields.get("status")
    match = _STATUS.match(status_text.strip()) if status_text else None
    if match:
        txn.response_status = int(match.group("code"))
        txn.status_text = match.group("text").strip() or None
    else:
        context.report(ParseWarning.missing_status(context.source, block.line))

    elapsed = block.fields.get("response_time")
    if elapsed:
        millis = _MILLIS.search(elapsed)
        if millis:
            txn.response_time_ms = int(millis.group(1))

    headers_key = "response_headers" if "response_headers" in block.fields else "headers"
    txn.response_headers = decode_headers(
        block.fields.get(headers_key), "response_headers", context, block.field_lines.get(headers_key)
    )
    body_key = "response_body" if "response_body" in block.fields else "body"
    txn.response_body = decode_blob(
        block.fields.get(body_key), "response_body", context, block.field_lines.get(body_key)
    )


def _request_from(block: _Block, test_name: str | None, step_name: str | None, context: LogContext) -> HttpTransaction:
    method = _clean(block.fields.get("method"))
    url = _clean(block.fields.get("url"))
    if method is None:
        context.report(ParseWarning.missing_method(url, context.source, block.line))

    headers_key = "request_headers" if "request_headers" in block.fields else "headers"
    body_key = "request_body" if "request_body" in block.fields else "body"
    return HttpTransaction(
        method=method.upper() if method else None,
        url=url,
        request_headers=decode_headers(
            block.fields.get(headers_key), "request_headers", context, block.field_lines.get(headers_key)
        ),
        request_body=decode_blob(
            block.fields.get(body_key), "request_body", context, block.field_lines.get(body_key)
        ),
        timestamp=_clean(block.fields.get("timestamp")),
        test_name=_clean(block.fields.get("test_case")) or test_name,
        step_name=_clean(block.fields.get("test_step")) or step_name,
        scenario=_clean(block.fields.get("scenario")),
        test_id=_clean(block.fields.get("test_id")),
        line=block.line,
    )


def parse_native(content: str, context: LogContext) -> list[HttpTransaction]:
    """
    Extrai transações de um log no formato nativo.

    Nunca lança exceção para entrada malformada; problemas viram
    warnings em `context`.
    """
    transactions: list[HttpTransaction] = []
    open_requests: list[HttpTransaction] = []
    test_name: str | None = None
    step_name: str | None = None

    for kind, block in _split_blocks(content.splitlines()):
        if isinstance(block, str):
            if kind == "test":
                test_name = _clean(block)
                step_name = None
            else:
                step_name = _clean(block)
            continue

        if block.kind == "request":
            txn = _request_from(block, test_name, step_name, context)
            # "Test Case" de um bloco vira contexto para os seguintes
            test_name = txn.test_name
            transactions.append(txn)
            open_requests.append(txn)
            continue

        if open_requests:
            txn = open_requests.pop()
        else:
            context.report(ParseWarning.orphan_response(context.source, block.line))
            txn = HttpTransaction(
                test_name=_clean(block.fields.get("test_case")) or test_name,
                step_name=_clean(block.fields.get("test_step")) or step_name,
                test_id=_clean(block.fields.get("test_id")),
                orphan="response",
                line=block.line,
            )
            transactions.append(txn)
        _apply_response(txn, block, context)

    for txn in open_requests:
        txn.orphan = "request"
        context.report(ParseWarning.orphan_request(txn.method, txn.url, context.source, txn.line))

    logger.debug("%s: %d transação(ões) nativas", context.source, len(transactions))
    return transactions
