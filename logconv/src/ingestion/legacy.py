"""
================================================================================
Parser do Formato Legado (Supertest/Mocha)
================================================================================

Lê os logs de texto das suítes antigas em Supertest/Mocha/Chai:

```
$ env KEY=st5 node_modules/.bin/mocha -g @iblogin
ABC ==> TC01 success IB Login ==> tags: @iblogin
********************************
Initialization login with valid user
URL : POST https://abc.com/login/
Request Header { 'content-type': 'application/json' }
Request Payload { "username": "ana" }
RESPONSE Http Status Code : 200
Response header: { "x-request-id": "42" }
Response Payload { "token": "abc" }
```

## Para todos entenderem:

O texto é percorrido como uma sequência de "tokens": banners de teste,
separadores `*****`, linhas `Initialization` e rótulos de seção. Cada
rótulo captura o texto até o próximo token. Os rótulos são reconhecidos
sem diferenciar maiúsculas e com espaços/pontuação tolerantes.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from ..errors import ParseWarning
from .fields import decode_blob, decode_headers
from .models import HttpTransaction, LogContext

logger = logging.getLogger(__name__)


# =============================================================================
# TOKENS
# =============================================================================

_LINE_START = r"^[ \t]*[^\w\s\"']*[ \t]*"

# URL e o marcador RESPONSE exigem maiúsculas: em minúsculas colidem com
# chaves de payloads no formato do util.inspect (`url: '...'`).
_LABELS: tuple[tuple[str, str], ...] = (
    ("url", r"(?-i:URL|Url)[ \t]*[:=\-]"),
    ("request_header", r"Request[ \t]+Headers?\b[ \t]*:?"),
    ("request_payload", r"Request[ \t]+(?:Payload|Body)\b[ \t]*:?"),
    ("status", r"(?:RESPONSE[ \t]*[:\-]?[ \t]*)?Http[ \t]+Status[ \t]+Code[ \t]*:?"),
    ("response_header", r"Response[ \t]+Headers?\b[ \t]*:?"),
    ("response_payload", r"Response[ \t]+(?:Payload|Body)\b[ \t]*:?"),
    ("response", r"(?-i:RESPONSE)\b[ \t]*:?"),
)

_LABEL = re.compile(
    _LINE_START + "(?:" + "|".join(f"(?P<{name}>{pattern})" for name, pattern in _LABELS) + ")",
    re.IGNORECASE | re.MULTILINE,
)

_BANNER = re.compile(r"^[^\n]*==>[^\n]*$", re.MULTILINE)
_MOCHA = re.compile(r"^[ \t]*\$[^\n]*\bmocha\b[^\n]*$", re.MULTILINE)
_SEPARATOR = re.compile(r"^[ \t]*\*{20,}[ \t]*$", re.MULTILINE)
_INIT = re.compile(r"^[ \t]*Initialization\b[ \t:\-]*(?P<text>[^\n]*)$", re.MULTILINE | re.IGNORECASE)

_TAG = re.compile(r"@([\w-]+)")
_MOCHA_GREP = re.compile(r"(?:-g|--grep)\s+['\"]?(@[\w-]+)")
_METHOD_URL = re.compile(r"^\s*(?:(?P<method>GET|POST|PUT|DELETE|PATCH|HEAD|OPTIONS)\s+)?(?P<url>\S+)", re.IGNORECASE)
_STATUS_CODE = re.compile(r"\b([1-5]\d\d)\b")


@dataclass(frozen=True)
class _Token:
    kind: str
    start: int
    end: int
    line: int
    text: str = ""


def _tokenize(content: str) -> list[_Token]:
    """Localiza todos os tokens e devolve em ordem de posição."""

    def line_of(offset: int) -> int:
        return content.count("\n", 0, offset) + 1

    found: dict[int, _Token] = {}

    def add(token: _Token) -> None:
        # Mesma posição: o primeiro padrão registrado vence
        found.setdefault(token.start, token)

    for m in _MOCHA.finditer(content):
        add(_Token("mocha", m.start(), m.end(), line_of(m.start()), m.group(0)))
    for m in _BANNER.finditer(content):
        add(_Token("banner", m.start(), m.end(), line_of(m.start()), m.group(0)))
    for m in _SEPARATOR.finditer(content):
        add(_Token("separator", m.start(), m.end(), line_of(m.start())))
    for m in _INIT.finditer(content):
        add(_Token("init", m.start(), m.end(), line_of(m.start()), m.group("text").strip()))
    for m in _LABEL.finditer(content):
        kind = next(name for name, _ in _LABELS if m.group(name) is not None)
        add(_Token(kind, m.start(), m.end(), line_of(m.start())))

    return sorted(found.values(), key=lambda t: t.start)


# =============================================================================
# HELPERS
# =============================================================================


def _unique(items: list[str]) -> tuple[str, ...]:
    return tuple(dict.fromkeys(items))


def _parse_banner(text: str) -> tuple[str | None, list[str]]:
    """
    `ABC ==> TC01 success IB Login ==> tags: @iblogin @smoke`
    → ("TC01 success IB Login", ["iblogin", "smoke"])
    """
    parts = [p.strip() for p in text.split("==>")]
    tags: list[str] = []
    names: list[str] = []
    for part in parts[1:]:
        if part.lower().startswith("tags"):
            tags.extend(_TAG.findall(part))
        elif part:
            names.append(part)
    name = names[0] if names else (parts[0] or None)
    return name, tags


class _LegacyState:
    """Estado de varredura de um único arquivo."""

    def __init__(self, context: LogContext) -> None:
        self.context = context
        self.transactions: list[HttpTransaction] = []
        self.current: HttpTransaction | None = None
        self.responded = False
        self.file_tags: list[str] = []
        self.test_name: str | None = None
        self.test_tags: list[str] = []
        self.pending_step: str | None = None

    @property
    def tags(self) -> tuple[str, ...]:
        return _unique(self.test_tags + self.file_tags)

    def open(self, line: int, method: str | None = None, url: str | None = None, orphan: str | None = None) -> HttpTransaction:
        self.close()
        txn = HttpTransaction(
            method=method,
            url=url,
            test_name=self.test_name,
            step_name=self.pending_step,
            tags=self.tags,
            orphan=orphan,
            line=line,
        )
        self.pending_step = None
        self.transactions.append(txn)
        self.current = txn
        self.responded = orphan == "response"
        return txn

    def close(self) -> None:
        txn = self.current
        if txn is None:
            return
        source = self.context.source
        if not self.responded:
            txn.orphan = "request"
            self.context.report(ParseWarning.orphan_request(txn.method, txn.url, source, txn.line))
        elif txn.response_status is None:
            self.context.report(ParseWarning.missing_status(source, txn.line))
        self.current = None
        self.responded = False

    def request_side(self, line: int) -> HttpTransaction:
        """Transação aberta para dados de requisição (cria uma se preciso)."""
        if self.current is None or self.responded:
            txn = self.open(line)
            self.context.report(ParseWarning.missing_method(None, self.context.source, line))
            return txn
        return self.current

    def response_side(self, line: int) -> HttpTransaction:
        """Transação aberta para dados de resposta (órfã se não houver)."""
        if self.current is None:
            self.context.report(ParseWarning.orphan_response(self.context.source, line))
            return self.open(line, orphan="response")
        self.responded = True
        return self.current


# =============================================================================
# PARSER
# =============================================================================


def parse_legacy(content: str, context: LogContext) -> list[HttpTransaction]:
    """
    Extrai transações de um log Supertest/Mocha.

    Nunca lança exceção para entrada malformada; problemas viram
    warnings em `context`.
    """
    tokens = _tokenize(content)
    state = _LegacyState(context)

    for index, token in enumerate(tokens):
        next_start = tokens[index + 1].start if index + 1 < len(tokens) else len(content)
        captured = content[token.end:next_start].strip()

        if token.kind == "mocha":
            grep = _MOCHA_GREP.search(token.text)
            if grep:
                state.file_tags = list(_unique(state.file_tags + [grep.group(1)[1:]]))
        elif token.kind == "banner":
            state.close()
            state.test_name, state.test_tags = _parse_banner(token.text)
        elif token.kind == "separator":
            state.close()
        elif token.kind == "init":
            state.pending_step = token.text or None
        elif token.kind == "url":
            match = _METHOD_URL.match(captured)
            method = match.group("method").upper() if match and match.group("method") else None
            url = match.group("url") if match else None
            state.open(token.line, method, url)
            if method is None:
                context.report(ParseWarning.missing_method(url, context.source, token.line))
        elif token.kind == "request_header":
            txn = state.request_side(token.line)
            txn.request_headers = decode_headers(captured, "request_headers", context, token.line)
        elif token.kind == "request_payload":
            txn = state.request_side(token.line)
            txn.request_body = decode_blob(captured, "request_body", context, token.line)
        elif token.kind in ("status", "response"):
            if state.responded and state.current is not None and state.current.response_status is not None:
                # Segunda resposta para a mesma requisição: órfã
                state.close()
            txn = state.response_side(token.line)
            status = _STATUS_CODE.search(captured.splitlines()[0]) if captured else None
            if status and txn.response_status is None:
                txn.response_status = int(status.group(1))
        elif token.kind == "response_header":
            txn = state.response_side(token.line)
            txn.response_headers = decode_headers(captured, "response_headers", context, token.line)
        elif token.kind == "response_payload":
            txn = state.response_side(token.line)
            txn.response_body = decode_blob(captured, "response_body", context, token.line)

    state.close()
    logger.debug("%s: %d transação(ões) legadas", context.source, len(state.transactions))
    return state.transactions
