"""
================================================================================
Decodificação de Campos Capturados
================================================================================

Converte o texto capturado de um log (headers, bodies) em `FieldValue`.

## Regras:

1. Texto vazio ou ausente → `absent`
2. Texto que começa com `{` ou `[` → tenta JSON (aceita lixo depois do
   valor); se falhar, tenta a notação relaxada do `util.inspect` do Node
   (`{ key: 'value' }`); se ainda falhar → `raw` + exatamente um warning
3. Escalares JSON (`null`, `true`, números, strings entre aspas) → `decoded`
4. Qualquer outro texto → `raw`, sem warning (não pretendia ser JSON)

Headers que não parecem JSON têm um fallback extra: linhas `chave: valor`
viram um dict.
"""

from __future__ import annotations

import json
import re
from typing import Any

from ..errors import ParseWarning
from .models import FieldValue, LogContext

_decoder = json.JSONDecoder()

_NUMBER = re.compile(r"^-?\d+(\.\d+)?([eE][+-]?\d+)?$")

# Aspas simples do util.inspect: 'valor'
_SINGLE_QUOTED = re.compile(r"'((?:[^'\\]|\\.)*)'")

# Chaves sem aspas: { key: ... } ou , key: ...
_BARE_KEY = re.compile(r"([{,]\s*)([A-Za-z_$][\w$-]*)\s*:")

# Vírgula final antes de fechar objeto/lista
_TRAILING_COMMA = re.compile(r",(\s*[}\]])")

# 'content-type': 'application/json'  |  content-type: application/json
_HEADER_LINE = re.compile(
    r"""^\s*["']?(?P<key>[A-Za-z0-9][\w.-]*)["']?\s*:\s*(?P<value>.*?)\s*,?\s*$"""
)


def _relaxed_json(text: str) -> Any:
    """Decodifica a notação de objeto do Node (aspas simples, chaves nuas)."""

    def _requote(match: re.Match[str]) -> str:
        inner = match.group(1).replace('\\\'', "'").replace('"', '\\"')
        return f'"{inner}"'

    candidate = _SINGLE_QUOTED.sub(_requote, text)
    candidate = _BARE_KEY.sub(lambda m: f'{m.group(1)}"{m.group(2)}":', candidate)
    candidate = _TRAILING_COMMA.sub(r"\1", candidate)
    value, _ = _decoder.raw_decode(candidate)
    return value


def _decode_scalar(text: str) -> tuple[bool, Any]:
    if text in ("null", "true", "false") or _NUMBER.match(text) or (
        len(text) >= 2 and text[0] == text[-1] == '"'
    ):
        try:
            return True, json.loads(text)
        except json.JSONDecodeError:
            return False, None
    return False, None


def decode_blob(
    text: str | None,
    field_name: str,
    context: LogContext,
    line: int | None = None,
) -> FieldValue:
    """
    Decodifica o texto capturado de um body.

    ## Exemplo:

        >>> ctx = LogContext("a.log")
        >>> decode_blob('{"id": 1}', "response_body", ctx).value
        {'id': 1}
        >>> decode_blob('{"id": ', "response_body", ctx).is_raw
        True
        >>> len(ctx.issues)
        1
    """
    if text is None:
        return FieldValue.absent()

    stripped = text.strip()
    if not stripped:
        return FieldValue.absent()

    if stripped[0] in "{[":
        try:
            value, _ = _decoder.raw_decode(stripped)
            return FieldValue.decoded(value, stripped)
        except json.JSONDecodeError as exc:
            detail = str(exc)
        try:
            return FieldValue.decoded(_relaxed_json(stripped), stripped)
        except json.JSONDecodeError:
            pass
        context.report(ParseWarning.invalid_json(field_name, context.source, line, detail))
        return FieldValue.raw_text(stripped)

    ok, scalar = _decode_scalar(stripped)
    if ok:
        return FieldValue.decoded(scalar, stripped)

    return FieldValue.raw_text(stripped)


def parse_header_lines(text: str) -> dict[str, str]:
    """
    Parsing tolerante de headers linha a linha.

    Aceita `'chave': 'valor'`, `chave: valor` e variações com vírgula final.
    """
    headers: dict[str, str] = {}
    for raw_line in text.splitlines():
        stripped = raw_line.strip().strip("{}").strip()
        if not stripped:
            continue
        match = _HEADER_LINE.match(stripped)
        if not match:
            continue
        value = match.group("value").strip().strip(",").strip()
        if len(value) >= 2 and value[0] == value[-1] and value[0] in "'\"":
            value = value[1:-1]
        headers[match.group("key")] = value
    return headers


def decode_headers(
    text: str | None,
    field_name: str,
    context: LogContext,
    line: int | None = None,
) -> FieldValue:
    """
    Decodifica um bloco de headers.

    Texto que começa com `{` ou `[` segue as regras de `decode_blob`:
    se nem JSON nem a notação relaxada decodificam, fica `raw` com um
    warning (nada é "recuperado" de JSON truncado). O fallback
    `chave: valor` linha a linha vale só para texto que nunca pareceu
    JSON.
    """
    if text is None or not text.strip():
        return FieldValue.absent()

    stripped = text.strip()
    if stripped[0] in "{[":
        return decode_blob(stripped, field_name, context, line)

    headers = parse_header_lines(stripped)
    if headers:
        return FieldValue.decoded(headers, stripped)
    return FieldValue.raw_text(stripped)
