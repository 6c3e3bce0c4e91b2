"""
================================================================================
Detector de Formato de Log
================================================================================

Identifica o dialeto de um log a partir do conteúdo, nunca da extensão.

## Para todos entenderem:

Cada dialeto tem uma "assinatura": uma lista de sondas (regex) e o
número mínimo de sondas que precisam casar. As assinaturas ficam numa
tabela ordenada; a primeira que atinge o mínimo vence:

```
native  (2 de 5 sondas)  ──┐
legacy  (4 de 11 sondas) ──┼──> primeira que casar
generic (1 de 3 sondas)  ──┘
                               nenhuma? → generic, confiança 0.0
```

Adicionar um dialeto é adicionar uma linha em `SIGNATURES`.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from .models import DetectedFormat, LogFormat


@dataclass(frozen=True)
class Probe:
    name: str
    pattern: re.Pattern[str]

    def matches(self, content: str) -> bool:
        return self.pattern.search(content) is not None


@dataclass(frozen=True)
class Signature:
    format: LogFormat
    probes: tuple[Probe, ...]
    min_matches: int


def _probe(name: str, pattern: str, flags: int = re.MULTILINE) -> Probe:
    return Probe(name, re.compile(pattern, flags))


_METHODS = r"(?:GET|POST|PUT|DELETE|PATCH|HEAD|OPTIONS)"


# =============================================================================
# TABELA DE ASSINATURAS (ordem = prioridade)
# =============================================================================

SIGNATURES: tuple[Signature, ...] = (
    Signature(
        format=LogFormat.NATIVE,
        probes=(
            _probe("request_block", r"HTTP REQUEST\s*$"),
            _probe("response_block", r"HTTP RESPONSE\s*$"),
            _probe("step_header", r"TEST STEP:"),
            _probe("method_line", rf"Method:\s*{_METHODS}\b"),
            _probe("test_case_line", r"Test Case:\s*\S"),
        ),
        min_matches=2,
    ),
    Signature(
        format=LogFormat.LEGACY,
        probes=(
            _probe("mocha_command", r"\$ env .* node_modules/\.bin/mocha"),
            _probe("tc_banner", r"==> TC\d+"),
            _probe("tags_banner", r"==> tags: @"),
            _probe("url_line", rf"URL\s*:\s*{_METHODS}", re.MULTILINE | re.IGNORECASE),
            _probe("request_header", r"Request Header"),
            _probe("request_payload", r"Request Payload"),
            _probe("response_marker", r"RESPONSE"),
            _probe("status_line", r"Http Status Code\s*:\s*\d+"),
            _probe("response_header", r"Response header:"),
            _probe("response_payload", r"Response Payload"),
            _probe("initialization", r"Initialization"),
        ),
        min_matches=4,
    ),
    Signature(
        format=LogFormat.GENERIC,
        probes=(
            _probe("method_path", rf"\b{_METHODS}\s+(?:https?://\S+|/\S*)"),
            _probe("http_version", r"HTTP/\d(?:\.\d)?"),
            _probe("status_code", r"\bstatus(?:[ _]?code)?\b\W{0,3}[1-5]\d\d\b", re.IGNORECASE),
        ),
        min_matches=1,
    ),
)


# =============================================================================
# DETECÇÃO
# =============================================================================


def detect(content: str) -> DetectedFormat:
    """
    Detecta o dialeto de um log.

    Função pura: nunca lança exceção e nunca consulta o nome do arquivo.

    ## Exemplo:

        >>> detect("📤 HTTP REQUEST\\n🌐 Method: GET").format
        <LogFormat.NATIVE: 'native'>
        >>> detect("texto qualquer").confidence
        0.0
    """
    for signature in SIGNATURES:
        matched = tuple(probe.name for probe in signature.probes if probe.matches(content))
        if len(matched) >= signature.min_matches:
            return DetectedFormat(
                format=signature.format,
                confidence=round(len(matched) / len(signature.probes), 3),
                matched=matched,
            )

    return DetectedFormat(format=LogFormat.GENERIC, confidence=0.0)


def forced(log_format: LogFormat) -> DetectedFormat:
    """Formato escolhido pelo usuário (`--format`), sem detecção."""
    return DetectedFormat(format=log_format, confidence=1.0, forced=True)
