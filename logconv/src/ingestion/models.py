"""
================================================================================
Modelos de Ingestão de Logs
================================================================================

Estruturas de dados que fluem do detector e dos parsers para o builder.

## Para todos entenderem:

Um log bruto vira uma lista de `HttpTransaction`: cada uma é um par
requisição/resposta observado. Campos que podem estar ausentes ou
malformados (headers, bodies) usam `FieldValue`, que diz explicitamente
se o valor foi decodificado, se ficou como texto bruto ou se não existe.

```
RawLogFile ──> DetectedFormat ──> [HttpTransaction, ...]
                                        │
                                 FieldValue (decoded | raw | absent)
```
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any
from urllib.parse import urlsplit

from ..errors import StructuredError

logger = logging.getLogger(__name__)


# =============================================================================
# FORMATOS
# =============================================================================


class LogFormat(str, Enum):
    """Dialetos de log reconhecidos."""
    NATIVE = "native"
    LEGACY = "legacy"
    GENERIC = "generic"

    @property
    def label(self) -> str:
        labels = {
            LogFormat.NATIVE: "Nativo (blocos emoji)",
            LogFormat.LEGACY: "Legado (Supertest/Mocha)",
            LogFormat.GENERIC: "Genérico",
        }
        return labels[self]


@dataclass(frozen=True)
class DetectedFormat:
    """
    Resultado da detecção de formato.

    ## Atributos:

    - `format`: Dialeto escolhido
    - `confidence`: Fração das sondas da assinatura que casaram (0.0-1.0)
    - `matched`: Nomes das sondas que casaram
    - `forced`: True quando o formato veio de `--format`, não da detecção
    """
    format: LogFormat
    confidence: float
    matched: tuple[str, ...] = ()
    forced: bool = False


@dataclass
class RawLogFile:
    """Conteúdo completo de um arquivo de log, lido uma única vez."""
    path: Path
    name: str
    content: str
    size: int

    @classmethod
    def read(cls, path: Path, root: Path | None = None) -> "RawLogFile":
        """
        Lê o arquivo como UTF-8.

        Bytes inválidos são substituídos e o BOM inicial é removido;
        somente erros de I/O (OSError) são propagados.
        """
        data = path.read_bytes()
        content = data.decode("utf-8", errors="replace")
        if content.startswith("\ufeff"):
            content = content[1:]
        name = path.relative_to(root).as_posix() if root else path.name
        return cls(path=path, name=name, content=content, size=len(data))


# =============================================================================
# VALORES DE CAMPO (UNIÃO ETIQUETADA)
# =============================================================================


class FieldState(str, Enum):
    DECODED = "decoded"
    RAW = "raw"
    ABSENT = "absent"


@dataclass(frozen=True)
class FieldValue:
    """
    Valor de um campo capturado do log.

    - `decoded`: `value` contém o objeto decodificado (dict, list, escalar)
    - `raw`: `value` contém o texto original, que não pôde ser decodificado
    - `absent`: o campo não apareceu no log

    ## Exemplo:

        >>> FieldValue.decoded({"id": 1}, '{"id": 1}').is_decoded
        True
        >>> FieldValue.raw_text("{broken").value
        '{broken'
    """
    state: FieldState
    value: Any = None
    raw: str | None = None

    @classmethod
    def absent(cls) -> "FieldValue":
        return cls(FieldState.ABSENT)

    @classmethod
    def decoded(cls, value: Any, raw: str | None = None) -> "FieldValue":
        return cls(FieldState.DECODED, value, raw)

    @classmethod
    def raw_text(cls, text: str) -> "FieldValue":
        return cls(FieldState.RAW, text, text)

    @property
    def is_present(self) -> bool:
        return self.state is not FieldState.ABSENT

    @property
    def is_decoded(self) -> bool:
        return self.state is FieldState.DECODED

    @property
    def is_raw(self) -> bool:
        return self.state is FieldState.RAW

    def to_dict(self) -> dict[str, Any]:
        if self.state is FieldState.ABSENT:
            return {"state": self.state.value}
        return {"state": self.state.value, "value": self.value}


# =============================================================================
# TRANSAÇÃO HTTP
# =============================================================================


@dataclass
class HttpTransaction:
    """
    Um par requisição/resposta reconstruído de um log.

    `response_status` igual a None significa "desconhecido": a transação
    é mantida, marcada como parcial, e o teste gerado omite a asserção
    de status.

    `orphan` vale "request" (requisição sem resposta), "response"
    (resposta sem requisição) ou None.
    """
    method: str | None = None
    url: str | None = None
    request_headers: FieldValue = field(default_factory=FieldValue.absent)
    request_body: FieldValue = field(default_factory=FieldValue.absent)
    response_status: int | None = None
    status_text: str | None = None
    response_headers: FieldValue = field(default_factory=FieldValue.absent)
    response_body: FieldValue = field(default_factory=FieldValue.absent)
    response_time_ms: int | None = None
    timestamp: str | None = None
    test_name: str | None = None
    step_name: str | None = None
    scenario: str | None = None
    test_id: str | None = None
    tags: tuple[str, ...] = ()
    orphan: str | None = None
    line: int | None = None

    @property
    def is_partial(self) -> bool:
        return self.response_status is None

    @property
    def path(self) -> str | None:
        """Caminho da URL (sem esquema/host), com query string."""
        if not self.url:
            return None
        parts = urlsplit(self.url)
        if parts.scheme and parts.netloc:
            path = parts.path or "/"
            return f"{path}?{parts.query}" if parts.query else path
        return self.url

    def to_dict(self) -> dict[str, Any]:
        return {
            "method": self.method,
            "url": self.url,
            "request_headers": self.request_headers.to_dict(),
            "request_body": self.request_body.to_dict(),
            "response_status": self.response_status,
            "response_headers": self.response_headers.to_dict(),
            "response_body": self.response_body.to_dict(),
            "test_name": self.test_name,
            "step_name": self.step_name,
            "tags": list(self.tags),
            "orphan": self.orphan,
            "line": self.line,
        }


# =============================================================================
# CONTEXTO POR ARQUIVO
# =============================================================================


@dataclass
class LogContext:
    """
    Contexto de um único arquivo em conversão.

    Passado explicitamente para parsers e builder; cada arquivo tem o
    seu, então nada é compartilhado entre arquivos (nem entre threads).
    """
    source: str
    issues: list[StructuredError] = field(default_factory=lambda: [])

    def report(self, issue: StructuredError) -> None:
        """Registra um warning/aviso para o relatório."""
        logger.debug("%s", issue)
        self.issues.append(issue)
