"""
================================================================================
Catálogo de Códigos de Problema
================================================================================

Cada problema que a conversão pode encontrar tem um código estável
(`E` + quatro dígitos). O relatório JSON e o CI dependem desses códigos,
então números existentes nunca mudam de significado.

```
E 1 001
│ │ └── problema dentro da faixa
│ └──── faixa: 1 parsing, 2 entrada, 3 saída, 4 configuração, 5 interno
└────── prefixo fixo
```

A severidade padrão define onde o problema aparece no relatório:
`warning` conta como warning do arquivo, `info` vira nota, `error`
marca o arquivo (ou a execução) como falho.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Severity(Enum):
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"

    @property
    def icon(self) -> str:
        return _SEVERITY_STYLE[self][0]

    @property
    def color(self) -> str:
        return _SEVERITY_STYLE[self][1]

    @property
    def plural_label(self) -> str:
        return _SEVERITY_STYLE[self][2]


# (ícone, cor Rich, rótulo do grupo)
_SEVERITY_STYLE: dict[Severity, tuple[str, str, str]] = {
    Severity.ERROR: ("❌", "red", "Erros"),
    Severity.WARNING: ("⚠️", "yellow", "Warnings"),
    Severity.INFO: ("ℹ️", "blue", "Notas"),
}


class ErrorCategory(Enum):
    """Faixa do código (o milhar)."""
    PARSING = 1
    INPUT = 2
    OUTPUT = 3
    CONFIGURATION = 4
    INTERNAL = 5

    @property
    def label(self) -> str:
        return _CATEGORY_LABELS[self]

    @classmethod
    def of(cls, number: int) -> "ErrorCategory":
        try:
            return cls(number // 1000)
        except ValueError:
            return cls.INTERNAL


_CATEGORY_LABELS = {
    ErrorCategory.PARSING: "Parsing",
    ErrorCategory.INPUT: "Entrada",
    ErrorCategory.OUTPUT: "Saída",
    ErrorCategory.CONFIGURATION: "Configuração",
    ErrorCategory.INTERNAL: "Interno",
}


@dataclass(frozen=True)
class ErrorCode:
    """
    Um código do catálogo.

    `summary` descreve a classe de problema; a mensagem de cada
    ocorrência fica no `StructuredError`.
    """
    number: int
    name: str
    summary: str
    severity: Severity = Severity.ERROR

    @property
    def category(self) -> ErrorCategory:
        return ErrorCategory.of(self.number)

    @property
    def formatted(self) -> str:
        return f"E{self.number:04d}"

    def __str__(self) -> str:
        return self.formatted

    def __repr__(self) -> str:
        return f"<{self.formatted} {self.name}>"


def _warning(number: int, name: str, summary: str) -> ErrorCode:
    return ErrorCode(number, name, summary, Severity.WARNING)


# =============================================================================
# CATÁLOGO
# =============================================================================


class ErrorCodes:
    """Todos os códigos emitidos pelo conversor."""

    # E1xxx: um campo ou uma transação do log veio degradado
    INVALID_JSON_FIELD = _warning(
        1001, "INVALID_JSON_FIELD", "Campo parece JSON mas não decodifica; mantido como texto bruto"
    )
    MISSING_STATUS = _warning(1002, "MISSING_STATUS", "Resposta sem status HTTP reconhecível")
    ORPHAN_RESPONSE = _warning(1003, "ORPHAN_RESPONSE", "Resposta sem requisição correspondente")
    ORPHAN_REQUEST = _warning(1004, "ORPHAN_REQUEST", "Requisição sem resposta correspondente")
    MISSING_METHOD = _warning(1005, "MISSING_METHOD", "Requisição sem método HTTP reconhecível")
    NO_HTTP_CONTENT = ErrorCode(
        1006, "NO_HTTP_CONTENT", "Nenhuma interação HTTP encontrada no log", Severity.INFO
    )

    # E2xxx: o arquivo inteiro não pôde ser convertido
    FILE_UNREADABLE = ErrorCode(2001, "FILE_UNREADABLE", "Arquivo de log não pôde ser lido")
    PARSE_FAILED = ErrorCode(2002, "PARSE_FAILED", "Falha inesperada ao converter o arquivo")
    NO_INPUT_FILES = ErrorCode(2003, "NO_INPUT_FILES", "Nenhum arquivo de log candidato na entrada")

    # E3xxx: diretório de saída
    OUTPUT_CONFLICT = ErrorCode(3001, "OUTPUT_CONFLICT", "Saída já contém testes de uma execução anterior")
    OUTPUT_NOT_WRITABLE = ErrorCode(3002, "OUTPUT_NOT_WRITABLE", "Saída não pode ser criada ou escrita")

    # E4xxx: parâmetros da execução
    INPUT_NOT_FOUND = ErrorCode(4001, "INPUT_NOT_FOUND", "Diretório de entrada não existe")
    INVALID_CONFIG = ErrorCode(4002, "INVALID_CONFIG", "Valor de configuração inválido")
    UNKNOWN_FORMAT = ErrorCode(4003, "UNKNOWN_FORMAT", "Dialeto forçado não é suportado")

    # E5xxx
    INTERNAL_ERROR = ErrorCode(5001, "INTERNAL_ERROR", "Erro interno inesperado")

    @classmethod
    def all_codes(cls) -> list[ErrorCode]:
        """Catálogo completo, em ordem numérica."""
        codes = [value for value in vars(cls).values() if isinstance(value, ErrorCode)]
        return sorted(codes, key=lambda c: c.number)

    @classmethod
    def lookup(cls, key: int | str) -> ErrorCode | None:
        """
        Busca por número (`3001`), código (`"E3001"`) ou nome
        (`"output_conflict"`).
        """
        for code in cls.all_codes():
            if key in (code.number, code.formatted) or str(key).upper() == code.name:
                return code
        return None
