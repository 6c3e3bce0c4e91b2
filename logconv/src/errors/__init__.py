"""
================================================================================
Problemas da Conversão: códigos, ocorrências e formatação
================================================================================

| Faixa | Categoria    | Exemplo                                   |
|-------|--------------|-------------------------------------------|
| E1xxx | Parsing      | body truncado, resposta sem requisição    |
| E2xxx | Entrada      | arquivo ilegível, nenhum log encontrado   |
| E3xxx | Saída        | saída ocupada por execução anterior       |
| E4xxx | Configuração | entrada inexistente, dialeto desconhecido |
| E5xxx | Interno      | bug                                       |

## Exemplo:

    >>> from src.errors import ParseWarning
    >>> print(ParseWarning.orphan_response("login.log", 42))
    E1003: Resposta sem requisição correspondente; método e URL desconhecidos (login.log:42)
"""

from .codes import ErrorCategory, ErrorCode, ErrorCodes, Severity
from .structured import (
    ConfigurationError,
    ConversionAbortedError,
    FileError,
    OutputConflictError,
    ParseWarning,
    StructuredError,
    format_error,
    format_errors_for_cli,
    format_errors_for_json,
)

__all__ = [
    "ErrorCategory",
    "ErrorCode",
    "ErrorCodes",
    "Severity",
    "StructuredError",
    "ParseWarning",
    "FileError",
    "ConfigurationError",
    "ConversionAbortedError",
    "OutputConflictError",
    "format_error",
    "format_errors_for_cli",
    "format_errors_for_json",
]
