"""
================================================================================
Problemas Estruturados: Warnings, Erros de Arquivo e Falhas
================================================================================

Um problema é um *valor*: código do catálogo, mensagem, onde ocorreu
(`login.log:42`) e, quando ajuda, uma sugestão. Parsers e orquestrador
acumulam esses valores no relatório e seguem em frente.

Só o que impede a execução inteira (entrada inexistente, saída ocupada
ou não gravável) vira exceção: `ConversionAbortedError`, que carrega o
problema para o CLI mostrar sem stack trace.

```
ParseWarning       ──> FileReport.warnings / notes   (conversão continua)
FileError          ──> FileReport.error              (próximo arquivo)
ConfigurationError ──> ConversionAbortedError        (execução para)
```
"""

from __future__ import annotations

import json
from collections import Counter
from dataclasses import dataclass, field
from typing import Any

from .codes import ErrorCategory, ErrorCode, ErrorCodes, Severity


@dataclass
class StructuredError:
    """
    Uma ocorrência de problema.

    `severity` só é informada quando difere do padrão do código.

    ## Exemplo:

        >>> issue = StructuredError(
        ...     code=ErrorCodes.INVALID_JSON_FIELD,
        ...     message="Campo 'response_body' não é JSON válido",
        ...     path="login.log:17",
        ... )
        >>> str(issue)
        "E1001: Campo 'response_body' não é JSON válido (login.log:17)"
    """
    code: ErrorCode
    message: str
    path: str | None = None
    suggestion: str | None = None
    context: dict[str, Any] = field(default_factory=lambda: {})
    severity: Severity | None = None

    @property
    def effective_severity(self) -> Severity:
        return self.severity if self.severity is not None else self.code.severity

    @property
    def category(self) -> ErrorCategory:
        return self.code.category

    def __str__(self) -> str:
        where = f" ({self.path})" if self.path else ""
        return f"{self.code.formatted}: {self.message}{where}"

    def to_dict(self) -> dict[str, Any]:
        """Forma usada no relatório JSON; campos vazios são omitidos."""
        data: dict[str, Any] = {
            "code": self.code.formatted,
            "name": self.code.name,
            "message": self.message,
            "severity": self.effective_severity.value,
            "category": self.category.label,
        }
        optional = {"path": self.path, "suggestion": self.suggestion, "context": self.context}
        data.update({key: value for key, value in optional.items() if value})
        return data



def _location(source: str, line: int | None) -> str:
    return f"{source}:{line}" if line else source


@dataclass
class ParseWarning(StructuredError):
    """
    Warning emitido por um parser de dialeto.

    Nunca interrompe o processamento: o dado afetado é preservado
    (como texto bruto ou como transação parcial) e o warning vai
    para o relatório.
    """

    @classmethod
    def invalid_json(
        cls,
        field_name: str,
        source: str,
        line: int | None = None,
        detail: str | None = None,
    ) -> "ParseWarning":
        """Cria warning de campo JSON malformado."""
        return cls(
            code=ErrorCodes.INVALID_JSON_FIELD,
            message=f"Campo '{field_name}' não é JSON válido; mantido como texto bruto",
            path=_location(source, line),
            suggestion="Verifique se o log foi truncado ou se o corpo não é JSON",
            context={"field": field_name, "detail": detail} if detail else {"field": field_name},
        )

    @classmethod
    def missing_status(cls, source: str, line: int | None = None) -> "ParseWarning":
        """Cria warning de resposta sem status."""
        return cls(
            code=ErrorCodes.MISSING_STATUS,
            message="Resposta sem status HTTP reconhecível; asserção de status omitida",
            path=_location(source, line),
        )

    @classmethod
    def orphan_response(cls, source: str, line: int | None = None) -> "ParseWarning":
        """Cria warning de resposta sem requisição."""
        return cls(
            code=ErrorCodes.ORPHAN_RESPONSE,
            message="Resposta sem requisição correspondente; método e URL desconhecidos",
            path=_location(source, line),
        )

    @classmethod
    def orphan_request(
        cls,
        method: str | None,
        url: str | None,
        source: str,
        line: int | None = None,
    ) -> "ParseWarning":
        """Cria warning de requisição sem resposta."""
        target = f"{method or '?'} {url or '?'}"
        return cls(
            code=ErrorCodes.ORPHAN_REQUEST,
            message=f"Requisição {target} sem resposta correspondente",
            path=_location(source, line),
            context={"method": method, "url": url},
        )

    @classmethod
    def missing_method(cls, url: str | None, source: str, line: int | None = None) -> "ParseWarning":
        """Cria warning de requisição sem método."""
        return cls(
            code=ErrorCodes.MISSING_METHOD,
            message=f"Requisição para {url or '?'} sem método HTTP; GET será assumido",
            path=_location(source, line),
        )

    @classmethod
    def no_http_content(cls, source: str) -> "ParseWarning":
        """Cria aviso informativo de log sem interações HTTP."""
        return cls(
            code=ErrorCodes.NO_HTTP_CONTENT,
            message="Nenhuma interação HTTP encontrada",
            path=source,
        )


@dataclass
class FileError(StructuredError):
    """Erro que impede a conversão de um arquivo inteiro."""

    @classmethod
    def unreadable(cls, source: str, reason: str) -> "FileError":
        """Cria erro de arquivo ilegível."""
        return cls(
            code=ErrorCodes.FILE_UNREADABLE,
            message=f"Não foi possível ler o arquivo: {reason}",
            path=source,
            suggestion="Verifique permissões e se o caminho é um arquivo regular",
        )

    @classmethod
    def parse_failed(cls, source: str, reason: str) -> "FileError":
        """Cria erro de falha catastrófica de parsing."""
        return cls(
            code=ErrorCodes.PARSE_FAILED,
            message=f"Falha ao converter o log: {reason}",
            path=source,
            suggestion="Use --format generic para forçar o parser tolerante",
        )


@dataclass
class ConfigurationError(StructuredError):
    """Parâmetros da execução inválidos: entrada, saída ou formato."""

    @classmethod
    def input_not_found(cls, input_dir: str) -> "ConfigurationError":
        """Cria erro de diretório de entrada inexistente."""
        return cls(
            code=ErrorCodes.INPUT_NOT_FOUND,
            message=f"Diretório de entrada não encontrado: {input_dir}",
            suggestion="Informe um diretório existente com arquivos .log, .txt ou .json",
            context={"input_dir": input_dir},
        )

    @classmethod
    def no_input_files(cls, input_dir: str, extensions: list[str]) -> "ConfigurationError":
        """Cria erro de diretório sem logs."""
        return cls(
            code=ErrorCodes.NO_INPUT_FILES,
            message=f"Nenhum arquivo de log encontrado em {input_dir}",
            suggestion=f"Extensões aceitas: {', '.join(extensions)}",
            context={"input_dir": input_dir, "extensions": extensions},
        )

    @classmethod
    def output_conflict(cls, output_dir: str) -> "ConfigurationError":
        """Cria erro de saída já ocupada por uma execução anterior."""
        return cls(
            code=ErrorCodes.OUTPUT_CONFLICT,
            message=f"Diretório de saída já contém testes gerados: {output_dir}",
            suggestion="Use --force para substituir a saída anterior",
            context={"output_dir": output_dir},
        )

    @classmethod
    def output_not_writable(cls, output_dir: str, reason: str) -> "ConfigurationError":
        """Cria erro de saída não gravável."""
        return cls(
            code=ErrorCodes.OUTPUT_NOT_WRITABLE,
            message=f"Não foi possível escrever em {output_dir}: {reason}",
            context={"output_dir": output_dir},
        )

    @classmethod
    def unknown_format(cls, name: str, valid: list[str]) -> "ConfigurationError":
        """Cria erro de formato forçado desconhecido."""
        return cls(
            code=ErrorCodes.UNKNOWN_FORMAT,
            message=f"Formato de log '{name}' não suportado",
            suggestion=f"Use um dos formatos: {', '.join(valid)}",
        )


# =============================================================================
# EXCEÇÕES DE FALHA DE EXECUÇÃO
# =============================================================================


class ConversionAbortedError(Exception):
    """
    Falha que impede a execução inteira de continuar.

    Carrega o `StructuredError` correspondente para que o CLI
    formate a mensagem sem stack trace.
    """

    def __init__(self, error: StructuredError) -> None:
        super().__init__(str(error))
        self.error = error


class OutputConflictError(ConversionAbortedError):
    """Saída contém uma execução anterior e `force` não foi pedido."""


# =============================================================================
# FORMATAÇÃO
# =============================================================================


def format_error(error: StructuredError, verbose: bool = False) -> str:
    """
    Markup Rich de um problema: linha principal, local, sugestão e,
    com `verbose`, o contexto em JSON.
    """
    severity = error.effective_severity
    lines = [f"[{severity.color}]{severity.icon} {error.code.formatted}: {error.message}[/{severity.color}]"]
    if error.path:
        lines.append(f"   [dim]em {error.path}[/dim]")
    if error.suggestion:
        lines.append(f"   [cyan]💡 {error.suggestion}[/cyan]")
    if verbose and error.context:
        lines.append(f"   [dim]contexto: {json.dumps(error.context, ensure_ascii=False)}[/dim]")
    return "\n".join(lines)


def format_errors_for_cli(errors: list[StructuredError], verbose: bool = False) -> str:
    """Problemas agrupados por severidade, erros primeiro."""
    if not errors:
        return "[green]✓ Nenhum problema encontrado[/green]"

    sections: list[str] = []
    for severity in Severity:
        group = [e for e in errors if e.effective_severity is severity]
        if not group:
            continue
        sections.append(f"[bold {severity.color}]{severity.plural_label} ({len(group)})[/bold {severity.color}]")
        sections.extend(format_error(e, verbose) for e in group)
    return "\n".join(sections)


def format_errors_for_json(errors: list[StructuredError]) -> dict[str, Any]:
    """
    Lista de problemas com totais por severidade e por categoria.

    `success` é falso só quando há ao menos um problema de severidade
    `error`.
    """
    by_severity = Counter(e.effective_severity.value for e in errors)
    by_category = Counter(e.category.label for e in errors)
    return {
        "success": by_severity[Severity.ERROR.value] == 0,
        "errors": [e.to_dict() for e in errors],
        "summary": {
            "total": len(errors),
            "by_severity": dict(by_severity),
            "by_category": dict(by_category),
        },
    }
