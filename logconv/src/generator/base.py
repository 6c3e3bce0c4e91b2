"""
================================================================================
Interface Base dos Emissores de Código
================================================================================

Define o contrato que todo emissor (Playwright, pytest) deve seguir.

## Para todos entenderem:

O emissor recebe `TestCaseModel`s já prontos e devolve arquivos-fonte
(`SourceFile`): caminho relativo à saída + conteúdo. Ele não escreve
em disco; quem escreve é o `OutputWriter`.

```
[TestCaseModel, ...] ──> BaseEmitter.emit() ──> [SourceFile, ...]
 (todos os logs)                              (uma suíte por categoria)
SuiteSummary         ──> BaseEmitter.scaffold() ──> configs, README
```

## Métodos obrigatórios:

- `suite_path()`: Caminho da suíte de uma categoria
- `render_suite()`: Código de uma suíte (todos os testes da categoria)
- `run_config()`: Configuração do runner do framework
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field, replace
from enum import Enum

from ..config import ConverterConfig
from ..ingestion.models import HttpTransaction
from .builder import TestCaseModel
from .redaction import redact_field


class EmitTarget(str, Enum):
    PLAYWRIGHT = "playwright"
    PYTEST = "pytest"


@dataclass(frozen=True)
class SourceFile:
    """
    Um arquivo gerado.

    - `path`: Caminho POSIX relativo ao diretório de saída
    - `content`: Conteúdo completo
    - `kind`: "test", "config" ou "docs"
    - `sources`: Logs de origem, em ordem (só para arquivos de teste)
    """
    path: str
    content: str
    kind: str = "test"
    sources: tuple[str, ...] = ()


@dataclass
class SuiteSummary:
    """Visão agregada da execução, usada para gerar o scaffolding."""
    project_name: str
    environments: list[str]
    tags: list[str] = field(default_factory=lambda: [])
    categories: list[str] = field(default_factory=lambda: [])
    test_files: list[str] = field(default_factory=lambda: [])
    base_url: str | None = None


def group_by_category(models: list[TestCaseModel]) -> dict[str, list[TestCaseModel]]:
    """Categorias na ordem do primeiro modelo que as usa."""
    groups: dict[str, list[TestCaseModel]] = {}
    for model in models:
        groups.setdefault(model.category, []).append(model)
    return groups


def group_by_source(models: list[TestCaseModel]) -> dict[str, list[TestCaseModel]]:
    groups: dict[str, list[TestCaseModel]] = {}
    for model in models:
        groups.setdefault(model.source, []).append(model)
    return groups


class BaseEmitter(ABC):
    """
    Base para todos os emissores.

    ## Exemplo de implementação:

        >>> class MeuEmitter(BaseEmitter):
        ...     target = EmitTarget.PYTEST
        ...     def suite_path(self, category): return f"tests/test_{category}.py"
        ...     def render_suite(self, category, models): return "..."
        ...     def run_config(self, summary): return []
    """

    target: EmitTarget

    def __init__(self, config: ConverterConfig) -> None:
        self.config = config

    @property
    def name(self) -> str:
        return self.target.value

    @abstractmethod
    def suite_path(self, category: str) -> str:
        """Caminho (relativo à saída) da suíte de uma categoria."""

    @abstractmethod
    def render_suite(self, category: str, models: list[TestCaseModel]) -> str:
        """Renderiza uma suíte com todos os modelos de uma categoria."""

    @abstractmethod
    def run_config(self, summary: SuiteSummary) -> list[SourceFile]:
        """Arquivos de configuração do framework (runner)."""

    def emit(self, models: list[TestCaseModel]) -> list[SourceFile]:
        """
        Uma suíte por categoria, com os modelos de todos os logs.

        Categorias e modelos seguem a ordem recebida (ordem de entrada
        dos arquivos, depois ordem de cada log).
        """
        files: list[SourceFile] = []
        for category, group in group_by_category(models).items():
            files.append(
                SourceFile(
                    path=self.suite_path(category),
                    content=self.render_suite(category, group),
                    kind="test",
                    sources=tuple(dict.fromkeys(model.source for model in group)),
                )
            )
        return files

    def scaffold(self, summary: SuiteSummary) -> list[SourceFile]:
        """Configuração do runner + stubs por ambiente + README."""
        from .scaffold import environment_configs, readme

        return [
            *self.run_config(summary),
            *environment_configs(summary),
            readme(summary, self),
        ]

    def prepare(self, txn: HttpTransaction) -> HttpTransaction:
        """Transação como deve aparecer no código (mascarada se configurado)."""
        if not self.config.redact_secrets:
            return txn
        return replace(
            txn,
            request_headers=redact_field(txn.request_headers),
            request_body=redact_field(txn.request_body),
            response_headers=redact_field(txn.response_headers),
            response_body=redact_field(txn.response_body),
        )

    def origin_comment(self, txn: HttpTransaction, source: str) -> str | None:
        if not self.config.include_comments:
            return None
        location = f"{source}:{txn.line}" if txn.line else source
        if txn.orphan == "response":
            return f"{location} (resposta sem requisição correspondente no log)"
        if txn.orphan == "request":
            return f"{location} (requisição sem resposta no log)"
        return location
