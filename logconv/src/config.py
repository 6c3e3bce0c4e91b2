"""
================================================================================
CONFIGURAÇÃO CENTRALIZADA DO CONVERSOR
================================================================================

Todas as opções de uma conversão vivem em `ConverterConfig`, validadas
pelo Pydantic.

## Para todos entenderem:

O CLI, o arquivo `.logconv/config.yaml` e as variáveis de ambiente
`LOGCONV_*` são só formas diferentes de preencher este mesmo objeto.
O orquestrador e os emissores recebem o objeto pronto e nunca leem o
ambiente por conta própria.

## Fontes de configuração (em ordem de prioridade):

1. Opções do CLI
2. `.logconv/config.yaml`
3. Variáveis de ambiente
4. Valores padrão

## Exemplo de uso:

    >>> config = ConverterConfig.from_env()
    >>> config.target
    'playwright'

    >>> config = ConverterConfig(target="pytest", workers=4)
"""

from __future__ import annotations

import os
from typing import Any, Literal

from pydantic import BaseModel, Field, ValidationError, field_validator

from .errors import ConfigurationError, ConversionAbortedError, ErrorCodes

DEFAULT_ENVIRONMENTS = ["dev", "staging", "qa", "prod"]
DEFAULT_EXTENSIONS = [".log", ".txt", ".json"]


class ConverterConfig(BaseModel):
    """
    Configuração de uma execução do conversor.

    ## Atributos:

    - `target`: Framework de saída (`playwright` ou `pytest`)
    - `format_override`: Força um dialeto em vez de detectar
    - `environments`: Ambientes que recebem um stub de configuração
    - `project_name`: Nome usado no README e na configuração gerada
    - `extensions`: Extensões de arquivo consideradas logs
    - `recursive`: Varre subdiretórios da entrada
    - `force`: Substitui uma saída gerada anteriormente
    - `dry_run`: Calcula tudo mas não escreve nada
    - `workers`: Arquivos processados em paralelo (1 = sequencial)
    - `max_body_assertions`: Chaves do body de resposta verificadas por passo
    - `redact_secrets`: Mascara tokens/senhas nos testes gerados
    - `include_comments`: Comentários de origem (arquivo:linha) no código gerado
    """

    # =========================================================================
    # SAÍDA
    # =========================================================================

    target: Literal["playwright", "pytest"] = Field(
        default="playwright",
        description="Framework dos testes gerados",
    )

    project_name: str = Field(
        default="Generated API Tests",
        min_length=1,
        description="Nome do projeto gerado",
    )

    environments: list[str] = Field(
        default_factory=lambda: list(DEFAULT_ENVIRONMENTS),
        description="Ambientes com stub de configuração (config/<env>.json)",
    )

    max_body_assertions: int = Field(
        default=5,
        ge=0,
        le=50,
        description="Máximo de chaves do body de resposta verificadas por passo",
    )

    redact_secrets: bool = Field(
        default=False,
        description="Se True, mascara valores sensíveis (tokens, senhas) no código gerado",
    )

    include_comments: bool = Field(
        default=True,
        description="Se True, anota cada passo com arquivo:linha de origem",
    )

    # =========================================================================
    # ENTRADA
    # =========================================================================

    format_override: Literal["native", "legacy", "generic"] | None = Field(
        default=None,
        description="Força um dialeto em vez de detectar pelo conteúdo",
    )

    extensions: list[str] = Field(
        default_factory=lambda: list(DEFAULT_EXTENSIONS),
        description="Extensões de arquivo tratadas como log",
    )

    recursive: bool = Field(
        default=True,
        description="Se True, varre subdiretórios da entrada",
    )

    # =========================================================================
    # EXECUÇÃO
    # =========================================================================

    force: bool = Field(
        default=False,
        description="Se True, substitui a saída de uma execução anterior",
    )

    dry_run: bool = Field(
        default=False,
        description="Se True, não escreve nenhum arquivo",
    )

    workers: int = Field(
        default=1,
        ge=1,
        le=32,
        description="Arquivos processados em paralelo (1 = sequencial)",
    )

    @field_validator("extensions")
    @classmethod
    def _normalize_extensions(cls, value: list[str]) -> list[str]:
        normalized = []
        for ext in value:
            ext = ext.strip().lower()
            if ext and not ext.startswith("."):
                ext = "." + ext
            if ext:
                normalized.append(ext)
        return list(dict.fromkeys(normalized))

    @field_validator("environments")
    @classmethod
    def _validate_environments(cls, value: list[str]) -> list[str]:
        cleaned = [env.strip() for env in value if env.strip()]
        for env in cleaned:
            if "/" in env or "\\" in env or env.startswith("."):
                raise ValueError(f"nome de ambiente inválido: {env!r}")
        return list(dict.fromkeys(cleaned))

    # =========================================================================
    # MÉTODOS DE CLASSE
    # =========================================================================

    @classmethod
    def from_env(cls) -> "ConverterConfig":
        """
        Cria configuração a partir de variáveis de ambiente.

        ## Variáveis suportadas:

        - `LOGCONV_TARGET`: playwright | pytest (default: "playwright")
        - `LOGCONV_FORMAT`: native | legacy | generic (default: detecção)
        - `LOGCONV_ENVIRONMENTS`: lista separada por vírgulas
        - `LOGCONV_PROJECT_NAME`: nome do projeto gerado
        - `LOGCONV_EXTENSIONS`: lista separada por vírgulas
        - `LOGCONV_WORKERS`: arquivos em paralelo (default: 1)
        - `LOGCONV_MAX_BODY_ASSERTIONS`: default 5
        - `LOGCONV_REDACT`: mascara segredos (default: "false")
        - `LOGCONV_FORCE`: substitui saída anterior (default: "false")
        """
        def get_bool(key: str, default: bool) -> bool:
            """Helper para converter string para bool."""
            val = os.environ.get(key, str(default)).lower()
            return val in ("true", "1", "yes", "on")

        def get_int(key: str, default: int) -> int:
            """Helper para converter string para int."""
            try:
                return int(os.environ.get(key, str(default)))
            except ValueError:
                return default

        def get_list(key: str, default: list[str]) -> list[str]:
            """Helper para listas separadas por vírgula."""
            val = os.environ.get(key)
            if not val:
                return list(default)
            return [item.strip() for item in val.split(",") if item.strip()]

        values: dict[str, Any] = {
            "target": os.environ.get("LOGCONV_TARGET", "playwright"),
            "environments": get_list("LOGCONV_ENVIRONMENTS", DEFAULT_ENVIRONMENTS),
            "project_name": os.environ.get("LOGCONV_PROJECT_NAME", "Generated API Tests"),
            "extensions": get_list("LOGCONV_EXTENSIONS", DEFAULT_EXTENSIONS),
            "workers": get_int("LOGCONV_WORKERS", 1),
            "max_body_assertions": get_int("LOGCONV_MAX_BODY_ASSERTIONS", 5),
            "redact_secrets": get_bool("LOGCONV_REDACT", False),
            "force": get_bool("LOGCONV_FORCE", False),
        }
        if fmt := os.environ.get("LOGCONV_FORMAT"):
            values["format_override"] = fmt
        return cls.build(values)

    @classmethod
    def for_testing(cls) -> "ConverterConfig":
        """
        Configuração determinística para testes.

        - Execução sequencial
        - Sem comentários de origem (saída mais curta)
        - Ambientes reduzidos
        """
        return cls(
            workers=1,
            include_comments=False,
            environments=["dev"],
        )

    @classmethod
    def build(cls, values: dict[str, Any]) -> "ConverterConfig":
        """
        Valida um dicionário de opções.

        Erros de validação viram `ConversionAbortedError` com E4002,
        para que o CLI mostre a mensagem sem stack trace.
        """
        try:
            return cls(**values)
        except ValidationError as exc:
            first = exc.errors()[0]
            location = ".".join(str(part) for part in first.get("loc", ()))
            raise ConversionAbortedError(
                ConfigurationError(
                    code=ErrorCodes.INVALID_CONFIG,
                    message=f"Configuração inválida em '{location}': {first.get('msg')}",
                    suggestion="Revise .logconv/config.yaml, variáveis LOGCONV_* e opções do CLI",
                    context={"errors": len(exc.errors())},
                )
            ) from exc

    def merged(self, overrides: dict[str, Any]) -> "ConverterConfig":
        """
        Nova configuração com `overrides` aplicados (valores None são ignorados).
        """
        values = self.model_dump()
        values.update({key: value for key, value in overrides.items() if value is not None})
        return self.build(values)
