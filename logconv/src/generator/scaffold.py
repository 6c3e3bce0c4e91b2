"""
Scaffolding comum a todos os emissores: stubs de configuração por
ambiente (`config/<env>.json`) e o README da suíte gerada.

O conteúdo não tem data/hora: duas execuções iguais geram bytes iguais.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

from .base import SourceFile, SuiteSummary

if TYPE_CHECKING:
    from .base import BaseEmitter

PLACEHOLDER_BASE_URL = "https://api.example.com"

_RUN_COMMANDS = {
    "playwright": [
        "npx playwright test",
        "TEST_ENV=staging npx playwright test",
        "npx playwright test --grep @smoke",
    ],
    "pytest": [
        "pytest",
        "TEST_ENV=staging pytest",
        "pytest -m smoke",
    ],
}


def environment_configs(summary: SuiteSummary) -> list[SourceFile]:
    """
    Um `config/<env>.json` por ambiente.

    O primeiro ambiente recebe a origem observada nos logs (quando única);
    os demais recebem um placeholder para ser preenchido.
    """
    files: list[SourceFile] = []
    for position, env in enumerate(summary.environments):
        base_url = summary.base_url if position == 0 and summary.base_url else PLACEHOLDER_BASE_URL
        settings = {
            "environment": env,
            "baseURL": base_url,
            "timeout": 10000,
            "retries": 0 if env == summary.environments[0] else 2,
            "headers": {
                "Content-Type": "application/json",
                "Accept": "application/json",
            },
        }
        files.append(
            SourceFile(
                path=f"config/{env}.json",
                content=json.dumps(settings, indent=2, ensure_ascii=False) + "\n",
                kind="config",
            )
        )
    return files


def readme(summary: SuiteSummary, emitter: "BaseEmitter") -> SourceFile:
    """README com estrutura, comandos e tags da suíte gerada."""
    lines = [
        f"# {summary.project_name}",
        "",
        f"Testes de API ({emitter.name}) gerados por `logconv` a partir de logs capturados.",
        "Revise asserções e dados de teste antes de versionar.",
        "",
        "## Estrutura",
        "",
        "```",
        f"{emitter.suite_path('<categoria>')}  # uma suíte por categoria de endpoint (todos os logs)",
        "config/<ambiente>.json",
        "logconv-report.json  # resumo da conversão",
        "```",
        "",
        "## Execução",
        "",
        "```bash",
        *_RUN_COMMANDS.get(emitter.name, []),
        "```",
        "",
        "## Ambientes",
        "",
        *[f"- `{env}`: `config/{env}.json`" for env in summary.environments],
        "",
    ]
    if summary.categories:
        lines.extend(["## Categorias", "", *[f"- {category}" for category in summary.categories], ""])
    if summary.tags:
        lines.extend(["## Tags", "", " ".join(f"`@{tag}`" for tag in summary.tags), ""])
    lines.extend(["## Arquivos de teste", "", *[f"- `{path}`" for path in summary.test_files], ""])
    return SourceFile(path="README.md", content="\n".join(lines), kind="docs")
