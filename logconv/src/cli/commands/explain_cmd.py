"""
================================================================================
Comando `logconv explain`: Explica Códigos de Problema
================================================================================

O relatório e a saída do `convert` citam códigos como `E1004`. Este
comando diz o que cada um significa e onde ele aparece no relatório.

## Uso:

```bash
# Tabela com todos os códigos
logconv explain

# Um código (número, código ou nome)
logconv explain E1004
logconv explain orphan_request
```
"""

from __future__ import annotations

from typing import Any

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from ...errors import ErrorCode, ErrorCodes, Severity
from ..registry import register_command

# Console para saída JSON (não silenciável)
_json_console = Console()

_WHERE = {
    Severity.ERROR: "erro do arquivo (ou da execução); o arquivo não gera testes",
    Severity.WARNING: "warning do arquivo; o dado é preservado no teste gerado",
    Severity.INFO: "nota informativa; não conta como warning",
}


def _as_dict(code: ErrorCode) -> dict[str, Any]:
    return {
        "code": code.formatted,
        "name": code.name,
        "category": code.category.label,
        "severity": code.severity.value,
        "summary": code.summary,
    }


@register_command
@click.command("explain")
@click.argument("code", required=False)
@click.pass_context
def explain_command(ctx: click.Context, code: str | None) -> None:
    """Explica CODE (ex.: E1004) ou lista todos os códigos."""
    console: Console = ctx.obj["console"]
    error_console: Console = ctx.obj["error_console"]
    json_output: bool = ctx.obj.get("json_output", False)

    if code is None:
        codes = ErrorCodes.all_codes()
        if json_output:
            _json_console.print_json(data=[_as_dict(c) for c in codes])
            return

        table = Table(title="Códigos de Problema")
        table.add_column("Código", style="cyan")
        table.add_column("Nome")
        table.add_column("Severidade")
        table.add_column("Descrição")
        for item in codes:
            severity = item.severity
            table.add_row(
                item.formatted,
                item.name,
                f"[{severity.color}]{severity.value}[/{severity.color}]",
                item.summary,
            )
        console.print(table)
        return

    key: int | str = int(code) if code.isdigit() else code.upper()
    found = ErrorCodes.lookup(key)
    if found is None:
        error_console.print(f"[red]❌ Código desconhecido: {code}[/red]")
        error_console.print("Use [bold]logconv explain[/bold] para listar os códigos.")
        raise SystemExit(1)

    if json_output:
        _json_console.print_json(data=_as_dict(found))
        return

    severity = found.severity
    console.print(Panel(
        f"{found.summary}\n\n"
        f"Categoria: [bold]{found.category.label}[/bold]\n"
        f"Severidade: [{severity.color}]{severity.icon} {severity.value}[/{severity.color}]\n"
        f"No relatório: {_WHERE[severity]}",
        title=f"{found.formatted} {found.name}",
        border_style=severity.color,
    ))
