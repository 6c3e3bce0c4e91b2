"""
================================================================================
Comando `logconv detect`: Mostra o Dialeto de um Log
================================================================================

Roda detecção, parsing e montagem dos modelos para um único arquivo,
sem gerar nada. Útil para entender por que um log virou (ou não) teste.

## Uso:

```bash
logconv detect logs/login.log
logconv detect logs/login.log --transactions
logconv --json detect logs/login.log
```
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from ...errors import FileError, format_error, format_errors_for_cli, format_errors_for_json
from ...generator import build_test_models
from ...ingestion import LogContext, RawLogFile, detect, parse_log
from ..registry import register_command

# Console para saída JSON (não silenciável)
_json_console = Console()


@register_command
@click.command("detect")
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--transactions",
    "show_transactions",
    is_flag=True,
    help="Lista as transações HTTP reconstruídas",
)
@click.pass_context
def detect_command(ctx: click.Context, file: str, show_transactions: bool) -> None:
    """Detecta o dialeto de FILE e resume o que seria convertido."""
    console: Console = ctx.obj["console"]
    error_console: Console = ctx.obj["error_console"]
    verbose: bool = ctx.obj["verbose"]
    json_output: bool = ctx.obj.get("json_output", False)

    path = Path(file)
    try:
        raw = RawLogFile.read(path)
    except OSError as e:
        error_console.print(format_error(FileError.unreadable(path.name, str(e)), verbose))
        raise SystemExit(1)

    detected = detect(raw.content)
    context = LogContext(source=raw.name)
    transactions = parse_log(raw.content, detected, context)
    models = build_test_models(transactions, context)

    if json_output:
        output: dict[str, Any] = {
            "file": raw.name,
            "format": detected.format.value,
            "confidence": detected.confidence,
            "matched": list(detected.matched),
            "transactions": len(transactions),
            "partial_transactions": sum(1 for txn in transactions if txn.is_partial),
            "test_cases": [model.display_name for model in models],
            "issues": format_errors_for_json(context.issues),
        }
        if show_transactions:
            output["details"] = [txn.to_dict() for txn in transactions]
        _json_console.print_json(data=output)
        return

    console.print()
    console.print(Panel(
        f"Formato: [bold]{detected.format.label}[/bold] "
        f"([cyan]{detected.confidence:.0%}[/cyan] das sondas)\n"
        f"Sondas: [dim]{', '.join(detected.matched) or 'nenhuma'}[/dim]\n"
        f"Transações: {len(transactions)} | Casos de teste: {len(models)} | "
        f"Warnings: {len(context.issues)}",
        title=f"🔍 {raw.name}",
        border_style="blue",
    ))

    if show_transactions and transactions:
        table = Table(title="Transações")
        table.add_column("#", justify="right", style="dim")
        table.add_column("Teste", style="cyan", max_width=30)
        table.add_column("Método")
        table.add_column("Caminho", max_width=40)
        table.add_column("Status", justify="center")
        table.add_column("Linha", justify="right", style="dim")

        for index, txn in enumerate(transactions, start=1):
            if txn.response_status is None:
                status = "[yellow]?[/yellow]"
            elif txn.response_status >= 400:
                status = f"[red]{txn.response_status}[/red]"
            else:
                status = f"[green]{txn.response_status}[/green]"
            table.add_row(
                str(index),
                txn.test_name or "-",
                txn.method or "?",
                txn.path or "?",
                status,
                str(txn.line or ""),
            )
        console.print(table)

    if context.issues and (verbose or show_transactions):
        console.print(format_errors_for_cli(context.issues, verbose))
