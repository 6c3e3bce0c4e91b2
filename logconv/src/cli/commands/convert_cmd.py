"""
================================================================================
Comando `logconv convert`: Converte Logs em Testes
================================================================================

Lê todos os logs de um diretório e gera uma suíte de testes de API.

## Uso:

```bash
# Playwright (default)
logconv convert ./logs ./generated

# pytest, 4 arquivos em paralelo
logconv convert ./logs ./generated --target pytest --workers 4

# Força o dialeto e substitui a saída anterior
logconv convert ./logs ./generated --format legacy --force

# Só mostra o que seria gerado
logconv convert ./logs ./generated --dry-run

# Relatório JSON para CI
logconv --json convert ./logs ./generated
```

## Código de saída:

- `0`: ao menos um arquivo convertido (mesmo com warnings)
- `1`: nenhum arquivo convertido, ou falha da execução inteira
"""

from __future__ import annotations

import logging
import time

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from ...converter import convert
from ...errors import ConfigurationError, ConversionAbortedError, format_error
from ...ingestion import LogFormat
from ...report import ConversionReport, FileReport
from ..registry import register_command
from ..utils import format_duration, resolve_config

logger = logging.getLogger(__name__)

# Console para saída JSON (não silenciável)
_json_console = Console()


def _file_line(file_report: FileReport) -> str:
    """Linha de progresso de um arquivo."""
    if file_report.error:
        return f"  [red]❌ {file_report.file}: {file_report.error.get('message')}[/red]"
    detail = (
        f"{file_report.format} ({file_report.confidence:.0%}), "
        f"{file_report.test_cases} teste(s), {file_report.transactions} transação(ões)"
    )
    if file_report.warnings:
        return f"  [yellow]⚠️  {file_report.file}: {detail}, {len(file_report.warnings)} warning(s)[/yellow]"
    return f"  [green]✅ {file_report.file}:[/green] [dim]{detail}[/dim]"


def _summary_table(report: ConversionReport) -> Table:
    table = Table(title="Resumo da Conversão")
    table.add_column("Métrica", style="cyan")
    table.add_column("Valor", justify="right")

    table.add_row("Arquivos lidos", str(report.files_scanned))
    table.add_row("Convertidos", f"[green]{report.files_converted}[/green]")
    table.add_row("Com erro", f"[red]{report.files_failed}[/red]" if report.files_failed else "0")
    for name, count in report.files_by_format.items():
        table.add_row(f"  formato {name}", str(count))
    table.add_row("Casos de teste", str(report.test_cases))
    table.add_row("Transações", str(report.transactions))
    table.add_row("  parciais", str(report.partial_transactions))
    table.add_row("Warnings", f"[yellow]{report.warnings}[/yellow]" if report.warnings else "0")
    table.add_row("Arquivos gerados", str(len(report.generated_files)))
    return table


@register_command
@click.command("convert")
@click.argument("input_dir", type=click.Path(file_okay=False))
@click.argument("output_dir", type=click.Path(file_okay=False))
@click.option(
    "--target", "-t",
    type=click.Choice(["playwright", "pytest"]),
    default=None,
    help="Framework dos testes gerados (default: playwright)",
)
@click.option(
    "--format", "format_name",
    default=None,
    help="Força o dialeto: native, legacy ou generic (default: detecção)",
)
@click.option(
    "--env", "-e", "environments",
    multiple=True,
    help="Ambiente com stub de configuração (repetível)",
)
@click.option(
    "--project-name",
    default=None,
    help="Nome do projeto gerado",
)
@click.option(
    "--workers", "-w",
    type=click.IntRange(1, 32),
    default=None,
    help="Arquivos processados em paralelo (default: 1)",
)
@click.option(
    "--force", "-f",
    is_flag=True,
    help="Substitui a saída de uma execução anterior",
)
@click.option(
    "--dry-run",
    is_flag=True,
    help="Mostra o que seria gerado sem escrever nada",
)
@click.option(
    "--redact",
    is_flag=True,
    help="Mascara tokens e senhas no código gerado",
)
@click.pass_context
def convert_command(
    ctx: click.Context,
    input_dir: str,
    output_dir: str,
    target: str | None,
    format_name: str | None,
    environments: tuple[str, ...],
    project_name: str | None,
    workers: int | None,
    force: bool,
    dry_run: bool,
    redact: bool,
) -> None:
    """
    Converte os logs de INPUT_DIR em testes sob OUTPUT_DIR.

    Cada log é detectado, parseado e convertido isoladamente: um
    arquivo com problema não impede a conversão dos demais.
    """
    console: Console = ctx.obj["console"]
    error_console: Console = ctx.obj["error_console"]
    verbose: bool = ctx.obj["verbose"]
    quiet: bool = ctx.obj.get("quiet", False)
    json_output: bool = ctx.obj.get("json_output", False)

    if format_name is not None and format_name.lower() not in [f.value for f in LogFormat]:
        error = ConfigurationError.unknown_format(format_name, [f.value for f in LogFormat])
        error_console.print(format_error(error, verbose))
        raise SystemExit(1)

    overrides = {
        "target": target,
        "format_override": format_name.lower() if format_name else None,
        "environments": list(environments) or None,
        "project_name": project_name,
        "workers": workers,
        # Flags só sobrescrevem quando passadas
        "force": force or None,
        "dry_run": dry_run or None,
        "redact_secrets": redact or None,
    }

    started = time.perf_counter()
    try:
        config = resolve_config(overrides)

        console.print()
        console.print(Panel(
            f"Entrada: [cyan]{input_dir}[/cyan]\n"
            f"Saída: [cyan]{output_dir}[/cyan]\n"
            f"Target: [bold]{config.target}[/bold] | "
            f"Formato: {config.format_override or 'detecção automática'} | "
            f"Workers: {config.workers}"
            + (" | [yellow]dry-run[/yellow]" if config.dry_run else ""),
            title="🔁 Convertendo logs",
            border_style="blue",
        ))

        report = convert(
            input_dir,
            output_dir,
            config,
            on_file=lambda file_report: console.print(_file_line(file_report)),
        )
    except ConversionAbortedError as e:
        logger.debug("Execução abortada", exc_info=verbose)
        if json_output:
            _json_console.print_json(data={"success": False, "error": e.error.to_dict()})
        else:
            error_console.print(format_error(e.error, verbose))
        raise SystemExit(1)

    elapsed_ms = int((time.perf_counter() - started) * 1000)

    if json_output:
        _json_console.print_json(report.to_json())
        raise SystemExit(0 if report.success else 1)

    if verbose:
        for file_report in report.files:
            for warning in file_report.warnings:
                console.print(f"  [dim]• {warning['code']}: {warning['message']} ({warning.get('path', file_report.file)})[/dim]")

    if quiet:
        # Tabela e painéis estão mudos; o resumo sai no stderr
        error_console.print(f"logconv: {report.summary()}", highlight=False, soft_wrap=True)

    console.print()
    console.print(_summary_table(report))
    console.print()

    if not report.success:
        reasons = [f"{err['code']}: {err['message']}" for err in report.errors] or ["nenhum arquivo convertido"]
        error_console.print(Panel(
            "[red]❌ Nenhum arquivo convertido[/red]\n" + "\n".join(f"[dim]• {r}[/dim]" for r in reasons),
            border_style="red",
        ))
        raise SystemExit(1)

    destination = "nada escrito (dry-run)" if report.dry_run else f"testes em [cyan]{output_dir}[/cyan]"
    if report.files_failed or report.warnings:
        console.print(Panel(
            f"[yellow]Conversão concluída com {report.warnings} warning(s) e "
            f"{report.files_failed} arquivo(s) com erro em {format_duration(elapsed_ms)}[/yellow]\n"
            f"{destination}",
            border_style="yellow",
        ))
    else:
        console.print(Panel(
            f"[green]✅ {report.test_cases} teste(s) gerado(s) em {format_duration(elapsed_ms)}[/green]\n"
            f"{destination}",
            border_style="green",
        ))
