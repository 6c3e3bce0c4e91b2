"""
================================================================================
Grupo Principal do CLI `logconv`
================================================================================

```
logconv [-v | -q] [--json]
├── convert INPUT_DIR OUTPUT_DIR   logs → suíte Playwright/pytest
├── detect FILE                    dialeto e transações de um log
├── explain [CODE]                 significado dos códigos E1xxx-E5xxx
└── init [DIRECTORY]               cria .logconv/config.yaml
```

O grupo só prepara o ambiente compartilhado (`ctx.obj`): nível de log,
console de saída e console de erros. Cada subcomando decide o que
mostrar a partir dessas chaves:

| Chave           | Conteúdo                                          |
|-----------------|---------------------------------------------------|
| `verbose`       | `-v`: warnings por arquivo e contexto dos erros   |
| `quiet`         | `-q`: sem banners nem tabelas                     |
| `json_output`   | `--json`: só JSON no stdout                       |
| `console`       | Console para banners e tabelas (mudo com -q/json) |
| `error_console` | Console no stderr, nunca silenciado               |
"""

from __future__ import annotations

import logging

import click
from rich.console import Console
from rich.logging import RichHandler

from .registry import load_commands, register_all_commands

VERSION = "0.1.0"

console = Console()
error_console = Console(stderr=True)
muted_console = Console(quiet=True)


def setup_logging(verbose: bool, quiet: bool) -> None:
    """
    Logs da biblioteca vão para o stderr via Rich.

    Nível padrão WARNING; `-v` liga DEBUG e `-q` deixa só ERROR.
    """
    level = logging.ERROR if quiet else logging.DEBUG if verbose else logging.WARNING
    handler = RichHandler(console=error_console, show_time=False, show_path=False, markup=False)
    logging.basicConfig(level=level, format="%(message)s", handlers=[handler], force=True)


@click.group()
@click.version_option(version=VERSION, prog_name="logconv")
@click.option("--verbose", "-v", is_flag=True, help="Detalha detecção, warnings e contexto dos erros")
@click.option("--quiet", "-q", is_flag=True, help="Sem banners nem tabelas; só erros")
@click.option("--json", "json_output", is_flag=True, help="Imprime só JSON no stdout (CI/CD)")
@click.pass_context
def cli(ctx: click.Context, verbose: bool, quiet: bool, json_output: bool) -> None:
    """
    🔁 logconv: transforma logs de testes de API em suítes automatizadas

    Reconstrói as trocas HTTP registradas nos logs (formato nativo,
    Supertest/Mocha legado ou linhas genéricas) e gera testes Playwright
    ou pytest.

    \b
    Exemplos:
      logconv init
      logconv detect logs/login.log --transactions
      logconv convert ./logs ./generated
      logconv convert ./logs ./generated -t pytest -w 4
      logconv --json convert ./logs ./generated > report.json
      logconv explain E1004
    """
    setup_logging(verbose, quiet)

    ctx.ensure_object(dict)
    ctx.obj.update(
        verbose=verbose,
        quiet=quiet,
        json_output=json_output,
        console=muted_console if (json_output or quiet) else console,
        error_console=error_console,
    )


load_commands()
register_all_commands(cli)


def main() -> None:
    """Entry point do script `logconv`."""
    cli()


if __name__ == "__main__":
    main()
