"""
================================================================================
Comando `logconv init`: Gera `.logconv/config.yaml`
================================================================================

O arquivo gerado lista cada opção persistível de `ConverterConfig` com o
valor padrão e a descrição do próprio campo como comentário. Assim o
arquivo acompanha o modelo: um campo novo em `config.py` aparece aqui
sem edição manual.

`force` e `dry_run` ficam de fora porque valem para uma execução, não
para o projeto.

## Uso:

```bash
logconv init                  # diretório atual
logconv init ./meu-projeto
logconv init --force          # substitui o arquivo existente
```
"""

from __future__ import annotations

from pathlib import Path

import click
import yaml
from rich.console import Console
from rich.syntax import Syntax

from ...config import ConverterConfig
from ..registry import register_command
from ..utils import CONFIG_DIR, CONFIG_FILE

_RUN_ONLY_FIELDS = {"force", "dry_run"}

_HEADER = """\
# logconv: configuração do projeto
#
# Lida por `logconv convert` a partir do diretório atual (ou de um pai).
# Opções do CLI têm prioridade; variáveis LOGCONV_* valem para chaves
# ausentes aqui.
"""


def render_config_file() -> str:
    """YAML comentado com os padrões de `ConverterConfig`."""
    defaults = ConverterConfig()
    blocks = [_HEADER]
    for name, field in ConverterConfig.model_fields.items():
        if name in _RUN_ONLY_FIELDS:
            continue
        value = getattr(defaults, name)
        comment = f"# {field.description}\n" if field.description else ""
        if value is None:
            # Sem padrão: fica comentado para não sobrepor a detecção
            blocks.append(f"{comment}# {name}: \n")
            continue
        body = yaml.safe_dump({name: value}, default_flow_style=False, allow_unicode=True, sort_keys=False)
        blocks.append(comment + body)
    return "\n".join(blocks)


@register_command
@click.command("init")
@click.argument("directory", default=".", type=click.Path(file_okay=False))
@click.option("--force", "-f", is_flag=True, help="Substitui um config.yaml já existente")
@click.pass_context
def init_command(ctx: click.Context, directory: str, force: bool) -> None:
    """Gera DIRECTORY/.logconv/config.yaml com os valores padrão."""
    console: Console = ctx.obj["console"]
    error_console: Console = ctx.obj["error_console"]
    config_file = Path(directory).resolve() / CONFIG_DIR / CONFIG_FILE

    if config_file.exists() and not force:
        error_console.print("[yellow]⚠️  Configuração já existe; use --force para substituir:[/yellow]")
        error_console.print(f"   {config_file}", soft_wrap=True)
        raise SystemExit(1)

    content = render_config_file()
    try:
        config_file.parent.mkdir(parents=True, exist_ok=True)
        config_file.write_text(content, encoding="utf-8")
    except OSError as exc:
        error_console.print(f"[red]❌ Não foi possível escrever {config_file}: {exc}[/red]")
        raise SystemExit(1)

    console.print(f"[green]✅ {config_file}[/green]")
    if ctx.obj.get("verbose"):
        console.print(Syntax(content, "yaml", theme="ansi_dark"))
    console.print(
        "Próximo passo: [bold]logconv detect <log>[/bold] e depois "
        "[bold]logconv convert <entrada> <saída>[/bold]"
    )
