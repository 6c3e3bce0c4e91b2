"""
================================================================================
Registro dos Subcomandos
================================================================================

Cada módulo em `commands/` marca seu comando com `@register_command`.
O grupo principal importa os módulos listados em `COMMAND_MODULES` e
anexa o que foi registrado:

```
load_commands() ──import──> commands/convert_cmd.py ──@register_command──┐
                            commands/detect_cmd.py  ──@register_command──┤
                            ...                                          │
register_all_commands(cli) <────────────── _registered_commands ─────────┘
```

Nomes são únicos: registrar outro comando com um nome já usado é erro
de programação e levanta `ValueError`.
"""

from __future__ import annotations

from importlib import import_module
from typing import TypeVar

import click

COMMAND_MODULES: tuple[str, ...] = (
    "convert_cmd",
    "detect_cmd",
    "explain_cmd",
    "init_cmd",
)

CommandT = TypeVar("CommandT", bound=click.Command)

# Ordem de registro = ordem de anexação ao grupo
_registered_commands: dict[str, click.Command] = {}


def register_command(command: CommandT) -> CommandT:
    """Decorator: guarda `command` para o grupo principal."""
    name = command.name or ""
    existing = _registered_commands.get(name)
    if existing is not None and existing is not command:
        raise ValueError(f"Comando '{name}' já registrado")
    _registered_commands[name] = command
    return command


def get_registered_commands() -> list[click.Command]:
    return list(_registered_commands.values())


def clear_registry() -> None:
    _registered_commands.clear()


def register_all_commands(group: click.Group) -> None:
    """Anexa ao grupo os comandos registrados que ele ainda não tem."""
    for name, command in _registered_commands.items():
        if name and name not in group.commands:
            group.add_command(command)


def load_commands() -> None:
    """Importa cada módulo de `COMMAND_MODULES`; o import registra o comando."""
    package = __name__.rsplit(".", 1)[0] + ".commands"
    for module in COMMAND_MODULES:
        import_module(f"{package}.{module}")
