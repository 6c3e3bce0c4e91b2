"""
================================================================================
Configuração do Workspace e Helpers do CLI
================================================================================

A configuração efetiva de uma execução vem de quatro camadas:

```
defaults ← LOGCONV_* ← .logconv/config.yaml ← opções do CLI
```

`.logconv/config.yaml` é procurado a partir do diretório atual, subindo
até a raiz (como `.git`).
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml

from ..config import ConverterConfig

logger = logging.getLogger(__name__)

CONFIG_DIR = ".logconv"
CONFIG_FILE = "config.yaml"


def find_config_file(start: Path | None = None) -> Path | None:
    """Procura `.logconv/config.yaml` subindo na hierarquia de diretórios."""
    current = (start or Path.cwd()).resolve()
    while True:
        candidate = current / CONFIG_DIR / CONFIG_FILE
        if candidate.is_file():
            return candidate
        if current == current.parent:
            return None
        current = current.parent


def load_config(start: Path | None = None) -> dict[str, Any]:
    """
    Valores de `.logconv/config.yaml` (vazio se não houver arquivo).

    Chaves desconhecidas geram warning e são descartadas; arquivo
    ilegível ou YAML inválido também geram warning e valem como vazio.
    """
    config_path = find_config_file(start)
    if config_path is None:
        return {}

    try:
        loaded = yaml.safe_load(config_path.read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError) as e:
        logger.warning("⚠️  Ignorando %s: %s", config_path, e)
        return {}

    if not isinstance(loaded, dict):
        return {}

    known = set(ConverterConfig.model_fields)
    unknown = sorted(str(key) for key in loaded if key not in known)
    if unknown:
        logger.warning("⚠️  Chaves desconhecidas em %s: %s", config_path, ", ".join(unknown))
    return {key: value for key, value in loaded.items() if key in known and value is not None}


def resolve_config(overrides: dict[str, Any], start: Path | None = None) -> ConverterConfig:
    """
    Monta a configuração final.

    ## Prioridade:
    1. Opções do CLI (`overrides`, valores None ignorados)
    2. `.logconv/config.yaml`
    3. Variáveis `LOGCONV_*`
    4. Defaults
    """
    return ConverterConfig.from_env().merged(load_config(start)).merged(overrides)


def format_duration(ms: int) -> str:
    """`50ms`, `1.5s`, `1m 5s`."""
    if ms < 1000:
        return f"{ms}ms"
    if ms < 60_000:
        return f"{ms / 1000:.1f}s"
    minutes, seconds = divmod(ms // 1000, 60)
    return f"{minutes}m {seconds}s"
