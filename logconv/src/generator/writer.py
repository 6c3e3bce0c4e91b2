"""
================================================================================
Escrita da Saída
================================================================================

Cria a árvore de saída e protege execuções anteriores.

## Regras:

- Saída com manifesto (`.logconv-manifest.json`) ou `tests/` não vazio
  é uma execução anterior: sem `force` → `OutputConflictError` (E3001)
- Com `force`, o conteúdo gerado antes é apagado e substituído inteiro
  (nunca mesclado)
- `dry_run` não toca no disco
- Cada caminho é escrito uma única vez por execução
- Qualquer falha de criação/escrita → E3002 (falha da execução inteira)
"""

from __future__ import annotations

import json
import logging
import os
import shutil
from pathlib import Path

from ..errors import ConfigurationError, ConversionAbortedError, OutputConflictError
from .base import SourceFile

logger = logging.getLogger(__name__)

MANIFEST_NAME = ".logconv-manifest.json"
REPORT_NAME = "logconv-report.json"


class OutputWriter:
    """Escreve `SourceFile`s sob `output_dir`."""

    def __init__(self, output_dir: Path, force: bool = False, dry_run: bool = False) -> None:
        self.output_dir = output_dir
        self.force = force
        self.dry_run = dry_run
        self.written: list[str] = []
        self._claimed: set[str] = set()

    @property
    def manifest_path(self) -> Path:
        return self.output_dir / MANIFEST_NAME

    def has_previous_run(self) -> bool:
        if self.manifest_path.exists():
            return True
        tests_dir = self.output_dir / "tests"
        return tests_dir.is_dir() and any(tests_dir.iterdir())

    def _fail(self, reason: str) -> ConversionAbortedError:
        return ConversionAbortedError(ConfigurationError.output_not_writable(str(self.output_dir), reason))

    def prepare(self) -> None:
        """Valida a saída e limpa a execução anterior quando `force`."""
        if self.dry_run:
            return

        if self.output_dir.exists() and not self.output_dir.is_dir():
            raise self._fail("o caminho existe e não é um diretório")

        if self.has_previous_run():
            if not self.force:
                raise OutputConflictError(ConfigurationError.output_conflict(str(self.output_dir)))
            self._remove_previous()

        try:
            self.output_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise self._fail(str(e)) from e

        if not os.access(self.output_dir, os.W_OK):
            raise self._fail("sem permissão de escrita")

    def _remove_previous(self) -> None:
        previous: list[str] = []
        if self.manifest_path.exists():
            try:
                previous = json.loads(self.manifest_path.read_text(encoding="utf-8")).get("files", [])
            except (OSError, ValueError) as e:
                logger.warning("Manifesto anterior ilegível (%s); removendo apenas tests/", e)

        try:
            for relative in previous:
                target = self.output_dir / relative
                if target.is_file():
                    target.unlink()
            tests_dir = self.output_dir / "tests"
            if tests_dir.exists():
                shutil.rmtree(tests_dir)
            for name in (MANIFEST_NAME, REPORT_NAME):
                (self.output_dir / name).unlink(missing_ok=True)
        except OSError as e:
            raise self._fail(f"não foi possível remover a saída anterior: {e}") from e

        logger.info("Saída anterior removida (--force): %s", self.output_dir)

    def write(self, files: list[SourceFile]) -> list[str]:
        """
        Escreve os arquivos e devolve os caminhos relativos escritos.

        Um caminho já escrito nesta execução nunca é sobrescrito: a
        repetição vira E3002 antes de tocar no disco.
        """
        paths = [f.path for f in files]
        for path in paths:
            if path in self._claimed:
                raise self._fail(f"{path} gerado mais de uma vez na mesma execução")
            self._claimed.add(path)
        if self.dry_run:
            return paths

        for source_file in files:
            target = self.output_dir / source_file.path
            try:
                target.parent.mkdir(parents=True, exist_ok=True)
                target.write_text(source_file.content, encoding="utf-8", newline="\n")
            except OSError as e:
                raise self._fail(str(e)) from e
            logger.debug("📄 %s", source_file.path)
        self.written.extend(paths)
        return paths

    def finalize(self, report_json: str) -> None:
        """Escreve o relatório e o manifesto (últimos arquivos da execução)."""
        if self.dry_run:
            return
        manifest = {"files": sorted(self.written + [REPORT_NAME])}
        try:
            (self.output_dir / REPORT_NAME).write_text(report_json + "\n", encoding="utf-8", newline="\n")
            self.manifest_path.write_text(
                json.dumps(manifest, indent=2, ensure_ascii=False) + "\n", encoding="utf-8", newline="\n"
            )
        except OSError as e:
            raise self._fail(str(e)) from e
