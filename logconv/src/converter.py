"""
================================================================================
ORQUESTRADOR DA CONVERSÃO
================================================================================

Liga as etapas do pipeline e acumula o relatório.

## Para todos entenderem:

```
input_dir ──> descobre logs (.log/.txt/.json, recursivo, ordenado)
                 │
                 ├─ para cada arquivo (isolado):
                 │    ler → detectar → parsear → montar modelos
                 │
                 ├─ coordenador junta os modelos de todos os arquivos
                 │  e emite uma suíte por categoria
                 │
                 └─> scaffolding (configs, README) + logconv-report.json
```

## Tratamento de erros:

- Problema dentro de um log → warning no relatório, conversão continua
- Arquivo ilegível ou falha catastrófica → erro daquele arquivo, os
  demais continuam (e nenhum teste dele entra nas suítes)
- Entrada inexistente ou saída não gravável/ocupada →
  `ConversionAbortedError` (a execução inteira falha)

## Concorrência:

Com `workers > 1`, a conversão de cada arquivo roda num pool de threads.
Cada arquivo tem seu próprio `LogContext` e seus próprios modelos; o
agrupamento por categoria, a escrita e o relatório são feitos só pelo
coordenador, na ordem de entrada.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Iterator

from .config import ConverterConfig
from .errors import ConfigurationError, ConversionAbortedError, FileError, ParseWarning
from .generator import (
    BaseEmitter,
    OutputWriter,
    SuiteSummary,
    TestCaseModel,
    build_test_models,
    get_emitter,
)
from .generator.render import origin_of
from .ingestion import LogContext, LogFormat, RawLogFile, detect, forced, parse_log
from .report import ConversionReport, FileReport

logger = logging.getLogger(__name__)


# =============================================================================
# DESCOBERTA DE ARQUIVOS
# =============================================================================


def discover_log_files(
    input_dir: Path,
    extensions: list[str],
    recursive: bool = True,
    exclude: Path | None = None,
) -> list[Path]:
    """
    Arquivos candidatos em ordem determinística.

    `exclude` é ignorado por inteiro (usado quando a saída fica dentro
    da entrada).
    """
    pattern = "**/*" if recursive else "*"
    excluded = exclude.resolve() if exclude else None
    found: list[Path] = []
    for path in input_dir.glob(pattern):
        if not path.is_file() or path.suffix.lower() not in extensions:
            continue
        if excluded and (excluded == path.resolve().parent or excluded in path.resolve().parents):
            continue
        found.append(path)
    return sorted(found, key=lambda p: p.relative_to(input_dir).as_posix())


# =============================================================================
# CONVERSÃO DE UM ARQUIVO
# =============================================================================


@dataclass
class FileResult:
    """Tudo que um arquivo produz; não toca em nenhum estado compartilhado."""
    report: FileReport
    models: list[TestCaseModel] = field(default_factory=lambda: [])
    origins: list[str] = field(default_factory=lambda: [])


def convert_file(
    path: Path,
    root: Path,
    config: ConverterConfig,
    emitter: BaseEmitter,
) -> FileResult:
    """
    Converte um único log em modelos de teste.

    Nunca lança exceção: falhas viram `FileReport.error`.
    """
    name = path.relative_to(root).as_posix()
    result = FileResult(report=FileReport(file=name))

    try:
        raw = RawLogFile.read(path, root)
    except OSError as e:
        logger.warning("❌ %s: %s", name, e)
        result.report.error = FileError.unreadable(name, str(e)).to_dict()
        return result

    if config.format_override:
        detected = forced(LogFormat(config.format_override))
    else:
        detected = detect(raw.content)
    result.report.format = detected.format.value
    result.report.confidence = detected.confidence
    result.report.forced = detected.forced

    context = LogContext(source=name)
    try:
        transactions = parse_log(raw.content, detected, context)
        if not transactions:
            context.report(ParseWarning.no_http_content(name))
        models = build_test_models(transactions, context)
        # Renderiza só este arquivo: uma falha de emissão fica com ele
        emitter.emit(models)
    except Exception as e:  # noqa: BLE001 - isolamento por arquivo
        logger.debug("Falha ao converter %s", name, exc_info=True)
        result.report.error = FileError.parse_failed(name, f"{type(e).__name__}: {e}").to_dict()
        return result

    result.report.transactions = len(transactions)
    result.report.partial_transactions = sum(1 for txn in transactions if txn.is_partial)
    result.report.test_cases = len(models)
    result.report.record_issues(context.issues)
    result.models = models
    result.origins = [origin for txn in transactions if (origin := origin_of(txn.url))]

    logger.debug(
        "%s: %s (%.0f%%), %d transação(ões), %d teste(s)",
        name,
        detected.format.value,
        detected.confidence * 100,
        len(transactions),
        len(models),
    )
    return result


# =============================================================================
# EXECUÇÃO COMPLETA
# =============================================================================


def _results(
    paths: list[Path],
    root: Path,
    config: ConverterConfig,
    emitter: BaseEmitter,
) -> Iterator[FileResult]:
    if config.workers <= 1 or len(paths) <= 1:
        for path in paths:
            yield convert_file(path, root, config, emitter)
        return

    with ThreadPoolExecutor(max_workers=config.workers) as executor:
        # map() devolve na ordem de entrada
        yield from executor.map(lambda p: convert_file(p, root, config, emitter), paths)


def convert(
    input_dir: Path | str,
    output_dir: Path | str,
    config: ConverterConfig | None = None,
    on_file: Callable[[FileReport], None] | None = None,
) -> ConversionReport:
    """
    Converte todos os logs de `input_dir` em testes sob `output_dir`.

    ## Parâmetros:

    - `input_dir`: Diretório com os logs
    - `output_dir`: Diretório da suíte gerada
    - `config`: Opções (default: `ConverterConfig()`)
    - `on_file`: Callback chamado pelo coordenador após cada arquivo
      (antes da emissão, então `generated_files` ainda está vazio)

    ## Raises:

    - `ConversionAbortedError`: entrada inexistente, saída ocupada
      (sem `force`) ou saída não gravável
    """
    config = config or ConverterConfig()
    input_path = Path(input_dir)
    output_path = Path(output_dir)

    if not input_path.is_dir():
        raise ConversionAbortedError(ConfigurationError.input_not_found(str(input_path)))

    emitter = get_emitter(config.target, config)
    report = ConversionReport(
        input_dir=str(input_path),
        output_dir=str(output_path),
        target=config.target,
        dry_run=config.dry_run,
    )

    paths = discover_log_files(input_path, config.extensions, config.recursive, exclude=output_path)
    if not paths:
        error = ConfigurationError.no_input_files(str(input_path), config.extensions)
        report.errors.append({"file": str(input_path), "code": error.code.formatted, "message": error.message})
        logger.warning("%s", error)
        return report

    writer = OutputWriter(output_path, force=config.force, dry_run=config.dry_run)
    writer.prepare()

    models: list[TestCaseModel] = []
    origins: list[str] = []
    per_file: list[tuple[FileReport, list[TestCaseModel]]] = []

    for result in _results(paths, input_path, config, emitter):
        report.add(result.report)
        models.extend(result.models)
        origins.extend(result.origins)
        per_file.append((result.report, result.models))
        if on_file:
            on_file(result.report)

    if report.files_converted:
        report.generated_files.extend(writer.write(emitter.emit(models)))
        for file_report, file_models in per_file:
            categories = dict.fromkeys(model.category for model in file_models)
            file_report.generated_files = [emitter.suite_path(category) for category in categories]

        unique_origins = sorted(set(origins))
        summary = SuiteSummary(
            project_name=config.project_name,
            environments=config.environments,
            tags=list(dict.fromkeys(tag for model in models for tag in model.tags)),
            categories=list(dict.fromkeys(model.category for model in models)),
            test_files=list(report.generated_files),
            base_url=unique_origins[0] if len(unique_origins) == 1 else None,
        )
        report.generated_files.extend(writer.write(emitter.scaffold(summary)))

    writer.finalize(report.to_json())
    logger.info("Conversão concluída: %s", report.summary())
    return report
