"""
================================================================================
Relatório de Conversão
================================================================================

Resumo de uma execução: o que foi lido, detectado, gerado e o que deu
errado. É acumulado pelo orquestrador numa única thread, mesmo quando
os arquivos são processados em paralelo.

## Para todos entenderem:

```
FileReport (um por log) ──add()──> ConversionReport ──> logconv-report.json
                                                    └─> tabela no terminal
```

O JSON não contém data/hora nem durações: duas execuções iguais geram
o mesmo relatório.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from .errors import Severity, StructuredError


class FileReport(BaseModel):
    """Resultado da conversão de um único arquivo."""

    file: str
    format: str | None = None
    confidence: float = 0.0
    forced: bool = False
    transactions: int = 0
    partial_transactions: int = 0
    test_cases: int = 0
    warnings: list[dict[str, Any]] = Field(default_factory=list)
    notes: list[dict[str, Any]] = Field(default_factory=list)
    error: dict[str, Any] | None = None
    generated_files: list[str] = Field(default_factory=list)

    @property
    def success(self) -> bool:
        return self.error is None

    def record_issues(self, issues: list[StructuredError]) -> None:
        """Separa warnings de avisos informativos."""
        for issue in issues:
            if issue.effective_severity == Severity.WARNING:
                self.warnings.append(issue.to_dict())
            else:
                self.notes.append(issue.to_dict())


class ConversionReport(BaseModel):
    """
    Relatório agregado da execução.

    ## Exemplo:

        >>> report = ConversionReport(input_dir="logs", output_dir="out", target="playwright")
        >>> report.add(FileReport(file="a.log", format="native", test_cases=2))
        >>> report.files_converted
        1
    """

    input_dir: str
    output_dir: str
    target: str
    dry_run: bool = False
    files_scanned: int = 0
    files_converted: int = 0
    files_failed: int = 0
    files_by_format: dict[str, int] = Field(
        default_factory=lambda: {"native": 0, "legacy": 0, "generic": 0}
    )
    test_cases: int = 0
    transactions: int = 0
    partial_transactions: int = 0
    warnings: int = 0
    errors: list[dict[str, Any]] = Field(default_factory=list)
    generated_files: list[str] = Field(default_factory=list)
    files: list[FileReport] = Field(default_factory=list)

    def add(self, file_report: FileReport) -> None:
        """Acumula o resultado de um arquivo (chamado só pelo coordenador)."""
        self.files.append(file_report)
        self.files_scanned += 1
        if file_report.format:
            self.files_by_format[file_report.format] = self.files_by_format.get(file_report.format, 0) + 1

        if file_report.error is not None:
            self.files_failed += 1
            self.errors.append({
                "file": file_report.file,
                "code": file_report.error.get("code"),
                "message": file_report.error.get("message"),
            })
            return

        self.files_converted += 1
        self.test_cases += file_report.test_cases
        self.transactions += file_report.transactions
        self.partial_transactions += file_report.partial_transactions
        self.warnings += len(file_report.warnings)

    @property
    def success(self) -> bool:
        """A execução conta como sucesso se ao menos um arquivo foi convertido."""
        return self.files_converted > 0

    def to_json(self) -> str:
        return self.model_dump_json(indent=2)

    def summary(self) -> str:
        """Resumo em uma linha para logs."""
        return (
            f"{self.files_converted}/{self.files_scanned} arquivo(s), "
            f"{self.test_cases} teste(s), {self.transactions} transação(ões) "
            f"({self.partial_transactions} parcial(is)), {self.warnings} warning(s), "
            f"{self.files_failed} erro(s)"
        )
