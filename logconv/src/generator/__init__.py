"""
================================================================================
Geração de Testes: builder, emissores e escrita
================================================================================

## Uso:

    >>> from src.generator import build_test_models, get_emitter
    >>> models = build_test_models(transactions, context)
    >>> emitter = get_emitter("playwright", config)
    >>> files = emitter.emit(models)   # uma suíte por categoria
"""

from __future__ import annotations

from ..config import ConverterConfig
from .base import BaseEmitter, EmitTarget, SourceFile, SuiteSummary
from .builder import (
    DEFAULT_CATEGORY,
    UNTITLED_TEST,
    TestCaseModel,
    build_test_models,
    derive_category,
    derive_tags,
)
from .playwright import PlaywrightEmitter
from .pytest_suite import PytestEmitter
from .writer import MANIFEST_NAME, REPORT_NAME, OutputWriter

EMITTERS: dict[EmitTarget, type[BaseEmitter]] = {
    EmitTarget.PLAYWRIGHT: PlaywrightEmitter,
    EmitTarget.PYTEST: PytestEmitter,
}


def get_emitter(target: str | EmitTarget, config: ConverterConfig) -> BaseEmitter:
    """
    Factory de emissores.

    ## Exemplo:

        >>> get_emitter("pytest", ConverterConfig()).name
        'pytest'
    """
    try:
        emitter_cls = EMITTERS[EmitTarget(target)]
    except ValueError:
        valid = ", ".join(t.value for t in EmitTarget)
        raise ValueError(f"Target '{target}' não suportado. Use: {valid}") from None
    return emitter_cls(config)


__all__ = [
    "BaseEmitter",
    "EmitTarget",
    "SourceFile",
    "SuiteSummary",
    "DEFAULT_CATEGORY",
    "UNTITLED_TEST",
    "TestCaseModel",
    "build_test_models",
    "derive_category",
    "derive_tags",
    "PlaywrightEmitter",
    "PytestEmitter",
    "MANIFEST_NAME",
    "REPORT_NAME",
    "OutputWriter",
    "EMITTERS",
    "get_emitter",
]
