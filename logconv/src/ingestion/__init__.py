"""
================================================================================
Ingestão de Logs: detecção e parsing por dialeto
================================================================================

## Uso:

    >>> from src.ingestion import detect, parse_log, LogContext
    >>> context = LogContext("login.log")
    >>> detected = detect(content)
    >>> transactions = parse_log(content, detected, context)
"""

from __future__ import annotations

from typing import Callable

from .detector import SIGNATURES, Probe, Signature, detect, forced
from .fields import decode_blob, decode_headers, parse_header_lines
from .generic import parse_generic
from .legacy import parse_legacy
from .models import (
    DetectedFormat,
    FieldState,
    FieldValue,
    HttpTransaction,
    LogContext,
    LogFormat,
    RawLogFile,
)
from .native import parse_native

ParserFn = Callable[[str, LogContext], "list[HttpTransaction]"]

# Um parser por dialeto; adicionar um dialeto é adicionar uma entrada aqui
# e uma assinatura em detector.SIGNATURES.
PARSERS: dict[LogFormat, ParserFn] = {
    LogFormat.NATIVE: parse_native,
    LogFormat.LEGACY: parse_legacy,
    LogFormat.GENERIC: parse_generic,
}


def parse_log(content: str, detected: DetectedFormat, context: LogContext) -> list[HttpTransaction]:
    """Despacha para o parser do dialeto detectado."""
    return PARSERS[detected.format](content, context)


__all__ = [
    # detector
    "SIGNATURES",
    "Probe",
    "Signature",
    "detect",
    "forced",
    # fields
    "decode_blob",
    "decode_headers",
    "parse_header_lines",
    # models
    "DetectedFormat",
    "FieldState",
    "FieldValue",
    "HttpTransaction",
    "LogContext",
    "LogFormat",
    "RawLogFile",
    # parsers
    "PARSERS",
    "parse_log",
    "parse_native",
    "parse_legacy",
    "parse_generic",
]
