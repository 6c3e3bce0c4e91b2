"""
================================================================================
Construtor de Modelos de Teste
================================================================================

Agrupa as transações de um log em casos de teste.

## Para todos entenderem:

Cada transação sabe a qual teste pertence (`test_name`). O builder:

1. Agrupa por nome do teste, na ordem da primeira aparição
2. Junta transações sem nome num único "Untitled Test" por arquivo
3. Calcula as tags: primeiro as explícitas (`@smoke`), depois as
   heurísticas (`auth` para login, `negative` para erros...)
4. Calcula a categoria: primeiro recurso do prefixo comum das URLs

Tudo é determinístico: a mesma entrada gera sempre a mesma saída.

## Exemplo:

```
"Login @smoke"  POST /api/v1/auth/login
                GET  /api/v1/auth/me
        ↓
TestCaseModel(name="Login @smoke", display_name="Login",
              tags=("smoke", "auth"), category="auth")
```
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from urllib.parse import urlsplit

from ..ingestion.models import HttpTransaction, LogContext

UNTITLED_TEST = "Untitled Test"
DEFAULT_CATEGORY = "default"


# =============================================================================
# MODELO
# =============================================================================


@dataclass(frozen=True)
class TestCaseModel:
    """
    Um caso de teste reconstruído, pronto para o emissor.

    ## Atributos:

    - `name`: Nome original do teste (chave de agrupamento)
    - `display_name`: Nome sem as tags `@...`
    - `transactions`: Transações na ordem do log
    - `tags`: Explícitas primeiro, depois heurísticas, sem duplicatas
    - `category`: Agrupador derivado das URLs (uma suíte gerada por categoria)
    - `source`: Log de origem
    """
    __test__ = False

    name: str
    display_name: str
    transactions: tuple[HttpTransaction, ...]
    tags: tuple[str, ...]
    category: str
    source: str

    @property
    def partial_count(self) -> int:
        return sum(1 for txn in self.transactions if txn.is_partial)


# =============================================================================
# TAGS
# =============================================================================

_EXPLICIT_TAG = re.compile(r"@([\w-]+)")

HEURISTIC_TAGS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("auth", ("login", "logout", "signin", "sign-in", "auth", "token", "session", "oauth", "password")),
    ("negative", ("invalid", "unauthorized", "forbidden", "not found", "error", "fail", "negative", "reject")),
    ("upload", ("upload", "avatar", "multipart", "attachment")),
)


def display_name_of(name: str) -> str:
    """Remove `@tags` e espaços redundantes do nome."""
    cleaned = " ".join(_EXPLICIT_TAG.sub(" ", name).split())
    return cleaned or name


def derive_tags(name: str, transactions: list[HttpTransaction]) -> tuple[str, ...]:
    """
    Tags do caso de teste: explícitas na ordem de aparição, depois
    heurísticas na ordem de `HEURISTIC_TAGS`.
    """
    tags: list[str] = list(_EXPLICIT_TAG.findall(name))
    for txn in transactions:
        tags.extend(txn.tags)

    haystack = " ".join([name] + [txn.url or "" for txn in transactions]).lower()
    for tag, keywords in HEURISTIC_TAGS:
        if any(keyword in haystack for keyword in keywords):
            tags.append(tag)

    if any(txn.response_status is not None and txn.response_status >= 400 for txn in transactions):
        tags.append("negative")

    return tuple(dict.fromkeys(tags))


# =============================================================================
# CATEGORIA
# =============================================================================

_ID_SEGMENT = re.compile(
    r"^(?:\d+|[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}|[0-9a-f]{24,}|\{[^}]*\}|:[\w-]+|\$\{[^}]*\})$",
    re.IGNORECASE,
)
_PREFIX_SEGMENT = re.compile(r"^(?:api|rest|v\d+(?:\.\d+)?)$", re.IGNORECASE)
_NON_SLUG = re.compile(r"[^a-z0-9]+")


def _path_segments(url: str) -> list[str]:
    parts = urlsplit(url)
    path = parts.path if parts.scheme or parts.netloc else url.split("?", 1)[0].split("#", 1)[0]
    segments = [segment for segment in path.split("/") if segment]
    while segments and _PREFIX_SEGMENT.match(segments[0]):
        segments.pop(0)
    return segments


def derive_category(transactions: list[HttpTransaction]) -> str:
    """
    Primeiro recurso do prefixo comum dos caminhos.

    `api`/`rest`/versões no início e segmentos que parecem IDs são
    ignorados: `/api/v1/auth/login` e `/api/v1/auth/logout` caem ambos
    em "auth". Sem URLs ou sem prefixo comum → "default".
    """
    paths = [_path_segments(txn.url) for txn in transactions if txn.url]
    if not paths:
        return DEFAULT_CATEGORY

    for column in zip(*paths):
        if any(segment != column[0] for segment in column):
            break
        if _ID_SEGMENT.match(column[0]):
            continue
        category = _NON_SLUG.sub("-", column[0].lower()).strip("-")
        if category:
            return category
    return DEFAULT_CATEGORY


# =============================================================================
# BUILD
# =============================================================================


def build_test_models(transactions: list[HttpTransaction], context: LogContext) -> list[TestCaseModel]:
    """
    Agrupa transações em `TestCaseModel`, preservando a ordem do log.

    Nenhuma transação é descartada: as sem nome vão para o grupo
    "Untitled Test" do arquivo.
    """
    groups: dict[str, list[HttpTransaction]] = {}
    for txn in transactions:
        groups.setdefault(txn.test_name or UNTITLED_TEST, []).append(txn)

    return [
        TestCaseModel(
            name=name,
            display_name=display_name_of(name),
            transactions=tuple(group),
            tags=derive_tags(name, group),
            category=derive_category(group),
            source=context.source,
        )
        for name, group in groups.items()
    ]
