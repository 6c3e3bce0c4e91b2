"""
================================================================================
Emissor pytest (Python)
================================================================================

Gera um módulo `tests/test_<categoria>.py` por categoria, com os testes
de todos os logs daquela categoria. Os testes usam uma fixture
`api_client` com a interface de uma sessão HTTP (`request(method, url,
headers=, json=, data=)` devolvendo objeto com `status_code` e
`json()`). A fixture é definida no `conftest.py` gerado junto com a
suíte.

```python
@pytest.mark.smoke
@pytest.mark.auth
def test_login(api_client):
    "Login (login.log)"
    # Passo 1: Submit credentials
    response = api_client.request(
        "POST",
        "/auth/login",
        json={"username": "ana"},
    )
    assert response.status_code == 200
    body = response.json()
    assert "token" in body
```
"""

from __future__ import annotations

import keyword

from ..ingestion.models import HttpTransaction
from .base import BaseEmitter, EmitTarget, SourceFile, SuiteSummary
from .builder import TestCaseModel
from .render import (
    emitted_headers,
    identifier,
    py_literal,
    py_string,
    request_target,
    response_keys,
    step_title,
)


# Markers com significado próprio no pytest: uma tag com esses nomes
# mudaria a execução do teste gerado
RESERVED_MARKERS = frozenset({"parametrize", "skip", "skipif", "xfail", "usefixtures", "filterwarnings"})


def marker_name(tag: str) -> str:
    """
    Tag livre → nome de marker pytest válido.

    >>> marker_name("ib-login"), marker_name("import"), marker_name("skip")
    ('ib_login', 'import_', 'skip_')
    """
    name = identifier(tag)
    if keyword.iskeyword(name) or name in RESERVED_MARKERS:
        return f"{name}_"
    return name


def module_name(category: str) -> str:
    """`user-profile` → `test_user_profile.py`; categorias só têm `[a-z0-9-]`."""
    return f"test_{category.replace('-', '_')}.py"


class PytestEmitter(BaseEmitter):
    """Emissor de módulos de teste pytest."""

    target = EmitTarget.PYTEST

    def suite_path(self, category: str) -> str:
        return f"tests/{module_name(category)}"

    # =========================================================================
    # SUÍTE
    # =========================================================================

    def render_suite(self, category: str, models: list[TestCaseModel]) -> str:
        sources = ", ".join(dict.fromkeys(model.source for model in models))
        lines = [
            f'"""Testes gerados por logconv (categoria: {category}) a partir de {sources}."""',
            "",
            "import pytest",
        ]
        used: set[str] = set()
        for model in models:
            lines.extend(["", ""])
            lines.extend(self._render_test(model, used))
        return "\n".join(lines) + "\n"

    def _function_name(self, model: TestCaseModel, used: set[str]) -> str:
        base = f"test_{identifier(model.display_name)}"
        name, counter = base, 2
        while name in used:
            name = f"{base}_{counter}"
            counter += 1
        used.add(name)
        return name

    def _render_test(self, model: TestCaseModel, used: set[str]) -> list[str]:
        lines = [f"@pytest.mark.{marker_name(tag)}" for tag in model.tags]
        lines.append(f"def {self._function_name(model, used)}(api_client):")
        lines.append(f"    {py_string(f'{model.display_name} ({model.source})')}")
        for index, txn in enumerate(model.transactions, start=1):
            if index > 1:
                lines.append("")
            lines.extend(self._render_step(self.prepare(txn), index, model.source))
        return lines

    # =========================================================================
    # PASSO
    # =========================================================================

    def _render_step(self, txn: HttpTransaction, index: int, source: str) -> list[str]:
        indent = "    "
        lines = [f"{indent}# Passo {index}: {step_title(txn, index)}"]
        origin = self.origin_comment(txn, source)
        if origin:
            lines.append(f"{indent}# Origem: {origin}")

        lines.append(f"{indent}response = api_client.request(")
        inner = indent + "    "
        lines.append(f"{inner}{py_string(txn.method or 'GET')},")
        lines.append(f"{inner}{py_string(request_target(txn.url))},")
        headers = emitted_headers(txn.request_headers)
        if headers:
            lines.append(f"{inner}headers={py_literal(headers, inner)},")
        body = txn.request_body
        if body.is_decoded:
            lines.append(f"{inner}json={py_literal(body.value, inner)},")
        elif body.is_raw:
            lines.append(f"{inner}data={py_string(str(body.value))},")
        lines.append(f"{indent})")

        if txn.response_status is not None:
            lines.append(f"{indent}assert response.status_code == {txn.response_status}")
        else:
            lines.append(f"{indent}# Status não observado no log: asserção omitida")

        response_body = txn.response_body
        keys = response_keys(response_body, self.config.max_body_assertions)
        if keys:
            lines.append(f"{indent}body = response.json()")
            lines.extend(f"{indent}assert {py_string(key)} in body" for key in keys)
        elif response_body.is_decoded and isinstance(response_body.value, list):
            lines.append(f"{indent}assert isinstance(response.json(), list)")
        return lines

    # =========================================================================
    # CONFIGURAÇÃO
    # =========================================================================

    def run_config(self, summary: SuiteSummary) -> list[SourceFile]:
        environments = summary.environments or ["dev"]
        markers = sorted({marker_name(tag) for tag in summary.tags})
        ini = ["[pytest]", "testpaths = tests"]
        if markers:
            ini.append("markers =")
            ini.extend(f"    {marker}: gerado a partir das tags dos logs" for marker in markers)
        ini.append("")

        conftest = "\n".join([
            '"""Fixtures dos testes gerados por logconv. Ambiente escolhido por TEST_ENV."""',
            "",
            "import json",
            "import os",
            "from pathlib import Path",
            "",
            "import pytest",
            "import requests",
            "",
            "",
            f"ENVIRONMENT = os.environ.get(\"TEST_ENV\", {py_string(environments[0])})",
            "SETTINGS = json.loads(",
            "    (Path(__file__).parent / \"config\" / f\"{ENVIRONMENT}.json\").read_text(encoding=\"utf-8\")",
            ")",
            "",
            "",
            "class ApiClient:",
            "    def __init__(self, base_url, headers, timeout):",
            "        self.base_url = base_url.rstrip(\"/\")",
            "        self.timeout = timeout",
            "        self.session = requests.Session()",
            "        self.session.headers.update(headers)",
            "",
            "    def request(self, method, path, **kwargs):",
            "        kwargs.setdefault(\"timeout\", self.timeout)",
            "        return self.session.request(method, self.base_url + path, **kwargs)",
            "",
            "",
            "@pytest.fixture",
            "def api_client():",
            "    client = ApiClient(SETTINGS[\"baseURL\"], SETTINGS.get(\"headers\", {}), SETTINGS[\"timeout\"] / 1000)",
            "    yield client",
            "    client.session.close()",
            "",
        ])
        return [
            SourceFile(path="pytest.ini", content="\n".join(ini), kind="config"),
            SourceFile(path="conftest.py", content=conftest, kind="config"),
        ]
