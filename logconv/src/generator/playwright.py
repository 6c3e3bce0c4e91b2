"""
================================================================================
Emissor Playwright (TypeScript)
================================================================================

Gera uma spec `tests/<categoria>.spec.ts` por categoria, com os testes de
todos os logs daquela categoria. Cada log vira um `test.describe` próprio
dentro da categoria, então nomes de teste repetidos entre logs não
colidem. As specs usam a fixture `apiHelper` de `utils/testFixtures.js`
(fora do escopo do conversor):

```ts
import { test, expect } from '../utils/testFixtures.js';

test.describe('auth', () => {
  test.describe('login.log', () => {
    test('Login @smoke @auth', async ({ apiHelper }) => {
      // Passo 1: Submit credentials
      apiHelper.setStep('Submit credentials');
      const response1 = await apiHelper.makeRequest('POST', '/auth/login', {
        data: { "username": "ana" },
      });
      expect(response1.status).toBe(200);
      expect(response1.responseBody).toHaveProperty(['token']);
    });
  });
});
```
"""

from __future__ import annotations

from ..ingestion.models import HttpTransaction
from .base import BaseEmitter, EmitTarget, SourceFile, SuiteSummary, group_by_source
from .builder import TestCaseModel
from .render import (
    emitted_headers,
    js_literal,
    js_string,
    request_target,
    response_keys,
    step_title,
)

FIXTURES_IMPORT = "../utils/testFixtures.js"


class PlaywrightEmitter(BaseEmitter):
    """Emissor de specs Playwright em TypeScript."""

    target = EmitTarget.PLAYWRIGHT

    def suite_path(self, category: str) -> str:
        return f"tests/{category}.spec.ts"

    # =========================================================================
    # SUÍTE
    # =========================================================================

    def render_suite(self, category: str, models: list[TestCaseModel]) -> str:
        by_source = group_by_source(models)
        lines = [
            f"// Gerado por logconv a partir de {', '.join(by_source)}. Revise antes de versionar.",
            f"import {{ test, expect }} from {js_string(FIXTURES_IMPORT)};",
            "",
            f"test.describe({js_string(category)}, () => {{",
        ]
        for position, (source, group) in enumerate(by_source.items()):
            if position:
                lines.append("")
            lines.append(f"  test.describe({js_string(source)}, () => {{")
            for index, model in enumerate(group):
                if index:
                    lines.append("")
                lines.extend(self._render_test(model, "    "))
            lines.append("  });")
        lines.append("});")
        return "\n".join(lines) + "\n"

    def _render_test(self, model: TestCaseModel, indent: str) -> list[str]:
        title = " ".join([model.display_name] + [f"@{tag}" for tag in model.tags])
        lines = [f"{indent}test({js_string(title)}, async ({{ apiHelper }}) => {{"]
        for index, txn in enumerate(model.transactions, start=1):
            if index > 1:
                lines.append("")
            lines.extend(self._render_step(self.prepare(txn), index, model.source, indent + "  "))
        lines.append(f"{indent}}});")
        return lines

    # =========================================================================
    # PASSO
    # =========================================================================

    def _render_step(self, txn: HttpTransaction, index: int, source: str, indent: str) -> list[str]:
        title = step_title(txn, index)
        lines = [f"{indent}// Passo {index}: {title}"]
        origin = self.origin_comment(txn, source)
        if origin:
            lines.append(f"{indent}// Origem: {origin}")
        lines.append(f"{indent}apiHelper.setStep({js_string(title)});")

        options = self._request_options(txn, indent + "  ")
        method = txn.method or "GET"
        target = request_target(txn.url)
        var = f"response{index}"
        if options:
            lines.append(f"{indent}const {var} = await apiHelper.makeRequest({js_string(method)}, {js_string(target)}, {{")
            lines.extend(options)
            lines.append(f"{indent}}});")
        else:
            lines.append(f"{indent}const {var} = await apiHelper.makeRequest({js_string(method)}, {js_string(target)});")

        if txn.response_status is not None:
            lines.append(f"{indent}expect({var}.status).toBe({txn.response_status});")
        else:
            lines.append(f"{indent}// Status não observado no log: asserção omitida")

        body = txn.response_body
        if body.is_decoded and isinstance(body.value, list):
            lines.append(f"{indent}expect(Array.isArray({var}.responseBody)).toBe(true);")
        for key in response_keys(body, self.config.max_body_assertions):
            lines.append(f"{indent}expect({var}.responseBody).toHaveProperty([{js_string(key)}]);")
        return lines

    def _request_options(self, txn: HttpTransaction, indent: str) -> list[str]:
        options: list[str] = []
        headers = emitted_headers(txn.request_headers)
        if headers:
            options.append(f"{indent}headers: {js_literal(headers, indent)},")
        if txn.request_body.is_present:
            options.append(f"{indent}data: {js_literal(txn.request_body.value, indent)},")
        if txn.scenario:
            options.append(f"{indent}scenarioName: {js_string(txn.scenario)},")
        return options

    # =========================================================================
    # CONFIGURAÇÃO
    # =========================================================================

    def run_config(self, summary: SuiteSummary) -> list[SourceFile]:
        environments = summary.environments or ["dev"]
        content = "\n".join([
            "// Gerado por logconv. Ambiente escolhido por TEST_ENV.",
            "import { defineConfig } from '@playwright/test';",
            "import { readFileSync } from 'fs';",
            "",
            f"const environment = process.env.TEST_ENV || {js_string(environments[0])};",
            "const settings = JSON.parse(readFileSync(`./config/${environment}.json`, 'utf-8'));",
            "",
            "export default defineConfig({",
            "  testDir: './tests',",
            "  timeout: settings.timeout,",
            "  retries: settings.retries,",
            "  reporter: [['list'], ['html', { open: 'never' }]],",
            "  use: {",
            "    baseURL: settings.baseURL,",
            "    extraHTTPHeaders: settings.headers,",
            "  },",
            "});",
            "",
        ])
        return [SourceFile(path="playwright.config.ts", content=content, kind="config")]
