"""
================================================================================
Testes: Orquestrador da Conversão
================================================================================

Execuções completas em diretórios temporários: isolamento entre arquivos,
determinismo, nenhuma perda de dados, dry-run e proteção da saída.
"""

from __future__ import annotations

import json
from pathlib import Path

import pytest

import src.converter as converter_module
from src.config import ConverterConfig
from src.converter import convert, discover_log_files
from src.errors import ConversionAbortedError, ErrorCodes, OutputConflictError
from src.generator import MANIFEST_NAME, REPORT_NAME
from conftest import GENERIC_LOG, LEGACY_LOG, LEGACY_MULTILINE_LOG, NATIVE_LOG, PLAIN_TEXT

ORDERS_LOG = """\
📤 HTTP REQUEST
🧪 Test Case: Create order @regression
🌐 Method: POST
🔗 URL: /api/v1/orders
📤 Request Body:
{ "sku": "A-1", "qty": 2 }
====
📥 HTTP RESPONSE
📊 Status: 201
📥 Response Body:
{ "id": 99, "status": "created" }
====
"""

LOGOUT_LOG = NATIVE_LOG.replace("Login @smoke", "Logout").replace("/auth/login", "/auth/logout")


def _snapshot(root: Path) -> dict[str, bytes]:
    return {p.relative_to(root).as_posix(): p.read_bytes() for p in sorted(root.rglob("*")) if p.is_file()}


@pytest.fixture
def config() -> ConverterConfig:
    return ConverterConfig.for_testing()


# =============================================================================
# DESCOBERTA
# =============================================================================


class TestDiscovery:
    """Testes para discover_log_files()."""

    def test_filters_and_sorts(self, make_logs) -> None:
        input_dir = make_logs({
            "b.log": "x",
            "a.txt": "x",
            "sub/c.json": "x",
            "image.png": "x",
        })
        found = discover_log_files(input_dir, [".log", ".txt", ".json"])
        assert [p.relative_to(input_dir).as_posix() for p in found] == ["a.txt", "b.log", "sub/c.json"]

    def test_non_recursive(self, make_logs) -> None:
        input_dir = make_logs({"a.log": "x", "sub/b.log": "x"})
        found = discover_log_files(input_dir, [".log"], recursive=False)
        assert [p.name for p in found] == ["a.log"]

    def test_excludes_output_inside_input(self, make_logs) -> None:
        input_dir = make_logs({"a.log": "x", "generated/tests/old.log": "x"})
        found = discover_log_files(input_dir, [".log"], exclude=input_dir / "generated")
        assert [p.name for p in found] == ["a.log"]


# =============================================================================
# CONVERSÃO
# =============================================================================


class TestConvert:
    """Testes para convert()."""

    def test_mixed_dialects(self, make_logs, tmp_path: Path, config: ConverterConfig) -> None:
        input_dir = make_logs({"login.log": NATIVE_LOG, "legacy.txt": LEGACY_LOG, "app.log": GENERIC_LOG})
        out = tmp_path / "out"

        report = convert(input_dir, out, config)

        assert report.files_scanned == 3
        assert report.files_converted == 3
        assert report.files_failed == 0
        assert report.files_by_format == {"native": 1, "legacy": 1, "generic": 1}
        assert report.transactions == 4
        assert report.success
        assert (out / "tests/auth.spec.ts").exists()
        assert (out / "tests/login.spec.ts").exists()
        assert (out / "playwright.config.ts").exists()
        assert (out / "config/dev.json").exists()
        assert (out / "README.md").exists()
        assert json.loads((out / REPORT_NAME).read_text(encoding="utf-8"))["files_converted"] == 3
        assert (out / MANIFEST_NAME).exists()

    def test_multiline_legacy_log(self, make_logs, tmp_path: Path, config: ConverterConfig) -> None:
        input_dir = make_logs({"legacy.txt": LEGACY_MULTILINE_LOG})
        out = tmp_path / "out"

        report = convert(input_dir, out, config)

        file_report = report.files[0]
        assert file_report.format == "legacy"
        assert (file_report.transactions, file_report.partial_transactions, file_report.test_cases) == (1, 0, 1)
        assert file_report.warnings == []
        assert file_report.generated_files == ["tests/login.spec.ts"]
        suite = (out / "tests/login.spec.ts").read_text(encoding="utf-8")
        assert "expect(response1.status).toBe(200);" in suite

    def test_idempotent(self, make_logs, tmp_path: Path, config: ConverterConfig) -> None:
        """Mesma entrada, mesma configuração → mesmos bytes."""
        input_dir = make_logs({"login.log": NATIVE_LOG, "legacy.txt": LEGACY_LOG, "app.log": GENERIC_LOG})
        out = tmp_path / "out"

        convert(input_dir, out, config)
        first = _snapshot(out)
        convert(input_dir, out, config.merged({"force": True}))
        assert _snapshot(out) == first

    def test_parallel_matches_sequential(self, make_logs, tmp_path: Path, config: ConverterConfig) -> None:
        input_dir = make_logs({f"log{i}.log": NATIVE_LOG for i in range(6)})

        convert(input_dir, tmp_path / "seq", config)
        convert(input_dir, tmp_path / "par", config.merged({"workers": 4}))

        sequential = _snapshot(tmp_path / "seq")
        parallel = _snapshot(tmp_path / "par")
        # O relatório guarda o caminho da saída
        assert json.loads(sequential.pop(REPORT_NAME))["files"] == json.loads(parallel.pop(REPORT_NAME))["files"]
        assert sequential == parallel

    def test_one_bad_file_does_not_stop_others(
        self, make_logs, tmp_path: Path, config: ConverterConfig, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        input_dir = make_logs({"a.log": NATIVE_LOG, "b.log": NATIVE_LOG, "c.log": NATIVE_LOG})
        real_parse = converter_module.parse_log

        def flaky_parse(content, detected, context):
            if context.source == "b.log":
                raise RuntimeError("boom")
            return real_parse(content, detected, context)

        monkeypatch.setattr(converter_module, "parse_log", flaky_parse)
        report = convert(input_dir, tmp_path / "out", config)

        assert report.files_converted == 2
        assert report.files_failed == 1
        assert report.errors[0]["file"] == "b.log"
        assert report.errors[0]["code"] == ErrorCodes.PARSE_FAILED.formatted
        assert report.success

    @pytest.mark.parametrize(
        "corrupted",
        [NATIVE_LOG[: len(NATIVE_LOG) // 2], bytes(range(256)) * 4, "📤 HTTP REQUEST\n📥 HTTP RESPONSE\n{{{"],
        ids=["truncated", "binary", "garbled"],
    )
    def test_corrupting_one_file_leaves_the_other_unchanged(
        self, make_logs, tmp_path: Path, config: ConverterConfig, corrupted: str | bytes
    ) -> None:
        """O que sai de b.log não depende do conteúdo de a.log."""
        input_dir = make_logs({"a.log": NATIVE_LOG, "b.log": ORDERS_LOG})
        before = convert(input_dir, tmp_path / "before", config)

        make_logs({"a.log": corrupted})
        after = convert(input_dir, tmp_path / "after", config)

        b_before = next(f for f in before.files if f.file == "b.log")
        b_after = next(f for f in after.files if f.file == "b.log")
        assert b_after == b_before
        assert b_after.generated_files == ["tests/orders.spec.ts"]
        suite = "tests/orders.spec.ts"
        assert (tmp_path / "after" / suite).read_bytes() == (tmp_path / "before" / suite).read_bytes()

    def test_logs_sharing_a_category_share_a_suite(self, make_logs, tmp_path: Path, config: ConverterConfig) -> None:
        input_dir = make_logs({"login.log": NATIVE_LOG, "logout.log": LOGOUT_LOG, "orders.log": ORDERS_LOG})
        out = tmp_path / "out"

        report = convert(input_dir, out, config)

        suites = [path for path in report.generated_files if path.startswith("tests/")]
        assert suites == ["tests/auth.spec.ts", "tests/orders.spec.ts"]
        assert [f.generated_files for f in report.files] == [
            ["tests/auth.spec.ts"],
            ["tests/auth.spec.ts"],
            ["tests/orders.spec.ts"],
        ]
        spec = (out / "tests/auth.spec.ts").read_text(encoding="utf-8")
        assert spec.index("test.describe('login.log'") < spec.index("test.describe('logout.log'")

    def test_similar_log_names_do_not_overwrite_each_other(
        self, make_logs, tmp_path: Path, config: ConverterConfig
    ) -> None:
        """Nomes de log que viram o mesmo identificador não perdem testes."""
        content = (
            "📤 HTTP REQUEST\n🧪 Test Case: {name}\n🌐 Method: GET\n🔗 URL: /a/{name}\n====\n"
            "📥 HTTP RESPONSE\n📊 Status: 200\n====\n"
        )
        input_dir = make_logs({"1-x.log": content.format(name="first"), "t-1-x.log": content.format(name="second")})
        out = tmp_path / "out"

        report = convert(input_dir, out, config.merged({"target": "pytest"}))

        module = (out / "tests/test_a.py").read_text(encoding="utf-8")
        assert "def test_first(api_client):" in module
        assert "def test_second(api_client):" in module
        assert report.test_cases == 2

    def test_unreadable_file(
        self, make_logs, tmp_path: Path, config: ConverterConfig, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        input_dir = make_logs({"a.log": NATIVE_LOG, "b.log": NATIVE_LOG})
        real_read = converter_module.RawLogFile.read

        def guarded_read(path, root=None):
            if path.name == "a.log":
                raise PermissionError("denied")
            return real_read(path, root)

        monkeypatch.setattr(converter_module.RawLogFile, "read", guarded_read)
        report = convert(input_dir, tmp_path / "out", config)

        assert report.files[0].error is not None
        assert report.files[0].error["code"] == ErrorCodes.FILE_UNREADABLE.formatted
        assert report.files_converted == 1

    def test_binary_garbage_falls_back_safely(self, make_logs, tmp_path: Path, config: ConverterConfig) -> None:
        input_dir = make_logs({"dump.log": bytes(range(256)) * 4, "ok.log": NATIVE_LOG})
        report = convert(input_dir, tmp_path / "out", config)

        dump = next(f for f in report.files if f.file == "dump.log")
        assert dump.error is None
        assert dump.format == "generic"
        assert report.files_converted == 2

    def test_plain_text_produces_note_not_warning(self, make_logs, tmp_path: Path, config: ConverterConfig) -> None:
        input_dir = make_logs({"notes.txt": PLAIN_TEXT, "login.log": NATIVE_LOG})
        report = convert(input_dir, tmp_path / "out", config)

        notes = next(f for f in report.files if f.file == "notes.txt")
        assert notes.test_cases == 0
        assert notes.warnings == []
        assert notes.notes[0]["code"] == ErrorCodes.NO_HTTP_CONTENT.formatted
        assert notes.generated_files == []

    def test_no_data_loss(self, make_logs, tmp_path: Path, config: ConverterConfig) -> None:
        """Toda transação reconhecida aparece em algum teste gerado."""
        content = NATIVE_LOG + "📤 HTTP REQUEST\n🌐 Method: GET\n🔗 URL: /never-answered\n====\n"
        input_dir = make_logs({"login.log": content})
        out = tmp_path / "out"

        report = convert(input_dir, out, config)

        assert report.transactions == 2
        assert report.partial_transactions == 1
        generated = "".join((out / path).read_text(encoding="utf-8") for path in report.files[0].generated_files)
        assert "/never-answered" in generated
        assert "/api/v1/auth/login" in generated

    def test_malformed_json_single_warning(self, make_logs, tmp_path: Path, config: ConverterConfig) -> None:
        content = (
            "📤 HTTP REQUEST\n🌐 Method: GET\n🔗 URL: /a\n====\n"
            "📥 HTTP RESPONSE\n📊 Status: 200\n📥 Response Body:\n{\"a\": \n====\n"
        )
        input_dir = make_logs({"a.log": content})
        report = convert(input_dir, tmp_path / "out", config)

        assert report.warnings == 1
        assert report.files[0].warnings[0]["code"] == ErrorCodes.INVALID_JSON_FIELD.formatted
        assert report.test_cases == 1

    def test_mixed_tags(self, make_logs, tmp_path: Path, config: ConverterConfig) -> None:
        content = (
            "📤 HTTP REQUEST\n🧪 Test Case: Invalid login @smoke\n🌐 Method: POST\n🔗 URL: /auth/login\n====\n"
            "📥 HTTP RESPONSE\n📊 Status: 401\n====\n"
        )
        input_dir = make_logs({"a.log": content})
        out = tmp_path / "out"
        convert(input_dir, out, config)

        spec = (out / "tests/auth.spec.ts").read_text(encoding="utf-8")
        assert "test('Invalid login @smoke @auth @negative'" in spec

    def test_pytest_target(self, make_logs, tmp_path: Path, config: ConverterConfig) -> None:
        input_dir = make_logs({"login.log": NATIVE_LOG})
        out = tmp_path / "out"
        report = convert(input_dir, out, config.merged({"target": "pytest"}))

        assert report.target == "pytest"
        assert (out / "tests/test_auth.py").exists()
        assert (out / "conftest.py").exists()
        assert (out / "pytest.ini").exists()

    def test_forced_format(self, make_logs, tmp_path: Path, config: ConverterConfig) -> None:
        input_dir = make_logs({"login.log": NATIVE_LOG})
        report = convert(input_dir, tmp_path / "out", config.merged({"format_override": "generic"}))

        assert report.files[0].format == "generic"
        assert report.files[0].forced is True
        assert report.files[0].confidence == 1.0

    def test_base_url_from_single_origin(self, make_logs, tmp_path: Path, config: ConverterConfig) -> None:
        input_dir = make_logs({"login.log": NATIVE_LOG})
        out = tmp_path / "out"
        convert(input_dir, out, config)

        settings = json.loads((out / "config/dev.json").read_text(encoding="utf-8"))
        assert settings["baseURL"] == "https://api.example.com"

    def test_output_inside_input_is_not_reconverted(self, make_logs, config: ConverterConfig) -> None:
        input_dir = make_logs({"login.log": NATIVE_LOG})
        out = input_dir / "generated"

        convert(input_dir, out, config)
        (out / "tests" / "leftover.log").write_text(NATIVE_LOG, encoding="utf-8")
        report = convert(input_dir, out, config.merged({"force": True}))

        assert report.files_scanned == 1


# =============================================================================
# FALHAS DA EXECUÇÃO
# =============================================================================


class TestRunFailures:
    """Falhas que impedem a execução inteira."""

    def test_missing_input(self, tmp_path: Path, config: ConverterConfig) -> None:
        with pytest.raises(ConversionAbortedError) as exc_info:
            convert(tmp_path / "nope", tmp_path / "out", config)
        assert exc_info.value.error.code == ErrorCodes.INPUT_NOT_FOUND

    def test_no_input_files(self, make_logs, tmp_path: Path, config: ConverterConfig) -> None:
        input_dir = make_logs({"readme.md": "x"})
        report = convert(input_dir, tmp_path / "out", config)

        assert not report.success
        assert report.errors[0]["code"] == ErrorCodes.NO_INPUT_FILES.formatted
        assert not (tmp_path / "out").exists()

    def test_conflict_then_force(self, make_logs, tmp_path: Path, config: ConverterConfig) -> None:
        input_dir = make_logs({"login.log": NATIVE_LOG})
        out = tmp_path / "out"
        convert(input_dir, out, config)

        with pytest.raises(OutputConflictError):
            convert(input_dir, out, config)

        report = convert(input_dir, out, config.merged({"force": True}))
        assert report.success

    def test_dry_run_writes_nothing(self, make_logs, tmp_path: Path, config: ConverterConfig) -> None:
        input_dir = make_logs({"login.log": NATIVE_LOG})
        out = tmp_path / "out"

        report = convert(input_dir, out, config.merged({"dry_run": True}))

        assert report.dry_run is True
        assert "tests/auth.spec.ts" in report.generated_files
        assert "README.md" in report.generated_files
        assert not out.exists()

    def test_all_files_failing(
        self, make_logs, tmp_path: Path, config: ConverterConfig, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        input_dir = make_logs({"a.log": NATIVE_LOG})

        def broken_parse(content, detected, context):
            raise ValueError("quebrado")

        monkeypatch.setattr(converter_module, "parse_log", broken_parse)
        report = convert(input_dir, tmp_path / "out", config)

        assert not report.success
        assert report.files_failed == 1
        assert report.generated_files == []
