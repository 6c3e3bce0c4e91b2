"""
================================================================================
Testes de Integração do CLI
================================================================================

Testes para os comandos do CLI `logconv`.
"""

from __future__ import annotations

import json
from pathlib import Path

import click
import pytest
from click.testing import CliRunner

from src.cli import registry
from src.cli.main import cli
from src.errors import ErrorCodes
from conftest import NATIVE_LOG


# =============================================================================
# FIXTURES
# =============================================================================


@pytest.fixture
def runner() -> CliRunner:
    """CliRunner para testar comandos Click."""
    return CliRunner()


@pytest.fixture(autouse=True)
def isolated_cwd(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Evita que um `.logconv/` ou variáveis do ambiente real interfiram."""
    workdir = tmp_path / "work"
    workdir.mkdir()
    monkeypatch.chdir(workdir)
    for name in ("LOGCONV_TARGET", "LOGCONV_WORKERS", "LOGCONV_FORMAT", "LOGCONV_ENVIRONMENTS"):
        monkeypatch.delenv(name, raising=False)
    return workdir


# =============================================================================
# TESTES: Grupo principal
# =============================================================================


class TestCliGroup:
    """Testes para o grupo principal."""

    def test_version(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert "0.1.0" in result.output

    def test_help_lists_commands(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["--help"])
        assert result.exit_code == 0
        for name in ("convert", "detect", "explain", "init"):
            assert name in result.output


# =============================================================================
# TESTES: init
# =============================================================================


class TestInitCommand:
    """Testes para `logconv init`."""

    def test_creates_config(self, runner: CliRunner, tmp_path: Path) -> None:
        project = tmp_path / "project"
        result = runner.invoke(cli, ["init", str(project)])

        assert result.exit_code == 0
        config_file = project / ".logconv" / "config.yaml"
        assert config_file.exists()
        assert "target: playwright" in config_file.read_text(encoding="utf-8")

    def test_existing_config_requires_force(self, runner: CliRunner, tmp_path: Path) -> None:
        project = tmp_path / "project"
        runner.invoke(cli, ["init", str(project)])

        again = runner.invoke(cli, ["init", str(project)])
        assert again.exit_code == 1
        assert "já existe" in again.output

        forced = runner.invoke(cli, ["init", str(project), "--force"])
        assert forced.exit_code == 0

    def test_quiet_still_reports_existing_config(self, runner: CliRunner, tmp_path: Path) -> None:
        project = tmp_path / "project"
        runner.invoke(cli, ["init", str(project)])

        again = runner.invoke(cli, ["-q", "init", str(project)])

        assert again.exit_code == 1
        assert "já existe" in again.output

    def test_generated_config_is_loaded(self, runner: CliRunner, isolated_cwd: Path) -> None:
        from src.cli.utils import load_config

        runner.invoke(cli, ["init"])
        config = load_config(isolated_cwd)

        assert config["target"] == "playwright"
        assert config["environments"] == ["dev", "staging", "qa", "prod"]
        assert "format_override" not in config

    def test_template_follows_config_model(self) -> None:
        """Cada campo persistível aparece com a descrição como comentário."""
        from src.cli.commands.init_cmd import render_config_file
        from src.config import ConverterConfig

        text = render_config_file()

        assert "# format_override:" in text
        assert "force:" not in text
        assert "dry_run" not in text
        assert "max_body_assertions: 5" in text
        assert f"# {ConverterConfig.model_fields['workers'].description}" in text


# =============================================================================
# TESTES: convert
# =============================================================================


class TestConvertCommand:
    """Testes para `logconv convert`."""

    def test_convert_success(self, runner: CliRunner, make_logs, tmp_path: Path) -> None:
        input_dir = make_logs({"login.log": NATIVE_LOG})
        out = tmp_path / "out"

        result = runner.invoke(cli, ["convert", str(input_dir), str(out), "--env", "dev"])

        assert result.exit_code == 0, result.output
        assert "Resumo da Conversão" in result.output
        assert (out / "tests/auth.spec.ts").exists()

    def test_convert_pytest_target(self, runner: CliRunner, make_logs, tmp_path: Path) -> None:
        input_dir = make_logs({"login.log": NATIVE_LOG})
        out = tmp_path / "out"

        result = runner.invoke(cli, ["convert", str(input_dir), str(out), "-t", "pytest"])

        assert result.exit_code == 0, result.output
        assert (out / "tests/test_auth.py").exists()

    def test_json_output(self, runner: CliRunner, make_logs, tmp_path: Path) -> None:
        input_dir = make_logs({"login.log": NATIVE_LOG})

        result = runner.invoke(cli, ["--json", "convert", str(input_dir), str(tmp_path / "out")])

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["files_converted"] == 1
        assert data["files"][0]["format"] == "native"

    def test_quiet_prints_one_line_summary(self, runner: CliRunner, make_logs, tmp_path: Path) -> None:
        input_dir = make_logs({"login.log": NATIVE_LOG})

        result = runner.invoke(cli, ["-q", "convert", str(input_dir), str(tmp_path / "out")])

        assert result.exit_code == 0
        assert "Resumo da Conversão" not in result.output
        assert "logconv: 1/1 arquivo(s), 1 teste(s)" in result.output

    def test_quiet_failure_is_visible(self, runner: CliRunner, make_logs, tmp_path: Path) -> None:
        input_dir = make_logs({"readme.md": "x"})

        result = runner.invoke(cli, ["-q", "convert", str(input_dir), str(tmp_path / "out")])

        assert result.exit_code == 1
        assert "Nenhum arquivo convertido" in result.output

    def test_dry_run(self, runner: CliRunner, make_logs, tmp_path: Path) -> None:
        input_dir = make_logs({"login.log": NATIVE_LOG})
        out = tmp_path / "out"

        result = runner.invoke(cli, ["convert", str(input_dir), str(out), "--dry-run"])

        assert result.exit_code == 0
        assert not out.exists()

    def test_unknown_format(self, runner: CliRunner, make_logs, tmp_path: Path) -> None:
        input_dir = make_logs({"login.log": NATIVE_LOG})

        result = runner.invoke(cli, ["convert", str(input_dir), str(tmp_path / "out"), "--format", "xml"])

        assert result.exit_code == 1
        assert ErrorCodes.UNKNOWN_FORMAT.formatted in result.output

    def test_missing_input(self, runner: CliRunner, tmp_path: Path) -> None:
        result = runner.invoke(cli, ["convert", str(tmp_path / "nope"), str(tmp_path / "out")])

        assert result.exit_code == 1
        assert ErrorCodes.INPUT_NOT_FOUND.formatted in result.output

    def test_missing_input_json(self, runner: CliRunner, tmp_path: Path) -> None:
        result = runner.invoke(cli, ["--json", "convert", str(tmp_path / "nope"), str(tmp_path / "out")])

        assert result.exit_code == 1
        data = json.loads(result.stdout)
        assert data["success"] is False
        assert data["error"]["code"] == ErrorCodes.INPUT_NOT_FOUND.formatted

    def test_no_input_files(self, runner: CliRunner, make_logs, tmp_path: Path) -> None:
        input_dir = make_logs({"readme.md": "x"})

        result = runner.invoke(cli, ["convert", str(input_dir), str(tmp_path / "out")])

        assert result.exit_code == 1
        assert "Nenhum arquivo convertido" in result.output

    def test_conflict_then_force(self, runner: CliRunner, make_logs, tmp_path: Path) -> None:
        input_dir = make_logs({"login.log": NATIVE_LOG})
        out = tmp_path / "out"
        runner.invoke(cli, ["convert", str(input_dir), str(out)])

        conflict = runner.invoke(cli, ["convert", str(input_dir), str(out)])
        assert conflict.exit_code == 1
        assert ErrorCodes.OUTPUT_CONFLICT.formatted in conflict.output

        forced = runner.invoke(cli, ["convert", str(input_dir), str(out), "--force"])
        assert forced.exit_code == 0

    def test_workers_out_of_range(self, runner: CliRunner, make_logs, tmp_path: Path) -> None:
        input_dir = make_logs({"login.log": NATIVE_LOG})
        result = runner.invoke(cli, ["convert", str(input_dir), str(tmp_path / "out"), "-w", "0"])
        assert result.exit_code == 2

    def test_workspace_config_applies(self, runner: CliRunner, make_logs, tmp_path: Path, isolated_cwd: Path) -> None:
        (isolated_cwd / ".logconv").mkdir()
        (isolated_cwd / ".logconv" / "config.yaml").write_text("target: pytest\n", encoding="utf-8")
        input_dir = make_logs({"login.log": NATIVE_LOG})
        out = tmp_path / "out"

        result = runner.invoke(cli, ["convert", str(input_dir), str(out)])

        assert result.exit_code == 0, result.output
        assert (out / "pytest.ini").exists()


# =============================================================================
# TESTES: detect
# =============================================================================


class TestDetectCommand:
    """Testes para `logconv detect`."""

    def test_detect_native(self, runner: CliRunner, make_logs) -> None:
        input_dir = make_logs({"login.log": NATIVE_LOG})

        result = runner.invoke(cli, ["detect", str(input_dir / "login.log"), "--transactions"])

        assert result.exit_code == 0
        assert "login.log" in result.output
        assert "Transações" in result.output

    def test_detect_json(self, runner: CliRunner, make_logs) -> None:
        input_dir = make_logs({"login.log": NATIVE_LOG})

        result = runner.invoke(cli, ["--json", "detect", str(input_dir / "login.log")])

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["format"] == "native"
        assert data["transactions"] == 1
        assert data["test_cases"] == ["Login"]
        assert data["issues"]["summary"]["total"] == 0
        assert "details" not in data

    def test_detect_missing_file(self, runner: CliRunner, tmp_path: Path) -> None:
        result = runner.invoke(cli, ["detect", str(tmp_path / "nope.log")])
        assert result.exit_code == 2


# =============================================================================
# TESTES: explain
# =============================================================================


class TestExplainCommand:
    """Testes para `logconv explain`."""

    def test_lists_all_codes(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["explain"])
        assert result.exit_code == 0
        assert "E1001" in result.output
        assert "E5001" in result.output

    def test_single_code(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["explain", "e1004"])
        assert result.exit_code == 0
        assert "ORPHAN_REQUEST" in result.output

    def test_by_name_json(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["--json", "explain", "no_http_content"])
        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["code"] == "E1006"
        assert data["severity"] == "info"

    def test_unknown_code(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["explain", "E9999"])
        assert result.exit_code == 1


# =============================================================================
# TESTES: Registry
# =============================================================================


class TestRegistry:
    """Testes para o registry de comandos."""

    def test_all_commands_registered(self) -> None:
        names = {cmd.name for cmd in registry.get_registered_commands()}
        assert {"convert", "detect", "explain", "init"} <= names

    def test_register_is_idempotent(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(registry, "_registered_commands", {})

        @click.command("hello")
        def hello() -> None:
            pass

        registry.register_command(hello)
        registry.register_command(hello)
        assert registry.get_registered_commands() == [hello]

    def test_duplicate_name_rejected(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(registry, "_registered_commands", {})
        registry.register_command(click.Command("hello"))

        with pytest.raises(ValueError, match="hello"):
            registry.register_command(click.Command("hello"))

    def test_register_all_commands(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(registry, "_registered_commands", {})

        @click.command("hello")
        def hello() -> None:
            pass

        registry.register_command(hello)
        group = click.Group("test")
        registry.register_all_commands(group)
        registry.register_all_commands(group)

        assert list(group.commands) == ["hello"]

    def test_clear_registry(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(registry, "_registered_commands", {"x": click.Command("x")})
        registry.clear_registry()
        assert registry.get_registered_commands() == []
