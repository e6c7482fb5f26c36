# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Tests for the yamlqa command-line interface."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from yamlqa.cli import app
from yamlqa.schema_fetch import FetchReport
from yamlqa.tools.runner import CannedToolRunner

TEMPLATE = (
    'AWSTemplateFormatVersion: "2010-09-09"\n'
    "Resources:\n"
    "  Assets:\n"
    "    Type: AWS::S3::Bucket\n"
    "    Properties:\n"
    "      BucketnName: demo\n"
)


@pytest.fixture(autouse=True)
def offline_tools(monkeypatch: pytest.MonkeyPatch) -> CannedToolRunner:
    runner = CannedToolRunner()
    monkeypatch.setattr("yamlqa.orchestration.orchestrator.ProcessToolRunner", lambda: runner)
    monkeypatch.setattr("yamlqa.autofix.pipeline.ProcessToolRunner", lambda: runner)
    return runner


@pytest.fixture()
def cli() -> CliRunner:
    return CliRunner()


def _write(path: Path, content: str) -> Path:
    path.write_text(content, encoding="utf-8")
    return path


def test_validate_clean_file(cli: CliRunner, tmp_path: Path) -> None:
    target = _write(tmp_path / "service.yaml", "name: api\nreplicas: 2\n")

    result = cli.invoke(app, ["validate", str(target), "--no-emoji"])

    assert result.exit_code == 0
    assert '"ok": true' in result.stdout
    assert '"provider": "generic"' in result.stdout


def test_validate_reports_errors(cli: CliRunner, tmp_path: Path) -> None:
    target = _write(tmp_path / "dup.yaml", "a: 1\na: 2\n")

    result = cli.invoke(app, ["validate", str(target)])

    assert result.exit_code == 1
    assert '"ok": false' in result.stdout
    assert "duplicate key" in result.stdout


def test_validate_forced_provider(cli: CliRunner, tmp_path: Path, offline_tools: CannedToolRunner) -> None:
    target = _write(tmp_path / "service.yaml", "name: api\n")

    result = cli.invoke(app, ["validate", str(target), "--provider", "aws"])

    assert result.exit_code == 0
    assert '"provider": "aws"' in result.stdout
    assert offline_tools.calls_for("cfn-lint")


def test_validate_missing_file_is_usage_error(cli: CliRunner, tmp_path: Path) -> None:
    result = cli.invoke(app, ["validate", str(tmp_path / "absent.yaml")])

    assert result.exit_code == 2


def test_validate_dir(cli: CliRunner, tmp_path: Path) -> None:
    _write(tmp_path / "good.yaml", "a: 1\n")
    _write(tmp_path / "bad.yml", "a: [1\n")

    result = cli.invoke(app, ["validate-dir", str(tmp_path)])

    assert result.exit_code == 1
    assert "bad.yml" in result.stdout
    assert "good.yaml" in result.stdout


def test_fix_rewrites_file(cli: CliRunner, tmp_path: Path) -> None:
    target = _write(tmp_path / "messy.yaml", "a: 1\r\nb: 2")

    result = cli.invoke(app, ["fix", str(target), "--no-prettier", "--no-emoji"])

    assert result.exit_code == 0
    assert target.read_text(encoding="utf-8") == "---\na: 1\nb: 2\n"
    assert "normalize-eol" in result.stdout
    assert "ensure-trailing-newline" in result.stdout


def test_fix_dry_run_leaves_file(cli: CliRunner, tmp_path: Path) -> None:
    target = _write(tmp_path / "messy.yaml", "a: 1\n")

    result = cli.invoke(app, ["fix", str(target), "--no-prettier", "--dry-run"])

    assert result.exit_code == 0
    assert target.read_text(encoding="utf-8") == "a: 1\n"
    assert "+++ messy.yaml (after)" in result.stdout
    assert "+---" in result.stdout


def test_fix_clean_file(cli: CliRunner, tmp_path: Path) -> None:
    target = _write(tmp_path / "clean.yaml", "---\na: 1\n")

    result = cli.invoke(app, ["fix", str(target), "--no-prettier"])

    assert result.exit_code == 0
    assert target.read_text(encoding="utf-8") == "---\na: 1\n"


def test_suggest_lists_suggestions(cli: CliRunner, tmp_path: Path) -> None:
    target = _write(tmp_path / "template.yaml", TEMPLATE)

    result = cli.invoke(app, ["suggest", str(target), "--no-emoji"])

    assert result.exit_code == 0
    assert "Provider: aws" in result.stdout
    assert "[0] RENAME Resources.Assets.Properties.BucketnName" in result.stdout
    assert "(conf=0.95)" in result.stdout
    assert target.read_text(encoding="utf-8") == TEMPLATE


def test_suggest_apply_safe_only(cli: CliRunner, tmp_path: Path) -> None:
    target = _write(tmp_path / "template.yaml", TEMPLATE)

    result = cli.invoke(app, ["suggest", str(target), "--apply-safe-only", "--no-emoji"])

    assert result.exit_code == 0
    assert "      BucketName: demo\n" in target.read_text(encoding="utf-8")
    assert "+      BucketName: demo" in result.stdout


def test_suggest_apply_by_index(cli: CliRunner, tmp_path: Path) -> None:
    target = _write(tmp_path / "template.yaml", TEMPLATE)

    result = cli.invoke(app, ["suggest", str(target), "--apply", "0"])

    assert result.exit_code == 0
    assert "BucketnName" not in target.read_text(encoding="utf-8")


@pytest.mark.parametrize(
    "extra",
    [["--apply-all", "--apply-safe-only"], ["--apply", "0", "--apply-all"], ["--apply", "first"]],
)
def test_suggest_rejects_bad_apply_flags(cli: CliRunner, tmp_path: Path, extra: list[str]) -> None:
    target = _write(tmp_path / "template.yaml", TEMPLATE)

    result = cli.invoke(app, ["suggest", str(target), *extra])

    assert result.exit_code == 2
    assert target.read_text(encoding="utf-8") == TEMPLATE


def test_suggest_generic_document(cli: CliRunner, tmp_path: Path) -> None:
    target = _write(tmp_path / "plain.yaml", "name: api\n")

    result = cli.invoke(app, ["suggest", str(target)])

    assert result.exit_code == 0
    assert "Provider:" not in result.stdout


def test_schema_command(cli: CliRunner, tmp_path: Path) -> None:
    schema = _write(tmp_path / "schema.json", json.dumps({"type": "object", "required": ["name"]}))
    good = _write(tmp_path / "good.yaml", "name: api\n")
    bad = _write(tmp_path / "bad.yaml", "other: 1\n")

    passed = cli.invoke(app, ["schema", str(good), str(schema)])
    failed = cli.invoke(app, ["schema", str(bad), str(schema)])

    assert passed.exit_code == 0
    assert '"ok": true' in passed.stdout
    assert failed.exit_code == 1
    assert '"keyword": "required"' in failed.stdout


def test_schema_command_rejects_invalid_schema_file(cli: CliRunner, tmp_path: Path) -> None:
    schema = _write(tmp_path / "schema.json", "{not json")
    document = _write(tmp_path / "doc.yaml", "a: 1\n")

    result = cli.invoke(app, ["schema", str(document), str(schema)])

    assert result.exit_code == 2


def test_convert_command(cli: CliRunner, tmp_path: Path) -> None:
    source = _write(tmp_path / "doc.yaml", "name: api\nports: [80]\n")
    json_source = _write(tmp_path / "doc.json", '{"name": "api"}')

    to_json = cli.invoke(app, ["convert", str(source)])
    to_yaml = cli.invoke(app, ["convert", str(json_source), "--to", "yaml"])

    assert to_json.exit_code == 0
    assert json.loads(to_json.stdout) == {"name": "api", "ports": [80]}
    assert to_yaml.exit_code == 0
    assert to_yaml.stdout == "name: api\n"


def test_convert_reports_invalid_input(cli: CliRunner, tmp_path: Path) -> None:
    source = _write(tmp_path / "doc.yaml", "a: [1\n")

    result = cli.invoke(app, ["convert", str(source)])

    assert result.exit_code == 1


@pytest.mark.parametrize(
    ("report", "expected_code"),
    [
        (FetchReport(ok=True, written={"azure": "s/azure-pipelines.json", "cfn": "s/cfn-spec.json"}), 0),
        (FetchReport(ok=False, written={"azure": "s/azure-pipelines.json"}, failed=("cfn",)), 1),
    ],
)
def test_fetch_schemas_command(
    cli: CliRunner,
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
    report: FetchReport,
    expected_code: int,
) -> None:
    requested: list[Path] = []

    def fake_fetch(out_dir: Path) -> FetchReport:
        requested.append(out_dir)
        return report

    monkeypatch.setattr("yamlqa.cli.commands.fetch.fetch_schemas", fake_fetch)

    result = cli.invoke(app, ["fetch-schemas", "--out-dir", str(tmp_path / "schemas"), "--no-emoji"])

    assert result.exit_code == expected_code
    assert requested == [tmp_path / "schemas"]
    assert '"azure": "s/azure-pipelines.json"' in result.stdout
