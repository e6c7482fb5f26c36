# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Tests for validation orchestration and aggregation."""

from __future__ import annotations

import json
import time

import pytest

from yamlqa.config import EngineEnvironment, GuardLimits, ValidateOptions
from yamlqa.core.models import LintMessage, LintSource, Provider
from yamlqa.core.severity import Severity
from yamlqa.orchestration import TaskStatus, ValidationTask, merge_messages, run_tasks, validate
from yamlqa.tools.runner import CannedToolRunner, RecordedCall, ToolResult

CFN_TEMPLATE = """\
AWSTemplateFormatVersion: "2010-09-09"
Resources:
  Assets:
    Type: AWS::S3::Bucket
    Properties:
      BucketName: demo-assets
"""

CFN_LINT_ERROR = json.dumps(
    [
        {
            "Level": "Error",
            "Message": "Invalid property",
            "Location": {"Start": {"LineNumber": 6, "ColumnNumber": 7}, "Path": ["Resources", "Assets"]},
            "Rule": {"Id": "E3002"},
        },
    ],
)
STYLE_WARNING = "stdin:1:1: [warning] missing document start \"---\" (document-start)\n"
STYLE_ERROR = "stdin:2:3: [error] too many spaces after colon (colons)\n"


def _generic_document(lines: int = 50) -> str:
    return "".join(f"key_{index}: value {index}\n" for index in range(lines))


def test_generic_document_validates_ok() -> None:
    runner = CannedToolRunner()

    result = validate(_generic_document(), ValidateOptions(tool_runner=runner))

    assert result.ok
    assert result.messages == ()
    assert result.provider_summary is not None
    assert result.provider_summary.provider is Provider.GENERIC
    assert [call.command for call in runner.calls] == ["yamllint"]


def test_ok_is_derived_from_error_messages() -> None:
    warning_only = validate(
        _generic_document(3),
        ValidateOptions(tool_runner=CannedToolRunner({"yamllint": ToolResult(1, STYLE_WARNING)})),
    )
    with_error = validate(
        _generic_document(3),
        ValidateOptions(tool_runner=CannedToolRunner({"yamllint": ToolResult(1, STYLE_ERROR)})),
    )

    assert warning_only.ok
    assert not with_error.ok
    for result in (warning_only, with_error):
        assert result.ok == (not any(message.severity is Severity.ERROR for message in result.messages))


def test_messages_are_ordered_by_source_priority() -> None:
    runner = CannedToolRunner(
        {
            "cfn-lint": ToolResult(2, CFN_LINT_ERROR),
            "yamllint": ToolResult(1, STYLE_WARNING),
        },
    )

    result = validate(CFN_TEMPLATE, ValidateOptions(tool_runner=runner))

    assert [message.source for message in result.messages] == [LintSource.PROVIDER_STRUCTURAL, LintSource.STYLE]
    assert not result.ok
    summary = result.provider_summary
    assert summary is not None
    assert summary.provider is Provider.AWS
    assert summary.counts[LintSource.PROVIDER_STRUCTURAL].errors == 1
    assert summary.counts[LintSource.STYLE].warnings == 1
    assert summary.sources.cfn_lint_image == "giammbo/cfn-lint:latest"


def test_structural_linter_runs_sandboxed() -> None:
    runner = CannedToolRunner()

    validate(CFN_TEMPLATE, ValidateOptions(tool_runner=runner))

    (call,) = runner.calls_for("cfn-lint")
    assert call.command == "docker"
    assert "--network=none" in call.args
    mount = call.args[call.args.index("-v") + 1]
    assert mount.endswith(":/work:ro")
    assert call.args[-1] == "template.yaml"


def test_structural_linter_can_be_disabled() -> None:
    runner = CannedToolRunner()

    validate(
        CFN_TEMPLATE,
        ValidateOptions(tool_runner=runner),
        environment=EngineEnvironment(disable_cfn_lint=True),
    )

    assert runner.calls_for("cfn-lint") == []


def test_slow_structural_linter_is_dropped_without_losing_other_sources() -> None:
    def slow_cfn_lint(call: RecordedCall) -> ToolResult:
        time.sleep(1.0)
        return ToolResult(2, CFN_LINT_ERROR)

    runner = CannedToolRunner({"cfn-lint": slow_cfn_lint, "yamllint": ToolResult(1, STYLE_WARNING)})

    result = validate(CFN_TEMPLATE, ValidateOptions(tool_runner=runner, tool_timeout_ms=100))

    assert [message.source for message in result.messages] == [LintSource.STYLE]
    assert result.ok


def test_timed_out_and_missing_tools_contribute_nothing() -> None:
    runner = CannedToolRunner(
        {
            "cfn-lint": ToolResult(124, CFN_LINT_ERROR, "Command timed out"),
            "yamllint": ToolResult(127, "", "not found"),
        },
    )

    result = validate(CFN_TEMPLATE, ValidateOptions(tool_runner=runner))

    assert result.messages == ()
    assert result.ok


def test_style_linter_falls_back_to_container() -> None:
    runner = CannedToolRunner(
        {
            "cytopia/yamllint": ToolResult(1, STYLE_WARNING),
            "yamllint": ToolResult(127, "", "not found"),
        },
    )

    result = validate(_generic_document(3), ValidateOptions(tool_runner=runner))

    assert [message.rule_id for message in result.messages] == ["document-start"]
    container_calls = runner.calls_for("cytopia/yamllint")
    assert len(container_calls) == 1
    assert "--network=none" in container_calls[0].args


def test_rule_engine_runs_with_ruleset() -> None:
    finding = [{"code": "no-root-a", "message": "a is banned", "severity": 0, "path": ["key_0"]}]
    runner = CannedToolRunner({"spectral": ToolResult(1, json.dumps(finding))})

    result = validate(
        _generic_document(2),
        ValidateOptions(tool_runner=runner, spectral_ruleset_path="rules.yaml"),
    )

    (message,) = result.messages
    assert message.source is LintSource.RULE_ENGINE
    assert message.path == "key_0"
    assert not result.ok
    assert result.provider_summary is not None
    assert result.provider_summary.sources.spectral_ruleset_path == "rules.yaml"
    (call,) = runner.calls_for("spectral")
    assert call.args[call.args.index("-r") + 1] == "rules.yaml"


def test_ruleset_falls_back_to_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SPECTRAL_RULESET", "env-rules.yaml")
    runner = CannedToolRunner()

    validate(_generic_document(2), ValidateOptions(tool_runner=runner))

    (call,) = runner.calls_for("spectral")
    assert "env-rules.yaml" in call.args


def test_azure_pipeline_runs_schema_analyzer() -> None:
    content = "trigger:\n  - main\npool:\n  vmImage: ubuntu-latest\nsteps:\n  - scrpt: echo hi\n"
    runner = CannedToolRunner()

    result = validate(content, ValidateOptions(tool_runner=runner))

    assert result.provider_summary is not None
    assert result.provider_summary.provider is Provider.AZURE
    schema_messages = result.by_source(LintSource.PROVIDER_SCHEMA)
    assert [message.path for message in schema_messages] == ["steps[0].scrpt"]
    assert schema_messages[0].suggestion == "Rename to script"
    assert runner.calls_for("cfn-lint") == []


def test_guard_failure_short_circuits() -> None:
    runner = CannedToolRunner()

    result = validate("a: 1234567\n", ValidateOptions(tool_runner=runner, limits=GuardLimits(max_bytes=10)))

    assert not result.ok
    assert result.provider_summary is None
    assert [message.rule_id for message in result.messages] == ["size-exceeded"]
    assert runner.calls == []


def test_parse_error_is_reported_without_running_tools() -> None:
    runner = CannedToolRunner()

    result = validate("items: [1, 2\nother: 3\n", ValidateOptions(tool_runner=runner))

    assert not result.ok
    (message,) = result.messages
    assert message.source is LintSource.PARSER
    assert message.rule_id == "parse-error"
    assert message.line is not None
    assert result.provider_summary is not None
    assert runner.calls == []


def test_duplicate_keys_are_parse_errors() -> None:
    result = validate("a: 1\na: 2\n", ValidateOptions(tool_runner=CannedToolRunner()))

    assert not result.ok
    assert "duplicate key" in result.messages[0].message


def test_parse_timeout_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("YAML_PARSE_SIMULATE_DELAY_MS", "500")
    monkeypatch.setenv("YAML_PARSE_TIMEOUT_MS", "50")

    result = validate("a: 1\n", ValidateOptions(tool_runner=CannedToolRunner()))

    assert not result.ok
    assert result.messages[0].message == "parse timeout after 50ms"
    assert result.messages[0].rule_id == "parse-timeout"


def test_parse_timeout_option_overrides_environment() -> None:
    environment = EngineEnvironment(parse_timeout_ms=5000, simulate_parse_delay_ms=500)

    result = validate(
        "a: 1\n",
        ValidateOptions(tool_runner=CannedToolRunner(), parse_timeout_ms=20),
        environment=environment,
    )

    assert result.messages[0].message == "parse timeout after 20ms"


def test_parse_timeout_is_clamped() -> None:
    assert EngineEnvironment(parse_timeout_ms=60_000).resolve_parse_timeout_ms() == 10_000
    assert EngineEnvironment().resolve_parse_timeout_ms() == 5_000
    assert EngineEnvironment.from_env({"YAML_PARSE_TIMEOUT_MS": "oops"}).parse_timeout_ms is None
    assert EngineEnvironment.from_env({"YAML_CONCURRENCY": "-3"}).concurrency == 1


def test_unexpected_failure_becomes_internal_error(monkeypatch: pytest.MonkeyPatch) -> None:
    def broken_guard(content, options):
        raise RuntimeError("kaboom")

    monkeypatch.setattr("yamlqa.orchestration.orchestrator.guard", broken_guard)

    result = validate("a: 1\n")

    assert not result.ok
    assert result.messages[0].rule_id == "internal-error"
    assert "kaboom" in result.messages[0].message


def test_run_tasks_isolates_failures() -> None:
    def failing() -> list[LintMessage]:
        raise ValueError("nope")

    def working() -> list[LintMessage]:
        return [LintMessage(source=LintSource.STYLE, severity=Severity.INFO, message="fine")]

    outcomes = run_tasks(
        [
            ValidationTask("failing", LintSource.RULE_ENGINE, failing, timeout_ms=100),
            ValidationTask("working", LintSource.STYLE, working, timeout_ms=100),
        ],
    )

    assert [outcome.status for outcome in outcomes] == [TaskStatus.FAILED, TaskStatus.COMPLETED]
    assert outcomes[1].messages[0].message == "fine"


def test_merge_messages_keeps_order_within_a_source() -> None:
    def message(source: LintSource, text: str) -> LintMessage:
        return LintMessage(source=source, severity=Severity.WARNING, message=text)

    merged = merge_messages(
        [
            [message(LintSource.RULE_ENGINE, "r1"), message(LintSource.STYLE, "s1")],
            [message(LintSource.STYLE, "s2"), message(LintSource.PARSER, "p1")],
        ],
    )

    assert [item.message for item in merged] == ["p1", "s1", "s2", "r1"]
