# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Tests for linter output parsers."""

from __future__ import annotations

import json

from yamlqa.core.models import LintSource, MessageKind
from yamlqa.core.severity import CFN_LINT_SEVERITY_MAP, SPECTRAL_SEVERITY_MAP, Severity, normalize_severity
from yamlqa.parsers import parse_cfn_lint, parse_spectral, parse_yamllint, parser_for
from yamlqa.parsers.base import load_json_output
from yamlqa.tools.builtins import OutputFormat


def test_parse_yamllint_parsable_lines() -> None:
    stdout = [
        "stdin:1:4: [warning] too few spaces after comma (commas)",
        "stdin:3:1: [error] syntax error: mapping values are not allowed here (syntax)",
        "",
        "not a finding",
    ]

    messages = parse_yamllint(stdout)

    assert len(messages) == 2
    first, second = messages
    assert first.source is LintSource.STYLE
    assert first.kind is MessageKind.STYLE
    assert (first.line, first.column) == (1, 4)
    assert first.severity is Severity.WARNING
    assert first.rule_id == "commas"
    assert first.message == "too few spaces after comma"
    assert second.severity is Severity.ERROR
    assert second.rule_id == "syntax"


def test_parse_cfn_lint_json() -> None:
    payload = [
        {
            "Filename": "template.yaml",
            "Level": "Error",
            "Location": {
                "Start": {"LineNumber": 5, "ColumnNumber": 7},
                "End": {"LineNumber": 5, "ColumnNumber": 18},
                "Path": ["Resources", "Assets", "Properties", "BucketnName"],
            },
            "Message": "Additional properties are not allowed ('BucketnName' was unexpected)",
            "Rule": {"Id": "E3002"},
        },
        {"Level": "Informational", "Message": "note", "Rule": {"Id": "I3011"}},
    ]

    messages = parser_for(OutputFormat.STRUCTURAL_JSON).parse(json.dumps(payload), "")

    assert [message.severity for message in messages] == [Severity.ERROR, Severity.INFO]
    error = messages[0]
    assert error.source is LintSource.PROVIDER_STRUCTURAL
    assert error.path == "Resources.Assets.Properties.BucketnName"
    assert (error.line, error.column) == (5, 7)
    assert error.rule_id == "E3002"
    assert messages[1].line is None


def test_parse_spectral_shifts_positions_to_one_based() -> None:
    payload = [
        {
            "code": "no-latest-tag",
            "message": "Avoid latest",
            "path": ["jobs", 0, "image"],
            "severity": 1,
            "range": {"start": {"line": 3, "character": 4}, "end": {"line": 3, "character": 10}},
        },
    ]

    (message,) = parse_spectral(payload)

    assert message.source is LintSource.RULE_ENGINE
    assert message.severity is Severity.WARNING
    assert (message.line, message.column) == (4, 5)
    assert message.path == "jobs[0].image"
    assert message.rule_id == "no-latest-tag"


def test_json_parsers_tolerate_garbage() -> None:
    assert parse_cfn_lint({"unexpected": "shape"}) == []
    assert parser_for(OutputFormat.RULE_ENGINE_JSON).parse("No results with a severity of 'error'", "") == []
    assert parser_for(OutputFormat.STRUCTURAL_JSON).parse("", "stack trace") == []


def test_normalize_severity_vocabularies() -> None:
    assert normalize_severity("Warning", CFN_LINT_SEVERITY_MAP) is Severity.WARNING
    assert normalize_severity("informational", CFN_LINT_SEVERITY_MAP) is Severity.INFO
    assert normalize_severity(0, SPECTRAL_SEVERITY_MAP) is Severity.ERROR
    assert normalize_severity("3", SPECTRAL_SEVERITY_MAP) is Severity.INFO
    assert normalize_severity(True, SPECTRAL_SEVERITY_MAP, Severity.WARNING) is Severity.WARNING
    assert normalize_severity("fatal", CFN_LINT_SEVERITY_MAP, Severity.ERROR) is Severity.ERROR


def test_load_json_output_accepts_json_lines() -> None:
    stdout = '{"code": "a"}\nnot json\n\n{"code": "b"}\n'

    assert load_json_output(stdout) == [{"code": "a"}, {"code": "b"}]
    assert load_json_output("   ") == []
    assert load_json_output('[{"code": "c"}]') == [{"code": "c"}]
