# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Tests for the input guard."""

from __future__ import annotations

from yamlqa.config import GuardLimits, ValidateOptions
from yamlqa.core.models import LintSource, MessageKind
from yamlqa.core.severity import Severity
from yamlqa.security import guard
from yamlqa.security.guard import GuardViolation, count_lines, sanitize_snippet


def _rule_ids(content: str, options: ValidateOptions | None = None) -> list[str | None]:
    return [message.rule_id for message in guard(content, options).messages]


def test_size_limit_is_inclusive() -> None:
    options = ValidateOptions(limits=GuardLimits(max_bytes=10))

    assert guard("a: 123456\n", options).passed
    report = guard("a: 1234567\n", options)

    assert not report.passed
    assert report.violations == (GuardViolation.SIZE_EXCEEDED,)
    message = report.messages[0]
    assert message.source is LintSource.PARSER
    assert message.severity is Severity.ERROR
    assert message.kind is MessageKind.SYNTAX
    assert message.suggestion


def test_size_counts_utf8_bytes() -> None:
    options = ValidateOptions(limits=GuardLimits(max_bytes=4))

    assert not guard("é: é", options).passed


def test_line_limit_counts_newline_delimited_lines() -> None:
    options = ValidateOptions(limits=GuardLimits(max_lines=2))

    assert guard("a: 1\nb: 2\n", options).passed
    assert guard("a: 1\nb: 2", options).passed
    assert _rule_ids("a: 1\nb: 2\nc: 3", options) == ["line-count-exceeded"]


def test_count_lines() -> None:
    assert count_lines("") == 0
    assert count_lines("a") == 1
    assert count_lines("a\n") == 1
    assert count_lines("a\nb") == 2
    assert count_lines("\n\n") == 2


def test_size_violation_skips_content_scans() -> None:
    options = ValidateOptions(limits=GuardLimits(max_bytes=5))

    assert _rule_ids("a: &x 1\nb: *x\n", options) == ["size-exceeded"]


def test_binary_content_rejected_unless_relaxed() -> None:
    content = "a: 1\nb: \x00\x01\n"

    report = guard(content)
    assert report.violations == (GuardViolation.BINARY_CONTENT,)
    assert report.messages[0].line == 2

    relaxed = guard(content, ValidateOptions(relax_security=True))
    assert relaxed.passed
    assert relaxed.messages[0].severity is Severity.WARNING


def test_json_declared_as_yaml() -> None:
    content = '{"a": 1, "b": [1, 2]}'

    strict = guard(content, ValidateOptions(filename="config.yaml"))
    assert strict.violations == (GuardViolation.FORMAT_MISMATCH,)

    relaxed = guard(content, ValidateOptions(filename="config.yaml", relax_security=True))
    assert relaxed.passed
    assert [message.severity for message in relaxed.messages] == [Severity.WARNING]

    assert guard(content).passed


def test_flow_yaml_that_is_not_json_passes() -> None:
    assert guard("{a: 1}", ValidateOptions(filename="config.yml")).passed


def test_file_metadata_checks() -> None:
    assert _rule_ids("a: 1\n", ValidateOptions(filename="notes.txt")) == ["format-mismatch"]
    assert _rule_ids("a: 1\n", ValidateOptions(filename="CONFIG.YML")) == []
    assert _rule_ids("a: 1\n", ValidateOptions(mime_type="application/json")) == ["format-mismatch"]
    assert _rule_ids("a: 1\n", ValidateOptions(mime_type="application/yaml")) == []


def test_messages_carry_the_filename() -> None:
    report = guard("a: &x 1\n", ValidateOptions(filename="stack.yaml"))

    assert report.messages[0].path == "stack.yaml"


def test_anchors_and_aliases_rejected_by_default() -> None:
    content = "base: &defaults\n  a: 1\nother: *defaults\n"

    report = guard(content)

    assert report.violations == (GuardViolation.ANCHOR_NOT_ALLOWED, GuardViolation.ALIAS_NOT_ALLOWED)
    anchor, alias = report.messages
    assert (anchor.line, anchor.column) == (1, 7)
    assert alias.line == 3


def test_anchor_and_alias_allowances_are_independent() -> None:
    content = "base: &defaults 1\nother: *defaults\n"

    assert _rule_ids(content, ValidateOptions(allow_anchors=True)) == ["alias-not-allowed"]
    assert _rule_ids(content, ValidateOptions(allow_aliases=True)) == ["anchor-not-allowed"]
    assert guard(content, ValidateOptions(allow_anchors=True, allow_aliases=True)).passed


def test_custom_tags_need_allow_list() -> None:
    content = "Bucket: !Ref MyBucket\nName: !Sub '${AWS::StackName}-x'\n"

    report = guard(content)
    assert report.violations == (GuardViolation.CUSTOM_TAG_NOT_ALLOWED,)
    assert "!Ref" in report.messages[0].message
    assert "!Sub" in report.messages[0].message

    assert guard(content, ValidateOptions(allowed_tags=("!Ref", "Sub"))).passed
    assert _rule_ids(content, ValidateOptions(allowed_tags=("Ref",))) == ["custom-tag-not-allowed"]


def test_core_tags_are_allowed() -> None:
    assert guard("a: !!str 123\nb: !!int '4'\n").passed


def test_unscannable_content_falls_back_to_heuristics() -> None:
    content = "a: 'unterminated\nb: &anchor 1\n"

    assert "anchor-not-allowed" in _rule_ids(content)


def test_sanitize_snippet_replaces_control_characters() -> None:
    assert sanitize_snippet("ok\x00bad") == "ok�bad"
    assert len(sanitize_snippet("x" * 500)) == 200
