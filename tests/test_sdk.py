# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Tests for the public embedding API."""

from __future__ import annotations

import yamlqa
from yamlqa import Provider, SuggestionKind, apply_suggestions, diff_preview, suggest

TEMPLATE = (
    'AWSTemplateFormatVersion: "2010-09-09"\n'
    "Resources:\n"
    "  Assets:\n"
    "    Type: AWS::S3::Bucket\n"
    "    Properties:\n"
    "      BucketnName: demo\n"
)


def test_public_surface_is_exported() -> None:
    for name in ("validate", "auto_fix", "suggest", "apply_suggestions", "schema_validate", "detect_provider"):
        assert callable(getattr(yamlqa, name))
    assert isinstance(yamlqa.__version__, str)


def test_suggest_detects_provider() -> None:
    result = suggest(TEMPLATE)

    assert result.provider is Provider.AWS
    assert [item.kind for item in result.suggestions] == [SuggestionKind.RENAME]
    assert result.messages[0].suggestion == "Rename to BucketName"


def test_suggest_is_stable() -> None:
    assert suggest(TEMPLATE) == suggest(TEMPLATE)


def test_suggest_generic_document_has_no_suggestions() -> None:
    result = suggest("name: api\n")

    assert result.provider is Provider.GENERIC
    assert result.suggestions == ()


def test_suggest_reports_parse_errors() -> None:
    result = suggest("Resources: [1\n", Provider.AWS)

    assert result.suggestions == ()
    assert result.messages[0].rule_id == "parse-error"


def test_apply_suggestions_round_trip() -> None:
    applied = apply_suggestions(TEMPLATE, [0])

    assert applied.applied == (0,)
    assert "BucketName: demo" in applied.content
    assert suggest(applied.content).suggestions == ()


def test_apply_suggestions_with_generic_provider_is_a_no_op() -> None:
    applied = apply_suggestions(TEMPLATE, [0], Provider.GENERIC)

    assert applied.content == TEMPLATE
    assert applied.applied == ()


def test_diff_preview_labels_file() -> None:
    diff = diff_preview("a: 1\n", "a: 2\n", "config.yaml")

    assert diff.startswith("--- config.yaml (before)\n+++ config.yaml (after)\n")
    assert diff_preview("a: 1\n", "a: 2\n").startswith("--- file.yaml (before)")


def test_unknown_provider_is_reported_not_raised() -> None:
    content = "Resources:\n  B:\n    Type: AWS::S3::Bucket\n"

    result = suggest(content, provider="gcp")
    applied = apply_suggestions(content, [0], provider="gcp")

    assert result.provider is Provider.GENERIC
    assert result.suggestions == ()
    assert [message.rule_id for message in result.messages] == ["unknown-provider"]
    assert "'gcp'" in result.messages[0].message
    assert applied.content == content
    assert applied.applied == ()


def test_provider_accepts_plain_names() -> None:
    content = "Resources:\n  B:\n    Type: AWS::S3::Buckt\n"

    assert suggest(content, provider="aws") == suggest(content, provider=Provider.AWS)
