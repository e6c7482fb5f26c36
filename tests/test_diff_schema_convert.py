# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Tests for diff rendering, schema validation and format conversion."""

from __future__ import annotations

import json

import pytest
import yaml

from yamlqa.convert import json_to_yaml, yaml_to_json
from yamlqa.diffing import unified_diff
from yamlqa.schema import json_pointer, schema_validate

SERVICE_SCHEMA = {
    "type": "object",
    "required": ["name", "replicas"],
    "properties": {
        "name": {"type": "string"},
        "replicas": {"type": "integer", "minimum": 1},
        "ports": {"type": "array", "items": {"type": "integer"}},
    },
}


def test_diff_of_identical_text_is_empty() -> None:
    assert unified_diff("a: 1\n", "a: 1\n") == ""


def test_diff_has_labelled_headers_and_hunks() -> None:
    diff = unified_diff("a: 1\nb: 2\n", "a: 1\nb: 3\n", "service.yaml")

    assert diff.splitlines() == [
        "--- service.yaml (before)",
        "+++ service.yaml (after)",
        "@@ -1,2 +1,2 @@",
        " a: 1",
        "-b: 2",
        "+b: 3",
    ]


def test_diff_marks_missing_final_newline() -> None:
    diff = unified_diff("a: 1", "a: 2")

    assert "\\ No newline at end of file\n" in diff
    assert diff.endswith("\n")


def test_diff_is_deterministic() -> None:
    assert unified_diff("x\n", "y\n") == unified_diff("x\n", "y\n")


def test_schema_accepts_valid_document() -> None:
    result = schema_validate("name: api\nreplicas: 2\nports: [80, 443]\n", SERVICE_SCHEMA)

    assert result.ok
    assert result.errors == ()


def test_schema_reports_every_error_with_pointer() -> None:
    result = schema_validate("replicas: 0\nports: [80, web]\n", SERVICE_SCHEMA)

    assert not result.ok
    by_keyword = {issue.keyword: issue for issue in result.errors}
    assert set(by_keyword) == {"required", "minimum", "type"}
    assert by_keyword["required"].instance_path == ""
    assert by_keyword["minimum"].instance_path == "/replicas"
    assert by_keyword["type"].instance_path == "/ports/1"


def test_schema_reports_parse_failure() -> None:
    result = schema_validate("a: [1\n", SERVICE_SCHEMA)

    assert not result.ok
    assert result.errors[0].keyword == "parse"


def test_schema_reports_invalid_schema() -> None:
    result = schema_validate("a: 1\n", {"type": "nonsense"})

    assert not result.ok
    assert result.errors[0].keyword == "schema-compile"


def test_json_pointer_escapes_segments() -> None:
    assert json_pointer(["a/b", "c~d", 0]) == "/a~1b/c~0d/0"
    assert json_pointer([]) == ""


def test_yaml_to_json() -> None:
    converted = yaml_to_json("name: api\nports:\n  - 80\nlaunched: 2024-01-02\n")

    assert json.loads(converted) == {"name": "api", "ports": [80], "launched": "2024-01-02"}
    assert converted.startswith('{\n  "name": "api"')


def test_json_to_yaml_preserves_key_order() -> None:
    converted = json_to_yaml('{"zeta": 1, "alpha": {"nested": [true, null]}}')

    assert converted == "zeta: 1\nalpha:\n  nested:\n  - true\n  - null\n"


def test_conversion_errors_propagate() -> None:
    with pytest.raises(yaml.YAMLError):
        yaml_to_json("a: [1\n")
    with pytest.raises(json.JSONDecodeError):
        json_to_yaml("{not json")
