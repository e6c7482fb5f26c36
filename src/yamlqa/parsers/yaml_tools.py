# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Parsers for the YAML style, structural and rule-engine linters."""

from __future__ import annotations

import re
from collections.abc import Sequence
from typing import Final

from ..core.models import JsonValue, LintMessage, LintSource, MessageKind
from ..core.severity import (
    CFN_LINT_SEVERITY_MAP,
    SPECTRAL_SEVERITY_MAP,
    YAMLLINT_SEVERITY_MAP,
    Severity,
    normalize_severity,
)
from ..tools.builtins import OutputFormat
from .base import (
    JsonParser,
    Parser,
    TextParser,
    coerce_int,
    coerce_optional_str,
    get_mapping,
    iter_dicts,
    iter_pattern_matches,
    join_path,
)

YAMLLINT_PATTERN = re.compile(
    r"^(?P<file>.*?):(?P<line>\d+):(?P<column>\d+):\s+\[(?P<level>[^\]]+)\]\s+"
    r"(?P<message>.*?)(?:\s+\((?P<rule>[^)]+)\))?$",
)


def parse_yamllint(stdout: Sequence[str]) -> Sequence[LintMessage]:
    """Parse yamllint ``parsable`` output into style messages.

    Args:
        stdout: Sequence of yamllint output lines.

    Returns:
        Sequence[LintMessage]: Messages derived from yamllint findings.
    """

    results: list[LintMessage] = []
    for match in iter_pattern_matches(stdout, YAMLLINT_PATTERN):
        message = (match.group("message") or "").strip()
        level = match.group("level") or "warning"
        results.append(
            LintMessage(
                source=LintSource.STYLE,
                severity=normalize_severity(level, YAMLLINT_SEVERITY_MAP, Severity.WARNING),
                message=message,
                line=int(match.group("line")),
                column=int(match.group("column")),
                rule_id=match.group("rule"),
                kind=MessageKind.STYLE,
            ),
        )
    return results


def parse_cfn_lint(payload: JsonValue) -> Sequence[LintMessage]:
    """Parse cfn-lint ``-f json`` findings into provider-structural messages.

    Args:
        payload: JSON array emitted by cfn-lint.

    Returns:
        Sequence[LintMessage]: Messages derived from cfn-lint findings.
    """

    results: list[LintMessage] = []
    for item in iter_dicts(payload):
        location = get_mapping(item, "Location")
        start = get_mapping(location, "Start")
        rule = get_mapping(item, "Rule")
        message = coerce_optional_str(item.get("Message")) or "cfn-lint finding"
        results.append(
            LintMessage(
                source=LintSource.PROVIDER_STRUCTURAL,
                severity=normalize_severity(item.get("Level"), CFN_LINT_SEVERITY_MAP, Severity.WARNING),
                message=message,
                path=join_path(location.get("Path")),
                line=coerce_int(start.get("LineNumber")),
                column=coerce_int(start.get("ColumnNumber")),
                rule_id=coerce_optional_str(rule.get("Id")),
                kind=MessageKind.SEMANTIC,
            ),
        )
    return results


def parse_spectral(payload: JsonValue) -> Sequence[LintMessage]:
    """Parse spectral ``-f json`` findings into rule-engine messages.

    Spectral positions are zero-based and are shifted to one-based here.

    Args:
        payload: JSON array emitted by spectral.

    Returns:
        Sequence[LintMessage]: Messages derived from spectral findings.
    """

    results: list[LintMessage] = []
    for item in iter_dicts(payload):
        start = get_mapping(get_mapping(item, "range"), "start")
        line = coerce_int(start.get("line"))
        column = coerce_int(start.get("character"))
        results.append(
            LintMessage(
                source=LintSource.RULE_ENGINE,
                severity=normalize_severity(item.get("severity"), SPECTRAL_SEVERITY_MAP, Severity.WARNING),
                message=coerce_optional_str(item.get("message")) or "spectral finding",
                path=join_path(item.get("path")),
                line=None if line is None else line + 1,
                column=None if column is None else column + 1,
                rule_id=coerce_optional_str(item.get("code")),
                kind=MessageKind.SEMANTIC,
            ),
        )
    return results


PARSERS: Final[dict[OutputFormat, Parser]] = {
    OutputFormat.STYLE_TEXT: TextParser(parse_yamllint),
    OutputFormat.STRUCTURAL_JSON: JsonParser(parse_cfn_lint),
    OutputFormat.RULE_ENGINE_JSON: JsonParser(parse_spectral),
}


def parser_for(output_format: OutputFormat) -> Parser:
    """Return the parser registered for ``output_format``."""

    return PARSERS[output_format]


__all__ = [
    "PARSERS",
    "YAMLLINT_PATTERN",
    "parse_cfn_lint",
    "parse_spectral",
    "parse_yamllint",
    "parser_for",
]
