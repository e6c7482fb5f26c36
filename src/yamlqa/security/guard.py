# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Pre-parse screening of untrusted YAML input.

The guard never raises for bad input: each violation becomes a
``parser``-sourced :class:`~yamlqa.core.models.LintMessage` so callers always
receive a structured result.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Final

import yaml

from ..config.models import ValidateOptions
from ..core.models import LintMessage, LintSource, MessageKind
from ..core.severity import Severity

LOGGER = logging.getLogger(__name__)

YAML_MIME_TYPES: Final[frozenset[str]] = frozenset(
    {"application/yaml", "application/x-yaml", "text/yaml", "text/x-yaml"},
)
CORE_TAGS: Final[frozenset[str]] = frozenset(
    {
        "str",
        "int",
        "float",
        "bool",
        "null",
        "map",
        "seq",
        "binary",
        "timestamp",
        "omap",
        "pairs",
        "set",
        "merge",
    },
)
_CORE_TAG_PREFIX: Final[str] = "tag:yaml.org,2002:"
_YAML_EXTENSION: Final[re.Pattern[str]] = re.compile(r"\.ya?ml$", re.IGNORECASE)
_CONTROL_BYTES: Final[re.Pattern[str]] = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")
_UNPRINTABLE: Final[re.Pattern[str]] = re.compile(r"[^\x09\x0a\x0d\x20-\x7e]")
_ANCHOR_FALLBACK: Final[re.Pattern[str]] = re.compile(r"(?:^|[\s\[{,:-])&[A-Za-z0-9_.-]+", re.MULTILINE)
_ALIAS_FALLBACK: Final[re.Pattern[str]] = re.compile(r"(?:^|[\s\[{,:-])\*[A-Za-z0-9_.-]+", re.MULTILINE)
_TAG_FALLBACK: Final[re.Pattern[str]] = re.compile(r"(?:^|[\s\[{,:-])(![!<]?[A-Za-z0-9_:/.<>-]*)", re.MULTILINE)
SNIPPET_LIMIT: Final[int] = 200


class GuardViolation(str, Enum):
    """Rejection categories reported by :func:`guard`."""

    SIZE_EXCEEDED = "size-exceeded"
    LINE_COUNT_EXCEEDED = "line-count-exceeded"
    BINARY_CONTENT = "binary-content"
    FORMAT_MISMATCH = "format-mismatch"
    ANCHOR_NOT_ALLOWED = "anchor-not-allowed"
    ALIAS_NOT_ALLOWED = "alias-not-allowed"
    CUSTOM_TAG_NOT_ALLOWED = "custom-tag-not-allowed"


@dataclass(frozen=True, slots=True)
class GuardReport:
    """Outcome of a guard pass.

    Attributes:
        messages: Findings in detection order; relaxed checks appear as warnings.
        violations: Categories that produced an ``error`` message.
    """

    messages: tuple[LintMessage, ...] = field(default_factory=tuple)
    violations: tuple[GuardViolation, ...] = field(default_factory=tuple)

    @property
    def passed(self) -> bool:
        """Return ``True`` when no check rejected the content."""

        return not self.violations


def sanitize_snippet(text: str, max_length: int = SNIPPET_LIMIT) -> str:
    """Return ``text`` with non-printable characters replaced, truncated to ``max_length``."""

    return _UNPRINTABLE.sub("�", text)[:max_length]


def count_lines(content: str) -> int:
    """Return the number of newline-delimited lines in ``content``.

    A trailing newline terminates the last line rather than starting a new one.
    """

    if not content:
        return 0
    return content.count("\n") + (0 if content.endswith("\n") else 1)


def is_yaml_filename(filename: str) -> bool:
    """Return ``True`` when ``filename`` carries a ``.yaml``/``.yml`` extension."""

    return bool(_YAML_EXTENSION.search(filename))


@dataclass(slots=True)
class _Collector:
    filename: str | None
    messages: list[LintMessage] = field(default_factory=list)
    violations: list[GuardViolation] = field(default_factory=list)

    def add(
        self,
        violation: GuardViolation,
        message: str,
        suggestion: str,
        *,
        relaxed: bool = False,
        line: int | None = None,
        column: int | None = None,
    ) -> None:
        severity = Severity.WARNING if relaxed else Severity.ERROR
        if not relaxed:
            self.violations.append(violation)
        self.messages.append(
            LintMessage(
                source=LintSource.PARSER,
                severity=severity,
                message=message,
                path=self.filename,
                line=line,
                column=column,
                rule_id=violation.value,
                kind=MessageKind.SYNTAX,
                suggestion=suggestion,
            ),
        )

    def report(self) -> GuardReport:
        return GuardReport(messages=tuple(self.messages), violations=tuple(self.violations))


def guard(content: str, options: ValidateOptions | None = None) -> GuardReport:
    """Screen ``content`` before any parser or external tool sees it.

    Size and line limits are checked first; when either is exceeded the
    remaining content scans are skipped.

    Args:
        content: Raw document text.
        options: Request options carrying limits, declared metadata and the
            anchor/alias/tag allowances.

    Returns:
        GuardReport: Messages and the violations that reject the content.
    """

    opts = options or ValidateOptions()
    collector = _Collector(filename=opts.filename)

    byte_length = len(content.encode("utf-8", errors="surrogatepass"))
    if byte_length > opts.limits.max_bytes:
        collector.add(
            GuardViolation.SIZE_EXCEEDED,
            f"YAML exceeds max size of {opts.limits.max_bytes} bytes ({byte_length} bytes)",
            "Split the file or reduce content size",
        )
    line_count = count_lines(content)
    if line_count > opts.limits.max_lines:
        collector.add(
            GuardViolation.LINE_COUNT_EXCEEDED,
            f"YAML exceeds max lines of {opts.limits.max_lines} ({line_count} lines)",
            "Split the file or reduce line count",
        )
    if collector.violations:
        return collector.report()

    _check_file_meta(collector, opts)
    _check_binary(collector, content, relaxed=opts.relax_security)
    _check_json_payload(collector, content, opts)
    _check_node_features(collector, content, opts)
    report = collector.report()
    if report.messages:
        LOGGER.debug("guard findings: %s", [message.rule_id for message in report.messages])
    return report


def _declares_yaml(options: ValidateOptions) -> bool:
    if options.filename and is_yaml_filename(options.filename):
        return True
    return bool(options.mime_type and options.mime_type.lower() in YAML_MIME_TYPES)


def _check_file_meta(collector: _Collector, options: ValidateOptions) -> None:
    relaxed = options.relax_security
    if options.filename and not is_yaml_filename(options.filename):
        collector.add(
            GuardViolation.FORMAT_MISMATCH,
            f"Unsupported file extension for {sanitize_snippet(options.filename)}; only .yaml/.yml allowed",
            "Rename the file to .yaml or .yml",
            relaxed=relaxed,
        )
    if options.mime_type and options.mime_type.lower() not in YAML_MIME_TYPES:
        collector.add(
            GuardViolation.FORMAT_MISMATCH,
            f"Unsupported MIME type {sanitize_snippet(options.mime_type)}",
            "Use application/yaml or text/yaml",
            relaxed=relaxed,
        )


def _check_binary(collector: _Collector, content: str, *, relaxed: bool) -> None:
    match = _CONTROL_BYTES.search(content)
    if match is None:
        return
    line = content.count("\n", 0, match.start()) + 1
    collector.add(
        GuardViolation.BINARY_CONTENT,
        "Content contains non-text control bytes",
        "Remove binary data or re-encode the file as UTF-8 text",
        relaxed=relaxed,
        line=line,
    )


def _check_json_payload(collector: _Collector, content: str, options: ValidateOptions) -> None:
    if not _declares_yaml(options):
        return
    stripped = content.strip()
    if not stripped or stripped[0] not in "{[":
        return
    try:
        payload = json.loads(stripped)
    except ValueError:
        return
    if not isinstance(payload, (dict, list)):
        return
    collector.add(
        GuardViolation.FORMAT_MISMATCH,
        "Content is JSON but was declared as YAML",
        "Convert the document to YAML or declare it as JSON",
        relaxed=options.relax_security,
    )


@dataclass(frozen=True, slots=True)
class _NodeFeature:
    line: int
    column: int
    text: str


def _is_core_tag(handle: str | None, suffix: str) -> bool:
    if handle == "!!":
        return suffix in CORE_TAGS
    if handle is None and suffix.startswith(_CORE_TAG_PREFIX):
        return suffix.removeprefix(_CORE_TAG_PREFIX) in CORE_TAGS
    return False


def _tag_allowed(tag: str, allowed: tuple[str, ...]) -> bool:
    return tag in allowed or tag.lstrip("!") in allowed


def _scan_features(content: str) -> tuple[list[_NodeFeature], list[_NodeFeature], list[_NodeFeature]]:
    """Return anchors, aliases and custom tags found in the YAML token stream.

    Raises:
        yaml.YAMLError: If the scanner cannot tokenise ``content``.
    """

    anchors: list[_NodeFeature] = []
    aliases: list[_NodeFeature] = []
    tags: list[_NodeFeature] = []
    for token in yaml.scan(content, Loader=yaml.SafeLoader):
        mark = token.start_mark
        if isinstance(token, yaml.AnchorToken):
            anchors.append(_NodeFeature(mark.line + 1, mark.column + 1, f"&{token.value}"))
        elif isinstance(token, yaml.AliasToken):
            aliases.append(_NodeFeature(mark.line + 1, mark.column + 1, f"*{token.value}"))
        elif isinstance(token, yaml.TagToken):
            handle, suffix = token.value
            if _is_core_tag(handle, suffix):
                continue
            tags.append(_NodeFeature(mark.line + 1, mark.column + 1, f"{handle or ''}{suffix}"))
    return anchors, aliases, tags


def _regex_features(content: str) -> tuple[list[_NodeFeature], list[_NodeFeature], list[_NodeFeature]]:
    def collect(pattern: re.Pattern[str]) -> list[_NodeFeature]:
        found: list[_NodeFeature] = []
        for match in pattern.finditer(content):
            start = match.end() - len(match.group(0).lstrip(" \t\n[{,:-"))
            line = content.count("\n", 0, start) + 1
            column = start - (content.rfind("\n", 0, start) + 1) + 1
            found.append(_NodeFeature(line, column, content[start : match.end()]))
        return found

    tags = [
        feature
        for feature in collect(_TAG_FALLBACK)
        if not (feature.text.startswith("!!") and feature.text[2:] in CORE_TAGS)
    ]
    return collect(_ANCHOR_FALLBACK), collect(_ALIAS_FALLBACK), tags


def _check_node_features(collector: _Collector, content: str, options: ValidateOptions) -> None:
    try:
        anchors, aliases, tags = _scan_features(content)
    except yaml.YAMLError as exc:
        LOGGER.debug("YAML scanner failed during guard, using heuristic scan: %s", exc)
        anchors, aliases, tags = _regex_features(content)

    if anchors and not options.allow_anchors:
        first = anchors[0]
        collector.add(
            GuardViolation.ANCHOR_NOT_ALLOWED,
            f"YAML anchors are not allowed ({sanitize_snippet(first.text, 64)})",
            "Inline values instead of using &anchor definitions",
            line=first.line,
            column=first.column,
        )
    if aliases and not options.allow_aliases:
        first = aliases[0]
        collector.add(
            GuardViolation.ALIAS_NOT_ALLOWED,
            f"YAML aliases are not allowed ({sanitize_snippet(first.text, 64)})",
            "Inline values instead of referencing *alias nodes",
            line=first.line,
            column=first.column,
        )
    rejected = [tag for tag in tags if not _tag_allowed(tag.text, options.allowed_tags)]
    if rejected:
        first = rejected[0]
        names = sorted({sanitize_snippet(tag.text, 64) for tag in rejected})
        collector.add(
            GuardViolation.CUSTOM_TAG_NOT_ALLOWED,
            f"Custom YAML tags are not allowed: {', '.join(names)}",
            "Remove the tag or add it to allowed_tags",
            line=first.line,
            column=first.column,
        )


__all__ = [
    "CORE_TAGS",
    "GuardReport",
    "GuardViolation",
    "YAML_MIME_TYPES",
    "count_lines",
    "guard",
    "is_yaml_filename",
    "sanitize_snippet",
]
