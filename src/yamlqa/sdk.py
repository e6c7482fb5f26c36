# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Public entry points for embedding yamlqa in other services.

Every function here accepts raw document text and returns immutable result
models, so callers can serialise the outcome directly into an API response.
Bad document content and unknown provider names are reported in those
results rather than raised; invalid option models fail when they are built.
"""

from __future__ import annotations

import logging

import yaml
from pydantic import BaseModel, ConfigDict, Field

from .autofix import auto_fix
from .core.models import (
    ApplyResult,
    LintMessage,
    LintSource,
    MessageKind,
    Provider,
    Suggestion,
)
from .core.severity import Severity
from .detection import detect_provider
from .diffing import unified_diff
from .orchestration import validate
from .parsing import round_trip_load, yaml_error_position, yaml_error_text
from .schema import schema_validate
from .suggestions import analyzer_for
from .suggestions import apply_suggestions as _apply_with

LOGGER = logging.getLogger(__name__)


class SuggestResult(BaseModel):
    """Provider used for analysis plus its suggestions and diagnostics."""

    model_config = ConfigDict(frozen=True)

    provider: Provider
    suggestions: tuple[Suggestion, ...] = Field(default_factory=tuple)
    messages: tuple[LintMessage, ...] = Field(default_factory=tuple)


def _resolve_provider(content: str, provider: Provider | str | None) -> Provider | None:
    try:
        return detect_provider(content, provider).provider
    except ValueError:
        LOGGER.warning("ignoring request for unknown provider %r", provider)
        return None


def _unknown_provider(provider: Provider | str | None) -> LintMessage:
    choices = ", ".join(member.value for member in Provider)
    return LintMessage(
        source=LintSource.PARSER,
        severity=Severity.ERROR,
        message=f"Unknown provider {provider!r}; expected one of {choices}",
        rule_id="unknown-provider",
    )


def suggest(content: str, provider: Provider | str | None = None) -> SuggestResult:
    """Analyse ``content`` and return indexed suggestions.

    The suggestion order is stable for identical input, so the indexes can be
    passed back to :func:`apply_suggestions`.

    Args:
        content: YAML document text.
        provider: Forced provider name or member; detected from ``content`` when omitted.

    Returns:
        SuggestResult: Suggestions and provider-schema messages. Generic
        documents produce neither. Unparsable input or an unknown provider
        yields a single error message.
    """

    resolved = _resolve_provider(content, provider)
    if resolved is None:
        return SuggestResult(provider=Provider.GENERIC, messages=(_unknown_provider(provider),))
    analyzer = analyzer_for(resolved)
    if analyzer is None:
        return SuggestResult(provider=resolved)
    try:
        document = round_trip_load(content)
    except yaml.YAMLError as exc:
        line, column = yaml_error_position(exc)
        message = LintMessage(
            source=LintSource.PARSER,
            severity=Severity.ERROR,
            message=yaml_error_text(exc),
            line=line,
            column=column,
            rule_id="parse-error",
            kind=MessageKind.SYNTAX,
        )
        return SuggestResult(provider=resolved, messages=(message,))
    analysis = analyzer.analyze(document)
    LOGGER.debug("%s analysis produced %d suggestions", resolved.value, len(analysis.planned))
    return SuggestResult(provider=resolved, suggestions=analysis.suggestions, messages=analysis.messages)


def apply_suggestions(content: str, indexes: list[int], provider: Provider | str | None = None) -> ApplyResult:
    """Apply the suggestions at ``indexes`` and return the updated content.

    Unknown providers and generic documents leave ``content`` unchanged.
    """

    resolved = _resolve_provider(content, provider)
    analyzer = None if resolved is None else analyzer_for(resolved)
    if analyzer is None:
        return ApplyResult(content=content)
    return _apply_with(content, indexes, analyzer)


def diff_preview(before: str, after: str, filename: str | None = None) -> str:
    """Return a unified diff labelled with ``filename`` for previewing a change."""

    if filename:
        return unified_diff(before, after, filename)
    return unified_diff(before, after)


__all__ = [
    "SuggestResult",
    "apply_suggestions",
    "auto_fix",
    "detect_provider",
    "diff_preview",
    "schema_validate",
    "suggest",
    "unified_diff",
    "validate",
]
