# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Core data models shared across the yamlqa package."""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable
from enum import Enum
from typing import Final

from pydantic import BaseModel, ConfigDict, Field, computed_field
from typing_extensions import TypeAliasType

from yamlqa.core.severity import Severity

JsonScalar = TypeAliasType("JsonScalar", str | int | float | bool | None)
JsonValue = TypeAliasType(
    "JsonValue", "JsonScalar | list[JsonValue] | dict[str, JsonValue]"
)


class Provider(str, Enum):
    """Target platform dialect of a YAML document."""

    AWS = "aws"
    AZURE = "azure"
    GENERIC = "generic"


class LintSource(str, Enum):
    """Producer of a :class:`LintMessage`."""

    PARSER = "parser"
    PROVIDER_STRUCTURAL = "provider-structural"
    PROVIDER_SCHEMA = "provider-schema"
    STYLE = "style"
    RULE_ENGINE = "rule-engine"


# Merge order of the aggregated message stream.
SOURCE_PRIORITY: Final[tuple[LintSource, ...]] = (
    LintSource.PARSER,
    LintSource.PROVIDER_STRUCTURAL,
    LintSource.PROVIDER_SCHEMA,
    LintSource.STYLE,
    LintSource.RULE_ENGINE,
)


class MessageKind(str, Enum):
    """Broad category of a lint finding."""

    SYNTAX = "syntax"
    SEMANTIC = "semantic"
    STYLE = "style"


class LintMessage(BaseModel):
    """Normalized finding emitted by the guard, the parser, an analyzer or a tool."""

    model_config = ConfigDict(frozen=True)

    source: LintSource
    message: str
    severity: Severity
    path: str | None = None
    line: int | None = None
    column: int | None = None
    rule_id: str | None = None
    kind: MessageKind | None = None
    suggestion: str | None = None


class SourceCounts(BaseModel):
    """Per-source tally of findings by severity."""

    model_config = ConfigDict(frozen=True)

    errors: int = 0
    warnings: int = 0
    infos: int = 0


class ProviderSources(BaseModel):
    """Configuration sources that were in effect for a validation run."""

    model_config = ConfigDict(frozen=True)

    cfn_spec_path: str | None = None
    azure_schema_path: str | None = None
    spectral_ruleset_path: str | None = None
    cfn_lint_image: str | None = None


class ProviderSummary(BaseModel):
    """Provider classification plus per-source severity counts."""

    model_config = ConfigDict(frozen=True)

    provider: Provider
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)
    reasons: tuple[str, ...] = Field(default_factory=tuple)
    counts: dict[LintSource, SourceCounts] = Field(default_factory=dict)
    sources: ProviderSources = Field(default_factory=ProviderSources)


class ValidationResult(BaseModel):
    """Aggregate result of one validation call.

    ``ok`` is derived from ``messages`` and cannot be supplied independently.
    """

    model_config = ConfigDict(frozen=True)

    messages: tuple[LintMessage, ...] = Field(default_factory=tuple)
    provider_summary: ProviderSummary | None = None

    @computed_field  # type: ignore[prop-decorator]
    @property
    def ok(self) -> bool:
        """Return ``True`` when no message carries ``error`` severity."""

        return not any(message.severity is Severity.ERROR for message in self.messages)

    def by_source(self, source: LintSource) -> tuple[LintMessage, ...]:
        """Return messages produced by ``source`` preserving their order."""

        return tuple(message for message in self.messages if message.source is source)


def count_by_source(messages: Iterable[LintMessage]) -> dict[LintSource, SourceCounts]:
    """Return per-source severity counts for ``messages``.

    Args:
        messages: Messages to tally.

    Returns:
        dict[LintSource, SourceCounts]: Counts keyed by source in first-seen order.
    """

    tallies: dict[LintSource, Counter[Severity]] = {}
    for message in messages:
        tallies.setdefault(message.source, Counter())[message.severity] += 1
    return {
        source: SourceCounts(
            errors=tally[Severity.ERROR],
            warnings=tally[Severity.WARNING],
            infos=tally[Severity.INFO],
        )
        for source, tally in tallies.items()
    }


class SuggestionKind(str, Enum):
    """Category of a proposed document edit."""

    ADD = "add"
    RENAME = "rename"
    TYPE = "type"


class Suggestion(BaseModel):
    """Indexable, selectively-applicable edit proposed by an analyzer."""

    model_config = ConfigDict(frozen=True)

    path: str
    message: str
    kind: SuggestionKind
    confidence: float | None = Field(default=None, ge=0.0, le=1.0)


class ProviderDetection(BaseModel):
    """Outcome of provider detection."""

    model_config = ConfigDict(frozen=True)

    provider: Provider
    confidence: float = Field(ge=0.0, le=1.0)
    reasons: tuple[str, ...] = Field(default_factory=tuple)


class AutoFixResult(BaseModel):
    """Fixed document content and the ordered identifiers of applied fixes."""

    model_config = ConfigDict(frozen=True)

    content: str
    fixes_applied: tuple[str, ...] = Field(default_factory=tuple)


class ApplyResult(BaseModel):
    """Document content after applying selected suggestions."""

    model_config = ConfigDict(frozen=True)

    content: str
    applied: tuple[int, ...] = Field(default_factory=tuple)


__all__ = [
    "ApplyResult",
    "AutoFixResult",
    "JsonScalar",
    "JsonValue",
    "LintMessage",
    "LintSource",
    "MessageKind",
    "Provider",
    "ProviderDetection",
    "ProviderSources",
    "ProviderSummary",
    "SOURCE_PRIORITY",
    "SourceCounts",
    "Suggestion",
    "SuggestionKind",
    "ValidationResult",
    "count_by_source",
]
