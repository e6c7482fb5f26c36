# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Shared types for provider-aware suggestion analyzers."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from difflib import SequenceMatcher, get_close_matches
from typing import Final, Protocol

from ..core.models import LintMessage, LintSource, MessageKind, Provider, Suggestion, SuggestionKind
from ..core.severity import Severity

RENAME_CUTOFF: Final[float] = 0.6

PathSegment = str | int
DocumentPath = tuple[PathSegment, ...]


def format_path(path: Sequence[PathSegment]) -> str:
    """Render ``path`` as a dot/bracket address such as ``jobs[0].steps``."""

    rendered = ""
    for segment in path:
        if isinstance(segment, int):
            rendered += f"[{segment}]"
        else:
            rendered += f".{segment}" if rendered else segment
    return rendered


def similarity(left: str, right: str) -> float:
    """Return the case-insensitive similarity ratio of ``left`` and ``right``."""

    return SequenceMatcher(None, left.lower(), right.lower()).ratio()


def closest_match(
    word: str,
    candidates: Iterable[str],
    *,
    cutoff: float = RENAME_CUTOFF,
) -> tuple[str, float] | None:
    """Return the candidate closest to ``word`` and its similarity ratio.

    Args:
        word: Unknown key or value.
        candidates: Known vocabulary.
        cutoff: Minimum similarity for a candidate to qualify.

    Returns:
        tuple[str, float] | None: Best candidate and rounded ratio, or ``None``
        when nothing reaches ``cutoff``.
    """

    by_lower: dict[str, str] = {}
    for candidate in candidates:
        by_lower.setdefault(candidate.lower(), candidate)
    if not by_lower:
        return None
    matches = get_close_matches(word.lower(), list(by_lower), n=1, cutoff=cutoff)
    if not matches:
        return None
    best = by_lower[matches[0]]
    return best, round(similarity(word, best), 3)


@dataclass(frozen=True, slots=True)
class RenameKey:
    """Rename the mapping key addressed by ``path`` to ``new_key``."""

    path: DocumentPath
    new_key: str


@dataclass(frozen=True, slots=True)
class ReplaceScalar:
    """Replace the scalar value addressed by ``path``."""

    path: DocumentPath
    value: object


@dataclass(frozen=True, slots=True)
class AddEntry:
    """Insert ``key: value`` into the mapping addressed by ``path``."""

    path: DocumentPath
    key: str
    value: object = None


DocumentEdit = RenameKey | ReplaceScalar | AddEntry


@dataclass(frozen=True, slots=True)
class PlannedSuggestion:
    """Suggestion paired with the edit that applies it, when one exists."""

    suggestion: Suggestion
    edit: DocumentEdit | None = None


@dataclass(frozen=True, slots=True)
class AnalysisResult:
    """Suggestions and diagnostic messages produced by one analysis."""

    planned: tuple[PlannedSuggestion, ...] = field(default_factory=tuple)
    messages: tuple[LintMessage, ...] = field(default_factory=tuple)

    @property
    def suggestions(self) -> tuple[Suggestion, ...]:
        """Return the public suggestion list in index order."""

        return tuple(item.suggestion for item in self.planned)


class Analyzer(Protocol):
    """Provider-specific structural analyzer."""

    provider: Provider

    def analyze(self, document: object) -> AnalysisResult:
        """Return suggestions and messages for a parsed ``document``."""
        ...


@dataclass(slots=True)
class AnalysisBuilder:
    """Accumulate planned suggestions and messages during one tree walk."""

    planned: list[PlannedSuggestion] = field(default_factory=list)
    messages: list[LintMessage] = field(default_factory=list)

    def suggest(
        self,
        path: Sequence[PathSegment],
        message: str,
        kind: SuggestionKind,
        *,
        edit: DocumentEdit | None = None,
        confidence: float | None = None,
    ) -> None:
        suggestion = Suggestion(path=format_path(path), message=message, kind=kind, confidence=confidence)
        self.planned.append(PlannedSuggestion(suggestion=suggestion, edit=edit))

    def report(
        self,
        path: Sequence[PathSegment],
        message: str,
        *,
        severity: Severity = Severity.WARNING,
        suggestion: str | None = None,
        rule_id: str | None = None,
    ) -> None:
        self.messages.append(
            LintMessage(
                source=LintSource.PROVIDER_SCHEMA,
                severity=severity,
                message=message,
                path=format_path(path) or None,
                rule_id=rule_id,
                kind=MessageKind.SEMANTIC,
                suggestion=suggestion,
            ),
        )

    def build(self) -> AnalysisResult:
        return AnalysisResult(planned=tuple(self.planned), messages=tuple(self.messages))


def type_name(value: object) -> str:
    """Return a YAML-flavoured name for the runtime type of ``value``."""

    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "list"
    if isinstance(value, dict):
        return "mapping"
    return type(value).__name__


__all__ = [
    "AddEntry",
    "AnalysisBuilder",
    "AnalysisResult",
    "Analyzer",
    "DocumentEdit",
    "DocumentPath",
    "PathSegment",
    "PlannedSuggestion",
    "RENAME_CUTOFF",
    "RenameKey",
    "ReplaceScalar",
    "closest_match",
    "format_path",
    "similarity",
    "type_name",
]
