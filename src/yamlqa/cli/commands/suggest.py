# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Interactive-free suggestion listing and application."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Annotated, Final

import typer

from ...core.logging import info, ok, warn
from ...core.models import Provider, Suggestion, SuggestionKind
from ...diffing import unified_diff
from ...sdk import apply_suggestions, suggest
from ..shared import EMOJI_OPTION, FILE_ARGUMENT, PROVIDER_OPTION, USAGE_EXIT_CODE, read_text, write_text

SAFE_CONFIDENCE: Final[float] = 0.8
SAFE_KINDS: Final[frozenset[SuggestionKind]] = frozenset({SuggestionKind.RENAME, SuggestionKind.ADD})


def format_suggestion(index: int, suggestion: Suggestion) -> str:
    """Return the one-line listing for ``suggestion``."""

    confidence = "" if suggestion.confidence is None else f" (conf={suggestion.confidence:.2f})"
    return f"[{index}] {suggestion.kind.value.upper()} {suggestion.path} - {suggestion.message}{confidence}"


def safe_indexes(suggestions: Sequence[Suggestion]) -> list[int]:
    """Return indexes of rename/add suggestions with confidence of at least 0.8."""

    return [
        index
        for index, suggestion in enumerate(suggestions)
        if suggestion.kind in SAFE_KINDS and (suggestion.confidence or 0.0) >= SAFE_CONFIDENCE
    ]


def parse_indexes(raw: str) -> list[int]:
    """Parse a comma-separated index list such as ``"0, 2"``.

    Raises:
        typer.BadParameter: If an entry is not a non-negative integer.
    """

    indexes: list[int] = []
    for part in raw.split(","):
        token = part.strip()
        if not token:
            continue
        if not token.isdigit():
            raise typer.BadParameter(f"'{token}' is not a suggestion index", param_hint="--apply")
        indexes.append(int(token))
    return indexes


def suggest_command(
    file: FILE_ARGUMENT,
    provider: PROVIDER_OPTION = None,
    apply_all: Annotated[bool, typer.Option("--apply-all", help="Apply every suggestion with a fix.")] = False,
    apply_safe_only: Annotated[
        bool,
        typer.Option("--apply-safe-only", help="Apply rename/add suggestions with confidence >= 0.8."),
    ] = False,
    apply: Annotated[
        str | None,
        typer.Option("--apply", help="Comma-separated suggestion indexes to apply."),
    ] = None,
    emoji: EMOJI_OPTION = True,
) -> None:
    """List structural suggestions for FILE and optionally apply them."""

    if sum((apply_all, apply_safe_only, apply is not None)) > 1:
        warn("Use only one of --apply-all, --apply-safe-only and --apply", use_emoji=emoji)
        raise typer.Exit(code=USAGE_EXIT_CODE)
    selected_raw = parse_indexes(apply) if apply is not None else None

    content = read_text(file, use_emoji=emoji)
    result = suggest(content, provider)
    if result.provider is Provider.GENERIC:
        info("Generic YAML detected; suggestions cover CloudFormation and Azure Pipelines only", use_emoji=emoji)
        return
    for message in result.messages:
        warn(message.message, use_emoji=emoji)
    if not result.suggestions:
        ok("No suggestions found", use_emoji=emoji)
        return

    typer.echo(f"Provider: {result.provider.value}")
    for index, suggestion in enumerate(result.suggestions):
        typer.echo(format_suggestion(index, suggestion))

    if apply_all:
        selected = list(range(len(result.suggestions)))
    elif apply_safe_only:
        selected = safe_indexes(result.suggestions)
    else:
        selected = selected_raw or []
    if not selected:
        return

    applied = apply_suggestions(content, selected, result.provider)
    if not applied.applied:
        warn("No changes applied", use_emoji=emoji)
        return
    write_text(file, applied.content, use_emoji=emoji)
    typer.echo(unified_diff(content, applied.content, file.name), nl=False)
    ok(f"Applied {len(applied.applied)} suggestion(s) to {file}", use_emoji=emoji)


def register(app: typer.Typer) -> None:
    """Register the suggest command on ``app``."""

    app.command("suggest")(suggest_command)
