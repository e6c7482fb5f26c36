# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Merge per-source message lists and build the provider summary."""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence

from ..core.models import (
    SOURCE_PRIORITY,
    LintMessage,
    LintSource,
    ProviderDetection,
    ProviderSources,
    ProviderSummary,
    count_by_source,
)


def merge_messages(batches: Iterable[Sequence[LintMessage]]) -> tuple[LintMessage, ...]:
    """Return ``batches`` flattened and ordered by source priority.

    Messages keep their relative order within a source; batches are
    considered in the order given, so the result is deterministic for a
    deterministic input order.

    Args:
        batches: Message lists, one per producer.

    Returns:
        tuple[LintMessage, ...]: Parser messages first, then structural,
        provider-schema, style and rule-engine messages.
    """

    grouped: dict[LintSource, list[LintMessage]] = {source: [] for source in SOURCE_PRIORITY}
    for batch in batches:
        for message in batch:
            grouped.setdefault(message.source, []).append(message)
    return tuple(message for source in SOURCE_PRIORITY for message in grouped[source])


def build_summary(
    detection: ProviderDetection,
    messages: Sequence[LintMessage],
    sources: ProviderSources | Mapping[str, str | None] | None = None,
) -> ProviderSummary:
    """Return the provider summary for a validation run.

    Args:
        detection: Provider classification of the document.
        messages: Final merged message stream.
        sources: Configuration sources that were in effect.

    Returns:
        ProviderSummary: Provider, confidence, reasons and per-source counts.
    """

    if sources is None:
        resolved = ProviderSources()
    elif isinstance(sources, ProviderSources):
        resolved = sources
    else:
        resolved = ProviderSources.model_validate(dict(sources))
    return ProviderSummary(
        provider=detection.provider,
        confidence=detection.confidence,
        reasons=detection.reasons,
        counts=count_by_source(messages),
        sources=resolved,
    )


__all__ = ["build_summary", "merge_messages"]
