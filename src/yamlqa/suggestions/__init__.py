# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Provider-aware analyzers that propose and apply document edits."""

from __future__ import annotations

from ..core.models import Provider
from .apply import apply_edits, apply_suggestions
from .azure import AzurePipelinesAnalyzer
from .base import (
    AddEntry,
    AnalysisResult,
    Analyzer,
    PlannedSuggestion,
    RenameKey,
    ReplaceScalar,
    closest_match,
    format_path,
)
from .cfn import CloudFormationAnalyzer


def analyzer_for(provider: Provider) -> Analyzer | None:
    """Return a fresh analyzer for ``provider``; generic documents have none."""

    if provider is Provider.AWS:
        return CloudFormationAnalyzer()
    if provider is Provider.AZURE:
        return AzurePipelinesAnalyzer()
    return None


__all__ = [
    "AddEntry",
    "AnalysisResult",
    "Analyzer",
    "AzurePipelinesAnalyzer",
    "CloudFormationAnalyzer",
    "PlannedSuggestion",
    "RenameKey",
    "ReplaceScalar",
    "analyzer_for",
    "apply_edits",
    "apply_suggestions",
    "closest_match",
    "format_path",
]
