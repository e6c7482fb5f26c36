# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""YAML validation and remediation engine."""

from __future__ import annotations

from importlib import metadata

from .config import AutoFixOptions, ValidateOptions
from .core.models import (
    ApplyResult,
    AutoFixResult,
    LintMessage,
    LintSource,
    Provider,
    Suggestion,
    SuggestionKind,
    ValidationResult,
)
from .core.severity import Severity
from .sdk import (
    SuggestResult,
    apply_suggestions,
    auto_fix,
    detect_provider,
    diff_preview,
    schema_validate,
    suggest,
    unified_diff,
    validate,
)

try:
    __version__ = metadata.version("yamlqa")
except metadata.PackageNotFoundError:  # pragma: no cover - local development fallback
    __version__ = "0.0.0"

__all__ = [
    "ApplyResult",
    "AutoFixOptions",
    "AutoFixResult",
    "LintMessage",
    "LintSource",
    "Provider",
    "Severity",
    "SuggestResult",
    "Suggestion",
    "SuggestionKind",
    "ValidateOptions",
    "ValidationResult",
    "__version__",
    "apply_suggestions",
    "auto_fix",
    "detect_provider",
    "diff_preview",
    "schema_validate",
    "suggest",
    "unified_diff",
    "validate",
]
