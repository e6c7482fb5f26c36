# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Severity related types and helpers."""

from __future__ import annotations

from collections.abc import Mapping
from enum import Enum
from typing import Final


class Severity(str, Enum):
    """Canonical severity levels normalising different tool vocabularies."""

    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


SeverityLabel = str | int | float | None

YAMLLINT_SEVERITY_MAP: Final[dict[str, Severity]] = {
    "error": Severity.ERROR,
    "warning": Severity.WARNING,
}
CFN_LINT_SEVERITY_MAP: Final[dict[str, Severity]] = {
    "error": Severity.ERROR,
    "warning": Severity.WARNING,
    "informational": Severity.INFO,
    "info": Severity.INFO,
}
# Spectral reports DiagnosticSeverity numbers: 0 error, 1 warning, 2 info, 3 hint.
SPECTRAL_SEVERITY_MAP: Final[dict[int, Severity]] = {
    0: Severity.ERROR,
    1: Severity.WARNING,
    2: Severity.INFO,
    3: Severity.INFO,
}


def normalize_severity(
    label: SeverityLabel,
    mapping: Mapping[str, Severity] | Mapping[int, Severity],
    default: Severity = Severity.INFO,
) -> Severity:
    """Return a :class:`Severity` derived from a tool-specific ``label``.

    String labels are matched case-insensitively; numeric labels are matched
    by their integer value. Booleans are never treated as numeric levels.

    Args:
        label: Severity label reported by the tool.
        mapping: Tool vocabulary keyed by lower-case labels or integer levels.
        default: Severity returned when ``label`` is not recognised.

    Returns:
        Severity: Canonical severity for ``label``.
    """

    if isinstance(label, bool) or label is None:
        return default
    if isinstance(label, str):
        stripped = label.strip()
        if stripped.lstrip("-").isdigit():
            return mapping.get(int(stripped), default)  # type: ignore[call-overload]
        return mapping.get(stripped.lower(), default)  # type: ignore[call-overload]
    if isinstance(label, (int, float)):
        return mapping.get(int(label), default)  # type: ignore[call-overload]
    return default


__all__ = [
    "CFN_LINT_SEVERITY_MAP",
    "SPECTRAL_SEVERITY_MAP",
    "Severity",
    "SeverityLabel",
    "YAMLLINT_SEVERITY_MAP",
    "normalize_severity",
]
