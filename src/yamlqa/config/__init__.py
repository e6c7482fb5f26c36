# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Configuration surface for yamlqa requests."""

from __future__ import annotations

from .models import (
    DEFAULT_MAX_BYTES,
    DEFAULT_MAX_LINES,
    AutoFixOptions,
    EngineEnvironment,
    GuardLimits,
    ValidateOptions,
)

__all__ = [
    "AutoFixOptions",
    "DEFAULT_MAX_BYTES",
    "DEFAULT_MAX_LINES",
    "EngineEnvironment",
    "GuardLimits",
    "ValidateOptions",
]
