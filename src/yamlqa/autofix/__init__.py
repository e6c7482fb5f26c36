# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Auto-fix pipeline."""

from __future__ import annotations

from .pipeline import STAGES, FixStage, auto_fix

__all__ = ["FixStage", "STAGES", "auto_fix"]
