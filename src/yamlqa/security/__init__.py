# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Input screening applied before parsing or tool execution."""

from __future__ import annotations

from .guard import GuardReport, GuardViolation, count_lines, guard, sanitize_snippet

__all__ = ["GuardReport", "GuardViolation", "count_lines", "guard", "sanitize_snippet"]
