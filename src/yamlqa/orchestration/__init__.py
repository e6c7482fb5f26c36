# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Validation orchestration and result aggregation."""

from __future__ import annotations

from .aggregate import build_summary, merge_messages
from .orchestrator import Orchestrator, TaskOutcome, TaskStatus, ValidationTask, run_tasks, validate

__all__ = [
    "Orchestrator",
    "TaskOutcome",
    "TaskStatus",
    "ValidationTask",
    "build_summary",
    "merge_messages",
    "run_tasks",
    "validate",
]
