# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Process execution helpers."""

from .process import NOT_FOUND_EXIT_CODE, TIMEOUT_EXIT_CODE, CommandOptions, run_command

__all__ = [
    "CommandOptions",
    "NOT_FOUND_EXIT_CODE",
    "TIMEOUT_EXIT_CODE",
    "run_command",
]
