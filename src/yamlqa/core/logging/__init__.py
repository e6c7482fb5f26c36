# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Logging helpers for user-facing output."""

from .public import Status, emit, fail, info, ok, warn

__all__ = ["Status", "emit", "fail", "info", "ok", "warn"]
