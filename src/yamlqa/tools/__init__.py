# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""External tool runners, sandboxing and built-in tool definitions."""

from __future__ import annotations

from .builtins import CFN_LINT, SPECTRAL, YAMLLINT, OutputFormat, ToolSpec
from .runner import (
    CannedToolRunner,
    ProcessToolRunner,
    RecordedCall,
    ToolInvocation,
    ToolResult,
    ToolRunner,
    invoke,
)
from .sandbox import SandboxPolicy

__all__ = [
    "CFN_LINT",
    "CannedToolRunner",
    "OutputFormat",
    "ProcessToolRunner",
    "RecordedCall",
    "SPECTRAL",
    "SandboxPolicy",
    "ToolInvocation",
    "ToolResult",
    "ToolRunner",
    "ToolSpec",
    "YAMLLINT",
    "invoke",
]
