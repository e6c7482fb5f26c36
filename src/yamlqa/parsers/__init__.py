# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Public parser exports for converting tool output into lint messages."""

from __future__ import annotations

from .base import JsonParser, Parser, TextParser
from .yaml_tools import PARSERS, parse_cfn_lint, parse_spectral, parse_yamllint, parser_for

__all__ = [
    "JsonParser",
    "PARSERS",
    "Parser",
    "TextParser",
    "parse_cfn_lint",
    "parse_spectral",
    "parse_yamllint",
    "parser_for",
]
