# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Status lines for CLI users.

Everything here writes to standard error; standard output is reserved for
JSON results, diffs and fix identifiers.
"""

from __future__ import annotations

import sys
from enum import Enum

from rich.text import Text

from ...runtime.console.manager import detect_tty, get_console_manager


class Status(Enum):
    """Glyph and colour of each status line kind."""

    INFO = ("ℹ️ ", "cyan")
    OK = ("✅ ", "green")
    WARN = ("⚠️ ", "yellow")
    FAIL = ("❌ ", "red")

    def __init__(self, glyph: str, style: str) -> None:
        self.glyph = glyph
        self.style = style


def emit(status: Status, msg: str, *, use_emoji: bool, use_color: bool | None = None) -> None:
    """Print ``msg`` as a ``status`` line on standard error.

    Args:
        status: Kind of line, selecting its glyph and colour.
        msg: Message text.
        use_emoji: Prefix the line with the status glyph.
        use_color: Explicit colour flag; terminal detection decides when omitted.
    """

    colored = detect_tty(sys.stderr) if use_color is None else use_color
    console = get_console_manager().get(color=colored, emoji=use_emoji, stderr=True)
    line = Text(f"{status.glyph}{msg}" if use_emoji else msg)
    if colored:
        line.stylize(status.style)
    console.print(line)


def info(msg: str, *, use_emoji: bool, use_color: bool | None = None) -> None:
    """Emit an informational line."""

    emit(Status.INFO, msg, use_emoji=use_emoji, use_color=use_color)


def ok(msg: str, *, use_emoji: bool, use_color: bool | None = None) -> None:
    emit(Status.OK, msg, use_emoji=use_emoji, use_color=use_color)


def warn(msg: str, *, use_emoji: bool, use_color: bool | None = None) -> None:
    emit(Status.WARN, msg, use_emoji=use_emoji, use_color=use_color)


def fail(msg: str, *, use_emoji: bool, use_color: bool | None = None) -> None:
    """Emit an error line; callers decide the exit status."""

    emit(Status.FAIL, msg, use_emoji=use_emoji, use_color=use_color)


__all__ = ["Status", "emit", "fail", "info", "ok", "warn"]
