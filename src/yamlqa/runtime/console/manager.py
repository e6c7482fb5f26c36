# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Rich console provisioning for CLI status output."""

from __future__ import annotations

import sys
from functools import lru_cache
from typing import Literal, TextIO

from rich.console import Console

ColorSystem = Literal["auto", "standard", "256", "truecolor", "windows"]


def detect_tty(stream: TextIO | None = None) -> bool:
    """Return ``True`` when ``stream`` (stdout by default) is attached to a terminal."""

    target = sys.stdout if stream is None else stream
    try:
        return target.isatty()
    except (AttributeError, ValueError):
        return False


class RichConsoleManager:
    """Hand out one cached :class:`Console` per output stream and presentation mode."""

    def __init__(self) -> None:
        self._consoles: dict[tuple[bool, bool, bool, bool], Console] = {}

    def get(self, *, color: bool, emoji: bool, stderr: bool = False) -> Console:
        """Return the console for the requested presentation.

        Args:
            color: Enable ANSI colour when the stream is a terminal.
            emoji: Let Rich render ``:emoji:`` codes.
            stderr: Write to standard error instead of standard output.

        Returns:
            Console: Console bound lazily to the live ``sys`` stream, so
            redirected streams (for example under test runners) are honoured.
        """

        terminal = detect_tty(sys.stderr if stderr else sys.stdout)
        key = (color, emoji, stderr, terminal)
        console = self._consoles.get(key)
        if console is None:
            colored = color and terminal
            color_system: ColorSystem | None = "auto" if colored else None
            console = Console(
                stderr=stderr,
                color_system=color_system,
                force_terminal=terminal,
                no_color=not colored,
                emoji=emoji,
                soft_wrap=True,
            )
            self._consoles[key] = console
        return console


@lru_cache(maxsize=1)
def get_console_manager() -> RichConsoleManager:
    """Return the process-wide console manager."""

    return RichConsoleManager()


__all__ = ["RichConsoleManager", "detect_tty", "get_console_manager"]
