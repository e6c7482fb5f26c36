# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Unified diff rendering."""

from __future__ import annotations

import difflib
from typing import Final

DEFAULT_LABEL: Final[str] = "file.yaml"
CONTEXT_LINES: Final[int] = 3
NO_NEWLINE_MARKER: Final[str] = "\\ No newline at end of file\n"


def unified_diff(before: str, after: str, label: str = DEFAULT_LABEL) -> str:
    """Return a three-line-context unified diff of ``before`` and ``after``.

    Headers carry ``<label> (before)``/``<label> (after)`` and no timestamps, so
    the output depends only on the inputs. Identical inputs produce ``""``.

    Args:
        before: Original text.
        after: Updated text.
        label: File name shown in the headers.

    Returns:
        str: Diff text, newline terminated when non-empty.
    """

    chunks: list[str] = []
    for line in difflib.unified_diff(
        before.splitlines(keepends=True),
        after.splitlines(keepends=True),
        fromfile=f"{label} (before)",
        tofile=f"{label} (after)",
        fromfiledate="",
        tofiledate="",
        n=CONTEXT_LINES,
    ):
        if line.endswith("\n"):
            chunks.append(line)
        else:
            chunks.append(f"{line}\n{NO_NEWLINE_MARKER}")
    return "".join(chunks)


__all__ = ["unified_diff"]
