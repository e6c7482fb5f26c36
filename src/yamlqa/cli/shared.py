# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Shared option types and helpers for CLI commands."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated, Final

import typer

from ..core.logging import fail
from ..core.models import Provider

USAGE_EXIT_CODE: Final[int] = 2

FILE_ARGUMENT = Annotated[
    Path,
    typer.Argument(exists=True, dir_okay=False, readable=True, help="YAML file to process."),
]
PROVIDER_OPTION = Annotated[
    Provider | None,
    typer.Option("--provider", "-p", help="Force the provider instead of detecting it."),
]
EMOJI_OPTION = Annotated[
    bool,
    typer.Option("--emoji/--no-emoji", help="Toggle emoji output."),
]


def read_text(path: Path, *, use_emoji: bool) -> str:
    """Return the UTF-8 text of ``path`` or exit with a usage error.

    Raises:
        typer.Exit: When the file cannot be read or decoded.
    """

    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        fail(f"Unable to read {path}: {exc}", use_emoji=use_emoji)
        raise typer.Exit(code=USAGE_EXIT_CODE) from exc


def write_text(path: Path, content: str, *, use_emoji: bool) -> None:
    """Write ``content`` to ``path`` or exit with an error status.

    Raises:
        typer.Exit: When the file cannot be written.
    """

    try:
        path.write_text(content, encoding="utf-8")
    except OSError as exc:
        fail(f"Unable to write {path}: {exc}", use_emoji=use_emoji)
        raise typer.Exit(code=1) from exc


__all__ = [
    "EMOJI_OPTION",
    "FILE_ARGUMENT",
    "PROVIDER_OPTION",
    "USAGE_EXIT_CODE",
    "read_text",
    "write_text",
]
