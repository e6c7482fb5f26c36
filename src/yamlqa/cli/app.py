# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""CLI application entry point wiring commands and shared options."""

from __future__ import annotations

import logging
from typing import Annotated

import typer

from .commands import register_commands

app = typer.Typer(
    help="Validate, repair and explain YAML documents.",
    no_args_is_help=True,
    add_completion=False,
)


@app.callback()
def main(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Log engine diagnostics to stderr.")] = False,
) -> None:
    """Configure process logging before a command runs."""

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


register_commands(app)

__all__ = ["app"]
