# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""CLI command registry."""

from __future__ import annotations

import typer

from . import convert, fetch, fix, schema, suggest, validate

__all__ = ["register_commands"]


def register_commands(app: typer.Typer) -> None:
    """Register every built-in command on ``app``.

    Args:
        app: Typer application receiving command registrations.
    """

    validate.register(app)
    fix.register(app)
    suggest.register(app)
    schema.register(app)
    convert.register(app)
    fetch.register(app)
