# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""JSON Schema validation command."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Annotated

import typer

from ...core.logging import fail
from ...schema import schema_validate
from ..shared import EMOJI_OPTION, FILE_ARGUMENT, USAGE_EXIT_CODE, read_text


def schema_command(
    file: FILE_ARGUMENT,
    schema_file: Annotated[
        Path,
        typer.Argument(exists=True, dir_okay=False, readable=True, help="JSON Schema document."),
    ],
    emoji: EMOJI_OPTION = True,
) -> None:
    """Validate FILE against the JSON Schema in SCHEMA_FILE.

    Raises:
        typer.Exit: Exit status ``1`` on schema violations, ``2`` when the
            schema file is not JSON.
    """

    content = read_text(file, use_emoji=emoji)
    try:
        schema = json.loads(read_text(schema_file, use_emoji=emoji))
    except json.JSONDecodeError as exc:
        fail(f"{schema_file} is not valid JSON: {exc}", use_emoji=emoji)
        raise typer.Exit(code=USAGE_EXIT_CODE) from exc
    result = schema_validate(content, schema)
    typer.echo(result.model_dump_json(indent=2, exclude_none=True))
    raise typer.Exit(code=0 if result.ok else 1)


def register(app: typer.Typer) -> None:
    """Register the schema command on ``app``."""

    app.command("schema")(schema_command)
