# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Provider schema download command."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer

from ...core.logging import fail, ok
from ...schema_fetch import default_out_dir, fetch_schemas
from ..shared import EMOJI_OPTION


def fetch_schemas_command(
    out_dir: Annotated[
        Path | None,
        typer.Option("--out-dir", file_okay=False, help="Output directory (default: $SCHEMAS_OUT_DIR or ./schemas)."),
    ] = None,
    emoji: EMOJI_OPTION = True,
) -> None:
    """Download the CloudFormation spec and Azure Pipelines schema.

    Raises:
        typer.Exit: Exit status ``1`` when any schema could not be fetched.
    """

    report = fetch_schemas(out_dir or default_out_dir())
    for name, path in report.written.items():
        ok(f"{name} schema written to {path}", use_emoji=emoji)
    for name in report.failed:
        fail(f"Unable to fetch the {name} schema", use_emoji=emoji)
    typer.echo(report.model_dump_json(indent=2))
    raise typer.Exit(code=0 if report.ok else 1)


def register(app: typer.Typer) -> None:
    """Register the fetch-schemas command on ``app``."""

    app.command("fetch-schemas")(fetch_schemas_command)
