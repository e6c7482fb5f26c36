# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Validation commands for single files and directory trees."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer

from ...batch import validate_directory
from ...config import ValidateOptions
from ...orchestration import validate
from ..shared import EMOJI_OPTION, FILE_ARGUMENT, PROVIDER_OPTION, read_text

PARSE_TIMEOUT_OPTION = Annotated[
    int | None,
    typer.Option("--parse-timeout-ms", min=1, help="Parser time budget in milliseconds."),
]
RULESET_OPTION = Annotated[
    str | None,
    typer.Option("--ruleset", help="Spectral ruleset path; defaults to $SPECTRAL_RULESET."),
]
RELAX_OPTION = Annotated[
    bool,
    typer.Option("--relax-security", help="Downgrade format and binary checks to warnings."),
]


def validate_command(
    file: FILE_ARGUMENT,
    provider: PROVIDER_OPTION = None,
    parse_timeout_ms: PARSE_TIMEOUT_OPTION = None,
    ruleset: RULESET_OPTION = None,
    relax_security: RELAX_OPTION = False,
    emoji: EMOJI_OPTION = True,
) -> None:
    """Validate FILE and print the JSON result.

    Raises:
        typer.Exit: Exit status ``1`` when the document has errors.
    """

    content = read_text(file, use_emoji=emoji)
    options = ValidateOptions(
        provider=provider,
        filename=file.name,
        parse_timeout_ms=parse_timeout_ms,
        spectral_ruleset_path=ruleset,
        relax_security=relax_security,
    )
    result = validate(content, options)
    typer.echo(result.model_dump_json(indent=2, exclude_none=True))
    raise typer.Exit(code=0 if result.ok else 1)


def validate_dir_command(
    directory: Annotated[
        Path,
        typer.Argument(exists=True, file_okay=False, help="Directory to scan for *.yaml/*.yml files."),
    ],
    ruleset: RULESET_OPTION = None,
    relax_security: RELAX_OPTION = False,
) -> None:
    """Validate every YAML file below DIRECTORY and print the JSON report.

    Raises:
        typer.Exit: Exit status ``1`` when any file has errors.
    """

    options = ValidateOptions(spectral_ruleset_path=ruleset, relax_security=relax_security)
    report = validate_directory(directory, options)
    typer.echo(report.model_dump_json(indent=2, exclude_none=True))
    raise typer.Exit(code=0 if report.ok else 1)


def register(app: typer.Typer) -> None:
    """Register the validation commands on ``app``."""

    app.command("validate")(validate_command)
    app.command("validate-dir")(validate_dir_command)
