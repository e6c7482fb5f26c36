# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Auto-fix command."""

from __future__ import annotations

from typing import Annotated

import typer

from ...autofix import auto_fix
from ...config import AutoFixOptions
from ...core.logging import info, ok
from ...diffing import unified_diff
from ..shared import EMOJI_OPTION, FILE_ARGUMENT, read_text, write_text


def fix_command(
    file: FILE_ARGUMENT,
    spectral_fix: Annotated[
        bool,
        typer.Option("--spectral-fix/--no-spectral-fix", help="Run the rule-engine fixer."),
    ] = False,
    no_prettier: Annotated[bool, typer.Option("--no-prettier", help="Skip the prettier formatting stage.")] = False,
    no_cfn_fix: Annotated[bool, typer.Option("--no-cfn-fix", help="Skip CloudFormation typo repairs.")] = False,
    dry_run: Annotated[bool, typer.Option("--dry-run", help="Print the diff without writing FILE.")] = False,
    emoji: EMOJI_OPTION = True,
) -> None:
    """Apply the auto-fix pipeline to FILE."""

    content = read_text(file, use_emoji=emoji)
    options = AutoFixOptions(prettier=not no_prettier, spectral_fix=spectral_fix, cfn_fix=not no_cfn_fix)
    result = auto_fix(content, options)
    if result.content == content:
        info(f"{file} is already clean", use_emoji=emoji)
        return
    if dry_run:
        typer.echo(unified_diff(content, result.content, file.name), nl=False)
        return
    write_text(file, result.content, use_emoji=emoji)
    for fix_id in result.fixes_applied:
        typer.echo(fix_id)
    ok(f"Applied {len(result.fixes_applied)} fix(es) to {file}", use_emoji=emoji)


def register(app: typer.Typer) -> None:
    """Register the fix command on ``app``."""

    app.command("fix")(fix_command)
