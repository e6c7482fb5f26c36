# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Format conversion command."""

from __future__ import annotations

import json
from enum import Enum
from typing import Annotated

import typer
import yaml

from ...convert import json_to_yaml, yaml_to_json
from ...core.logging import fail
from ..shared import EMOJI_OPTION, FILE_ARGUMENT, read_text


class TargetFormat(str, Enum):
    """Output format of the convert command."""

    JSON = "json"
    YAML = "yaml"


def convert_command(
    file: FILE_ARGUMENT,
    to: Annotated[TargetFormat, typer.Option("--to", help="Output format.")] = TargetFormat.JSON,
    emoji: EMOJI_OPTION = True,
) -> None:
    """Print FILE converted to JSON or YAML."""

    content = read_text(file, use_emoji=emoji)
    try:
        converted = yaml_to_json(content) + "\n" if to is TargetFormat.JSON else json_to_yaml(content)
    except (yaml.YAMLError, json.JSONDecodeError) as exc:
        fail(f"Cannot convert {file}: {exc}", use_emoji=emoji)
        raise typer.Exit(code=1) from exc
    typer.echo(converted, nl=False)


def register(app: typer.Typer) -> None:
    """Register the convert command on ``app``."""

    app.command("convert")(convert_command)
