# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Built-in external tool definitions and their invocation builders."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Final

from ..core.models import LintSource
from .runner import DEFAULT_TOOL_TIMEOUT_MS, ToolInvocation
from .sandbox import DEFAULT_YAMLLINT_IMAGE, SandboxPolicy


class OutputFormat(str, Enum):
    """Closed set of tool output conventions understood by the aggregator."""

    STYLE_TEXT = "style-text"
    STRUCTURAL_JSON = "structural-json"
    RULE_ENGINE_JSON = "rule-engine-json"


@dataclass(frozen=True, slots=True)
class ToolSpec:
    """Static description of an external linter."""

    name: str
    source: LintSource
    output_format: OutputFormat


YAMLLINT: Final[ToolSpec] = ToolSpec("yamllint", LintSource.STYLE, OutputFormat.STYLE_TEXT)
CFN_LINT: Final[ToolSpec] = ToolSpec("cfn-lint", LintSource.PROVIDER_STRUCTURAL, OutputFormat.STRUCTURAL_JSON)
SPECTRAL: Final[ToolSpec] = ToolSpec("spectral", LintSource.RULE_ENGINE, OutputFormat.RULE_ENGINE_JSON)

_YAMLLINT_ARGS: Final[tuple[str, ...]] = ("-f", "parsable", "-")
_SPECTRAL_PREFIX: Final[tuple[str, ...]] = ("-y", "spectral", "lint", "--stdin")


def yamllint_invocation(content: str, *, timeout_ms: int = DEFAULT_TOOL_TIMEOUT_MS) -> ToolInvocation:
    """Return the local yamllint call reading ``content`` from stdin."""

    return ToolInvocation(command="yamllint", args=_YAMLLINT_ARGS, stdin=content, timeout_ms=timeout_ms)


def yamllint_container_invocation(
    content: str,
    policy: SandboxPolicy,
    *,
    timeout_ms: int = DEFAULT_TOOL_TIMEOUT_MS,
) -> ToolInvocation:
    """Return the containerised yamllint fallback call."""

    command, args = policy.wrap("yamllint", _YAMLLINT_ARGS, image=DEFAULT_YAMLLINT_IMAGE, interactive=True)
    return ToolInvocation(command=command, args=args, stdin=content, timeout_ms=timeout_ms)


def cfn_lint_invocation(
    template_dir: Path,
    template_name: str,
    policy: SandboxPolicy,
    *,
    timeout_ms: int = DEFAULT_TOOL_TIMEOUT_MS,
) -> ToolInvocation:
    """Return the sandboxed cfn-lint call for ``template_dir / template_name``.

    Args:
        template_dir: Host directory holding the template, mounted into the container.
        template_name: File name of the template inside ``template_dir``.
        policy: Sandbox policy controlling network and mount mode.
        timeout_ms: Invocation timeout in milliseconds.

    Returns:
        ToolInvocation: Container engine invocation running cfn-lint.
    """

    command, args = policy.wrap("cfn-lint", ("-f", "json", template_name), mount=template_dir)
    return ToolInvocation(command=command, args=args, timeout_ms=timeout_ms)


def spectral_lint_invocation(
    content: str,
    ruleset: str,
    *,
    timeout_ms: int = DEFAULT_TOOL_TIMEOUT_MS,
) -> ToolInvocation:
    """Return the spectral lint call applying ``ruleset`` to ``content``."""

    args = (*_SPECTRAL_PREFIX, "-r", ruleset, "-f", "json")
    return ToolInvocation(command="npx", args=args, stdin=content, timeout_ms=timeout_ms)


def spectral_fix_invocation(
    content: str,
    ruleset: str | None,
    *,
    timeout_ms: int = DEFAULT_TOOL_TIMEOUT_MS,
) -> ToolInvocation:
    """Return the spectral ``--fix`` call emitting the fixed document on stdout."""

    args: tuple[str, ...] = (*_SPECTRAL_PREFIX, "--fix")
    if ruleset:
        args = (*args, "-r", ruleset)
    return ToolInvocation(command="npx", args=args, stdin=content, timeout_ms=timeout_ms)


def prettier_invocation(content: str, *, timeout_ms: int = DEFAULT_TOOL_TIMEOUT_MS) -> ToolInvocation:
    """Return the prettier YAML formatting call."""

    return ToolInvocation(
        command="prettier",
        args=("--parser", "yaml", "--stdin-filepath", "document.yaml"),
        stdin=content,
        timeout_ms=timeout_ms,
    )


__all__ = [
    "CFN_LINT",
    "OutputFormat",
    "SPECTRAL",
    "ToolSpec",
    "YAMLLINT",
    "cfn_lint_invocation",
    "prettier_invocation",
    "spectral_fix_invocation",
    "spectral_lint_invocation",
    "yamllint_container_invocation",
    "yamllint_invocation",
]
