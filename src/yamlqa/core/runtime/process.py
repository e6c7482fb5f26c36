# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Subprocess execution for external linters and formatters."""

from __future__ import annotations

import shutil

# Bandit: this module is the single controlled entry point for launching
# linters; commands are argument lists and ``shell=True`` is never used.
import subprocess  # nosec B404
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path
from subprocess import CompletedProcess
from typing import Final

from ...errors import ToolExecutionError

TIMEOUT_EXIT_CODE: Final[int] = 124
NOT_FOUND_EXIT_CODE: Final[int] = 127


@dataclass(frozen=True, slots=True)
class CommandOptions:
    """Execution settings for :func:`run_command`.

    Attributes:
        cwd: Working directory of the child process.
        env: Complete environment for the child; inherited when ``None``.
        check: Raise :class:`ToolExecutionError` on a non-zero exit status.
        timeout: Wall-clock limit in seconds.
        input_text: Text written to the child's stdin; stdin is closed when ``None``.
    """

    cwd: Path | None = None
    env: Mapping[str, str] | None = None
    check: bool = False
    timeout: float | None = None
    input_text: str | None = None


def resolve_executable(args: Sequence[str]) -> list[str]:
    """Return ``args`` with the executable resolved against ``PATH``.

    Raises:
        ValueError: If ``args`` is empty.
        FileNotFoundError: If the executable is not installed.
    """

    if not args:
        raise ValueError("a command needs at least the executable name")
    executable, *rest = args
    if Path(executable).is_absolute():
        return [executable, *rest]
    located = shutil.which(executable)
    if located is None:
        raise FileNotFoundError(f"Executable '{executable}' was not found on PATH")
    return [located, *rest]


def _text(stream: str | bytes | None) -> str:
    if stream is None:
        return ""
    if isinstance(stream, bytes):
        return stream.decode(errors="replace")
    return stream


def _timed_out(argv: list[str], exc: subprocess.TimeoutExpired, timeout: float | None) -> CompletedProcess[str]:
    note = "Command timed out" if timeout is None else f"Command timed out after {timeout:.1f}s"
    partial = _text(exc.stderr)
    return CompletedProcess(
        args=argv,
        returncode=TIMEOUT_EXIT_CODE,
        stdout=_text(exc.stdout),
        stderr=f"{partial}\n{note}" if partial else note,
    )


def run_command(args: Sequence[str], *, options: CommandOptions | None = None) -> CompletedProcess[str]:
    """Run ``args`` and capture its text output.

    Exceeding the timeout kills the child and yields a completed process with
    exit status ``124`` instead of raising.

    Args:
        args: Executable followed by its arguments.
        options: Execution settings; defaults apply when omitted.

    Returns:
        CompletedProcess[str]: Exit status and captured streams.

    Raises:
        FileNotFoundError: If the executable is not installed.
        ToolExecutionError: If ``options.check`` is set and the exit status is non-zero.
    """

    argv = resolve_executable(args)
    opts = options or CommandOptions()
    try:
        completed: CompletedProcess[str] = subprocess.run(  # nosec B603
            argv,
            cwd=None if opts.cwd is None else str(opts.cwd),
            env=None if opts.env is None else dict(opts.env),
            capture_output=True,
            text=True,
            check=False,
            timeout=opts.timeout,
            input=opts.input_text,
            stdin=subprocess.DEVNULL if opts.input_text is None else None,
        )
    except subprocess.TimeoutExpired as exc:
        completed = _timed_out(argv, exc, opts.timeout)

    if opts.check and completed.returncode != 0:
        raise ToolExecutionError(argv, completed.returncode, completed.stdout, completed.stderr)
    return completed


__all__ = [
    "CommandOptions",
    "NOT_FOUND_EXIT_CODE",
    "TIMEOUT_EXIT_CODE",
    "resolve_executable",
    "run_command",
]
