# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Process invocation interface shared by every external linter call.

Runners always resolve: a non-zero exit code is data, not a failure signal,
because linters use exit codes to report findings.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from threading import Lock
from typing import Final, Protocol, runtime_checkable

from ..core.runtime.process import NOT_FOUND_EXIT_CODE, TIMEOUT_EXIT_CODE, CommandOptions, run_command

LOGGER = logging.getLogger(__name__)

DEFAULT_TOOL_TIMEOUT_MS: Final[int] = 10_000
TOOL_ERROR_EXIT_CODE: Final[int] = 1


@dataclass(frozen=True, slots=True)
class ToolInvocation:
    """Describe one external command call."""

    command: str
    args: tuple[str, ...] = ()
    stdin: str | None = None
    timeout_ms: int = DEFAULT_TOOL_TIMEOUT_MS
    cwd: Path | None = None

    @property
    def argv(self) -> tuple[str, ...]:
        """Return the full argument vector including the command."""

        return (self.command, *self.args)


@dataclass(frozen=True, slots=True)
class ToolResult:
    """Exit code and captured streams of a tool invocation."""

    code: int
    stdout: str = ""
    stderr: str = ""

    @property
    def timed_out(self) -> bool:
        """Return ``True`` when the invocation hit its timeout."""

        return self.code == TIMEOUT_EXIT_CODE

    @property
    def unavailable(self) -> bool:
        """Return ``True`` when the executable could not be launched."""

        return self.code == NOT_FOUND_EXIT_CODE


@runtime_checkable
class ToolRunner(Protocol):
    """Callable surface for running external commands."""

    def run(
        self,
        command: str,
        args: Sequence[str],
        *,
        input: str | None = None,
        timeout_ms: int | None = None,
        cwd: Path | None = None,
    ) -> ToolResult:
        """Execute ``command`` with ``args`` and return its result.

        Args:
            command: Executable name or path.
            args: Arguments passed to the executable.
            input: Text written to the process stdin.
            timeout_ms: Maximum runtime in milliseconds.
            cwd: Working directory for the process.

        Returns:
            ToolResult: Exit code and captured output.
        """
        ...


class ProcessToolRunner:
    """Run commands as local subprocesses."""

    def run(
        self,
        command: str,
        args: Sequence[str],
        *,
        input: str | None = None,
        timeout_ms: int | None = None,
        cwd: Path | None = None,
    ) -> ToolResult:
        timeout = None if timeout_ms is None else timeout_ms / 1000
        options = CommandOptions(cwd=cwd, input_text=input, timeout=timeout)
        try:
            completed = run_command([command, *args], options=options)
        except FileNotFoundError as exc:
            return ToolResult(code=NOT_FOUND_EXIT_CODE, stderr=str(exc))
        except OSError as exc:
            return ToolResult(code=NOT_FOUND_EXIT_CODE, stderr=f"{command}: {exc}")
        return ToolResult(
            code=completed.returncode,
            stdout=completed.stdout or "",
            stderr=completed.stderr or "",
        )

    def __repr__(self) -> str:
        return "ProcessToolRunner()"


@dataclass(frozen=True, slots=True)
class RecordedCall:
    """Invocation captured by :class:`CannedToolRunner`."""

    command: str
    args: tuple[str, ...]
    input: str | None
    timeout_ms: int | None

    @property
    def argv(self) -> tuple[str, ...]:
        """Return the full argument vector including the command."""

        return (self.command, *self.args)


CannedResponse = ToolResult | Callable[[RecordedCall], ToolResult]


@dataclass(slots=True)
class CannedToolRunner:
    """Return pre-baked results without launching processes.

    Responses are keyed by tool name. A key matches a call when it equals the
    command or appears as one of its arguments, so ``"cfn-lint"`` matches the
    containerised ``docker run ... cfn-lint`` invocation too. Keys are tried
    in insertion order; unmatched calls receive ``default``.
    """

    responses: Mapping[str, CannedResponse] = field(default_factory=dict)
    default: ToolResult = field(default_factory=lambda: ToolResult(code=0))
    calls: list[RecordedCall] = field(default_factory=list)
    _lock: Lock = field(default_factory=Lock, repr=False)

    def run(
        self,
        command: str,
        args: Sequence[str],
        *,
        input: str | None = None,
        timeout_ms: int | None = None,
        cwd: Path | None = None,
    ) -> ToolResult:
        del cwd
        call = RecordedCall(command=command, args=tuple(args), input=input, timeout_ms=timeout_ms)
        with self._lock:
            self.calls.append(call)
        response = self._lookup(call)
        if callable(response):
            return response(call)
        return response

    def calls_for(self, key: str) -> list[RecordedCall]:
        """Return recorded calls whose command or arguments include ``key``."""

        with self._lock:
            return [call for call in self.calls if key in call.argv]

    def _lookup(self, call: RecordedCall) -> CannedResponse:
        for key, response in self.responses.items():
            if key in call.argv:
                return response
        return self.default


def invoke(runner: ToolRunner, invocation: ToolInvocation) -> ToolResult:
    """Run ``invocation`` through ``runner``, converting runner crashes into results.

    Args:
        runner: Runner executing the command.
        invocation: Command description.

    Returns:
        ToolResult: Result reported by the runner, or a synthetic failure
        result when the runner itself raised.
    """

    try:
        return runner.run(
            invocation.command,
            invocation.args,
            input=invocation.stdin,
            timeout_ms=invocation.timeout_ms,
            cwd=invocation.cwd,
        )
    except Exception as exc:  # runner implementations are caller supplied
        LOGGER.warning("tool runner failed for %s: %s", invocation.command, exc)
        return ToolResult(code=TOOL_ERROR_EXIT_CODE, stderr=str(exc))


__all__ = [
    "CannedResponse",
    "CannedToolRunner",
    "DEFAULT_TOOL_TIMEOUT_MS",
    "ProcessToolRunner",
    "RecordedCall",
    "ToolInvocation",
    "ToolResult",
    "ToolRunner",
    "invoke",
]
