# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Container sandbox policy for provider-structural tool execution."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Final

DEFAULT_CFN_LINT_IMAGE: Final[str] = "giammbo/cfn-lint:latest"
DEFAULT_YAMLLINT_IMAGE: Final[str] = "cytopia/yamllint"


@dataclass(frozen=True, slots=True)
class SandboxPolicy:
    """Isolation settings applied to each sandboxed invocation.

    Attributes:
        engine: Container engine executable.
        network: Network mode passed to ``--network``; ``none`` disables networking.
        read_only: Whether the input bind mount is mounted read-only.
        image: Default container image used for the structural linter.
        workdir: Mount point and working directory inside the container.
    """

    engine: str = "docker"
    network: str = "none"
    read_only: bool = True
    image: str = DEFAULT_CFN_LINT_IMAGE
    workdir: str = "/work"

    def wrap(
        self,
        command: str,
        args: Sequence[str],
        *,
        mount: Path | None = None,
        image: str | None = None,
        interactive: bool = False,
    ) -> tuple[str, tuple[str, ...]]:
        """Return the engine command and arguments that run ``command`` in a container.

        Args:
            command: Executable to run inside the container.
            args: Arguments passed to ``command``.
            mount: Host directory bind-mounted at :attr:`workdir`.
            image: Image overriding :attr:`image`.
            interactive: Keep stdin attached so content can be piped in.

        Returns:
            tuple[str, tuple[str, ...]]: Engine executable and its argument list.
        """

        engine_args: list[str] = ["run", "--rm"]
        if interactive:
            engine_args.append("-i")
        engine_args.append(f"--network={self.network}")
        if mount is not None:
            suffix = ":ro" if self.read_only else ""
            engine_args.extend(["-v", f"{mount}:{self.workdir}{suffix}", "-w", self.workdir])
        engine_args.extend([image or self.image, command, *args])
        return self.engine, tuple(engine_args)


__all__ = ["DEFAULT_CFN_LINT_IMAGE", "DEFAULT_YAMLLINT_IMAGE", "SandboxPolicy"]
