# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Configuration models for validation and auto-fix requests."""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Final

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..core.models import Provider
from ..errors import ConfigError
from ..tools.runner import DEFAULT_TOOL_TIMEOUT_MS, ToolRunner
from ..tools.sandbox import SandboxPolicy

LOGGER = logging.getLogger(__name__)

DEFAULT_MAX_BYTES: Final[int] = 2_097_152
DEFAULT_MAX_LINES: Final[int] = 15_000
DEFAULT_PARSE_TIMEOUT_MS: Final[int] = 5_000
MAX_PARSE_TIMEOUT_MS: Final[int] = 10_000
DEFAULT_CONCURRENCY: Final[int] = 4

ENV_PARSE_TIMEOUT: Final[str] = "YAML_PARSE_TIMEOUT_MS"
ENV_SIMULATE_PARSE_DELAY: Final[str] = "YAML_PARSE_SIMULATE_DELAY_MS"
ENV_CFN_SPEC_PATH: Final[str] = "CFN_SPEC_PATH"
ENV_AZURE_SCHEMA_PATH: Final[str] = "AZURE_PIPELINES_SCHEMA_PATH"
ENV_SPECTRAL_RULESET: Final[str] = "SPECTRAL_RULESET"
ENV_DISABLE_CFN_LINT: Final[str] = "DISABLE_CFN_LINT"
ENV_CONCURRENCY: Final[str] = "YAML_CONCURRENCY"


class GuardLimits(BaseModel):
    """Size ceilings enforced by the input guard."""

    model_config = ConfigDict(frozen=True)

    max_bytes: int = Field(default=DEFAULT_MAX_BYTES, gt=0)
    max_lines: int = Field(default=DEFAULT_MAX_LINES, gt=0)


class ValidateOptions(BaseModel):
    """Options accepted by :func:`yamlqa.orchestration.validate`."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    provider: Provider | None = None
    filename: str | None = None
    mime_type: str | None = None
    relax_security: bool = False
    allow_anchors: bool = False
    allow_aliases: bool = False
    allowed_tags: tuple[str, ...] = Field(default_factory=tuple)
    spectral_ruleset_path: str | None = None
    parse_timeout_ms: int | None = Field(default=None, gt=0)
    tool_timeout_ms: int = Field(default=DEFAULT_TOOL_TIMEOUT_MS, gt=0)
    limits: GuardLimits = Field(default_factory=GuardLimits)
    sandbox: SandboxPolicy = Field(default_factory=SandboxPolicy)
    tool_runner: ToolRunner | None = None

    @field_validator("allowed_tags", mode="before")
    @classmethod
    def _coerce_tags(cls, value: object) -> object:
        if isinstance(value, str):
            return (value,)
        return value


class AutoFixOptions(BaseModel):
    """Options accepted by :func:`yamlqa.autofix.auto_fix`."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    prettier: bool = True
    spectral_fix: bool = False
    spectral_ruleset_path: str | None = None
    cfn_fix: bool = True
    tool_timeout_ms: int = Field(default=DEFAULT_TOOL_TIMEOUT_MS, gt=0)
    tool_runner: ToolRunner | None = None


def _parse_env_int(name: str, raw: str | None) -> int | None:
    """Return ``raw`` parsed as an integer, ``None`` when unset.

    Raises:
        ConfigError: If ``raw`` is set but not an integer.
    """

    if raw is None or not raw.strip():
        return None
    try:
        return int(raw.strip())
    except ValueError as exc:
        raise ConfigError(f"{name} must be an integer, got {raw!r}") from exc


def _existing_path(raw: str | None) -> Path | None:
    if not raw:
        return None
    path = Path(raw)
    return path if path.is_file() else None


@dataclass(frozen=True, slots=True)
class EngineEnvironment:
    """Environment overrides read once per request.

    Attributes:
        parse_timeout_ms: Parse timeout override, ``None`` when unset.
        simulate_parse_delay_ms: Artificial parse delay used by timeout tests.
        cfn_spec_path: Official CloudFormation resource specification JSON.
        azure_schema_path: Azure Pipelines JSON schema.
        spectral_ruleset: Ruleset applied when the caller supplies none.
        disable_cfn_lint: Skip the sandboxed structural linter.
        concurrency: Worker count for directory validation.
    """

    parse_timeout_ms: int | None = None
    simulate_parse_delay_ms: int = 0
    cfn_spec_path: Path | None = None
    azure_schema_path: Path | None = None
    spectral_ruleset: str | None = None
    disable_cfn_lint: bool = False
    concurrency: int = DEFAULT_CONCURRENCY

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> EngineEnvironment:
        """Build the environment view from ``environ`` (defaults to ``os.environ``).

        Malformed numeric values are logged and replaced by their defaults so a
        bad deployment setting never aborts a request.
        """

        env = os.environ if environ is None else environ
        return cls(
            parse_timeout_ms=_lenient_int(env, ENV_PARSE_TIMEOUT, None),
            simulate_parse_delay_ms=max(0, _lenient_int(env, ENV_SIMULATE_PARSE_DELAY, 0) or 0),
            cfn_spec_path=_existing_path(env.get(ENV_CFN_SPEC_PATH)),
            azure_schema_path=_existing_path(env.get(ENV_AZURE_SCHEMA_PATH)),
            spectral_ruleset=env.get(ENV_SPECTRAL_RULESET) or None,
            disable_cfn_lint=bool(env.get(ENV_DISABLE_CFN_LINT)),
            concurrency=max(1, _lenient_int(env, ENV_CONCURRENCY, DEFAULT_CONCURRENCY) or DEFAULT_CONCURRENCY),
        )

    def resolve_parse_timeout_ms(self, requested: int | None = None) -> int:
        """Return the effective parse timeout clamped to ``[1, MAX_PARSE_TIMEOUT_MS]``."""

        candidate = requested if requested is not None else self.parse_timeout_ms
        if candidate is None:
            candidate = DEFAULT_PARSE_TIMEOUT_MS
        return max(1, min(MAX_PARSE_TIMEOUT_MS, candidate))


def _lenient_int(env: Mapping[str, str], name: str, default: int | None) -> int | None:
    try:
        value = _parse_env_int(name, env.get(name))
    except ConfigError as exc:
        LOGGER.warning("%s; using default", exc)
        return default
    return default if value is None else value


__all__ = [
    "AutoFixOptions",
    "DEFAULT_MAX_BYTES",
    "DEFAULT_MAX_LINES",
    "DEFAULT_PARSE_TIMEOUT_MS",
    "EngineEnvironment",
    "GuardLimits",
    "MAX_PARSE_TIMEOUT_MS",
    "ValidateOptions",
]
