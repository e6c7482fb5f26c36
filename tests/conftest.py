# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Shared pytest fixtures."""

from __future__ import annotations

import pytest

from yamlqa.batch import DEFAULT_CACHE
from yamlqa.tools.runner import CannedToolRunner

_ENGINE_ENV_VARS = (
    "YAML_PARSE_TIMEOUT_MS",
    "YAML_PARSE_SIMULATE_DELAY_MS",
    "CFN_SPEC_PATH",
    "AZURE_PIPELINES_SCHEMA_PATH",
    "SPECTRAL_RULESET",
    "DISABLE_CFN_LINT",
    "YAML_CONCURRENCY",
)


@pytest.fixture(autouse=True)
def _isolated_engine_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep host environment overrides and cached results out of every test."""

    for name in _ENGINE_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    DEFAULT_CACHE.clear()


@pytest.fixture
def canned_runner() -> CannedToolRunner:
    """Return a runner whose tools all succeed silently."""

    return CannedToolRunner()
