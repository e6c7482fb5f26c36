# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Tests for provider schema downloads."""

from __future__ import annotations

import gzip
import json
from pathlib import Path

import httpx
import pytest

from yamlqa.schema_fetch import (
    DEFAULT_AZURE_SCHEMA_URL,
    SchemaSource,
    default_out_dir,
    default_sources,
    fetch_schemas,
)

AZURE = SchemaSource("azure", "https://schemas.test/azure.json", "azure-pipelines.json")
CFN = SchemaSource("cfn", "https://schemas.test/cfn.json", "cfn-spec.json")


def _client(handler) -> httpx.Client:
    return httpx.Client(transport=httpx.MockTransport(handler), follow_redirects=True)


def test_fetch_writes_indented_json(tmp_path: Path) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/azure.json":
            return httpx.Response(302, headers={"Location": "https://schemas.test/v2/azure.json"})
        if request.url.path == "/v2/azure.json":
            return httpx.Response(200, json={"type": "object"})
        return httpx.Response(200, content=gzip.compress(b'{"ResourceTypes": {}}'))

    report = fetch_schemas(tmp_path / "out", sources=(AZURE, CFN), client=_client(handler), sleep=lambda _: None)

    assert report.ok
    assert report.failed == ()
    assert set(report.written) == {"azure", "cfn"}
    azure = tmp_path / "out" / "azure-pipelines.json"
    assert azure.read_text(encoding="utf-8") == '{\n  "type": "object"\n}'
    assert json.loads((tmp_path / "out" / "cfn-spec.json").read_text(encoding="utf-8")) == {"ResourceTypes": {}}


def test_fetch_retries_then_succeeds(tmp_path: Path) -> None:
    calls: list[str] = []
    delays: list[float] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request.url.path)
        if len(calls) < 3:
            return httpx.Response(503)
        return httpx.Response(200, json={"ok": True})

    report = fetch_schemas(tmp_path, sources=(AZURE,), client=_client(handler), sleep=delays.append)

    assert report.ok
    assert len(calls) == 3
    assert delays == [0.5, 1.0]


def test_failing_source_does_not_block_others(tmp_path: Path) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/cfn.json":
            return httpx.Response(200, text="<html>not json</html>")
        return httpx.Response(200, json={"type": "object"})

    report = fetch_schemas(tmp_path, sources=(CFN, AZURE), client=_client(handler), attempts=2, sleep=lambda _: None)

    assert not report.ok
    assert report.failed == ("cfn",)
    assert list(report.written) == ["azure"]
    assert not (tmp_path / "cfn-spec.json").exists()


def test_sources_and_out_dir_honour_environment() -> None:
    environ = {"CFN_SPEC_URL": "https://mirror.test/cfn.json", "SCHEMAS_OUT_DIR": "build/schemas"}

    azure, cfn = default_sources(environ)

    assert azure.url == DEFAULT_AZURE_SCHEMA_URL
    assert cfn.url == "https://mirror.test/cfn.json"
    assert default_out_dir(environ) == Path("build/schemas")
    assert default_out_dir({}) == Path("schemas")


def test_attempts_must_be_positive(tmp_path: Path) -> None:
    with pytest.raises(ValueError):
        fetch_schemas(tmp_path, sources=(AZURE,), attempts=0)
