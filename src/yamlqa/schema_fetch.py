# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Download the provider schemas consumed through ``CFN_SPEC_PATH`` and
``AZURE_PIPELINES_SCHEMA_PATH``.

The CloudFormation resource specification and the Azure Pipelines JSON schema
are fetched over HTTPS, re-serialised as indented JSON and written to an output
directory. Each download is retried with a linear backoff; a source that keeps
failing is reported in the result instead of aborting the others.
"""

from __future__ import annotations

import gzip
import json
import logging
import os
import time
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Final

import httpx
from pydantic import BaseModel, ConfigDict, Field

from .core.models import JsonValue

LOGGER = logging.getLogger(__name__)

DEFAULT_AZURE_SCHEMA_URL: Final[str] = "https://json.schemastore.org/azure-pipelines.json"
DEFAULT_CFN_SPEC_URL: Final[str] = (
    "https://d1uauaxba7bl26.cloudfront.net/latest/gzip/CloudFormationResourceSpecification.json"
)
DEFAULT_OUT_DIR: Final[str] = "schemas"
ENV_AZURE_SCHEMA_URL: Final[str] = "AZURE_PIPELINES_SCHEMA_URL"
ENV_CFN_SPEC_URL: Final[str] = "CFN_SPEC_URL"
ENV_SCHEMAS_OUT_DIR: Final[str] = "SCHEMAS_OUT_DIR"
DEFAULT_ATTEMPTS: Final[int] = 3
DEFAULT_BACKOFF_SECONDS: Final[float] = 0.5
REQUEST_TIMEOUT_SECONDS: Final[float] = 60.0
_GZIP_MAGIC: Final[bytes] = b"\x1f\x8b"


@dataclass(frozen=True, slots=True)
class SchemaSource:
    """One downloadable schema and the file it is written to."""

    name: str
    url: str
    filename: str


class FetchReport(BaseModel):
    """Files written per source name, plus the sources that could not be fetched."""

    model_config = ConfigDict(frozen=True)

    ok: bool
    written: dict[str, str] = Field(default_factory=dict)
    failed: tuple[str, ...] = Field(default_factory=tuple)


def default_sources(environ: Mapping[str, str] | None = None) -> tuple[SchemaSource, ...]:
    """Return the Azure and CloudFormation sources, honouring URL overrides."""

    env = os.environ if environ is None else environ
    return (
        SchemaSource("azure", env.get(ENV_AZURE_SCHEMA_URL) or DEFAULT_AZURE_SCHEMA_URL, "azure-pipelines.json"),
        SchemaSource("cfn", env.get(ENV_CFN_SPEC_URL) or DEFAULT_CFN_SPEC_URL, "cfn-spec.json"),
    )


def default_out_dir(environ: Mapping[str, str] | None = None) -> Path:
    env = os.environ if environ is None else environ
    return Path(env.get(ENV_SCHEMAS_OUT_DIR) or DEFAULT_OUT_DIR)


def download_json(client: httpx.Client, url: str) -> JsonValue:
    """Return the JSON document at ``url``.

    Bodies served as raw gzip without a ``Content-Encoding`` header are
    decompressed before decoding.

    Raises:
        httpx.HTTPError: On transport failures and non-success status codes.
        ValueError: If the body is not JSON.
    """

    response = client.get(url)
    response.raise_for_status()
    body = response.content
    if body.startswith(_GZIP_MAGIC):
        body = gzip.decompress(body)
    return json.loads(body.decode("utf-8"))


def _fetch_one(
    client: httpx.Client,
    source: SchemaSource,
    target: Path,
    *,
    attempts: int,
    backoff_seconds: float,
    sleep: Callable[[float], None],
) -> bool:
    for attempt in range(1, attempts + 1):
        try:
            payload = download_json(client, source.url)
            target.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        except (httpx.HTTPError, ValueError, OSError) as exc:
            LOGGER.warning("fetching %s schema failed (attempt %d/%d): %s", source.name, attempt, attempts, exc)
            if attempt < attempts:
                sleep(backoff_seconds * attempt)
            continue
        LOGGER.info("wrote %s schema to %s", source.name, target)
        return True
    return False


def fetch_schemas(
    out_dir: Path | str,
    *,
    sources: tuple[SchemaSource, ...] | None = None,
    client: httpx.Client | None = None,
    attempts: int = DEFAULT_ATTEMPTS,
    backoff_seconds: float = DEFAULT_BACKOFF_SECONDS,
    sleep: Callable[[float], None] = time.sleep,
) -> FetchReport:
    """Download every schema in ``sources`` into ``out_dir``.

    Args:
        out_dir: Directory receiving the JSON files; created when missing.
        sources: Schemas to fetch; :func:`default_sources` when omitted.
        client: HTTP client; a redirect-following client is created and closed
            when omitted.
        attempts: Tries per source before it is reported as failed.
        backoff_seconds: Base delay, multiplied by the attempt number, between tries.
        sleep: Delay function used between tries.

    Returns:
        FetchReport: Written paths keyed by source name and the failed sources.
    """

    if attempts < 1:
        raise ValueError("attempts must be positive")
    directory = Path(out_dir)
    directory.mkdir(parents=True, exist_ok=True)
    selected = default_sources() if sources is None else sources
    http = client or httpx.Client(follow_redirects=True, timeout=REQUEST_TIMEOUT_SECONDS)
    written: dict[str, str] = {}
    failed: list[str] = []
    try:
        for source in selected:
            target = directory / source.filename
            if _fetch_one(http, source, target, attempts=attempts, backoff_seconds=backoff_seconds, sleep=sleep):
                written[source.name] = str(target)
            else:
                failed.append(source.name)
    finally:
        if client is None:
            http.close()
    return FetchReport(ok=not failed, written=written, failed=tuple(failed))


__all__ = [
    "DEFAULT_AZURE_SCHEMA_URL",
    "DEFAULT_CFN_SPEC_URL",
    "FetchReport",
    "SchemaSource",
    "default_out_dir",
    "default_sources",
    "download_json",
    "fetch_schemas",
]
