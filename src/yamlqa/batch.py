# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Concurrent validation of every YAML file below a directory."""

from __future__ import annotations

import hashlib
import json
import logging
from collections import OrderedDict
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from threading import Lock
from typing import Final

from pydantic import BaseModel, ConfigDict, Field

from .config.models import EngineEnvironment, ValidateOptions
from .core.models import LintMessage, LintSource, MessageKind, ValidationResult
from .core.severity import Severity
from .orchestration.orchestrator import validate

LOGGER = logging.getLogger(__name__)

YAML_SUFFIXES: Final[frozenset[str]] = frozenset({".yaml", ".yml"})
DEFAULT_CACHE_SIZE: Final[int] = 1024


class FileResult(BaseModel):
    """Validation outcome for one file."""

    model_config = ConfigDict(frozen=True)

    file: str
    ok: bool
    messages: tuple[LintMessage, ...] = Field(default_factory=tuple)


class DirectoryReport(BaseModel):
    """Validation outcome for a directory tree."""

    model_config = ConfigDict(frozen=True)

    ok: bool
    results: tuple[FileResult, ...] = Field(default_factory=tuple)


@dataclass(frozen=True, slots=True)
class CacheInfo:
    """Snapshot of :class:`ValidationCache` usage.

    Attributes:
        current_size: Number of results currently stored.
        hits: Number of lookups answered from the cache.
        maxsize: Capacity after which least-recently-used results are evicted.
    """

    current_size: int
    hits: int
    maxsize: int


class ValidationCache:
    """Thread-safe LRU memo of validation results keyed by content digest."""

    def __init__(self, maxsize: int = DEFAULT_CACHE_SIZE) -> None:
        if maxsize < 1:
            raise ValueError("maxsize must be positive")
        self._maxsize = maxsize
        self._entries: OrderedDict[str, ValidationResult] = OrderedDict()
        self._hits = 0
        self._lock = Lock()

    def get(self, key: str) -> ValidationResult | None:
        with self._lock:
            result = self._entries.get(key)
            if result is not None:
                self._entries.move_to_end(key)
                self._hits += 1
            return result

    def put(self, key: str, result: ValidationResult) -> None:
        with self._lock:
            self._entries[key] = result
            self._entries.move_to_end(key)
            while len(self._entries) > self._maxsize:
                self._entries.popitem(last=False)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self._hits = 0

    def cache_info(self) -> CacheInfo:
        with self._lock:
            return CacheInfo(current_size=len(self._entries), hits=self._hits, maxsize=self._maxsize)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


DEFAULT_CACHE: Final[ValidationCache] = ValidationCache()


def cache_key(content: str, options: ValidateOptions, environment: EngineEnvironment) -> str:
    """Return the sha256 digest of ``content`` plus every setting that affects its result."""

    basis = {
        "filename": options.filename,
        "mime_type": options.mime_type,
        "tool_timeout_ms": options.tool_timeout_ms,
        "sandbox": {
            "engine": options.sandbox.engine,
            "network": options.sandbox.network,
            "read_only": options.sandbox.read_only,
            "image": options.sandbox.image,
            "workdir": options.sandbox.workdir,
        },
        "provider": options.provider.value if options.provider else None,
        "relax_security": options.relax_security,
        "allow_anchors": options.allow_anchors,
        "allow_aliases": options.allow_aliases,
        "allowed_tags": sorted(options.allowed_tags),
        "spectral_ruleset": options.spectral_ruleset_path or environment.spectral_ruleset,
        "parse_timeout_ms": environment.resolve_parse_timeout_ms(options.parse_timeout_ms),
        "max_bytes": options.limits.max_bytes,
        "max_lines": options.limits.max_lines,
        "cfn_spec_path": str(environment.cfn_spec_path or ""),
        "azure_schema_path": str(environment.azure_schema_path or ""),
        "disable_cfn_lint": environment.disable_cfn_lint,
        "simulate_parse_delay_ms": environment.simulate_parse_delay_ms,
    }
    digest = hashlib.sha256()
    digest.update(content.encode("utf-8", errors="surrogatepass"))
    digest.update(json.dumps(basis, sort_keys=True).encode("utf-8"))
    return digest.hexdigest()


def discover_yaml_files(root: Path) -> list[Path]:
    """Return every ``.yaml``/``.yml`` file below ``root`` in sorted order."""

    return sorted(path for path in root.rglob("*") if path.suffix.lower() in YAML_SUFFIXES and path.is_file())


def _unreadable(path: Path, exc: Exception) -> FileResult:
    message = LintMessage(
        source=LintSource.PARSER,
        severity=Severity.ERROR,
        message=f"unable to read file: {exc}",
        path=str(path),
        rule_id="read-error",
        kind=MessageKind.SYNTAX,
    )
    return FileResult(file=str(path), ok=False, messages=(message,))


def _validate_file(
    path: Path,
    options: ValidateOptions,
    environment: EngineEnvironment,
    cache: ValidationCache,
) -> FileResult:
    try:
        content = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        LOGGER.warning("skipping unreadable file %s: %s", path, exc)
        return _unreadable(path, exc)
    file_options = options.model_copy(update={"filename": path.name})
    key = cache_key(content, file_options, environment)
    result = cache.get(key)
    if result is None:
        result = validate(content, file_options, environment=environment)
        cache.put(key, result)
    return FileResult(file=str(path), ok=result.ok, messages=result.messages)


def validate_directory(
    directory: Path | str,
    options: ValidateOptions | None = None,
    *,
    cache: ValidationCache | None = None,
    environment: EngineEnvironment | None = None,
) -> DirectoryReport:
    """Validate every YAML file below ``directory`` with a bounded worker pool.

    Args:
        directory: Root directory to walk.
        options: Options applied to each file; ``filename`` is set per file.
        cache: Result cache; the process-wide cache is used when omitted.
        environment: Environment overrides, including ``YAML_CONCURRENCY``.

    Returns:
        DirectoryReport: Per-file results in path order and the overall ``ok``.
    """

    root = Path(directory).resolve()
    opts = options or ValidateOptions()
    env = environment or EngineEnvironment.from_env()
    memo = DEFAULT_CACHE if cache is None else cache
    files = discover_yaml_files(root)
    LOGGER.debug("validating %d YAML files under %s", len(files), root)
    with ThreadPoolExecutor(max_workers=env.concurrency, thread_name_prefix="yamlqa-batch") as executor:
        results = tuple(executor.map(lambda path: _validate_file(path, opts, env, memo), files))
    return DirectoryReport(ok=all(result.ok for result in results), results=results)


__all__ = [
    "CacheInfo",
    "DEFAULT_CACHE",
    "DEFAULT_CACHE_SIZE",
    "DirectoryReport",
    "FileResult",
    "ValidationCache",
    "cache_key",
    "discover_yaml_files",
    "validate_directory",
]
