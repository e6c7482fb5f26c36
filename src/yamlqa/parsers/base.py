# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Building blocks for turning linter output into :class:`LintMessage` lists."""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Callable, Iterator
from collections.abc import Mapping as MappingABC
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Protocol, cast

from ..core.models import JsonValue, LintMessage

LOGGER = logging.getLogger(__name__)

JsonTransform = Callable[[JsonValue], Sequence[LintMessage]]
TextTransform = Callable[[Sequence[str]], Sequence[LintMessage]]


class Parser(Protocol):
    """Anything that maps a tool's captured streams to lint messages."""

    def parse(self, stdout: str, stderr: str) -> Sequence[LintMessage]:
        """Return the messages found in the captured output."""
        ...


def load_json_output(stdout: str) -> JsonValue:
    """Decode ``stdout`` as one JSON document or, failing that, as JSON lines.

    Lines that do not decode are dropped. Empty output decodes to ``[]``.
    """

    body = stdout.strip()
    if not body:
        return []
    try:
        return cast(JsonValue, json.loads(body))
    except json.JSONDecodeError:
        pass
    records: list[JsonValue] = []
    for line in filter(None, (raw.strip() for raw in body.splitlines())):
        try:
            records.append(cast(JsonValue, json.loads(line)))
        except json.JSONDecodeError:
            continue
    if not records:
        LOGGER.debug("tool output is not JSON: %.120s", body)
    return records


def iter_dicts(value: JsonValue) -> Iterator[MappingABC[str, JsonValue]]:
    """Yield the mapping entries of a JSON array, skipping anything else."""

    if isinstance(value, list):
        yield from (item for item in value if isinstance(item, MappingABC))


def get_mapping(value: MappingABC[str, JsonValue], key: str) -> MappingABC[str, JsonValue]:
    """Return ``value[key]`` when it is a mapping, otherwise an empty mapping."""

    entry = value.get(key)
    if isinstance(entry, MappingABC):
        return entry
    return {}


def coerce_int(value: JsonValue | None) -> int | None:
    """Return ``value`` as an ``int`` when it holds an integral number."""

    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    return None


def coerce_optional_str(value: JsonValue | None) -> str | None:
    """Return ``value`` as text, preserving ``None``."""

    if isinstance(value, str):
        return value
    if value is None:
        return None
    return str(value)


def join_path(value: JsonValue | None) -> str | None:
    """Render a tool-reported document path (list of keys/indices) as ``a.b[0].c``."""

    if not isinstance(value, list) or not value:
        return None
    rendered = ""
    for segment in value:
        if isinstance(segment, int) and not isinstance(segment, bool):
            rendered += f"[{segment}]"
        else:
            rendered += f".{segment}" if rendered else str(segment)
    return rendered


def iter_pattern_matches(lines: Sequence[str], pattern: re.Pattern[str]) -> Iterator[re.Match[str]]:
    """Yield ``pattern`` matches for each non-blank line of ``lines``."""

    for raw_line in lines:
        line = raw_line.strip()
        if line and (match := pattern.match(line)):
            yield match


@dataclass(slots=True)
class JsonParser:
    """Decode JSON output and hand it to ``transform``."""

    transform: JsonTransform

    def parse(self, stdout: str, stderr: str) -> Sequence[LintMessage]:
        del stderr
        return self.transform(load_json_output(stdout))


@dataclass(slots=True)
class TextParser:
    """Split output into lines and hand them to ``transform``."""

    transform: TextTransform

    def parse(self, stdout: str, stderr: str) -> Sequence[LintMessage]:
        del stderr
        return self.transform(stdout.splitlines())


__all__ = [
    "JsonParser",
    "JsonTransform",
    "Parser",
    "TextParser",
    "TextTransform",
    "coerce_int",
    "coerce_optional_str",
    "get_mapping",
    "iter_dicts",
    "iter_pattern_matches",
    "join_path",
    "load_json_output",
]
