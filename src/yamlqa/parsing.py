# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Safe YAML loading, timeout-bounded parsing and deterministic re-serialization."""

from __future__ import annotations

import logging
import time
from collections.abc import Hashable
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from dataclasses import dataclass, field
from typing import Final

import yaml
from yaml.constructor import ConstructorError

from .config.models import EngineEnvironment
from .core.models import LintMessage, LintSource, MessageKind
from .core.severity import Severity

LOGGER = logging.getLogger(__name__)

_MERGE_TAG: Final[str] = "tag:yaml.org,2002:merge"
_DUMP_WIDTH: Final[int] = 4096


def _construct_untagged(loader: yaml.SafeLoader, tag_suffix: str, node: yaml.Node) -> object:
    """Construct a custom-tagged node as its plain scalar, list or mapping value."""

    del tag_suffix
    if isinstance(node, yaml.ScalarNode):
        return loader.construct_scalar(node)
    if isinstance(node, yaml.SequenceNode):
        return loader.construct_sequence(node, deep=True)
    return loader.construct_mapping(node, deep=True)


class TolerantLoader(yaml.SafeLoader):
    """Safe loader that reads custom tags (``!Ref``) as plain values; duplicate keys: last wins."""


TolerantLoader.add_multi_constructor("!", _construct_untagged)
TolerantLoader.add_multi_constructor("tag:", _construct_untagged)


class StrictLoader(TolerantLoader):
    """Tolerant loader that rejects duplicate mapping keys."""

    def construct_mapping(self, node: yaml.MappingNode, deep: bool = False) -> dict[Hashable, object]:
        if isinstance(node, yaml.MappingNode):
            seen: dict[Hashable, yaml.Node] = {}
            for key_node, _ in node.value:
                if key_node.tag == _MERGE_TAG:
                    continue
                key = self.construct_object(key_node, deep=deep)
                if not isinstance(key, Hashable):
                    continue
                if key in seen:
                    raise ConstructorError(
                        "while constructing a mapping",
                        node.start_mark,
                        f"found duplicate key '{key}'",
                        key_node.start_mark,
                    )
                seen[key] = key_node
        return super().construct_mapping(node, deep=deep)


@dataclass(frozen=True, slots=True)
class TaggedValue:
    """Custom-tagged value preserved across a load/dump round trip."""

    tag: str
    value: object


def _construct_tagged(loader: yaml.SafeLoader, tag_suffix: str, node: yaml.Node) -> TaggedValue:
    return TaggedValue(tag=node.tag, value=_construct_untagged(loader, tag_suffix, node))


class RoundTripLoader(yaml.SafeLoader):
    """Safe loader keeping custom tags as :class:`TaggedValue`; duplicate keys: last wins."""


RoundTripLoader.add_multi_constructor("!", _construct_tagged)
RoundTripLoader.add_multi_constructor("tag:", _construct_tagged)


class CanonicalDumper(yaml.SafeDumper):
    """Dumper that never emits anchors or aliases."""

    def ignore_aliases(self, data: object) -> bool:
        return True


def _represent_tagged(dumper: yaml.SafeDumper, data: TaggedValue) -> yaml.Node:
    if isinstance(data.value, list):
        return dumper.represent_sequence(data.tag, data.value)
    if isinstance(data.value, dict):
        return dumper.represent_mapping(data.tag, data.value)
    return dumper.represent_scalar(data.tag, "" if data.value is None else str(data.value))


CanonicalDumper.add_representer(TaggedValue, _represent_tagged)


def load_document(content: str, *, strict: bool = False) -> object:
    """Parse a single YAML document with the safe loaders.

    Args:
        content: YAML text.
        strict: Reject duplicate mapping keys when ``True``.

    Returns:
        object: Parsed document (``None`` for empty input).

    Raises:
        yaml.YAMLError: If ``content`` is not well-formed YAML.
    """

    loader = StrictLoader if strict else TolerantLoader
    return yaml.load(content, Loader=loader)  # nosec B506 - loaders derive from SafeLoader


def compose_document(content: str) -> yaml.Node | None:
    """Return the node graph of ``content`` with source marks for targeted edits.

    Raises:
        yaml.YAMLError: If ``content`` is not well-formed YAML.
    """

    return yaml.compose(content, Loader=TolerantLoader)


def dump_canonical(document: object, *, explicit_start: bool = True) -> str:
    """Serialize ``document`` deterministically without anchors or aliases.

    Key order is preserved and custom tags loaded via :func:`round_trip_load`
    are re-emitted.
    """

    return yaml.dump(
        document,
        Dumper=CanonicalDumper,
        sort_keys=False,
        default_flow_style=False,
        allow_unicode=True,
        explicit_start=explicit_start,
        width=_DUMP_WIDTH,
    )


def round_trip_load(content: str) -> object:
    """Load ``content`` keeping custom tags; later duplicate keys replace earlier ones.

    Raises:
        yaml.YAMLError: If ``content`` is not well-formed YAML.
    """

    return yaml.load(content, Loader=RoundTripLoader)  # nosec B506 - loader derives from SafeLoader


def render_scalar(value: object) -> str:
    """Return ``value`` rendered as an inline YAML scalar or flow collection."""

    rendered = yaml.dump(value, Dumper=CanonicalDumper, default_flow_style=True, allow_unicode=True, width=_DUMP_WIDTH)
    return rendered.removesuffix("\n").removesuffix("\n...")


def yaml_error_position(exc: yaml.YAMLError) -> tuple[int | None, int | None]:
    """Return the 1-based ``(line, column)`` of ``exc`` when the error carries a mark."""

    mark = getattr(exc, "problem_mark", None) or getattr(exc, "context_mark", None)
    if mark is None:
        return None, None
    return mark.line + 1, mark.column + 1


def yaml_error_text(exc: yaml.YAMLError) -> str:
    """Return a single-line description of ``exc``."""

    if isinstance(exc, yaml.MarkedYAMLError):
        parts = [part for part in (exc.context, exc.problem) if part]
        if parts:
            return ": ".join(parts)
    return str(exc).splitlines()[0] if str(exc) else type(exc).__name__


@dataclass(frozen=True, slots=True)
class ParseOutcome:
    """Result of a timeout-bounded parse."""

    document: object = None
    messages: tuple[LintMessage, ...] = field(default_factory=tuple)

    @property
    def ok(self) -> bool:
        """Return ``True`` when parsing produced no error messages."""

        return not self.messages


def _parse_worker(content: str, delay_ms: int) -> object:
    if delay_ms > 0:
        time.sleep(delay_ms / 1000)
    return load_document(content, strict=True)


def parse_with_timeout(
    content: str,
    *,
    timeout_ms: int | None = None,
    environment: EngineEnvironment | None = None,
) -> ParseOutcome:
    """Parse ``content`` in a worker thread raced against a timeout.

    Args:
        content: YAML text to parse.
        timeout_ms: Requested timeout; falls back to the environment and then
            to the default, clamped to the supported range.
        environment: Environment overrides, read from ``os.environ`` when omitted.

    Returns:
        ParseOutcome: Parsed document, or parser error messages on failure or timeout.
    """

    env = environment or EngineEnvironment.from_env()
    effective_ms = env.resolve_parse_timeout_ms(timeout_ms)
    executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="yamlqa-parse")
    future = executor.submit(_parse_worker, content, env.simulate_parse_delay_ms)
    try:
        document = future.result(timeout=effective_ms / 1000)
    except FutureTimeoutError:
        future.cancel()
        LOGGER.warning("YAML parse exceeded %sms", effective_ms)
        return ParseOutcome(messages=(_parser_error(f"parse timeout after {effective_ms}ms", rule_id="parse-timeout"),))
    except yaml.YAMLError as exc:
        line, column = yaml_error_position(exc)
        return ParseOutcome(
            messages=(_parser_error(yaml_error_text(exc), line=line, column=column, rule_id="parse-error"),),
        )
    except RecursionError:
        return ParseOutcome(messages=(_parser_error("document nesting is too deep", rule_id="parse-error"),))
    finally:
        executor.shutdown(wait=False, cancel_futures=True)
    return ParseOutcome(document=document)


def _parser_error(
    message: str,
    *,
    line: int | None = None,
    column: int | None = None,
    rule_id: str | None = None,
) -> LintMessage:
    return LintMessage(
        source=LintSource.PARSER,
        severity=Severity.ERROR,
        message=message,
        line=line,
        column=column,
        rule_id=rule_id,
        kind=MessageKind.SYNTAX,
    )


__all__ = [
    "CanonicalDumper",
    "ParseOutcome",
    "RoundTripLoader",
    "StrictLoader",
    "TaggedValue",
    "TolerantLoader",
    "compose_document",
    "dump_canonical",
    "load_document",
    "parse_with_timeout",
    "render_scalar",
    "round_trip_load",
    "yaml_error_position",
    "yaml_error_text",
]
