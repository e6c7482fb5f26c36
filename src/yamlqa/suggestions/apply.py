# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Apply analyzer edits to the original text as targeted splices.

Edits are located through the composed node graph, so every byte outside the
addressed nodes (comments, ordering, quoting, blank lines) is preserved.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from typing import Final

import yaml

from ..core.models import ApplyResult
from ..parsing import CanonicalDumper, compose_document, load_document, render_scalar, round_trip_load
from .base import AddEntry, Analyzer, DocumentEdit, DocumentPath, RenameKey, ReplaceScalar

LOGGER = logging.getLogger(__name__)

_QUOTE_STYLES: Final[frozenset[str]] = frozenset({"'", '"'})
_BLOCK_SCALAR_STYLES: Final[frozenset[str]] = frozenset({"|", ">"})
_NULL_TEXT: Final[frozenset[str]] = frozenset({"", "~", "null", "Null", "NULL"})
_MAX_DEPTH: Final[int] = 256


@dataclass(frozen=True, slots=True)
class Splice:
    """Replace ``content[start:end]`` with ``text``."""

    start: int
    end: int
    text: str
    order: int = 0


@dataclass(frozen=True, slots=True)
class _Located:
    node: yaml.Node
    key: yaml.ScalarNode | None


def _find_key(mapping: yaml.MappingNode, name: str) -> tuple[yaml.ScalarNode, yaml.Node] | None:
    found: tuple[yaml.ScalarNode, yaml.Node] | None = None
    for key_node, value_node in mapping.value:
        if isinstance(key_node, yaml.ScalarNode) and key_node.value == name:
            found = (key_node, value_node)
    return found


def locate(root: yaml.Node | None, path: DocumentPath) -> _Located | None:
    """Return the node addressed by ``path`` and, for mapping values, its key node."""

    if root is None:
        return None
    current = _Located(node=root, key=None)
    for segment in path:
        node = current.node
        if isinstance(segment, int):
            if not isinstance(node, yaml.SequenceNode) or not 0 <= segment < len(node.value):
                return None
            current = _Located(node=node.value[segment], key=None)
            continue
        if not isinstance(node, yaml.MappingNode):
            return None
        entry = _find_key(node, segment)
        if entry is None:
            return None
        current = _Located(node=entry[1], key=entry[0])
    return current


def _quoted(style: str | None, text: str) -> str:
    if style in _QUOTE_STYLES:
        return f"{style}{text}{style}"
    return text


def _last_leaf(node: yaml.Node) -> yaml.Node:
    for _ in range(_MAX_DEPTH):
        if isinstance(node, yaml.MappingNode) and node.value:
            node = node.value[-1][1]
        elif isinstance(node, yaml.SequenceNode) and node.value:
            node = node.value[-1]
        else:
            break
    return node


def _line_after(content: str, index: int) -> int:
    newline = content.find("\n", index)
    return len(content) if newline == -1 else newline + 1


def _block_lines(entries: Mapping[str, object], indent: int) -> str:
    dumped = yaml.dump(
        dict(entries),
        Dumper=CanonicalDumper,
        sort_keys=False,
        default_flow_style=False,
        allow_unicode=True,
    )
    pad = " " * indent
    return "".join(f"{pad}{line}\n" for line in dumped.splitlines())


def _rename_splice(located: _Located, new_key: str) -> Splice | None:
    key = located.key
    if key is None:
        return None
    return Splice(key.start_mark.index, key.end_mark.index, _quoted(key.style, new_key))


def _replace_splice(located: _Located, value: object) -> Splice | None:
    node = located.node
    if not isinstance(node, yaml.ScalarNode) or node.style in _BLOCK_SCALAR_STYLES:
        return None
    text = _quoted(node.style, value) if isinstance(value, str) and node.style else render_scalar(value)
    return Splice(node.start_mark.index, node.end_mark.index, text)


def _add_to_block_mapping(content: str, mapping: yaml.MappingNode, key: str, value: object) -> Splice:
    first_key, _ = mapping.value[0]
    indent = first_key.start_mark.column
    leaf = _last_leaf(mapping.value[-1][1])
    end = leaf.end_mark.index
    if isinstance(leaf, yaml.ScalarNode) and leaf.style in _BLOCK_SCALAR_STYLES:
        position = len(content) if end >= len(content) else content.rfind("\n", 0, end) + 1
    else:
        position = _line_after(content, end)
    prefix = "\n" if position == len(content) and content and not content.endswith("\n") else ""
    return Splice(position, position, prefix + _block_lines({key: value}, indent))


def _add_to_flow_mapping(mapping: yaml.MappingNode, key: str, value: object) -> Splice:
    closing = mapping.end_mark.index - 1
    separator = ", " if mapping.value else ""
    return Splice(closing, closing, f"{separator}{key}: {render_scalar(value)}")


def _add_under_null(content: str, located: _Located, entries: Mapping[str, object]) -> Splice | None:
    node = located.node
    owner = located.key
    if owner is None or not isinstance(node, yaml.ScalarNode) or node.value not in _NULL_TEXT:
        return None
    if node.style is not None:
        return None
    block = _block_lines(entries, owner.start_mark.column + 2).rstrip("\n")
    if node.value:
        start, end = node.start_mark.index, node.end_mark.index
    else:
        newline = content.find("\n", owner.end_mark.index)
        start = end = len(content) if newline == -1 else newline
    while start > 0 and content[start - 1] in " \t":
        start -= 1
    return Splice(start, end, "\n" + block)


def _add_splice(content: str, located: _Located, key: str, value: object) -> Splice | None:
    node = located.node
    if isinstance(node, yaml.MappingNode):
        existing = _find_key(node, key)
        if existing is not None:
            if isinstance(value, dict) and value:
                return _add_under_null(content, _Located(node=existing[1], key=existing[0]), value)
            return None
        if node.flow_style:
            return _add_to_flow_mapping(node, key, value)
        if not node.value:
            return None
        return _add_to_block_mapping(content, node, key, value)
    return _add_under_null(content, located, {key: value})


def plan_splice(content: str, root: yaml.Node | None, edit: DocumentEdit) -> Splice | None:
    """Return the text splice implementing ``edit``, or ``None`` when it cannot be located."""

    match edit:
        case RenameKey(path=path, new_key=new_key):
            located = locate(root, path)
            return None if located is None else _rename_splice(located, new_key)
        case ReplaceScalar(path=path, value=value):
            located = locate(root, path)
            return None if located is None else _replace_splice(located, value)
        case AddEntry(path=path, key=key, value=value):
            located = locate(root, path)
            return None if located is None else _add_splice(content, located, key, value)
    return None


def apply_splices(content: str, splices: Iterable[Splice]) -> tuple[str, tuple[int, ...]]:
    """Apply non-overlapping ``splices`` from the end of ``content`` backwards.

    Returns:
        tuple[str, tuple[int, ...]]: New content and the ``order`` values of the
        splices that were applied, ascending.
    """

    result = content
    applied: list[int] = []
    boundary = len(content) + 1
    for splice in sorted(splices, key=lambda item: (item.start, item.end, item.order), reverse=True):
        if splice.end > boundary:
            LOGGER.debug("skipping overlapping edit at %s", splice.start)
            continue
        result = result[: splice.start] + splice.text + result[splice.end :]
        boundary = splice.start
        applied.append(splice.order)
    return result, tuple(sorted(applied))


def apply_edits(content: str, edits: Sequence[tuple[int, DocumentEdit]]) -> tuple[str, tuple[int, ...]]:
    """Apply indexed ``edits`` to ``content``.

    Args:
        content: Original document text.
        edits: ``(index, edit)`` pairs; the index is reported back when applied.

    Returns:
        tuple[str, tuple[int, ...]]: Updated content and applied indexes. The
        original content is returned unchanged when the edited text would no
        longer parse.
    """

    if not edits:
        return content, ()
    try:
        root = compose_document(content)
    except yaml.YAMLError as exc:
        LOGGER.warning("cannot apply edits to unparsable document: %s", exc)
        return content, ()
    splices: list[Splice] = []
    for index, edit in edits:
        splice = plan_splice(content, root, edit)
        if splice is None:
            LOGGER.debug("edit %s could not be located: %s", index, edit)
            continue
        splices.append(Splice(splice.start, splice.end, splice.text, order=index))
    updated, applied = apply_splices(content, splices)
    if not applied:
        return content, ()
    try:
        load_document(updated)
    except yaml.YAMLError as exc:
        LOGGER.warning("edited document no longer parses, discarding edits: %s", exc)
        return content, ()
    return updated, applied


def apply_suggestions(content: str, indexes: Iterable[int], analyzer: Analyzer) -> ApplyResult:
    """Apply suggestions chosen by index from ``analyzer``'s analysis of ``content``.

    Indexes refer to the suggestion list produced by analysing this same
    ``content``; out-of-range indexes and suggestions without an automatic
    edit are ignored.

    Args:
        content: Original document text.
        indexes: Positions in the suggestion list to apply.
        analyzer: Analyzer that produced the suggestion list.

    Returns:
        ApplyResult: Updated content and the indexes that were applied.
    """

    try:
        document = round_trip_load(content)
    except yaml.YAMLError as exc:
        LOGGER.warning("cannot analyse unparsable document: %s", exc)
        return ApplyResult(content=content)
    planned = analyzer.analyze(document).planned
    edits: list[tuple[int, DocumentEdit]] = []
    for index in dict.fromkeys(indexes):
        if 0 <= index < len(planned) and planned[index].edit is not None:
            edits.append((index, planned[index].edit))
    updated, applied = apply_edits(content, edits)
    return ApplyResult(content=updated, applied=applied)


__all__ = ["Splice", "apply_edits", "apply_splices", "apply_suggestions", "locate", "plan_splice"]
