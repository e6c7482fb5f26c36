# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Deterministic, ordered auto-fix pipeline.

Every stage is a text transform. A stage records its fix identifiers only
when it changed the content, and a stage whose postcondition already holds
leaves the content untouched, so running the pipeline on its own output
records nothing new.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable
from dataclasses import dataclass
from typing import Final

import yaml
from yaml.constructor import ConstructorError

from ..config.models import AutoFixOptions
from ..core.models import AutoFixResult, Provider, SuggestionKind
from ..detection import detect_provider
from ..parsing import dump_canonical, load_document, round_trip_load
from ..suggestions.apply import apply_edits
from ..suggestions.base import DocumentEdit, RenameKey
from ..suggestions.cfn import CloudFormationAnalyzer
from ..tools.builtins import prettier_invocation, spectral_fix_invocation
from ..tools.runner import ProcessToolRunner, ToolRunner, invoke

LOGGER = logging.getLogger(__name__)

NORMALIZE_EOL: Final[str] = "normalize-eol"
TABS_TO_SPACES: Final[str] = "tabs-to-spaces"
ADD_DOCUMENT_START: Final[str] = "add-document-start"
REMOVE_ANCHORS_ALIASES: Final[str] = "remove-anchors-aliases"
DEDUPE_KEYS: Final[str] = "dedupe-keys-last-wins"
CFN_TYPO_FIX: Final[str] = "cfn-typo-fix"
CFN_RENAME_TYPOS: Final[str] = "cfn-rename-typos"
SPECTRAL_FIX: Final[str] = "spectral-fix"
PRETTIER_YAML: Final[str] = "prettier-yaml"
ENSURE_TRAILING_NEWLINE: Final[str] = "ensure-trailing-newline"

TAB_REPLACEMENT: Final[str] = "  "
_DOCUMENT_START: Final[re.Pattern[str]] = re.compile(r"^---(?:[ \t]|$)", re.MULTILINE)
# Known CloudFormation property-name typos.
CFN_TYPO_TABLE: Final[tuple[tuple[re.Pattern[str], str], ...]] = (
    (re.compile(r"\bBucketnName\s*:"), "BucketName:"),
    (re.compile(r"\bBucktName\s*:"), "BucketName:"),
    (re.compile(r"\bBuckt\s*:"), "Bucket:"),
    (re.compile(r"\bPropeties\s*:"), "Properties:"),
    (re.compile(r"\bProperites\s*:"), "Properties:"),
)
_SPECTRAL_ACCEPTED_CODES: Final[frozenset[int]] = frozenset({0, 1})

StageOutput = tuple[str, tuple[str, ...]]


@dataclass(frozen=True, slots=True)
class FixContext:
    """Per-run inputs shared by the stages."""

    options: AutoFixOptions
    runner: ToolRunner


@dataclass(frozen=True, slots=True)
class FixStage:
    """Named transform with an enablement predicate."""

    name: str
    apply: Callable[[str, FixContext], StageOutput]
    enabled: Callable[[AutoFixOptions], bool] = lambda _options: True


def _normalize_eol(content: str, _context: FixContext) -> StageOutput:
    return content.replace("\r\n", "\n").replace("\r", "\n"), (NORMALIZE_EOL,)


def _tabs_to_spaces(content: str, _context: FixContext) -> StageOutput:
    return content.replace("\t", TAB_REPLACEMENT), (TABS_TO_SPACES,)


def _add_document_start(content: str, _context: FixContext) -> StageOutput:
    if _DOCUMENT_START.search(content):
        return content, ()
    return f"---\n{content}", (ADD_DOCUMENT_START,)


def _has_node_references(content: str) -> bool:
    try:
        return any(
            isinstance(token, (yaml.AnchorToken, yaml.AliasToken))
            for token in yaml.scan(content, Loader=yaml.SafeLoader)
        )
    except yaml.YAMLError:
        return False


def _has_duplicate_keys(content: str) -> bool:
    try:
        load_document(content, strict=True)
    except ConstructorError as exc:
        return "duplicate key" in (exc.problem or "")
    except yaml.YAMLError:
        return False
    return False


def _round_trip(content: str, _context: FixContext) -> StageOutput:
    references = _has_node_references(content)
    duplicates = _has_duplicate_keys(content)
    if not references and not duplicates:
        return content, ()
    document = round_trip_load(content)
    normalized = dump_canonical(document, explicit_start=True)
    ids: list[str] = []
    if references:
        ids.append(REMOVE_ANCHORS_ALIASES)
    if duplicates:
        ids.append(DEDUPE_KEYS)
    return normalized, tuple(ids)


def _substitute_keys(pattern: re.Pattern[str], replacement: str, content: str) -> str:
    """Apply ``pattern`` match by match, skipping renames onto an existing sibling key."""

    updated = content
    # Right to left so earlier match offsets stay valid.
    for match in reversed(list(pattern.finditer(content))):
        candidate = f"{updated[: match.start()]}{replacement}{updated[match.end() :]}"
        if _has_duplicate_keys(candidate):
            LOGGER.debug("skipping rename to %s at offset %d: key already present", replacement, match.start())
            continue
        updated = candidate
    return updated


def _cfn_typo_table(content: str, _context: FixContext) -> StageOutput:
    updated = content
    for pattern, replacement in CFN_TYPO_TABLE:
        updated = _substitute_keys(pattern, replacement, updated)
    return updated, (CFN_TYPO_FIX,)


def _cfn_rename_typos(content: str, _context: FixContext) -> StageOutput:
    if detect_provider(content).provider is not Provider.AWS:
        return content, ()
    try:
        document = round_trip_load(content)
    except yaml.YAMLError:
        return content, ()
    analysis = CloudFormationAnalyzer().analyze(document)
    edits: list[tuple[int, DocumentEdit]] = [
        (index, planned.edit)
        for index, planned in enumerate(analysis.planned)
        if planned.suggestion.kind is SuggestionKind.RENAME and isinstance(planned.edit, RenameKey)
    ]
    updated, _applied = apply_edits(content, edits)
    return updated, (CFN_RENAME_TYPOS,)


def _spectral_fix(content: str, context: FixContext) -> StageOutput:
    options = context.options
    invocation = spectral_fix_invocation(content, options.spectral_ruleset_path, timeout_ms=options.tool_timeout_ms)
    result = invoke(context.runner, invocation)
    if result.code not in _SPECTRAL_ACCEPTED_CODES or not result.stdout.strip():
        LOGGER.info("spectral --fix did not produce output (exit %s)", result.code)
        return content, ()
    return result.stdout, (SPECTRAL_FIX,)


def _prettier(content: str, context: FixContext) -> StageOutput:
    result = invoke(context.runner, prettier_invocation(content, timeout_ms=context.options.tool_timeout_ms))
    if result.code != 0 or not result.stdout.strip():
        LOGGER.info("prettier did not format the document (exit %s)", result.code)
        return content, ()
    return result.stdout, (PRETTIER_YAML,)


def _ensure_trailing_newline(content: str, _context: FixContext) -> StageOutput:
    if content.endswith("\n"):
        return content, ()
    return f"{content}\n", (ENSURE_TRAILING_NEWLINE,)


STAGES: Final[tuple[FixStage, ...]] = (
    FixStage(NORMALIZE_EOL, _normalize_eol),
    FixStage(TABS_TO_SPACES, _tabs_to_spaces),
    FixStage(ADD_DOCUMENT_START, _add_document_start),
    FixStage("round-trip", _round_trip),
    FixStage(CFN_TYPO_FIX, _cfn_typo_table, lambda options: options.cfn_fix),
    FixStage(CFN_RENAME_TYPOS, _cfn_rename_typos, lambda options: options.cfn_fix),
    FixStage(SPECTRAL_FIX, _spectral_fix, lambda options: options.spectral_fix),
    FixStage(PRETTIER_YAML, _prettier, lambda options: options.prettier),
    FixStage(ENSURE_TRAILING_NEWLINE, _ensure_trailing_newline),
)


def auto_fix(content: str, options: AutoFixOptions | None = None) -> AutoFixResult:
    """Run the auto-fix stages over ``content``.

    A failing stage is logged and skipped; later stages still run.

    Args:
        content: YAML document text.
        options: Stage toggles and the tool runner; defaults apply when omitted.

    Returns:
        AutoFixResult: Fixed content and the identifiers of the fixes applied,
        in stage order.
    """

    opts = options or AutoFixOptions()
    context = FixContext(options=opts, runner=opts.tool_runner or ProcessToolRunner())
    current = content
    applied: list[str] = []
    for stage in STAGES:
        if not stage.enabled(opts):
            continue
        try:
            updated, ids = stage.apply(current, context)
        except Exception as exc:  # stage isolation boundary
            LOGGER.warning("auto-fix stage %s failed: %s", stage.name, exc)
            continue
        if updated != current:
            current = updated
            applied.extend(fix_id for fix_id in ids if fix_id not in applied)
    return AutoFixResult(content=current, fixes_applied=tuple(applied))


__all__ = [
    "ADD_DOCUMENT_START",
    "CFN_RENAME_TYPOS",
    "CFN_TYPO_FIX",
    "DEDUPE_KEYS",
    "ENSURE_TRAILING_NEWLINE",
    "FixStage",
    "NORMALIZE_EOL",
    "PRETTIER_YAML",
    "REMOVE_ANCHORS_ALIASES",
    "SPECTRAL_FIX",
    "STAGES",
    "TABS_TO_SPACES",
    "auto_fix",
]
