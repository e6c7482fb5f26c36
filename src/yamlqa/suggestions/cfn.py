# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""CloudFormation template analyzer."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Final

from ..core.models import Provider, SuggestionKind
from ..parsing import TaggedValue
from .base import (
    AddEntry,
    AnalysisBuilder,
    AnalysisResult,
    DocumentPath,
    RenameKey,
    ReplaceScalar,
    closest_match,
    type_name,
)
from .specs import RESOURCE_ATTRIBUTES, TEMPLATE_SECTIONS, CfnPropertySpec, CfnSpecification, load_cfn_spec

_CUSTOM_TYPE_PREFIXES: Final[tuple[str, ...]] = ("Custom::", "AWS::CloudFormation::CustomResource")
_BOOLEAN_STRINGS: Final[frozenset[str]] = frozenset({"true", "false"})


def is_intrinsic(value: object) -> bool:
    """Return ``True`` when ``value`` is an intrinsic function call (``Ref``, ``Fn::*`` or a short-form tag)."""

    if isinstance(value, TaggedValue):
        return True
    if isinstance(value, dict) and len(value) == 1:
        key = next(iter(value))
        return isinstance(key, str) and (key == "Ref" or key == "Condition" or key.startswith("Fn::"))
    return False


def _is_number(value: object) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _primitive_ok(value: object, primitive: str) -> bool:
    match primitive:
        case "String":
            return isinstance(value, str)
        case "Integer" | "Long":
            if isinstance(value, str):
                return value.strip().lstrip("-").isdigit()
            return isinstance(value, int) and not isinstance(value, bool)
        case "Double":
            if isinstance(value, str):
                try:
                    float(value)
                except ValueError:
                    return False
                return True
            return _is_number(value)
        case "Boolean":
            return isinstance(value, bool) or (isinstance(value, str) and value.lower() in _BOOLEAN_STRINGS)
        case "Json":
            return isinstance(value, (dict, str))
        case _:
            return True


def expected_type(value: object, spec: CfnPropertySpec) -> str | None:
    """Return the expected type name when ``value`` contradicts ``spec``, else ``None``."""

    if value is None or is_intrinsic(value):
        return None
    if spec.type == "List":
        return None if isinstance(value, list) else "List"
    if spec.type == "Map":
        return None if isinstance(value, dict) else "Map"
    if spec.type:
        return None if isinstance(value, dict) else f"{spec.type} object"
    if spec.primitive_type and not _primitive_ok(value, spec.primitive_type):
        return spec.primitive_type
    return None


@dataclass(slots=True)
class CloudFormationAnalyzer:
    """Walk a parsed template and propose renames, type fixes and additions.

    Attributes:
        spec: Resource specification; loaded from ``CFN_SPEC_PATH`` or the
            embedded fallback when omitted.
    """

    spec: CfnSpecification = field(default_factory=load_cfn_spec)
    provider: Provider = Provider.AWS

    def analyze(self, document: object) -> AnalysisResult:
        builder = AnalysisBuilder()
        if not isinstance(document, dict):
            return builder.build()
        self._check_sections(builder, document)
        resources = document.get("Resources")
        if resources is None:
            return builder.build()
        if not isinstance(resources, dict):
            builder.suggest(("Resources",), "Resources should be a mapping of logical IDs", SuggestionKind.TYPE)
            builder.report(("Resources",), f"Resources should be a mapping, got {type_name(resources)}")
            return builder.build()
        for logical_id, definition in resources.items():
            self._check_resource(builder, str(logical_id), definition)
        return builder.build()

    def _check_sections(self, builder: AnalysisBuilder, document: Mapping[object, object]) -> None:
        for key in document:
            name = str(key)
            if name in TEMPLATE_SECTIONS:
                continue
            guess = closest_match(name, TEMPLATE_SECTIONS)
            if guess is not None and guess[0] not in document:
                target, ratio = guess
                builder.suggest(
                    (name,),
                    f"Unknown template section {name}. Did you mean {target}?",
                    SuggestionKind.RENAME,
                    edit=RenameKey((name,), target),
                    confidence=ratio,
                )
                builder.report((name,), f"Unknown template section {name}", suggestion=f"Rename to {target}")
            else:
                builder.report((name,), f"Unknown template section {name}")

    def _check_resource(self, builder: AnalysisBuilder, logical_id: str, definition: object) -> None:
        base: DocumentPath = ("Resources", logical_id)
        if not isinstance(definition, dict):
            builder.suggest(base, f"Resource {logical_id} should be a mapping", SuggestionKind.TYPE)
            builder.report(base, f"Resource {logical_id} should be a mapping, got {type_name(definition)}")
            return
        resource_type = definition.get("Type")
        if not isinstance(resource_type, str) or not resource_type:
            builder.suggest((*base, "Type"), f"Resource {logical_id} is missing Type", SuggestionKind.ADD)
            builder.report((*base, "Type"), f"Resource {logical_id} is missing Type")
            return

        self._check_attributes(builder, base, definition)
        resource_spec = self.spec.resource_types.get(resource_type)
        if resource_spec is None:
            self._check_type_name(builder, base, resource_type)
            return

        properties = definition.get("Properties")
        if properties is not None and not isinstance(properties, dict):
            if not is_intrinsic(properties):
                builder.suggest((*base, "Properties"), "Properties should be a mapping", SuggestionKind.TYPE)
                builder.report((*base, "Properties"), f"Properties should be a mapping, got {type_name(properties)}")
            return

        required = [name for name, prop in resource_spec.properties.items() if prop.required]
        if properties is None:
            if required:
                builder.suggest(
                    (*base, "Properties"),
                    f"Add Properties with required {', '.join(required)}",
                    SuggestionKind.ADD,
                    edit=AddEntry(base, "Properties", dict.fromkeys(required)),
                )
                builder.report((*base, "Properties"), f"Missing required properties: {', '.join(required)}")
            return

        props_path: DocumentPath = (*base, "Properties")
        for name in required:
            if name not in properties:
                builder.suggest(
                    (*props_path, name),
                    f"Add required property {name}",
                    SuggestionKind.ADD,
                    edit=AddEntry(props_path, name),
                )
                builder.report((*props_path, name), f"Missing required property {name}")

        for key, value in properties.items():
            name = str(key)
            prop_spec = resource_spec.properties.get(name)
            if prop_spec is None:
                self._check_unknown_property(builder, props_path, name, properties, resource_spec.properties)
                continue
            expected = expected_type(value, prop_spec)
            if expected is not None:
                builder.suggest(
                    (*props_path, name),
                    f"Property {name} expects {expected}, got {type_name(value)}",
                    SuggestionKind.TYPE,
                )
                builder.report((*props_path, name), f"Property {name} expects {expected}")

    @staticmethod
    def _check_attributes(builder: AnalysisBuilder, base: DocumentPath, definition: Mapping[object, object]) -> None:
        for key in definition:
            name = str(key)
            if name in RESOURCE_ATTRIBUTES:
                continue
            guess = closest_match(name, RESOURCE_ATTRIBUTES)
            if guess is not None and guess[0] not in definition:
                target, ratio = guess
                builder.suggest(
                    (*base, name),
                    f"Unexpected resource attribute {name}. Did you mean {target}?",
                    SuggestionKind.RENAME,
                    edit=RenameKey((*base, name), target),
                    confidence=ratio,
                )
                builder.report((*base, name), f"Unexpected field {name} under resource", suggestion=f"Rename to {target}")
            else:
                builder.report((*base, name), f"Unexpected field {name} under resource")

    def _check_type_name(self, builder: AnalysisBuilder, base: DocumentPath, resource_type: str) -> None:
        if resource_type.startswith(_CUSTOM_TYPE_PREFIXES):
            return
        guess = closest_match(resource_type, self.spec.resource_types)
        if guess is None:
            return
        target, ratio = guess
        builder.suggest(
            (*base, "Type"),
            f"Unknown resource type {resource_type}. Did you mean {target}?",
            SuggestionKind.RENAME,
            edit=ReplaceScalar((*base, "Type"), target),
            confidence=ratio,
        )
        builder.report((*base, "Type"), f"Unknown resource type {resource_type}", suggestion=f"Use {target}")

    @staticmethod
    def _check_unknown_property(
        builder: AnalysisBuilder,
        props_path: DocumentPath,
        name: str,
        properties: Mapping[object, object],
        known: Mapping[str, CfnPropertySpec],
    ) -> None:
        guess = closest_match(name, known)
        if guess is not None and guess[0] not in properties:
            target, ratio = guess
            builder.suggest(
                (*props_path, name),
                f"Unknown property {name}. Did you mean {target}?",
                SuggestionKind.RENAME,
                edit=RenameKey((*props_path, name), target),
                confidence=ratio,
            )
            builder.report((*props_path, name), f"Unknown property {name}", suggestion=f"Rename to {target}")
        else:
            builder.report((*props_path, name), f"Unknown property {name}")


__all__ = ["CloudFormationAnalyzer", "expected_type", "is_intrinsic"]
