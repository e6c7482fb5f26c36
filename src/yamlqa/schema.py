# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Validate YAML documents against caller-supplied JSON Schemas."""

from __future__ import annotations

from collections.abc import Iterable, Mapping

import yaml
from jsonschema import Draft202012Validator
from jsonschema.exceptions import SchemaError
from jsonschema.validators import validator_for
from pydantic import BaseModel, ConfigDict, Field

from .parsing import load_document, yaml_error_text


class SchemaIssue(BaseModel):
    """One schema validation failure."""

    model_config = ConfigDict(frozen=True)

    instance_path: str = ""
    message: str
    keyword: str | None = None


class SchemaValidationResult(BaseModel):
    """Outcome of :func:`schema_validate`."""

    model_config = ConfigDict(frozen=True)

    ok: bool
    errors: tuple[SchemaIssue, ...] = Field(default_factory=tuple)


def json_pointer(path: Iterable[str | int]) -> str:
    """Return the RFC 6901 pointer for ``path`` (``""`` addresses the root)."""

    return "".join(f"/{str(segment).replace('~', '~0').replace('/', '~1')}" for segment in path)


def schema_validate(content: str, schema: Mapping[str, object] | bool) -> SchemaValidationResult:
    """Parse ``content`` and validate the result against ``schema``.

    The validator class follows the schema's ``$schema`` declaration and
    defaults to Draft 2020-12. All errors are reported, ordered by instance
    path.

    Args:
        content: YAML document text.
        schema: JSON Schema document.

    Returns:
        SchemaValidationResult: ``ok`` plus issues keyed ``parse`` or
        ``schema-compile`` for unparsable input or an invalid schema.
    """

    try:
        data = load_document(content)
    except yaml.YAMLError as exc:
        return SchemaValidationResult(ok=False, errors=(SchemaIssue(message=yaml_error_text(exc), keyword="parse"),))

    validator_class = validator_for(schema, default=Draft202012Validator)
    try:
        validator_class.check_schema(schema)
    except SchemaError as exc:
        return SchemaValidationResult(ok=False, errors=(SchemaIssue(message=exc.message, keyword="schema-compile"),))

    validator = validator_class(schema)
    errors = sorted(validator.iter_errors(data), key=lambda error: [str(part) for part in error.absolute_path])
    if not errors:
        return SchemaValidationResult(ok=True)
    return SchemaValidationResult(
        ok=False,
        errors=tuple(
            SchemaIssue(
                instance_path=json_pointer(error.absolute_path),
                message=error.message,
                keyword=None if error.validator is None else str(error.validator),
            )
            for error in errors
        ),
    )


__all__ = ["SchemaIssue", "SchemaValidationResult", "json_pointer", "schema_validate"]
