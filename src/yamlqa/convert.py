# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""YAML/JSON conversion helpers."""

from __future__ import annotations

import json

from .parsing import dump_canonical, load_document


def yaml_to_json(content: str) -> str:
    """Return ``content`` re-encoded as two-space indented JSON.

    Timestamps and other non-JSON scalars are rendered as strings.

    Raises:
        yaml.YAMLError: If ``content`` is not valid YAML.
    """

    return json.dumps(load_document(content), indent=2, ensure_ascii=False, default=str)


def json_to_yaml(content: str) -> str:
    """Return ``content`` re-encoded as block-style YAML preserving key order.

    Raises:
        json.JSONDecodeError: If ``content`` is not valid JSON.
    """

    return dump_canonical(json.loads(content), explicit_start=False)


__all__ = ["json_to_yaml", "yaml_to_json"]
