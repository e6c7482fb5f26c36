# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Vocabularies consulted by the CloudFormation and Azure Pipelines analyzers.

Both loaders prefer an on-disk specification (``CFN_SPEC_PATH`` /
``AZURE_PIPELINES_SCHEMA_PATH``) and fall back to a small embedded
vocabulary covering common resources and step kinds.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from functools import lru_cache
from pathlib import Path
from typing import Final

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ..config.models import EngineEnvironment

LOGGER = logging.getLogger(__name__)

RESOURCE_ATTRIBUTES: Final[frozenset[str]] = frozenset(
    {
        "Type",
        "Properties",
        "Metadata",
        "DependsOn",
        "DeletionPolicy",
        "UpdateReplacePolicy",
        "UpdatePolicy",
        "CreationPolicy",
        "Condition",
    },
)
TEMPLATE_SECTIONS: Final[tuple[str, ...]] = (
    "AWSTemplateFormatVersion",
    "Description",
    "Metadata",
    "Parameters",
    "Rules",
    "Mappings",
    "Conditions",
    "Transform",
    "Resources",
    "Outputs",
)


class CfnPropertySpec(BaseModel):
    """Property entry of the CloudFormation resource specification."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    required: bool = Field(default=False, alias="Required")
    primitive_type: str | None = Field(default=None, alias="PrimitiveType")
    type: str | None = Field(default=None, alias="Type")
    item_type: str | None = Field(default=None, alias="ItemType")
    primitive_item_type: str | None = Field(default=None, alias="PrimitiveItemType")


class CfnResourceSpec(BaseModel):
    """Resource type entry of the CloudFormation resource specification."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    properties: dict[str, CfnPropertySpec] = Field(default_factory=dict, alias="Properties")


class CfnSpecification(BaseModel):
    """Subset of the official CloudFormation resource specification document."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    resource_types: dict[str, CfnResourceSpec] = Field(default_factory=dict, alias="ResourceTypes")


def _props(**entries: Mapping[str, object]) -> dict[str, object]:
    return {"Properties": dict(entries)}


_STRING: Final[dict[str, object]] = {"PrimitiveType": "String"}
_REQUIRED_STRING: Final[dict[str, object]] = {"PrimitiveType": "String", "Required": True}
_INTEGER: Final[dict[str, object]] = {"PrimitiveType": "Integer"}
_BOOLEAN: Final[dict[str, object]] = {"PrimitiveType": "Boolean"}
_JSON: Final[dict[str, object]] = {"PrimitiveType": "Json"}
_LIST: Final[dict[str, object]] = {"Type": "List"}
_TAGS: Final[dict[str, object]] = {"Type": "List", "ItemType": "Tag"}

FALLBACK_CFN_SPEC: Final[dict[str, object]] = {
    "ResourceTypes": {
        "AWS::S3::Bucket": _props(
            BucketName=_STRING,
            AccessControl=_STRING,
            BucketEncryption={"Type": "BucketEncryption"},
            CorsConfiguration={"Type": "CorsConfiguration"},
            LifecycleConfiguration={"Type": "LifecycleConfiguration"},
            LoggingConfiguration={"Type": "LoggingConfiguration"},
            NotificationConfiguration={"Type": "NotificationConfiguration"},
            ObjectLockEnabled=_BOOLEAN,
            PublicAccessBlockConfiguration={"Type": "PublicAccessBlockConfiguration"},
            Tags=_TAGS,
            VersioningConfiguration={"Type": "VersioningConfiguration"},
            WebsiteConfiguration={"Type": "WebsiteConfiguration"},
        ),
        "AWS::SNS::Topic": _props(
            TopicName=_STRING,
            DisplayName=_STRING,
            FifoTopic=_BOOLEAN,
            KmsMasterKeyId=_STRING,
            Subscription={"Type": "List", "ItemType": "Subscription"},
            Tags=_TAGS,
        ),
        "AWS::SQS::Queue": _props(
            QueueName=_STRING,
            DelaySeconds=_INTEGER,
            FifoQueue=_BOOLEAN,
            KmsMasterKeyId=_STRING,
            MaximumMessageSize=_INTEGER,
            MessageRetentionPeriod=_INTEGER,
            ReceiveMessageWaitTimeSeconds=_INTEGER,
            RedrivePolicy=_JSON,
            Tags=_TAGS,
            VisibilityTimeout=_INTEGER,
        ),
        "AWS::Lambda::Function": _props(
            Architectures={"Type": "List", "PrimitiveItemType": "String"},
            Code={"Type": "Code", "Required": True},
            Description=_STRING,
            Environment={"Type": "Environment"},
            FunctionName=_STRING,
            Handler=_STRING,
            Layers={"Type": "List", "PrimitiveItemType": "String"},
            MemorySize=_INTEGER,
            Role=_REQUIRED_STRING,
            Runtime=_STRING,
            Tags=_TAGS,
            Timeout=_INTEGER,
        ),
        "AWS::IAM::Role": _props(
            AssumeRolePolicyDocument={"PrimitiveType": "Json", "Required": True},
            Description=_STRING,
            ManagedPolicyArns={"Type": "List", "PrimitiveItemType": "String"},
            MaxSessionDuration=_INTEGER,
            Path=_STRING,
            PermissionsBoundary=_STRING,
            Policies={"Type": "List", "ItemType": "Policy"},
            RoleName=_STRING,
            Tags=_TAGS,
        ),
    },
}


class AzureVocabulary(BaseModel):
    """Allowed root keys and known step discriminators of Azure Pipelines YAML."""

    model_config = ConfigDict(frozen=True)

    root_keys: tuple[str, ...]
    step_keys: tuple[str, ...]


FALLBACK_AZURE_VOCABULARY: Final[AzureVocabulary] = AzureVocabulary(
    root_keys=(
        "name",
        "appendCommitMessageToRunName",
        "trigger",
        "pr",
        "pool",
        "variables",
        "steps",
        "jobs",
        "stages",
        "resources",
        "schedules",
        "extends",
        "parameters",
        "lockBehavior",
    ),
    step_keys=(
        "script",
        "bash",
        "powershell",
        "pwsh",
        "task",
        "checkout",
        "download",
        "downloadBuild",
        "getPackage",
        "publish",
        "reviewApp",
        "template",
        "publishPipelineArtifact",
        "downloadPipelineArtifact",
    ),
)


def _mtime(path: Path) -> float:
    try:
        return path.stat().st_mtime
    except OSError:
        return 0.0


@lru_cache(maxsize=8)
def _read_cfn_spec(path: str, mtime: float) -> CfnSpecification | None:
    del mtime  # cache key only
    try:
        raw = json.loads(Path(path).read_text(encoding="utf-8"))
        spec = CfnSpecification.model_validate(raw)
    except (OSError, ValueError, ValidationError) as exc:
        LOGGER.warning("unable to load CloudFormation specification %s: %s", path, exc)
        return None
    if not spec.resource_types:
        LOGGER.warning("CloudFormation specification %s has no ResourceTypes", path)
        return None
    return spec


_FALLBACK_CFN: Final[CfnSpecification] = CfnSpecification.model_validate(FALLBACK_CFN_SPEC)


def load_cfn_spec(path: Path | None = None) -> CfnSpecification:
    """Return the CloudFormation specification in effect.

    Args:
        path: Explicit specification file; defaults to ``CFN_SPEC_PATH``.

    Returns:
        CfnSpecification: Parsed specification, or the embedded fallback when
        no usable file is configured.
    """

    target = path or EngineEnvironment.from_env().cfn_spec_path
    if target is not None:
        loaded = _read_cfn_spec(str(target), _mtime(target))
        if loaded is not None:
            return loaded
    return _FALLBACK_CFN


def _variant_keys(variants: object) -> list[str]:
    keys: list[str] = []
    if not isinstance(variants, list):
        return keys
    for variant in variants:
        if isinstance(variant, dict) and isinstance(variant.get("properties"), dict):
            keys.extend(str(key) for key in variant["properties"])
    return keys


def _step_variants(definitions: Mapping[str, object]) -> object:
    for name in ("steps", "step"):
        definition = definitions.get(name)
        if not isinstance(definition, dict):
            continue
        items = definition.get("items")
        holder = items if isinstance(items, dict) else definition
        for combinator in ("oneOf", "anyOf"):
            if isinstance(holder.get(combinator), list):
                return holder[combinator]
    return None


@lru_cache(maxsize=8)
def _read_azure_schema(path: str, mtime: float) -> AzureVocabulary | None:
    del mtime  # cache key only
    try:
        raw = json.loads(Path(path).read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        LOGGER.warning("unable to load Azure Pipelines schema %s: %s", path, exc)
        return None
    if not isinstance(raw, dict):
        return None
    properties = raw.get("properties")
    root_keys = [str(key) for key in properties] if isinstance(properties, dict) else []
    definitions = raw.get("definitions")
    step_keys = _variant_keys(_step_variants(definitions)) if isinstance(definitions, dict) else []
    if not root_keys and not step_keys:
        return None
    return AzureVocabulary(
        root_keys=tuple(dict.fromkeys(root_keys)) or FALLBACK_AZURE_VOCABULARY.root_keys,
        step_keys=tuple(dict.fromkeys(step_keys)) or FALLBACK_AZURE_VOCABULARY.step_keys,
    )


def load_azure_vocabulary(path: Path | None = None) -> AzureVocabulary:
    """Return the Azure Pipelines vocabulary in effect.

    Args:
        path: Explicit JSON schema file; defaults to ``AZURE_PIPELINES_SCHEMA_PATH``.

    Returns:
        AzureVocabulary: Keys derived from the schema, or the embedded fallback.
    """

    target = path or EngineEnvironment.from_env().azure_schema_path
    if target is not None:
        loaded = _read_azure_schema(str(target), _mtime(target))
        if loaded is not None:
            return loaded
    return FALLBACK_AZURE_VOCABULARY


__all__ = [
    "AzureVocabulary",
    "CfnPropertySpec",
    "CfnResourceSpec",
    "CfnSpecification",
    "FALLBACK_AZURE_VOCABULARY",
    "FALLBACK_CFN_SPEC",
    "RESOURCE_ATTRIBUTES",
    "TEMPLATE_SECTIONS",
    "load_azure_vocabulary",
    "load_cfn_spec",
]
