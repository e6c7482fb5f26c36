# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Heuristic provider detection for YAML documents."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Final

from .core.models import Provider, ProviderDetection

FORMAT_VERSION_MARKER: Final[str] = "awstemplateformatversion"
MARKER_CONFIDENCE: Final[float] = 0.9
NO_SIGNAL_CONFIDENCE: Final[float] = 0.5
TIE_CONFIDENCE: Final[float] = 0.3
LIKELY_THRESHOLD: Final[float] = 0.7

AWS_RESOURCE_TYPES: Final[tuple[str, ...]] = (
    "aws::s3::bucket",
    "aws::lambda::function",
    "aws::ec2::instance",
    "aws::iam::role",
    "aws::rds::dbinstance",
    "aws::cloudformation::stack",
)
CFN_INTRINSIC_TAGS: Final[tuple[str, ...]] = ("!ref", "!getatt", "!sub", "!join", "!split")
AZURE_TASKS: Final[tuple[str, ...]] = (
    "azurecli@",
    "azurepowershell@",
    "azureresourcemanagertemplate@",
    "dockerbuild@",
    "kubernetesmanifest@",
)


@dataclass(frozen=True, slots=True)
class ScoringRule:
    """Weighted keyword predicate applied to lower-cased content."""

    weight: int
    reason: str
    matches: Callable[[str], bool]


def _all(*needles: str) -> Callable[[str], bool]:
    return lambda text: all(needle in text for needle in needles)


def _keyword_rules(keywords: tuple[str, ...], weight: int, reason: str) -> tuple[ScoringRule, ...]:
    return tuple(ScoringRule(weight, reason.format(keyword=keyword), _all(keyword)) for keyword in keywords)


AWS_RULES: Final[tuple[ScoringRule, ...]] = (
    ScoringRule(50, "Contains AWSTemplateFormatVersion", _all(FORMAT_VERSION_MARKER)),
    ScoringRule(40, "Contains AWS resource types", _all("resources:", "type: aws::")),
    ScoringRule(
        20,
        "Has Resources section without Steps (CloudFormation pattern)",
        lambda text: "resources:" in text and "steps:" not in text,
    ),
    *_keyword_rules(AWS_RESOURCE_TYPES, 10, "Contains {keyword}"),
    *_keyword_rules(CFN_INTRINSIC_TAGS, 5, "Uses CloudFormation function {keyword}"),
)

AZURE_RULES: Final[tuple[ScoringRule, ...]] = (
    ScoringRule(
        30,
        "Contains Azure Pipelines trigger configuration",
        lambda text: "trigger:" in text or "pr:" in text,
    ),
    ScoringRule(
        40,
        "Contains Azure Pipelines steps with script/task",
        lambda text: "steps:" in text and ("script:" in text or "task:" in text),
    ),
    ScoringRule(30, "Contains Azure Pipelines jobs and steps structure", _all("jobs:", "steps:")),
    ScoringRule(25, "Contains Azure Pipelines stages and jobs structure", _all("stages:", "jobs:")),
    *_keyword_rules(AZURE_TASKS, 10, "Contains Azure task {keyword}"),
    ScoringRule(
        15,
        "Contains Azure Pipelines pool configuration",
        lambda text: "pool:" in text and ("vmimage:" in text or "name:" in text),
    ),
    ScoringRule(10, "Contains variables with steps (Azure pattern)", _all("variables:", "steps:")),
)


def _score(text: str, rules: tuple[ScoringRule, ...]) -> tuple[int, list[str]]:
    total = 0
    reasons: list[str] = []
    for rule in rules:
        if rule.matches(text):
            total += rule.weight
            reasons.append(rule.reason)
    return total, reasons


def _confidence(score: int) -> float:
    return min(score / 100, 1.0)


def detect_provider(content: str, forced: Provider | str | None = None) -> ProviderDetection:
    """Classify ``content`` as AWS CloudFormation, Azure Pipelines or generic YAML.

    AWS and Azure are scored independently from weighted keyword hits and the
    higher score wins. Equal scores resolve to AWS at fixed confidence when the
    format-version marker is present and to generic otherwise. A winning AWS
    score backed by the marker never reports less than the marker confidence.

    Args:
        content: Raw document text.
        forced: Provider override that skips scoring.

    Returns:
        ProviderDetection: Provider, confidence in ``[0, 1]`` and the reasons
        that contributed to the decision.
    """

    if forced is not None:
        return ProviderDetection(
            provider=Provider(forced),
            confidence=1.0,
            reasons=("Provider manually specified",),
        )
    if not content.strip():
        return ProviderDetection(provider=Provider.GENERIC, confidence=0.0, reasons=("No content to analyze",))

    text = content.lower()
    aws_score, aws_reasons = _score(text, AWS_RULES)
    azure_score, azure_reasons = _score(text, AZURE_RULES)
    reasons = (*aws_reasons, *azure_reasons)
    has_marker = FORMAT_VERSION_MARKER in text

    if aws_score == 0 and azure_score == 0:
        return ProviderDetection(
            provider=Provider.GENERIC,
            confidence=NO_SIGNAL_CONFIDENCE,
            reasons=("No specific provider patterns detected",),
        )
    if aws_score > azure_score:
        confidence = _confidence(aws_score)
        if has_marker:
            confidence = max(confidence, MARKER_CONFIDENCE)
        return ProviderDetection(provider=Provider.AWS, confidence=confidence, reasons=reasons)
    if azure_score > aws_score:
        return ProviderDetection(provider=Provider.AZURE, confidence=_confidence(azure_score), reasons=reasons)
    if has_marker:
        return ProviderDetection(
            provider=Provider.AWS,
            confidence=MARKER_CONFIDENCE,
            reasons=(*reasons, "Tie resolved by AWSTemplateFormatVersion marker"),
        )
    return ProviderDetection(
        provider=Provider.GENERIC,
        confidence=TIE_CONFIDENCE,
        reasons=(*reasons, "Ambiguous provider signals"),
    )


def is_likely_cloudformation(content: str) -> bool:
    """Return ``True`` when ``content`` confidently looks like a CloudFormation template."""

    detection = detect_provider(content)
    return detection.provider is Provider.AWS and detection.confidence > LIKELY_THRESHOLD


def is_likely_azure_pipelines(content: str) -> bool:
    """Return ``True`` when ``content`` confidently looks like an Azure Pipelines definition."""

    detection = detect_provider(content)
    return detection.provider is Provider.AZURE and detection.confidence > LIKELY_THRESHOLD


__all__ = [
    "AWS_RULES",
    "AZURE_RULES",
    "ScoringRule",
    "detect_provider",
    "is_likely_azure_pipelines",
    "is_likely_cloudformation",
]
