# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Azure Pipelines definition analyzer."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Final

from ..core.models import Provider, SuggestionKind
from .base import AddEntry, AnalysisBuilder, AnalysisResult, DocumentPath, RenameKey, closest_match, type_name
from .specs import AzureVocabulary, load_azure_vocabulary

SCRIPT_STEP_KEYS: Final[frozenset[str]] = frozenset({"script", "bash", "powershell", "pwsh"})
# Keys any step may carry alongside its discriminator.
COMMON_STEP_PROPERTIES: Final[frozenset[str]] = frozenset(
    {
        "clean",
        "condition",
        "continueOnError",
        "displayName",
        "enabled",
        "env",
        "errorActionPreference",
        "failOnStderr",
        "fetchDepth",
        "fetchTags",
        "ignoreLASTEXITCODE",
        "inputs",
        "lfs",
        "name",
        "parameters",
        "path",
        "persistCredentials",
        "retryCountOnTaskFailure",
        "submodules",
        "target",
        "timeoutInMinutes",
        "workingDirectory",
    },
)
_TEMPLATE_KEYS: Final[frozenset[str]] = frozenset({"template"})
_DEPLOYMENT_KEYS: Final[frozenset[str]] = frozenset({"deployment", "template"})


def _is_list(value: object) -> bool:
    return isinstance(value, list)


@dataclass(slots=True)
class AzurePipelinesAnalyzer:
    """Walk a parsed pipeline and propose renames, type fixes and additions.

    Attributes:
        vocabulary: Root and step keys; loaded from ``AZURE_PIPELINES_SCHEMA_PATH``
            or the embedded fallback when omitted.
    """

    vocabulary: AzureVocabulary = field(default_factory=load_azure_vocabulary)
    provider: Provider = Provider.AZURE

    def analyze(self, document: object) -> AnalysisResult:
        builder = AnalysisBuilder()
        if not isinstance(document, dict):
            return builder.build()
        self._check_root_keys(builder, document)

        steps = document.get("steps")
        jobs = document.get("jobs")
        stages = document.get("stages")
        for key, value in (("steps", steps), ("jobs", jobs), ("stages", stages)):
            if value is not None and not _is_list(value):
                self._not_a_list(builder, (key,), key, value)

        if _is_list(steps):
            self._check_steps(builder, steps, ("steps",))
        if _is_list(jobs):
            self._check_jobs(builder, jobs, ("jobs",))
        if _is_list(stages):
            self._check_stages(builder, stages)
        return builder.build()

    def _check_root_keys(self, builder: AnalysisBuilder, document: Mapping[object, object]) -> None:
        allowed = self.vocabulary.root_keys
        for key in document:
            name = str(key)
            if name in allowed:
                continue
            guess = closest_match(name, allowed)
            if guess is not None and guess[0] not in document:
                target, ratio = guess
                builder.suggest(
                    (name,),
                    f"Unknown root key {name}. Did you mean {target}?",
                    SuggestionKind.RENAME,
                    edit=RenameKey((name,), target),
                    confidence=ratio,
                )
                builder.report((name,), f"Unknown root key {name}", suggestion=f"Rename to {target}")
            else:
                builder.report((name,), f"Unknown root key {name}")

    @staticmethod
    def _not_a_list(builder: AnalysisBuilder, path: DocumentPath, key: str, value: object) -> None:
        builder.suggest(path, f"{key} should be a list", SuggestionKind.TYPE)
        builder.report(path, f"{key} should be a list, got {type_name(value)}")

    def _check_steps(self, builder: AnalysisBuilder, steps: list[object], base: DocumentPath) -> None:
        for index, step in enumerate(steps):
            path: DocumentPath = (*base, index)
            if not isinstance(step, dict):
                builder.suggest(path, "step should be a mapping", SuggestionKind.TYPE)
                builder.report(path, f"step should be a mapping, got {type_name(step)}")
                continue
            if not step:
                builder.suggest(path, "empty step - add a step key like script or task", SuggestionKind.ADD)
                builder.report(path, "Empty step")
                continue
            present = [str(key) for key in step if key in self.vocabulary.step_keys]
            if present:
                self._check_step_values(builder, path, present[0], step)
                continue
            self._check_discriminator(builder, path, step)

    def _check_discriminator(self, builder: AnalysisBuilder, path: DocumentPath, step: Mapping[object, object]) -> None:
        candidates = [str(key) for key in step if key not in COMMON_STEP_PROPERTIES]
        if len(candidates) != 1:
            builder.report(path, "No known step discriminator found")
            return
        name = candidates[0]
        guess = closest_match(name, self.vocabulary.step_keys)
        if guess is None:
            builder.report((*path, name), f"Unknown step key {name}")
            return
        target, ratio = guess
        builder.suggest(
            (*path, name),
            f"Unknown step key {name}. Did you mean {target}?",
            SuggestionKind.RENAME,
            edit=RenameKey((*path, name), target),
            confidence=ratio,
        )
        builder.report((*path, name), f"Unknown step key {name}", suggestion=f"Rename to {target}")

    @staticmethod
    def _check_step_values(
        builder: AnalysisBuilder,
        path: DocumentPath,
        discriminator: str,
        step: Mapping[object, object],
    ) -> None:
        value = step.get(discriminator)
        if discriminator in SCRIPT_STEP_KEYS and not isinstance(value, str):
            builder.suggest((*path, discriminator), f"{discriminator} should be a string", SuggestionKind.TYPE)
            builder.report((*path, discriminator), f"{discriminator} should be a string, got {type_name(value)}")
        if discriminator != "task":
            return
        if not isinstance(value, str):
            builder.suggest(
                (*path, "task"),
                "task should be a string identifier like AzureCLI@2",
                SuggestionKind.TYPE,
            )
            builder.report((*path, "task"), "task should be a string identifier like AzureCLI@2")
        if "inputs" in step and not isinstance(step["inputs"], dict):
            builder.suggest((*path, "inputs"), "inputs should be a mapping", SuggestionKind.TYPE)
            builder.report((*path, "inputs"), f"inputs should be a mapping, got {type_name(step['inputs'])}")

    def _check_jobs(self, builder: AnalysisBuilder, jobs: list[object], base: DocumentPath) -> None:
        for index, job in enumerate(jobs):
            path: DocumentPath = (*base, index)
            if not isinstance(job, dict):
                builder.suggest(path, "job should be a mapping", SuggestionKind.TYPE)
                builder.report(path, f"job should be a mapping, got {type_name(job)}")
                continue
            if _DEPLOYMENT_KEYS.intersection(job):
                continue
            steps = job.get("steps")
            if _is_list(steps):
                self._check_steps(builder, steps, (*path, "steps"))
            elif steps is not None:
                self._not_a_list(builder, (*path, "steps"), "steps", steps)
            else:
                builder.suggest(
                    (*path, "steps"),
                    "Add steps list to job",
                    SuggestionKind.ADD,
                    edit=AddEntry(path, "steps", []),
                )
                builder.report((*path, "steps"), "Job missing steps list")

    def _check_stages(self, builder: AnalysisBuilder, stages: list[object]) -> None:
        for index, stage in enumerate(stages):
            path: DocumentPath = ("stages", index)
            if not isinstance(stage, dict):
                builder.suggest(path, "stage should be a mapping", SuggestionKind.TYPE)
                builder.report(path, f"stage should be a mapping, got {type_name(stage)}")
                continue
            if _TEMPLATE_KEYS.intersection(stage):
                continue
            jobs = stage.get("jobs")
            if _is_list(jobs):
                self._check_jobs(builder, jobs, (*path, "jobs"))
            elif jobs is not None:
                self._not_a_list(builder, (*path, "jobs"), "jobs", jobs)
            else:
                builder.suggest(
                    (*path, "jobs"),
                    "Add jobs list to stage",
                    SuggestionKind.ADD,
                    edit=AddEntry(path, "jobs", []),
                )
                builder.report((*path, "jobs"), "Stage missing jobs list")


__all__ = ["AzurePipelinesAnalyzer", "COMMON_STEP_PROPERTIES", "SCRIPT_STEP_KEYS"]
