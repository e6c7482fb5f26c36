# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Validation orchestrator: guard, parse, detect and fan out to linters."""

from __future__ import annotations

import logging
import tempfile
import time
from collections.abc import Callable, Sequence
from concurrent.futures import Future, ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Final

from ..config.models import EngineEnvironment, ValidateOptions
from ..core.models import (
    LintMessage,
    LintSource,
    MessageKind,
    Provider,
    ProviderSources,
    ValidationResult,
)
from ..core.severity import Severity
from ..detection import detect_provider
from ..parsers import parser_for
from ..parsing import parse_with_timeout
from ..security.guard import guard
from ..suggestions.azure import AzurePipelinesAnalyzer
from ..tools.builtins import (
    CFN_LINT,
    SPECTRAL,
    YAMLLINT,
    ToolSpec,
    cfn_lint_invocation,
    spectral_lint_invocation,
    yamllint_container_invocation,
    yamllint_invocation,
)
from ..tools.runner import ProcessToolRunner, ToolInvocation, ToolResult, ToolRunner, invoke
from .aggregate import build_summary, merge_messages

LOGGER = logging.getLogger(__name__)

TASK_GRACE_MS: Final[int] = 250
TEMPLATE_NAME: Final[str] = "template.yaml"


class TaskStatus(str, Enum):
    """Terminal state of a concurrent validation task."""

    COMPLETED = "completed"
    TIMED_OUT = "timed-out"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class ValidationTask:
    """Independent unit of work producing messages for one source."""

    name: str
    source: LintSource
    run: Callable[[], Sequence[LintMessage]]
    timeout_ms: int


@dataclass(frozen=True, slots=True)
class TaskOutcome:
    """Messages and terminal status of a :class:`ValidationTask`."""

    name: str
    source: LintSource
    status: TaskStatus
    messages: tuple[LintMessage, ...] = field(default_factory=tuple)


def run_tasks(tasks: Sequence[ValidationTask], *, grace_ms: int = TASK_GRACE_MS) -> list[TaskOutcome]:
    """Run ``tasks`` concurrently, each bounded by its own deadline.

    A task that raises or misses its deadline yields an outcome without
    messages; other tasks are unaffected. Outcomes are returned in task
    order regardless of completion order.

    Args:
        tasks: Tasks to execute.
        grace_ms: Allowance added to each task timeout before abandoning it.

    Returns:
        list[TaskOutcome]: One outcome per task.
    """

    if not tasks:
        return []
    executor = ThreadPoolExecutor(max_workers=len(tasks), thread_name_prefix="yamlqa-task")
    started = time.monotonic()
    try:
        futures: list[tuple[ValidationTask, Future[Sequence[LintMessage]]]] = [
            (task, executor.submit(task.run)) for task in tasks
        ]
        return [_collect(task, future, started, grace_ms) for task, future in futures]
    finally:
        executor.shutdown(wait=False, cancel_futures=True)


def _collect(
    task: ValidationTask,
    future: Future[Sequence[LintMessage]],
    started: float,
    grace_ms: int,
) -> TaskOutcome:
    deadline = started + (task.timeout_ms + grace_ms) / 1000
    try:
        messages = future.result(timeout=max(0.0, deadline - time.monotonic()))
    except FutureTimeoutError:
        future.cancel()
        LOGGER.warning("%s did not finish within %sms; dropping its results", task.name, task.timeout_ms)
        return TaskOutcome(task.name, task.source, TaskStatus.TIMED_OUT)
    except Exception as exc:  # task isolation boundary
        LOGGER.warning("%s failed: %s", task.name, exc, exc_info=LOGGER.isEnabledFor(logging.DEBUG))
        return TaskOutcome(task.name, task.source, TaskStatus.FAILED)
    return TaskOutcome(task.name, task.source, TaskStatus.COMPLETED, tuple(messages))


def _interpret(spec: ToolSpec, result: ToolResult) -> tuple[LintMessage, ...]:
    if result.timed_out:
        LOGGER.warning("%s timed out", spec.name)
        return ()
    if result.unavailable:
        LOGGER.info("%s is not available: %s", spec.name, result.stderr.strip())
        return ()
    return tuple(parser_for(spec.output_format).parse(result.stdout, result.stderr))


@dataclass(slots=True)
class Orchestrator:
    """Build and run the validation pipeline for one request.

    Attributes:
        options: Request options.
        environment: Environment overrides in effect for the request.
        runner: Runner used for every external tool invocation.
    """

    options: ValidateOptions
    environment: EngineEnvironment
    runner: ToolRunner

    @classmethod
    def for_request(
        cls,
        options: ValidateOptions | None = None,
        environment: EngineEnvironment | None = None,
    ) -> Orchestrator:
        opts = options or ValidateOptions()
        return cls(
            options=opts,
            environment=environment or EngineEnvironment.from_env(),
            runner=opts.tool_runner or ProcessToolRunner(),
        )

    @property
    def ruleset(self) -> str | None:
        """Return the rule-engine ruleset in effect, if any."""

        return self.options.spectral_ruleset_path or self.environment.spectral_ruleset

    def validate(self, content: str) -> ValidationResult:
        report = guard(content, self.options)
        if not report.passed:
            return ValidationResult(messages=report.messages)

        parsed = parse_with_timeout(
            content,
            timeout_ms=self.options.parse_timeout_ms,
            environment=self.environment,
        )
        detection = detect_provider(content, self.options.provider)
        if not parsed.ok:
            messages = merge_messages((report.messages, parsed.messages))
            return ValidationResult(
                messages=messages,
                provider_summary=build_summary(detection, messages, self._sources(structural=False)),
            )

        tasks = self.plan(content, detection.provider, parsed.document)
        outcomes = run_tasks(tasks)
        messages = merge_messages((report.messages, *(outcome.messages for outcome in outcomes)))
        structural = any(task.source is LintSource.PROVIDER_STRUCTURAL for task in tasks)
        return ValidationResult(
            messages=messages,
            provider_summary=build_summary(detection, messages, self._sources(structural=structural)),
        )

    def plan(self, content: str, provider: Provider, document: object) -> list[ValidationTask]:
        """Return the concurrent tasks applicable to ``content``.

        Args:
            content: Document text fed to the external tools.
            provider: Detected or forced provider.
            document: Parsed document used by in-process analyzers.

        Returns:
            list[ValidationTask]: Style task, then any structural and rule-engine tasks.
        """

        timeout_ms = self.options.tool_timeout_ms
        tasks = [
            ValidationTask(
                name=YAMLLINT.name,
                source=YAMLLINT.source,
                run=lambda: self._style(content),
                timeout_ms=timeout_ms * 2,
            ),
        ]
        if provider is Provider.AWS:
            if self.environment.disable_cfn_lint:
                LOGGER.debug("structural linter disabled by environment")
            else:
                tasks.append(
                    ValidationTask(
                        name=CFN_LINT.name,
                        source=CFN_LINT.source,
                        run=lambda: self._structural(content),
                        timeout_ms=timeout_ms,
                    ),
                )
        elif provider is Provider.AZURE:
            tasks.append(
                ValidationTask(
                    name="azure-schema",
                    source=LintSource.PROVIDER_SCHEMA,
                    run=lambda: AzurePipelinesAnalyzer().analyze(document).messages,
                    timeout_ms=timeout_ms,
                ),
            )
        ruleset = self.ruleset
        if ruleset:
            tasks.append(
                ValidationTask(
                    name=SPECTRAL.name,
                    source=SPECTRAL.source,
                    run=lambda: self._run_tool(
                        SPECTRAL,
                        spectral_lint_invocation(content, ruleset, timeout_ms=timeout_ms),
                    ),
                    timeout_ms=timeout_ms,
                ),
            )
        return tasks

    def _run_tool(self, spec: ToolSpec, invocation: ToolInvocation) -> tuple[LintMessage, ...]:
        return _interpret(spec, invoke(self.runner, invocation))

    def _style(self, content: str) -> tuple[LintMessage, ...]:
        timeout_ms = self.options.tool_timeout_ms
        result = invoke(self.runner, yamllint_invocation(content, timeout_ms=timeout_ms))
        if result.unavailable:
            LOGGER.debug("local yamllint unavailable; retrying in a container")
            fallback = yamllint_container_invocation(content, self.options.sandbox, timeout_ms=timeout_ms)
            result = invoke(self.runner, fallback)
        return _interpret(YAMLLINT, result)

    def _structural(self, content: str) -> tuple[LintMessage, ...]:
        with tempfile.TemporaryDirectory(prefix="yamlqa-cfn-") as workdir:
            template_dir = Path(workdir)
            (template_dir / TEMPLATE_NAME).write_text(content, encoding="utf-8")
            invocation = cfn_lint_invocation(
                template_dir,
                TEMPLATE_NAME,
                self.options.sandbox,
                timeout_ms=self.options.tool_timeout_ms,
            )
            return self._run_tool(CFN_LINT, invocation)

    def _sources(self, *, structural: bool) -> ProviderSources:
        env = self.environment
        return ProviderSources(
            cfn_spec_path=str(env.cfn_spec_path) if env.cfn_spec_path else None,
            azure_schema_path=str(env.azure_schema_path) if env.azure_schema_path else None,
            spectral_ruleset_path=self.ruleset,
            cfn_lint_image=self.options.sandbox.image if structural else None,
        )


def validate(
    content: str,
    options: ValidateOptions | None = None,
    *,
    environment: EngineEnvironment | None = None,
) -> ValidationResult:
    """Validate ``content`` and return the aggregated result.

    The call never raises: guard rejections, parse failures and tool
    failures all become messages or are dropped per source.

    Args:
        content: YAML document text.
        options: Request options; defaults apply when omitted.
        environment: Environment overrides, read from ``os.environ`` when omitted.

    Returns:
        ValidationResult: Ordered messages, derived ``ok`` flag and provider summary.
    """

    try:
        return Orchestrator.for_request(options, environment).validate(content)
    except Exception as exc:  # public boundary: always return a structured result
        LOGGER.exception("validation failed unexpectedly")
        return ValidationResult(
            messages=(
                LintMessage(
                    source=LintSource.PARSER,
                    severity=Severity.ERROR,
                    message=f"internal validation error: {exc}",
                    rule_id="internal-error",
                    kind=MessageKind.SYNTAX,
                ),
            ),
        )


__all__ = [
    "Orchestrator",
    "TaskOutcome",
    "TaskStatus",
    "ValidationTask",
    "run_tasks",
    "validate",
]
