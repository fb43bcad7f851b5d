"""Sequential suite execution with stop-on-failure semantics."""

from __future__ import annotations

import logging
import time
from collections.abc import Sequence
from typing import Any

from .executor import CommandExecutor, ShellCommandExecutor
from .instrumentation import log_suite_completion, serialise_for_logging
from .interpreters.coverage import clamp_percent
from .logging import get_logger, log_event
from .step_runner import run_step
from .types import (
    StepDefinition,
    StepResult,
    SuiteOptions,
    SuiteSummary,
    TestFileCount,
    UnitTestCounts,
)

LOGGER = get_logger("orchestrator")


async def run_suite(
    definitions: Sequence[StepDefinition],
    options: SuiteOptions | None = None,
    executor: CommandExecutor | None = None,
) -> SuiteSummary:
    """Run ``definitions`` in order and fold the results into one summary.

    Steps never overlap: later steps may read artifacts written by earlier
    ones. With ``stop_on_failure`` no step after the first failure is
    started, and ``results`` only holds the steps that ran.
    """

    options = options or SuiteOptions()
    executor = executor or ShellCommandExecutor()
    step_options = options.step_options()

    log_event(
        LOGGER,
        logging.INFO,
        "suite.start",
        total_steps=len(definitions),
        stop_on_failure=options.stop_on_failure,
    )

    results: list[StepResult] = []
    all_passed = True
    first_error: str | None = None
    coverage_percent: float | None = None
    unit_tests = UnitTestCounts()

    started = time.monotonic()
    for index, definition in enumerate(definitions):
        log_event(
            LOGGER,
            logging.INFO,
            "suite.step",
            index=index,
            step=definition.name,
        )
        result = await run_step(definition, step_options, executor)
        results.append(result)

        if _matches(definition.name, options.unit_test_step_keyword):
            unit_tests = _unit_test_counts(result)
            LOGGER.debug(
                "Captured unit test counts: passed=%d, total=%d",
                unit_tests.passed,
                unit_tests.total,
            )

        if _matches(definition.name, options.coverage_step_keyword):
            coverage_percent = _coverage_percent(result)

        if result.succeeded:
            continue

        all_passed = False
        if first_error is None:
            first_error = result.error or f"{definition.name} failed without specific error message"
        if options.stop_on_failure:
            log_event(
                LOGGER,
                logging.WARNING,
                "suite.stopped",
                step=definition.name,
                skipped_steps=len(definitions) - len(results),
            )
            break
    duration = time.monotonic() - started

    passed_steps = sum(1 for result in results if result.succeeded)
    summary = SuiteSummary(
        success=all_passed,
        total_steps=len(definitions),
        passed_steps=passed_steps,
        failed_steps=len(results) - passed_steps,
        duration_seconds=duration,
        results=tuple(results),
        coverage_percent=coverage_percent,
        unit_tests=unit_tests,
        first_error=first_error,
    )

    log_suite_completion(
        logger=LOGGER,
        success=summary.success,
        executed_steps=len(results),
        total_steps=summary.total_steps,
        duration_seconds=duration,
    )
    log_event(
        LOGGER,
        logging.DEBUG,
        "suite.summary",
        summary=serialise_for_logging(summary),
    )
    return summary


def _matches(step_name: str, keyword: str) -> bool:
    return bool(keyword) and keyword.lower() in step_name.lower()


def _as_int(value: Any) -> int:
    try:
        return max(int(value), 0)
    except (TypeError, ValueError):
        return 0


def _unit_test_counts(result: StepResult) -> UnitTestCounts:
    total = _as_int(result.verdict.metric("unitTestsTotal"))
    passed = min(_as_int(result.verdict.metric("unitTestsPassed")), total)

    files: list[TestFileCount] = []
    for entry in result.verdict.metric("testFiles") or ():
        if isinstance(entry, TestFileCount):
            files.append(entry)
        elif isinstance(entry, dict) and "file" in entry:
            files.append(TestFileCount(file=str(entry["file"]), count=_as_int(entry.get("count"))))
    return UnitTestCounts(passed=passed, total=total, files=tuple(files))


def _coverage_percent(result: StepResult) -> float | None:
    coverage = result.verdict.metric("coverage")
    if result.succeeded and coverage is not None:
        value = clamp_percent(coverage)
        LOGGER.debug("Captured test coverage: %.2f%%", value)
        return value
    if result.succeeded:
        LOGGER.warning("%s step completed but did not report a coverage value.", result.name)
    else:
        LOGGER.error("%s step failed: %s", result.name, result.error)
    return None
