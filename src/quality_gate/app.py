"""Public entry points for running the quality gate."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any, Optional, Sequence

from .config import GateSettings, load_settings
from .executor import CommandExecutor
from .failures import FailureWarning, extract_failure_warnings
from .instrumentation import preview_output
from .logging import get_logger
from .orchestrator import run_suite
from .presets import build_standard_steps
from .scaffold import check_test_setup, prepare_artifacts
from .types import StepResult, SuiteSummary, empty_summary

LOGGER = get_logger("app")


async def run_quality_gate_async(
    settings: GateSettings,
    executor: Optional[CommandExecutor] = None,
) -> SuiteSummary:
    """Run the standard unit test and coverage suite for ``settings``."""

    if settings.skip_tests:
        LOGGER.info("Test execution skipped due to options.")
        return empty_summary()

    prepare_artifacts(settings.report_path)
    steps = build_standard_steps(settings)
    return await run_suite(steps, settings.suite_options(), executor)


async def run_async(
    workspace: Optional[Path] = None,
    executor: Optional[CommandExecutor] = None,
    **overrides: Any,
) -> SuiteSummary:
    """Resolve settings and run the gate asynchronously."""

    settings = load_settings(workspace, **overrides)
    return await run_quality_gate_async(settings, executor)


def run(workspace: Optional[Path] = None, **overrides: Any) -> SuiteSummary:
    """Synchronous helper that runs the async gate via ``asyncio.run``."""

    return asyncio.run(run_async(workspace, **overrides))


def format_cli_output(
    summary: SuiteSummary,
    warnings: Sequence[FailureWarning] = (),
    *,
    include_output: bool = False,
) -> str:
    """Format a suite summary for display in a CLI context."""

    sections: list[str] = []
    for index, result in enumerate(summary.results, start=1):
        sections.append(f"\n=== STEP {index}: {result.name} ===\n")
        sections.append(_format_step(result, include_output=include_output))

    skipped = summary.total_steps - len(summary.results)
    if skipped:
        sections.append(f"\n{skipped} step(s) not run after failure.\n")

    sections.append("\n--- METRICS ---\n")
    unit_tests = summary.unit_tests
    sections.append(f"Unit tests: {unit_tests.passed}/{unit_tests.total} passed\n")
    for entry in unit_tests.files:
        sections.append(f"  {entry.file} ({entry.count})\n")
    if summary.coverage_percent is None:
        sections.append("Coverage: n/a\n")
    else:
        sections.append(f"Coverage: {summary.coverage_percent:.2f}%\n")

    if warnings:
        sections.append("\n--- FAILURES ---\n")
        for warning in warnings:
            sections.append(f"[{warning.step}] {warning.file}: {warning.message}\n")

    overall = "PASS" if summary.success else "FAIL"
    sections.append(
        f"\n=== RESULT: {overall} "
        f"({summary.passed_steps}/{summary.total_steps} steps passed, "
        f"{summary.duration_seconds:.1f}s) ===\n"
    )
    if summary.first_error:
        sections.append(f"First error: {summary.first_error}\n")
    return "".join(sections)


def _format_step(result: StepResult, *, include_output: bool) -> str:
    status = "PASS" if result.succeeded else "FAIL"
    lines = [
        f"Command: {result.command}\n",
        f"Status: {status} ({result.elapsed_seconds:.2f}s)\n",
    ]
    if result.error:
        lines.append(f"Error: {result.error}\n")
    if result.verdict.metric("estimated"):
        lines.append("Note: counts estimated from output keywords\n")
    if include_output or not result.succeeded:
        lines.append(f"Output:\n{preview_output(result.raw_output) or '<no output>'}\n")
    return "".join(lines)


def main(workspace: Optional[Path] = None, **overrides: Any) -> int:
    """Entry point for the CLI script; returns the process exit code."""

    summary = run(workspace, **overrides)
    warnings = extract_failure_warnings(summary)
    print(format_cli_output(summary, warnings, include_output=bool(overrides.get("verbose"))))
    return 0 if summary.success else 1


def check_setup(workspace: Optional[Path] = None, **overrides: Any) -> int:
    """Report whether the workspace has its test tooling installed; returns the exit code."""

    settings = load_settings(workspace, **overrides)
    if check_test_setup(settings.workspace):
        print(f"Test setup OK in {settings.workspace}")
        return 0
    print(f"Test setup incomplete in {settings.workspace}; see the log for details.")
    return 1
