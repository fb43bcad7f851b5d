"""Canonical step lists for common quality gate runs."""

from __future__ import annotations

from functools import partial

from .config import GateSettings
from .interpreters.coverage import interpret_coverage_output
from .interpreters.unit_tests import interpret_unit_test_output
from .types import StepDefinition

UNIT_TESTS_STEP = "Unit Tests"
COVERAGE_STEP = "Test Coverage"


def command_step(name: str, command: str) -> StepDefinition:
    """A step judged purely on the command's exit status (lint, type check, ...)."""

    return StepDefinition(name=name, command=command)


def unit_test_step(settings: GateSettings) -> StepDefinition:
    return StepDefinition(
        name=UNIT_TESTS_STEP,
        command=settings.unit_test_command,
        interpret=partial(
            interpret_unit_test_output,
            report_path=settings.report_path,
            cwd=str(settings.workspace),
        ),
    )


def coverage_step(settings: GateSettings) -> StepDefinition:
    return StepDefinition(
        name=COVERAGE_STEP,
        command=settings.coverage_command,
        interpret=partial(interpret_coverage_output, coverage_dir=settings.coverage_path),
    )


def build_standard_steps(settings: GateSettings) -> list[StepDefinition]:
    """Unit tests followed by coverage, wired to the configured artifact paths."""

    return [unit_test_step(settings), coverage_step(settings)]
