"""Quality gate: run verification steps and reduce their output to one verdict."""

from .app import check_setup, format_cli_output, main, run, run_async, run_quality_gate_async
from .config import ConfigurationError, GateSettings, load_settings
from .executor import CommandExecutor, ShellCommandExecutor
from .interpreters import interpret_coverage_output, interpret_unit_test_output
from .orchestrator import run_suite
from .presets import build_standard_steps, command_step
from .scaffold import check_test_setup
from .step_runner import run_step
from .types import (
    ExecutionOptions,
    ExecutionResult,
    StepDefinition,
    StepOptions,
    StepResult,
    SuiteOptions,
    SuiteSummary,
    UnitTestCounts,
    Verdict,
)

__all__ = [
    "CommandExecutor",
    "ConfigurationError",
    "ExecutionOptions",
    "ExecutionResult",
    "GateSettings",
    "ShellCommandExecutor",
    "StepDefinition",
    "StepOptions",
    "StepResult",
    "SuiteOptions",
    "SuiteSummary",
    "UnitTestCounts",
    "Verdict",
    "build_standard_steps",
    "check_setup",
    "check_test_setup",
    "command_step",
    "format_cli_output",
    "interpret_coverage_output",
    "interpret_unit_test_output",
    "load_settings",
    "main",
    "run",
    "run_async",
    "run_quality_gate_async",
    "run_step",
    "run_suite",
]
