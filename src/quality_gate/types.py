"""Shared data structures for step and suite execution."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

DEFAULT_STEP_ERROR = "Test failed"


@dataclass(frozen=True)
class ExecutionOptions:
    """Process-level inputs handed to the command executor.

    ``cwd`` and ``env`` are passed through verbatim; ``None`` means the
    executor uses its own process values. ``timeout_seconds`` of ``None``
    disables the timeout.
    """

    cwd: Optional[str] = None
    env: Optional[Mapping[str, str]] = None
    timeout_seconds: Optional[float] = None


@dataclass(frozen=True)
class ExecutionResult:
    """Raw outcome of running one shell command."""

    command: str
    succeeded: bool
    exit_code: int | None
    stdout: str = ""
    stderr: str = ""
    output: str = ""
    elapsed_seconds: float = 0.0
    error: str | None = None
    timed_out: bool = False


@dataclass(frozen=True)
class Verdict:
    """Normalised judgement an interpreter returns for one step's output."""

    valid: bool
    error: str | None = None
    metrics: Mapping[str, Any] = field(default_factory=dict)

    def metric(self, name: str, default: Any = None) -> Any:
        return self.metrics.get(name, default)


Interpreter = Callable[[str, ExecutionResult], Verdict]


@dataclass(frozen=True)
class StepDefinition:
    """A named command plus the optional interpreter that judges its output."""

    name: str
    command: str
    interpret: Optional[Interpreter] = None


@dataclass(frozen=True)
class StepOptions:
    """Per-step knobs passed by value into ``run_step``."""

    verbose: bool = False
    ignore_error: bool = False
    execution: ExecutionOptions = field(default_factory=ExecutionOptions)


@dataclass(frozen=True)
class SuiteOptions:
    """Suite-level knobs passed by value into ``run_suite``.

    The keyword fields select which steps the orchestrator lifts unit test
    counts and coverage from; matching is a case-insensitive substring test
    on the step name.
    """

    stop_on_failure: bool = True
    verbose: bool = False
    execution: ExecutionOptions = field(default_factory=ExecutionOptions)
    unit_test_step_keyword: str = "unit test"
    coverage_step_keyword: str = "coverage"

    def step_options(self) -> StepOptions:
        return StepOptions(
            verbose=self.verbose,
            ignore_error=not self.stop_on_failure,
            execution=self.execution,
        )


@dataclass(frozen=True)
class StepResult:
    """Final, post-interpretation outcome of a single step."""

    name: str
    command: str
    succeeded: bool
    elapsed_seconds: float
    raw_output: str
    error: str | None
    verdict: Verdict


@dataclass(frozen=True)
class TestFileCount:
    """Number of tests reported for one test file."""

    __test__ = False

    file: str
    count: int


@dataclass(frozen=True)
class UnitTestCounts:
    passed: int = 0
    total: int = 0
    files: tuple[TestFileCount, ...] = ()


@dataclass(frozen=True)
class SuiteSummary:
    """Aggregated outcome of one ``run_suite`` invocation."""

    success: bool
    total_steps: int
    passed_steps: int
    failed_steps: int
    duration_seconds: float
    results: tuple[StepResult, ...]
    coverage_percent: float | None
    unit_tests: UnitTestCounts
    first_error: str | None


def empty_summary() -> SuiteSummary:
    """Summary for a suite that ran no steps at all."""

    return SuiteSummary(
        success=True,
        total_steps=0,
        passed_steps=0,
        failed_steps=0,
        duration_seconds=0.0,
        results=(),
        coverage_percent=None,
        unit_tests=UnitTestCounts(),
        first_error=None,
    )


def coerce_verdict(value: Any) -> Verdict:
    """Best-effort conversion of an interpreter's return value into a Verdict.

    Accepts a Verdict, a bare bool, or a mapping shaped like
    ``{"valid": ..., "error": ..., **metrics}``. A mapping without ``valid``
    counts as valid, matching how loosely written validators report success.
    """

    if isinstance(value, Verdict):
        return value

    if isinstance(value, bool):
        return Verdict(valid=value)

    if isinstance(value, Mapping):
        metrics = {k: v for k, v in value.items() if k not in ("valid", "error")}
        error = value.get("error")
        return Verdict(
            valid=value.get("valid") is not False,
            error=str(error) if error is not None else None,
            metrics=metrics,
        )

    raise TypeError(f"Interpreter returned unsupported type {type(value).__name__}")
