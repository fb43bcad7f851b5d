from __future__ import annotations

import asyncio
import json
from functools import partial
from pathlib import Path

from quality_gate.interpreters.coverage import interpret_coverage_output
from quality_gate.orchestrator import run_suite
from quality_gate.types import StepDefinition, SuiteOptions, TestFileCount, Verdict


def _steps(*names: str) -> list[StepDefinition]:
    return [StepDefinition(name=name, command=name.lower()) for name in names]


def test_empty_suite_is_trivially_successful(fake_executor) -> None:
    summary = asyncio.run(run_suite([], SuiteOptions(), fake_executor({})))

    assert summary.success is True
    assert summary.total_steps == 0
    assert summary.results == ()
    assert summary.passed_steps == summary.failed_steps == 0
    assert summary.first_error is None
    assert summary.coverage_percent is None


def test_stop_on_failure_skips_remaining_steps(fake_executor, execution) -> None:
    executor = fake_executor(
        {
            "a": execution("ok"),
            "b": execution("bad", succeeded=False, error="b broke"),
            "c": execution("ok"),
        }
    )

    summary = asyncio.run(run_suite(_steps("A", "B", "C"), SuiteOptions(), executor))

    assert executor.commands == ["a", "b"]
    assert [result.name for result in summary.results] == ["A", "B"]
    assert summary.success is False
    assert summary.total_steps == 3
    assert summary.passed_steps == 1
    assert summary.failed_steps == 1
    assert summary.first_error == "b broke"


def test_without_stop_on_failure_every_step_runs(fake_executor, execution) -> None:
    executor = fake_executor(
        {
            "a": execution("bad", succeeded=False, error="a broke"),
            "b": execution("bad", succeeded=False, error="b broke"),
            "c": execution("ok"),
        }
    )

    summary = asyncio.run(
        run_suite(_steps("A", "B", "C"), SuiteOptions(stop_on_failure=False), executor)
    )

    assert len(summary.results) == 3
    assert summary.passed_steps + summary.failed_steps == len(summary.results)
    assert summary.failed_steps == 2
    assert summary.success is False
    assert summary.first_error == "a broke"


def test_empty_interpreter_error_uses_default_message(fake_executor, execution) -> None:
    executor = fake_executor({"a": execution("")})
    steps = [
        StepDefinition(name="A", command="a", interpret=lambda o, r: Verdict(valid=False, error="")),
    ]

    summary = asyncio.run(run_suite(steps, SuiteOptions(), executor))

    # An empty interpreter error falls through to the step runner default.
    assert summary.first_error == "Test failed"


def test_results_preserve_definition_order(fake_executor, execution) -> None:
    names = ["Lint", "Types", "Docs", "Bundle"]
    executor = fake_executor({name.lower(): execution("ok") for name in names})

    summary = asyncio.run(run_suite(_steps(*names), SuiteOptions(), executor))

    assert [result.name for result in summary.results] == names
    assert summary.success is True
    assert summary.duration_seconds >= 0


def test_unit_test_and_coverage_metrics_are_lifted(fake_executor, execution) -> None:
    executor = fake_executor({"test": execution("ok"), "cov": execution("ok")})
    steps = [
        StepDefinition(
            name="Unit Tests",
            command="test",
            interpret=lambda o, r: Verdict(
                valid=True,
                metrics={
                    "unitTestsPassed": 9,
                    "unitTestsTotal": 8,
                    "testFiles": [{"file": "a.test.ts", "count": 8}],
                },
            ),
        ),
        StepDefinition(
            name="Test Coverage",
            command="cov",
            interpret=lambda o, r: Verdict(valid=True, metrics={"coverage": 123.0}),
        ),
    ]

    summary = asyncio.run(run_suite(steps, SuiteOptions(), executor))

    assert summary.unit_tests.total == 8
    assert summary.unit_tests.passed == 8
    assert summary.unit_tests.files == (TestFileCount(file="a.test.ts", count=8),)
    assert summary.coverage_percent == 100.0


def test_coverage_from_failed_step_is_not_lifted(fake_executor, execution) -> None:
    executor = fake_executor({"cov": execution("")})
    steps = [
        StepDefinition(
            name="Coverage",
            command="cov",
            interpret=lambda o, r: Verdict(valid=False, error="nope", metrics={"coverage": 0.0}),
        )
    ]

    summary = asyncio.run(run_suite(steps, SuiteOptions(), executor))

    assert summary.coverage_percent is None
    assert summary.success is False


def test_custom_step_keywords(fake_executor, execution) -> None:
    executor = fake_executor({"jest": execution("")})
    steps = [
        StepDefinition(
            name="Jest",
            command="jest",
            interpret=lambda o, r: Verdict(
                valid=True, metrics={"unitTestsPassed": 2, "unitTestsTotal": 2}
            ),
        )
    ]

    summary = asyncio.run(
        run_suite(steps, SuiteOptions(unit_test_step_keyword="jest"), executor)
    )

    assert summary.unit_tests.total == 2


def test_crashing_interpreter_does_not_abort_suite(fake_executor, execution) -> None:
    executor = fake_executor({"a": execution("ok"), "b": execution("ok")})

    def explode(output, result):
        raise ValueError("unexpected schema")

    steps = [
        StepDefinition(name="A", command="a", interpret=explode),
        StepDefinition(name="B", command="b"),
    ]

    summary = asyncio.run(run_suite(steps, SuiteOptions(stop_on_failure=False), executor))

    assert len(summary.results) == 2
    assert summary.results[0].succeeded is False
    assert summary.first_error == "Validator function threw an error: unexpected schema"


def test_lint_failure_stops_before_coverage(tmp_path: Path, fake_executor, execution) -> None:
    coverage_dir = tmp_path / "coverage"
    coverage_dir.mkdir()
    (coverage_dir / "coverage-summary.json").write_text(
        json.dumps({"total": {"statements": {"pct": 42}}}), encoding="utf-8"
    )
    executor = fake_executor(
        {
            "lint": execution("3 errors", succeeded=False, error="Lint exited with 1"),
            "coverage": execution("ok"),
        }
    )
    steps = [
        StepDefinition(name="Lint", command="lint"),
        StepDefinition(
            name="Coverage",
            command="coverage",
            interpret=partial(interpret_coverage_output, coverage_dir=coverage_dir),
        ),
    ]

    summary = asyncio.run(run_suite(steps, SuiteOptions(stop_on_failure=True), executor))

    assert summary.success is False
    assert len(summary.results) == 1
    assert summary.coverage_percent is None
    assert summary.first_error == "Lint exited with 1"
    assert executor.commands == ["lint"]


def test_coverage_step_runs_when_lint_passes(tmp_path: Path, fake_executor, execution) -> None:
    coverage_dir = tmp_path / "coverage"
    coverage_dir.mkdir()
    (coverage_dir / "coverage-summary.json").write_text(
        json.dumps({"total": {"statements": {"pct": 42}}}), encoding="utf-8"
    )
    executor = fake_executor({"lint": execution("clean"), "coverage": execution("ok")})
    steps = [
        StepDefinition(name="Lint", command="lint"),
        StepDefinition(
            name="Coverage",
            command="coverage",
            interpret=partial(interpret_coverage_output, coverage_dir=coverage_dir),
        ),
    ]

    summary = asyncio.run(run_suite(steps, SuiteOptions(), executor))

    assert summary.success is True
    assert summary.coverage_percent == 42.0
