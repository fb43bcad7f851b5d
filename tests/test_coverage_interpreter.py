from __future__ import annotations

import json
import math
from pathlib import Path

from quality_gate.interpreters.coverage import (
    COVERAGE_NOT_FOUND,
    clamp_percent,
    from_coverage_summary,
    from_statement_map,
    interpret_coverage_output,
)


def _file_entry(statements: int, hit: int) -> dict:
    return {
        "path": "ignored",
        "statementMap": {
            str(index): {"start": {"line": index + 1, "column": 0}} for index in range(statements)
        },
        "s": {str(index): (3 if index < hit else 0) for index in range(statements)},
    }


def _write_json(path: Path, payload: object) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(payload), encoding="utf-8")
    return path


def test_statement_coverage_is_aggregated_across_files(tmp_path: Path, execution) -> None:
    coverage_dir = tmp_path / "coverage"
    _write_json(
        coverage_dir / "coverage-final.json",
        {
            "/repo/src/a.ts": _file_entry(6, 4),
            "/repo/src/b.ts": _file_entry(4, 3),
        },
    )

    verdict = interpret_coverage_output("", execution(""), coverage_dir=coverage_dir)

    assert verdict.valid is True
    assert verdict.error is None
    assert verdict.metrics["coverage"] == 70.0
    assert verdict.metrics["source"] == "statement-map"


def test_zero_statements_reports_zero_and_invalid(tmp_path: Path, execution) -> None:
    coverage_dir = tmp_path / "coverage"
    _write_json(coverage_dir / "coverage-final.json", {"/repo/src/empty.ts": _file_entry(0, 0)})

    verdict = interpret_coverage_output("", execution(""), coverage_dir=coverage_dir)

    assert verdict.valid is False
    assert verdict.metrics["coverage"] == 0
    assert verdict.metrics["coverage"] is not None
    assert not math.isnan(verdict.metrics["coverage"])
    assert verdict.error == "No statements to measure coverage"


def test_entries_without_statement_data_are_skipped(tmp_path: Path, execution) -> None:
    coverage_dir = tmp_path / "coverage"
    _write_json(
        coverage_dir / "coverage-final.json",
        {"/repo/src/a.ts": _file_entry(4, 1), "/repo/src/b.ts": {"path": "b.ts"}},
    )

    verdict = from_statement_map("", execution(""), coverage_dir=coverage_dir)

    assert verdict is not None
    assert verdict.metrics["coverage"] == 25.0


def test_malformed_statement_map_falls_back_to_summary(tmp_path: Path, execution) -> None:
    coverage_dir = tmp_path / "coverage"
    coverage_dir.mkdir()
    (coverage_dir / "coverage-final.json").write_text("{broken", encoding="utf-8")
    _write_json(
        coverage_dir / "coverage-summary.json",
        {"total": {"statements": {"total": 50, "covered": 21, "skipped": 0, "pct": 42}}},
    )

    assert from_statement_map("", execution(""), coverage_dir=coverage_dir) is None

    verdict = interpret_coverage_output("", execution(""), coverage_dir=coverage_dir)
    assert verdict.valid is True
    assert verdict.metrics["coverage"] == 42.0
    assert verdict.metrics["source"] == "summary"
    assert verdict.metrics["file"] == "coverage-summary.json"


def test_summary_scan_skips_unusable_json_files(tmp_path: Path, execution) -> None:
    coverage_dir = tmp_path / "coverage"
    _write_json(coverage_dir / "a-unrelated.json", {"hello": "world"})
    _write_json(coverage_dir / "b-summary.json", {"total": {"statements": {"pct": 87.5}}})

    verdict = from_coverage_summary("", execution(""), coverage_dir=coverage_dir)

    assert verdict is not None
    assert verdict.metrics["coverage"] == 87.5
    assert verdict.metrics["file"] == "b-summary.json"


def test_missing_artifacts_report_zero_coverage(tmp_path: Path, execution) -> None:
    verdict = interpret_coverage_output(
        "", execution(""), coverage_dir=tmp_path / "does-not-exist"
    )

    assert verdict.valid is False
    assert verdict.error == COVERAGE_NOT_FOUND
    assert verdict.metrics["coverage"] == 0.0


def test_failed_command_invalidates_parsed_coverage(tmp_path: Path, execution) -> None:
    coverage_dir = tmp_path / "coverage"
    _write_json(coverage_dir / "coverage-final.json", {"a.ts": _file_entry(10, 7)})

    verdict = interpret_coverage_output(
        "", execution("", succeeded=False, error="threshold not met"), coverage_dir=coverage_dir
    )

    assert verdict.valid is False
    assert verdict.error == "Coverage command failed: threshold not met"
    assert verdict.metrics["coverage"] == 70.0


def test_clamp_percent_bounds_and_garbage() -> None:
    assert clamp_percent(150) == 100.0
    assert clamp_percent(-3) == 0.0
    assert clamp_percent(float("nan")) == 0.0
    assert clamp_percent(None) == 0.0
    assert clamp_percent("55.5") == 55.5
