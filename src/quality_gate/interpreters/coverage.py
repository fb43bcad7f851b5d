"""Interpretation of coverage tool artifacts."""

from __future__ import annotations

import json
import math
from functools import partial
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from ..logging import get_logger
from ..schemas import CoverageSummary, FileCoverage
from ..types import ExecutionResult, Verdict
from .chain import first_verdict

LOGGER = get_logger("interpreters.coverage")

STATEMENT_MAP_FILE = "coverage-final.json"
COVERAGE_NOT_FOUND = "Coverage output file not found"


def clamp_percent(value: Any) -> float:
    """Coerce a coverage value into [0, 100]; unusable values become 0."""

    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(number):
        return 0.0
    return min(max(number, 0.0), 100.0)


def from_statement_map(
    raw_output: str, execution: ExecutionResult, *, coverage_dir: Path
) -> Verdict | None:
    """Aggregate statement coverage across every file in ``coverage-final.json``."""

    path = Path(coverage_dir) / STATEMENT_MAP_FILE
    if not path.is_file():
        LOGGER.warning("Coverage file not found at: %s", path)
        return None

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        LOGGER.error("Error parsing coverage JSON %s: %s", path, exc)
        return None

    if not isinstance(data, dict):
        LOGGER.warning("%s has unexpected structure.", path)
        return None

    total = 0
    covered = 0
    for source_file, entry in data.items():
        try:
            file_coverage = FileCoverage.model_validate(entry)
        except ValidationError:
            LOGGER.debug("Skipping coverage entry without statement data: %s", source_file)
            continue
        total += file_coverage.total_statements
        covered += file_coverage.covered_statements

    if total == 0:
        LOGGER.warning("Found coverage file but no statements to measure")
        return Verdict(
            valid=False,
            error="No statements to measure coverage",
            metrics={"coverage": 0.0, "source": "statement-map"},
        )

    coverage = clamp_percent(100.0 * covered / total)
    LOGGER.debug(
        "Parsed coverage from %s: %.2f%% (%d/%d statements)", path, coverage, covered, total
    )
    return Verdict(
        valid=True,
        metrics={
            "coverage": coverage,
            "coveredStatements": covered,
            "totalStatements": total,
            "source": "statement-map",
        },
    )


def from_coverage_summary(
    raw_output: str, execution: ExecutionResult, *, coverage_dir: Path
) -> Verdict | None:
    """Fall back to any JSON summary in the coverage directory exposing ``total.statements.pct``."""

    directory = Path(coverage_dir)
    if not directory.is_dir():
        return None

    candidates = sorted(
        candidate
        for candidate in directory.glob("*.json")
        if candidate.name != STATEMENT_MAP_FILE
    )
    if candidates:
        LOGGER.info(
            "Found alternative coverage files: %s",
            ", ".join(candidate.name for candidate in candidates),
        )

    for candidate in candidates:
        try:
            summary = CoverageSummary.model_validate_json(candidate.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            LOGGER.warning("Could not parse alternative coverage file %s: %s", candidate, exc)
            continue

        coverage = clamp_percent(summary.statement_pct)
        LOGGER.info("Parsed coverage from alternative file %s: %.2f%%", candidate.name, coverage)
        return Verdict(
            valid=True,
            metrics={"coverage": coverage, "source": "summary", "file": candidate.name},
        )
    return None


def coverage_not_found(raw_output: str, execution: ExecutionResult) -> Verdict:
    if execution.succeeded:
        LOGGER.warning("Coverage command succeeded but coverage file is missing.")
    else:
        LOGGER.error("Coverage command failed AND coverage file is missing.")
    return Verdict(
        valid=False,
        error=COVERAGE_NOT_FOUND,
        metrics={"coverage": 0.0, "source": "none"},
    )


def interpret_coverage_output(
    raw_output: str, execution: ExecutionResult, *, coverage_dir: Path
) -> Verdict:
    """Judge a coverage run.

    The ``coverage`` metric is always a number; only ``valid`` says whether it
    can be trusted. A parsed value from a failed command is reported but
    judged invalid, since the artifact may be partial.
    """

    verdict = first_verdict(
        (
            partial(from_statement_map, coverage_dir=coverage_dir),
            partial(from_coverage_summary, coverage_dir=coverage_dir),
        ),
        raw_output or "",
        execution,
        fallback=coverage_not_found,
    )

    if verdict.valid and not execution.succeeded:
        reason = execution.error or f"exit code {execution.exit_code}"
        return Verdict(
            valid=False,
            error=f"Coverage command failed: {reason}",
            metrics=verdict.metrics,
        )
    return verdict
