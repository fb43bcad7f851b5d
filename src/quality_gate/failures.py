"""Extraction of human-readable failure hints from failed step output."""

from __future__ import annotations

from dataclasses import dataclass

from .types import SuiteSummary


@dataclass(frozen=True)
class FailureWarning:
    message: str
    file: str
    step: str


def parse_failure_lines(output: str, step_name: str) -> list[FailureWarning]:
    """Turn ``FAIL`` headers and error lines into warnings attributed to a file.

    A ``FAIL <file>`` line names the file for the next error line; after
    that the attribution falls back to the step itself.
    """

    warnings: list[FailureWarning] = []
    current = step_name
    for line in (output or "").splitlines():
        if "FAIL" in line:
            current = line.replace("FAIL", "").strip() or step_name
        elif "Error:" in line or "failed" in line:
            warnings.append(
                FailureWarning(
                    message=f"Test failure: {line.strip()}",
                    file=current,
                    step=step_name,
                )
            )
            current = step_name
    return warnings


def extract_failure_warnings(summary: SuiteSummary) -> list[FailureWarning]:
    warnings: list[FailureWarning] = []
    for result in summary.results:
        if not result.succeeded and result.raw_output:
            warnings.extend(parse_failure_lines(result.raw_output, result.name))
    return warnings
