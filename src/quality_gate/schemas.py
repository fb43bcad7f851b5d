"""Pydantic models for the JSON artifacts written by wrapped tools."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class _Artifact(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)


class SuiteReport(_Artifact):
    """One entry of a test report's ``testResults`` array."""

    name: str = Field(..., description="Absolute or relative path of the test file.")
    assertion_results: List[Any] = Field(
        default_factory=list,
        alias="assertionResults",
        description="Individual test outcomes reported for the file.",
    )


class TestReport(_Artifact):
    """Machine-readable test report (Jest/Vitest ``--reporter=json`` shape)."""

    __test__ = False

    num_total_tests: int = Field(..., alias="numTotalTests")
    num_passed_tests: int = Field(0, alias="numPassedTests")
    num_failed_tests: int = Field(0, alias="numFailedTests")
    test_results: Optional[List[Any]] = Field(
        None,
        alias="testResults",
        description="Per-file entries; each is validated separately as a SuiteReport.",
    )


class FileCoverage(_Artifact):
    """Statement-level coverage for one source file (istanbul ``coverage-final.json``)."""

    statement_map: Dict[str, Any] = Field(..., alias="statementMap")
    s: Dict[str, float] = Field(..., description="Hit count per statement id.")

    @property
    def total_statements(self) -> int:
        return len(self.statement_map)

    @property
    def covered_statements(self) -> int:
        return sum(1 for hits in self.s.values() if hits > 0)


class CoverageMetric(_Artifact):
    pct: Optional[float] = None


class CoverageTotals(_Artifact):
    statements: CoverageMetric


class CoverageSummary(_Artifact):
    """Pre-aggregated coverage summary (istanbul ``coverage-summary.json``)."""

    total: CoverageTotals

    @property
    def statement_pct(self) -> float:
        return self.total.statements.pct or 0.0
