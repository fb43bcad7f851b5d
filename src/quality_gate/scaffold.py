"""Workspace helpers."""

from __future__ import annotations

from pathlib import Path
from typing import Sequence

from .logging import get_logger

LOGGER = get_logger("scaffold")


def prepare_artifacts(report_path: Path) -> None:
    """Make sure the test report location is usable and holds no stale report.

    The report directory is created if necessary and any report left by a
    previous run is removed, so the interpreter only ever sees a report
    produced by the command it is judging. Problems are logged, not raised:
    a missing report simply sends the interpreter to its text fallbacks.
    """

    report_dir = report_path.parent
    if not report_dir.exists():
        LOGGER.info("Creating report directory: %s", report_dir)
        try:
            report_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            LOGGER.warning("Could not create report directory %s: %s", report_dir, exc)
            return

    try:
        report_path.unlink()
    except FileNotFoundError:
        return
    except OSError as exc:
        LOGGER.warning("Could not remove previous test report %s: %s", report_path, exc)
        return
    LOGGER.debug("Removed previous test report: %s", report_path)


VITEST_BIN = Path("node_modules") / ".bin" / "vitest"
COVERAGE_PROVIDER = Path("node_modules") / "@vitest" / "coverage-v8"


def check_test_setup(workspace: Path, test_dirs: Sequence[str] = ()) -> bool:
    """Check that the test runner and coverage provider are installed in ``workspace``.

    Missing entries of ``test_dirs`` only produce a warning.
    """

    if not (workspace / VITEST_BIN).exists():
        LOGGER.error("Vitest is not installed. Please run: pnpm install")
        return False
    if not (workspace / COVERAGE_PROVIDER).exists():
        LOGGER.error(
            "Coverage provider is not installed. Please run: pnpm install -D @vitest/coverage-v8"
        )
        return False

    for directory in test_dirs:
        if not (workspace / directory).is_dir():
            LOGGER.warning("Test directory not found: %s", directory)
    return True
