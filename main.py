"""CLI entry point for the quality gate."""

from __future__ import annotations

import argparse
import os
import sys
from pathlib import Path

from quality_gate import ConfigurationError, check_setup
from quality_gate import main as run_gate

LOG_FILE_ENV_VAR = "QUALITY_GATE_LOG_FILE"
LOG_FILE_LEVEL_ENV_VAR = "QUALITY_GATE_LOG_FILE_LEVEL"


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Run unit tests and coverage, and reduce them to one pass/fail verdict."
    )
    parser.add_argument(
        "--workspace",
        type=Path,
        help="Project directory the commands run in (default: QUALITY_GATE_WORKSPACE or cwd).",
    )
    parser.add_argument("--test-command", help="Unit test command (default: pnpm run test).")
    parser.add_argument(
        "--coverage-command",
        help="Coverage command (default: pnpm run test:coverage).",
    )
    parser.add_argument(
        "--no-stop-on-failure",
        action="store_true",
        help="Run every step even after one fails.",
    )
    parser.add_argument(
        "--skip-tests",
        action="store_true",
        help="Skip unit tests and coverage and report success.",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        help="Per-step timeout in seconds.",
    )
    parser.add_argument(
        "--check-setup",
        action="store_true",
        help="Only check that the test runner and coverage provider are installed.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Show command output.")
    parser.add_argument(
        "--log-file",
        type=Path,
        help="Optional path for detailed logs (sets QUALITY_GATE_LOG_FILE).",
    )
    parser.add_argument(
        "--log-file-level",
        type=str,
        help="Log level to use for the log file (sets QUALITY_GATE_LOG_FILE_LEVEL).",
    )
    return parser.parse_args(argv)


def cli(arguments: argparse.Namespace) -> int:
    overrides = {
        "unit_test_command": arguments.test_command,
        "coverage_command": arguments.coverage_command,
        "timeout_seconds": arguments.timeout,
        "stop_on_failure": False if arguments.no_stop_on_failure else None,
        "skip_tests": True if arguments.skip_tests else None,
        "verbose": True if arguments.verbose else None,
    }
    try:
        if arguments.check_setup:
            return check_setup(arguments.workspace, verbose=overrides["verbose"])
        return run_gate(arguments.workspace, **overrides)
    except ConfigurationError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    arguments = parse_args()
    if arguments.log_file is not None:
        os.environ[LOG_FILE_ENV_VAR] = str(arguments.log_file)
    if arguments.log_file_level is not None:
        os.environ[LOG_FILE_LEVEL_ENV_VAR] = arguments.log_file_level
    sys.exit(cli(arguments))
