"""Configuration helpers for the quality gate runtime."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from dotenv import load_dotenv

from .logging import configure_logging
from .types import ExecutionOptions, SuiteOptions


class ConfigurationError(ValueError):
    """Raised when runtime configuration is invalid or incomplete."""

_WORKSPACE_ENV_VAR = "QUALITY_GATE_WORKSPACE"
_TEST_COMMAND_ENV_VAR = "QUALITY_GATE_TEST_COMMAND"
_COVERAGE_COMMAND_ENV_VAR = "QUALITY_GATE_COVERAGE_COMMAND"
_TEST_REPORT_ENV_VAR = "QUALITY_GATE_TEST_REPORT"
_COVERAGE_DIR_ENV_VAR = "QUALITY_GATE_COVERAGE_DIR"
_TIMEOUT_ENV_VAR = "QUALITY_GATE_TIMEOUT"
_STOP_ON_FAILURE_ENV_VAR = "QUALITY_GATE_STOP_ON_FAILURE"
_VERBOSE_ENV_VAR = "QUALITY_GATE_VERBOSE"
_SKIP_TESTS_ENV_VAR = "QUALITY_GATE_SKIP_TESTS"
LOG_LEVEL_ENV_VAR = "QUALITY_GATE_LOG_LEVEL"
LOG_FILE_ENV_VAR = "QUALITY_GATE_LOG_FILE"
LOG_FILE_LEVEL_ENV_VAR = "QUALITY_GATE_LOG_FILE_LEVEL"

DEFAULT_TEST_COMMAND = "pnpm run test"
DEFAULT_COVERAGE_COMMAND = "pnpm run test:coverage"
DEFAULT_TEST_REPORT = Path("temp") / "test-results.json"
DEFAULT_COVERAGE_DIR = Path("coverage")

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


@dataclass(frozen=True)
class GateSettings:
    """Resolved settings for one quality gate run."""

    workspace: Path
    unit_test_command: str = DEFAULT_TEST_COMMAND
    coverage_command: str = DEFAULT_COVERAGE_COMMAND
    test_report_path: Optional[Path] = None
    coverage_dir: Optional[Path] = None
    timeout_seconds: Optional[float] = None
    stop_on_failure: bool = True
    verbose: bool = False
    skip_tests: bool = False
    env: Optional[Mapping[str, str]] = None

    @property
    def report_path(self) -> Path:
        return self.test_report_path or self.workspace / DEFAULT_TEST_REPORT

    @property
    def coverage_path(self) -> Path:
        return self.coverage_dir or self.workspace / DEFAULT_COVERAGE_DIR

    def execution_options(self) -> ExecutionOptions:
        return ExecutionOptions(
            cwd=str(self.workspace),
            env=dict(self.env) if self.env is not None else None,
            timeout_seconds=self.timeout_seconds,
        )

    def suite_options(self) -> SuiteOptions:
        return SuiteOptions(
            stop_on_failure=self.stop_on_failure,
            verbose=self.verbose,
            execution=self.execution_options(),
        )


def load_settings(
    workspace: Optional[Path] = None,
    *,
    unit_test_command: Optional[str] = None,
    coverage_command: Optional[str] = None,
    test_report_path: Optional[Path] = None,
    coverage_dir: Optional[Path] = None,
    timeout_seconds: Optional[float] = None,
    stop_on_failure: Optional[bool] = None,
    verbose: Optional[bool] = None,
    skip_tests: Optional[bool] = None,
    env: Optional[Mapping[str, str]] = None,
) -> GateSettings:
    """Resolve settings from explicit arguments, then environment variables, then defaults.

    Without an explicit ``env`` the child environment is a snapshot of
    ``os.environ`` taken after ``.env`` is loaded.
    """

    load_dotenv()  # Allows .env values to fill in unset variables
    resolved_verbose = _resolve_flag(verbose, _VERBOSE_ENV_VAR, default=False)
    configure_logging(
        os.getenv(LOG_LEVEL_ENV_VAR),
        log_file=os.getenv(LOG_FILE_ENV_VAR),
        file_level=os.getenv(LOG_FILE_LEVEL_ENV_VAR),
        verbose=resolved_verbose,
    )

    resolved_workspace = _resolve_workspace(workspace)
    return GateSettings(
        workspace=resolved_workspace,
        unit_test_command=unit_test_command
        or os.getenv(_TEST_COMMAND_ENV_VAR)
        or DEFAULT_TEST_COMMAND,
        coverage_command=coverage_command
        or os.getenv(_COVERAGE_COMMAND_ENV_VAR)
        or DEFAULT_COVERAGE_COMMAND,
        test_report_path=_resolve_path(
            test_report_path, _TEST_REPORT_ENV_VAR, resolved_workspace
        ),
        coverage_dir=_resolve_path(coverage_dir, _COVERAGE_DIR_ENV_VAR, resolved_workspace),
        timeout_seconds=_resolve_timeout(timeout_seconds),
        stop_on_failure=_resolve_flag(stop_on_failure, _STOP_ON_FAILURE_ENV_VAR, default=True),
        verbose=resolved_verbose,
        skip_tests=_resolve_flag(skip_tests, _SKIP_TESTS_ENV_VAR, default=False),
        env=dict(env) if env is not None else dict(os.environ),
    )


def _resolve_workspace(cli_value: Optional[Path]) -> Path:
    if cli_value is not None:
        workspace = Path(cli_value)
    elif env_path := os.getenv(_WORKSPACE_ENV_VAR):
        workspace = Path(env_path)
    else:
        workspace = Path.cwd()

    workspace = workspace.expanduser().resolve()
    if not workspace.is_dir():
        raise ConfigurationError(f"Workspace directory does not exist: {workspace}")
    return workspace


def _resolve_path(
    cli_value: Optional[Path], env_var: str, workspace: Path
) -> Optional[Path]:
    if cli_value is not None:
        path = Path(cli_value)
    elif env_value := os.getenv(env_var):
        path = Path(env_value)
    else:
        return None

    path = path.expanduser()
    if not path.is_absolute():
        path = workspace / path
    return path


def _resolve_timeout(cli_value: Optional[float]) -> Optional[float]:
    if cli_value is not None:
        if cli_value <= 0:
            raise ConfigurationError("Timeout must be a positive number of seconds.")
        return float(cli_value)

    env_value = os.getenv(_TIMEOUT_ENV_VAR)
    if not env_value:
        return None
    try:
        parsed = float(env_value)
    except ValueError as exc:
        raise ConfigurationError(f"Invalid {_TIMEOUT_ENV_VAR} value: {env_value!r}") from exc
    if parsed <= 0:
        raise ConfigurationError("Timeout must be a positive number of seconds.")
    return parsed


def _resolve_flag(cli_value: Optional[bool], env_var: str, *, default: bool) -> bool:
    if cli_value is not None:
        return cli_value

    env_value = os.getenv(env_var)
    if env_value is None or not env_value.strip():
        return default

    normalized = env_value.strip().lower()
    if normalized in _TRUE_VALUES:
        return True
    if normalized in _FALSE_VALUES:
        return False
    raise ConfigurationError(f"Invalid {env_var} value: {env_value!r}")
