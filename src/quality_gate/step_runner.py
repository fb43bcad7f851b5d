"""Execution of a single verification step."""

from __future__ import annotations

import logging
import time

from .executor import CommandExecutor, ShellCommandExecutor
from .instrumentation import log_step_execution
from .logging import get_logger, log_event
from .types import (
    DEFAULT_STEP_ERROR,
    ExecutionResult,
    StepDefinition,
    StepOptions,
    StepResult,
    Verdict,
    coerce_verdict,
)

LOGGER = get_logger("step_runner")


@log_step_execution(logger=LOGGER)
async def run_step(
    definition: StepDefinition,
    options: StepOptions | None = None,
    executor: CommandExecutor | None = None,
) -> StepResult:
    """Run one step and judge it.

    The executor's exit status is only an input: when the step has an
    interpreter, its verdict alone decides ``succeeded``. Neither a failing
    executor nor a crashing interpreter escapes as an exception.
    """

    options = options or StepOptions()
    executor = executor or ShellCommandExecutor()

    started = time.monotonic()
    execution = await _execute(definition.command, options, executor)
    verdict = _interpret(definition, execution)
    elapsed = time.monotonic() - started

    error = None
    if not verdict.valid:
        error = verdict.error or execution.error or DEFAULT_STEP_ERROR
        if not options.ignore_error:
            log_event(
                LOGGER,
                logging.WARNING,
                "step.halt_requested",
                step=definition.name,
            )

    return StepResult(
        name=definition.name,
        command=definition.command,
        succeeded=verdict.valid,
        elapsed_seconds=elapsed,
        raw_output=execution.output,
        error=error,
        verdict=verdict,
    )


async def _execute(
    command: str, options: StepOptions, executor: CommandExecutor
) -> ExecutionResult:
    try:
        return await executor.execute(command, options.execution)
    except Exception as exc:  # executor refused to run the command at all
        message = f"Command could not be executed: {exc}"
        LOGGER.error(message)
        return ExecutionResult(
            command=command,
            succeeded=False,
            exit_code=None,
            output=message,
            stderr=message,
            error=message,
        )


def _interpret(definition: StepDefinition, execution: ExecutionResult) -> Verdict:
    if definition.interpret is None:
        return Verdict(valid=execution.succeeded)

    try:
        return coerce_verdict(definition.interpret(execution.output, execution))
    except Exception as exc:
        message = f"Validator function threw an error: {exc}"
        LOGGER.error("Interpreter for step %r raised: %s", definition.name, exc)
        return Verdict(valid=False, error=message)
