"""Shared logging utilities and decorators for step execution."""

from __future__ import annotations

import dataclasses
import logging
from collections.abc import Mapping, Sequence
from functools import wraps
from typing import Any

from pydantic import BaseModel

from .logging import log_event

SERIALIZATION_MAX_DEPTH = 4
OUTPUT_PREVIEW_CHARS = 4000


def serialise_for_logging(value: Any, *, depth: int = 0) -> Any:
    """Best-effort conversion of results and artifacts for JSON logging."""

    if depth >= SERIALIZATION_MAX_DEPTH:
        return repr(value)

    if value is None or isinstance(value, (str, int, float, bool)):
        return value

    if isinstance(value, Mapping):
        return {
            str(key): serialise_for_logging(item, depth=depth + 1)
            for key, item in value.items()
        }

    if isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray)):
        return [serialise_for_logging(item, depth=depth + 1) for item in value]

    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        fields = {
            field.name: getattr(value, field.name)
            for field in dataclasses.fields(value)
            if not callable(getattr(value, field.name))
        }
        return serialise_for_logging(fields, depth=depth + 1)

    if isinstance(value, BaseModel):
        return serialise_for_logging(value.model_dump(by_alias=True), depth=depth + 1)

    return repr(value)


def preview_output(output: str | None, limit: int = OUTPUT_PREVIEW_CHARS) -> str:
    """Trim command output to its tail so huge transcripts stay readable."""

    text = (output or "").strip()
    if len(text) <= limit:
        return text
    return f"...{text[-limit:]}"


def log_step_execution(*, logger: logging.Logger):
    """Decorator that standardises logging around ``run_step``.

    The wrapped coroutine receives ``(definition, options, ...)`` and returns
    a ``StepResult``.
    """

    def decorator(func):
        @wraps(func)
        async def wrapper(definition, options=None, *args, **kwargs):
            log_event(
                logger,
                logging.INFO,
                "step.start",
                step=definition.name,
                command=definition.command,
            )
            result = await func(definition, options, *args, **kwargs)

            if result.succeeded:
                log_event(
                    logger,
                    logging.INFO,
                    "step.passed",
                    step=result.name,
                    elapsed_seconds=round(result.elapsed_seconds, 2),
                )
            else:
                log_event(
                    logger,
                    logging.ERROR,
                    "step.failed",
                    step=result.name,
                    elapsed_seconds=round(result.elapsed_seconds, 2),
                    error=result.error,
                )

            log_event(
                logger,
                logging.DEBUG,
                "step.verdict",
                step=result.name,
                verdict=serialise_for_logging(result.verdict),
            )
            if getattr(options, "verbose", False):
                log_event(
                    logger,
                    logging.DEBUG,
                    "step.output",
                    step=result.name,
                    output=preview_output(result.raw_output),
                )
            return result

        return wrapper

    return decorator


def log_suite_completion(
    *,
    logger: logging.Logger,
    success: bool,
    executed_steps: int,
    total_steps: int,
    duration_seconds: float,
) -> None:
    """Log the final completion state of a suite run."""

    event = "suite.complete" if success else "suite.incomplete"
    log_event(
        logger,
        logging.INFO if success else logging.WARNING,
        event,
        executed_steps=executed_steps,
        total_steps=total_steps,
        duration_seconds=round(duration_seconds, 2),
    )
