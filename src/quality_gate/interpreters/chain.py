"""Driver for ordered fallback parsing strategies."""

from __future__ import annotations

from typing import Callable, Iterable, Optional

from ..logging import get_logger
from ..types import ExecutionResult, Verdict

LOGGER = get_logger("interpreters.chain")

Strategy = Callable[[str, ExecutionResult], Optional[Verdict]]


def first_verdict(
    strategies: Iterable[Strategy],
    raw_output: str,
    execution: ExecutionResult,
    *,
    fallback: Callable[[str, ExecutionResult], Verdict],
) -> Verdict:
    """Return the verdict of the first strategy that applies.

    A strategy signals "does not apply" by returning ``None``. ``fallback``
    always produces a verdict, so the chain never comes back empty-handed.
    """

    for strategy in strategies:
        verdict = strategy(raw_output, execution)
        if verdict is not None:
            LOGGER.debug("Strategy %s produced a verdict", _strategy_name(strategy))
            return verdict
    LOGGER.debug("No strategy applied; using %s", _strategy_name(fallback))
    return fallback(raw_output, execution)


def _strategy_name(strategy: Callable[..., object]) -> str:
    func = getattr(strategy, "func", strategy)  # unwrap functools.partial
    return getattr(func, "__name__", repr(func))
