from __future__ import annotations

from typing import Callable, Union

import pytest

from quality_gate.types import ExecutionOptions, ExecutionResult


def make_execution(
    output: str = "",
    *,
    succeeded: bool = True,
    command: str = "cmd",
    error: str | None = None,
) -> ExecutionResult:
    return ExecutionResult(
        command=command,
        succeeded=succeeded,
        exit_code=0 if succeeded else 1,
        stdout=output,
        output=output,
        elapsed_seconds=0.01,
        error=error if error is not None else (None if succeeded else "exit code 1"),
    )


Response = Union[ExecutionResult, Callable[[str, ExecutionOptions], ExecutionResult], Exception]


class FakeExecutor:
    """Executor double returning canned results per command and recording calls."""

    def __init__(self, responses: dict[str, Response]):
        self.responses = responses
        self.calls: list[tuple[str, ExecutionOptions]] = []

    async def execute(self, command: str, options: ExecutionOptions) -> ExecutionResult:
        self.calls.append((command, options))
        response = self.responses[command]
        if isinstance(response, Exception):
            raise response
        if callable(response):
            return response(command, options)
        return response

    @property
    def commands(self) -> list[str]:
        return [command for command, _ in self.calls]


@pytest.fixture
def execution() -> Callable[..., ExecutionResult]:
    return make_execution


@pytest.fixture
def fake_executor() -> Callable[[dict[str, Response]], FakeExecutor]:
    return FakeExecutor
