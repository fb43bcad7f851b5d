"""Shell command execution for verification steps."""

from __future__ import annotations

import asyncio
import logging
import os
import signal
import time
from typing import Protocol

from .logging import get_logger, log_event
from .types import ExecutionOptions, ExecutionResult

LOGGER = get_logger("executor")


class CommandExecutor(Protocol):
    """Anything able to run a shell command and report how it went.

    Implementations must not raise for a non-zero exit status; the caller
    decides what a failed command means.
    """

    async def execute(self, command: str, options: ExecutionOptions) -> ExecutionResult:
        ...


class ShellCommandExecutor:
    """Runs commands through the system shell with ``asyncio`` subprocesses."""

    async def execute(self, command: str, options: ExecutionOptions) -> ExecutionResult:
        started = time.monotonic()
        env = dict(options.env) if options.env is not None else None
        try:
            process = await asyncio.create_subprocess_shell(
                command,
                cwd=options.cwd,
                env=env,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                start_new_session=True,
            )
        except OSError as exc:
            message = f"Could not start command: {exc}"
            LOGGER.error(message)
            return ExecutionResult(
                command=command,
                succeeded=False,
                exit_code=None,
                output=message,
                stderr=message,
                elapsed_seconds=time.monotonic() - started,
                error=message,
            )

        try:
            stdout_bytes, stderr_bytes = await asyncio.wait_for(
                process.communicate(), timeout=options.timeout_seconds
            )
        except asyncio.TimeoutError:
            _kill_process_group(process)
            stdout_bytes, stderr_bytes = await process.communicate()
            message = f"Command timed out after {options.timeout_seconds}s: {command}"
            log_event(
                LOGGER,
                logging.ERROR,
                "command.timeout",
                command=command,
                timeout_seconds=options.timeout_seconds,
            )
            stdout = _decode(stdout_bytes)
            stderr = _decode(stderr_bytes)
            return ExecutionResult(
                command=command,
                succeeded=False,
                exit_code=None,
                stdout=stdout,
                stderr=stderr,
                output=_merge(stdout, stderr),
                elapsed_seconds=time.monotonic() - started,
                error=message,
                timed_out=True,
            )

        stdout = _decode(stdout_bytes)
        stderr = _decode(stderr_bytes)
        exit_code = process.returncode
        succeeded = exit_code == 0
        error = None
        if not succeeded:
            error = stderr.strip() or f"Command failed with exit code {exit_code}: {command}"

        log_event(
            LOGGER,
            logging.DEBUG,
            "command.finished",
            command=command,
            exit_code=exit_code,
        )
        return ExecutionResult(
            command=command,
            succeeded=succeeded,
            exit_code=exit_code,
            stdout=stdout,
            stderr=stderr,
            output=_merge(stdout, stderr),
            elapsed_seconds=time.monotonic() - started,
            error=error,
        )


def _kill_process_group(process: asyncio.subprocess.Process) -> None:
    # The shell's children share its session, so kill the whole group.
    try:
        os.killpg(process.pid, signal.SIGKILL)
    except ProcessLookupError:
        pass
    except PermissionError:
        process.kill()


def _decode(data: bytes | None) -> str:
    if not data:
        return ""
    return data.decode("utf-8", errors="replace")


def _merge(stdout: str, stderr: str) -> str:
    if stdout and stderr:
        separator = "" if stdout.endswith("\n") else "\n"
        return f"{stdout}{separator}{stderr}"
    return stdout or stderr
