"""Process executor - run one shell command to completion.

Translates a fully quoted command string into an ``asyncio`` subprocess and
captures everything the engine needs to classify the outcome.

Architecture:

    .. code-block:: text

        ProcessExecutor.execute(command)
          ├── asyncio.create_subprocess_shell(command)   ─ launch
          ├── process.communicate()                      ─ stdout / stderr
          ├── optional asyncio.wait_for timeout          ─ kill on expiry
          └── ProcessOutput(exit_error, stdout, stderr, duration_ms, exit_code)

        exit_error is set when:
          - the OS could not start the process   "Failed to start process: ..."
          - the process exited non-zero          "Command failed with exit code N: ..."
          - the timeout expired                  "Process killed: exceeded timeout of Ns"

``execute`` never raises.  An HTTP error reported by a script that exits 0 is
*not* an executor failure; that is the classifier's job.

Example:
    >>> executor = ProcessExecutor()
    >>> out = await executor.execute("bash './cURL_scripts/health.sh'")
    >>> out.ok, out.duration_ms
    (True, 143)

Tags:
    curl-runner, execution, subprocess, asyncio
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from curl_runner.core.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class ProcessOutput:
    """Everything captured from one process run."""

    exit_error: str | None
    stdout: str = ""
    stderr: str = ""
    duration_ms: int = 0
    exit_code: int | None = None

    @property
    def ok(self) -> bool:
        return self.exit_error is None


@runtime_checkable
class CommandExecutor(Protocol):
    """Anything that can run a command string and report its output."""

    async def execute(self, command: str) -> ProcessOutput: ...


def _elapsed_ms(started: float) -> int:
    return max(0, int((time.monotonic() - started) * 1000))


class ProcessExecutor:
    """Runs commands as local OS subprocesses through the shell.

    Args:
        timeout_seconds: Kill the process after this many seconds.  ``None``
            (the default) waits for as long as the process runs.
        kill_timeout_seconds: Grace period to reap a killed process.
    """

    def __init__(
        self,
        *,
        timeout_seconds: float | None = None,
        kill_timeout_seconds: float = 5.0,
    ) -> None:
        self._timeout = timeout_seconds
        self._kill_timeout = kill_timeout_seconds

    async def execute(self, command: str) -> ProcessOutput:
        """Run ``command`` to completion.  Always resolves."""
        started = time.monotonic()

        try:
            process = await asyncio.create_subprocess_shell(
                command,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except Exception as exc:
            logger.warning("process.launch_failed", command=command, error=str(exc))
            return ProcessOutput(
                exit_error=f"Failed to start process: {exc}",
                duration_ms=_elapsed_ms(started),
            )

        try:
            raw_out, raw_err = await asyncio.wait_for(
                process.communicate(), timeout=self._timeout,
            )
        except TimeoutError:
            await self._kill(process)
            logger.warning(
                "process.timeout", command=command, timeout_seconds=self._timeout,
            )
            return ProcessOutput(
                exit_error=f"Process killed: exceeded timeout of {self._timeout}s",
                duration_ms=_elapsed_ms(started),
                exit_code=process.returncode,
            )

        duration_ms = _elapsed_ms(started)
        stdout = raw_out.decode(errors="replace") if raw_out else ""
        stderr = raw_err.decode(errors="replace") if raw_err else ""
        exit_code = process.returncode

        exit_error = None
        if exit_code != 0:
            exit_error = f"Command failed with exit code {exit_code}: {command}"
            if stderr.strip():
                exit_error = f"{exit_error}\n{stderr.strip()}"

        logger.debug(
            "process.exited", command=command, exit_code=exit_code, duration_ms=duration_ms,
        )
        return ProcessOutput(
            exit_error=exit_error,
            stdout=stdout,
            stderr=stderr,
            duration_ms=duration_ms,
            exit_code=exit_code,
        )

    async def _kill(self, process: asyncio.subprocess.Process) -> None:
        try:
            process.kill()
            await asyncio.wait_for(process.wait(), timeout=self._kill_timeout)
        except ProcessLookupError:
            pass  # already gone
        except TimeoutError:
            logger.error("process.kill_timeout", pid=process.pid)


__all__ = ["ProcessOutput", "CommandExecutor", "ProcessExecutor"]
