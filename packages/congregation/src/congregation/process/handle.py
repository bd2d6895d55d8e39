"""Shared handle around one spawned shell process.

The handle is touched by the stdout reader, the stderr reader and the
shutdown path. Every critical section is short: taking a pipe, recording
the exit status, sending a signal. Reads and the wait for process exit
never happen under the lock.

PUBLIC API:
  - ProcessHandle: Lock-guarded wrapper around asyncio.subprocess.Process
  - shell_argv: Platform shell invocation for a command string
"""

import asyncio
import logging
import os
import signal
import sys
from asyncio.subprocess import Process
from pathlib import Path

from ..types import ExitStatus

logger = logging.getLogger(__name__)

IS_WINDOWS = sys.platform == "win32"

# asyncio's default 64 KiB line limit is too small for minified bundler output
STREAM_LIMIT = 1024 * 1024


def shell_argv(command: str) -> list[str]:
    """Build the platform shell invocation for a command string."""
    if IS_WINDOWS:
        return ["cmd.exe", "/C", command]
    return ["sh", "-c", command]


class ProcessHandle:
    """Exclusive-owner wrapper around a child process.

    Exactly one exit status is recorded, no matter how many callers wait.
    """

    def __init__(self, process: Process):
        self._process = process
        self._lock = asyncio.Lock()
        self._status: ExitStatus | None = None

    @classmethod
    async def start(cls, command: str, workdir: Path) -> "ProcessHandle":
        """Start command through the platform shell with piped output.

        Args:
            command: Shell command string
            workdir: Canonical working directory

        Raises:
            OSError: If the shell cannot be started
        """
        kwargs = {}
        if not IS_WINDOWS:
            # Own process group so termination reaches the whole pipeline
            kwargs["start_new_session"] = True

        process = await asyncio.create_subprocess_exec(
            *shell_argv(command),
            cwd=workdir,
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            limit=STREAM_LIMIT,
            **kwargs,
        )
        logger.debug(f"Started pid {process.pid}: {command}")
        return cls(process)

    @property
    def pid(self) -> int:
        return self._process.pid

    @property
    def status(self) -> ExitStatus | None:
        """Recorded exit status, None until wait() has completed."""
        return self._status

    async def take_stdout(self) -> asyncio.StreamReader | None:
        """Hand the stdout pipe to its reader; later calls get None."""
        async with self._lock:
            stream, self._process.stdout = self._process.stdout, None
            return stream

    async def take_stderr(self) -> asyncio.StreamReader | None:
        """Hand the stderr pipe to its reader; later calls get None."""
        async with self._lock:
            stream, self._process.stderr = self._process.stderr, None
            return stream

    async def wait(self) -> ExitStatus:
        """Wait for exit and record the status once."""
        returncode = await self._process.wait()
        async with self._lock:
            if self._status is None:
                self._status = ExitStatus.from_returncode(returncode)
            return self._status

    async def terminate(self) -> bool:
        """Request termination (SIGTERM to the process group).

        Returns:
            True if a signal was sent, False if the process already exited
        """
        return await self._send(kill=False)

    async def kill(self) -> bool:
        """Force termination (SIGKILL to the process group)."""
        return await self._send(kill=True)

    async def _send(self, kill: bool) -> bool:
        async with self._lock:
            if self._process.returncode is not None:
                return False
            try:
                if IS_WINDOWS:
                    if kill:
                        self._process.kill()
                    else:
                        self._process.terminate()
                else:
                    os.killpg(self._process.pid, signal.SIGKILL if kill else signal.SIGTERM)
            except ProcessLookupError:
                return False
            logger.debug(f"Sent {'kill' if kill else 'terminate'} to pid {self._process.pid}")
            return True
