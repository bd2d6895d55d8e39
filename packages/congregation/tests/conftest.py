"""Shared fixtures for congregation tests."""

import io
import sys

import pytest
from rich.console import Console

from congregation.process import Task
from congregation.types import Color, ExitStatus

posix_only = pytest.mark.skipif(sys.platform == "win32", reason="requires a POSIX shell")


class FakeHandle:
    """Stands in for ProcessHandle in tests that never start a process."""

    def __init__(self, on_terminate=None):
        self.pid = 0
        self.terminated = 0
        self.killed = 0
        self.on_terminate = on_terminate
        self.status = None

    async def terminate(self) -> bool:
        self.terminated += 1
        if self.on_terminate:
            await self.on_terminate()
        return True

    async def kill(self) -> bool:
        self.killed += 1
        return True

    async def wait(self) -> ExitStatus:
        self.status = ExitStatus(code=None, signal=15)
        return self.status


@pytest.fixture
def make_task():
    def _make(task_id=0, name="task", logs=None, status=None, handle=None, color=None) -> Task:
        return Task(
            id=task_id,
            name=name,
            command="true",
            color=color or Color(),
            handle=handle or FakeHandle(),
            logs=list(logs or []),
            exit_status=status,
        )

    return _make


@pytest.fixture
def make_console():
    def _make(width: int = 40, height: int = 5) -> Console:
        return Console(
            file=io.StringIO(),
            width=width,
            height=height,
            force_terminal=True,
            color_system="truecolor",
            legacy_windows=False,
        )

    return _make
