"""Runtime tasks and the process supervisor that spawns them.

Each task gets two reader coroutines. The stdout reader is authoritative:
after its EOF it waits for the process and publishes the single Exited
event. The stderr reader only forwards lines.

PUBLIC API:
  - Task: Runtime state for one task definition
  - resolve_workdir: Canonicalize a task's working directory
  - spawn: Start one task and its readers
  - spawn_all: Pre-flight every workdir, then start all tasks
"""

import asyncio
import logging
from dataclasses import dataclass, field
from pathlib import Path

from ..errors import SpawnError, WorkdirError
from ..events import EventBus, Exited, Stdout
from ..types import Color, ExitStatus, TaskDef, TaskID, describe_status
from .handle import STREAM_LIMIT, ProcessHandle

logger = logging.getLogger(__name__)

# How long the stdout reader lets stderr catch up before reporting exit
STDERR_DRAIN_TIMEOUT = 1.0


@dataclass
class Task:
    """Runtime instance of a TaskDef.

    logs and exit_status are only mutated by the dashboard loop.
    """

    id: TaskID
    name: str
    command: str
    color: Color
    handle: ProcessHandle
    logs: list[str] = field(default_factory=list)
    exit_status: ExitStatus | None = None
    readers: list[asyncio.Task] = field(default_factory=list, repr=False)

    @property
    def running(self) -> bool:
        return self.exit_status is None

    @property
    def status_text(self) -> str:
        return describe_status(self.exit_status)

    def set_exit_status(self, status: ExitStatus) -> bool:
        """Record the exit status; first write wins.

        Returns:
            True if this call set the status
        """
        if self.exit_status is not None:
            return False
        self.exit_status = status
        return True

    async def terminate(self) -> bool:
        return await self.handle.terminate()

    async def kill(self) -> bool:
        return await self.handle.kill()

    async def stop(self) -> None:
        """Terminate the process if alive and cancel both readers."""
        await self.handle.terminate()
        for reader in self.readers:
            reader.cancel()
        await asyncio.gather(*self.readers, return_exceptions=True)


def decode_line(raw: bytes) -> str:
    """Decode a captured line lossily and drop its terminator."""
    return raw.removesuffix(b"\n").removesuffix(b"\r").decode("utf-8", errors="replace")


def resolve_workdir(task_def: TaskDef, task_id: TaskID) -> Path:
    """Canonicalize the working directory of a task.

    Raises:
        WorkdirError: If the directory does not exist or cannot be resolved
    """
    try:
        path = task_def.workdir.expanduser().resolve(strict=True)
    except (OSError, RuntimeError) as e:
        raise WorkdirError(
            f"invalid working directory (in task {task_id + 1})",
            f"'{task_def.workdir}' could not be resolved: {e.strerror if isinstance(e, OSError) else e}",
            notes=[f"task command: `{task_def.command}`", "check the path given with -d"],
        ) from e

    if not path.is_dir():
        raise WorkdirError(
            f"invalid working directory (in task {task_id + 1})",
            f"'{task_def.workdir}' is not a directory",
            notes=[f"task command: `{task_def.command}`"],
        )
    return path


async def _read_line(stream: asyncio.StreamReader) -> bytes:
    """Read one line, empty at EOF.

    Lines longer than STREAM_LIMIT are truncated to it; the rest of the
    line is consumed and discarded so the pipe keeps draining.
    """
    head = bytearray()
    while True:
        try:
            tail = await stream.readuntil(b"\n")
        except asyncio.IncompleteReadError as e:
            tail = e.partial
        except asyncio.LimitOverrunError as e:
            chunk = await stream.readexactly(e.consumed)
            head += chunk[: max(0, STREAM_LIMIT - len(head))]
            continue
        if not head:
            return tail
        return bytes(head + tail[: max(0, STREAM_LIMIT - len(head))])


async def _forward_lines(stream: asyncio.StreamReader, task_id: TaskID, bus: EventBus) -> None:
    """Publish every line of a pipe until EOF."""
    while True:
        raw = await _read_line(stream)
        if not raw:
            return
        await bus.publish(Stdout(task=task_id, line=decode_line(raw)))


async def _read_stderr(task_id: TaskID, handle: ProcessHandle, bus: EventBus) -> None:
    stream = await handle.take_stderr()
    if stream is None:
        return
    try:
        await _forward_lines(stream, task_id, bus)
    except OSError as e:
        logger.warning(f"Task {task_id} stderr capture stopped: {e}")


async def _read_stdout(
    task_id: TaskID, handle: ProcessHandle, bus: EventBus, stderr_reader: asyncio.Task
) -> None:
    stream = await handle.take_stdout()
    try:
        if stream is not None:
            await _forward_lines(stream, task_id, bus)
    except OSError as e:
        logger.warning(f"Task {task_id} stdout capture failed: {e}")
        await handle.terminate()
        await bus.publish(Exited(task=task_id, status=ExitStatus.aborted()))
        return

    # Trailing stderr lines should land before the status line flips
    await asyncio.wait([stderr_reader], timeout=STDERR_DRAIN_TIMEOUT)

    status = await handle.wait()
    logger.info(f"Task {task_id} exited: {describe_status(status)}")
    await bus.publish(Exited(task=task_id, status=status))


async def spawn(task_def: TaskDef, task_id: TaskID, bus: EventBus, workdir: Path | None = None) -> Task:
    """Start one task and its two readers.

    Args:
        task_def: Definition to run
        task_id: Stable index used for render order
        bus: Event bus receiving Stdout/Exited events
        workdir: Already canonical workdir (resolved here when omitted)

    Raises:
        WorkdirError: If the workdir does not resolve (checked before starting)
        SpawnError: If the shell fails to start
    """
    if workdir is None:
        workdir = resolve_workdir(task_def, task_id)

    try:
        handle = await ProcessHandle.start(task_def.command, workdir)
    except (OSError, ValueError) as e:
        raise SpawnError(
            f"failed to start task {task_id + 1}",
            f"could not run `{task_def.command}`: {e}",
            notes=["the command runs through `sh -c` (or `cmd.exe /C` on Windows)"],
        ) from e

    task = Task(
        id=task_id,
        name=task_def.name,
        command=task_def.command,
        color=task_def.color,
        handle=handle,
    )
    stderr_reader = asyncio.create_task(_read_stderr(task_id, handle, bus), name=f"task-{task_id}-stderr")
    stdout_reader = asyncio.create_task(
        _read_stdout(task_id, handle, bus, stderr_reader), name=f"task-{task_id}-stdout"
    )
    task.readers = [stdout_reader, stderr_reader]

    logger.info(f"Task {task_id} '{task.name}' started: pid={handle.pid} cwd={workdir}")
    return task


async def spawn_all(task_defs: list[TaskDef], bus: EventBus) -> list[Task]:
    """Start every task, or none.

    All working directories are checked before any process starts. If a
    later spawn fails, already-started tasks are stopped before re-raising.
    """
    workdirs = [resolve_workdir(task_def, i) for i, task_def in enumerate(task_defs)]

    tasks: list[Task] = []
    try:
        for i, (task_def, workdir) in enumerate(zip(task_defs, workdirs)):
            tasks.append(await spawn(task_def, i, bus, workdir))
    except BaseException:
        logger.error(f"Spawn failed after {len(tasks)} task(s) started, stopping them")
        for task in tasks:
            await task.stop()
        raise
    return tasks
