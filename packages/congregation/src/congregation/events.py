"""Event types and the bounded bus merging every event source.

Producers (pipe readers, the input listener, signal handlers) publish into
one asyncio queue; the dashboard loop is the only consumer.

PUBLIC API:
  - Stdout, Exited, KeyPressed, Interrupted: Event variants
  - Event: Union of all event variants
  - EventBus: Bounded single-consumer queue
"""

import asyncio
from dataclasses import dataclass
from typing import TypeAlias

from .types import ExitStatus, TaskID

DEFAULT_CAPACITY = 32


@dataclass(frozen=True)
class Stdout:
    """One captured output line (from stdout or stderr) of a task."""

    task: TaskID
    line: str


@dataclass(frozen=True)
class Exited:
    """Exactly-once completion notice for a task."""

    task: TaskID
    status: ExitStatus


@dataclass(frozen=True)
class KeyPressed:
    """Decoded key from the terminal input listener."""

    key: str


@dataclass(frozen=True)
class Interrupted:
    """External interrupt request (SIGINT/SIGTERM)."""

    signum: int


Event: TypeAlias = Stdout | Exited | KeyPressed | Interrupted


class EventBus:
    """Bounded fan-in channel.

    Producers block in publish() while the queue is full, which throttles
    chatty processes without dropping lines.
    """

    def __init__(self, capacity: int = DEFAULT_CAPACITY):
        if capacity < 1:
            raise ValueError("capacity must be positive")
        self.capacity = capacity
        self._queue: asyncio.Queue[Event] = asyncio.Queue(maxsize=capacity)

    async def publish(self, event: Event) -> None:
        await self._queue.put(event)

    async def next(self) -> Event:
        return await self._queue.get()

    def next_nowait(self) -> Event | None:
        try:
            return self._queue.get_nowait()
        except asyncio.QueueEmpty:
            return None

    def empty(self) -> bool:
        return self._queue.empty()

    def __len__(self) -> int:
        return self._queue.qsize()
