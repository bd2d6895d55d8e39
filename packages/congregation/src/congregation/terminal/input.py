"""Terminal input and interrupt-signal sources for the event bus.

PUBLIC API:
  - InputListener: Publishes KeyPressed events for stdin key presses
  - SignalForwarder: Publishes Interrupted events for SIGINT/SIGTERM
"""

import asyncio
import logging
import os
import signal
import sys
from typing import TextIO

from ..events import EventBus, Interrupted, KeyPressed
from .keys import decode_keys, decode_windows_key

IS_WINDOWS = sys.platform == "win32"

if IS_WINDOWS:
    import msvcrt

logger = logging.getLogger(__name__)

WINDOWS_POLL_INTERVAL = 0.05


class InputListener:
    """Reads raw key presses and publishes them in arrival order."""

    def __init__(self, bus: EventBus, stdin: TextIO | None = None):
        self.bus = bus
        self.stdin = stdin or sys.stdin

    async def run(self) -> None:
        """Listen until stdin closes or the task is cancelled."""
        if IS_WINDOWS:
            await self._poll_windows()
            return

        loop = asyncio.get_running_loop()
        fd = self.stdin.fileno()
        chunks: asyncio.Queue[bytes] = asyncio.Queue()

        def on_readable() -> None:
            try:
                data = os.read(fd, 1024)
            except OSError as e:
                logger.warning(f"Reading stdin failed: {e}")
                data = b""
            if not data:
                loop.remove_reader(fd)
            chunks.put_nowait(data)

        loop.add_reader(fd, on_readable)
        try:
            while True:
                data = await chunks.get()
                if not data:
                    logger.debug("stdin closed, input listener stopping")
                    return
                for key in decode_keys(data):
                    await self.bus.publish(KeyPressed(key))
        finally:
            loop.remove_reader(fd)

    async def _poll_windows(self) -> None:
        while True:
            while msvcrt.kbhit():
                first = msvcrt.getch()
                second = msvcrt.getch() if first in (b"\x00", b"\xe0") else None
                key = decode_windows_key(first, second)
                if key:
                    await self.bus.publish(KeyPressed(key))
            await asyncio.sleep(WINDOWS_POLL_INTERVAL)


class SignalForwarder:
    """Routes SIGINT/SIGTERM into the bus instead of raising KeyboardInterrupt."""

    SIGNALS = (signal.SIGINT, signal.SIGTERM)

    def __init__(self, bus: EventBus):
        self.bus = bus
        self._pending: set[asyncio.Task] = set()
        self._installed: list[signal.Signals] = []
        self._previous: dict[signal.Signals, object] = {}
        self._loop: asyncio.AbstractEventLoop | None = None

    def _forward(self, signum: int) -> None:
        logger.info(f"Received signal {signum}")
        task = self._loop.create_task(self.bus.publish(Interrupted(signum)))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    def install(self) -> None:
        self._loop = asyncio.get_running_loop()
        for sig in self.SIGNALS:
            if IS_WINDOWS:
                # No loop signal support on Windows; hop back onto the loop
                self._previous[sig] = signal.signal(
                    sig, lambda signum, frame: self._loop.call_soon_threadsafe(self._forward, signum)
                )
            else:
                self._loop.add_signal_handler(sig, self._forward, int(sig))
            self._installed.append(sig)

    def uninstall(self) -> None:
        for sig in self._installed:
            if IS_WINDOWS:
                signal.signal(sig, self._previous[sig])
            else:
                self._loop.remove_signal_handler(sig)
        self._installed.clear()
        for task in list(self._pending):
            task.cancel()

    def __enter__(self) -> "SignalForwarder":
        self.install()
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        self.uninstall()
        return False
