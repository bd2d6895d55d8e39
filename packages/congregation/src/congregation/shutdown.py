"""Shutdown coordination - every exit path ends in the same cleanup.

Trigger states (all completed, user quit, interrupted) lead to a single
shutdown: no child process outlives the dashboard.

PUBLIC API:
  - ShutdownReason: Why the dashboard loop ended
  - ShutdownCoordinator: Interrupt forwarding and final cleanup
"""

import asyncio
import logging
from collections.abc import Callable, Sequence
from enum import Enum

from .events import Event, EventBus, Exited, Stdout
from .process import Task
from .types import ExitStatus

logger = logging.getLogger(__name__)

DEFAULT_GRACE_PERIOD = 2.0


class ShutdownReason(Enum):
    ALL_COMPLETED = "all_completed"
    USER_QUIT = "user_quit"
    INTERRUPTED = "interrupted"


class ShutdownCoordinator:
    """Forwards termination to running tasks and reaps them.

    forward_interrupt() runs inside the dashboard loop and applies events
    through the loop's own apply callback, so task state keeps a single
    writer.
    """

    def __init__(self, tasks: Sequence[Task], bus: EventBus, grace_period: float = DEFAULT_GRACE_PERIOD):
        self.tasks = tasks
        self.bus = bus
        self.grace_period = grace_period
        self.reason: ShutdownReason | None = None

    async def forward_interrupt(self, apply: Callable[[Event], None]) -> None:
        """Terminate running tasks and settle every status.

        Real exits arriving within the grace period are applied; tasks that
        stay silent get a synthesized "terminated" status and are killed.
        """
        self.reason = ShutdownReason.INTERRUPTED
        running = [task for task in self.tasks if task.running]
        logger.info(f"Interrupt: terminating {len(running)} running task(s)")
        for task in running:
            await task.terminate()

        loop = asyncio.get_running_loop()
        deadline = loop.time() + self.grace_period
        while any(task.running for task in running):
            remaining = deadline - loop.time()
            if remaining <= 0:
                break
            try:
                event = await asyncio.wait_for(self.bus.next(), remaining)
            except TimeoutError:
                break
            if isinstance(event, (Stdout, Exited)):
                apply(event)

        for task in running:
            if task.running:
                logger.warning(f"Task {task.id} did not exit after terminate, killing")
                task.set_exit_status(ExitStatus.aborted())
                await task.kill()

    def _settle(self) -> None:
        """Record the reaped status of tasks the dashboard never saw exit."""
        for task in self.tasks:
            if task.running:
                task.set_exit_status(task.handle.status or ExitStatus.aborted())

    async def shutdown(self) -> None:
        """Stop readers and reap every child; kill stragglers after the grace period.

        Afterwards every task has an exit status, so the transcript shows
        final state.
        """
        for task in self.tasks:
            await task.stop()

        waiters = {asyncio.create_task(task.handle.wait()): task for task in self.tasks}
        if not waiters:
            return
        done, pending = await asyncio.wait(waiters, timeout=self.grace_period)
        for waiter in pending:
            task = waiters[waiter]
            logger.warning(f"Task {task.id} still alive at shutdown, killing")
            await task.kill()
        if pending:
            await asyncio.wait(pending, timeout=self.grace_period)
        for waiter in pending:
            waiter.cancel()
        self._settle()
        logger.info(f"Shutdown complete ({self.reason.value if self.reason else 'error'})")
