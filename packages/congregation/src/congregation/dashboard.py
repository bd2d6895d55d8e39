"""Dashboard loop - the single consumer of the event bus.

This loop is the only code that mutates task logs, exit statuses and
render state.

PUBLIC API:
  - Dashboard: Event loop driving task state and redraws
"""

import logging
from collections.abc import Sequence

from .events import Event, EventBus, Exited, Interrupted, KeyPressed, Stdout
from .process import Task
from .render import Renderer
from .shutdown import ShutdownCoordinator, ShutdownReason

logger = logging.getLogger(__name__)


class Dashboard:
    """Consumes events until every task exits, the user quits or an interrupt arrives."""

    def __init__(
        self,
        tasks: Sequence[Task],
        bus: EventBus,
        renderer: Renderer,
        coordinator: ShutdownCoordinator,
        live: bool = True,
    ):
        self.tasks = tasks
        self.bus = bus
        self.renderer = renderer
        self.coordinator = coordinator
        self.live = live
        self.completed = 0

    def apply(self, event: Event) -> None:
        """Apply a task event to task state."""
        if isinstance(event, Stdout):
            self.tasks[event.task].logs.append(event.line)
        elif isinstance(event, Exited):
            if self.tasks[event.task].set_exit_status(event.status):
                self.completed += 1
            else:
                logger.debug(f"Ignoring duplicate exit for task {event.task}")

    async def handle(self, event: Event) -> ShutdownReason | None:
        """Process one event; returns a reason when the loop must end."""
        if isinstance(event, (Stdout, Exited)):
            self.apply(event)
            if self.completed == len(self.tasks):
                return ShutdownReason.ALL_COMPLETED
        elif isinstance(event, KeyPressed):
            if not self.renderer.handle_input(event.key):
                return ShutdownReason.USER_QUIT
        elif isinstance(event, Interrupted):
            await self.coordinator.forward_interrupt(self.apply)
            return ShutdownReason.INTERRUPTED
        return None

    def redraw(self) -> None:
        if self.live:
            self.renderer.draw(self.tasks)

    async def run(self) -> ShutdownReason:
        """Run until a termination condition; the final state is always drawn."""
        if not self.tasks:
            self.coordinator.reason = ShutdownReason.ALL_COMPLETED
            return ShutdownReason.ALL_COMPLETED

        self.redraw()
        while True:
            reason = await self.handle(await self.bus.next())

            # Apply what is already queued, then repaint once
            for _ in range(self.bus.capacity):
                if reason is not None:
                    break
                event = self.bus.next_nowait()
                if event is None:
                    break
                reason = await self.handle(event)

            self.redraw()
            if reason is not None:
                logger.info(f"Dashboard loop ended: {reason.value}")
                self.coordinator.reason = reason
                return reason
