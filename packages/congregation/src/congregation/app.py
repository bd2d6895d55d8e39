"""congregation application - wires supervisor, bus, renderer and shutdown.

Main entry point for running a list of task definitions as a live
dashboard. Terminal mode and child processes are released on every exit
path.
"""

import asyncio
import logging

from rich.console import Console

from .config import Settings
from .dashboard import Dashboard
from .errors import TaskIOError
from .events import EventBus
from .process import spawn_all
from .render import Renderer
from .shutdown import ShutdownCoordinator, ShutdownReason
from .terminal import InputListener, SignalForwarder, TerminalGuard
from .types import TaskDef

logger = logging.getLogger(__name__)


async def run_dashboard(
    task_defs: list[TaskDef],
    settings: Settings | None = None,
    console: Console | None = None,
) -> ShutdownReason:
    """Run every task in parallel and supervise them until shutdown.

    Args:
        task_defs: Ordered task definitions (may be empty)
        settings: Runtime settings, defaults when omitted
        console: Output console, stdout when omitted

    Returns:
        The reason the dashboard stopped

    Raises:
        WorkdirError: A working directory did not resolve (nothing started)
        SpawnError: A shell failed to start (started tasks are stopped)
        TaskIOError: Terminal I/O failed during the run
    """
    settings = settings or Settings()
    console = console or Console(highlight=False)
    if not task_defs:
        return ShutdownReason.ALL_COMPLETED

    bus = EventBus(settings.channel_capacity)
    with SignalForwarder(bus):
        tasks = await spawn_all(task_defs, bus)
        renderer = Renderer(console)
        coordinator = ShutdownCoordinator(tasks, bus, settings.grace_period)

        try:
            with TerminalGuard(console, alt_screen=settings.alt_screen) as guard:
                dashboard = Dashboard(tasks, bus, renderer, coordinator, live=guard.active)
                listener = None
                if guard.active:
                    listener = asyncio.create_task(InputListener(bus).run(), name="input-listener")
                try:
                    reason = await dashboard.run()
                except OSError as e:
                    raise TaskIOError.from_os_error(e) from e
                finally:
                    if listener is not None:
                        listener.cancel()
                        await asyncio.gather(listener, return_exceptions=True)
        finally:
            await coordinator.shutdown()

    if settings.transcript:
        renderer.print_all_tasks(tasks)
    return reason
