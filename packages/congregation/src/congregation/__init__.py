"""Run several shell commands in parallel with grouped terminal output.

Spawns every task through the platform shell, captures stdout and stderr
line by line and shows them as a live, scrollable view grouped per task
with a status line for each.

PUBLIC API:
  - run_dashboard: Supervise a list of task definitions until shutdown
  - TaskDef: Immutable task definition
  - Color: RGB task color
  - ExitStatus: Final process status
"""

__version__ = "0.1.0"

from .app import run_dashboard  # noqa: E402
from .types import Color, ExitStatus, TaskDef  # noqa: E402

__all__ = ["run_dashboard", "TaskDef", "Color", "ExitStatus", "__version__"]
