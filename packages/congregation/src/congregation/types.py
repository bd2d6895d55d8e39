"""Type definitions for congregation - task-first architecture.

Task definitions are immutable inputs; everything mutable lives in the
runtime Task owned by the dashboard loop.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import TypeAlias
import re


TaskID: TypeAlias = int  # Stable index, also the render order

_HEX_COLOR = re.compile(r"^[0-9a-fA-F]{6}$")


@dataclass(frozen=True)
class Color:
    """RGB display color for a task name."""

    r: int = 255
    g: int = 255
    b: int = 255

    @property
    def hex(self) -> str:
        """Get rich-compatible #rrggbb format."""
        return f"#{self.r:02x}{self.g:02x}{self.b:02x}"

    @classmethod
    def parse(cls, value: str) -> "Color":
        """Parse RRGGBB hex notation (no leading #).

        Args:
            value: Six hex digits like "ff8800"

        Returns:
            Color instance

        Raises:
            ValueError: If format is invalid
        """
        if not _HEX_COLOR.match(value):
            raise ValueError(f"Invalid color: {value}")
        return cls(r=int(value[0:2], 16), g=int(value[2:4], 16), b=int(value[4:6], 16))


WHITE = Color()


@dataclass(frozen=True)
class TaskDef:
    """Immutable description of one command to run."""

    command: str
    name: str
    workdir: Path
    color: Color = WHITE

    @classmethod
    def create(
        cls,
        command: str,
        index: int,
        name: str | None = None,
        workdir: str | Path | None = None,
        color: Color | None = None,
    ) -> "TaskDef":
        """Build a definition applying the display-name fallbacks.

        Name falls back to the workdir as given, then to "#<n>: <command>"
        where n is the 1-based position of the task.
        """
        display = name or (str(workdir) if workdir else None) or f"#{index + 1}: {command}"
        return cls(
            command=command,
            name=display,
            workdir=Path(workdir) if workdir else Path.cwd(),
            color=color or WHITE,
        )


@dataclass(frozen=True)
class ExitStatus:
    """Final state of a child process.

    code is None when the process was killed by a signal or when the status
    was synthesized during shutdown.
    """

    code: int | None
    signal: int | None = None

    @property
    def success(self) -> bool:
        return self.code == 0

    @classmethod
    def from_returncode(cls, returncode: int) -> "ExitStatus":
        """Convert an asyncio returncode (negative means killed by signal)."""
        if returncode < 0:
            return cls(code=None, signal=-returncode)
        return cls(code=returncode)

    @classmethod
    def aborted(cls) -> "ExitStatus":
        """Synthesized status for tasks that never reported a real exit."""
        return cls(code=None)


def describe_status(status: ExitStatus | None) -> str:
    """Map an exit status to its status-line text."""
    if status is None:
        return "running..."
    if status.success:
        return "completed"
    if status.code is not None:
        return f"failed (code {status.code})"
    return "terminated"


@dataclass
class TaskGroup:
    """Named set of task definitions loaded from configuration."""

    name: str
    tasks: list[TaskDef] = field(default_factory=list)
