"""Error taxonomy and user-facing error formatting for congregation.

Fatal errors carry a short title, an explanation, optional example usage
and optional remediation notes. They render through rich so the CLI can
print them to stderr in one call.

PUBLIC API:
  - CongregationError: Base exception with structured display
  - UsageError: Command-line grammar errors
  - ConfigError: Configuration file errors
  - WorkdirError: Working directory does not resolve
  - SpawnError: Shell process failed to start
  - TaskIOError: Pipe or terminal I/O failure during a run
"""

from rich.console import Console, ConsoleOptions, RenderResult
from rich.text import Text


class CongregationError(Exception):
    """Base exception for every fatal congregation error."""

    def __init__(
        self,
        title: str,
        message: str = "",
        examples: list[str] | None = None,
        notes: list[str] | None = None,
    ):
        super().__init__(f"{title}: {message}" if message else title)
        self.title = title
        self.message = message
        self.examples = examples or []
        self.notes = notes or []

    def __rich_console__(self, console: Console, options: ConsoleOptions) -> RenderResult:
        yield Text(self.title, style="red")

        if not self.examples:
            yield Text(self.message)
        else:
            yield Text("")
            yield Text(f"{self.message}:")
            for example in self.examples:
                yield Text.assemble(("│", "bright_black"), " ", example)

        # Continuation notes align under the first note's text
        padding = " " * len("note:")
        for i, note in enumerate(self.notes):
            yield Text("")
            if i == 0:
                yield Text.assemble(("note:", "green"), " ", (note, "grey70"))
            else:
                yield Text.assemble(padding, " ", (note, "grey70"))


class UsageError(CongregationError):
    """Raised when the task grammar on the command line is invalid."""

    pass


class ConfigError(CongregationError):
    """Raised when congregation.toml cannot be loaded or a group is missing."""

    pass


class WorkdirError(CongregationError):
    """Raised before spawning when a task's working directory is unusable."""

    pass


class SpawnError(CongregationError):
    """Raised when the platform shell cannot be started for a task."""

    pass


class TaskIOError(CongregationError):
    """Raised on pipe or terminal I/O failure during an active run."""

    @classmethod
    def from_os_error(cls, error: OSError) -> "TaskIOError":
        return cls("io error", str(error))
