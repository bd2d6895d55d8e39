"""Command-line grammar: turn argv into task definitions.

Grammar:
  <prog> <task> [<task> ...]
  task := run <command> [-d <dir>] [-n <name>] [-c <rrggbb>]
        | init <group>

PUBLIC API:
  - parse_args: Parse arguments into task definitions (None means help)
  - parse_task: Parse a single run task
  - print_help: Print usage text
"""

from collections import deque
from pathlib import Path

from rich.console import Console

from .config import CONFIG_FILENAME, ConfigManager
from .errors import ConfigError, UsageError
from .types import Color, TaskDef

HELP_TEXT = """\
Run multiple parallel tasks with grouped output

Usage: {name} <task> [<task> ...]

Task syntax:
  run <command> [-d <dir>] [-n <name>] [-c <rrggbb>]
  init <group>

  Options:
    <command>     The shell command to run (wrap in quotes if it contains spaces)
    -d <dir>      Working directory for the task (defaults to the current working directory)
    -n <name>     Name of the task (used in task header, defaults to working directory or command)
    -c <rrggbb>   Hex RGB color for task name (e.g., ff8800, defaults to white)
    <group>       Task group defined in {config}

Keys:
  q / Ctrl-C    quit
  j k / ↓ ↑     scroll one line
  d u / PgDn PgUp  scroll one page
  h l / ← →     pan one column
  0 $ / Home End   jump to left / right edge
"""


def print_help(name: str, console: Console | None = None) -> None:
    console = console or Console(highlight=False)
    console.print(HELP_TEXT.format(name=name, config=CONFIG_FILENAME), markup=False, highlight=False)


def _syntax_error(task_count: int, message: str, notes: list[str] | None = None) -> UsageError:
    return UsageError(f"invalid syntax (in task {task_count + 1})", message, notes=notes)


def parse_task(args: deque[str], task_count: int) -> TaskDef:
    """Consume one `run` task from args.

    Args:
        args: Remaining arguments, starting at the `run` keyword
        task_count: Number of tasks parsed so far

    Raises:
        UsageError: If the task syntax is invalid
    """
    if not args or args.popleft() != "run":
        raise UsageError("invalid syntax", "expected 'run' or 'help' as the first argument")

    if not args:
        raise UsageError("invalid syntax", "expected command after 'run' keyword")
    command = args.popleft()

    name = None
    workdir = None
    color = None

    while args and args[0] not in ("run", "init"):
        flag = args.popleft()
        if flag == "-n":
            if not args:
                raise _syntax_error(task_count, "expected task name after -n")
            name = args.popleft()
        elif flag == "-d":
            if not args:
                raise _syntax_error(task_count, "expected directory after -d")
            workdir = args.popleft()
        elif flag == "-c":
            if not args:
                raise _syntax_error(
                    task_count,
                    "expected color after -c",
                    notes=["color syntax: RRGGBB (hex)", "if you have a # symbol, remove it"],
                )
            color_arg = args.popleft()
            try:
                color = Color.parse(color_arg)
            except ValueError:
                raise _syntax_error(
                    task_count, f"invalid color '{color_arg}'", notes=["color syntax: RRGGBB (hex)"]
                ) from None
        else:
            raise _syntax_error(
                task_count,
                f"expected -n <name>, -d <dir>, -c <color> or run after command, got '{flag}'",
                notes=[
                    "ensure that the command goes after the 'run' keyword",
                    "if your command includes spaces, please wrap it in quotes",
                    f"the command you provided is: `{command}`",
                ],
            )

    return TaskDef.create(command, task_count, name=name, workdir=workdir, color=color)


def _parse_group(args: deque[str], config: ConfigManager) -> list[TaskDef]:
    args.popleft()
    if not args:
        raise UsageError("invalid syntax", "expected group name after 'init' keyword")
    group_name = args.popleft()

    group = config.get_group(group_name)
    if group is None:
        available = config.list_groups()
        if config.config_file is None:
            notes = [f"no {CONFIG_FILENAME} found in this directory or its parents"]
        else:
            notes = [f"available groups: {', '.join(available) or 'none'}"]
        raise ConfigError("unknown task group", f"'{group_name}' is not defined", notes=notes)
    return list(group.tasks)


def parse_args(argv: list[str], name: str = "congregation", config: ConfigManager | None = None) -> list[TaskDef] | None:
    """Parse arguments (without the program name) into task definitions.

    Returns:
        Task definitions, or None when help was requested

    Raises:
        UsageError: Invalid grammar or no tasks
        ConfigError: Unknown task group
    """
    args = deque(argv)
    tasks: list[TaskDef] = []

    while args:
        head = args[0]
        if head in ("-h", "--help") or head.lower().startswith("h"):
            return None
        if head == "init":
            tasks.extend(_parse_group(args, config or ConfigManager()))
        else:
            tasks.append(parse_task(args, len(tasks)))

    if not tasks:
        raise UsageError(
            "no tasks specified!",
            "please list some commands to execute using the 'run' keyword",
            examples=[f"{name} run 'echo hello'"],
            notes=[f"run '{name} help' for more information"],
        )
    return tasks


def program_name(argv0: str | None) -> str:
    return Path(argv0).name if argv0 else "congregation"
