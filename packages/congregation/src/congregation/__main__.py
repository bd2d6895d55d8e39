"""Run several shell commands in parallel with grouped, scrollable output.

Entry point for the congregation command line tool.
"""

import asyncio
import sys

from rich.console import Console

from .app import run_dashboard
from .cli import parse_args, print_help, program_name
from .config import get_config_manager
from .errors import CongregationError
from .logs import setup_logging


def main(argv: list[str] | None = None) -> int:
    """Parse arguments, run the dashboard and map failures to exit codes.

    Returns 0 on completion, user quit or interrupt; 1 on any fatal error.
    """
    argv = sys.argv if argv is None else argv
    name = program_name(argv[0] if argv else None)
    err_console = Console(stderr=True, highlight=False)

    try:
        config = get_config_manager()
        settings = config.settings
        buffer = setup_logging(settings.log_level, settings.log_file)

        task_defs = parse_args(argv[1:], name, config)
        if task_defs is None:
            print_help(name)
            return 0

        try:
            asyncio.run(run_dashboard(task_defs, settings, Console(highlight=False)))
        finally:
            buffer.replay(sys.stderr)
    except CongregationError as e:
        err_console.print(e)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
