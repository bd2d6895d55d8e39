"""Scoped ownership of the terminal mode.

The original terminal attributes are captured once on entry and restored
on every exit path.

PUBLIC API:
  - TerminalGuard: Context manager for cbreak + alternate screen + hidden cursor
"""

import logging
import sys
from typing import TextIO

from rich.console import Console

IS_WINDOWS = sys.platform == "win32"

if not IS_WINDOWS:
    import termios
    import tty

logger = logging.getLogger(__name__)


class TerminalGuard:
    """Acquire/release the interactive terminal mode.

    When stdin or the console is not a terminal the guard does nothing,
    which keeps piped and test runs working.
    """

    def __init__(self, console: Console, alt_screen: bool = True, stdin: TextIO | None = None):
        self.console = console
        self.alt_screen = alt_screen
        self.stdin = stdin or sys.stdin
        self.active = False
        self._saved_attrs = None

    @property
    def interactive(self) -> bool:
        """Whether stdin and the console both talk to a terminal."""
        try:
            return self.console.is_terminal and self.stdin.isatty()
        except ValueError:
            # stdin closed
            return False

    def __enter__(self) -> "TerminalGuard":
        try:
            self.acquire()
        except BaseException:
            # __exit__ never runs when __enter__ raises
            self.restore()
            raise
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        self.restore()
        return False

    def acquire(self) -> None:
        if self.active or not self.interactive:
            return

        if not IS_WINDOWS:
            fd = self.stdin.fileno()
            self._saved_attrs = termios.tcgetattr(fd)
            tty.setcbreak(fd)

        # Mark active before any console write so restore() undoes cbreak
        self.active = True
        if self.alt_screen:
            self.console.set_alt_screen(True)
        self.console.show_cursor(False)
        logger.debug("Terminal acquired")

    def restore(self) -> None:
        """Restore the captured terminal state; safe to call repeatedly."""
        if not self.active:
            return
        self.active = False

        try:
            self.console.show_cursor(True)
            if self.alt_screen:
                self.console.set_alt_screen(False)
        finally:
            if self._saved_attrs is not None:
                termios.tcsetattr(self.stdin.fileno(), termios.TCSADRAIN, self._saved_attrs)
                self._saved_attrs = None
        logger.debug("Terminal restored")
