"""Render state machine - scrollable viewport over the task document.

Only the two scroll offsets survive between frames. Viewport size, line
count and the longest visible line are recomputed on every layout() call
from the current task state.

PUBLIC API:
  - Renderer: Viewport state, key handling and full-repaint drawing
  - KEY_BINDINGS: Key name to viewport action mapping
"""

import logging
from collections.abc import Sequence
from itertools import islice

from rich.console import Console
from rich.control import Control
from rich.style import Style
from rich.text import Text

from .. import __version__
from ..process import Task
from ..types import ExitStatus, describe_status
from .lines import Empty, Line, Log, TaskName, TaskStatus, iter_lines, line_count

logger = logging.getLogger(__name__)

LOG_PREFIX = "│ "
STATUS_PREFIX = "└ "
LEFT_MARKER = "«"
RIGHT_MARKER = "»"
DIM = "bright_black"

KEY_BINDINGS = {
    "q": "quit",
    "ctrl+c": "quit",
    "j": "down",
    "down": "down",
    "k": "up",
    "up": "up",
    "d": "page_down",
    "page_down": "page_down",
    "u": "page_up",
    "page_up": "page_up",
    "h": "left",
    "left": "left",
    "l": "right",
    "right": "right",
    "0": "left_edge",
    "home": "left_edge",
    "$": "right_edge",
    "end": "right_edge",
}


def status_style(status: ExitStatus | None) -> str:
    if status is None:
        return "grey50"
    return "green" if status.success else "red"


def log_text(raw: str) -> Text:
    """Styled display text for a captured line (ANSI colors kept)."""
    text = Text.from_ansi(raw)
    text.expand_tabs()
    return text


class Renderer:
    """Turns the task list into bounded terminal frames."""

    def __init__(self, console: Console):
        self.console = console
        self.viewport_width = 0
        self.viewport_height = 0
        self.scroll_x = 0
        self.scroll_y = 0
        self.line_count = 0
        self.longest_line = 0

    # -------------------- scroll bounds --------------------
    @property
    def content_height(self) -> int:
        """Rows available to the document; the last row is the footer."""
        return max(0, self.viewport_height - 1)

    def scroll_max(self) -> int:
        return max(0, self.line_count - self.content_height)

    def scroll_x_max(self) -> int:
        return max(0, self.longest_line - 1)

    def scroll_down(self, amount: int) -> None:
        self.scroll_y = min(self.scroll_max(), self.scroll_y + amount)

    def scroll_up(self, amount: int) -> None:
        self.scroll_y = max(0, self.scroll_y - amount)

    def scroll_left(self, amount: int) -> None:
        self.scroll_x = max(0, self.scroll_x - amount)

    def scroll_right(self, amount: int) -> None:
        self.scroll_x = min(self.scroll_x_max(), self.scroll_x + amount)

    # -------------------- input --------------------
    def handle_input(self, key: str) -> bool:
        """Apply a key press to the viewport.

        Returns:
            False when the key requests quitting, True otherwise
        """
        action = KEY_BINDINGS.get(key)
        if action == "quit":
            return False
        elif action == "down":
            self.scroll_down(1)
        elif action == "up":
            self.scroll_up(1)
        elif action == "page_down":
            self.scroll_down(self.viewport_height)
        elif action == "page_up":
            self.scroll_up(self.viewport_height)
        elif action == "left":
            self.scroll_left(1)
        elif action == "right":
            self.scroll_right(1)
        elif action == "left_edge":
            self.scroll_x = 0
        elif action == "right_edge":
            self.scroll_x = self.scroll_x_max()
        return True

    # -------------------- frame layout --------------------
    def layout(self, tasks: Sequence[Task]) -> list[Text]:
        """Compute one frame as exactly viewport_height rows.

        Applies the auto-tail rule: a viewport resting at the previous
        frame's bottom follows new content, one scrolled up stays put.
        """
        snap_to_bottom = self.scroll_y == self.scroll_max()

        width, height = self.console.size
        self.viewport_width = max(1, width)
        self.viewport_height = max(1, height)

        self.line_count = line_count(tasks)
        if snap_to_bottom:
            self.scroll_y = self.scroll_max()
        self.scroll_y = min(self.scroll_y, self.scroll_max())

        visible: list[Line] = list(islice(iter_lines(tasks, self.scroll_y), self.content_height))
        visible.extend(Empty() for _ in range(self.content_height - len(visible)))

        # Width in display columns: escape codes removed, tabs expanded
        texts = {i: log_text(line.text) for i, line in enumerate(visible) if isinstance(line, Log)}
        self.longest_line = max((len(text) for text in texts.values()), default=0)
        self.scroll_x = min(self.scroll_x, self.scroll_x_max())

        rows = []
        for i, line in enumerate(visible):
            if isinstance(line, Log):
                rows.append(self._log_row(texts[i]))
            else:
                rows.append(self._row(line))
        rows.append(self._footer(tasks))
        return rows

    def _row(self, line: Line) -> Text:
        if isinstance(line, TaskName):
            return Text(line.name, style=Style(bold=True, color=line.color.hex))
        if isinstance(line, TaskStatus):
            return Text.assemble(
                (STATUS_PREFIX, DIM),
                (describe_status(line.status), status_style(line.status)),
            )
        return Text()

    def _log_row(self, text: Text) -> Text:
        available = max(1, self.viewport_width - len(LOG_PREFIX))
        length = len(text)

        if self.scroll_x >= length:
            visible = Text()
        else:
            visible = text[self.scroll_x : self.scroll_x + available]

        if self.scroll_x > 0 and length > 0:
            visible = Text(LEFT_MARKER, style=DIM) + visible[1:]
        if length > self.scroll_x + available:
            visible = visible[:-1] + Text(RIGHT_MARKER, style=DIM)

        return Text.assemble((LOG_PREFIX, DIM), visible)

    def _footer(self, tasks: Sequence[Task]) -> Text:
        done = sum(1 for task in tasks if not task.running)
        return Text(
            f"congregation {__version__} · {done}/{len(tasks)} done · "
            "q quit · j/k scroll · d/u page · h/l pan · 0/$ edges",
            style=DIM,
        )

    # -------------------- output --------------------
    def draw(self, tasks: Sequence[Task]) -> None:
        """Full repaint: clear the screen and draw every row of the frame."""
        rows = self.layout(tasks)
        last = len(rows) - 1
        with self.console:
            self.console.control(Control.home(), Control.clear())
            for i, row in enumerate(rows):
                self.console.print(
                    row,
                    end="" if i == last else "\n",
                    no_wrap=True,
                    overflow="crop",
                    crop=True,
                    highlight=False,
                )

    def print_all_tasks(self, tasks: Sequence[Task]) -> None:
        """Print the whole document without clipping (final transcript)."""
        for line in iter_lines(tasks):
            if isinstance(line, Log):
                self.console.print(Text.assemble((LOG_PREFIX, DIM), log_text(line.text)), highlight=False)
            else:
                self.console.print(self._row(line), highlight=False)
