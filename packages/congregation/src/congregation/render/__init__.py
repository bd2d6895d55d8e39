"""Rendering - logical document and the scrollable viewport.

PUBLIC API:
  - Renderer: Render state machine with full-repaint drawing
  - line_count: Total logical lines for a task list
  - iter_lines: Walk the logical document
"""

from .lines import Empty, Line, Log, TaskName, TaskStatus, iter_lines, line_count
from .renderer import KEY_BINDINGS, Renderer

__all__ = [
    "Renderer",
    "KEY_BINDINGS",
    "Line",
    "TaskName",
    "Log",
    "TaskStatus",
    "Empty",
    "iter_lines",
    "line_count",
]
