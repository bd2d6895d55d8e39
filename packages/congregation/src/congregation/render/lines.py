"""Logical document model - the lines the viewport scrolls over.

Each task contributes [name, log..., status]; tasks follow each other in
index order.

PUBLIC API:
  - TaskName, Log, TaskStatus, Empty: Logical line variants
  - Line: Union of all line variants
  - line_count: Total logical lines for a task list
  - iter_lines: Lazily walk the document from a given line
"""

from collections.abc import Iterator, Sequence
from dataclasses import dataclass
from typing import TypeAlias

from ..process import Task
from ..types import Color, ExitStatus


@dataclass(frozen=True)
class TaskName:
    name: str
    color: Color


@dataclass(frozen=True)
class Log:
    text: str


@dataclass(frozen=True)
class TaskStatus:
    status: ExitStatus | None


@dataclass(frozen=True)
class Empty:
    pass


Line: TypeAlias = TaskName | Log | TaskStatus | Empty


def line_count(tasks: Sequence[Task]) -> int:
    """Name line + one line per log + status line, summed over tasks."""
    return sum(len(task.logs) + 2 for task in tasks)


def iter_lines(tasks: Sequence[Task], start: int = 0) -> Iterator[Line]:
    """Yield document lines beginning at line index start.

    Skips whole tasks without touching their logs, so the cost is
    proportional to the number of lines consumed, not the document size.
    """
    for task in tasks:
        size = len(task.logs) + 2
        if start >= size:
            start -= size
            continue

        if start == 0:
            yield TaskName(name=task.name, color=task.color)
        for i in range(max(0, start - 1), len(task.logs)):
            yield Log(task.logs[i])
        yield TaskStatus(task.exit_status)
        start = 0
