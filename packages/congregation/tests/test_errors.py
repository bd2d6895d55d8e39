"""Tests for user-facing error rendering."""

import io

from rich.console import Console

from congregation.errors import CongregationError, TaskIOError, UsageError


def render(error: CongregationError) -> str:
    console = Console(file=io.StringIO(), width=80)
    console.print(error)
    return console.file.getvalue()


class TestErrorRendering:
    def test_title_and_message(self) -> None:
        output = render(UsageError("invalid syntax", "expected command after 'run' keyword"))
        assert output.splitlines() == ["invalid syntax", "expected command after 'run' keyword"]

    def test_examples_and_notes(self) -> None:
        error = UsageError(
            "no tasks specified!",
            "please list some commands",
            examples=["cg run 'echo hello'"],
            notes=["first note", "second note"],
        )
        assert render(error).splitlines() == [
            "no tasks specified!",
            "",
            "please list some commands:",
            "│ cg run 'echo hello'",
            "",
            "note: first note",
            "",
            "      second note",
        ]

    def test_str(self) -> None:
        assert str(UsageError("bad", "worse")) == "bad: worse"
        assert str(UsageError("bad")) == "bad"

    def test_io_error(self) -> None:
        error = TaskIOError.from_os_error(OSError(5, "Input/output error"))
        assert error.title == "io error"
        assert "Input/output error" in error.message
