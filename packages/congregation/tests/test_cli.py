"""Tests for the command-line grammar."""

from collections import deque
from pathlib import Path

import pytest

from congregation.cli import parse_args, parse_task, print_help, program_name
from congregation.config import ConfigManager
from congregation.errors import ConfigError, UsageError
from congregation.types import Color


@pytest.fixture
def no_config(tmp_path, monkeypatch) -> ConfigManager:
    monkeypatch.chdir(tmp_path)
    return ConfigManager()


class TestParseTask:
    """Tests for a single run task."""

    def test_all_flags(self) -> None:
        task = parse_task(deque(["run", "npm start", "-d", "/srv/app", "-n", "web", "-c", "ff8800"]), 0)
        assert task.command == "npm start"
        assert task.workdir == Path("/srv/app")
        assert task.name == "web"
        assert task.color == Color(255, 136, 0)

    def test_stops_at_next_run(self) -> None:
        args = deque(["run", "a", "-n", "first", "run", "b"])
        parse_task(args, 0)
        assert list(args) == ["run", "b"]

    def test_missing_command(self) -> None:
        with pytest.raises(UsageError, match="expected command after 'run' keyword"):
            parse_task(deque(["run"]), 0)

    def test_missing_flag_value_names_task(self) -> None:
        with pytest.raises(UsageError) as exc:
            parse_task(deque(["run", "ls", "-n"]), 2)
        assert exc.value.title == "invalid syntax (in task 3)"
        assert exc.value.message == "expected task name after -n"

    def test_invalid_color(self) -> None:
        with pytest.raises(UsageError) as exc:
            parse_task(deque(["run", "ls", "-c", "#ff8800"]), 0)
        assert exc.value.message == "invalid color '#ff8800'"
        assert exc.value.notes == ["color syntax: RRGGBB (hex)"]

    def test_unknown_flag_explains_quoting(self) -> None:
        with pytest.raises(UsageError) as exc:
            parse_task(deque(["run", "npm", "start"]), 0)
        assert "got 'start'" in exc.value.message
        assert "the command you provided is: `npm`" in exc.value.notes


class TestParseArgs:
    """Tests for the full argument list."""

    def test_multiple_tasks_get_fallback_names(self, no_config) -> None:
        tasks = parse_args(["run", "echo hi", "run", "ls", "-d", "src"], config=no_config)
        assert [t.name for t in tasks] == ["#1: echo hi", "src"]

    @pytest.mark.parametrize("argv", [["help"], ["-h"], ["--help"], ["Help"]])
    def test_help_requested(self, argv, no_config) -> None:
        assert parse_args(argv, config=no_config) is None

    def test_no_tasks(self, no_config) -> None:
        with pytest.raises(UsageError) as exc:
            parse_args([], name="cg", config=no_config)
        assert exc.value.title == "no tasks specified!"
        assert exc.value.examples == ["cg run 'echo hello'"]
        assert exc.value.notes == ["run 'cg help' for more information"]

    def test_unexpected_first_word(self, no_config) -> None:
        with pytest.raises(UsageError, match="expected 'run' or 'help'"):
            parse_args(["echo", "hi"], config=no_config)

    def test_init_loads_group(self, tmp_path) -> None:
        config_file = tmp_path / "congregation.toml"
        config_file.write_text('[dev.api]\ncommand = "make serve"\npath = "api"\ncolor = "00ff00"\n')

        tasks = parse_args(["init", "dev", "run", "ls"], config=ConfigManager(config_file))

        assert [t.command for t in tasks] == ["make serve", "ls"]
        assert tasks[0].name == "api"
        assert tasks[0].workdir == tmp_path / "api"
        assert tasks[1].name == "#2: ls"

    def test_unknown_group_lists_available(self, tmp_path) -> None:
        config_file = tmp_path / "congregation.toml"
        config_file.write_text('[dev.api]\ncommand = "make serve"\n')

        with pytest.raises(ConfigError) as exc:
            parse_args(["init", "prod"], config=ConfigManager(config_file))
        assert exc.value.notes == ["available groups: dev"]

    def test_unknown_group_without_config(self, no_config) -> None:
        with pytest.raises(ConfigError) as exc:
            parse_args(["init", "dev"], config=no_config)
        assert "no congregation.toml found" in exc.value.notes[0]

    def test_init_without_group(self, no_config) -> None:
        with pytest.raises(UsageError, match="expected group name"):
            parse_args(["init"], config=no_config)


class TestHelp:
    def test_program_name(self) -> None:
        assert program_name("/usr/local/bin/cg") == "cg"
        assert program_name(None) == "congregation"

    def test_help_mentions_program_and_keys(self, make_console) -> None:
        console = make_console(width=100, height=40)
        print_help("cg", console)
        output = console.file.getvalue()
        assert "Usage: cg <task>" in output
        assert "run <command> [-d <dir>]" in output
        assert "congregation.toml" in output
