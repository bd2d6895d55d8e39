"""Tests for the command line entry point."""

import pytest

import congregation.config
from congregation.__main__ import main

from conftest import posix_only


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(congregation.config, "_config_manager", None)
    for var in ("CONGREGATION_ALT_SCREEN", "CONGREGATION_TRANSCRIPT", "CONGREGATION_LOG"):
        monkeypatch.delenv(var, raising=False)


class TestMain:
    def test_help_exits_zero(self, capsys) -> None:
        assert main(["cg", "help"]) == 0
        assert "Usage: cg <task>" in capsys.readouterr().out

    def test_usage_error_exits_one(self, capsys) -> None:
        assert main(["cg"]) == 1
        assert "no tasks specified!" in capsys.readouterr().err

    def test_config_error_exits_one(self, tmp_path, capsys) -> None:
        (tmp_path / "congregation.toml").write_text("[default]\nchannel_capacity = 0\n")
        assert main(["cg", "run", "true"]) == 1
        assert "invalid configuration" in capsys.readouterr().err

    @posix_only
    def test_run_prints_transcript(self, capsys) -> None:
        assert main(["cg", "run", "echo hi", "-n", "greeter"]) == 0
        out = capsys.readouterr().out
        assert "greeter" in out
        assert "│ hi" in out

    @posix_only
    def test_missing_workdir_exits_one(self, capsys) -> None:
        assert main(["cg", "run", "true", "-d", "does-not-exist"]) == 1
        assert "invalid working directory (in task 1)" in capsys.readouterr().err

    @posix_only
    def test_unstartable_command_exits_one(self, capsys) -> None:
        assert main(["cg", "run", "echo a\0b"]) == 1
        assert "failed to start task 1" in capsys.readouterr().err
