"""Tests for congregation.toml loading and settings resolution."""

from pathlib import Path

import pytest

from congregation.config import ConfigManager, Settings, _find_config_file
from congregation.errors import ConfigError
from congregation.types import Color

SAMPLE = """
[default]
transcript = false
channel_capacity = 8
grace_period = 0.5
log_level = "debug"

[dev.api]
command = "make serve"
path = "services/api"
color = "ff8800"

[dev.worker]
command = "make worker"
name = "jobs"

[notes]
title = "not a group"
"""


@pytest.fixture
def config_file(tmp_path) -> Path:
    path = tmp_path / "congregation.toml"
    path.write_text(SAMPLE)
    return path


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for var in ("CONGREGATION_ALT_SCREEN", "CONGREGATION_TRANSCRIPT", "CONGREGATION_LOG"):
        monkeypatch.delenv(var, raising=False)


class TestGroups:
    """Tests for task groups."""

    def test_groups_only_include_command_tables(self, config_file) -> None:
        assert ConfigManager(config_file).list_groups() == ["dev"]

    def test_group_tasks(self, config_file) -> None:
        api, worker = ConfigManager(config_file).get_group("dev").tasks

        assert api.name == "api"
        assert api.command == "make serve"
        assert api.workdir == config_file.parent / "services/api"
        assert api.color == Color(255, 136, 0)
        assert worker.name == "jobs"
        assert worker.workdir == config_file.parent

    def test_missing_group(self, config_file) -> None:
        assert ConfigManager(config_file).get_group("prod") is None

    def test_invalid_color(self, tmp_path) -> None:
        path = tmp_path / "congregation.toml"
        path.write_text('[dev.api]\ncommand = "x"\ncolor = "orange"\n')
        with pytest.raises(ConfigError, match="invalid color 'orange' for dev.api"):
            ConfigManager(path)

    def test_invalid_toml(self, tmp_path) -> None:
        path = tmp_path / "congregation.toml"
        path.write_text("[dev\n")
        with pytest.raises(ConfigError) as exc:
            ConfigManager(path)
        assert exc.value.title == "invalid configuration"

    def test_found_in_parent_directory(self, config_file) -> None:
        nested = config_file.parent / "a" / "b"
        nested.mkdir(parents=True)
        assert _find_config_file(nested) == config_file


class TestSettings:
    """Tests for settings defaults and overrides."""

    def test_defaults_without_file(self, tmp_path, monkeypatch) -> None:
        monkeypatch.chdir(tmp_path)
        config = ConfigManager()
        assert config.config_file is None
        assert config.settings == Settings()

    def test_default_table(self, config_file) -> None:
        settings = ConfigManager(config_file).settings
        assert settings.transcript is False
        assert settings.alt_screen is True
        assert settings.channel_capacity == 8
        assert settings.grace_period == 0.5
        assert settings.log_level == "DEBUG"

    def test_environment_overrides(self, config_file, monkeypatch, tmp_path) -> None:
        monkeypatch.setenv("CONGREGATION_ALT_SCREEN", "0")
        monkeypatch.setenv("CONGREGATION_TRANSCRIPT", "yes")
        monkeypatch.setenv("CONGREGATION_LOG", str(tmp_path / "run.log"))

        settings = ConfigManager(config_file).settings

        assert settings.alt_screen is False
        assert settings.transcript is True
        assert settings.log_file == tmp_path / "run.log"

    @pytest.mark.parametrize(
        "line",
        ["channel_capacity = 0", "channel_capacity = true", "grace_period = -1", 'log_level = "loud"'],
    )
    def test_invalid_values(self, tmp_path, line) -> None:
        path = tmp_path / "congregation.toml"
        path.write_text(f"[default]\n{line}\n")
        with pytest.raises(ConfigError):
            ConfigManager(path).settings
