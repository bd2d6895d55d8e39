"""Configuration management for congregation.

Handles task groups and default settings from congregation.toml.
"""

import logging
import os
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional

from .errors import ConfigError
from .events import DEFAULT_CAPACITY
from .shutdown import DEFAULT_GRACE_PERIOD
from .types import Color, TaskDef, TaskGroup

CONFIG_FILENAME = "congregation.toml"


def _find_config_file(start: Optional[Path] = None) -> Optional[Path]:
    """Find congregation.toml in current or parent directories."""
    current = start or Path.cwd()

    for parent in [current] + list(current.parents):
        config_file = parent / CONFIG_FILENAME
        if config_file.exists():
            return config_file

    return None


def _load_config(path: Optional[Path] = None) -> dict:
    """Load raw configuration from file."""
    if path is None or not path.exists():
        return {}

    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigError("invalid configuration", f"{path}: {e}") from e


def _truthy_env(value: Optional[str], default: bool = True) -> bool:
    if value is None:
        return default
    return value.strip().lower() not in {"0", "false", "no", "off", ""}


@dataclass
class Settings:
    """Runtime settings for a dashboard run."""

    alt_screen: bool = True
    transcript: bool = True
    channel_capacity: int = DEFAULT_CAPACITY
    grace_period: float = DEFAULT_GRACE_PERIOD
    log_file: Optional[Path] = None
    log_level: str = "INFO"


class ConfigManager:
    """Manages configuration for congregation."""

    def __init__(self, path: Optional[Path] = None):
        self._config_file = path or _find_config_file()
        self.data = _load_config(self._config_file)
        self._base_dir = self._config_file.parent if self._config_file else Path.cwd()
        self._default_config = self.data.get("default", {})
        self._groups: Dict[str, TaskGroup] = {}

        # Parse task groups
        for key, value in self.data.items():
            if key == "default" or not isinstance(value, dict):
                continue

            tasks = []
            for task_name, task_data in value.items():
                if isinstance(task_data, dict) and "command" in task_data:
                    tasks.append(self._parse_task(key, task_name, task_data))

            if tasks:
                self._groups[key] = TaskGroup(name=key, tasks=tasks)

    @property
    def config_file(self) -> Optional[Path]:
        return self._config_file

    def _parse_task(self, group: str, task_name: str, data: dict) -> TaskDef:
        color = None
        if "color" in data:
            try:
                color = Color.parse(str(data["color"]))
            except ValueError:
                raise ConfigError(
                    "invalid configuration",
                    f"invalid color '{data['color']}' for {group}.{task_name}",
                    notes=["color syntax: RRGGBB (hex)"],
                )

        workdir = self._base_dir
        if data.get("path"):
            workdir = self._base_dir / Path(data["path"]).expanduser()

        return TaskDef(
            command=str(data["command"]),
            name=str(data.get("name") or task_name),
            workdir=workdir,
            color=color or Color(),
        )

    def get_group(self, name: str) -> Optional[TaskGroup]:
        """Get task group configuration."""
        return self._groups.get(name)

    def list_groups(self) -> list[str]:
        """List available task groups."""
        return list(self._groups.keys())

    @property
    def settings(self) -> Settings:
        """Resolve settings: defaults < [default] table < environment."""
        defaults = self._default_config

        capacity = defaults.get("channel_capacity", DEFAULT_CAPACITY)
        if not isinstance(capacity, int) or isinstance(capacity, bool) or capacity < 1:
            raise ConfigError("invalid configuration", f"channel_capacity must be a positive integer, got {capacity!r}")

        grace = defaults.get("grace_period", DEFAULT_GRACE_PERIOD)
        if not isinstance(grace, (int, float)) or isinstance(grace, bool) or grace < 0:
            raise ConfigError("invalid configuration", f"grace_period must be a non-negative number, got {grace!r}")

        log_level = str(defaults.get("log_level", "INFO")).upper()
        if log_level not in logging.getLevelNamesMapping():
            raise ConfigError("invalid configuration", f"unknown log_level {log_level!r}")

        log_file = os.getenv("CONGREGATION_LOG") or defaults.get("log_file")

        return Settings(
            alt_screen=_truthy_env(os.getenv("CONGREGATION_ALT_SCREEN"), bool(defaults.get("alt_screen", True))),
            transcript=_truthy_env(os.getenv("CONGREGATION_TRANSCRIPT"), bool(defaults.get("transcript", True))),
            channel_capacity=capacity,
            grace_period=float(grace),
            log_file=Path(log_file).expanduser() if log_file else None,
            log_level=log_level,
        )


# Global instance
_config_manager: Optional[ConfigManager] = None


def get_config_manager() -> ConfigManager:
    """Get or create the global config manager."""
    global _config_manager
    if _config_manager is None:
        _config_manager = ConfigManager()
    return _config_manager
