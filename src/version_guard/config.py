"""Configuration management for version guard."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from .retention import RetentionMode

DEFAULT_CACHE_DIRECTORIES: tuple[str, ...] = (
    "User Data/Cache",
    "User Data/Log",
    "User Data/Temp",
)

_TRUE_STRINGS = frozenset({"true", "yes", "on", "1"})


def parse_bool(value: Any, default: bool) -> bool:
    """Parse a YAML value into a boolean.

    Args:
        value: Raw value from the config file.
        default: Returned when value is None.

    Returns:
        Parsed boolean.

    """
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return value != 0
    return str(value).strip().lower() in _TRUE_STRINGS


def validate_log_level(level: str) -> str:
    """Normalize a log level name, rejecting unknown ones."""
    normalized = level.upper()
    if not isinstance(logging.getLevelName(normalized), int):
        raise ValueError(f"Invalid log_level: {level}")
    return normalized


def _section(data: dict[str, Any], key: str) -> dict[str, Any]:
    """Return a nested mapping from the config, empty when left blank."""
    value = data[key] or {}
    if not isinstance(value, dict):
        raise ValueError(f"Invalid {key}: expected a mapping")
    return value


def _string_list(data: dict[str, Any], key: str) -> list[str]:
    value = data[key] or []
    if not isinstance(value, list):
        raise ValueError(f"Invalid {key}: expected a list")
    return [str(item) for item in value]


def _parse_keep(value: Any) -> int | str | None:
    """Keep-target from config: ints stay indexes, everything else is a version name."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    return str(value)


@dataclass
class GuardConfig:
    """Configuration for version guard."""

    # Where the protected application lives: $<env_var>/<vendor_folder>/<apps_folder>
    env_var: str = "LOCALAPPDATA"
    vendor_folder: str = "CapCut"
    apps_folder: str = "Apps"

    # Process names that count as "application running" (exact, case-sensitive)
    process_names: list[str] = field(default_factory=lambda: ["CapCut", "CapCut.exe"])

    # Cache directories relative to the install root
    cache_directories: list[str] = field(default_factory=lambda: list(DEFAULT_CACHE_DIRECTORIES))

    # Stages
    clean_cache: bool = True
    lock_config: bool = True
    create_blockers: bool = True

    # Retention
    retention_mode: RetentionMode = RetentionMode.HEURISTIC
    keep_version: int | str | None = None

    # Logging
    log_file: Path = field(default_factory=lambda: Path.home() / ".version-guard/version-guard.log")
    log_level: str = "INFO"

    def __post_init__(self) -> None:
        self.log_level = validate_log_level(self.log_level)

    @property
    def app_name(self) -> str:
        """Human-readable name of the protected application."""
        return self.vendor_folder

    @classmethod
    def get_config_path(cls) -> Path:
        """Get the default configuration file path."""
        return Path.home() / ".config/version-guard/config.yaml"

    @classmethod
    def load(cls, config_path: Path | None = None) -> GuardConfig:
        """Load configuration from YAML file.

        Args:
            config_path: Path to config file. Uses default if None.

        Returns:
            Loaded configuration.

        """
        if config_path is None:
            config_path = cls.get_config_path()

        if not config_path.exists():
            return cls()

        with config_path.open(encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}

        if not isinstance(data, dict):
            raise ValueError(f"Invalid config {config_path}: expected a mapping")

        return cls._from_dict(data)

    @classmethod
    def _from_dict(cls, data: dict[str, Any]) -> GuardConfig:
        """Create config from dictionary."""
        config = cls()

        # Install location
        if "env_var" in data:
            config.env_var = str(data["env_var"])
        if "vendor_folder" in data:
            config.vendor_folder = str(data["vendor_folder"])
        if "apps_folder" in data:
            config.apps_folder = str(data["apps_folder"])

        if "process_names" in data:
            config.process_names = _string_list(data, "process_names")
        if "cache_directories" in data:
            config.cache_directories = _string_list(data, "cache_directories")

        # Stage toggles
        if "stages" in data:
            stages = _section(data, "stages")
            config.clean_cache = parse_bool(stages.get("clean_cache"), config.clean_cache)
            config.lock_config = parse_bool(stages.get("lock_config"), config.lock_config)
            config.create_blockers = parse_bool(stages.get("create_blockers"), config.create_blockers)

        # Retention
        if "retention" in data:
            retention = _section(data, "retention")
            if "mode" in retention:
                try:
                    config.retention_mode = RetentionMode(str(retention["mode"]).lower())
                except ValueError:
                    raise ValueError(f"Invalid retention mode: {retention['mode']}") from None
            if "keep" in retention:
                config.keep_version = _parse_keep(retention["keep"])

        # Logging
        if "logging" in data:
            logging_cfg = _section(data, "logging")
            if "file" in logging_cfg:
                config.log_file = Path(os.path.expanduser(logging_cfg["file"]))
            if "level" in logging_cfg:
                config.log_level = validate_log_level(str(logging_cfg["level"]))

        return config

    def save(self, config_path: Path | None = None) -> None:
        """Save configuration to YAML file.

        Args:
            config_path: Path to save config. Uses default if None.

        """
        if config_path is None:
            config_path = self.get_config_path()

        config_path.parent.mkdir(parents=True, exist_ok=True)

        data = {
            "env_var": self.env_var,
            "vendor_folder": self.vendor_folder,
            "apps_folder": self.apps_folder,
            "process_names": list(self.process_names),
            "cache_directories": list(self.cache_directories),
            "stages": {
                "clean_cache": self.clean_cache,
                "lock_config": self.lock_config,
                "create_blockers": self.create_blockers,
            },
            "retention": {
                "mode": self.retention_mode.value,
                "keep": self.keep_version,
            },
            "logging": {
                "file": str(self.log_file),
                "level": self.log_level,
            },
        }

        with config_path.open("w", encoding="utf-8") as f:
            yaml.dump(data, f, default_flow_style=False, sort_keys=False)
