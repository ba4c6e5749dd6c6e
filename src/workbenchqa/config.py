"""workbenchqa configuration management."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from workbenchqa.models import (
    DEFAULT_CLOSE_TIMEOUT,
    DEFAULT_DEBUG_PORT,
    DEFAULT_LAUNCH_TIMEOUT,
    DEFAULT_SETTLE_DELAY,
    DEFAULT_WAIT_TIMEOUT,
    WORKBENCH_READY_LOCATOR,
)


class WorkbenchQAConfigError(Exception):
    """Raised when configuration is invalid or missing."""

    pass


@dataclass
class WorkbenchQAConfig:
    """Configuration for a workbenchqa run."""

    # Application under test
    binary: str = ""
    extra_args: list[str] = field(default_factory=list)
    settings: dict[str, Any] = field(default_factory=dict)

    # Paths
    project_dir: Path = field(default_factory=lambda: Path(".workbenchqa"))
    user_data_dir: Path = field(default_factory=lambda: Path(".workbenchqa/user-data"))

    # Remote automation
    debug_port: int = DEFAULT_DEBUG_PORT
    ready_locator: str = WORKBENCH_READY_LOCATOR

    # Timing (seconds)
    launch_timeout: float = DEFAULT_LAUNCH_TIMEOUT
    settle_delay: float = DEFAULT_SETTLE_DELAY
    close_timeout: float = DEFAULT_CLOSE_TIMEOUT
    wait_timeout: float = DEFAULT_WAIT_TIMEOUT

    @classmethod
    def from_file(cls, config_path: Path) -> WorkbenchQAConfig:
        """Load config from a YAML file."""
        if not config_path.exists():
            raise WorkbenchQAConfigError(f"Config file not found: {config_path}\n\nTo fix: workbenchqa init")
        with open(config_path) as f:
            try:
                data = yaml.safe_load(f) or {}
            except yaml.YAMLError as exc:
                raise WorkbenchQAConfigError(f"Invalid YAML in {config_path}: {exc}") from exc
        if not isinstance(data, dict):
            raise WorkbenchQAConfigError(f"Config file must contain a mapping: {config_path}")
        return cls._from_dict(data, config_path.parent)

    @classmethod
    def _from_dict(cls, data: dict[str, Any], project_dir: Path) -> WorkbenchQAConfig:
        """Create config from a dictionary."""
        config = cls()
        config.project_dir = project_dir

        if "user_data_dir" in data:
            config.user_data_dir = project_dir / data["user_data_dir"]
        else:
            config.user_data_dir = project_dir / "user-data"

        if "binary" in data:
            config.binary = str(data["binary"] or "")
        if "extra_args" in data:
            args = data["extra_args"] or []
            if not isinstance(args, list):
                raise WorkbenchQAConfigError("extra_args must be a list of strings")
            config.extra_args = [str(a) for a in args]
        if "settings" in data:
            settings = data["settings"] or {}
            if not isinstance(settings, dict):
                raise WorkbenchQAConfigError("settings must be a mapping")
            config.settings = settings

        if "debug_port" in data:
            try:
                config.debug_port = int(data["debug_port"])
            except (TypeError, ValueError) as exc:
                raise WorkbenchQAConfigError(f"debug_port must be an integer, got {data['debug_port']!r}") from exc
        if "ready_locator" in data:
            config.ready_locator = str(data["ready_locator"])

        for key in ("launch_timeout", "settle_delay", "close_timeout", "wait_timeout"):
            if key in data:
                try:
                    value = float(data[key])
                except (TypeError, ValueError) as exc:
                    raise WorkbenchQAConfigError(f"{key} must be a number, got {data[key]!r}") from exc
                if value < 0:
                    raise WorkbenchQAConfigError(f"{key} must not be negative, got {value}")
                setattr(config, key, value)

        return config
