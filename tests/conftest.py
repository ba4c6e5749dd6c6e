"""Shared fixtures for workbenchqa unit tests."""

from __future__ import annotations

from pathlib import Path

import pytest
import yaml

from workbenchqa.config import WorkbenchQAConfig

pytest_plugins = ["pytester"]


# ---------------------------------------------------------------------------
# Fixture: temporary project directory with .workbenchqa/ structure
# ---------------------------------------------------------------------------

@pytest.fixture
def tmp_project_dir(tmp_path: Path) -> Path:
    """Create a temporary .workbenchqa/ project directory with a config.yaml."""
    project_dir = tmp_path / ".workbenchqa"
    (project_dir / "tests").mkdir(parents=True)
    (project_dir / "user-data").mkdir()

    config_data = {
        "binary": "/opt/app/bin/app",
        "launch_timeout": 15,
        "settle_delay": 2,
    }
    (project_dir / "config.yaml").write_text(
        yaml.dump(config_data, default_flow_style=False), encoding="utf-8"
    )

    return project_dir


# ---------------------------------------------------------------------------
# Fixture: sample config YAML string
# ---------------------------------------------------------------------------

@pytest.fixture
def sample_config_yaml() -> str:
    """Return a valid workbenchqa config.yaml as a string."""
    return """\
binary: /usr/share/code/code
extra_args:
  - --disable-extensions
settings:
  window.titleBarStyle: custom
user_data_dir: profile
debug_port: 9333
launch_timeout: 30
settle_delay: 0.5
close_timeout: 10
wait_timeout: 2
"""


# ---------------------------------------------------------------------------
# Fixture: config with no settle delay, for lifecycle tests
# ---------------------------------------------------------------------------

@pytest.fixture
def fast_config(tmp_path: Path) -> WorkbenchQAConfig:
    return WorkbenchQAConfig(
        binary="/fake/app",
        project_dir=tmp_path,
        user_data_dir=tmp_path / "user-data",
        launch_timeout=1.0,
        settle_delay=0.0,
        close_timeout=1.0,
    )
