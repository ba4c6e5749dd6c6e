"""pytest host adapter for the session orchestrator.

Load it with ``-p workbenchqa.pytest_plugin`` (``workbenchqa run`` does this)
or ``pytest_plugins = ["workbenchqa.pytest_plugin"]`` in a conftest.py.

Hook mapping:

- ``pytest_configure``: build the orchestrator from options and config.yaml
- ``pytest_sessionstart``: launch the application before any test; a launch
  failure ends the run with exit status 6 and no test executes
- ``pytest_sessionfinish``: tear the application down and map the failure
  count to the exit status
- ``pytest_unconfigure``: teardown safety net (teardown runs at most once)

Fixtures: ``workbench_session``, ``workbench``, ``workbench_config``,
``workbench_section``.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable

import pytest

from workbenchqa.binary import resolve_binary
from workbenchqa.config import WorkbenchQAConfig, WorkbenchQAConfigError
from workbenchqa.engine.protocols import AutomationHandle
from workbenchqa.engine.session import LaunchTimeout, Session, SessionOrchestrator, SessionState
from workbenchqa.engine.tree import Section
from workbenchqa.models import EXIT_LAUNCH_FAILED

logger = logging.getLogger("workbenchqa.pytest_plugin")

ORCHESTRATOR_KEY = pytest.StashKey[SessionOrchestrator]()


def pytest_addoption(parser: pytest.Parser) -> None:
    group = parser.getgroup("workbenchqa", "workbench application under test")
    group.addoption(
        "--workbench-binary",
        dest="workbench_binary",
        default=None,
        help="Application binary to launch (overrides config and WORKBENCHQA_BINARY).",
    )
    group.addoption(
        "--workbench-config",
        dest="workbench_config",
        default=None,
        help="Path to config.yaml (default: <rootdir>/.workbenchqa/config.yaml).",
    )
    group.addoption(
        "--workbench-launch-timeout",
        dest="workbench_launch_timeout",
        type=float,
        default=None,
        help="Seconds allowed for the application to become ready.",
    )
    group.addoption(
        "--workbench-settle-delay",
        dest="workbench_settle_delay",
        type=float,
        default=None,
        help="Seconds to wait after the ready signal before running tests.",
    )


def build_config(config: pytest.Config) -> WorkbenchQAConfig:
    """Build a WorkbenchQAConfig from config.yaml, then apply option overrides."""
    config_path = config.getoption("workbench_config")
    if config_path:
        wb_config = WorkbenchQAConfig.from_file(Path(config_path))
    else:
        project_dir = Path(config.rootpath) / ".workbenchqa"
        default_path = project_dir / "config.yaml"
        if default_path.is_file():
            wb_config = WorkbenchQAConfig.from_file(default_path)
        else:
            wb_config = WorkbenchQAConfig()
            wb_config.project_dir = project_dir
            wb_config.user_data_dir = project_dir / "user-data"

    wb_config.binary = config.getoption("workbench_binary") or resolve_binary(wb_config.binary)

    launch_timeout = config.getoption("workbench_launch_timeout")
    if launch_timeout is not None:
        wb_config.launch_timeout = launch_timeout
    settle_delay = config.getoption("workbench_settle_delay")
    if settle_delay is not None:
        wb_config.settle_delay = settle_delay

    return wb_config


def build_orchestrator(wb_config: WorkbenchQAConfig) -> SessionOrchestrator:
    return SessionOrchestrator(wb_config)


def _orchestrator(config: pytest.Config) -> SessionOrchestrator | None:
    return config.stash.get(ORCHESTRATOR_KEY, None)


def _launches(config: pytest.Config) -> bool:
    return not (config.option.collectonly or config.option.help)


def pytest_configure(config: pytest.Config) -> None:
    if not _launches(config):
        return
    try:
        wb_config = build_config(config)
    except WorkbenchQAConfigError as exc:
        raise pytest.UsageError(str(exc)) from exc
    config.stash[ORCHESTRATOR_KEY] = build_orchestrator(wb_config)


def pytest_sessionstart(session: pytest.Session) -> None:
    orchestrator = _orchestrator(session.config)
    if orchestrator is None:
        return
    try:
        orchestrator.before_all()
    except LaunchTimeout as exc:
        logger.error("Aborting run before any test: %s", exc)
        orchestrator.after_all()
        orchestrator.on_complete(0)
        pytest.exit(f"workbench did not start: {exc}", returncode=EXIT_LAUNCH_FAILED)


@pytest.hookimpl(trylast=True)
def pytest_sessionfinish(session: pytest.Session, exitstatus: int) -> None:
    orchestrator = _orchestrator(session.config)
    if orchestrator is None:
        return
    orchestrator.after_all()
    status = orchestrator.on_complete(session.testsfailed)
    # Interrupted, internal and usage errors keep pytest's own status
    if exitstatus in (pytest.ExitCode.OK, pytest.ExitCode.TESTS_FAILED):
        session.exitstatus = status


def pytest_unconfigure(config: pytest.Config) -> None:
    orchestrator = _orchestrator(config)
    if orchestrator is not None:
        orchestrator.after_all()


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture(scope="session")
def workbench_config(pytestconfig: pytest.Config) -> WorkbenchQAConfig:
    orchestrator = _orchestrator(pytestconfig)
    if orchestrator is None:
        pytest.fail("workbenchqa plugin is not configured for this run")
    return orchestrator.config


@pytest.fixture(scope="session")
def workbench_session(pytestconfig: pytest.Config) -> Session:
    """The run's single live Session."""
    orchestrator = _orchestrator(pytestconfig)
    if orchestrator is None:
        pytest.fail("workbenchqa plugin is not configured for this run")
    session = orchestrator.session
    if session.state is not SessionState.ACTIVE:
        pytest.fail(f"workbench session is {session.state.value}, not active")
    return session


@pytest.fixture
def workbench(workbench_session: Session) -> AutomationHandle:
    """AutomationHandle of the live application."""
    return workbench_session.handle


@pytest.fixture
def workbench_section(
    workbench: AutomationHandle, workbench_config: WorkbenchQAConfig
) -> Callable[[str], Section]:
    """Factory: ``workbench_section("Explorer")`` returns a Section page object."""

    def _section(title: str) -> Section:
        return Section(workbench, title, wait_timeout=workbench_config.wait_timeout)

    return _section
