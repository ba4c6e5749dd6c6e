"""workbenchqa run -- Launch the application and run tests against it.

Resolves config and the application binary, then hands the test paths to
pytest with the workbenchqa plugin loaded. pytest discovers and runs the
tests; the plugin brackets the run with a single application session.
"""

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Optional

import pytest
import typer
from rich.console import Console
from rich.panel import Panel

from workbenchqa.binary import resolve_binary
from workbenchqa.config import WorkbenchQAConfig, WorkbenchQAConfigError
from workbenchqa.models import EXIT_CONFIG_ERROR, EXIT_LAUNCH_FAILED, EXIT_OK, EXIT_TESTS_FAILED

console = Console(stderr=True)

logger = logging.getLogger("workbenchqa.cli.run")

PLUGIN = "workbenchqa.pytest_plugin"

_VERDICTS = {
    EXIT_OK: ("green", "[bold green]ALL TESTS PASSED[/bold green]"),
    EXIT_TESTS_FAILED: ("red", "[bold red]TESTS FAILED[/bold red]"),
    EXIT_LAUNCH_FAILED: ("red", "[bold red]APPLICATION DID NOT START[/bold red]"),
}


def _resolve_project_dir() -> Path:
    """Find the .workbenchqa/ project directory, searching upward from cwd."""
    current = Path.cwd()
    for directory in (current, *current.parents):
        candidate = directory / ".workbenchqa"
        if candidate.is_dir():
            return candidate

    # Fallback: use cwd/.workbenchqa
    return current / ".workbenchqa"


def _build_config(
    project_dir: Path,
    config_path: Path | None,
    binary: str | None,
    launch_timeout: float | None,
    settle_delay: float | None,
) -> WorkbenchQAConfig:
    """Build a WorkbenchQAConfig from CLI options, merging with config.yaml if present."""
    path = config_path or project_dir / "config.yaml"

    if config_path is not None or path.is_file():
        config = WorkbenchQAConfig.from_file(path)
    else:
        config = WorkbenchQAConfig()
        config.project_dir = project_dir
        config.user_data_dir = project_dir / "user-data"

    # CLI options override config file values
    config.binary = binary or resolve_binary(config.binary)
    if launch_timeout is not None:
        config.launch_timeout = launch_timeout
    if settle_delay is not None:
        config.settle_delay = settle_delay

    return config


def _build_pytest_args(
    config: WorkbenchQAConfig,
    config_path: Path | None,
    paths: list[str],
    keyword: str | None = None,
    junit_xml: Path | None = None,
    verbose: bool = False,
) -> list[str]:
    """Translate the resolved config into a pytest command line."""
    args = ["-p", PLUGIN, "--workbench-binary", config.binary]
    if config_path is not None:
        args += ["--workbench-config", str(config_path)]
    args += [
        "--workbench-launch-timeout", str(config.launch_timeout),
        "--workbench-settle-delay", str(config.settle_delay),
    ]
    if keyword:
        args += ["-k", keyword]
    if junit_xml is not None:
        args.append(f"--junitxml={junit_xml}")
    if verbose:
        args.append("-v")
    args += paths
    return args


def _default_paths(project_dir: Path) -> list[str]:
    tests_dir = project_dir / "tests"
    return [str(tests_dir)] if tests_dir.is_dir() else ["."]


def _print_run_header(config: WorkbenchQAConfig, paths: list[str]) -> None:
    """Print a styled header before the run starts."""
    info_lines = [
        f"[bold]Binary:[/bold]          {config.binary}",
        f"[bold]Tests:[/bold]           {' '.join(paths)}",
        f"[bold]Launch timeout:[/bold]  {config.launch_timeout:g}s",
        f"[bold]Settle delay:[/bold]    {config.settle_delay:g}s",
        f"[bold]Debug port:[/bold]      {config.debug_port}",
    ]
    console.print()
    console.print(
        Panel(
            "\n".join(info_lines),
            title="[bold cyan]workbenchqa Run[/bold cyan]",
            border_style="cyan",
        )
    )
    console.print()


def _print_summary_panel(exit_code: int, duration: float) -> None:
    """Print the final verdict panel."""
    border, verdict = _VERDICTS.get(
        exit_code, ("yellow", f"[bold yellow]RUN ENDED WITH STATUS {exit_code}[/bold yellow]")
    )
    console.print()
    console.print(Panel(f"{verdict}\n\n  Duration:  {duration:.1f}s", border_style=border))
    console.print()


def run(
    paths: Optional[list[str]] = typer.Argument(
        None,
        help="Test files or directories. Default: .workbenchqa/tests/ if present, else cwd.",
    ),
    binary: Optional[str] = typer.Option(
        None,
        "--binary",
        "-b",
        help="Application binary to launch (overrides config and WORKBENCHQA_BINARY).",
    ),
    config_path: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to config.yaml. Default: .workbenchqa/config.yaml.",
    ),
    launch_timeout: Optional[float] = typer.Option(
        None,
        "--launch-timeout",
        help="Seconds allowed for the application to become ready.",
    ),
    settle_delay: Optional[float] = typer.Option(
        None,
        "--settle-delay",
        help="Seconds to wait after the ready signal before running tests.",
    ),
    keyword: Optional[str] = typer.Option(
        None,
        "--keyword",
        "-k",
        help="Only run tests matching this pytest -k expression.",
    ),
    junit_xml: Optional[Path] = typer.Option(
        None,
        "--junit-xml",
        help="Path to write JUnit XML report (for CI integration).",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose logging.",
    ),
) -> None:
    """Launch the application once and run the selected tests against it.

    Exit status: 0 all passed, 1 a test failed, 6 the application did not
    start, 7 configuration error. Other codes are pytest's own.
    """
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s  %(message)s")

    project_dir = _resolve_project_dir()

    try:
        config = _build_config(
            project_dir=project_dir,
            config_path=config_path,
            binary=binary,
            launch_timeout=launch_timeout,
            settle_delay=settle_delay,
        )
    except WorkbenchQAConfigError as exc:
        console.print(
            Panel(
                f"[red]{exc}[/red]",
                title="[red]Config Error[/red]",
                border_style="red",
            )
        )
        raise typer.Exit(code=EXIT_CONFIG_ERROR)

    if config_path is None and (project_dir / "config.yaml").is_file():
        config_path = project_dir / "config.yaml"

    test_paths = list(paths) if paths else _default_paths(project_dir)
    _print_run_header(config, test_paths)

    args = _build_pytest_args(config, config_path, test_paths, keyword, junit_xml, verbose)
    logger.debug("pytest %s", " ".join(args))

    start_time = time.monotonic()
    try:
        exit_code = int(pytest.main(args))
    except KeyboardInterrupt:
        console.print("\n[yellow]Run interrupted by user.[/yellow]")
        raise typer.Exit(code=EXIT_TESTS_FAILED)

    _print_summary_panel(exit_code, time.monotonic() - start_time)

    if exit_code != EXIT_OK:
        raise typer.Exit(code=exit_code)
