"""workbenchqa init -- Initialize a .workbenchqa/ project directory.

Creates the config template, a sample test module and the isolated
user-data directory the application is launched with.
"""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console
from rich.panel import Panel
from rich.tree import Tree

from workbenchqa.models import EXIT_CONFIG_ERROR

console = Console()

_SAMPLE_CONFIG = """\
# workbenchqa project configuration

# Application to launch (env var WORKBENCHQA_BINARY takes priority)
# binary: /usr/share/code/code

# Extra command-line arguments for the application
extra_args:
  - --disable-extensions
  - --skip-welcome

# Written to <user_data_dir>/User/settings.json before launch
settings:
  window.titleBarStyle: custom
  workbench.startupEditor: none

# Profile directory, relative to this file
user_data_dir: user-data

# Remote-debugging port the automation attaches to
debug_port: 9222

# Session lifecycle (seconds)
launch_timeout: 15
settle_delay: 2
close_timeout: 15

# Per-call wait for UI state changes (seconds)
wait_timeout: 1
"""

_SAMPLE_TEST = '''\
"""Smoke tests against the live workbench.

Run with: workbenchqa run
"""


def test_explorer_lists_top_level_items(workbench_section):
    explorer = workbench_section("Explorer")
    explorer.expand()
    assert explorer.is_expanded()


def test_explorer_has_header_actions(workbench_section):
    explorer = workbench_section("Explorer")
    assert isinstance(explorer.actions(), list)
'''

_SUBDIRS = ["tests", "user-data"]


def init(
    dir: Path = typer.Option(
        Path("."),
        "--dir",
        "-d",
        help="Parent directory for .workbenchqa/ project. Defaults to current directory.",
    ),
    force: bool = typer.Option(
        False,
        "--force",
        "-f",
        help="Overwrite existing .workbenchqa/ directory.",
    ),
) -> None:
    """Initialize a new workbenchqa project directory.

    Creates .workbenchqa/ with a config.yaml template, a tests/ directory
    holding a sample test module, and an empty user-data/ profile.
    """
    project_dir = dir.resolve() / ".workbenchqa"

    if project_dir.exists() and not force:
        console.print(
            Panel(
                f"[yellow]Directory already exists:[/yellow] {project_dir}\n\n"
                "Use [bold]--force[/bold] to overwrite.",
                title="Already Initialized",
                border_style="yellow",
            )
        )
        raise typer.Exit(code=EXIT_CONFIG_ERROR)

    for sub in _SUBDIRS:
        (project_dir / sub).mkdir(parents=True, exist_ok=True)

    (project_dir / "config.yaml").write_text(_SAMPLE_CONFIG, encoding="utf-8")
    (project_dir / "tests" / "test_smoke.py").write_text(_SAMPLE_TEST, encoding="utf-8")

    tree = Tree(f"[bold green]{project_dir}[/bold green]", guide_style="dim")
    tree.add("[cyan]config.yaml[/cyan]")
    for sub in _SUBDIRS:
        branch = tree.add(f"[blue]{sub}/[/blue]")
        for child in sorted((project_dir / sub).iterdir()):
            if child.is_file():
                branch.add(f"[dim]{child.name}[/dim]")

    console.print()
    console.print(
        Panel(
            tree,
            title="[bold green]workbenchqa Initialized[/bold green]",
            border_style="green",
        )
    )
    console.print()
    console.print("[dim]Next steps:[/dim]")
    console.print("  1. Set [cyan]binary:[/cyan] in [cyan].workbenchqa/config.yaml[/cyan] or export WORKBENCHQA_BINARY")
    console.print("  2. Run [bold]workbenchqa run[/bold]")
    console.print()
