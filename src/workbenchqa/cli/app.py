"""workbenchqa CLI -- Main Typer entry point.

Registers all subcommands and provides --version / --verbose global options.
"""

from __future__ import annotations

from typing import Optional

import typer
from rich.console import Console

from workbenchqa import __version__

TAGLINE = "One live workbench, many test cases."

console = Console()

# ── Version callback ──────────────────────────────────────────────────────


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"[bold cyan]workbenchqa[/bold cyan] v{__version__}")
        console.print(f"  {TAGLINE}", style="dim")
        raise typer.Exit()


# ── Main app ──────────────────────────────────────────────────────────────

app = typer.Typer(
    name="workbenchqa",
    help=f"workbenchqa -- {TAGLINE}",
    rich_markup_mode="rich",
    no_args_is_help=True,
    add_completion=False,
)


@app.callback()
def main(
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        "-V",
        help="Show workbenchqa version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose output.",
    ),
) -> None:
    """workbenchqa -- drive a workbench-style desktop app from pytest.

    Launches the application once, runs every test against it, tears it down.
    """
    if verbose:
        import logging

        logging.basicConfig(level=logging.DEBUG, format="%(name)s  %(message)s")


# ── Register subcommands ──────────────────────────────────────────────────

from workbenchqa.cli.init_cmd import init  # noqa: E402
from workbenchqa.cli.run import run  # noqa: E402

app.command(name="init", help="Initialize a .workbenchqa/ project directory.")(init)
app.command(name="run", help="Launch the application and run tests against it.")(run)
