"""
SyllabusWatch CLI - Main entry point.

A terminal-first course-outline deadline extractor with snapshot-based
change tracking.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.panel import Panel
from rich.traceback import install as install_rich_traceback

from syllabuswatch import __app_name__, __version__
from syllabuswatch.core.config import load_app_config

# Load environment variables from .env (if present)
load_dotenv()

# Install rich traceback for better error display
install_rich_traceback(show_locals=False, width=120)

console = Console()
err_console = Console(stderr=True)

app = typer.Typer(
    name=__app_name__,
    help="Course-outline deadline extractor and change tracker",
    rich_markup_mode="rich",
    no_args_is_help=True,
    pretty_exceptions_show_locals=False,
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"[bold cyan]{__app_name__}[/bold cyan] version [green]{__version__}[/green]")
        raise typer.Exit()


@app.callback()
def main(
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        "-v",
        help="Show version and exit",
        callback=version_callback,
        is_eager=True,
    ),
) -> None:
    """SyllabusWatch - Course deadline extractor and change tracker."""
    pass


# =============================================================================
# Import and register subcommand modules
# =============================================================================

from .commands import deadlines, snapshots, track  # noqa: E402

app.add_typer(deadlines.app, name="deadlines", help="Extract deadlines from course outlines")
app.add_typer(track.app, name="track", help="Track deadline changes between scrapes")
app.add_typer(snapshots.app, name="snapshots", help="Inspect and manage stored snapshots")


# =============================================================================
# Init Command
# =============================================================================


DEFAULT_APP_CONFIG = """\
# SyllabusWatch Configuration

# Snapshot storage (memory, json, sql)
storage:
  backend: json
  path: data/snapshots.json
  database_url: ${SYLLABUSWATCH_DATABASE_URL:-sqlite:///data/syllabuswatch.db}
  storage_key: deadlineSnapshots

# Extraction settings
extraction:
  detect_html: true
  date_fallback: false

# Logging settings
logging:
  level: INFO
  file: logs/syllabuswatch.log
  json_format: true
  rich_console: true
"""


@app.command()
def init(
    force: bool = typer.Option(
        False,
        "--force",
        "-f",
        help="Overwrite existing configuration",
    ),
) -> None:
    """Create a default configs/app.yaml and the data directories."""
    app_config_path = Path("configs/app.yaml")

    if app_config_path.exists() and not force:
        err_console.print(f"[yellow]{app_config_path} already exists[/yellow] (use --force to overwrite)")
        raise typer.Exit(1)

    app_config_path.parent.mkdir(parents=True, exist_ok=True)
    app_config_path.write_text(DEFAULT_APP_CONFIG, encoding="utf-8")

    load_app_config(app_config_path).ensure_directories()

    console.print(Panel.fit(
        "[bold green]SyllabusWatch initialized[/bold green]\n\n"
        "Created:\n"
        "  - [cyan]configs/app.yaml[/cyan] - Application configuration\n"
        "  - [cyan]data/[/cyan] - Snapshot storage\n"
        "  - [cyan]logs/[/cyan] - Log files\n\n"
        "Next steps:\n"
        "  1. Extract deadlines: [yellow]syllabuswatch deadlines extract outline.txt[/yellow]\n"
        "  2. Track a course: [yellow]syllabuswatch track run CS101 outline.txt[/yellow]",
        title="[bold]Initialization Complete[/bold]",
        border_style="green",
    ))


# =============================================================================
# Entry Point
# =============================================================================


def run() -> None:
    """Run the CLI application."""
    app()


if __name__ == "__main__":
    run()
