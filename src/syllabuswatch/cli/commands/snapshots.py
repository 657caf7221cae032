"""
Snapshot store inspection commands.
"""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

import typer
from rich.markup import escape
from rich.table import Table

from syllabuswatch.core.orchestrator.runner import DeadlineRunner
from syllabuswatch.core.tracking.detector import ChangeDetector
from syllabuswatch.core.tracking.store import StorageError
from .common import console, deadlines_table, err_console, load_config, print_json

app = typer.Typer(
    help="Inspect and manage stored course snapshots",
    no_args_is_help=True,
)


def _detector(config: Optional[Path]) -> ChangeDetector:
    app_config = load_config(config)
    try:
        return DeadlineRunner(app_config).detector
    except StorageError as e:
        err_console.print(f"[red]Cannot open snapshot store:[/red] {escape(str(e))}")
        raise typer.Exit(1)


def _format_timestamp(millis: int) -> str:
    if not millis:
        return "-"
    return datetime.fromtimestamp(millis / 1000, tz=timezone.utc).strftime("%Y-%m-%d %H:%M UTC")


ConfigOption = typer.Option(None, "--config", "-c", help="Path to app.yaml")


@app.command("list")
def list_snapshots(config: Optional[Path] = ConfigOption) -> None:
    """List courses with a stored snapshot."""
    detector = _detector(config)
    courses = detector.list_courses()

    if not courses:
        console.print("[dim]No snapshots stored.[/dim]")
        return

    table = Table(title="Snapshots", show_header=True, header_style="bold magenta")
    table.add_column("Course", style="cyan")
    table.add_column("Deadlines", justify="right")
    table.add_column("Hash")
    table.add_column("Saved", justify="right")

    for course in courses:
        snapshot = detector.get_snapshot(course)
        if snapshot is None:
            table.add_row(escape(course), "?", "[red]unreadable[/red]", "-")
            continue
        table.add_row(
            escape(course),
            str(len(snapshot.deadlines)),
            snapshot.hash[:12],
            _format_timestamp(snapshot.timestamp),
        )

    console.print(table)


@app.command("show")
def show_snapshot(
    course: str = typer.Argument(..., help="Course identifier"),
    format: str = typer.Option("table", "--format", "-f", help="Output format (table, json)"),
    config: Optional[Path] = ConfigOption,
) -> None:
    """Show the stored deadlines of a course."""
    snapshot = _detector(config).get_snapshot(course)

    if snapshot is None:
        err_console.print(f"[red]No snapshot for course:[/red] {escape(course)}")
        raise typer.Exit(1)

    if format == "json":
        print_json(snapshot.to_dict())
        return

    console.print(deadlines_table(snapshot.deadlines, title=f"{escape(course)} ({_format_timestamp(snapshot.timestamp)})"))


@app.command("clear")
def clear_snapshot(
    course: str = typer.Argument(..., help="Course identifier"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
    config: Optional[Path] = ConfigOption,
) -> None:
    """Delete the stored snapshot of a course (next run counts as first scrape)."""
    detector = _detector(config)

    if not yes and not typer.confirm(f"Delete snapshot for {course}?"):
        raise typer.Abort()

    if detector.clear_snapshot(course):
        console.print(f"[green]Cleared snapshot for[/green] {escape(course)}")
    else:
        err_console.print(f"[yellow]No snapshot for course:[/yellow] {escape(course)}")
        raise typer.Exit(1)
