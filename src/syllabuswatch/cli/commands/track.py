"""
Change tracking commands.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer
from rich.markup import escape

from syllabuswatch.core.orchestrator.runner import DeadlineRunner
from syllabuswatch.core.tracking.detector import ChangeReport
from syllabuswatch.core.tracking.store import StorageError
from .common import console, deadlines_table, err_console, load_config, parse_now, print_json, read_source

app = typer.Typer(
    help="Track deadline changes between scrapes",
    no_args_is_help=True,
)


@app.command("run")
def run_track(
    course: str = typer.Argument(..., help="Course identifier (e.g. CS101)"),
    source: Path = typer.Argument(
        ...,
        exists=True,
        dir_okay=False,
        help="Course outline text or HTML file",
    ),
    now: Optional[str] = typer.Option(
        None,
        "--now",
        help="Resolution date for year inference (YYYY-MM-DD, default today)",
    ),
    format: str = typer.Option(
        "table",
        "--format",
        "-f",
        help="Output format (table, json)",
    ),
    config: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to app.yaml",
    ),
) -> None:
    """Extract deadlines for a course and report changes since the last run.

    Examples:
        syllabuswatch track run CS101 outline.txt
        syllabuswatch track run CS101 outline.txt --format json
    """
    app_config = load_config(config)
    resolution_date = parse_now(now)

    runner = DeadlineRunner(app_config)
    try:
        _, report = runner.track(course, read_source(source), now=resolution_date)
    except StorageError as e:
        err_console.print(f"[red]Cannot open snapshot store:[/red] {escape(str(e))}")
        raise typer.Exit(1)

    if format == "json":
        print_json(report.to_dict())
    else:
        _print_report(course, report)

    if report.error is not None:
        raise typer.Exit(1)


def _print_report(course: str, report: ChangeReport) -> None:
    """Print a change report as Rich tables."""
    if report.error is not None:
        err_console.print(f"[red]{escape(report.summary)}[/red]")
        return

    console.print(f"[bold]{escape(course)}[/bold]: {escape(report.summary)}")

    if not report.has_changes:
        return

    if report.added:
        title = "Deadlines" if report.is_first_scrape else "Added"
        console.print(deadlines_table(report.added, title=title))
    if report.removed:
        console.print(deadlines_table(report.removed, title="Removed"))
    for change in report.modified:
        old_date = change.old.due_date.isoformat() if change.old.due_date else "-"
        new_date = change.new.due_date.isoformat() if change.new.due_date else "-"
        console.print(
            f"[yellow]Rescheduled:[/yellow] {escape(change.new.title)} "
            f"[dim]{old_date}[/dim] -> [cyan]{new_date}[/cyan]"
        )
