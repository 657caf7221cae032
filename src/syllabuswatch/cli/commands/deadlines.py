"""
Deadline extraction commands.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer

from syllabuswatch.core.normalize.canonical import dominant_type, upcoming_deadlines
from syllabuswatch.core.orchestrator.runner import DeadlineRunner
from .common import console, deadlines_table, load_config, parse_now, print_json, read_source

app = typer.Typer(
    help="Extract deadlines from course outlines",
    no_args_is_help=True,
)


@app.command("extract")
def extract(
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
    upcoming: Optional[int] = typer.Option(
        None,
        "--upcoming",
        "-u",
        help="Only show deadlines due within N days of --now",
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
    show_stats: bool = typer.Option(
        False,
        "--stats",
        help="Show per-matcher candidate counts",
    ),
) -> None:
    """Extract, categorize and deduplicate deadlines from a document.

    Examples:
        syllabuswatch deadlines extract outline.txt --now 2024-09-01
        syllabuswatch deadlines extract outline.html --format json
    """
    app_config = load_config(config)
    resolution_date = parse_now(now)

    runner = DeadlineRunner(app_config)
    deadlines = runner.extract(read_source(source), now=resolution_date)

    if upcoming is not None:
        deadlines = upcoming_deadlines(deadlines, today=resolution_date, within_days=upcoming)

    if format == "json":
        print_json([d.to_dict() for d in deadlines])
        return

    if not deadlines:
        console.print("[dim]No deadlines found.[/dim]")
        return

    console.print(deadlines_table(deadlines, title=f"Deadlines in {source.name}"))

    main_type = dominant_type(deadlines)
    if main_type is not None:
        console.print(f"[dim]{len(deadlines)} deadline(s), mostly {main_type.value}[/dim]")

    if show_stats and runner.last_stats is not None:
        stats = runner.last_stats
        console.print(
            f"[dim]Candidates: {stats.candidates_found}, kept: {stats.deadlines_kept}, "
            f"dropped: {stats.candidates_dropped}[/dim]"
        )
        for matcher, hits in stats.matcher_hits.items():
            console.print(f"[dim]  {matcher}: {hits}[/dim]")
