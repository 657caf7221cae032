"""
Helpers shared by CLI commands.
"""

from __future__ import annotations

import json
from datetime import date
from pathlib import Path
from typing import Iterable, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from syllabuswatch.core.config import AppConfig, ConfigError, load_app_config
from syllabuswatch.core.logging import setup_logging
from syllabuswatch.core.normalize.canonical import Deadline

console = Console()
err_console = Console(stderr=True)

TYPE_STYLES = {
    "assignment": "green",
    "quiz": "yellow",
    "exam": "red",
}


def load_config(path: Optional[Path]) -> AppConfig:
    """Load app config and set up logging, exiting on config errors."""
    try:
        config = load_app_config(path)
    except ConfigError as e:
        err_console.print(f"[red]Error loading config:[/red] {escape(str(e))}")
        if e.details:
            err_console.print(f"[dim]{escape(e.details)}[/dim]")
        raise typer.Exit(1)

    setup_logging(
        level=config.logging.level,
        log_file=config.logging.file,
        json_format=config.logging.json_format,
        rich_console=config.logging.rich_console,
    )
    return config


def parse_now(value: Optional[str]) -> date:
    """Resolution date from --now (YYYY-MM-DD), defaulting to today."""
    if not value:
        return date.today()
    try:
        return date.fromisoformat(value)
    except ValueError:
        err_console.print(f"[red]Invalid --now date:[/red] {escape(value)} (expected YYYY-MM-DD)")
        raise typer.Exit(1)


def read_source(path: Path) -> str:
    """Read document text, exiting if the file is unreadable."""
    try:
        return path.read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        err_console.print(f"[red]Cannot read {escape(str(path))}:[/red] {escape(str(e))}")
        raise typer.Exit(1)


def deadlines_table(deadlines: Iterable[Deadline], title: str = "Deadlines") -> Table:
    """Render deadlines as a Rich table."""
    table = Table(title=title, show_header=True, header_style="bold magenta")
    table.add_column("Due", style="cyan", no_wrap=True)
    table.add_column("Type", justify="center")
    table.add_column("Title")
    table.add_column("Confidence", justify="right")

    for deadline in deadlines:
        style = TYPE_STYLES.get(deadline.type.value, "default")
        table.add_row(
            deadline.due_date.isoformat() if deadline.due_date else "-",
            f"[{style}]{deadline.type.value}[/{style}]",
            escape(deadline.title),
            f"{deadline.confidence:.1f}",
        )

    return table


def print_json(data: object) -> None:
    console.print_json(json.dumps(data, ensure_ascii=False))
