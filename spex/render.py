"""
Rendering functions for spex output.

Services return data, this module makes it human-readable.
"""

from datetime import datetime
from typing import List, Optional

from rich import box
from rich.console import Console
from rich.table import Table

from .domain.catalog import CatalogEntry
from .services.validation_service import ValidationResult

console = Console()


def format_updated(epoch_seconds: int) -> str:
    """Human date for a catalog ``updated`` value; 0 means unknown."""
    if not epoch_seconds:
        return "-"
    return datetime.fromtimestamp(epoch_seconds).strftime('%Y-%m-%d %H:%M')


def render_catalog_table(entries: List[CatalogEntry], title: Optional[str] = None,
                         target: Optional[Console] = None) -> None:
    """
    Render catalog entries as a numbered table.

    Numbers start at 1 and follow the order of ``entries``, so a user's
    choice maps straight back to ``entries[choice - 1]``.
    """
    out = target or console
    if not entries:
        out.print("[yellow]No packages available.[/yellow]")
        return

    table = Table(
        title=title,
        box=box.ROUNDED,
        show_header=True,
        header_style="bold magenta"
    )

    table.add_column("#", justify="right", style="bold")
    table.add_column("Name", style="cyan")
    table.add_column("Package", style="dim")
    table.add_column("Updated", style="green")

    for number, entry in enumerate(entries, start=1):
        table.add_row(str(number), entry.name, entry.id, format_updated(entry.updated))

    out.print(table)


def render_validation_table(result: ValidationResult, target: Optional[Console] = None) -> None:
    """Render the validated specification types of a project."""
    out = target or console

    table = Table(
        title="Spex Structure",
        box=box.ROUNDED,
        show_header=True,
        header_style="bold magenta"
    )
    table.add_column("Type", style="cyan")
    table.add_column("Markdown files", justify="right", style="green")
    table.add_column("Path", style="dim")

    for validated in result.validated_types:
        table.add_row(validated.type, str(validated.markdown_file_count), validated.path)

    out.print(table)
