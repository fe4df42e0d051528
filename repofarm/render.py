"""
Rendering functions for repofarm output.

This module handles all pretty-printing and table formatting.
Services return data, this module makes it human-readable.
"""

from typing import Optional

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .domain.configuration import Configuration
from .domain.operation import RunResult

console = Console()
err_console = Console(stderr=True)


def render_summary(result: RunResult, title: Optional[str] = None,
                   target: Optional[Console] = None) -> None:
    """
    Render the outcome of a run: counts, then every failure and skip.

    Printed even in quiet mode, so a failed item is never silent.

    Args:
        result: Finished run
        title: Table title (defaults to the operation name)
        target: Console to print to (stderr by default)
    """
    out = target or err_console
    mode = "DRY RUN " if result.dry_run else ""
    title = title or f"{result.operation.capitalize()} Summary"

    table = Table(title=f"{mode}{title}", box=box.ROUNDED, show_header=True,
                  header_style="bold magenta")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")

    table.add_row("Total", str(result.total))
    table.add_row("Successful", f"[green]{result.successful}[/green]")
    if result.skipped > 0:
        table.add_row("Skipped", f"[yellow]{result.skipped}[/yellow]")
    if result.failed > 0:
        table.add_row("Failed", f"[red]{result.failed}[/red]")

    out.print(table)

    skips = result.skips
    if skips:
        out.print(f"\n[yellow]Skipped ({len(skips)}):[/yellow]")
        for detail in skips:
            out.print(f"  [yellow]•[/yellow] {escape(detail.label)}: {escape(detail.message or detail.action)}",
                      highlight=False)

    failures = result.failures
    if failures:
        out.print(f"\n[red]Failed ({len(failures)}):[/red]")
        for detail in failures:
            reason = (detail.error or "").strip().splitlines()
            out.print(f"  [red]•[/red] {escape(detail.label)}: {escape(reason[-1] if reason else detail.action)}",
                      highlight=False)

    if result.interrupted:
        out.print("\n[bold yellow]Interrupted:[/bold yellow] remaining items were not started")


def render_config_table(config: Configuration, target: Optional[Console] = None) -> None:
    """
    Render every category with its repositories and links.

    Args:
        config: Loaded configuration
        target: Console to print to (stdout by default)
    """
    out = target or console

    if not config.categories and not config.links:
        out.print("[yellow]No categories configured.[/yellow]")
        return

    table = Table(
        title="Repositories",
        box=box.ROUNDED,
        show_header=True,
        header_style="bold magenta"
    )
    table.add_column("Category", style="cyan")
    table.add_column("Name", style="bold")
    table.add_column("Kind")
    table.add_column("Path", style="dim")
    table.add_column("Flags", style="green")
    table.add_column("URL", style="blue")

    for category in config.categories.values():
        for key in category.repo_keys:
            entry = config.store.get(key)
            if entry is None:
                table.add_row(category.name, key, "[red]missing[/red]", "", "", "")
                continue
            working_dir = entry.working_dir
            table.add_row(
                category.name,
                entry.name,
                entry.kind.value,
                str(working_dir) if working_dir is not None else "-",
                ", ".join(sorted(f.value for f in entry.flags)) or "-",
                entry.url or "-",
            )
        for link in category.links:
            table.add_row(category.name, link.label, "link", str(link.target_path), "-", str(link.source_path))

    for link in config.links:
        table.add_row("global", link.label, "link", str(link.target_path), "-", str(link.source_path))

    out.print(table)

