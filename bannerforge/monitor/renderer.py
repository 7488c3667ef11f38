"""Rich terminal renderer for run summaries.

Color scheme
------------
- green   : created / size ok
- cyan    : updated
- dim     : skipped / no budget
- red     : oversize
"""

from __future__ import annotations

from rich.console import Console, Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from bannerforge.core.size_guard import format_kb
from bannerforge.models.run import (
    FormatOutcome,
    PackageSummary,
    RunMode,
    RunSummary,
    SizeCheckResult,
    SizeCheckStatus,
)

_OUTCOME_STYLES: dict[FormatOutcome, str] = {
    FormatOutcome.CREATED: "[green]created[/green]",
    FormatOutcome.UPDATED: "[cyan]updated[/cyan]",
    FormatOutcome.SKIPPED: "[dim]skipped[/dim]",
}


def _size_cell(check: SizeCheckResult | None) -> str:
    if check is None:
        return "[dim]-[/dim]"
    if check.status == SizeCheckStatus.SKIPPED:
        return "[dim]no budget[/dim]"
    sizes = f"{format_kb(check.actual_bytes)} / {format_kb(check.budget_bytes)}"
    if check.status == SizeCheckStatus.PASSED:
        return f"[green]{sizes}[/green]"
    return f"[bold red]{sizes} OVERSIZE[/bold red]"


class SummaryRenderer:
    """Renders ``RunSummary`` and ``PackageSummary`` as Rich output.

    Parameters
    ----------
    console:
        Rich Console instance.  A new one is created if not provided.
    """

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()

    def _counts_line(self, summary: RunSummary) -> str:
        if summary.mode == RunMode.CREATE_ONLY:
            counts = f"Created: {summary.created} | Skipped existing: {summary.skipped}"
        elif summary.mode == RunMode.UPDATE:
            counts = f"Updated: {summary.updated} | Skipped missing: {summary.skipped}"
        else:
            counts = (
                f"Incremental: created {summary.created}, "
                f"updated {summary.updated}, skipped {summary.skipped}"
            )
        return f"[bold]Processed:[/bold] {summary.processed}  |  {counts}"

    def render_run(self, summary: RunSummary) -> Panel:
        table = Table(show_header=True, header_style="bold cyan", expand=True)
        table.add_column("#", style="dim", width=4, justify="right")
        table.add_column("Banner", min_width=20)
        table.add_column("Result", justify="center")
        table.add_column("ZIP size", justify="right")

        for result in summary.results:
            table.add_row(
                str(result.index),
                result.label,
                _OUTCOME_STYLES[result.outcome],
                _size_cell(result.size_check),
            )

        lines = [self._counts_line(summary)]
        if summary.filtered_out:
            lines.append(f"[bold]Filtered out:[/bold] {summary.filtered_out}")
        lines.append(f"[bold]Output:[/bold] {summary.out_root}")
        if summary.zip_root is not None:
            lines.append(f"[bold]Zipped to:[/bold] {summary.zip_root}")
        for warning in summary.warnings:
            lines.append(f"[yellow]Oversize: {warning.message}[/yellow]")

        return Panel(
            Group(table, Text(""), Text.from_markup("\n".join(lines))),
            title=f"[bold]{summary.campaign}[/bold] ({summary.mode.value})",
            border_style="yellow" if summary.warnings else "green",
            padding=(1, 2),
        )

    def render_package(self, summary: PackageSummary) -> Panel:
        table = Table(show_header=True, header_style="bold cyan", expand=True)
        table.add_column("Archive", min_width=24)
        table.add_column("ZIP size", justify="right")

        checks = {c.archive_path: c for c in summary.size_checks}
        for archive in summary.archives:
            table.add_row(archive.name, _size_cell(checks.get(archive)))

        lines = [f"[bold]Zipped:[/bold] {len(summary.archives)} banner(s) to {summary.zip_root}"]
        for warning in summary.warnings:
            lines.append(f"[yellow]Oversize: {warning.message}[/yellow]")

        return Panel(
            Group(table, Text(""), Text.from_markup("\n".join(lines))),
            title=f"[bold]{summary.campaign}[/bold] (package)",
            border_style="yellow" if summary.warnings else "green",
            padding=(1, 2),
        )

    def print_run(self, summary: RunSummary) -> None:
        self.console.print(self.render_run(summary))

    def print_package(self, summary: PackageSummary) -> None:
        self.console.print(self.render_package(summary))
