"""Main Typer application: imports and registers all CLI commands.

Entry point: ``bannerforge`` (configured via pyproject.toml console_scripts).

Commands: generate, package, preview, templates.
"""

from __future__ import annotations

import logging
from pathlib import Path

import typer
from rich.console import Console
from rich.logging import RichHandler

from bannerforge.cli.commands.generate import generate_cmd
from bannerforge.cli.commands.package import package_cmd
from bannerforge.cli.commands.preview import preview_cmd
from bannerforge.config import BannerSettings

app = typer.Typer(
    name="bannerforge",
    help="Bannerforge: generate, package and preview HTML5 banner sets from formats.json.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=False,
)

# Register subcommands
app.command(name="generate", help="Create and update banners from formats.json.")(generate_cmd)
app.command(name="package", help="Zip already generated banners (no rendering).")(package_cmd)
app.command(name="preview", help="Rebuild the aggregate preview page.")(preview_cmd)


def configure_logging(level: str) -> None:
    """Route stdlib logging through Rich on stderr."""
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


@app.callback()
def main_callback(
    log_level: str = typer.Option(
        None, "--log-level", help="Logging level (default: BANNERFORGE_LOG_LEVEL or INFO)."
    ),
) -> None:
    """Bannerforge: HTML5 banner sets from a single formats.json."""
    configure_logging(log_level or BannerSettings().log_level)


@app.command(name="templates", help="List available template types.")
def templates_cmd(
    templates_dir: Path = typer.Option(
        None, "--templates-dir", help="Directory holding the template types."
    ),
) -> None:
    """List template types and whether they contain an entry template."""
    from rich.table import Table

    from bannerforge.core.templates import DYNAMIC_SUFFIX, ENTRY_MARKER, list_templates

    console = Console()
    root = Path(templates_dir or BannerSettings().templates_path)
    names = list_templates(root)
    if not names:
        console.print(f"[dim]No templates found in {root}.[/dim]")
        return

    table = Table(title=f"Templates in {root}")
    table.add_column("Type", style="cyan")
    table.add_column("Entry", justify="center")
    for name in names:
        has_entry = (root / name / f"{ENTRY_MARKER}{DYNAMIC_SUFFIX}").exists() or (
            root / name / ENTRY_MARKER
        ).exists()
        table.add_row(name, "[green]Yes[/green]" if has_entry else "[yellow]No[/yellow]")
    console.print(table)


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
