"""``bannerforge package`` — zip banners that were already generated.

Nothing is rendered. Archives are size-checked against the matching
entry in formats.json when one can be found.
"""

from __future__ import annotations

from pathlib import Path

import typer

from bannerforge.cli.commands._common import console, fatal_errors, write_preview
from bannerforge.config import BannerSettings
from bannerforge.core.loader import load_config, resolve_formats_path
from bannerforge.core.reconciler import Reconciler
from bannerforge.models.run import RunOptions
from bannerforge.monitor.renderer import SummaryRenderer


def package_cmd(
    formats: Path | None = typer.Option(
        None, "--formats", "--config", "-f", help="Path to formats.json."
    ),
    out_dir: Path | None = typer.Option(None, "--out-dir", help="Output directory."),
    campaign: str | None = typer.Option(None, "--campaign", help="Override the campaign name."),
    zip_dir: Path | None = typer.Option(None, "--zip-dir", help="Where archives are written."),
    preview: bool = typer.Option(False, "--preview", help="Rebuild the preview page afterwards."),
    open_after: bool = typer.Option(False, "--open", help="Open the preview page in a browser."),
    port: int | None = typer.Option(None, "--port", help="Port used in the preview URL."),
) -> None:
    """Zip every generated banner of the campaign without re-rendering."""
    settings = BannerSettings()

    with fatal_errors():
        config = load_config(resolve_formats_path(formats, settings.formats_filename))
        options = RunOptions(
            out_dir=out_dir or settings.out_dir,
            zip_dir=zip_dir or settings.zip_dir,
            campaign=campaign,
            package=True,
        )
        reconciler = Reconciler(config, options, settings=settings)
        summary = reconciler.package_existing()
        SummaryRenderer(console=console).print_package(summary)

        if preview:
            write_preview(reconciler.source_root, port or settings.preview_port, open_after)
