"""``bannerforge preview`` — rebuild ``_preview.html`` for the output directory."""

from __future__ import annotations

from pathlib import Path

import typer

from bannerforge.cli.commands._common import fatal_errors, write_preview
from bannerforge.config import BannerSettings


def preview_cmd(
    out_dir: Path | None = typer.Option(None, "--out-dir", help="Output directory."),
    open_after: bool = typer.Option(False, "--open", help="Open the preview page in a browser."),
    port: int | None = typer.Option(None, "--port", help="Port used in the preview URL."),
) -> None:
    """Write a single page previewing every generated banner."""
    settings = BannerSettings()
    with fatal_errors():
        write_preview(
            Path(out_dir or settings.out_dir).resolve(),
            port or settings.preview_port,
            open_after,
        )
