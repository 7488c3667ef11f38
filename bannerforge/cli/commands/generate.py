"""``bannerforge generate [SIZES...]`` — create and update banners from formats.json.

Free arguments are sizes (``300x600 728x90``) and narrow the run the
same way ``--only-size`` does.
"""

from __future__ import annotations

from pathlib import Path

import typer

from bannerforge.cli.commands._common import console, fatal_errors, write_preview
from bannerforge.config import BannerSettings
from bannerforge.core.filters import parse_csv_set, parse_index_set, parse_size_list
from bannerforge.core.loader import load_config, resolve_formats_path
from bannerforge.core.reconciler import Reconciler, resolve_mode
from bannerforge.models.run import FormatFilters, RunOptions
from bannerforge.monitor.renderer import SummaryRenderer


def generate_cmd(
    sizes: list[str] | None = typer.Argument(
        None, help="Only generate these sizes, e.g. 300x600 728x90."
    ),
    formats: Path | None = typer.Option(
        None, "--formats", "--config", "-f", help="Path to formats.json."
    ),
    out_dir: Path | None = typer.Option(None, "--out-dir", help="Output directory."),
    campaign: str | None = typer.Option(None, "--campaign", help="Override the campaign name."),
    clicktag: str | None = typer.Option(None, "--clicktag", help="Override the click-through URL."),
    template: str | None = typer.Option(None, "--template", help="Override the template type."),
    zip_output: bool = typer.Option(False, "--zip", help="Zip each rendered banner."),
    zip_dir: Path | None = typer.Option(None, "--zip-dir", help="Where archives are written."),
    templates_dir: Path | None = typer.Option(
        None, "--templates-dir", help="Directory holding the template types."
    ),
    preview: bool = typer.Option(False, "--preview", help="Rebuild the preview page afterwards."),
    open_after: bool = typer.Option(False, "--open", help="Open the preview page in a browser."),
    port: int | None = typer.Option(None, "--port", help="Port used in the preview URL."),
    create_only: bool = typer.Option(False, "--create-only", help="Only create missing banners."),
    update: bool = typer.Option(False, "--update", help="Re-render existing banners, create none."),
    only_size: str | None = typer.Option(None, "--only-size", help="Comma-separated WxH sizes."),
    only_lang: str | None = typer.Option(None, "--only-lang", help="Comma-separated languages."),
    only_motive: str | None = typer.Option(None, "--only-motive", help="Comma-separated motives."),
    only_template: str | None = typer.Option(
        None, "--only-template", help="Comma-separated template types."
    ),
    only_index: str | None = typer.Option(
        None, "--only-index", help="Comma-separated positions in formats.json."
    ),
) -> None:
    """Generate banners for every format in formats.json.

    Default mode is incremental: missing banners are created, existing
    ones are re-rendered only when their format entry or assets changed.
    """
    settings = BannerSettings()

    with fatal_errors():
        mode = resolve_mode(create_only, update)
        config = load_config(resolve_formats_path(formats, settings.formats_filename))

        filters = FormatFilters(
            sizes=parse_size_list(sizes) or parse_size_list(only_size),
            languages=parse_csv_set(only_lang),
            motives=parse_csv_set(only_motive),
            templates=parse_csv_set(only_template),
            indexes=parse_index_set(only_index),
        )
        options = RunOptions(
            out_dir=out_dir or settings.out_dir,
            zip_dir=zip_dir or settings.zip_dir,
            templates_path=templates_dir or settings.templates_path,
            campaign=campaign,
            clicktag=clicktag,
            template=template,
            package=zip_output,
            mode=mode,
            filters=filters,
        )

        reconciler = Reconciler(config, options, settings=settings)
        summary = reconciler.run()
        SummaryRenderer(console=console).print_run(summary)

        if preview:
            write_preview(reconciler.source_root, port or settings.preview_port, open_after)
