"""Helpers shared by CLI commands."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

import jinja2
import typer
from rich.console import Console

from bannerforge.core.loader import ConfigurationError
from bannerforge.core.templates import TemplateResolutionError
from bannerforge.preview.builder import generate_preview

logger = logging.getLogger(__name__)

console = Console()


@contextmanager
def fatal_errors() -> Iterator[None]:
    """Turn fatal run errors into a logged message and exit status 1."""
    try:
        yield
    except (ConfigurationError, TemplateResolutionError) as exc:
        logger.error("%s", exc)
        console.print(f"[bold red]Error:[/bold red] {exc}")
        raise typer.Exit(code=1)
    except jinja2.TemplateError as exc:
        logger.error("Template rendering failed: %s", exc)
        console.print(f"[bold red]Template error:[/bold red] {exc}")
        raise typer.Exit(code=1)
    except UnicodeDecodeError as exc:
        logger.error("File is not valid UTF-8: %s", exc)
        console.print(f"[bold red]Encoding error:[/bold red] {exc}")
        raise typer.Exit(code=1)
    except OSError as exc:
        logger.exception("Filesystem error")
        console.print(f"[bold red]Filesystem error:[/bold red] {exc}")
        raise typer.Exit(code=1)


def write_preview(source_root: Path, port: int, open_after: bool) -> None:
    path, url = generate_preview(source_root, port=port)
    console.print(f"[bold]Preview page updated:[/bold] {path}")
    console.print(f"[bold]Open:[/bold] {url}")
    if open_after:
        typer.launch(url)
