"""Bannerforge CLI — Typer-based command-line interface.

Provides the ``bannerforge`` command with subcommands for generating
banners, packaging existing banners, building the preview page and
listing templates.

All output uses Rich for formatted terminal display.
"""
