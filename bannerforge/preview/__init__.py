"""Aggregate preview page for every generated banner."""

from bannerforge.preview.builder import PreviewItem, build_preview_html, generate_preview

__all__ = ["PreviewItem", "build_preview_html", "generate_preview"]
