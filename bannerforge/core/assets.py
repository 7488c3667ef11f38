"""Enumerate the static assets of a banner artifact."""

from __future__ import annotations

import re
from pathlib import Path

from bannerforge.models.state import AssetDescriptor

ASSETS_DIRNAME = "assets"

_IMAGE_SUFFIX = re.compile(r"\.(png|jpe?g|gif|webp|svg)$", re.IGNORECASE)
# Double-resolution companions (logo@2x.png) travel with their base image.
_RETINA_SUFFIX = re.compile(r"@2x\.", re.IGNORECASE)


def scan_assets(artifact_dir: Path) -> list[AssetDescriptor]:
    """Image assets in ``<artifact_dir>/assets``, sorted by filename."""
    assets_dir = Path(artifact_dir) / ASSETS_DIRNAME
    if not assets_dir.is_dir():
        return []

    names = sorted(
        p.name
        for p in assets_dir.iterdir()
        if p.is_file()
        and _IMAGE_SUFFIX.search(p.name)
        and not _RETINA_SUFFIX.search(p.name)
    )
    return [AssetDescriptor(id=Path(name).stem, file=name) for name in names]
