"""Banner templates: resolution, one-time instantiation, and rendering.

A template is a directory under the templates root, named after its
type (``templates/standard/``). Files ending in ``.j2`` are dynamic:
they are rendered with Jinja2 into a sibling file without the suffix
on every render. Everything else is copied once, when the banner is
first created, and never touched again.
"""

from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import Any

from jinja2 import Environment

from bannerforge.core.assets import ASSETS_DIRNAME
from bannerforge.core.tree import walk_tree

logger = logging.getLogger(__name__)

ENTRY_MARKER = "index.html"
DYNAMIC_SUFFIX = ".j2"

_env = Environment(keep_trailing_newline=True, autoescape=False)


class TemplateResolutionError(RuntimeError):
    """Raised when a template type has no directory under the templates root."""


def resolve_template(template_type: str, templates_path: Path) -> Path:
    """Return the root directory for ``template_type``."""
    root = Path(templates_path) / template_type
    if not root.is_dir():
        raise TemplateResolutionError(
            f'Template "{template_type}" not found. Expected folder: {root}'
        )
    return root


def list_templates(templates_path: Path) -> list[str]:
    """Template types available under ``templates_path``."""
    path = Path(templates_path)
    if not path.is_dir():
        return []
    return sorted(p.name for p in path.iterdir() if p.is_dir())


def _inside_assets(relative: Path) -> bool:
    return ASSETS_DIRNAME in relative.parts


def instantiate(template_root: Path, destination: Path) -> list[Path]:
    """Copy a template tree into ``destination``.

    Anything inside an ``assets`` directory is left out, and files that
    already exist in ``destination`` are never overwritten. Returns the
    files that were copied.
    """
    template_root = Path(template_root)
    destination = Path(destination)
    copied: list[Path] = []

    for directory, files in walk_tree(
        template_root, stop=lambda d, _: d.name == ASSETS_DIRNAME
    ):
        relative = directory.relative_to(template_root)
        target_dir = destination / relative
        target_dir.mkdir(parents=True, exist_ok=True)
        if _inside_assets(relative):
            continue
        for src in files:
            target = target_dir / src.name
            if target.exists():
                continue
            shutil.copy2(src, target)
            copied.append(target)

    logger.debug("Instantiated %s into %s (%d file(s))", template_root, destination, len(copied))
    return copied


def render_text(source: str, variables: dict[str, Any]) -> str:
    return _env.from_string(source).render(**variables)


def render_dynamic_files(destination: Path, variables: dict[str, Any]) -> list[Path]:
    """Render every ``*.j2`` file under ``destination`` next to its source.

    Rendered outputs are overwritten; the sources stay as they are.
    """
    written: list[Path] = []
    for _, files in walk_tree(Path(destination)):
        for src in files:
            if not src.name.endswith(DYNAMIC_SUFFIX):
                continue
            target = src.with_name(src.name[: -len(DYNAMIC_SUFFIX)])
            target.write_text(
                render_text(src.read_text(encoding="utf-8"), variables),
                encoding="utf-8",
            )
            written.append(target)
    return written
