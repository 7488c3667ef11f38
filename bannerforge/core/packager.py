"""Zip a finished banner directory into a deployable archive.

Only rendered output is packaged: template sources, OS metadata and the
generation-state record stay behind.
"""

from __future__ import annotations

import fnmatch
import logging
import re
import zipfile
from pathlib import Path

from bannerforge.core.state_store import STATE_FILENAME
from bannerforge.core.templates import DYNAMIC_SUFFIX
from bannerforge.core.tree import walk_tree

logger = logging.getLogger(__name__)

EXCLUDE_PATTERNS: tuple[str, ...] = (
    f"*{DYNAMIC_SUFFIX}",
    ".DS_Store",
    "Thumbs.db",
    STATE_FILENAME,
)


def archive_name(*parts: str | None) -> str:
    """``("spring", "en", None, "300x250")`` -> ``spring_en_300x250.zip``.

    Empty parts are dropped, whitespace becomes ``_`` and anything
    outside ``[\\w.-]`` is replaced with ``_``.
    """
    name = "_".join(str(p) for p in parts if p)
    name = re.sub(r"\s+", "_", name)
    name = re.sub(r"[^\w.-]+", "_", name)
    return f"{name}.zip"


def is_excluded(name: str, patterns: tuple[str, ...] = EXCLUDE_PATTERNS) -> bool:
    return any(fnmatch.fnmatch(name, pattern) for pattern in patterns)


def package(
    source_dir: Path,
    archive_path: Path,
    exclude: tuple[str, ...] = EXCLUDE_PATTERNS,
) -> Path:
    """Write ``source_dir`` to ``archive_path`` at maximum compression.

    Archive members are relative to ``source_dir``. Returns the path of
    the written archive.
    """
    source_dir = Path(source_dir)
    archive_path = Path(archive_path)
    archive_path.parent.mkdir(parents=True, exist_ok=True)

    count = 0
    with zipfile.ZipFile(
        archive_path, "w", compression=zipfile.ZIP_DEFLATED, compresslevel=9
    ) as zf:
        for _, files in walk_tree(source_dir):
            for path in files:
                if is_excluded(path.name, exclude):
                    continue
                zf.write(path, path.relative_to(source_dir).as_posix())
                count += 1

    logger.debug("Packaged %d file(s) from %s into %s", count, source_dir, archive_path)
    return archive_path
