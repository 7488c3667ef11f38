"""Depth-first directory walk shared by template copying, rendering and discovery.

The walk yields every visited directory with its files; a ``stop``
predicate decides per directory whether to descend further.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from pathlib import Path

StopPredicate = Callable[[Path, list[Path]], bool]


def _never(directory: Path, files: list[Path]) -> bool:
    return False


def walk_tree(
    root: Path, stop: StopPredicate = _never
) -> Iterator[tuple[Path, list[Path]]]:
    """Yield ``(directory, files)`` for ``root`` and its subdirectories.

    Entries are visited in sorted name order. Subdirectories of a
    directory for which ``stop(directory, files)`` is true are not
    visited. A missing ``root`` yields nothing.
    """
    root = Path(root)
    if not root.is_dir():
        return

    entries = sorted(root.iterdir(), key=lambda p: p.name)
    files = [p for p in entries if p.is_file()]
    yield root, files

    if stop(root, files):
        return
    for entry in entries:
        if entry.is_dir():
            yield from walk_tree(entry, stop)


def find_marked_dirs(root: Path, marker: str, *, include_root: bool = False) -> list[Path]:
    """Directories under ``root`` holding ``marker``, without descending into them.

    Used to discover generated banners: the first directory on each
    branch that holds the entry file is a banner; nothing below it is.
    """
    root = Path(root)

    def _is_marked(directory: Path, files: list[Path]) -> bool:
        if directory == root and not include_root:
            return False
        return any(f.name == marker for f in files)

    return [d for d, files in walk_tree(root, _is_marked) if _is_marked(d, files)]
