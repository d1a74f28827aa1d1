"""Package tree helper utilities."""

from __future__ import annotations

from pathlib import Path
from typing import Iterator, List

VCS_DIRECTORIES = frozenset({".git", ".svn", ".hg", ".bzr", "_darcs", "CVS"})


def is_vcs_path(path: Path, root: Path) -> bool:
    """Return True when any component of ``path`` below ``root`` is VCS metadata."""

    return any(part in VCS_DIRECTORIES for part in path.relative_to(root).parts)


def iter_package_files(root: Path, pattern: str = "*") -> Iterator[Path]:
    """Yield files beneath ``root`` matching ``pattern``, sorted by relative path.

    Hidden files are included, version-control metadata is not.
    """

    found: List[Path] = []
    for path in root.rglob(pattern):
        if is_vcs_path(path, root):
            continue
        if path.is_dir():
            continue
        found.append(path)
    yield from sorted(found, key=lambda item: item.relative_to(root).as_posix())
