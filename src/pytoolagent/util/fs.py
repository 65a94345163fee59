from __future__ import annotations

import os
from pathlib import Path
from typing import Iterator

from .pathfilter import PathFilter


def resolve_path(cwd: Path, path_str: str) -> Path:
    # No containment check: tools run with the caller's full privileges.
    p = Path(path_str).expanduser()
    if not p.is_absolute():
        p = cwd / p
    return p


def read_text(path: Path) -> str:
    return path.read_text(encoding="utf-8", errors="replace")


def walk(
    root: Path,
    path_filter: PathFilter,
    *,
    skip_unreadable: bool = False,
    _prefix: str = "",
) -> Iterator[tuple[str, Path, bool]]:
    """Depth-first walk of ``root`` in name order.

    Yields ``(relative_path, absolute_path, is_dir)`` for every entry the filter
    includes. Relative paths use ``/`` separators. Directories rejected by
    ``should_skip_dir`` are neither yielded nor entered. An unreadable
    ``root`` raises ``OSError``. Unreadable subdirectories raise as well unless
    ``skip_unreadable`` is set, in which case their contents are left out.
    """
    try:
        with os.scandir(root) as it:
            entries = sorted(it, key=lambda e: e.name)
    except OSError:
        if skip_unreadable and _prefix:
            return
        raise

    for entry in entries:
        rel = f"{_prefix}{entry.name}"
        try:
            # symlinked directories are reported as entries, never followed
            is_dir = entry.is_dir(follow_symlinks=False)
        except OSError:
            is_dir = False

        if is_dir:
            if path_filter.should_skip_dir(rel):
                continue
            yield rel, Path(entry.path), True
            yield from walk(Path(entry.path), path_filter, skip_unreadable=skip_unreadable, _prefix=rel + "/")
        elif path_filter.should_include(rel, is_dir=False):
            yield rel, Path(entry.path), False
