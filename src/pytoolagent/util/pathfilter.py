from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Any, Iterable

# Common dependency / build output directories that are rarely worth walking.
DEFAULT_EXCLUDES: frozenset[str] = frozenset({
    "node_modules",
    "vendor",
    "dist",
    "build",
    ".venv",
    "__pycache__",
})


def _segments(rel_path: str) -> list[str]:
    norm = rel_path.replace(os.sep, "/") if os.sep != "/" else rel_path
    return [s for s in norm.split("/") if s]


@dataclass(frozen=True)
class PathFilter:
    """Decides which entries a directory traversal visits and reports.

    Decisions depend only on the relative path, whether it is a directory and
    the filter's own fields. Rules are checked in order, first match wins:

    1. ``.git`` (as base name or any path segment) unless ``include_git``
    2. hidden entries (base name starting with ``.``) unless ``include_hidden``
    3. any exclude name, matched against the base name or any path segment
    """

    include_git: bool = False
    include_hidden: bool = False
    excludes: frozenset[str] = field(default_factory=lambda: DEFAULT_EXCLUDES)

    @staticmethod
    def from_args(args: dict[str, Any]) -> "PathFilter":
        """Build a filter from tool arguments (include_git/include_hidden/exclude).

        A missing or null ``exclude`` keeps the default exclude set; an explicit
        list (even an empty one) replaces it.
        """
        exclude = args.get("exclude")
        if exclude is None:
            excludes: Iterable[str] = DEFAULT_EXCLUDES
        else:
            excludes = (str(x) for x in exclude if str(x))
        return PathFilter(
            include_git=bool(args.get("include_git", False)),
            include_hidden=bool(args.get("include_hidden", False)),
            excludes=frozenset(excludes),
        )

    def should_include(self, rel_path: str, is_dir: bool = False) -> bool:
        parts = _segments(rel_path)
        if not parts:
            return True
        base = parts[-1]

        if not self.include_git and ".git" in parts:
            return False

        if not self.include_hidden and base.startswith(".") and base != ".":
            return False

        for name in self.excludes:
            if name in parts:
                return False

        return True

    def should_skip_dir(self, rel_path: str) -> bool:
        # Evaluated before descending so excluded subtrees are never entered.
        return not self.should_include(rel_path, is_dir=True)
