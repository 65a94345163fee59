from __future__ import annotations
import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from ..base import ToolSpec, ToolResult, ToolContext
from ...util.fs import resolve_path, walk
from ...util.pathfilter import PathFilter

FILTER_PROPERTIES: dict[str, Any] = {
    "include_git": {
        "type": "boolean",
        "description": "Set to true to include the .git directory. Defaults to false.",
    },
    "include_hidden": {
        "type": "boolean",
        "description": "Set to true to include hidden files and directories (starting with .). Defaults to false.",
    },
    "exclude": {
        "type": "array",
        "items": {"type": "string"},
        "description": (
            "Optional list of file or directory names to exclude. Replaces the default "
            "exclude list (node_modules, vendor, dist, build, .venv, __pycache__)."
        ),
    },
}

@dataclass
class ListFilesTool:
    spec: ToolSpec = ToolSpec(
        name="list_files",
        description=(
            "List files and directories at a given path. If no path is provided, lists files in the "
            "current directory. By default excludes .git directory, hidden files, and common "
            "directories like node_modules. Use include_git, include_hidden, and exclude parameters "
            "to customize filtering."
        ),
        parameters={
            "type": "object",
            "properties": {
                "path": {
                    "type": "string",
                    "description": "Optional relative path to list files from. Defaults to current directory if not provided.",
                },
                **FILTER_PROPERTIES,
            },
            "required": [],
        },
    )

    def execute(self, ctx: ToolContext, args: dict[str, Any]) -> ToolResult:
        path = args.get("path") or "."
        root = resolve_path(Path(ctx.cwd), path)
        if not root.exists():
            return ToolResult(f"Path not found: {path}", is_error=True)
        if not root.is_dir():
            return ToolResult(f"Not a directory: {path}", is_error=True)

        path_filter = PathFilter.from_args(args)
        entries: list[str] = []
        try:
            for rel, _, is_dir in walk(root, path_filter):
                entries.append(rel + "/" if is_dir else rel)
        except OSError as e:
            return ToolResult(f"Failed to list {path}: {e}", is_error=True)

        return ToolResult(json.dumps(entries, ensure_ascii=False))
