
from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterator
import re

from ..base import ToolSpec, ToolResult, ToolContext
from .listdir import FILTER_PROPERTIES
from ...util.fs import resolve_path, walk
from ...util.pathfilter import PathFilter

NO_MATCHES = "No matches found."

def _lines(data: bytes) -> Iterator[str]:
    text = data.decode("utf-8", errors="replace")
    lines = text.split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    for line in lines:
        yield line[:-1] if line.endswith("\r") else line

@dataclass
class GrepTool:
    spec: ToolSpec = ToolSpec(
        name="grep",
        description=(
            "Search for a regular expression pattern in files. Returns matching lines as "
            "file:line:content. By default excludes .git directory, hidden files, and common "
            "directories like node_modules. Use include_git, include_hidden, and exclude parameters "
            "to customize filtering."
        ),
        parameters={
            "type": "object",
            "properties": {
                "pattern": {"type": "string", "description": "The regular expression pattern to search for in files"},
                "path": {
                    "type": "string",
                    "description": "Optional relative path to search in. Defaults to current directory if not provided",
                },
                **FILTER_PROPERTIES,
            },
            "required": ["pattern"],
        },
    )

    def execute(self, ctx: ToolContext, args: dict[str, Any]) -> ToolResult:
        pattern = args["pattern"]
        path = args.get("path") or "."
        if not pattern:
            return ToolResult("pattern cannot be empty", is_error=True)

        try:
            rx = re.compile(pattern)
        except re.error as e:
            return ToolResult(f"invalid regular expression: {e}", is_error=True)

        target = resolve_path(Path(ctx.cwd), path)
        if not target.exists():
            return ToolResult(f"Path not found: {path}", is_error=True)

        if target.is_file():
            candidates = [(target.name, target)]
        else:
            path_filter = PathFilter.from_args(args)
            try:
                candidates = [
                    (rel, p) for rel, p, is_dir in walk(target, path_filter, skip_unreadable=True) if not is_dir
                ]
            except OSError as e:
                return ToolResult(f"Failed to search {path}: {e}", is_error=True)

        out_lines: list[str] = []
        for rel, f in candidates:
            try:
                data = f.read_bytes()
            except OSError:
                continue
            # binary heuristic
            if data[:1] == b"\x00":
                continue
            for i, line in enumerate(_lines(data), start=1):
                if rx.search(line):
                    out_lines.append(f"{rel}:{i}:{line}")

        return ToolResult("\n".join(out_lines) if out_lines else NO_MATCHES)
