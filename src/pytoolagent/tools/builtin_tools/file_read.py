
from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from ..base import ToolSpec, ToolResult, ToolContext
from ...util.fs import resolve_path, read_text

@dataclass
class ReadFileTool:
    spec: ToolSpec = ToolSpec(
        name="read_file",
        description=(
            "Read the contents of a given relative file path. Use this when you want to see "
            "what's inside a file. Do not use this with directory names."
        ),
        parameters={
            "type": "object",
            "properties": {
                "path": {"type": "string", "description": "The relative path of a file in the working directory."},
            },
            "required": ["path"],
        },
    )

    def execute(self, ctx: ToolContext, args: dict[str, Any]) -> ToolResult:
        path = args["path"]
        p = resolve_path(Path(ctx.cwd), path)
        if p.is_dir():
            return ToolResult(f"Is a directory: {path}", is_error=True)
        if not p.exists():
            return ToolResult(f"File not found: {path}", is_error=True)
        try:
            return ToolResult(read_text(p))
        except OSError as e:
            return ToolResult(f"Failed to read {path}: {e}", is_error=True)
