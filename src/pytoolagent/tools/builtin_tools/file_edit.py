
from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from ..base import ToolSpec, ToolResult, ToolContext
from ...util.fs import resolve_path

@dataclass
class EditFileTool:
    spec: ToolSpec = ToolSpec(
        name="edit_file",
        description=(
            "Make edits to a text file.\n\n"
            "Replaces every occurrence of 'old_str' with 'new_str' in the given file. "
            "'old_str' and 'new_str' MUST be different from each other.\n\n"
            "If the file specified with path doesn't exist and 'old_str' is empty, it will be created "
            "with 'new_str' as its content."
        ),
        parameters={
            "type": "object",
            "properties": {
                "path": {"type": "string", "description": "The path to the file"},
                "old_str": {"type": "string", "description": "Text to search for - must match exactly"},
                "new_str": {"type": "string", "description": "Text to replace old_str with"},
            },
            "required": ["path", "old_str", "new_str"],
        },
    )

    def execute(self, ctx: ToolContext, args: dict[str, Any]) -> ToolResult:
        path = args["path"]
        old_str = args["old_str"]
        new_str = args["new_str"]

        if not path or old_str == new_str:
            return ToolResult("invalid input parameters: path is required and old_str must differ from new_str", is_error=True)

        p = resolve_path(Path(ctx.cwd), path)
        if p.is_dir():
            return ToolResult(f"Is a directory: {path}", is_error=True)

        if not p.exists():
            if old_str:
                return ToolResult(f"File not found: {path}", is_error=True)
            return self._create(p, path, new_str)

        # Bytes in and out so line endings and encoding survive untouched.
        raw = p.read_bytes()
        if not old_str:
            # an empty existing file may be filled; anything else would be overwritten
            if raw:
                return ToolResult("old_str must not be empty when editing an existing file", is_error=True)
            p.write_bytes(new_str.encode("utf-8"))
            return ToolResult("OK")

        old_b = old_str.encode("utf-8")
        if old_b not in raw:
            return ToolResult("old_str not found in file", is_error=True)

        p.write_bytes(raw.replace(old_b, new_str.encode("utf-8")))
        return ToolResult("OK")

    @staticmethod
    def _create(p: Path, path: str, content: str) -> ToolResult:
        try:
            p.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            return ToolResult(f"failed to create directory: {e}", is_error=True)
        try:
            p.write_bytes(content.encode("utf-8"))
        except OSError as e:
            return ToolResult(f"failed to create file: {e}", is_error=True)
        return ToolResult(f"Successfully created file {path}")
