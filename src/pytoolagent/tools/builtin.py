from __future__ import annotations

from .registry import ToolRegistry

from .builtin_tools.file_read import ReadFileTool
from .builtin_tools.listdir import ListFilesTool
from .builtin_tools.file_edit import EditFileTool
from .builtin_tools.grep_tool import GrepTool
from .builtin_tools.bash_tool import ExecuteTool

def builtin_tools() -> list:
    return [ReadFileTool(), ListFilesTool(), EditFileTool(), GrepTool(), ExecuteTool()]

def register_builtin_tools(registry: ToolRegistry) -> None:
    for tool in builtin_tools():
        registry.register(tool)
