from __future__ import annotations
from dataclasses import dataclass
from typing import Any

from ..base import ToolSpec, ToolResult, ToolContext
from ...util.subprocess import CommandError, clamp_timeout, run_shell


def run_command_tool(ctx: ToolContext, command: str, timeout: Any) -> ToolResult:
    """Shared execution path for the execute tool and config-defined command tools."""
    if not command.strip():
        return ToolResult("command cannot be empty", is_error=True)
    try:
        res = run_shell(command, cwd=ctx.cwd, timeout=clamp_timeout(timeout))
    except CommandError as e:
        return ToolResult(str(e), is_error=True)
    # a non-zero exit code is data for the caller, not a tool failure
    return ToolResult(res.to_json())

@dataclass
class ExecuteTool:
    spec: ToolSpec = ToolSpec(
        name="execute",
        description=(
            "Execute a shell command and return its output. The command is executed in a bash shell "
            "on Unix-like systems and cmd on Windows. Has a configurable timeout (default 30 seconds, "
            "max 5 minutes). Returns stdout, stderr, and exit code."
        ),
        parameters={
            "type": "object",
            "properties": {
                "command": {
                    "type": "string",
                    "description": "The shell command to execute (bash on Unix/Linux/macOS, cmd on Windows)",
                },
                "timeout": {
                    "type": "integer",
                    "description": "Optional timeout in seconds. Default is 30 seconds. Maximum is 300 seconds (5 minutes).",
                },
            },
            "required": ["command"],
        },
    )

    def execute(self, ctx: ToolContext, args: dict[str, Any]) -> ToolResult:
        return run_command_tool(ctx, args.get("command") or "", args.get("timeout"))
