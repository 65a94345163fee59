from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Protocol

@dataclass(frozen=True)
class ToolSpec:
    name: str
    description: str
    parameters: dict[str, Any]   # JSONSchema object
    origin: str = "builtin"      # "builtin" | "dynamic"

    def to_wire(self) -> dict[str, Any]:
        return {"name": self.name, "description": self.description, "input_schema": self.parameters}

class Tool(Protocol):
    """Anything with a spec that turns structured input into a ToolResult.

    Built-in tools and config-driven command tools both satisfy this.
    """
    spec: ToolSpec
    def execute(self, ctx: "ToolContext", args: dict[str, Any]) -> "ToolResult": ...

@dataclass(frozen=True)
class ToolResult:
    content: str
    is_error: bool = False

@dataclass
class ToolContext:
    cwd: str
