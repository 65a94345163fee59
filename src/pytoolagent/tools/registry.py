from __future__ import annotations
import json
from dataclasses import dataclass, field
from typing import Any, Dict

from .base import Tool, ToolContext, ToolResult, ToolSpec

TOOL_NOT_FOUND = "tool not found"

_JSON_TYPES: dict[str, tuple[type, ...]] = {
    "string": (str,),
    "boolean": (bool,),
    "integer": (int,),
    "number": (int, float),
    "array": (list,),
    "object": (dict,),
}


class DuplicateToolError(ValueError):
    pass


def parse_tool_input(raw: Any) -> dict[str, Any]:
    """Accept a JSON object either already decoded or as JSON text."""
    if raw is None:
        return {}
    if isinstance(raw, (str, bytes)):
        text = raw.decode("utf-8") if isinstance(raw, bytes) else raw
        if not text.strip():
            return {}
        try:
            raw = json.loads(text)
        except json.JSONDecodeError as e:
            raise ValueError(f"invalid input: {e}") from e
    if not isinstance(raw, dict):
        raise ValueError(f"invalid input: expected a JSON object, got {type(raw).__name__}")
    return raw


def check_args(schema: dict[str, Any], args: dict[str, Any], *, check_types: bool = True) -> str | None:
    """Shallow check of args against a JSONSchema object. Returns an error message or None."""
    for name in schema.get("required") or []:
        if args.get(name) is None:
            return f"missing required parameter: {name}"
    if not check_types:
        return None
    props = schema.get("properties") or {}
    for name, value in args.items():
        prop = props.get(name)
        if not isinstance(prop, dict) or value is None:
            continue
        expected = _JSON_TYPES.get(prop.get("type", ""))
        if expected is None:
            continue
        # bool is an int subclass; keep them apart
        if isinstance(value, bool) and bool not in expected:
            return f"invalid input: parameter {name} must be of type {prop['type']}"
        if not isinstance(value, expected):
            return f"invalid input: parameter {name} must be of type {prop['type']}"
    return None


@dataclass
class ToolRegistry:
    _tools: Dict[str, Tool] = field(default_factory=dict)

    def register(self, tool: Tool) -> None:
        name = tool.spec.name
        if name in self._tools:
            raise DuplicateToolError(f"Tool already registered: {name}")
        self._tools[name] = tool

    def get(self, name: str) -> Tool:
        if name not in self._tools:
            raise KeyError(f"Unknown tool: {name}")
        return self._tools[name]

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __len__(self) -> int:
        return len(self._tools)

    def names(self) -> list[str]:
        return list(self._tools.keys())

    def list_specs(self) -> list[ToolSpec]:
        return [t.spec for t in self._tools.values()]

    def dispatch(self, name: str, raw_input: Any, ctx: ToolContext) -> ToolResult:
        """Look up ``name`` and run it on ``raw_input``.

        Never raises for tool-level problems: an unknown name, unparseable
        input, a schema mismatch or an exception escaping the tool all come
        back as an error-flagged ToolResult so the model can react.
        """
        tool = self._tools.get(name)
        if tool is None:
            return ToolResult(TOOL_NOT_FOUND, is_error=True)

        try:
            args = parse_tool_input(raw_input)
        except ValueError as e:
            return ToolResult(str(e), is_error=True)

        # dynamic tools render any JSON value into their command line
        problem = check_args(tool.spec.parameters, args, check_types=tool.spec.origin != "dynamic")
        if problem:
            return ToolResult(problem, is_error=True)

        try:
            return tool.execute(ctx, args)
        except Exception as e:
            return ToolResult(f"Tool {name} exception: {e}", is_error=True)
