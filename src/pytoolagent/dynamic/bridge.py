from __future__ import annotations

import json
import re
from dataclasses import dataclass
from typing import Any, Callable

from .models import DynamicToolDecl, MissingParameterError, TemplateError
from ..tools.base import ToolContext, ToolResult, ToolSpec
from ..tools.builtin_tools.bash_tool import run_command_tool
from ..tools.registry import DuplicateToolError, ToolRegistry, parse_tool_input
from ..util.subprocess import clamp_timeout

# {{name}}, {{ name }} and the dotted {{.name}} form are all accepted.
_PLACEHOLDER = re.compile(r"\{\{\s*\.?([A-Za-z_][A-Za-z0-9_-]*)\s*\}\}")


def _stringify(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (int, float)):
        return str(value)
    return json.dumps(value, ensure_ascii=False)


def check_template(template: str, declared: set[str]) -> str | None:
    """Return a description of what is wrong with ``template``, or None."""
    for m in _PLACEHOLDER.finditer(template):
        if m.group(1) not in declared:
            return f"unknown placeholder {{{{{m.group(1)}}}}}"
    leftover = _PLACEHOLDER.sub("", template)
    if "{{" in leftover or "}}" in leftover:
        return "unbalanced or malformed placeholder"
    return None


def render_command(template: str, values: dict[str, str], declared: set[str]) -> str:
    """Substitute ``{{param}}`` placeholders with resolved values.

    Values are inserted verbatim: no quoting or escaping is applied, so shell
    metacharacters in a value are interpreted by the shell. Declared
    parameters that resolved to nothing render as an empty string.
    """
    problem = check_template(template, declared)
    if problem:
        raise TemplateError(f"invalid command template: {problem}")
    return _PLACEHOLDER.sub(lambda m: values.get(m.group(1), ""), template)


@dataclass
class TemplateCommandTool:
    spec: ToolSpec
    decl: DynamicToolDecl

    @staticmethod
    def from_decl(decl: DynamicToolDecl) -> "TemplateCommandTool":
        spec = ToolSpec(
            name=decl.name,
            description=decl.description,
            parameters=decl.input_schema(),
            origin="dynamic",
        )
        return TemplateCommandTool(spec=spec, decl=decl)

    def resolve(self, args: dict[str, Any]) -> dict[str, str]:
        values: dict[str, str] = {}
        for p in self.decl.parameters:
            if args.get(p.name) is not None:
                values[p.name] = _stringify(args[p.name])
            elif p.default:
                values[p.name] = p.default
            elif p.required:
                raise MissingParameterError(p.name)
        return values

    def build_command(self, args: Any) -> str:
        params = parse_tool_input(args)
        values = self.resolve(params)
        declared = {p.name for p in self.decl.parameters}
        return render_command(self.decl.command, values, declared)

    def execute(self, ctx: ToolContext, args: dict[str, Any]) -> ToolResult:
        try:
            command = self.build_command(args)
        except (MissingParameterError, TemplateError, ValueError) as e:
            return ToolResult(str(e), is_error=True)
        return run_command_tool(ctx, command, clamp_timeout(self.decl.timeout))


def register_dynamic_tools(
    registry: ToolRegistry,
    tools: list[TemplateCommandTool],
    warn: Callable[[str], None] | None = None,
) -> list[TemplateCommandTool]:
    """Register tools in order; a name already taken is skipped with a warning."""
    registered: list[TemplateCommandTool] = []
    for t in tools:
        try:
            registry.register(t)
        except DuplicateToolError as e:
            if warn:
                warn(f"Skipping dynamic tool {t.spec.name}: {e}")
            continue
        registered.append(t)
    return registered
