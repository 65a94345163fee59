from __future__ import annotations
import math
from dataclasses import dataclass, field
from typing import Any

from ..util.subprocess import DEFAULT_TIMEOUT


class DynamicToolError(RuntimeError):
    pass


class MissingParameterError(DynamicToolError):
    def __init__(self, name: str):
        super().__init__(f"missing required parameter: {name}")
        self.name = name


class TemplateError(DynamicToolError):
    pass


class DynamicToolConfigError(DynamicToolError):
    """The configuration document as a whole could not be read or parsed."""


@dataclass(frozen=True)
class ToolParameter:
    name: str
    description: str = ""
    required: bool = False
    default: str = ""

    @staticmethod
    def from_obj(obj: Any) -> "ToolParameter | None":
        if not isinstance(obj, dict):
            return None
        name = obj.get("name")
        if not isinstance(name, str) or not name.strip():
            return None
        desc = obj.get("description", "")
        default = obj.get("default", "")
        return ToolParameter(
            name=name.strip(),
            description=desc if isinstance(desc, str) else "",
            required=bool(obj.get("required", False)),
            default="" if default is None else str(default),
        )


@dataclass(frozen=True)
class DynamicToolDecl:
    name: str
    description: str = ""
    command: str = ""
    timeout: int = DEFAULT_TIMEOUT
    parameters: tuple[ToolParameter, ...] = field(default_factory=tuple)

    @staticmethod
    def from_obj(obj: Any) -> "DynamicToolDecl":
        """Parse one declaration. Raises DynamicToolError when it is unusable."""
        if not isinstance(obj, dict):
            raise DynamicToolError("tool declaration must be an object")
        name = obj.get("name")
        if not isinstance(name, str) or not name.strip():
            raise DynamicToolError("tool declaration is missing a name")
        command = obj.get("command")
        if not isinstance(command, str) or not command.strip():
            raise DynamicToolError(f"tool {name} is missing a command")
        desc = obj.get("description", "")
        timeout = obj.get("timeout", DEFAULT_TIMEOUT)
        if isinstance(timeout, bool) or not isinstance(timeout, (int, float)) or not math.isfinite(timeout):
            timeout = DEFAULT_TIMEOUT

        params: list[ToolParameter] = []
        raw_params = obj.get("parameters") or []
        if not isinstance(raw_params, list):
            raise DynamicToolError(f"tool {name}: parameters must be a list")
        for it in raw_params:
            p = ToolParameter.from_obj(it)
            if p is None:
                raise DynamicToolError(f"tool {name}: invalid parameter declaration {it!r}")
            params.append(p)

        return DynamicToolDecl(
            name=name.strip(),
            description=desc if isinstance(desc, str) else "",
            command=command,
            timeout=int(timeout),
            parameters=tuple(params),
        )

    def input_schema(self) -> dict[str, Any]:
        # Every parameter is a plain string on purpose.
        props = {p.name: {"type": "string", "description": p.description} for p in self.parameters}
        required = [p.name for p in self.parameters if p.required and not p.default]
        return {"type": "object", "properties": props, "required": required}


@dataclass
class DynamicToolConfig:
    tools: list[Any] = field(default_factory=list)  # raw declarations, parsed one by one

    @staticmethod
    def from_obj(obj: Any) -> "DynamicToolConfig":
        if not isinstance(obj, dict):
            raise DynamicToolConfigError("tools config must be a JSON object")
        tools = obj.get("tools", [])
        if not isinstance(tools, list):
            raise DynamicToolConfigError("'tools' must be a list")
        return DynamicToolConfig(tools=list(tools))
