from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Optional

from rich.console import Console
from rich.markup import escape

from .dynamic.bridge import register_dynamic_tools
from .dynamic.loader import find_tools_config, load_dynamic_tools
from .dynamic.models import DynamicToolConfigError
from .events.store import EventStore
from .llm.base import ChatProvider
from .llm.factory import resolve_provider
from .runner import Agent
from .tools.builtin import register_builtin_tools
from .tools.registry import ToolRegistry

console = Console()


def build_tool_registry(
    *,
    cwd: Path,
    tools_config: Path | None = None,
    warn: Callable[[str], None] | None = None,
    events: EventStore | None = None,
) -> tuple[ToolRegistry, Path, int]:
    """Built-in tools plus whatever the tools config declares.

    Returns (registry, config path consulted, number of dynamic tools registered).
    Problems with the config only produce warnings.
    """
    def _warn(msg: str) -> None:
        if events:
            events.dynamic_tools_warning(msg)
        if warn:
            warn(msg)

    tools = ToolRegistry()
    register_builtin_tools(tools)

    config_path = find_tools_config(cwd=cwd, explicit_path=tools_config)
    try:
        dynamic = load_dynamic_tools(config_path, warn=_warn)
    except DynamicToolConfigError as e:
        _warn(f"Failed to load dynamic tools: {e}")
        return tools, config_path, 0

    registered = register_dynamic_tools(tools, dynamic, warn=_warn)
    if events:
        events.dynamic_tools_loaded(config_path, [t.spec.name for t in registered])
    return tools, config_path, len(registered)


def _console_warn(msg: str) -> None:
    console.print(f"[yellow]Warning:[/yellow] {escape(msg)}")


@dataclass
class AppContext:
    cwd: Path
    provider: ChatProvider
    tools: ToolRegistry
    tools_config_path: Path
    dynamic_tool_count: int = 0
    events: EventStore | None = None
    debug: bool = False
    config_path: Optional[Path] = None
    warnings: list[str] = field(default_factory=list)

    def make_agent(self, get_user_message: Callable[[], Optional[str]]) -> Agent:
        return Agent(
            self.provider,
            self.tools,
            get_user_message,
            cwd=str(self.cwd),
            debug=self.debug,
            events=self.events,
        )

    @staticmethod
    def from_env(
        cwd: Path,
        provider: str | None = None,
        model: str | None = None,
        config_path: Optional[Path] = None,
        tools_config: Optional[Path] = None,
        debug: bool = False,
        log_events: bool = True,
    ) -> "AppContext":
        if config_path:
            config_path = config_path.expanduser().resolve()

        # Fails fast on a missing credential.
        provider_client = resolve_provider(provider=provider, model=model, yaml_path=config_path)

        events = EventStore.open() if log_events else None

        warnings: list[str] = []

        def warn(msg: str) -> None:
            warnings.append(msg)
            _console_warn(msg)

        tools, tools_path, n_dynamic = build_tool_registry(
            cwd=cwd, tools_config=tools_config, warn=warn, events=events
        )

        return AppContext(
            cwd=cwd,
            provider=provider_client,
            tools=tools,
            tools_config_path=tools_path,
            dynamic_tool_count=n_dynamic,
            events=events,
            debug=debug,
            config_path=config_path,
            warnings=warnings,
        )
