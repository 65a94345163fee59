from __future__ import annotations

from pathlib import Path
from typing import Callable, Iterator, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from .app_context import AppContext, build_tool_registry
from .llm.base import ModelCallError


app = typer.Typer(add_completion=False, help="pytoolagent: chat with a model that can use local tools.")
console = Console()


def _resolve_cwd(cwd: Path | None) -> Path:
    cwd = Path(str(cwd or Path.cwd())).expanduser().resolve()
    if not cwd.is_dir():
        raise typer.BadParameter(f"--cwd must be an existing directory, got: {cwd}")
    return cwd


def _read_console_line() -> Optional[str]:
    try:
        return console.input("[bold blue]You[/bold blue]: ")
    except (EOFError, KeyboardInterrupt):
        # Ctrl-D / Ctrl-C end the conversation like a closed stream
        console.print()
        return None


def _single_prompt(prompt: str) -> Callable[[], Optional[str]]:
    it: Iterator[str] = iter([prompt])
    return lambda: next(it, None)


def _build_context(
    cwd: Path | None,
    provider: str | None,
    model: str | None,
    config: Path,
    tools_config: Path | None,
    debug: bool,
    events: bool,
) -> AppContext:
    try:
        return AppContext.from_env(
            cwd=_resolve_cwd(cwd),
            provider=provider,
            model=model,
            config_path=config,
            tools_config=tools_config,
            debug=debug,
            log_events=events,
        )
    except (RuntimeError, ValueError, FileNotFoundError) as e:
        console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
        raise typer.Exit(code=1)


def _print_banner(ctx: AppContext) -> None:
    table = Table.grid(padding=(0, 2))
    table.add_row("[bold green]cwd[/bold green]", f"[bright_cyan]{escape(str(ctx.cwd))}[/bright_cyan]")
    table.add_row("[bold green]model[/bold green]", f"[bright_cyan]{escape(ctx.provider.model)}[/bright_cyan]")
    table.add_row("[bold green]tools[/bold green]", f"[bright_cyan]{len(ctx.tools)} ({ctx.dynamic_tool_count} dynamic)[/bright_cyan]")
    table.add_row("[bold green]tools_config[/bold green]", f"[bright_cyan]{escape(str(ctx.tools_config_path))}[/bright_cyan]")
    table.add_row("[bold green]events[/bold green]", f"[bright_cyan]{escape(str(ctx.events.path)) if ctx.events else '(off)'}[/bright_cyan]")
    console.print(Panel(table, title="[bold magenta]pytoolagent[/bold magenta]", border_style="bright_blue"))
    if ctx.debug:
        console.print("Debug mode enabled. Tool responses will be printed to the terminal.")


def _run_agent(ctx: AppContext, get_user_message: Callable[[], Optional[str]]) -> None:
    agent = ctx.make_agent(get_user_message)
    try:
        agent.run()
    except ModelCallError as e:
        console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
        raise typer.Exit(code=1)


_CONFIG_OPT = typer.Option(Path("pytoolagent.yaml"), "--config", help="Provider YAML config path (default: ./pytoolagent.yaml).")
_PROVIDER_OPT = typer.Option(None, "--provider", help="Provider name from the YAML config (default: first entry, or environment).")
_MODEL_OPT = typer.Option(None, "--model", help="Override the model identifier.")
_CWD_OPT = typer.Option(None, "--cwd", help="Working directory for tools. Defaults to current directory.")
_TOOLS_CONFIG_OPT = typer.Option(None, "--tools-config", help="Dynamic tools JSON (default: ./tools_config.json).")
_DEBUG_OPT = typer.Option(False, "--debug", envvar="DEBUG", help="Print tool responses and errors to the terminal.")
_EVENTS_OPT = typer.Option(True, "--events/--no-events", help="Write a jsonl event log to the user data dir.")


@app.command()
def chat(
    provider: str = _PROVIDER_OPT,
    model: str = _MODEL_OPT,
    config: Path = _CONFIG_OPT,
    cwd: Path = _CWD_OPT,
    tools_config: Path = _TOOLS_CONFIG_OPT,
    debug: bool = _DEBUG_OPT,
    events: bool = _EVENTS_OPT,
):
    """Interactive conversation until end of input (Ctrl-D) or Ctrl-C."""
    ctx = _build_context(cwd, provider, model, config, tools_config, debug, events)
    _print_banner(ctx)
    console.print("Chat with the model (use 'ctrl-c' to quit)")
    _run_agent(ctx, _read_console_line)


@app.command()
def run(
    prompt: str = typer.Option(..., "--prompt", "-p", help="User prompt to run once."),
    provider: str = _PROVIDER_OPT,
    model: str = _MODEL_OPT,
    config: Path = _CONFIG_OPT,
    cwd: Path = _CWD_OPT,
    tools_config: Path = _TOOLS_CONFIG_OPT,
    debug: bool = _DEBUG_OPT,
    events: bool = _EVENTS_OPT,
):
    """Send one prompt, let the model finish any tool use, then exit."""
    ctx = _build_context(cwd, provider, model, config, tools_config, debug, events)
    console.print(f"\n[bold blue]You[/bold blue]: {escape(prompt)}\n")
    _run_agent(ctx, _single_prompt(prompt))


@app.command()
def tools(
    cwd: Path = _CWD_OPT,
    tools_config: Path = _TOOLS_CONFIG_OPT,
):
    """List built-in and dynamic tools (no model backend needed)."""
    def warn(msg: str) -> None:
        console.print(f"[yellow]Warning:[/yellow] {escape(msg)}")

    registry, path, n_dynamic = build_tool_registry(cwd=_resolve_cwd(cwd), tools_config=tools_config, warn=warn)

    table = Table(title=f"{len(registry)} tools ({n_dynamic} dynamic from {path})")
    table.add_column("name", style="bold", no_wrap=True)
    table.add_column("origin")
    table.add_column("required")
    table.add_column("description")
    for spec in registry.list_specs():
        required = ", ".join(spec.parameters.get("required") or []) or "-"
        desc = spec.description.strip().splitlines()[0] if spec.description.strip() else ""
        table.add_row(escape(spec.name), spec.origin, escape(required), escape(desc))
    console.print(table)
